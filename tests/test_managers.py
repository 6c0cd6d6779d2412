from conftest import image
from backfills.blog_slug_bf import backfill_blog_slugs, derive_slug
from banner.banner_model import Banner
from blog.blog_model import BlogPost
from gcp.db import CREATED_AT_KEY, UPDATED_AT_KEY
from gcp.storage import StorageManager
from green.green_model import GoGreenEntry
from heading.heading_model import PropertyHeading, HeadingType
from lead.lead_model import Lead, LeadStatus
from property.property_model import Property, NearbyPlace, UnitType


def test_property_round_trip(backend, store):
    property = Property(
        title="Sea View",
        city="Mumbai",
        starting_price=12000000,
        amenities=["Pool", "Gym"],
        nearby_places=[NearbyPlace(name="Station", distance="1 km")],
        unit_types=[UnitType(type="2 BHK", bedrooms=2, price=9000000)],
        parking_available=True,
    )
    created = backend.properties.add_property(property)
    assert created.success

    saved = backend.properties.get_property(created.data).data
    assert saved.id == created.data
    assert saved.title == "Sea View"
    assert saved.amenities == ["Pool", "Gym"]
    assert saved.nearby_places == property.nearby_places
    assert saved.unit_types == property.unit_types
    assert saved.parking_available is True
    assert saved.created_at is not None
    assert saved.updated_at >= saved.created_at


def test_optional_strings_are_stored_blank_and_read_back_unset(backend, store):
    property_id = backend.properties.add_property(Property(title="Plot")).data
    document = store.collections["properties"][property_id]
    assert document['mapLink'] == ""
    assert backend.properties.get_property(property_id).data.map_link is None


def test_property_update_refreshes_updated_at(backend, store):
    property_id = backend.properties.add_property(Property(title="Plot")).data
    before = store.collections["properties"][property_id][UPDATED_AT_KEY]
    assert backend.properties.update_property(property_id, Property(city="Pune")).success

    document = store.collections["properties"][property_id]
    assert document['city'] == "Pune"
    assert document['title'] == "Plot"
    assert document[UPDATED_AT_KEY] > before
    assert document[CREATED_AT_KEY] < document[UPDATED_AT_KEY]


def test_missing_property_fails(backend):
    result = backend.properties.get_property("nope")
    assert not result.success
    assert result.error == "Property not found"


def test_store_errors_become_failed_results(backend, store):
    store.fail_on.add('stream')
    result = backend.properties.list_properties()
    assert not result.success
    assert result.error == "stream failed"


def test_legacy_documents_are_tolerated(backend, store):
    store.seed("properties", {'title': "Legacy", 'price': "", 'images': None, 'someOldField': 1})
    properties = backend.properties.list_properties().data
    assert properties[0].price is None
    assert properties[0].images == []


def test_listing_intent_update(backend, store):
    property_id = backend.properties.add_property(Property(title="Plot")).data
    assert backend.properties.update_listing_intent(property_id, "Rent").success
    assert store.collections["properties"][property_id]['listingIntent'] == "rent"
    assert not backend.properties.update_listing_intent(property_id, "barter").success


def test_property_image_upload_path(backend, storage):
    result = backend.properties.upload_property_image(image("front.jpg"), "p1")
    assert result.success
    [path] = storage.objects
    assert path.startswith("properties/p1/")
    assert path.endswith("_front.jpg")
    assert backend.properties.delete_property_image(result.data).success
    assert storage.objects == {}


def test_upload_without_file_fails(backend):
    assert not backend.properties.upload_property_image(None, "p1").success


def test_leads_newest_first_and_status_changes(backend, store):
    first = backend.leads.add_lead(Lead(name="Asha", email="asha@example.com")).data
    second = backend.leads.add_lead(Lead(name="Ravi", property_label="Sea View")).data

    leads = backend.leads.list_leads().data
    assert [lead.id for lead in leads] == [second, first]
    assert leads[0].property_label == "Sea View"
    assert store.collections["leads"][second]['property'] == "Sea View"

    assert backend.leads.update_lead_status(first, "contacted").success
    assert backend.leads.get_lead(first).data.status == LeadStatus.CONTACTED

    result = backend.leads.update_lead_status(first, "Archived")
    assert not result.success
    assert backend.leads.get_lead(first).data.status == LeadStatus.CONTACTED


def test_unknown_lead_status_reads_as_new(backend, store):
    lead_id = store.seed("leads", {'name': "Old", 'status': "Pending", 'email': ""})
    lead = backend.leads.get_lead(lead_id).data
    assert lead.status == LeadStatus.NEW
    assert lead.email is None


def test_headings_are_ordered_and_move(backend, store):
    second = backend.headings.add_heading(PropertyHeading(name="b", display_name="B", order=2)).data
    first = backend.headings.add_heading(PropertyHeading(name="a", display_name="A", order=1)).data
    assert [heading.id for heading in backend.headings.list_headings().data] == [first, second]

    heading = backend.headings.get_heading(first).data
    assert backend.headings.move_heading(heading, "up").success
    assert store.collections["property-headings"][first]['order'] == 1

    assert backend.headings.move_heading(heading, "down").success
    assert store.collections["property-headings"][first]['order'] == 2
    assert not backend.headings.move_heading(heading, "sideways").success


def test_heading_options_only_kept_for_select():
    text = PropertyHeading(name="a", display_name="A", type=HeadingType.TEXT, options=["x"])
    select = PropertyHeading(name="b", display_name="B", type="select", options=[" x ", "", "y"])
    assert text.options is None
    assert select.options == ["x", "y"]
    assert PropertyHeading.parse_options("Yes, No ,, Maybe") == ["Yes", "No", "Maybe"]


def test_blog_slug_is_derived_and_found(backend):
    post_id = backend.blog.add_post(BlogPost(title="Top 10 Tips: Buying in 2024!")).data
    found = backend.blog.get_post_by_slug("top-10-tips-buying-in-2024")
    assert found.success
    assert found.data.id == post_id
    assert found.data.status_label == "Draft"

    missing = backend.blog.get_post_by_slug("nothing-here")
    assert not missing.success
    assert missing.error == "Blog post not found"


def test_blog_update_by_slug(backend, store):
    post_id = backend.blog.add_post(BlogPost(title="Hello", slug="hello")).data
    assert backend.blog.update_post_by_slug("hello", BlogPost(title="Hello again", slug="hello", is_published=True)).success
    assert store.collections["blogPosts"][post_id]['isPublished'] is True
    assert not backend.blog.update_post_by_slug("missing", BlogPost(title="x")).success


def test_blog_posts_with_same_title_get_distinct_slugs(backend, store):
    first = backend.blog.add_post(BlogPost(title="Market Update")).data
    second = backend.blog.add_post(BlogPost(title="Market Update")).data
    assert store.collections["blogPosts"][first]['slug'] == "market-update"
    assert store.collections["blogPosts"][second]['slug'] == "market-update-2"
    assert backend.blog.get_post_by_slug("market-update").data.id == first
    assert backend.blog.get_post_by_slug("market-update-2").data.id == second


def test_blog_update_keeps_own_slug_and_suffixes_taken_one(backend, store):
    first = backend.blog.add_post(BlogPost(title="Market Update")).data
    second = backend.blog.add_post(BlogPost(title="Rates Outlook")).data

    assert backend.blog.update_post(first, BlogPost(title="Market Update", slug="market-update")).success
    assert store.collections["blogPosts"][first]['slug'] == "market-update"

    assert backend.blog.update_post_by_slug("rates-outlook", BlogPost(title="Rates", slug="market-update")).success
    assert store.collections["blogPosts"][second]['slug'] == "market-update-2"


def test_blog_add_fails_when_slug_lookup_fails(backend, store):
    store.fail_on.add('find')
    result = backend.blog.add_post(BlogPost(title="Market Update"))
    assert not result.success
    assert store.collections.get("blogPosts", {}) == {}


def test_blog_image_goes_to_temp_folder_without_post(backend, storage):
    assert backend.blog.upload_blog_image(image("cover.png")).success
    assert backend.blog.upload_blog_image(image("inline.png"), "b1").success
    folders = sorted(path.split("/")[1] for path in storage.objects)
    assert folders == ["b1", "temp"]


def test_banner_and_green_uploads(backend, storage):
    banner_id = backend.banners.add_banner(Banner(title="Diwali offer")).data
    url = backend.banners.upload_banner_image(image("hero.jpg"), banner_id).data
    assert f"banners/{banner_id}/hero.jpg" in storage.objects
    assert backend.banners.update_banner(banner_id, Banner(title="Diwali offer", image_url=url)).success
    assert backend.banners.get_banner(banner_id).data.image_url == url

    photo = backend.green.upload_green_photo(image("tree.jpg"))
    assert photo.success
    entry_id = backend.green.create_entry(GoGreenEntry(name="Asha", phone="98200", image=photo.data)).data
    assert [entry.id for entry in backend.green.list_entries().data] == [entry_id]


def test_delete_is_reported(backend, store):
    lead_id = backend.leads.add_lead(Lead(name="Asha")).data
    assert backend.leads.delete_lead(lead_id).success
    assert backend.leads.list_leads().data == []

    store.fail_on.add('delete')
    assert not backend.leads.delete_lead(lead_id).success


def test_visitor_counter(backend, store):
    assert backend.metrics.visitor_count().data == 0
    assert backend.metrics.increment_visitors().data == 1
    assert backend.metrics.increment_visitors().data == 2
    assert backend.metrics.visitor_count().data == 2

    store.fail_on.add('increment')
    assert not backend.metrics.increment_visitors().success


def test_storage_object_name():
    url = "https://firebasestorage.googleapis.com/v0/b/bucket/o/blogPosts%2Ftemp%2F1_a.png?alt=media&token=t"
    assert StorageManager.object_name(url) == "blogPosts/temp/1_a.png"
    assert StorageManager.object_name("gs://bucket/banners/b1/x.jpg") == "banners/b1/x.jpg"
    assert StorageManager.object_name("/greenForms/1_x.jpg") == "greenForms/1_x.jpg"


def test_derive_slug_appends_suffix():
    taken = {"hello"}
    assert derive_slug({'title': "Hello"}, taken) == "hello-2"
    assert derive_slug({'title': "Hello"}, taken) == "hello-3"
    assert derive_slug({'title': ""}, taken) == ""


def test_backfill_blog_slugs(store):
    keep = store.seed("blogPosts", {'title': "Hello", 'slug': "hello"})
    missing = store.seed("blogPosts", {'title': "Hello"})
    untitled = store.seed("blogPosts", {'title': ""})

    assert backfill_blog_slugs(store, dry_run=True) == {missing: "hello-2"}
    assert 'slug' not in store.collections["blogPosts"][missing]

    assert backfill_blog_slugs(store) == {missing: "hello-2"}
    assert store.collections["blogPosts"][missing]['slug'] == "hello-2"
    assert store.collections["blogPosts"][keep]['slug'] == "hello"
    assert 'slug' not in store.collections["blogPosts"][untitled]
