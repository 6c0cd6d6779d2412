import json

import pytest

from conftest import image
from property.property_form import PropertyFormState, FORM_STATE_FIELD, FORM_RESET_MESSAGE, PREVIOUS_TYPE_FIELD
from property.property_manager import PropertyManager
from property.property_model import Property, NearbyPlace
from utils.common_models import Notification


@pytest.fixture
def manager(store, storage):
    return PropertyManager(store, storage)


def _complete(state: PropertyFormState) -> PropertyFormState:
    state.values.update({
        'title': "Sea View Residency",
        'heading': "Homes by the bay",
        'description': "Two and three bedroom homes facing the Arabian Sea.",
        'project_name': "Sea View",
        'project_id': "SV-01",
        'starting_price': "12000000",
        'address': "12 Marine Drive",
        'city': "Mumbai",
        'state': "Maharashtra",
        'country': "India",
    })
    return state


def _titles(notifications):
    return [notification.title for notification in notifications]


def test_next_tab_is_blocked_while_current_tab_is_invalid():
    state = PropertyFormState()
    assert state.navigate_tab("details") is False
    assert state.active_tab == "basic"
    assert "title" in state.errors
    assert "description" in state.errors
    assert _titles(state.notifications) == ["Validation Error"]
    assert state.notifications[0].level == Notification.Level.ERROR


def test_next_tab_opens_once_current_tab_is_valid():
    state = _complete(PropertyFormState())
    assert state.navigate_tab("details") is True
    assert state.active_tab == "details"
    assert state.errors == {}


def test_backward_and_direct_navigation_are_not_validated():
    state = PropertyFormState(active_tab="location")
    assert state.navigate_tab("basic") is True
    assert state.active_tab == "basic"
    assert state.select_tab("media") is True
    assert state.active_tab == "media"
    assert state.notifications == []


def test_building_tab_only_for_new_projects():
    state = PropertyFormState()
    assert "building" in [tab.id for tab in state.visible_tabs]
    state.values['purpose'] = "resale"
    assert "building" not in [tab.id for tab in state.visible_tabs]
    assert state.select_tab("building") is False


def test_changing_property_type_resets_subtype():
    state = PropertyFormState()
    state.set_property_type("commercial")
    assert state.values['property_subtype'] == "office"
    assert ("office", "Office") in state.subtype_options


def test_add_and_remove_string_items():
    state = PropertyFormState(staging={'new_amenity': "  Pool  "})
    assert state.add_item("amenities") is True
    assert state.amenities == ["Pool"]
    assert state.staging['new_amenity'] == ""

    assert state.add_item("amenities") is False
    assert state.amenities == ["Pool"]


def test_remove_item_by_index():
    state = PropertyFormState(highlights=["a", "b"])
    assert state.remove_item("highlights", 0) is True
    assert state.highlights == ["b"]
    assert state.remove_item("highlights", 5) is False
    with pytest.raises(ValueError):
        state.remove_item("unknown", 0)


def test_nearby_place_needs_name_and_distance():
    state = PropertyFormState(staging={'nearby_name': "Station", 'nearby_distance': ""})
    assert state.add_item("nearby_places") is False
    state.staging['nearby_distance'] = "2 km"
    assert state.add_item("nearby_places") is True
    assert state.nearby_places == [NearbyPlace(name="Station", distance="2 km")]


def test_unit_type_requires_a_type():
    state = PropertyFormState()
    state.unit_type_draft.bedrooms = 2
    assert state.add_item("unit_types") is False
    assert state.unit_types == []
    assert _titles(state.notifications) == ["Unit Type Required"]

    state.unit_type_draft.type = "2 BHK"
    assert state.add_item("unit_types") is True
    assert state.unit_types[0].type == "2 BHK"
    assert state.unit_types[0].bedrooms == 2
    assert state.unit_type_draft.is_blank()


def test_failed_upload_leaves_images_unchanged(manager, storage):
    state = PropertyFormState(images=["https://storage.test/existing.jpg"])
    storage.fail = True
    assert state.upload_images([image()], manager) == 0
    assert state.images == ["https://storage.test/existing.jpg"]
    assert _titles(state.notifications) == ["Upload failed"]


def test_upload_uses_temporary_key_before_the_property_exists(manager, storage):
    state = PropertyFormState(upload_key="temp_42")
    assert state.upload_images([image("a.jpg"), image("b.jpg")], manager) == 2
    assert len(state.images) == 2
    assert all(path.startswith("properties/temp_42/") for path in storage.objects)


def test_upload_pdf_and_sale_member_photo(manager):
    state = PropertyFormState(property_id="p1")
    assert state.upload_pdf(image("brochure.pdf"), manager) is True
    assert state.values['details_pdf'].startswith("https://storage.test/test-bucket/properties/p1/")
    assert state.upload_sale_member_photo(image("agent.jpg"), manager) is True
    assert state.values['assigned_sale_member_photo'].endswith("_agent.jpg")


def test_submit_creates_property(manager, store):
    state = _complete(PropertyFormState(amenities=["Gym"], images=["https://img/1.jpg"]))
    result = state.submit(manager)
    assert result.success
    saved = manager.get_property(result.data).data
    assert saved.title == "Sea View Residency"
    assert saved.starting_price == 12000000
    assert saved.amenities == ["Gym"]
    assert saved.images == ["https://img/1.jpg"]
    assert saved.status == saved.possess_status == "sale"


def test_submit_with_errors_jumps_to_first_invalid_tab(manager, store):
    state = _complete(PropertyFormState(active_tab="media"))
    state.values['city'] = ""
    result = state.submit(manager)
    assert not result.success
    assert state.active_tab == "location"
    assert "city" in state.errors
    assert store.collections.get("properties", {}) == {}


def test_submit_ignores_fields_of_hidden_tabs(manager):
    state = _complete(PropertyFormState())
    state.values['purpose'] = "resale"
    state.values['floors'] = "-3"
    assert state.submit(manager).success


def test_backend_failure_is_reported_on_the_form(manager, store):
    store.fail_on.add('add')
    state = _complete(PropertyFormState())
    result = state.submit(manager)
    assert not result.success
    assert state.form_error == "add failed"
    assert state.scroll_to_error is True
    assert "Error adding property" in _titles(state.notifications)


def test_edit_prefills_and_updates(manager, store):
    property_id = store.seed("properties", {'title': "Old", 'city': "Pune", 'amenities': ["Lift"], 'purpose': "resale"})
    state = PropertyFormState.from_property(manager.get_property(property_id).data)
    assert state.property_id == property_id
    assert state.values['city'] == "Pune"
    assert state.amenities == ["Lift"]
    assert "building" not in [tab.id for tab in state.visible_tabs]

    _complete(state)
    assert state.submit(manager).success
    assert store.collections["properties"][property_id]['title'] == "Sea View Residency"


def test_form_state_round_trips_through_the_hidden_field():
    state = PropertyFormState(active_tab="features", amenities=["Pool"], nearby_places=[NearbyPlace(name="Mall", distance="1 km")])
    form = {
        FORM_STATE_FIELD: state.to_form_state(),
        PREVIOUS_TYPE_FIELD: "residential",
        'title': "Typed title",
        'property_type': "residential",
        'new_amenity': "Gym",
    }
    restored = PropertyFormState.from_form(form)
    assert restored.active_tab == "features"
    assert restored.amenities == ["Pool"]
    assert restored.nearby_places[0].name == "Mall"
    assert restored.values['title'] == "Typed title"
    assert restored.staging['new_amenity'] == "Gym"
    assert 'errors' not in json.loads(state.to_form_state())


def test_from_form_resets_subtype_when_type_changes():
    form = {PREVIOUS_TYPE_FIELD: "residential", 'property_type': "land", 'property_subtype': "2-bhk"}
    state = PropertyFormState.from_form(form)
    assert state.values['property_subtype'] == "residential-land-plot"


def test_to_property_flattens_sections():
    state = _complete(PropertyFormState(videos=["https://v/1"], payment_plans=["10:90"]))
    property = state.to_property()
    assert isinstance(property, Property)
    assert property.videos == ["https://v/1"]
    assert property.payment_plans == ["10:90"]


def test_from_form_reports_non_numeric_unit_values():
    state = PropertyFormState.from_form({'unit_type': "2 BHK", 'unit_bedrooms': "two", 'unit_price': "9000000"})
    assert state.input_rejected is True
    assert set(state.errors) == {"unit_bedrooms"}
    assert state.unit_type_draft.type == "2 BHK"
    assert state.unit_type_draft.bedrooms is None
    assert state.unit_type_draft.price == 9000000
    assert state.active_tab == "features"
    assert _titles(state.notifications) == ["Invalid unit type"]


def test_from_form_starts_over_when_hidden_state_is_unreadable():
    state = PropertyFormState.from_form({FORM_STATE_FIELD: "{not json", 'title': "Typed title"})
    assert state.input_rejected is True
    assert state.state_reset is True
    assert state.images == []
    assert state.values['title'] == "Typed title"
    assert state.form_error == FORM_RESET_MESSAGE
    assert _titles(state.notifications) == ["Form reset"]


def test_from_form_accepts_clean_input():
    state = PropertyFormState.from_form({'unit_type': "Villa", 'unit_bedrooms': "4", 'unit_size': ""})
    assert state.input_rejected is False
    assert state.errors == {}
    assert state.unit_type_draft.bedrooms == 4


def test_remove_image_deletes_the_stored_file(manager, storage):
    state = PropertyFormState(upload_key="temp_42")
    state.upload_images([image("a.jpg"), image("b.jpg")], manager)
    first, second = state.images

    assert state.remove_image(0, manager) is True
    assert state.images == [second]
    assert [path for path in storage.objects if path.endswith("_a.jpg")] == []
    assert len(storage.objects) == 1
    assert state.remove_image(3, manager) is False


def test_remove_image_while_editing_updates_the_property(manager, store, storage):
    property_id = store.seed("properties", {'title': "Sea View"})
    url = manager.upload_property_image(image("front.jpg"), property_id).data
    store.update("properties", property_id, {'images': [url]})
    state = PropertyFormState.from_property(manager.get_property(property_id).data)

    assert state.remove_image(0, manager) is True
    assert state.images == []
    assert store.collections["properties"][property_id]['images'] == []
    assert storage.objects == {}


def test_remove_image_keeps_url_when_property_update_fails(manager, store):
    property_id = store.seed("properties", {'title': "Sea View", 'images': ["https://storage.test/bucket/properties/x.jpg"]})
    state = PropertyFormState.from_property(manager.get_property(property_id).data)
    store.fail_on.add('update')

    assert state.remove_image(0, manager) is False
    assert state.images == ["https://storage.test/bucket/properties/x.jpg"]
    assert _titles(state.notifications) == ["Error removing image"]
