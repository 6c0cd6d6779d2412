from config.config import settings
from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, SESSION_TOKEN, image
from dashboard.templating import FLASH_COOKIE
from gcp.backend import get_backend
from property.property_form import PropertyFormState, FORM_RESET_MESSAGE
from property.property_form_model import UnitTypeDraft

COOKIE = settings.Authentication.SESSION_COOKIE_NAME


def test_dashboard_requires_a_session(client):
    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"


def test_stale_session_is_sent_back_to_sign_in(client):
    client.cookies.set(COOKIE, "expired")
    response = client.get("/dashboard/leads", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"


def test_sign_in_sets_session_cookie(client):
    response = client.post("/", data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    assert response.cookies.get(COOKIE) == SESSION_TOKEN


def test_wrong_password_is_rejected(client):
    response = client.post("/", data={"email": ADMIN_EMAIL, "password": "nope"})
    assert response.status_code == 401
    assert "Invalid email or password" in response.text


def test_malformed_email_is_rejected(client):
    response = client.post("/", data={"email": "not-an-email", "password": "x"})
    assert response.status_code == 401
    assert "Please enter a valid email and password" in response.text


def test_signed_in_admin_skips_login_page(admin_client):
    response = admin_client.get("/", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


def test_sign_out_revokes_session(admin_client, backend):
    response = admin_client.post("/logout", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert backend.auth.revoked == [SESSION_TOKEN]


def test_home_shows_counts(admin_client, store):
    store.seed("properties", {'title': "Sea View", 'price': 12000000})
    store.seed("leads", {'name': "Asha"})
    response = admin_client.get("/dashboard")
    assert response.status_code == 200
    assert "₹1.2 Cr" in response.text
    assert "Asha" in response.text


def test_properties_list_filters_and_searches(admin_client, store):
    store.seed("properties", {'title': "Sea View", 'price': 12000000, 'city': "Mumbai"})
    store.seed("properties", {'title': "Hilltop", 'price': 5000000, 'city': "Pune"})

    response = admin_client.get("/dashboard/properties/dashboard", params={"min_price": "6000000", "max_price": "20000000"})
    assert response.status_code == 200
    assert "Sea View" in response.text
    assert "Hilltop" not in response.text

    response = admin_client.get("/dashboard/properties/dashboard", params={"q": "pune"})
    assert "Hilltop" in response.text
    assert "Sea View" not in response.text


def test_properties_list_reports_load_errors(admin_client, store):
    store.fail_on.add('stream')
    response = admin_client.get("/dashboard/properties/dashboard")
    assert response.status_code == 200
    assert "stream failed" in response.text


def test_properties_root_redirects_to_list(admin_client):
    response = admin_client.get("/dashboard/properties", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard/properties/dashboard"


def test_new_property_form_blocks_next_until_basic_info_is_valid(admin_client):
    response = admin_client.get("/dashboard/properties/new")
    assert response.status_code == 200
    assert "Basic Info" in response.text

    response = admin_client.post("/dashboard/properties/new", data={"action": "next:details", "title": ""})
    assert response.status_code == 200
    assert "Validation Error" in response.text
    assert "Title must be at least 2 characters" in response.text


def test_new_property_submit_saves_and_redirects(admin_client, store):
    data = {
        "action": "submit",
        "title": "Sea View Residency",
        "heading": "Homes by the bay",
        "description": "Two and three bedroom homes facing the Arabian Sea.",
        "project_name": "Sea View",
        "project_id": "SV-01",
        "address": "12 Marine Drive",
        "city": "Mumbai",
        "state": "Maharashtra",
        "country": "India",
        "purpose": "resale",
    }
    response = admin_client.post("/dashboard/properties/new", data=data, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard/properties/dashboard"
    assert FLASH_COOKIE in response.cookies
    [saved] = store.collections["properties"].values()
    assert saved['title'] == "Sea View Residency"

    response = admin_client.get("/dashboard/properties/dashboard")
    assert "Property added" in response.text


def test_property_detail_and_edit_pages(admin_client, store):
    property_id = store.seed("properties", {'title': "Sea View", 'city': "Mumbai"})
    assert "Sea View" in admin_client.get(f"/dashboard/properties/{property_id}").text
    assert "Sea View" in admin_client.get(f"/dashboard/properties/{property_id}/edit").text

    response = admin_client.get("/dashboard/properties/missing/edit", follow_redirects=False)
    assert response.status_code == 303


def test_listing_intent_quick_change(admin_client, store):
    property_id = store.seed("properties", {'title': "Sea View"})
    response = admin_client.post(f"/dashboard/properties/{property_id}/listing-intent", data={"listing_intent": "lease"}, follow_redirects=False)
    assert response.status_code == 303
    assert store.collections["properties"][property_id]['listingIntent'] == "lease"


def test_lead_status_change(admin_client, store):
    lead_id = store.seed("leads", {'name': "Asha", 'status': "New"})
    response = admin_client.post(f"/dashboard/leads/{lead_id}/status", data={"status": "Qualified"}, follow_redirects=False)
    assert response.status_code == 303
    assert store.collections["leads"][lead_id]['status'] == "Qualified"


def test_lead_requires_name(admin_client, store):
    response = admin_client.post("/dashboard/leads/new", data={"name": "", "email": "a@example.com"})
    assert response.status_code == 400
    assert "Name is required" in response.text
    assert store.collections.get("leads", {}) == {}


def test_delete_confirmation_then_delete(admin_client, store):
    lead_id = store.seed("leads", {'name': "Asha"})
    confirm = admin_client.get(f"/dashboard/leads/{lead_id}/delete")
    assert confirm.status_code == 200
    assert "Asha" in confirm.text

    response = admin_client.post(f"/dashboard/leads/{lead_id}/delete", follow_redirects=False)
    assert response.status_code == 303
    assert lead_id not in store.collections["leads"]


def test_failed_delete_keeps_the_row(admin_client, store):
    lead_id = store.seed("leads", {'name': "Asha"})
    store.fail_on.add('delete')
    response = admin_client.post(f"/dashboard/leads/{lead_id}/delete")
    assert response.status_code == 400
    assert "Error deleting lead" in response.text
    assert "Asha" in response.text
    assert lead_id in store.collections["leads"]


def test_heading_move(admin_client, store):
    heading_id = store.seed("property-headings", {'name': "floors", 'displayName': "Floors", 'order': 2})
    response = admin_client.post(f"/dashboard/headings/{heading_id}/move", data={"direction": "up"}, follow_redirects=False)
    assert response.status_code == 303
    assert store.collections["property-headings"][heading_id]['order'] == 1


def test_blog_list_and_view(admin_client, store):
    store.seed("blogPosts", {'title': "Hello", 'slug': "hello", 'content': "<p>Body text</p>", 'isPublished': True})
    store.seed("blogPosts", {'title': "Draft post", 'slug': "draft-post"})

    response = admin_client.get("/dashboard/blog", params={"status": "published"})
    assert "Hello" in response.text
    assert "Draft post" not in response.text

    response = admin_client.get("/dashboard/blog/view/hello")
    assert response.status_code == 200
    assert "Body text" in response.text


def test_editor_format_endpoint(admin_client):
    response = admin_client.post("/dashboard/blog/editor/format", json={"html": "Hello world", "command": "bold", "start": 0, "end": 5})
    assert response.status_code == 200
    assert response.json() == {"html": "<strong>Hello</strong> world", "start": 0, "end": 5}

    response = admin_client.post("/dashboard/blog/editor/format", json={"html": "Hello", "command": "explode"})
    assert response.status_code == 400


def test_visitor_counter_api(client):
    assert client.get("/api/increment-visitor").json() == {"count": 1}
    assert client.get("/api/increment-visitor").json() == {"count": 2}


def test_visitor_counter_api_failure(client, store):
    store.fail_on.add('increment')
    response = client.get("/api/increment-visitor")
    assert response.status_code == 503


def test_settings_page(admin_client):
    response = admin_client.get("/dashboard/settings")
    assert response.status_code == 200


def test_non_numeric_unit_value_rerenders_the_form(admin_client, store):
    data = {"action": "add:unit_types", "unit_type": "2 BHK", "unit_bedrooms": "two"}
    response = admin_client.post("/dashboard/properties/new", data=data)
    assert response.status_code == 400
    assert response.headers["content-type"].startswith("text/html")
    assert "Invalid unit type" in response.text
    assert "valid number" in response.text
    assert store.collections.get("properties", {}) == {}


def test_unreadable_form_state_starts_a_fresh_form(admin_client):
    response = admin_client.post("/dashboard/properties/new", data={"form_state": "{not json", "action": "tab:basic"})
    assert response.status_code == 400
    assert response.headers["content-type"].startswith("text/html")
    assert FORM_RESET_MESSAGE in response.text
    assert "Basic Info" in response.text


def test_unreadable_form_state_on_edit_reloads_the_property(admin_client, store):
    url = "https://storage.test/test-bucket/properties/p1/front.jpg"
    property_id = store.seed("properties", {'title': "Sea View", 'images': [url]})
    response = admin_client.post(f"/dashboard/properties/{property_id}/edit", data={"form_state": "{not json", "action": "submit"})
    assert response.status_code == 400
    assert url in response.text
    assert store.collections["properties"][property_id]['images'] == [url]


def test_removing_a_property_image_deletes_the_file(admin_client, backend, store, storage):
    property_id = store.seed("properties", {'title': "Sea View"})
    url = backend.properties.upload_property_image(image("front.jpg"), property_id).data
    store.update("properties", property_id, {'images': [url]})
    state = PropertyFormState.from_property(backend.properties.get_property(property_id).data)
    response = admin_client.post(
        f"/dashboard/properties/{property_id}/edit",
        data={"form_state": state.to_form_state(), "action": "remove:images:0"},
    )
    assert response.status_code == 200
    assert "Image removed" in response.text
    assert storage.objects == {}
    assert store.collections["properties"][property_id]['images'] == []


def test_uncaught_validation_error_renders_error_page(app, admin_client):
    def broken_backend():
        return UnitTypeDraft.model_validate({'bedrooms': "two"})

    app.dependency_overrides[get_backend] = broken_backend
    response = admin_client.get("/dashboard/leads")
    assert response.status_code == 400
    assert response.headers["content-type"].startswith("text/html")
    assert "Something went wrong" in response.text

    response = admin_client.get("/api/increment-visitor")
    assert response.status_code == 422
    assert "detail" in response.json()
