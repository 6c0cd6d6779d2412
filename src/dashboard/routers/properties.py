from typing import Any, Mapping

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from logger import logger
from account.account_model import AdminSession
from account.authentication import require_session
from dashboard.forms import uploaded_file, uploaded_files, delete_from_list
from dashboard.templating import redirect, render, success, error
from gcp.backend import Backend, get_backend
from property.property_filter import PropertyFilter, filter_properties, property_stats
from property.property_form import PropertyFormState, FORM_STATE_FIELD, PREVIOUS_TYPE_FIELD
from property.property_form_model import STRING_SECTIONS, IMAGES_SECTION
from utils.common_models import Notification
from property.property_model import (
    PROPERTY_TYPES, PURPOSES, LISTING_INTENTS, POSSESS_STATUSES, COMMON_AMENITIES,
)

router = APIRouter()

LIST_URL = "/dashboard/properties/dashboard"
LIST_TEMPLATE = "properties/list.html"
SEARCH_PARAM = "q"

FILTER_OPTIONS = {
    'property_types': PROPERTY_TYPES,
    'listing_intents': LISTING_INTENTS,
    'possess_statuses': POSSESS_STATUSES,
    'purposes': PURPOSES,
}


def _list_context(properties: list, params: Mapping[str, Any]) -> tuple[dict, list]:
    notifications = []
    try:
        filters = PropertyFilter.from_query(params)
    except ValidationError as e:
        logger.info(f"[PROPERTIES] Ignoring invalid filters: {e.error_count()} error(s)")
        filters = PropertyFilter()
        notifications.append(error("Invalid filter", "Some filter values were not understood and have been cleared"))

    search_query = params.get(SEARCH_PARAM) or ""
    return {
        'properties': filter_properties(properties, filters, search_query),
        'total_count': len(properties),
        'stats': property_stats(properties),
        'filters': filters,
        'search_query': search_query,
        **FILTER_OPTIONS,
    }, notifications


@router.get("")
async def properties_root():
    return redirect(LIST_URL)


@router.get("/dashboard")
async def list_properties(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.properties.list_properties()
    context, notifications = _list_context(result.data or [], request.query_params)
    if not result.success:
        notifications.append(error("Error loading properties", result.error))
    return render(request, LIST_TEMPLATE, {**context, 'load_error': result.error}, notifications=notifications)


# Multi-step form

def _render_form(request: Request, state: PropertyFormState, status_code: int = 200):
    notifications, state.notifications = state.notifications, []
    return render(request, "properties/form.html", {
        'state': state,
        'form_state': state.to_form_state(),
        'form_state_field': FORM_STATE_FIELD,
        'previous_type_field': PREVIOUS_TYPE_FIELD,
        'string_sections': STRING_SECTIONS,
        'amenity_suggestions': COMMON_AMENITIES,
        'action_url': f"/dashboard/properties/{state.property_id}/edit" if state.property_id else "/dashboard/properties/new",
        **FILTER_OPTIONS,
    }, notifications=notifications, status_code=status_code)


async def _apply_action(request: Request, state: PropertyFormState, form, backend: Backend):
    """
    Applies the button that submitted the form. Returns a response to send
    instead of re-rendering the form, or None.
    """
    action = form.get("action") or ""
    kind, _, argument = action.partition(":")

    if kind == "next":
        state.navigate_tab(argument)
    elif kind == "tab":
        state.select_tab(argument)
    elif kind == "add":
        state.add_item(argument)
    elif kind == "remove":
        section, _, index = argument.partition(":")
        if not index.isdigit():
            logger.warning(f"[PROPERTIES] Bad remove action '{action}'")
        elif section == IMAGES_SECTION:
            state.remove_image(int(index), backend.properties)
        else:
            state.remove_item(section, int(index))
    elif kind == "upload" and argument == "images":
        files = await uploaded_files(form.getlist("image_files"))
        if not files:
            state.notify("No files selected", "Choose one or more images to upload", Notification.Level.ERROR)
        else:
            uploaded = state.upload_images(files, backend.properties)
            if uploaded:
                state.notify("Upload successful", f"{uploaded} image(s) uploaded", Notification.Level.SUCCESS)
    elif kind == "upload" and argument == "pdf":
        state.upload_pdf(await uploaded_file(form.get("pdf_file")), backend.properties)
    elif kind == "upload" and argument == "photo":
        state.upload_sale_member_photo(await uploaded_file(form.get("sale_member_photo_file")), backend.properties)
    elif kind == "submit":
        result = state.submit(backend.properties)
        if result.success:
            verb = "updated" if state.property_id else "added"
            return redirect(LIST_URL, success(f"Property {verb}", f"The property has been successfully {verb}"))
        return _render_form(request, state, status_code=400)
    else:
        logger.warning(f"[PROPERTIES] Unknown form action '{action}'")
    return None


@router.get("/new")
async def new_property(request: Request, session: AdminSession = Depends(require_session)):
    return _render_form(request, PropertyFormState())


@router.post("/new")
async def post_new_property(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    form = await request.form()
    state = PropertyFormState.from_form(form)
    state.property_id = None
    if state.input_rejected:
        return _render_form(request, state, status_code=400)
    response = await _apply_action(request, state, form, backend)
    return response or _render_form(request, state)


@router.get("/{property_id}/edit")
async def edit_property(
    request: Request,
    property_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.properties.get_property(property_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading property", result.error))
    return _render_form(request, PropertyFormState.from_property(result.data))


@router.post("/{property_id}/edit")
async def post_edit_property(
    request: Request,
    property_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    form = await request.form()
    state = PropertyFormState.from_form(form)
    if state.state_reset:
        # lists and uploads come back from the stored property
        result = backend.properties.get_property(property_id)
        if not result.success:
            return redirect(LIST_URL, error("Error loading property", result.error))
        reloaded = PropertyFormState.from_property(result.data)
        reloaded.form_error, reloaded.notifications = state.form_error, state.notifications
        reloaded.input_rejected = True
        state = reloaded
    state.property_id = property_id
    if state.input_rejected:
        return _render_form(request, state, status_code=400)
    response = await _apply_action(request, state, form, backend)
    return response or _render_form(request, state)


# Detail, delete and quick actions

@router.get("/{property_id}")
async def view_property(
    request: Request,
    property_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.properties.get_property(property_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading property", result.error))
    return render(request, "properties/detail.html", {'property': result.data})


@router.get("/{property_id}/delete")
async def confirm_delete_property(
    request: Request,
    property_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.properties.get_property(property_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading property", result.error))
    return render(request, "confirm_delete.html", {
        'entity_name': "property",
        'label': result.data.title or property_id,
        'action_url': f"/dashboard/properties/{property_id}/delete",
        'cancel_url': LIST_URL,
    })


@router.post("/{property_id}/delete")
async def delete_property(
    request: Request,
    property_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    listing = backend.properties.list_properties()
    context, _ = _list_context(listing.data or [], {})
    return delete_from_list(
        request,
        listing,
        property_id,
        backend.properties.delete_property,
        entity_name="Property",
        list_url=LIST_URL,
        template=LIST_TEMPLATE,
        items_key='properties',
        context=context,
    )


@router.post("/{property_id}/listing-intent")
async def change_listing_intent(
    request: Request,
    property_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    form = await request.form()
    result = backend.properties.update_listing_intent(property_id, form.get("listing_intent") or "")
    if not result.success:
        return redirect(LIST_URL, error("Error updating listing intent", result.error))
    return redirect(LIST_URL, success("Listing intent updated"))
