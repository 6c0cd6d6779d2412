from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from account.account_model import AdminSession
from account.authentication import require_session
from dashboard.forms import field_errors, uploaded_file, delete_from_list
from dashboard.templating import redirect, render, success, error
from gcp.backend import Backend, get_backend
from green.green_model import GoGreenEntry

router = APIRouter()

LIST_URL = "/dashboard/go-green"
LIST_TEMPLATE = "green/list.html"


def _render_form(request: Request, values: dict, errors: dict = None, status_code: int = 200):
    return render(request, "green/form.html", {
        'values': values,
        'errors': errors or {},
    }, status_code=status_code)


@router.get("")
async def list_entries(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.green.list_entries()
    notifications = [] if result.success else [error("Error loading entries", result.error)]
    return render(request, LIST_TEMPLATE, {
        'entries': result.data or [],
        'load_error': result.error,
    }, notifications=notifications)


@router.get("/new")
async def new_entry(request: Request, session: AdminSession = Depends(require_session)):
    return _render_form(request, {})


@router.post("/new")
async def create_entry(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    form = await request.form()
    values = {
        'name': (form.get('name') or "").strip(),
        'phone': (form.get('phone') or "").strip(),
    }
    errors = {name: f"{name.title()} is required" for name, value in values.items() if not value}
    photo = await uploaded_file(form.get('photo'))
    if photo is None:
        errors['photo'] = "Photo is required"
    if errors:
        return _render_form(request, values, errors, status_code=400)

    uploaded = backend.green.upload_green_photo(photo)
    if not uploaded.success:
        return _render_form(request, values, {'form': f"Upload failed: {uploaded.error}"}, status_code=400)

    try:
        entry = GoGreenEntry.model_validate({**values, 'image': uploaded.data})
    except ValidationError as e:
        return _render_form(request, values, field_errors(e), status_code=400)

    result = backend.green.create_entry(entry)
    if not result.success:
        return _render_form(request, values, {'form': result.error}, status_code=400)
    return redirect(LIST_URL, success("Entry added"))


@router.get("/{entry_id}/delete")
async def confirm_delete_entry(request: Request, entry_id: str, session: AdminSession = Depends(require_session)):
    return render(request, "confirm_delete.html", {
        'entity_name': "entry",
        'label': entry_id,
        'action_url': f"/dashboard/go-green/{entry_id}/delete",
        'cancel_url': LIST_URL,
    })


@router.post("/{entry_id}/delete")
async def delete_entry(
    request: Request,
    entry_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return delete_from_list(
        request,
        backend.green.list_entries(),
        entry_id,
        backend.green.delete_entry,
        entity_name="Entry",
        list_url=LIST_URL,
        template=LIST_TEMPLATE,
        items_key='entries',
    )
