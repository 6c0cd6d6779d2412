from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from account.account_model import AdminSession
from account.authentication import require_session
from dashboard.forms import checkbox, field_errors, delete_from_list
from dashboard.templating import redirect, render, success, error
from gcp.backend import Backend, get_backend
from heading.heading_model import PropertyHeading, HeadingType

router = APIRouter()

LIST_URL = "/dashboard/headings"
LIST_TEMPLATE = "headings/list.html"


def _values_from_form(form) -> dict:
    return {
        'name': (form.get('name') or "").strip(),
        'display_name': (form.get('display_name') or "").strip(),
        'type': form.get('type') or HeadingType.TEXT.value,
        'order': (form.get('order') or "").strip(),
        'required': checkbox(form, 'required'),
        'visible': checkbox(form, 'visible'),
        'options': form.get('options') or "",
    }


def _render_form(request: Request, values: dict, heading_id: Optional[str] = None, errors: Optional[dict] = None, status_code: int = 200):
    return render(request, "headings/form.html", {
        'values': values,
        'heading_id': heading_id,
        'errors': errors or {},
        'types': list(HeadingType),
        'action_url': f"/dashboard/headings/{heading_id}/edit" if heading_id else "/dashboard/headings/new",
    }, status_code=status_code)


async def _save(request: Request, backend: Backend, heading_id: Optional[str] = None):
    form = await request.form()
    values = _values_from_form(form)
    try:
        heading = PropertyHeading.model_validate({
            **values,
            'order': values['order'] or 1,
            'options': PropertyHeading.parse_options(values['options']),
        })
    except ValidationError as e:
        return _render_form(request, values, heading_id, field_errors(e), status_code=400)

    result = backend.headings.update_heading(heading_id, heading) if heading_id else backend.headings.add_heading(heading)
    if not result.success:
        return _render_form(request, values, heading_id, {'form': result.error}, status_code=400)
    return redirect(LIST_URL, success("Heading updated" if heading_id else "Heading added"))


@router.get("")
async def list_headings(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.headings.list_headings()
    notifications = [] if result.success else [error("Error loading headings", result.error)]
    return render(request, LIST_TEMPLATE, {
        'headings': result.data or [],
        'load_error': result.error,
    }, notifications=notifications)


@router.get("/new")
async def new_heading(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    existing = backend.headings.list_headings()
    next_order = max((heading.order for heading in existing.data or []), default=0) + 1
    return _render_form(request, {'type': HeadingType.TEXT.value, 'order': next_order, 'visible': True})


@router.post("/new")
async def create_heading(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return await _save(request, backend)


@router.get("/{heading_id}/edit")
async def edit_heading(
    request: Request,
    heading_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.headings.get_heading(heading_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading heading", result.error))
    heading = result.data
    return _render_form(request, {
        'name': heading.name,
        'display_name': heading.display_name,
        'type': heading.type.value,
        'order': heading.order,
        'required': heading.required,
        'visible': heading.visible,
        'options': ", ".join(heading.options or []),
    }, heading_id)


@router.post("/{heading_id}/edit")
async def update_heading(
    request: Request,
    heading_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return await _save(request, backend, heading_id)


@router.post("/{heading_id}/move")
async def move_heading(
    request: Request,
    heading_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    form = await request.form()
    found = backend.headings.get_heading(heading_id)
    if not found.success:
        return redirect(LIST_URL, error("Error loading heading", found.error))
    result = backend.headings.move_heading(found.data, form.get("direction") or "")
    if not result.success:
        return redirect(LIST_URL, error("Error reordering heading", result.error))
    return redirect(LIST_URL)


@router.get("/{heading_id}/delete")
async def confirm_delete_heading(
    request: Request,
    heading_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.headings.get_heading(heading_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading heading", result.error))
    return render(request, "confirm_delete.html", {
        'entity_name': "heading",
        'label': result.data.display_name,
        'action_url': f"/dashboard/headings/{heading_id}/delete",
        'cancel_url': LIST_URL,
    })


@router.post("/{heading_id}/delete")
async def delete_heading(
    request: Request,
    heading_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return delete_from_list(
        request,
        backend.headings.list_headings(),
        heading_id,
        backend.headings.delete_heading,
        entity_name="Heading",
        list_url=LIST_URL,
        template=LIST_TEMPLATE,
        items_key='headings',
    )
