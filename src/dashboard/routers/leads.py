from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from account.account_model import AdminSession
from account.authentication import require_session
from dashboard.forms import field_errors, delete_from_list
from dashboard.templating import redirect, render, success, error
from gcp.backend import Backend, get_backend
from lead.lead_model import Lead, LeadStatus

router = APIRouter()

LIST_URL = "/dashboard/leads"
LIST_TEMPLATE = "leads/list.html"
FORM_FIELDS = ('name', 'email', 'phone', 'property', 'message', 'status')


def _lead_from_form(form) -> Lead:
    values = {name: (form.get(name) or "").strip() for name in FORM_FIELDS}
    if not values['name']:
        raise ValueError("Name is required")
    return Lead.model_validate(values)


def _render_form(request: Request, values: dict, lead_id: str = None, errors: dict = None, status_code: int = 200):
    return render(request, "leads/form.html", {
        'values': values,
        'lead_id': lead_id,
        'errors': errors or {},
        'statuses': list(LeadStatus),
        'action_url': f"/dashboard/leads/{lead_id}/edit" if lead_id else "/dashboard/leads/new",
    }, status_code=status_code)


async def _save(request: Request, backend: Backend, lead_id: str = None):
    form = await request.form()
    values = {name: form.get(name) or "" for name in FORM_FIELDS}
    try:
        lead = _lead_from_form(form)
    except ValidationError as e:
        return _render_form(request, values, lead_id, field_errors(e), status_code=400)
    except ValueError as e:
        return _render_form(request, values, lead_id, {'name': str(e)}, status_code=400)

    result = backend.leads.update_lead(lead_id, lead) if lead_id else backend.leads.add_lead(lead)
    if not result.success:
        return _render_form(request, values, lead_id, {'form': result.error}, status_code=400)
    return redirect(LIST_URL, success("Lead updated" if lead_id else "Lead added"))


@router.get("")
async def list_leads(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.leads.list_leads()
    notifications = [] if result.success else [error("Error loading leads", result.error)]
    return render(request, LIST_TEMPLATE, {
        'leads': result.data or [],
        'statuses': list(LeadStatus),
        'load_error': result.error,
    }, notifications=notifications)


@router.get("/new")
async def new_lead(request: Request, session: AdminSession = Depends(require_session)):
    return _render_form(request, {'status': LeadStatus.NEW.value})


@router.post("/new")
async def create_lead(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return await _save(request, backend)


@router.get("/{lead_id}/edit")
async def edit_lead(
    request: Request,
    lead_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.leads.get_lead(lead_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading lead", result.error))
    lead = result.data
    values = {
        'name': lead.name,
        'email': lead.email or "",
        'phone': lead.phone or "",
        'property': lead.property_label or "",
        'message': lead.message or "",
        'status': lead.status.value,
    }
    return _render_form(request, values, lead_id)


@router.post("/{lead_id}/edit")
async def update_lead(
    request: Request,
    lead_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return await _save(request, backend, lead_id)


@router.post("/{lead_id}/status")
async def change_status(
    request: Request,
    lead_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    form = await request.form()
    result = backend.leads.update_lead_status(lead_id, form.get("status") or "")
    if not result.success:
        return redirect(LIST_URL, error("Error updating lead status", result.error))
    return redirect(LIST_URL, success("Lead status updated"))


@router.get("/{lead_id}/delete")
async def confirm_delete_lead(
    request: Request,
    lead_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.leads.get_lead(lead_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading lead", result.error))
    return render(request, "confirm_delete.html", {
        'entity_name': "lead",
        'label': result.data.name or lead_id,
        'action_url': f"/dashboard/leads/{lead_id}/delete",
        'cancel_url': LIST_URL,
    })


@router.post("/{lead_id}/delete")
async def delete_lead(
    request: Request,
    lead_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return delete_from_list(
        request,
        backend.leads.list_leads(),
        lead_id,
        backend.leads.delete_lead,
        entity_name="Lead",
        list_url=LIST_URL,
        template=LIST_TEMPLATE,
        items_key='leads',
        context={'statuses': list(LeadStatus)},
    )
