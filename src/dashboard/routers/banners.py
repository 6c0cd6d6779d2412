from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from logger import logger
from account.account_model import AdminSession
from account.authentication import require_session
from banner.banner_model import Banner, BannerStatus
from dashboard.forms import field_errors, uploaded_file, delete_from_list
from dashboard.templating import redirect, render, success, error
from gcp.backend import Backend, get_backend

router = APIRouter()

LIST_URL = "/dashboard/banners"
LIST_TEMPLATE = "banners/list.html"
FORM_FIELDS = ('title', 'description', 'link', 'position', 'status', 'start_date', 'end_date', 'image_url')


def _render_form(request: Request, values: dict, banner_id: Optional[str] = None, errors: Optional[dict] = None, status_code: int = 200):
    return render(request, "banners/form.html", {
        'values': values,
        'banner_id': banner_id,
        'errors': errors or {},
        'statuses': list(BannerStatus),
        'action_url': f"/dashboard/banners/{banner_id}/edit" if banner_id else "/dashboard/banners/new",
    }, status_code=status_code)


async def _save(request: Request, backend: Backend, banner_id: Optional[str] = None):
    form = await request.form()
    values = {name: (form.get(name) or "").strip() for name in FORM_FIELDS}
    if not values['title']:
        return _render_form(request, values, banner_id, {'title': "Title is required"}, status_code=400)
    try:
        banner = Banner.model_validate(values)
    except ValidationError as e:
        return _render_form(request, values, banner_id, field_errors(e), status_code=400)

    image = await uploaded_file(form.get("image_file"))
    if banner_id is None:
        created = backend.banners.add_banner(banner)
        if not created.success:
            return _render_form(request, values, errors={'form': created.error}, status_code=400)
        if image is None:
            return redirect(LIST_URL, success("Banner saved"))
        # the image path needs the new banner's id
        banner_id = created.data

    if image is not None:
        uploaded = backend.banners.upload_banner_image(image, banner_id)
        if not uploaded.success:
            # the banner itself is saved, only the image is missing
            return redirect(f"/dashboard/banners/{banner_id}/edit", error("Upload failed", uploaded.error))
        banner = banner.model_copy(update={'image_url': uploaded.data})

    result = backend.banners.update_banner(banner_id, banner)
    if not result.success:
        return _render_form(request, values, banner_id, {'form': result.error}, status_code=400)
    return redirect(LIST_URL, success("Banner saved"))


@router.get("")
async def list_banners(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.banners.list_banners()
    notifications = [] if result.success else [error("Error loading banners", result.error)]
    return render(request, LIST_TEMPLATE, {
        'banners': result.data or [],
        'load_error': result.error,
    }, notifications=notifications)


@router.get("/new")
async def new_banner(request: Request, session: AdminSession = Depends(require_session)):
    return _render_form(request, {'status': BannerStatus.ACTIVE.value})


@router.post("/new")
async def create_banner(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return await _save(request, backend)


@router.get("/{banner_id}/edit")
async def edit_banner(
    request: Request,
    banner_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.banners.get_banner(banner_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading banner", result.error))
    banner = result.data
    values = {
        name: "" if value is None else str(value)
        for name, value in banner.model_dump(include=set(FORM_FIELDS)).items()
    }
    values['status'] = banner.status.value
    return _render_form(request, values, banner_id)


@router.post("/{banner_id}/edit")
async def update_banner(
    request: Request,
    banner_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return await _save(request, backend, banner_id)


@router.post("/{banner_id}/image/delete")
async def delete_banner_image(
    request: Request,
    banner_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    edit_url = f"/dashboard/banners/{banner_id}/edit"
    found = backend.banners.get_banner(banner_id)
    if not found.success:
        return redirect(LIST_URL, error("Error loading banner", found.error))
    if not found.data.image_url:
        return redirect(edit_url)

    deleted = backend.banners.delete_banner_image(found.data.image_url)
    if not deleted.success:
        logger.warning(f"[BANNERS] Image of banner '{banner_id}' could not be deleted from storage: {deleted.error}")
    result = backend.banners.update(banner_id, {'imageUrl': ""})
    if not result.success:
        return redirect(edit_url, error("Error removing image", result.error))
    return redirect(edit_url, success("Image removed"))


@router.get("/{banner_id}/delete")
async def confirm_delete_banner(
    request: Request,
    banner_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.banners.get_banner(banner_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading banner", result.error))
    return render(request, "confirm_delete.html", {
        'entity_name': "banner",
        'label': result.data.title or banner_id,
        'action_url': f"/dashboard/banners/{banner_id}/delete",
        'cancel_url': LIST_URL,
    })


@router.post("/{banner_id}/delete")
async def delete_banner(
    request: Request,
    banner_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    return delete_from_list(
        request,
        backend.banners.list_banners(),
        banner_id,
        backend.banners.delete_banner,
        entity_name="Banner",
        list_url=LIST_URL,
        template=LIST_TEMPLATE,
        items_key='banners',
    )
