from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from logger import logger
from config.config import settings
from account.account_model import AdminSession
from account.authentication import require_session
from blog.blog_model import BlogPost
from blog.editor import RichTextDocument, TextRange, EditorCommandRequest, EditorCommandResponse
from dashboard.forms import checkbox, field_errors, uploaded_files, delete_from_list
from dashboard.templating import redirect, render, success, error
from gcp.backend import Backend, get_backend

router = APIRouter()

LIST_URL = "/dashboard/blog"
LIST_TEMPLATE = "blog/list.html"
STATUS_FILTERS = ("all", "published", "draft")
TEXT_FIELDS = ('title', 'slug', 'content', 'meta_title', 'meta_description', 'meta_keywords', 'category')


def filter_posts(posts: List[BlogPost], status_filter: str = "all", category: Optional[str] = None, search_query: Optional[str] = None) -> List[BlogPost]:
    query = (search_query or "").strip().lower()
    filtered = []
    for post in posts:
        if status_filter == "published" and not post.is_published:
            continue
        if status_filter == "draft" and post.is_published:
            continue
        if category and (post.category or "").lower() != category.lower():
            continue
        if query and query not in post.title.lower() and query not in (post.meta_description or "").lower():
            continue
        filtered.append(post)
    return filtered


def _list_context(posts: List[BlogPost], params) -> dict:
    status_filter = params.get("status") or "all"
    if status_filter not in STATUS_FILTERS:
        status_filter = "all"
    category = params.get("category") or ""
    search_query = params.get("q") or ""
    return {
        'posts': filter_posts(posts, status_filter, category, search_query),
        'total_count': len(posts),
        'status_filter': status_filter,
        'status_filters': STATUS_FILTERS,
        'category': category,
        'categories': settings.Blog.CATEGORIES,
        'search_query': search_query,
    }


def _values_from_form(form) -> dict:
    values = {name: (form.get(name) or "").strip() for name in TEXT_FIELDS}
    values['is_published'] = checkbox(form, 'is_published')
    values['images'] = [url for url in form.getlist('images') if url]
    return values


def _render_form(request: Request, values: dict, post: Optional[BlogPost] = None, errors: Optional[dict] = None, status_code: int = 200):
    return render(request, "blog/form.html", {
        'values': values,
        'post': post,
        'errors': errors or {},
        'categories': settings.Blog.CATEGORIES,
        'action_url': f"/dashboard/blog/edit/{post.slug}" if post else "/dashboard/blog/new",
    }, status_code=status_code)


async def _attach_images(form, values: dict, backend: Backend, blog_id: Optional[str]) -> Optional[str]:
    """Uploads new images into ``values['images']``, returns the first upload error."""
    for file in await uploaded_files(form.getlist("image_files")):
        result = backend.blog.upload_blog_image(file, blog_id)
        if not result.success:
            return result.error
        values['images'].append(result.data)
    return None


@router.get("")
async def list_posts(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.blog.list_posts()
    notifications = [] if result.success else [error("Error loading blog posts", result.error)]
    return render(request, LIST_TEMPLATE, {
        **_list_context(result.data or [], request.query_params),
        'load_error': result.error,
    }, notifications=notifications)


@router.get("/new")
async def new_post(request: Request, session: AdminSession = Depends(require_session)):
    return _render_form(request, {'images': [], 'is_published': False})


@router.post("/new")
async def create_post(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    form = await request.form()
    values = _values_from_form(form)
    if not values['title']:
        return _render_form(request, values, errors={'title': "Title is required"}, status_code=400)

    upload_error = await _attach_images(form, values, backend, blog_id=None)
    if upload_error:
        return _render_form(request, values, errors={'form': f"Upload failed: {upload_error}"}, status_code=400)

    try:
        post = BlogPost.model_validate(values)
    except ValidationError as e:
        return _render_form(request, values, errors=field_errors(e), status_code=400)

    result = backend.blog.add_post(post)
    if not result.success:
        return _render_form(request, values, errors={'form': result.error}, status_code=400)
    return redirect(LIST_URL, success("Blog post created"))


@router.get("/view/{slug}")
async def view_post(
    request: Request,
    slug: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.blog.get_post_by_slug(slug)
    if not result.success:
        return redirect(LIST_URL, error("Error loading blog post", result.error))
    return render(request, "blog/view.html", {'post': result.data})


@router.get("/edit/{slug}")
async def edit_post(
    request: Request,
    slug: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.blog.get_post_by_slug(slug)
    if not result.success:
        return redirect(LIST_URL, error("Error loading blog post", result.error))
    post = result.data
    values = {name: getattr(post, name) or "" for name in TEXT_FIELDS}
    values['is_published'] = post.is_published
    values['images'] = list(post.images)
    return _render_form(request, values, post)


@router.post("/edit/{slug}")
async def update_post(
    request: Request,
    slug: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    found = backend.blog.get_post_by_slug(slug)
    if not found.success:
        return redirect(LIST_URL, error("Error loading blog post", found.error))

    form = await request.form()
    values = _values_from_form(form)
    if not values['title']:
        return _render_form(request, values, found.data, {'title': "Title is required"}, status_code=400)

    upload_error = await _attach_images(form, values, backend, blog_id=found.data.id)
    if upload_error:
        return _render_form(request, values, found.data, {'form': f"Upload failed: {upload_error}"}, status_code=400)

    try:
        post = BlogPost.model_validate(values)
    except ValidationError as e:
        return _render_form(request, values, found.data, field_errors(e), status_code=400)

    result = backend.blog.update_post_by_slug(slug, post)
    if not result.success:
        return _render_form(request, values, found.data, {'form': result.error}, status_code=400)
    return redirect(LIST_URL, success("Blog post updated"))


@router.post("/{post_id}/images/delete")
async def delete_post_image(
    request: Request,
    post_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    form = await request.form()
    image_url = form.get("image_url") or ""
    found = backend.blog.get_post(post_id)
    if not found.success:
        return redirect(LIST_URL, error("Error loading blog post", found.error))
    post = found.data
    edit_url = f"/dashboard/blog/edit/{post.slug}"
    if image_url not in post.images:
        return redirect(edit_url, error("Image not found"))

    deleted = backend.blog.delete_blog_image(image_url)
    if not deleted.success:
        logger.warning(f"[BLOG] Image could not be deleted from storage: {deleted.error}")
    result = backend.blog.update_post(post_id, {'images': [url for url in post.images if url != image_url]})
    if not result.success:
        return redirect(edit_url, error("Error removing image", result.error))
    return redirect(edit_url, success("Image removed"))


@router.get("/{post_id}/delete")
async def confirm_delete_post(
    request: Request,
    post_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    result = backend.blog.get_post(post_id)
    if not result.success:
        return redirect(LIST_URL, error("Error loading blog post", result.error))
    return render(request, "confirm_delete.html", {
        'entity_name': "blog post",
        'label': result.data.title or post_id,
        'action_url': f"/dashboard/blog/{post_id}/delete",
        'cancel_url': LIST_URL,
    })


@router.post("/{post_id}/delete")
async def delete_post(
    request: Request,
    post_id: str,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    listing = backend.blog.list_posts()
    return delete_from_list(
        request,
        listing,
        post_id,
        backend.blog.delete_post,
        entity_name="Blog post",
        list_url=LIST_URL,
        template=LIST_TEMPLATE,
        items_key='posts',
        context=_list_context(listing.data or [], {}),
    )


@router.post("/editor/format", response_model=EditorCommandResponse)
async def format_content(request: EditorCommandRequest, session: AdminSession = Depends(require_session)):
    try:
        selection = TextRange(start=request.start, end=request.end)
        document = RichTextDocument(request.html)
        selection = document.execute(request.command, selection, request.value)
    except ValueError as e:
        # includes pydantic ValidationError
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(e)})
    return EditorCommandResponse(html=document.html, start=selection.start, end=selection.end)
