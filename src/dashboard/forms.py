from typing import Any, Callable, List, Mapping, Optional

from fastapi import Request, UploadFile
from pydantic import ValidationError

from gcp.storage_model import UploadedFile
from utils.common_models import ActionResult
from utils.commands import RemoveItemCommand
from utils.str_utils import camel_to_snake, humanize_field
from dashboard.templating import redirect, render


async def uploaded_file(upload: Any) -> Optional[UploadedFile]:
    """Reads one multipart file input; an input left empty gives None."""
    if not isinstance(upload, UploadFile) or not upload.filename:
        return None
    content = await upload.read()
    if not content:
        return None
    return UploadedFile(
        filename=upload.filename,
        content=content,
        content_type=upload.content_type or 'application/octet-stream'
    )


async def uploaded_files(uploads: List[Any]) -> List[UploadedFile]:
    files = []
    for upload in uploads:
        file = await uploaded_file(upload)
        if file is not None:
            files.append(file)
    return files


def field_errors(e: ValidationError) -> dict[str, str]:
    """First message per field, keyed by the snake_case field name."""
    errors = {}
    for error in e.errors():
        field = camel_to_snake(str(error['loc'][0])) if error['loc'] else 'form'
        message = error['msg'].removeprefix("Value error, ")
        errors.setdefault(field, f"{humanize_field(field)}: {message}" if field != 'form' else message)
    return errors


def checkbox(form: Mapping[str, Any], name: str) -> bool:
    return form.get(name) in ('on', 'true', '1', True)


def delete_from_list(
    request: Request,
    listing: ActionResult,
    item_id: str,
    remove: Callable[[str], ActionResult],
    entity_name: str,
    list_url: str,
    template: str,
    items_key: str,
    context: Optional[dict[str, Any]] = None,
):
    """
    Runs a ``RemoveItemCommand`` over the freshly loaded list. Success
    redirects back to the list; failure re-renders it with the item restored.
    """
    items = listing.data if listing.success and listing.data is not None else []
    command = RemoveItemCommand(items, item_id, remove, entity_name=entity_name)
    result = command.execute()
    if result.success:
        return redirect(list_url, command.notification)
    return render(
        request,
        template,
        {**(context or {}), items_key: items, 'load_error': listing.error},
        notifications=[command.notification],
        status_code=400
    )
