import base64
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from logger import logger
from config.config import settings
from dashboard.navigation import NAV_ROUTES
from property.property_filter import format_indian_compact_currency, format_listing_intent
from utils.common_models import Notification

SRC_DIR = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = SRC_DIR / settings.Web.TEMPLATES_DIR
STATIC_DIR = SRC_DIR / settings.Web.STATIC_DIR

FLASH_COOKIE = 'flash'


def format_datetime(value: Optional[datetime], fmt: str = "%d %b %Y") -> str:
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(ZoneInfo(settings.General.TIMEZONE))
    return value.strftime(fmt)


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals['app_name'] = settings.General.APP_NAME
templates.env.globals['nav_routes'] = NAV_ROUTES
templates.env.filters['inr'] = format_indian_compact_currency
templates.env.filters['listing_intent'] = format_listing_intent
templates.env.filters['datetime'] = format_datetime


def _encode_flash(notification: Notification) -> str:
    return base64.urlsafe_b64encode(notification.model_dump_json().encode()).decode()


def _decode_flash(value: str) -> Optional[Notification]:
    try:
        return Notification.model_validate_json(base64.urlsafe_b64decode(value.encode()))
    except (ValueError, ValidationError) as e:
        logger.warning(f"[DASHBOARD] Dropping unreadable flash cookie: {e}")
        return None


def redirect(url: str, notification: Optional[Notification] = None) -> RedirectResponse:
    """303 redirect carrying an optional toast to the next rendered page."""
    response = RedirectResponse(url, status_code=303)
    if notification is not None:
        response.set_cookie(FLASH_COOKIE, _encode_flash(notification), httponly=True, samesite='lax')
    return response


def render(
    request: Request,
    name: str,
    context: Optional[dict[str, Any]] = None,
    notifications: Optional[list[Notification]] = None,
    status_code: int = 200,
):
    """Renders ``name`` with the pending flash toast added to ``notifications``."""
    toasts = list(notifications or [])
    flash = request.cookies.get(FLASH_COOKIE)
    if flash:
        notification = _decode_flash(flash)
        if notification is not None:
            toasts.insert(0, notification)

    response = templates.TemplateResponse(
        request,
        name,
        {
            **(context or {}),
            'notifications': toasts,
            'current_path': request.url.path,
        },
        status_code=status_code
    )
    if flash:
        response.delete_cookie(FLASH_COOKIE)
    return response


def success(title: str, description: Optional[str] = None) -> Notification:
    return Notification(title=title, description=description, level=Notification.Level.SUCCESS)


def error(title: str, description: Optional[str] = None) -> Notification:
    return Notification(title=title, description=description, level=Notification.Level.ERROR)
