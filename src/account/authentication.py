from typing import Optional
from fastapi import Depends, Request

from logger import logger
from config.config import settings
from account.account_model import AdminSession
from account.stytch_manager import AuthenticationError
from gcp.backend import Backend, get_backend

class NotAuthenticated(Exception):
    """Raised by route dependencies, answered with a redirect to the sign in page."""
    pass

def session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.Authentication.SESSION_COOKIE_NAME)

async def optional_session(request: Request, backend: Backend = Depends(get_backend)) -> Optional[AdminSession]:
    token = session_token(request)
    if not token:
        return None
    try:
        return backend.auth.authenticate(session_token=token)
    except AuthenticationError as e:
        logger.info(f"[AUTH] Session rejected: {e}")
        return None

async def require_session(session: Optional[AdminSession] = Depends(optional_session)) -> AdminSession:
    if session is None:
        raise NotAuthenticated()
    return session
