from typing import Optional

from fastapi import APIRouter, Depends, Request

from logger import logger
from config.config import settings
from account.account_actions import AccountActionsHandler
from account.account_model import AdminSession
from account.authentication import optional_session, session_token
from dashboard.templating import redirect, render, success
from gcp.backend import Backend, get_backend

router = APIRouter()


@router.get("/")
async def sign_in_page(request: Request, session: Optional[AdminSession] = Depends(optional_session)):
    if session is not None:
        return redirect(settings.Authentication.HOME_ROUTE)
    return render(request, "login.html", {'email': ""})


@router.post("/")
async def sign_in(request: Request, backend: Backend = Depends(get_backend)):
    form = await request.form()
    email = (form.get("email") or "").strip()
    result = AccountActionsHandler(auth=backend.auth).sign_in(email=email, password=form.get("password") or "")
    if not result.success:
        return render(request, "login.html", {'email': email, 'error': result.error}, status_code=401)

    response = redirect(settings.Authentication.HOME_ROUTE)
    response.set_cookie(
        settings.Authentication.SESSION_COOKIE_NAME,
        result.data.session_token,
        max_age=settings.Authentication.SESSION_DURATION_MINUTES * 60,
        httponly=True,
        secure=settings.Authentication.SECURE_COOKIE,
        samesite='lax'
    )
    return response


@router.post("/logout")
async def sign_out(request: Request, backend: Backend = Depends(get_backend)):
    token = session_token(request)
    if token:
        result = AccountActionsHandler(auth=backend.auth).sign_out(session_token=token)
        if not result.success:
            logger.warning(f"[AUTH] Session revoke failed, clearing cookie anyway: {result.error}")

    response = redirect(settings.Authentication.LOGIN_ROUTE, success("Signed out"))
    response.delete_cookie(settings.Authentication.SESSION_COOKIE_NAME)
    return response
