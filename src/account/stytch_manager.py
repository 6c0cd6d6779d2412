from typing import Optional

import stytch
from stytch.core.response_base import StytchError

from logger import logger
from config.config import settings
from account.account_model import AdminSession

class AuthenticationError(Exception):
    pass

class StytchManager:
    """Email and password sign-in against Stytch."""

    def __init__(self, project_id: str, secret: Optional[str]):
        self.client = stytch.Client(
            project_id=project_id,
            secret=secret
        )

    @staticmethod
    def _session_from(response_dict: dict) -> AdminSession:
        session = response_dict.get("session") or {}
        user = response_dict.get("user") or {}
        emails = user.get("emails") or []
        return AdminSession(
            user_id=session.get("user_id") or response_dict.get("user_id"),
            email=emails[0].get("email") if emails else None,
            session_token=response_dict["session_token"],
            expires_at=session.get("expires_at"),
        )

    def sign_in(self, email: str, password: str) -> AdminSession:
        try:
            response = self.client.passwords.authenticate(
                email=email,
                password=password,
                session_duration_minutes=settings.Authentication.SESSION_DURATION_MINUTES
            )
        except StytchError as e:
            logger.warning(f"[STYTCH] Sign in failed for '{email}': {e.details.error_message}")
            raise AuthenticationError(e.details.error_message)

        return self._session_from(response.model_dump())

    def authenticate(self, session_token: str) -> AdminSession:
        try:
            response = self.client.sessions.authenticate(session_token=session_token)
        except StytchError as e:
            raise AuthenticationError(e.details.error_message)
        if not response:
            raise AuthenticationError("Session token cannot be authorized!")

        return self._session_from(response.model_dump())

    def revoke(self, session_token: str):
        try:
            self.client.sessions.revoke(session_token=session_token)
        except StytchError as e:
            logger.warning(f"[STYTCH] Failed to revoke session: {e.details.error_message}")
            raise AuthenticationError(e.details.error_message)
