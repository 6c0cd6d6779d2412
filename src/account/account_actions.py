from pydantic import ValidationError

from logger import logger
from account.account_actions_model import SignInRequest
from account.account_model import AdminSession
from account.stytch_manager import StytchManager, AuthenticationError
from utils.common_models import ActionResult

class AccountActionsHandler:
    def __init__(self, auth: StytchManager):
        self.auth = auth

    def sign_in(self, email: str, password: str) -> ActionResult[AdminSession]:
        try:
            request = SignInRequest(email=email, password=password)
        except ValidationError as e:
            fields = sorted({str(error['loc'][0]) for error in e.errors() if error['loc']})
            logger.info(f"[ACCOUNT] Rejected sign in form, invalid: {fields}")
            return ActionResult.fail("Please enter a valid email and password")

        try:
            session = self.auth.sign_in(email=request.email, password=request.password)
            logger.info(f"[ACCOUNT] Signed in user '{session.user_id}'")
            return ActionResult.ok(session)
        except AuthenticationError as e:
            return ActionResult.fail(str(e) or "Invalid email or password")
        except Exception as e:
            logger.exception(e)
            return ActionResult.fail("Failed to sign in")

    def sign_out(self, session_token: str) -> ActionResult:
        try:
            self.auth.revoke(session_token=session_token)
            return ActionResult.ok()
        except AuthenticationError as e:
            return ActionResult.fail(str(e) or "Failed to sign out")
        except Exception as e:
            logger.exception(e)
            return ActionResult.fail("Failed to sign out")
