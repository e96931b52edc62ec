import logging

import requests
from starlette.requests import HTTPConnection

from core.config import settings
from core.errors import InvalidCodeError, PhoneVerificationError

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://www.googleapis.com/identitytoolkit/v3/relyingparty"

# Provider error codes that mean the user typed a wrong or stale code
_REJECTED_CODES = {"INVALID_CODE", "SESSION_EXPIRED", "INVALID_SESSION_INFO", "CODE_EXPIRED"}


class PhoneVerifier:
    """SMS verification through the Firebase Identity Toolkit REST API."""

    def __init__(self, api_key: str, timeout: float = 10):
        self.api_key = api_key
        self.timeout = timeout

    def _post(self, method: str, payload: dict) -> dict:
        try:
            response = requests.post(
                f"{IDENTITY_TOOLKIT_URL}/{method}",
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Firebase %s request failed: %s", method, e)
            raise PhoneVerificationError(errors=str(e)) from e

        body = response.json() if response.content else {}
        if response.status_code != 200:
            error = (body.get("error") or {}).get("message", "")
            logger.warning("Firebase %s returned %s: %s", method, response.status_code, error)
            if error.split(" ")[0] in _REJECTED_CODES:
                raise InvalidCodeError()
            raise PhoneVerificationError(errors=error or response.text)
        return body

    def send_code(self, phone_number: str) -> str:
        body = self._post("sendVerificationCode", {"phoneNumber": phone_number})
        return body["sessionInfo"]

    def verify_code(self, session_info: str, code: str) -> str:
        body = self._post("verifyPhoneNumber", {"sessionInfo": session_info, "code": code})
        return body["phoneNumber"]


def build_phone_verifier() -> PhoneVerifier:
    return PhoneVerifier(api_key=settings.FIREBASE_API_KEY)


def get_phone_verifier(connection: HTTPConnection) -> PhoneVerifier:
    return connection.app.state.phone_verifier
