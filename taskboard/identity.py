"""Identity-provider credential verification.

The service never inspects provider tokens itself; google-auth validates the
signature, audience and expiry and returns the claims.
"""
from typing import Callable, Optional

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from pydantic import BaseModel

from .config import GOOGLE_CLIENT_ID


class IdentityClaims(BaseModel):
    subject: str
    email: str
    name: str
    picture: Optional[str] = None


def verify_google_credential(credential: str) -> IdentityClaims:
    """Verify a Google ID token. Raises ValueError if it is not valid."""
    payload = id_token.verify_oauth2_token(
        credential, google_requests.Request(), GOOGLE_CLIENT_ID
    )
    return IdentityClaims(
        subject=payload["sub"],
        email=payload["email"],
        name=payload.get("name") or payload["email"],
        picture=payload.get("picture"),
    )


def get_identity_verifier() -> Callable[[str], IdentityClaims]:
    """Dependency returning the verifier used by POST /auth/google."""
    return verify_google_credential
