"""
JWT session token handling

Session tokens are issued by the hosted auth backend. When SUPABASE_JWT_SECRET
is configured the signature is verified here; otherwise the claims are only
read (expiry still enforced) and the backend stays the authority.
"""
from datetime import datetime, timezone
from typing import Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError

from ..config import Settings, get_settings

SESSION_ALGORITHMS = ["HS256"]


def decode_access_token(token: str, settings: Optional[Settings] = None) -> dict:
    """
    Decode and validate a session token

    Returns:
        Decoded payload dict

    Raises:
        jose.JWTError if token invalid/expired
    """
    settings = settings or get_settings()

    if settings.supabase_jwt_secret:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=SESSION_ALGORITHMS,
            options={"verify_aud": False},
        )

    payload = jwt.get_unverified_claims(token)
    exp = payload.get("exp")
    if exp is not None and datetime.now(timezone.utc).timestamp() >= float(exp):
        raise ExpiredSignatureError("Signature has expired.")
    return payload
