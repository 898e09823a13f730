"""
Authentication dependencies

Every protected request rebuilds the AccessGate from the session token
(cookie first, then bearer header); nothing is trusted from earlier requests.
"""

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from typing import Optional
import logging

from ..config import get_settings
from ..services.access_gate import AccessGate, GateState
from ..services.auth_client import AuthClient
from .jwt_session import decode_access_token

logger = logging.getLogger(__name__)

# Shared auth client (initialized on first use)
_auth_client: Optional[AuthClient] = None


def get_auth_client() -> AuthClient:
    """Get or create the shared auth client"""
    global _auth_client
    if _auth_client is None:
        _auth_client = AuthClient.from_settings(get_settings())
    return _auth_client


async def close_auth_client() -> None:
    """Close and forget the shared auth client"""
    global _auth_client
    if _auth_client is not None:
        await _auth_client.close()
        _auth_client = None


def get_session_token(request: Request) -> Optional[str]:
    """Session token from cookie or Authorization header"""
    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


async def get_access_gate(
    request: Request,
    auth: AuthClient = Depends(get_auth_client),
) -> AccessGate:
    """
    Access gate resolved for this request (never raises)

    Returns:
        AccessGate in ANONYMOUS or AUTHENTICATED_* state
    """
    settings = get_settings()
    gate = AccessGate(auth, password_min_length=settings.password_min_length)
    token = get_session_token(request)

    if token:
        try:
            decode_access_token(token)
        except JWTError as e:
            logger.info(f"Rejected session token: {e}")
            token = None

    await gate.resolve(token)
    return gate


async def require_admin(gate: AccessGate = Depends(get_access_gate)) -> AccessGate:
    """
    Admin gate (required - raises if not Authenticated-Admin)

    Raises:
        HTTPException 401 if not authenticated, 403 if not an admin
    """
    if gate.state is GateState.AUTHENTICATED_ADMIN:
        return gate
    if gate.state is GateState.AUTHENTICATED_NON_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
