"""
Admin access API router

Admins reach the sign-in surface by direct URL only; there is no general
self-registration. The access form signs in, or creates the first admin
when no account matches.
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Response
import logging

from ..config import get_settings
from ..exceptions import SaltwareError
from ..middleware.auth import get_access_gate, get_auth_client
from ..models.api.auth import AccessRequest, AuthStatusResponse, IdentityPublic
from ..models.domain.identity import Identity
from ..services.access_gate import AccessGate, EntryDecision
from ..services.auth_client import AuthClient
from .deps import http_error

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["authentication"])


def _status_response(gate: AccessGate) -> AuthStatusResponse:
    redirect = None
    if gate.entry_decision() is EntryDecision.REDIRECT:
        redirect = gate.SIGN_IN_PATH
    identity = gate.identity
    return AuthStatusResponse(
        state=gate.state.value,
        authenticated=gate.is_authenticated,
        is_admin=gate.is_admin,
        user=IdentityPublic.model_validate(identity) if identity else None,
        redirect=redirect,
    )


def _set_session_cookie(response: Response, identity: Identity) -> None:
    settings = get_settings()
    max_age = None
    if identity.expires_at is not None:
        max_age = max(0, int((identity.expires_at - datetime.now(timezone.utc)).total_seconds()))
    response.set_cookie(
        key=settings.session_cookie_name,
        value=identity.access_token,
        httponly=True,
        max_age=max_age,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


@router.post("/access", response_model=AuthStatusResponse)
async def admin_access(
    body: AccessRequest,
    response: Response,
    auth: AuthClient = Depends(get_auth_client),
):
    """
    Admin access form

    Sign in; if that is rejected, try creating the first admin account and
    sign in again. Any failure comes back as a single message.
    """
    settings = get_settings()
    gate = AccessGate(auth, password_min_length=settings.password_min_length)

    try:
        identity = await gate.request_access(
            email=body.email,
            password=body.password,
            confirm_password=body.confirm_password,
            name=body.name,
        )
    except SaltwareError as e:
        raise http_error(e)

    _set_session_cookie(response, identity)
    return _status_response(gate)


@router.post("/logout", response_model=AuthStatusResponse)
async def logout(response: Response, gate: AccessGate = Depends(get_access_gate)):
    """Sign out and clear the session cookie"""
    await gate.sign_out()
    response.delete_cookie(key=get_settings().session_cookie_name)
    return _status_response(gate)


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(gate: AccessGate = Depends(get_access_gate)):
    """Current gate state for route guarding"""
    return _status_response(gate)
