"""
AuthClient - hosted authentication backend

Endpoints (relative to SUPABASE_URL):
- POST /auth/v1/token?grant_type=password  sign in with email + password
- GET  /auth/v1/user                       resolve a session token
- POST /auth/v1/logout                     invalidate a session token
- POST /rest/v1/rpc/{role_check_function}  administrator role flag
- POST /functions/v1/{provision_function}  create the first admin (out of band)

Usage:
    auth = AuthClient.from_settings(get_settings())
    identity = await auth.sign_in("admin@saltware.lk", "secret")
    identity.is_admin = await auth.is_admin(identity)
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import httpx

from ..config.settings import Settings
from ..exceptions import AuthError
from ..models.domain.identity import Identity

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response, default: str) -> str:
    """Auth and function errors come in several shapes; take the first message found"""
    try:
        body = response.json()
    except ValueError:
        return response.text or default
    if isinstance(body, dict):
        for key in ('error_description', 'msg', 'message', 'error'):
            if body.get(key):
                return str(body[key])
    return default


def _json_body(response: httpx.Response, what: str) -> Dict[str, Any]:
    """Success body as a dict; anything else means a broken service or proxy"""
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        raise AuthError(f"Unexpected response from authentication service ({what})", reason=AuthError.TRANSPORT)
    return body


class AuthClient:
    """
    Client for the authentication interface.

    All failures surface as AuthError; `reason` separates rejected
    credentials from transport problems and provisioning refusals.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self.api_key = settings.supabase_anon_key
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> 'AuthClient':
        return cls(settings, client=client)

    def _get_client(self) -> httpx.AsyncClient:
        """Ensure the httpx client exists."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
            self._owns_client = True
        return self._client

    async def close(self):
        """Close the client if this instance created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        return {
            'apikey': self.api_key,
            'Authorization': f"Bearer {access_token or self.api_key}",
            'Content-Type': 'application/json',
        }

    async def _post(self, url: str, access_token: Optional[str] = None, **kwargs) -> httpx.Response:
        try:
            return await self._get_client().post(url, headers=self._headers(access_token), **kwargs)
        except httpx.RequestError as e:
            raise AuthError(f"Could not reach authentication service: {e}", reason=AuthError.TRANSPORT) from e

    # =========================================================================
    # SESSION
    # =========================================================================

    @staticmethod
    def _identity_from_user(user: Dict[str, Any], access_token: str, **extra) -> Identity:
        metadata = user.get('user_metadata') or {}
        return Identity(
            user_id=str(user.get('id')),
            email=user.get('email'),
            access_token=access_token,
            name=metadata.get('name') or metadata.get('full_name'),
            metadata=metadata,
            **extra,
        )

    async def sign_in(self, email: str, password: str) -> Identity:
        """
        Sign in with email + password.

        Returns:
            Identity (is_admin not yet resolved)

        Raises:
            AuthError (reason=credentials on rejection, transport otherwise)
        """
        response = await self._post(
            f"{self.settings.auth_url}/token",
            params={'grant_type': 'password'},
            json={'email': email, 'password': password},
        )

        if response.status_code >= 500:
            raise AuthError(
                _error_message(response, "Authentication service unavailable"),
                reason=AuthError.TRANSPORT,
            )
        if response.status_code >= 400:
            raise AuthError(_error_message(response, "Invalid login credentials"))

        session = _json_body(response, "sign in")
        if not session.get('access_token'):
            raise AuthError("Authentication service returned no session", reason=AuthError.TRANSPORT)
        expires_at = None
        if session.get('expires_at'):
            expires_at = datetime.fromtimestamp(int(session['expires_at']), tz=timezone.utc)
        elif session.get('expires_in'):
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(session['expires_in']))

        identity = self._identity_from_user(
            session.get('user') or {},
            access_token=session['access_token'],
            expires_at=expires_at,
        )
        logger.info(f"Signed in {identity.email}")
        return identity

    async def get_user(self, access_token: str) -> Identity:
        """
        Resolve an existing session token to its user.

        Raises:
            AuthError if the token is no longer valid
        """
        try:
            response = await self._get_client().get(
                f"{self.settings.auth_url}/user",
                headers=self._headers(access_token),
            )
        except httpx.RequestError as e:
            raise AuthError(f"Could not reach authentication service: {e}", reason=AuthError.TRANSPORT) from e

        if response.status_code >= 500:
            raise AuthError(
                _error_message(response, "Authentication service unavailable"),
                reason=AuthError.TRANSPORT,
            )
        if response.status_code >= 400:
            raise AuthError(_error_message(response, "Session expired"))

        return self._identity_from_user(_json_body(response, "user lookup"), access_token=access_token)

    async def sign_out(self, access_token: str) -> None:
        """Invalidate the session token at the backend"""
        response = await self._post(f"{self.settings.auth_url}/logout", access_token=access_token)
        # 401 means the token was already gone
        if response.status_code >= 400 and response.status_code != 401:
            raise AuthError(
                _error_message(response, "Sign out failed"),
                reason=AuthError.TRANSPORT,
            )

    # =========================================================================
    # ROLE
    # =========================================================================

    async def is_admin(self, identity: Identity) -> bool:
        """
        Ask the backend whether `identity` holds the administrator role.

        Any failure counts as "not admin"; mutations are refused server-side
        regardless of this answer.
        """
        try:
            response = await self._post(
                f"{self.settings.rest_url}/rpc/{self.settings.role_check_function}",
                access_token=identity.access_token,
                json={'_user_id': identity.user_id, '_role': self.settings.admin_role},
            )
        except AuthError as e:
            logger.warning(f"Role check for {identity.email} failed: {e.message}")
            return False

        if response.status_code >= 400:
            logger.warning(
                f"Role check for {identity.email} failed ({response.status_code}): "
                f"{_error_message(response, 'role check failed')}"
            )
            return False

        try:
            return response.json() is True
        except ValueError:
            logger.warning(f"Role check for {identity.email} returned an unreadable body")
            return False

    # =========================================================================
    # FIRST ADMIN
    # =========================================================================

    async def provision_first_admin(self, email: str, password: str, name: Optional[str] = None) -> None:
        """
        Create the first administrator account (out-of-band backend function).

        Raises:
            AuthError(reason=provisioning) with the backend's user-facing message
        """
        body: Dict[str, Any] = {'email': email, 'password': password}
        if name:
            body['name'] = name

        response = await self._post(
            f"{self.settings.functions_url}/{self.settings.provision_function}",
            json=body,
        )

        if response.status_code >= 400:
            raise AuthError(
                _error_message(response, "Could not create admin account"),
                reason=AuthError.PROVISIONING,
            )

        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get('error'):
            raise AuthError(str(data['error']), reason=AuthError.PROVISIONING)

        logger.info(f"Provisioned first admin {email}")
