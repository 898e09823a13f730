"""
AccessGate - authentication state for the admin dashboard

States:
    UNKNOWN                  session not resolved yet (do not redirect)
    ANONYMOUS                no session
    AUTHENTICATING           sign-in in flight
    AUTHENTICATED_NON_ADMIN  valid session, role flag false
    AUTHENTICATED_ADMIN      valid session, role flag true

Dashboard entry requires AUTHENTICATED_ADMIN and is re-checked on every
mount. The gate is a client-side convenience only: the backend refuses
mutations from non-admins whatever this object says.

First-run provisioning (request_access):
    sign in -> on rejected credentials create the first admin -> sign in again
This is the only account-creation path.
"""
import logging
from enum import Enum
from typing import Optional

from ..exceptions import AuthError, ValidationError
from ..models.domain.identity import Identity
from .auth_client import AuthClient

logger = logging.getLogger(__name__)

RETRY_SIGN_IN_MESSAGE = "Admin created. Please try signing in again."


class GateState(str, Enum):
    UNKNOWN = "unknown"
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED_NON_ADMIN = "authenticated_non_admin"
    AUTHENTICATED_ADMIN = "authenticated_admin"


class EntryDecision(str, Enum):
    ALLOW = "allow"
    WAIT = "wait"          # session still resolving
    REDIRECT = "redirect"  # send to the sign-in surface


class AccessGate:
    """Session + role state machine gating the dashboard"""

    SIGN_IN_PATH = "/admin/access"

    def __init__(self, auth: AuthClient, password_min_length: int = 6):
        self.auth = auth
        self.password_min_length = password_min_length
        self.state = GateState.UNKNOWN
        self.identity: Optional[Identity] = None

    @property
    def is_admin(self) -> bool:
        return self.state is GateState.AUTHENTICATED_ADMIN

    @property
    def is_authenticated(self) -> bool:
        return self.state in (GateState.AUTHENTICATED_ADMIN, GateState.AUTHENTICATED_NON_ADMIN)

    def _set_anonymous(self) -> None:
        self.state = GateState.ANONYMOUS
        self.identity = None

    async def _apply_role(self, identity: Identity) -> Identity:
        identity.is_admin = await self.auth.is_admin(identity)
        self.identity = identity
        self.state = (
            GateState.AUTHENTICATED_ADMIN if identity.is_admin
            else GateState.AUTHENTICATED_NON_ADMIN
        )
        return identity

    # =========================================================================
    # SESSION
    # =========================================================================

    async def resolve(self, access_token: Optional[str]) -> GateState:
        """Restore state from a stored session token (or lack of one)"""
        if not access_token:
            self._set_anonymous()
            return self.state

        self.state = GateState.UNKNOWN
        try:
            identity = await self.auth.get_user(access_token)
        except AuthError as e:
            logger.info(f"Stored session rejected: {e.message}")
            self._set_anonymous()
            return self.state

        await self._apply_role(identity)
        return self.state

    async def sign_in(self, email: str, password: str) -> Identity:
        """
        Anonymous -> Authenticating -> Authenticated-(Non)Admin.

        Raises:
            AuthError (state falls back to ANONYMOUS)
        """
        self.state = GateState.AUTHENTICATING
        self.identity = None
        try:
            identity = await self.auth.sign_in(email, password)
        except AuthError:
            self._set_anonymous()
            raise
        return await self._apply_role(identity)

    async def sign_out(self) -> None:
        """Invalidate the session; local state is cleared even if the backend call fails"""
        identity = self.identity
        self._set_anonymous()
        if identity is None:
            return
        try:
            await self.auth.sign_out(identity.access_token)
        except AuthError as e:
            logger.warning(f"Backend sign-out for {identity.email} failed: {e.message}")

    # =========================================================================
    # GUARDS
    # =========================================================================

    def _expire_session(self) -> bool:
        """Drop to ANONYMOUS once the session token has run out"""
        if self.identity is not None and self.identity.is_expired:
            logger.info(f"Session for {self.identity.email} expired")
            self._set_anonymous()
            return True
        return False

    def entry_decision(self) -> EntryDecision:
        """Whether the dashboard may render now"""
        self._expire_session()
        if self.state in (GateState.UNKNOWN, GateState.AUTHENTICATING):
            return EntryDecision.WAIT
        if self.state is GateState.AUTHENTICATED_ADMIN:
            return EntryDecision.ALLOW
        return EntryDecision.REDIRECT

    def require_admin(self) -> Identity:
        """
        Raises:
            AuthError(reason=forbidden) unless AUTHENTICATED_ADMIN,
            AuthError(reason=credentials) if the session has expired
        """
        if self._expire_session():
            raise AuthError("Session expired")
        if self.state is not GateState.AUTHENTICATED_ADMIN or self.identity is None:
            raise AuthError("Admin access required", reason=AuthError.FORBIDDEN)
        return self.identity

    # =========================================================================
    # ADMIN ACCESS FORM
    # =========================================================================

    def validate_access_form(self, email: str, password: str, confirm_password: str) -> None:
        """Local checks, run before any network call"""
        if not email or not email.strip():
            raise ValidationError("Email is required", field="email")
        if password != confirm_password:
            raise ValidationError(
                "Password and confirm password do not match",
                field="confirm_password",
            )
        if len(password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters",
                field="password",
            )

    async def request_access(
        self,
        email: str,
        password: str,
        confirm_password: str,
        name: Optional[str] = None,
    ) -> Identity:
        """
        Sign in, falling back to first-admin provisioning.

        Any rejected sign-in is taken as "no admin yet" and provisioning is
        attempted; the provisioning backend refuses once an admin exists.
        Transport failures are not retried through provisioning.

        Raises:
            ValidationError: form invalid (no network call made)
            AuthError: single user-facing message for whichever step failed
        """
        self.validate_access_form(email, password, confirm_password)

        try:
            return await self.sign_in(email, password)
        except AuthError as e:
            if e.reason == AuthError.TRANSPORT:
                raise
            logger.info(f"Sign-in for {email} rejected, attempting first admin setup")

        await self.auth.provision_first_admin(email, password, name or None)

        try:
            return await self.sign_in(email, password)
        except AuthError as e:
            logger.warning(f"Sign-in after provisioning {email} failed: {e.message}")
            raise AuthError(RETRY_SIGN_IN_MESSAGE, reason=e.reason) from e
