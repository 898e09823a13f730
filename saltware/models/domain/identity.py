"""
Identity domain model - the signed-in actor
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass
class Identity:
    """
    Signed-in actor - storage-agnostic representation

    Lifecycle is bounded by sign-in / sign-out. `is_admin` is resolved from
    the backend on every sign-in or session restore; it is never trusted
    from client state alone.
    """
    user_id: str
    email: Optional[str]
    access_token: str

    expires_at: Optional[datetime] = None
    name: Optional[str] = None

    # Resolved by the role check, never client-chosen
    is_admin: bool = False

    metadata: dict = field(default_factory=dict)

    @property
    def is_expired(self) -> bool:
        """Check if the session token has passed its expiry"""
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at
