"""
Error taxonomy for the admin content subsystem.

All three kinds are scoped to a single in-progress operation. None of them is
fatal to the process and none of them clears prior state.

- StoreError: any failure from a collection operation
- AuthError: sign-in / provisioning failure from the auth backend
- ValidationError: local, pre-network input checks
"""
from typing import Optional


class SaltwareError(Exception):
    """Base error carrying a user-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StoreError(SaltwareError):
    """
    Collection operation failed.

    Covers transport failures, authorization denial and rows that did not
    match on update/delete. `not_found` is True only for the latter.
    `applied` is True when the write reached the backend even though the
    call as a whole failed (retrying it would write twice).
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        not_found: bool = False,
        applied: bool = False,
    ):
        super().__init__(message)
        self.collection = collection
        self.operation = operation
        self.status_code = status_code
        self.not_found = not_found
        self.applied = applied


class AuthError(SaltwareError):
    """Sign-in or provisioning failed."""

    CREDENTIALS = "credentials"
    PROVISIONING = "provisioning"
    TRANSPORT = "transport"
    FORBIDDEN = "forbidden"

    def __init__(self, message: str, reason: str = CREDENTIALS):
        super().__init__(message)
        self.reason = reason


class ValidationError(SaltwareError):
    """Input rejected locally, before any network call."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
