"""
Shared API dependencies
"""

from fastapi import HTTPException, status

from ..exceptions import AuthError, SaltwareError, StoreError, ValidationError
from ..repositories import ContentStore, PostgrestStore, get_content_store
from ..services.access_gate import AccessGate


async def get_store() -> ContentStore:
    """Shared content store (anonymous for the REST backend)"""
    return await get_content_store()


def scoped_store(store: ContentStore, gate: AccessGate) -> ContentStore:
    """Store acting as the gate's signed-in user, so row-level policies apply"""
    if isinstance(store, PostgrestStore) and gate.identity is not None:
        return store.scoped(gate.identity.access_token)
    return store


def http_error(error: SaltwareError) -> HTTPException:
    """Map a subsystem error to an HTTP error for the UI layer"""
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=error.message)
    if isinstance(error, AuthError):
        if error.reason == AuthError.FORBIDDEN:
            return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error.message)
        if error.reason == AuthError.TRANSPORT:
            return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=error.message)
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=error.message)
    if isinstance(error, StoreError) and error.not_found:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if isinstance(error, StoreError) and error.status_code in (401, 403):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error.message)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
