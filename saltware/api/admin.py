"""
Admin Content API
=================

CRUD over the five content collections for the admin dashboard.

Endpoints:
- GET    /api/admin/{collection}       - Ordered rows with display summaries
- POST   /api/admin/{collection}       - Create a row from form values
- PUT    /api/admin/{collection}/{id}  - Replace a row (all columns)
- DELETE /api/admin/{collection}/{id}  - Delete a row

Every request requires an Authenticated-Admin session and runs through a
DashboardController bound to a store acting as that session, so the
backend's row-level policies apply. Mutations answer with the reloaded list.
"""

from fastapi import APIRouter, Depends, status
import logging

from ..models.api.content import CollectionResponse, ContentItem, ContentWrite
from ..models.domain.content import CollectionKind
from ..middleware.auth import require_admin
from ..repositories import ContentStore, repositories_for
from ..services.access_gate import AccessGate
from ..services.dashboard import DashboardController
from .deps import get_store, http_error, scoped_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])


async def _open_dashboard(
    collection: CollectionKind,
    gate: AccessGate,
    store: ContentStore,
) -> DashboardController:
    """Mount a dashboard on `collection`; raises if the list cannot be loaded"""
    dashboard = DashboardController(gate, repositories_for(scoped_store(store, gate)))
    await dashboard.mount(collection)
    if dashboard.failure is not None:
        raise http_error(dashboard.failure)
    return dashboard


def _collection_response(dashboard: DashboardController) -> CollectionResponse:
    return CollectionResponse(
        collection=dashboard.active_tab.value,
        items=[ContentItem.from_record(record) for record in dashboard.items],
        error=dashboard.error,
    )


def _apply_fields(dashboard: DashboardController, body: ContentWrite) -> None:
    for name, value in body.fields.items():
        if not dashboard.set_field(name, value):
            raise http_error(dashboard.failure)


@router.get("/{collection}", response_model=CollectionResponse)
async def list_collection(
    collection: CollectionKind,
    gate: AccessGate = Depends(require_admin),
    store: ContentStore = Depends(get_store),
):
    """List a collection ordered by sort_order"""
    dashboard = await _open_dashboard(collection, gate, store)
    return _collection_response(dashboard)


@router.post("/{collection}", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_record(
    collection: CollectionKind,
    body: ContentWrite,
    gate: AccessGate = Depends(require_admin),
    store: ContentStore = Depends(get_store),
):
    """
    Create a row

    Omitted fields take their defaults; sort_order defaults to the end of
    the current list.
    """
    dashboard = await _open_dashboard(collection, gate, store)
    dashboard.begin_create()
    _apply_fields(dashboard, body)

    if not await dashboard.save():
        raise http_error(dashboard.failure)

    return _collection_response(dashboard)


@router.put("/{collection}/{record_id}", response_model=CollectionResponse)
async def replace_record(
    collection: CollectionKind,
    record_id: str,
    body: ContentWrite,
    gate: AccessGate = Depends(require_admin),
    store: ContentStore = Depends(get_store),
):
    """
    Replace a row

    Starts from the row as currently listed (or an empty record when the id
    is not listed, leaving the backend to refuse it) and applies the fields.
    """
    dashboard = await _open_dashboard(collection, gate, store)

    repository = dashboard.repositories[collection]
    existing = next((r for r in dashboard.items if r.id == record_id), None)
    if existing is None:
        existing = repository.record_cls(id=record_id)
    if dashboard.begin_edit(existing) is None:
        raise http_error(dashboard.failure)
    _apply_fields(dashboard, body)

    if not await dashboard.save():
        raise http_error(dashboard.failure)

    return _collection_response(dashboard)


@router.delete("/{collection}/{record_id}", response_model=CollectionResponse)
async def delete_record(
    collection: CollectionKind,
    record_id: str,
    gate: AccessGate = Depends(require_admin),
    store: ContentStore = Depends(get_store),
):
    """Delete a row"""
    dashboard = await _open_dashboard(collection, gate, store)

    if not await dashboard.remove(record_id):
        raise http_error(dashboard.failure)

    return _collection_response(dashboard)
