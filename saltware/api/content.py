"""
Public Content API
==================

Read-only content for the marketing site sections.

Endpoints:
- GET /api/content               - All five collections
- GET /api/content/{collection}  - One collection, ordered by sort_order
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict, List

from ..models.api.content import SiteContentResponse
from ..models.domain.content import CollectionKind
from ..repositories import ContentStore, repositories_for
from ..services.site_content import SiteContent
from .deps import get_store

router = APIRouter(prefix="/api/content", tags=["content"])


@router.get("", response_model=SiteContentResponse)
async def get_site_content(store: ContentStore = Depends(get_store)):
    """Everything the public sections render; unreadable collections come back empty"""
    content = await SiteContent(repositories_for(store)).load()
    return SiteContentResponse(**{
        kind.value: [record.to_dict() for record in records]
        for kind, records in content.items()
    })


@router.get("/{collection}", response_model=List[Dict[str, Any]])
async def get_collection(
    collection: CollectionKind,
    store: ContentStore = Depends(get_store),
):
    """One collection for its section"""
    records = await SiteContent(repositories_for(store)).load_collection(collection)
    return [record.to_dict() for record in records]
