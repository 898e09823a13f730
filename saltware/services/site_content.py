"""
SiteContent - public read of all five collections

Feeds the marketing site sections (services, team, projects, industries,
stats). Reads go out concurrently with the public API key; a collection that
fails to load renders as an empty section.
"""
import asyncio
import logging
from typing import Dict, List, Mapping

from ..exceptions import StoreError
from ..models.domain.content import CollectionKind, ContentRecord
from ..repositories.content_repository import ContentRepository

logger = logging.getLogger(__name__)


class SiteContent:
    """Read-only view over the content repositories"""

    def __init__(self, repositories: Mapping[CollectionKind, ContentRepository]):
        self.repositories = dict(repositories)

    async def load_collection(self, kind) -> List[ContentRecord]:
        """
        Fetch one collection for display.

        Returns:
            Ordered records, or an empty list if the store could not be read
        """
        kind = CollectionKind(kind)
        try:
            return await self.repositories[kind].list()
        except StoreError as e:
            logger.warning(f"Could not load {kind.value} for the site: {e.message}")
            return []

    async def load(self) -> Dict[CollectionKind, List[ContentRecord]]:
        """Fetch every collection concurrently"""
        kinds = list(self.repositories)
        results = await asyncio.gather(*(self.load_collection(kind) for kind in kinds))
        return dict(zip(kinds, results))
