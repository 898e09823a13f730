"""
Content Repository - typed accessor over one collection

Consumers work with domain records (Service, Employee, ...), not rows.
Every call is a live round trip; caching belongs to CollectionStore.
"""
import logging
from typing import Dict, List

from ..exceptions import StoreError
from ..models.domain.content import CollectionKind, ContentRecord, record_type
from .base import ContentStore

logger = logging.getLogger(__name__)


class ContentRepository:
    """
    Repository for one content collection

    list/insert/update/delete keyed by the store-assigned id, always ordered
    by sort_order ascending. Duplicate or gapped sort orders are allowed;
    ties keep the backend's order.
    """

    def __init__(self, kind, store: ContentStore):
        self.kind = CollectionKind(kind)
        self.record_cls = record_type(self.kind)
        self.store = store

    @property
    def table(self) -> str:
        return self.kind.value

    def _check_type(self, record: ContentRecord) -> None:
        if not isinstance(record, self.record_cls):
            raise TypeError(
                f"{self.table} expects {self.record_cls.__name__}, "
                f"got {type(record).__name__}"
            )

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def list(self) -> List[ContentRecord]:
        """
        Fetch the whole collection.

        Returns:
            Records ordered by sort_order (empty list is a valid result)
        """
        rows = await self.store.select_ordered(self.table)
        records = [self.record_cls.from_row(row) for row in rows]
        # Stable: ties keep the backend's order
        return sorted(records, key=lambda r: r.sort_order)

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def insert(self, record: ContentRecord) -> ContentRecord:
        """
        Create a row. Any id on `record` is ignored; the store assigns one.

        Returns:
            Created record with its new id
        """
        self._check_type(record)
        row = await self.store.insert_row(self.table, record.to_row())
        created = self.record_cls.from_row(row)
        logger.info(f"Inserted {self.table} row {created.id}")
        return created

    async def update(self, record_id: str, record: ContentRecord) -> ContentRecord:
        """
        Replace every editable column of the row with `record_id`.

        Raises:
            StoreError if the row does not exist or the update is denied
        """
        self._check_type(record)
        if not record_id:
            raise StoreError(
                f"Cannot update {self.table} row without an id",
                collection=self.table,
                operation='update',
                not_found=True,
            )
        row = await self.store.update_row(self.table, record_id, record.to_row())
        logger.info(f"Updated {self.table} row {record_id}")
        return self.record_cls.from_row(row)

    async def delete(self, record_id: str) -> None:
        """
        Delete the row with `record_id`.

        Raises:
            StoreError if the row does not exist or the delete is denied
        """
        if not record_id:
            raise StoreError(
                f"Cannot delete {self.table} row without an id",
                collection=self.table,
                operation='delete',
                not_found=True,
            )
        await self.store.delete_row(self.table, record_id)
        logger.info(f"Deleted {self.table} row {record_id}")


def repositories_for(store: ContentStore) -> Dict[CollectionKind, ContentRepository]:
    """One repository per collection, all over the same store"""
    return {kind: ContentRepository(kind, store) for kind in CollectionKind}
