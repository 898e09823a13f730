"""
Content store contract - the backend data interface

A store speaks rows (plain dicts) for one of the five named tables.
Every method is a live round trip; nothing is cached here.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

from ..exceptions import StoreError
from ..models.domain.content import CollectionKind, record_type


Row = Dict[str, Any]


def table_columns(table: str) -> Tuple[str, Tuple[str, ...]]:
    """
    Resolve a table name and its editable columns from the collection registry.

    Only registry names ever reach a query, so callers cannot smuggle
    arbitrary identifiers into SQL or URL paths.
    """
    try:
        kind = CollectionKind(table)
    except ValueError:
        raise StoreError(f"Unknown collection: {table}", collection=table)
    return kind.value, record_type(kind).field_names()


class ContentStore(ABC):
    """
    Backend data interface over the named collections.

    Failures of any kind (network, authorization, missing row) surface as
    StoreError; update/delete that match no row are failures, not no-ops.
    """

    @abstractmethod
    async def select_ordered(self, table: str) -> List[Row]:
        """All rows ordered by sort_order ascending"""

    @abstractmethod
    async def insert_row(self, table: str, row: Row) -> Row:
        """Insert a row (no id); returns the created row with its id"""

    @abstractmethod
    async def update_row(self, table: str, row_id: str, row: Row) -> Row:
        """Replace all editable columns of the row with `row_id`"""

    @abstractmethod
    async def delete_row(self, table: str, row_id: str) -> None:
        """Delete the row with `row_id`"""

    async def close(self) -> None:
        """Release transport resources"""
