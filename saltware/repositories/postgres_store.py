"""
PostgresStore - content tables over a direct asyncpg connection

Storage: PostgreSQL (services, employees, projects, industries, stats)

Used for local development or service-side maintenance where the database is
reachable directly. Authorization is whatever the connecting role is granted;
a privilege error surfaces as StoreError like any other failure.
"""
import logging
from typing import List, Optional

import asyncpg

from ..config.database import create_postgres_pool
from ..exceptions import StoreError
from .base import ContentStore, Row, table_columns

logger = logging.getLogger(__name__)

# Errors raised by asyncpg for both server-side and client-side failures
_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class PostgresStore(ContentStore):
    """
    Direct SQL content store.

    Table and column names come from the collection registry only; values
    are always bound parameters.
    """

    def __init__(self, db_pool: asyncpg.Pool, owns_pool: bool = False):
        self.db_pool = db_pool
        self._owns_pool = owns_pool

    @classmethod
    async def connect(cls, min_size: int = 1, max_size: int = 5) -> 'PostgresStore':
        """Create a store with its own pool from settings"""
        pool = await create_postgres_pool(min_size=min_size, max_size=max_size)
        return cls(pool, owns_pool=True)

    async def close(self) -> None:
        if self._owns_pool:
            await self.db_pool.close()

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def select_ordered(self, table: str) -> List[Row]:
        table, _ = table_columns(table)
        try:
            async with self.db_pool.acquire() as conn:
                rows = await conn.fetch(f"""
                    SELECT * FROM {_quote(table)}
                    ORDER BY sort_order ASC
                """)
        except _DB_ERRORS as e:
            raise StoreError(str(e), collection=table, operation='list') from e

        return [dict(row) for row in rows]

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def insert_row(self, table: str, row: Row) -> Row:
        table, columns = table_columns(table)
        column_sql = ", ".join(_quote(c) for c in columns)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        try:
            async with self.db_pool.acquire() as conn:
                created = await conn.fetchrow(
                    f"INSERT INTO {_quote(table)} ({column_sql}) "
                    f"VALUES ({placeholders}) RETURNING *",
                    *[row.get(c) for c in columns],
                )
        except _DB_ERRORS as e:
            raise StoreError(str(e), collection=table, operation='insert') from e

        return dict(created)

    async def update_row(self, table: str, row_id: str, row: Row) -> Row:
        table, columns = table_columns(table)
        assignments = ", ".join(
            f"{_quote(c)} = ${i}" for i, c in enumerate(columns, start=2)
        )
        try:
            async with self.db_pool.acquire() as conn:
                updated: Optional[asyncpg.Record] = await conn.fetchrow(
                    f"UPDATE {_quote(table)} SET {assignments} "
                    f"WHERE id = $1 RETURNING *",
                    row_id,
                    *[row.get(c) for c in columns],
                )
        except _DB_ERRORS as e:
            raise StoreError(str(e), collection=table, operation='update') from e

        if updated is None:
            raise StoreError(
                f"No {table} row with id {row_id}",
                collection=table,
                operation='update',
                not_found=True,
            )
        return dict(updated)

    async def delete_row(self, table: str, row_id: str) -> None:
        table, _ = table_columns(table)
        try:
            async with self.db_pool.acquire() as conn:
                deleted = await conn.fetchval(
                    f"DELETE FROM {_quote(table)} WHERE id = $1 RETURNING id",
                    row_id,
                )
        except _DB_ERRORS as e:
            raise StoreError(str(e), collection=table, operation='delete') from e

        if deleted is None:
            raise StoreError(
                f"No {table} row with id {row_id}",
                collection=table,
                operation='delete',
                not_found=True,
            )
