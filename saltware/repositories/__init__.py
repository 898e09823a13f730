"""
Repository Pattern - Storage abstraction layer

Repositories hide storage details (hosted REST API, direct PostgreSQL) from
the admin services. Consumers work with domain records, not rows.

Storage Split:
- PostgrestStore: hosted store over HTTP, row-level security per session
- PostgresStore: direct asyncpg connection (development / maintenance)
- ContentRepository: typed accessor over one collection, on either store
"""
from typing import Optional

from ..config.settings import Settings, get_settings
from .base import ContentStore, table_columns
from .content_repository import ContentRepository, repositories_for
from .postgres_store import PostgresStore
from .rest_store import PostgrestStore

# Shared content store (initialized on first use)
content_store: Optional[ContentStore] = None


async def get_content_store(settings: Optional[Settings] = None) -> ContentStore:
    """Get or create the shared content store for the configured backend"""
    global content_store
    if content_store is None:
        settings = settings or get_settings()
        if settings.content_backend == "postgres":
            content_store = await PostgresStore.connect()
        else:
            content_store = PostgrestStore.from_settings(settings)
    return content_store


async def close_content_store() -> None:
    """Close and forget the shared content store"""
    global content_store
    if content_store is not None:
        await content_store.close()
        content_store = None


__all__ = [
    'ContentStore',
    'ContentRepository',
    'PostgrestStore',
    'PostgresStore',
    'repositories_for',
    'table_columns',
    'content_store',
    'get_content_store',
    'close_content_store',
]
