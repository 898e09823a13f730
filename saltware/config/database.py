"""
Database Configuration
======================

Connection configuration for the direct PostgreSQL content backend.
The hosted REST backend needs no pool; it only reads Settings.
"""
from typing import Optional
from dataclasses import dataclass

from .settings import Settings, get_settings


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""
    dsn: str
    min_size: int = 1
    max_size: int = 5
    command_timeout: Optional[float] = None

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        min_size: int = 1,
        max_size: int = 5,
    ) -> 'PostgresConfig':
        """Create config from application settings."""
        settings = settings or get_settings()
        if not settings.database_url:
            raise ValueError("DATABASE_URL (or POSTGRES_* variables) is required")

        return cls(
            dsn=settings.database_url,
            min_size=min_size,
            max_size=max_size,
            command_timeout=settings.request_timeout,
        )

    def to_asyncpg_kwargs(self) -> dict:
        """Convert to asyncpg.create_pool kwargs."""
        return {
            'dsn': self.dsn,
            'min_size': self.min_size,
            'max_size': self.max_size,
            'command_timeout': self.command_timeout,
        }


def get_postgres_config(min_size: int = 1, max_size: int = 5) -> PostgresConfig:
    """Get PostgreSQL configuration from settings."""
    return PostgresConfig.from_settings(min_size=min_size, max_size=max_size)


async def create_postgres_pool(min_size: int = 1, max_size: int = 5):
    """Create PostgreSQL connection pool from settings."""
    import asyncpg
    config = get_postgres_config(min_size=min_size, max_size=max_size)
    return await asyncpg.create_pool(**config.to_asyncpg_kwargs())
