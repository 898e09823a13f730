from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can come from:
    - .env file (for the project URL and keys)
    - System environment

    Variable names match the hosted backend conventions:
    - SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_JWT_SECRET
    - POSTGRES_HOST, POSTGRES_PORT, etc. (direct database access only)
    """

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # Hosted store + auth (from .env)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""
    supabase_jwt_secret: Optional[str] = None
    request_timeout: float = 10.0

    # Content backend: "rest" (hosted API) or "postgres" (direct asyncpg)
    content_backend: str = "rest"

    # PostgreSQL (only for content_backend=postgres)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "postgres"
    database_url: Optional[str] = Field(default=None, validate_default=True)

    # Admin access
    admin_role: str = "admin"
    role_check_function: str = "has_role"
    provision_function: str = "create-admin"
    password_min_length: int = 6

    # Session cookie
    session_cookie_name: str = "access_token"
    session_cookie_secure: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra env vars

    @field_validator('supabase_url', mode='before')
    @classmethod
    def strip_trailing_slash(cls, v):
        """Base URL is joined with /rest/v1 and /auth/v1 paths"""
        return v.rstrip('/') if isinstance(v, str) else v

    @field_validator('content_backend', mode='before')
    @classmethod
    def normalize_backend(cls, v):
        """Accept any case, reject unknown backends early"""
        value = (v or "rest").lower()
        if value not in ("rest", "postgres"):
            raise ValueError(f"Unknown content backend: {v}")
        return value

    @field_validator('database_url', mode='before')
    @classmethod
    def construct_database_url(cls, v, info):
        """Construct database URL from components if not explicitly set"""
        if v:
            return v

        data = info.data
        host = data.get('postgres_host', 'localhost')
        port = data.get('postgres_port', 5432)
        user = data.get('postgres_user', 'postgres')
        password = data.get('postgres_password', 'postgres')
        db = data.get('postgres_db', 'postgres')

        return f"postgresql://{user}:{password}@{host}:{port}/{db}"

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.supabase_url}/auth/v1"

    @property
    def functions_url(self) -> str:
        return f"{self.supabase_url}/functions/v1"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
