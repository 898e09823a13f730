"""
Saltware Site - FastAPI Backend

Serves the public site content and the admin content API.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import admin, auth, content
from .config import get_settings
from .middleware.auth import close_auth_client
from .repositories import close_content_store
from .utils.logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_content_store()
    await close_auth_client()


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging("api", level=settings.log_level)

    app = FastAPI(
        title="Saltware Site",
        description="Site content and admin content API",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Enable CORS for the site frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(content.router)
    app.include_router(auth.router)
    app.include_router(admin.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "backend": settings.content_backend}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
