"""FastAPI application for the offer gallery."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .config import GallerySettings, get_settings
from .logging import configure_logging, get_logger
from .routes import router
from .session import SessionRegistry

LOGGER = get_logger(__name__)


def create_app(
    settings: Optional[GallerySettings] = None,
    sessions: Optional[SessionRegistry] = None,
    load_on_startup: bool = True,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    sessions = sessions or SessionRegistry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if load_on_startup:
            await sessions.warm()
        LOGGER.info("gallery.started", catalog_loaded=sessions.cache.loaded)
        yield
        await sessions.aclose()

    app = FastAPI(
        title=settings.site_name,
        description="Searchable image-offer gallery",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.sessions = sessions
    app.include_router(router)
    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(create_app(_settings), host=_settings.host, port=_settings.port)
