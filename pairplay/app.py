from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from tortoise.contrib.fastapi import RegisterTortoise

from .config import Settings, get_settings
from .logging_config import configure_logging, get_logger
from .playground import Playground
from .profiles import ProfileLookup, TortoiseProfileLookup
from .routers import partners as partners_router
from .routers import playground as playground_router
from .routers import spaces as spaces_router
from .routers import users as users_router
from .routers import websockets as ws_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings

    # -----------------------------
    # Database (Tortoise ORM)
    # -----------------------------

    async with RegisterTortoise(
        app,
        db_url=settings.db_url,
        modules={"models": ["pairplay.models"]},
        generate_schemas=True,
    ):
        logger.info("Application started", db_url=settings.db_url)
        yield
        await app.state.playground.shutdown()
        logger.info("Application stopped")


def create_app(settings: Optional[Settings] = None, profiles: Optional[ProfileLookup] = None) -> FastAPI:
    """Build the API with a fresh, empty playground."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.json_logs)

    app = FastAPI(title="Pairplay Backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.playground = Playground(settings)
    app.state.profiles = profiles or TortoiseProfileLookup()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(users_router.router)
    app.include_router(partners_router.router)
    app.include_router(spaces_router.router)
    app.include_router(playground_router.router)
    app.include_router(ws_router.router)

    return app


__all__ = ["create_app", "lifespan"]
