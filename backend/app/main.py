from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import albums, artists, health, recommend
from .core.config import get_settings
from .core.logging import setup_logging
from .db.session import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, environment=settings.environment)
    app = FastAPI(
        title="Music Catalog Recommendation API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )
    app.include_router(health.router)
    app.include_router(recommend.router)
    app.include_router(artists.router)
    app.include_router(albums.router)
    return app


app = create_app()
