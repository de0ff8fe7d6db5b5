from __future__ import annotations

import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from persistence.repositories import AsyncResourceRepository
from settings import VERSION, Settings, get_settings

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    names = await app.state.repository.collection_names()
    logger.info("Serving %d collection(s): %s", len(names), ", ".join(names) or "-")
    yield
    # The store is saved after every mutation; nothing is flushed on shutdown.
    logger.info("Shutting down")


def create_app(repository: AsyncResourceRepository, settings: Settings | None = None) -> FastAPI:
    from endpoints.resource_endpoints import router as resource_router

    # Every top-level path is a collection name, so the docs routes stay off.
    app = FastAPI(
        title="jserve",
        version=VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.repository = repository
    app.state.settings = settings or get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(resource_router)

    return app
