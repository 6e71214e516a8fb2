"""FastAPI app factory.

Endpoints are thin wrappers over the studio engine.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workflow_studio import __version__
from workflow_studio.server.config import ServerSettings
from workflow_studio.server.studio_router import router as studio_router

logger = logging.getLogger(__name__)


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    settings = settings or ServerSettings()

    app = FastAPI(
        title="Workflow Studio",
        version=__version__,
        description="REST API over the workflow studio editing engine.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Expose settings for request handlers that want to read it.
    app.state.settings = settings

    # Minimal dev-friendly CORS so a Vite dev server can call the API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(studio_router, prefix="/api")

    logger.debug("Created app", extra={"cors_origins": settings.parsed_cors_origins()})
    return app
