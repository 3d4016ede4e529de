"""
FastAPI application entry point for the PapayaFresh API.
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from papayafresh.config import get_settings
from papayafresh.routes import router
from papayafresh.schemas import RootResponse
from papayafresh.timestamps import utc_now

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title=settings.server_name, version=settings.version)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_model=RootResponse)
    def root():
        return RootResponse(
            message=f"{settings.server_name} is working!",
            status="OK",
            timestamp=utc_now(),
        )

    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    logger.info("Starting %s on port %s", settings.server_name, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
