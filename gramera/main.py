"""
FastAPI application entry point.

Configures middleware, routes, exception handlers and the per-process
presence relay.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gramera.core.config import settings
from gramera.core.logging import configure_logging
from gramera.core.registry import ConnectionRegistry
from gramera.routers import presence, suggestions, websocket
from gramera.services.presence_service import PresenceService
from gramera.services.relay_service import MessageRelay
from gramera.services.suggestion_service import SuggestionService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    logger.info("Starting Gramera realtime API in %s mode", settings.ENVIRONMENT)
    logger.info(
        "AI suggestions: %s",
        "enabled" if app.state.suggestion_service.enabled else "disabled (no API key)",
    )
    yield
    await app.state.suggestion_service.close()
    logger.info("Shutting down Gramera realtime API")


def create_app(suggestion_service: SuggestionService | None = None) -> FastAPI:
    app = FastAPI(
        title="Gramera Realtime API",
        description="Presence tracking and direct-message relay",
        version="1.0.0",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # One registry per app, shared by the lifecycle handler and the relay
    registry = ConnectionRegistry()
    app.state.presence_service = PresenceService(registry)
    app.state.relay = MessageRelay(registry)
    app.state.suggestion_service = suggestion_service or SuggestionService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        if settings.DEBUG:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "detail": {
                        "code": "INTERNAL_SERVER_ERROR",
                        "message": str(exc),
                        "type": type(exc).__name__,
                    }
                },
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "An unexpected error occurred",
                }
            },
        )

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        return {
            "status": "ok",
            "environment": settings.ENVIRONMENT,
            "version": "1.0.0",
        }

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        return {
            "message": "Gramera Realtime API",
            "version": "1.0.0",
            "docs": "/api/docs" if settings.DEBUG else "disabled",
        }

    app.include_router(websocket.router, prefix="/api/v1", tags=["WebSocket"])
    app.include_router(presence.router, prefix="/api/v1", tags=["Presence"])
    app.include_router(suggestions.router, prefix="/api/v1", tags=["AI"])

    return app


app = create_app()
