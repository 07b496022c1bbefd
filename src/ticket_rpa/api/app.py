"""FastAPI app for ticket-rpa."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ticket_rpa import __version__
from ticket_rpa.api.routes import router
from ticket_rpa.settings import get_settings

logger = logging.getLogger(__name__)


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Server error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()

    application = FastAPI(
        title="Ticket RPA",
        description="Browser automation that files tickets and log notes in the helpdesk portal.",
        version=__version__,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(Exception, _unhandled_error)
    application.include_router(router)
    logger.info("API ready (env=%s, headless=%s)", settings.env, settings.browser.headless)
    return application


app = create_app()
