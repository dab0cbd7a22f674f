"""ACCREDIT FastAPI application."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from accredit import __version__
from accredit.api.auth import request_logging_middleware
from accredit.config import get_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle handler."""
    config = get_config()

    if not config.demo_mode and not config.api_key:
        logger.critical("ACCREDIT_API_KEY is not set. Set it in .env or export it. Use ACCREDIT_DEMO_MODE=true to skip.")
        sys.exit(1)

    if not config.scraping_configured:
        logger.warning("ACCREDIT_SCRAPER_API_KEY is not set - live verifications will be queued for manual review")

    logger.info(
        "ACCREDIT API starting - storage=%s, scraping=%s",
        "sql" if config.database_url else "memory",
        config.scraping_strategy,
    )
    yield
    logger.info("ACCREDIT API shutdown")


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="ACCREDIT API",
        description="Coach credential verification against the EMCC and ICF public directories",
        version=__version__,
        lifespan=lifespan,
    )

    config = get_config()

    # CORS - restricted to configured origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    # Request logging and X-Request-ID middleware
    app.add_middleware(BaseHTTPMiddleware, dispatch=request_logging_middleware)

    from accredit.api.routes.health import router as health_router
    from accredit.api.routes.verify import router as verify_router

    app.include_router(verify_router)
    app.include_router(health_router)

    return app


app = create_app()
