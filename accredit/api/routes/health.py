"""Health check endpoint."""

import logging

from fastapi import APIRouter

from accredit import __version__
from accredit.api.models import HealthResponse
from accredit.api.routes import verify
from accredit.config import get_config
from accredit.errors import AccreditError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health():
    """Check storage reachability and whether live scraping is configured."""
    storage_ok = False
    try:
        storage_ok = verify._get_service().storage.ping()
    except AccreditError as exc:
        logger.warning("Storage health check failed: %s", exc.message)

    scraping_ok = get_config().scraping_configured

    if storage_ok and scraping_ok:
        status = "healthy"
    elif storage_ok:
        # Verifications still answer, but every live lookup goes to manual review
        status = "degraded"
    else:
        status = "offline"

    return HealthResponse(
        status=status,
        storage_connected=storage_ok,
        scraping_configured=scraping_ok,
        version=__version__,
    )
