# Health router.
# Created: 2026-10-12

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from luxbridge import __version__
from luxbridge.api.deps import get_services
from luxbridge.api.v1.schemas.health import HealthSummary
from luxbridge.errors import StoreUnavailableError
from luxbridge.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthSummary)
async def get_health_status(services: Services = Depends(get_services)):
    """Liveness plus a credential store round-trip."""
    try:
        await services.store.ping()
    except StoreUnavailableError as exc:
        logger.warning("Health check: %s", exc.message)
        return HealthSummary(status="degraded", store="unavailable", version=__version__)
    return HealthSummary(version=__version__)
