"""Health check: reports whether the document store is reachable."""

import logging
from typing import Any

from core.config import get_config
from core.http import api_response
from core.services.registry import get_store

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    config = get_config()
    healthy = get_store().health_check()
    if not healthy:
        logger.warning("Health check failed in %s", config.environment)
    return api_response(
        200 if healthy else 503,
        success=healthy,
        message="TravelTrack API is running" if healthy else "Document store unavailable",
        data={"environment": config.environment, "database": "ok" if healthy else "unavailable"},
    )
