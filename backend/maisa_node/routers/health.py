"""Liveness probe for the node service."""

from fastapi import APIRouter

from maisa_node import __version__
from maisa_node.core.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
def node_health() -> dict:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": __version__,
        "apiVariant": settings.maisa_api_variant,
        "workerConfigured": bool(settings.maisa_base_url),
    }
