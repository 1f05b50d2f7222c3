"""Health and metrics routes."""

from __future__ import annotations

import aiofiles.os
from dishka import FromDishka
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from quart import Blueprint, Response, jsonify
from quart_dishka import inject

from smolpaste.config import Settings
from smolpaste.logging_utils import create_service_logger
from smolpaste.protocols import BlobStoreProtocol, PasteRepositoryProtocol

logger = create_service_logger("api.health")
health_bp = Blueprint("health_routes", __name__)


@health_bp.route("/healthz")
@inject
async def health_check(
    repository: FromDishka[PasteRepositoryProtocol],
    blob_store: FromDishka[BlobStoreProtocol],
    settings: FromDishka[Settings],
) -> tuple[Response, int]:
    """Report whether the paste directory and the database are usable."""
    checks = {"paste_directory": False, "database": False}

    checks["paste_directory"] = bool(await aiofiles.os.path.isdir(blob_store.root))
    try:
        await repository.ping()
        checks["database"] = True
    except Exception as e:
        logger.error(f"Health check database ping failed: {e}")

    healthy = all(checks.values())
    body = {
        "service": settings.SERVICE_NAME,
        "status": "healthy" if healthy else "unhealthy",
        "checks": checks,
    }
    return jsonify(body), 200 if healthy else 503


@health_bp.route("/metrics")
@inject
async def metrics(registry: FromDishka[CollectorRegistry]) -> Response:
    """Prometheus metrics endpoint."""
    try:
        return Response(generate_latest(registry), content_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}", exc_info=True)
        return Response("Error generating metrics", status=500)
