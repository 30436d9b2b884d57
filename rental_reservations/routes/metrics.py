"""
Prometheus metrics endpoint for monitoring and observability.

Example:
    GET /metrics

    Response:
        # HELP reservation_operations_total Total number of reservation lifecycle operations by outcome
        # TYPE reservation_operations_total counter
        reservation_operations_total{operation="create",outcome="success"} 42.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """
    Prometheus metrics endpoint.

    Returns:
        Response: Metrics in Prometheus text format, Content-Type text/plain
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
