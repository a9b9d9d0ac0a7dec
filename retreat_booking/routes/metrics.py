"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP retreat_admissions_total Total capacity admission decisions
        # TYPE retreat_admissions_total counter
        retreat_admissions_total{operation="create",outcome="admitted"} 42.0
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
    Expose admission, payment and ledger metrics in Prometheus text format.

    Returns:
        Response: Metrics with Content-Type: text/plain
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
