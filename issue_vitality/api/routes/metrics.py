"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Response

from issue_vitality.infrastructure.monitoring.vitality_metrics import (
    METRICS_CONTENT_TYPE,
    generate_metrics,
)

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose engine metrics in Prometheus text format."""
    return Response(content=generate_metrics(), media_type=METRICS_CONTENT_TYPE)
