"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - booking_transitions_total{operation, outcome}
    - booking_quotes_total{provider_kind}
    - transport_retries_total{reason}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
