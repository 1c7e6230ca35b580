"""Prometheus scrape endpoint.

Serves the HTTP metrics and the progress counters declared in
app/core/metrics.py in text exposition format.  Keep it off the public
ingress; invariant_breaches_total and the toggle rates are internal.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
