"""
KK's Cafe Backend - Health Check Route
=======================================

What:  Health check endpoint for monitoring and container probes.
How:   Reads the record store once; the service is only useful if it can.

Status levels:
    - healthy:   store readable (HTTP 200)
    - unhealthy: store unreadable or corrupt (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from kkcafe import __version__
from kkcafe.schemas.drink import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Record store unavailable", "model": HealthResponse}},
)
async def health_check(request: Request):
    store_ok = await request.app.state.drink_service.store.health_check()
    if not store_ok:
        logger.warning("Health check: drink store unavailable")

    body = HealthResponse(
        status="healthy" if store_ok else "unhealthy",
        version=__version__,
        store="available" if store_ok else "unavailable",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=200 if store_ok else 503, content=body.model_dump())
