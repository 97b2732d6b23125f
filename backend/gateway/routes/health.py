"""
Backend Gateway — Status Routes
=================================

What:  GET / (liveness banner) and GET /health (service and dependency status).
How:   /health probes the database with SELECT 1 on a pooled connection and
       reports service, uptime and host details alongside it.
Who:   Called by container health checks, load balancers and monitoring.

Memory is reported as whole megabytes of resident and virtual size (psutil).

Status levels:
    ok:       database reachable
    degraded: database unreachable (still HTTP 200 so the payload is readable)
"""

import logging
import os
import platform
import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncEngine

from gateway import __version__
from gateway.config import settings
from gateway.database import get_engine, ping
from gateway.schemas.health import (
    HealthResponse,
    MemoryInfo,
    RootResponse,
    ServiceInfo,
    SystemInfo,
    UptimeInfo,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Process start, for uptime reporting
_start_time = time.time()


def format_uptime(ms: int) -> str:
    """
    Render a duration in milliseconds as the largest useful units.

        >>> format_uptime(3_725_000)
        '1h 2m 5s'
    """
    seconds = ms // 1000
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d {hours % 24}h {minutes % 60}m"
    if hours > 0:
        return f"{hours}h {minutes % 60}m {seconds % 60}s"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def format_megabytes(num_bytes: int) -> str:
    return f"{round(num_bytes / 1024 / 1024)} MB"


def memory_snapshot() -> MemoryInfo:
    """Current resident and virtual size of this process."""
    usage = psutil.Process().memory_info()
    return MemoryInfo(rss=format_megabytes(usage.rss), vms=format_megabytes(usage.vms))


@router.get("/", response_model=RootResponse, summary="Service banner")
async def root() -> RootResponse:
    return RootResponse(message="Backend Gateway Service is running..!")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the service and its database. "
        "Used by container health checks and load balancers."
    ),
)
async def health_check(bind: AsyncEngine = Depends(get_engine)) -> HealthResponse:
    """
    Check the health of the service and its database.

    Database: SELECT 1 on a fresh pooled connection.
    """
    database_ok = await ping(bind)
    uptime_ms = int((time.time() - _start_time) * 1000)

    return HealthResponse(
        status="ok" if database_ok else "degraded",
        message=(
            "Service is healthy and running"
            if database_ok
            else "Service is running but the database is unreachable"
        ),
        timestamp=datetime.now(timezone.utc),
        database="connected" if database_ok else "disconnected",
        service=ServiceInfo(
            name=settings.service_name,
            version=__version__,
            environment=settings.environment,
        ),
        uptime=UptimeInfo(
            milliseconds=uptime_ms,
            seconds=uptime_ms // 1000,
            formatted=format_uptime(uptime_ms),
        ),
        system=SystemInfo(
            python_version=platform.python_version(),
            platform=platform.system().lower(),
            architecture=platform.machine(),
            pid=os.getpid(),
        ),
        memory=memory_snapshot(),
    )
