"""Health check endpoints.

- /health/live  - Liveness probe (always OK while the process runs)
- /health/ready - Readiness probe (checks the upstream API)
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from fastapi import APIRouter
from fastapi.responses import ORJSONResponse

from mindsnack.api.deps import StateDep

router = APIRouter(tags=["health"])

UPSTREAM_CHECK_TIMEOUT = 5.0


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    status: HealthStatus
    latency_ms: float
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def check_upstream(client: httpx.AsyncClient, url: str) -> ComponentHealth:
    """Any HTTP answer below 500 counts as reachable."""
    start = time.monotonic()
    try:
        response = await asyncio.wait_for(client.get(url), timeout=UPSTREAM_CHECK_TIMEOUT)
        latency = (time.monotonic() - start) * 1000
        healthy = response.status_code < 500
        return ComponentHealth(
            name="upstream",
            status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
            latency_ms=latency,
            message=None if healthy else f"Upstream returned {response.status_code}",
        )
    except asyncio.TimeoutError:
        latency = (time.monotonic() - start) * 1000
        return ComponentHealth(
            name="upstream",
            status=HealthStatus.UNHEALTHY,
            latency_ms=latency,
            message="Upstream check timed out",
        )
    except httpx.HTTPError as e:
        latency = (time.monotonic() - start) * 1000
        return ComponentHealth(
            name="upstream",
            status=HealthStatus.UNHEALTHY,
            latency_ms=latency,
            message=str(e) or e.__class__.__name__,
        )


@router.get("/health/live")
async def live() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(state: StateDep) -> ORJSONResponse:
    """Readiness probe.

    Returns 200 when the upstream API answers, 503 otherwise. The response
    cache itself is in-process and always available.
    """
    upstream = await check_upstream(state.http_client, state.keys.categories())
    status = upstream.status
    return ORJSONResponse(
        content={
            "status": status.value,
            "components": [upstream.to_dict()],
            "cache_entries": len(state.cache),
        },
        status_code=200 if status == HealthStatus.HEALTHY else 503,
    )
