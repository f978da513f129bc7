"""Cache revalidation webhook and cache statistics.

Admin flows call POST /cache/revalidate after every successful upstream
write. This is the only path that removes entries from the ResponseCache;
the read proxies only ever add them.

Both endpoints require ``Authorization: Bearer <REVALIDATE_SECRET>``.
"""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mindsnack.api.deps import StateDep, require_revalidate_secret
from mindsnack.cache import InvalidationRequest, InvalidationType

router = APIRouter(
    prefix="/cache",
    tags=["cache"],
    dependencies=[Depends(require_revalidate_secret)],
)


class RevalidationResult(BaseModel):
    revalidated: bool
    message: str
    type: InvalidationType
    timestamp: datetime


class CacheStatsResponse(BaseModel):
    timestamp: datetime
    entries: int
    hits: int
    misses: int
    hit_ratio: float
    sweeps: int
    expired_removed: int
    ttl_seconds: float
    sweep_threshold: int
    by_resource: dict[str, int]


@router.post("/revalidate", response_model=RevalidationResult)
async def revalidate(body: InvalidationRequest, state: StateDep) -> RevalidationResult:
    """Purge cached responses and mark rendered pages stale.

    Actions are best-effort: a failing page revalidation does not stop the
    cache purge and vice versa. Failures are logged, not reported here.
    """
    await state.invalidation.apply(body)
    return RevalidationResult(
        revalidated=True,
        message="Cache invalidated successfully",
        type=body.kind,
        timestamp=datetime.now(UTC),
    )


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats(state: StateDep) -> CacheStatsResponse:
    """Entry counts and hit/miss counters for the ResponseCache."""
    stats = state.cache.stats()
    by_resource: Counter[str] = Counter()
    for key in state.cache.keys():
        parsed = state.keys.parse_key(key)
        by_resource[parsed[0] if parsed else "other"] += 1

    return CacheStatsResponse(
        timestamp=datetime.now(UTC),
        entries=stats.entries,
        hits=stats.hits,
        misses=stats.misses,
        hit_ratio=stats.hit_ratio,
        sweeps=stats.sweeps,
        expired_removed=stats.expired_removed,
        ttl_seconds=state.cache.ttl,
        sweep_threshold=state.cache.sweep_threshold,
        by_resource=dict(by_resource),
    )
