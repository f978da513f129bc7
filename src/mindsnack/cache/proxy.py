"""Read-through proxy for upstream GET endpoints.

Cache-aside, one proxy per upstream resource collection:

1. Look up the upstream URL in the ResponseCache; a valid entry is served
   as a hit.
2. Otherwise fetch upstream directly, store the body and serve it as a miss.
3. Upstream errors are surfaced with the upstream status code and are
   never cached.

Two concurrent misses for the same key both go upstream and both store;
the last write wins. No lock is held while the request is in flight.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
import orjson

from mindsnack.cache.store import CacheWriteError, ResponseCache

logger = logging.getLogger(__name__)

UPSTREAM_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "Cache-Control": "no-cache",
}


class UpstreamFetchError(Exception):
    """Upstream was unreachable or answered with a non-2xx status.

    ``status_code`` is the upstream status when one was received, 500
    otherwise.
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{message} (status {status_code})")


@dataclass(frozen=True)
class ProxyResult:
    key: str
    body: bytes
    hit: bool

    @property
    def cache_status(self) -> str:
        return "HIT" if self.hit else "MISS"


class ReadThroughProxy:
    """Serve one upstream resource collection through the ResponseCache."""

    def __init__(
        self,
        resource: str,
        cache: ResponseCache,
        client: httpx.AsyncClient,
        failure_message: str,
    ):
        self.resource = resource
        self.cache = cache
        self.client = client
        self.failure_message = failure_message

    async def fetch(self, url: str) -> ProxyResult:
        """Return the body for ``url`` from cache or upstream.

        Raises:
            UpstreamFetchError: upstream unreachable, non-2xx, or not JSON
        """
        cached = self.cache.get(url)
        if cached is not None and self.cache.is_valid(cached):
            self.cache.record_hit()
            logger.debug("Cache hit", extra={"cache_key": url, "resource": self.resource})
            return ProxyResult(key=url, body=cached.body, hit=True)

        self.cache.record_miss()
        logger.debug("Cache miss", extra={"cache_key": url, "resource": self.resource})

        payload, raw = await self._fetch_upstream(url)

        try:
            entry = self.cache.set(url, payload)
            body = entry.body
        except CacheWriteError:
            logger.warning(
                "Cache storage failed", extra={"cache_key": url}, exc_info=True
            )
            body = raw

        return ProxyResult(key=url, body=body, hit=False)

    async def _fetch_upstream(self, url: str) -> tuple[object, bytes]:
        try:
            response = await self.client.get(url, headers=UPSTREAM_HEADERS)
        except httpx.HTTPError as e:
            logger.error(
                f"Error fetching {self.resource}: {e}",
                extra={"cache_key": url, "resource": self.resource},
            )
            raise UpstreamFetchError(500, "Internal server error") from e

        if not response.is_success:
            logger.warning(
                f"Upstream returned {response.status_code} for {self.resource}",
                extra={"cache_key": url, "status_code": response.status_code},
            )
            raise UpstreamFetchError(response.status_code, self.failure_message)

        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            logger.error(
                f"Upstream returned invalid JSON for {self.resource}",
                extra={"cache_key": url},
            )
            raise UpstreamFetchError(500, "Internal server error") from e

        return payload, response.content
