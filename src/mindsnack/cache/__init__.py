"""Response cache for upstream API reads.

- ResponseCache: in-memory, TTL-validated store keyed by upstream URL
- ReadThroughProxy: cache-aside reads, one per upstream collection
- InvalidationRouter: targeted purges plus page-cache revalidation
"""

from mindsnack.cache.invalidation import (
    InvalidationOutcome,
    InvalidationPlan,
    InvalidationRequest,
    InvalidationRouter,
    InvalidationType,
)
from mindsnack.cache.keys import CacheKeys
from mindsnack.cache.pages import (
    LoggingPageRevalidator,
    PageRevalidationError,
    PageRevalidator,
    PageScope,
    PageTarget,
    WebhookPageRevalidator,
)
from mindsnack.cache.proxy import ProxyResult, ReadThroughProxy, UpstreamFetchError
from mindsnack.cache.store import CacheEntry, CacheStats, CacheWriteError, ResponseCache

__all__ = [
    # Store
    "CacheEntry",
    "CacheKeys",
    "CacheStats",
    "CacheWriteError",
    "ResponseCache",
    # Reads
    "ProxyResult",
    "ReadThroughProxy",
    "UpstreamFetchError",
    # Invalidation
    "InvalidationOutcome",
    "InvalidationPlan",
    "InvalidationRequest",
    "InvalidationRouter",
    "InvalidationType",
    "LoggingPageRevalidator",
    "PageRevalidationError",
    "PageRevalidator",
    "PageScope",
    "PageTarget",
    "WebhookPageRevalidator",
]
