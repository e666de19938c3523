"""Utility modules for the transmog catalog.

- **errors** -- exception hierarchy rooted at TransmogCatalogError.
- **concurrency** -- semaphore-bounded fan-out helpers.
- **rate_limiter** -- token bucket wrapped around every upstream request.
- **logging** -- structlog setup with console/JSON renderers.
"""

from transmog_catalog.utils.concurrency import gather_settled, throttled_gather
from transmog_catalog.utils.errors import (
    AuthError,
    ConfigurationError,
    HydrationError,
    NotFoundError,
    ScrapeError,
    TransmogCatalogError,
    UpstreamError,
)
from transmog_catalog.utils.logging import configure_logging, get_logger
from transmog_catalog.utils.rate_limiter import TokenBucketRateLimiter

__all__ = [
    "AuthError",
    "ConfigurationError",
    "HydrationError",
    "NotFoundError",
    "ScrapeError",
    "TokenBucketRateLimiter",
    "TransmogCatalogError",
    "UpstreamError",
    "configure_logging",
    "gather_settled",
    "get_logger",
    "throttled_gather",
]
