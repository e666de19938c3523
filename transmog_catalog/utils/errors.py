"""Custom exception hierarchy for the transmog catalog.

All application exceptions inherit from :class:`TransmogCatalogError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "blizzard", "wowhead") caused the failure.

The hierarchy is organized by where the failure happens:

    TransmogCatalogError  (base -- catch-all for any catalog error)
    +-- AuthError            (missing or rejected API credentials)
    +-- UpstreamError        (network / non-2xx failure talking to the game API)
    +-- NotFoundError        (a requested set or item does not exist)
    +-- ScrapeError          (best-effort wiki scraping failed)
    +-- ConfigurationError   (startup / missing config)
    +-- HydrationError       (a hydration run could not complete)

Upstream 404 responses are NOT raised as errors by the API client -- they
come back as ``None`` so the caller can treat them as "no data".
:class:`NotFoundError` is reserved for the HTTP layer, where a missing set
must become a 404 for the client.
"""


class TransmogCatalogError(Exception):
    """Base exception for all catalog errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[blizzard] Token request rejected``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Upstream API errors
# ---------------------------------------------------------------------------

class AuthError(TransmogCatalogError):
    """Raised when client credentials are unset or the token endpoint rejects them."""

    def __init__(
        self,
        message: str = "Authentication with the game data API failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UpstreamError(TransmogCatalogError):
    """Raised on a transient network failure or a non-2xx upstream response.

    ``status_code`` is ``None`` when no HTTP response was received at all
    (DNS failure, connection reset, timeout).
    """

    def __init__(
        self,
        message: str = "Upstream request failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._status_code = status_code

    @property
    def status_code(self) -> int | None:
        return self._status_code


class NotFoundError(TransmogCatalogError):
    """Raised by the HTTP layer when a requested set or item does not exist."""

    def __init__(
        self,
        message: str = "Not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ScrapeError(TransmogCatalogError):
    """Raised inside the scrape fallback when a page cannot be fetched or parsed.

    Never surfaces to API clients: the scrape provider's public methods
    catch it and return empty results.
    """

    def __init__(
        self,
        message: str = "Scraping failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration / configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(TransmogCatalogError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class HydrationError(TransmogCatalogError):
    """Raised when a hydration run aborts (e.g. the index fetch failed)."""

    def __init__(
        self,
        message: str = "Hydration run failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
