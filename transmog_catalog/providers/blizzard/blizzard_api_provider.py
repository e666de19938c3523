"""Blizzard Game Data API client.

Implements IGameDataProvider over the region-scoped World of Warcraft data
API.  Authentication uses the OAuth2 client-credentials grant; the bearer
token is cached until sixty seconds before the server-reported expiry.

Every outbound request (token and data) first takes a token from the
injected :class:`TokenBucketRateLimiter`, so hydration bursts and live icon
lookups share one upstream quota.

Error policy:
    - 404 on a detail lookup returns ``None`` ("no data"), never raises.
    - Rejected credentials raise :class:`AuthError`.
    - Any other non-2xx status or transport failure raises
      :class:`UpstreamError` carrying the status code when one exists.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import httpx

from transmog_catalog.config.settings import Settings
from transmog_catalog.interfaces.game_data_provider import IGameDataProvider, SetIndexEntry
from transmog_catalog.services.payloads import localized_name
from transmog_catalog.utils.errors import AuthError, UpstreamError
from transmog_catalog.utils.logging import get_logger
from transmog_catalog.utils.rate_limiter import TokenBucketRateLimiter

_PROVIDER_NAME = "blizzard"
_TOKEN_SAFETY_MARGIN_MS = 60_000
_AUTH_REJECTED_STATUSES = (400, 401, 403)


class BlizzardAPIProvider(IGameDataProvider):
    """Game data provider backed by the Blizzard REST API.

    Parameters
    ----------
    settings:
        Supplies credentials, region and locale.
    http_client:
        Injected ``httpx.AsyncClient`` for connection pooling and testability.
    rate_limiter:
        Shared token bucket; one is built from settings when omitted.
    clock:
        Wall-clock source in seconds, injectable so tests can advance time
        across token expiry.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        rate_limiter: TokenBucketRateLimiter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._limiter = rate_limiter or TokenBucketRateLimiter(
            rate=settings.upstream_rate_per_second,
            capacity=settings.upstream_burst,
        )
        self._clock = clock
        self._access_token: str | None = None
        self._token_expiry_ms: int = 0
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _token_valid(self) -> bool:
        return self._access_token is not None and self._now_ms() < self._token_expiry_ms

    async def _fetch_token(self) -> str:
        await self._limiter.acquire()
        try:
            response = await self._http.post(
                self._settings.oauth_url,
                data={"grant_type": "client_credentials"},
                auth=(self._settings.blizzard_client_id, self._settings.blizzard_client_secret),
            )
        except httpx.HTTPError as exc:
            self._logger.error("token_request_failed", error=str(exc))
            raise UpstreamError(
                message=f"Token request failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if response.status_code in _AUTH_REJECTED_STATUSES:
            self._logger.error("token_rejected", status=response.status_code)
            raise AuthError(
                message="Token endpoint rejected the client credentials",
                provider_name=_PROVIDER_NAME,
            )
        if response.status_code >= 400:
            raise UpstreamError(
                message=f"Token endpoint returned HTTP {response.status_code}",
                provider_name=_PROVIDER_NAME,
                status_code=response.status_code,
            )

        payload = response.json()
        token = payload.get("access_token")
        if not token:
            raise AuthError(
                message="Token response did not include an access token",
                provider_name=_PROVIDER_NAME,
            )

        expires_in = int(payload.get("expires_in", 0))
        self._access_token = token
        self._token_expiry_ms = self._now_ms() + expires_in * 1000 - _TOKEN_SAFETY_MARGIN_MS
        self._logger.info("token_refreshed", expires_in=expires_in)
        return token

    async def _get(self, path: str) -> dict[str, Any] | None:
        """Issue an authenticated GET; ``None`` on 404."""
        token = await self.get_token()
        await self._limiter.acquire()

        url = f"{self._settings.api_base_url}{path}"
        params = {
            "namespace": self._settings.static_namespace,
            "locale": self._settings.blizzard_locale,
        }
        try:
            response = await self._http.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            self._logger.warning("upstream_request_failed", path=path, error=str(exc))
            raise UpstreamError(
                message=f"GET {path} failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if response.status_code == 404:
            self._logger.debug("upstream_not_found", path=path)
            return None
        if response.status_code == 401:
            # Force a fresh token on the next call.
            self._access_token = None
            self._token_expiry_ms = 0
        if response.status_code >= 400:
            self._logger.warning(
                "upstream_request_failed", path=path, status=response.status_code
            )
            raise UpstreamError(
                message=f"GET {path} returned HTTP {response.status_code}",
                provider_name=_PROVIDER_NAME,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                message=f"GET {path} returned invalid JSON",
                provider_name=_PROVIDER_NAME,
                status_code=response.status_code,
            ) from exc

    # -- IGameDataProvider implementation ---------------------------------------

    async def get_token(self) -> str:
        """Return the cached bearer token, refreshing it when expired.

        The check is not locked: two concurrent callers that both see an
        expired token may each fetch one.  The endpoint is idempotent, so
        the second token simply replaces the first.
        """
        if self._token_valid():
            return self._access_token  # type: ignore[return-value]
        if not self._settings.has_credentials:
            raise AuthError(
                message="BLIZZARD_CLIENT_ID and BLIZZARD_CLIENT_SECRET must be set",
                provider_name=_PROVIDER_NAME,
            )
        return await self._fetch_token()

    async def get_index(self) -> list[SetIndexEntry]:
        payload = await self._get("/item-set/index")
        if payload is None:
            raise UpstreamError(
                message="Item set index not found",
                provider_name=_PROVIDER_NAME,
                status_code=404,
            )

        entries: list[SetIndexEntry] = []
        for raw in payload.get("item_sets") or []:
            try:
                entries.append(
                    SetIndexEntry(
                        id=int(raw["id"]),
                        name=localized_name(raw.get("name"), self._settings.blizzard_locale),
                    )
                )
            except (KeyError, TypeError, ValueError):
                self._logger.debug("index_entry_skipped", entry=str(raw)[:120])
        self._logger.info("index_fetched", count=len(entries))
        return entries

    async def get_set_detail(self, set_id: int) -> dict[str, Any] | None:
        return await self._get(f"/item-set/{set_id}")

    async def get_item_detail(self, item_id: int) -> dict[str, Any] | None:
        return await self._get(f"/item/{item_id}")

    async def get_item_media(self, item_id: int) -> dict[str, Any] | None:
        return await self._get(f"/media/item/{item_id}")

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return self._settings.has_credentials
