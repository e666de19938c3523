"""Unit tests for BlizzardAPIProvider.

The httpx client is a MagicMock whose ``post``/``get`` are AsyncMocks
returning real ``httpx.Response`` objects; nothing touches the network.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from transmog_catalog.config.settings import Settings
from transmog_catalog.providers.blizzard.blizzard_api_provider import BlizzardAPIProvider
from transmog_catalog.utils.errors import AuthError, UpstreamError
from transmog_catalog.utils.rate_limiter import TokenBucketRateLimiter


class _Clock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _token_response(expires_in: int = 86399) -> httpx.Response:
    return httpx.Response(200, json={"access_token": "tok-abc", "expires_in": expires_in})


def _settings(**overrides) -> Settings:
    values = {
        "blizzard_client_id": "client",
        "blizzard_client_secret": "secret",
        "blizzard_region": "eu",
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)


def _provider(
    settings: Settings | None = None,
    get_responses: list[httpx.Response] | None = None,
    token_response: httpx.Response | None = None,
    clock: _Clock | None = None,
) -> tuple[BlizzardAPIProvider, MagicMock]:
    client = MagicMock(spec=httpx.AsyncClient)
    client.post = AsyncMock(return_value=token_response or _token_response())
    client.get = AsyncMock(side_effect=get_responses or [])
    provider = BlizzardAPIProvider(
        settings=settings or _settings(),
        http_client=client,
        rate_limiter=TokenBucketRateLimiter(rate=1000, capacity=1000),
        clock=clock or _Clock(),
    )
    return provider, client


# ======================================================================
# Token handling
# ======================================================================


class TestToken:
    @pytest.mark.asyncio
    async def test_fetches_token_with_client_credentials(self) -> None:
        provider, client = _provider()
        token = await provider.get_token()

        assert token == "tok-abc"
        call = client.post.await_args
        assert call.args[0] == "https://oauth.battle.net/token"
        assert call.kwargs["data"] == {"grant_type": "client_credentials"}
        assert call.kwargs["auth"] == ("client", "secret")

    @pytest.mark.asyncio
    async def test_token_is_reused_within_validity_window(self) -> None:
        clock = _Clock()
        provider, client = _provider(clock=clock)

        await provider.get_token()
        clock.now += 3600
        await provider.get_token()
        assert client.post.await_count == 1

    @pytest.mark.asyncio
    async def test_token_refreshes_inside_safety_margin(self) -> None:
        clock = _Clock()
        provider, client = _provider(clock=clock, token_response=_token_response(3600))

        await provider.get_token()
        clock.now += 3600 - 59  # less than 60s before the server-side expiry
        await provider.get_token()
        assert client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_credentials_raise_auth_error(self) -> None:
        provider, client = _provider(settings=_settings(blizzard_client_secret=""))
        with pytest.raises(AuthError):
            await provider.get_token()
        client.post.assert_not_awaited()
        assert provider.is_available() is False

    @pytest.mark.asyncio
    async def test_rejected_credentials_raise_auth_error(self) -> None:
        provider, _ = _provider(token_response=httpx.Response(401, json={"error": "invalid"}))
        with pytest.raises(AuthError):
            await provider.get_token()

    @pytest.mark.asyncio
    async def test_token_endpoint_outage_is_upstream_error(self) -> None:
        provider, _ = _provider(token_response=httpx.Response(503))
        with pytest.raises(UpstreamError) as exc_info:
            await provider.get_token()
        assert exc_info.value.status_code == 503


# ======================================================================
# Data requests
# ======================================================================


class TestRequests:
    @pytest.mark.asyncio
    async def test_get_sends_namespace_locale_and_bearer(self) -> None:
        provider, client = _provider(
            get_responses=[httpx.Response(200, json={"id": 1060, "name": "Dreadnaught's"})]
        )
        detail = await provider.get_set_detail(1060)

        assert detail == {"id": 1060, "name": "Dreadnaught's"}
        call = client.get.await_args
        assert call.args[0] == "https://eu.api.blizzard.com/data/wow/item-set/1060"
        assert call.kwargs["params"] == {"namespace": "static-eu", "locale": "en_US"}
        assert call.kwargs["headers"] == {"Authorization": "Bearer tok-abc"}

    @pytest.mark.asyncio
    async def test_not_found_is_none(self) -> None:
        provider, _ = _provider(get_responses=[httpx.Response(404)])
        assert await provider.get_item_detail(1) is None

    @pytest.mark.asyncio
    async def test_server_error_raises_upstream_error(self) -> None:
        provider, _ = _provider(get_responses=[httpx.Response(500)])
        with pytest.raises(UpstreamError) as exc_info:
            await provider.get_item_media(1)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_raises_upstream_error(self) -> None:
        provider, client = _provider()
        client.get = AsyncMock(side_effect=httpx.ConnectTimeout("timed out"))
        with pytest.raises(UpstreamError):
            await provider.get_set_detail(1)

    @pytest.mark.asyncio
    async def test_unauthorized_forces_token_refresh(self) -> None:
        provider, client = _provider(
            get_responses=[httpx.Response(401), httpx.Response(200, json={"id": 2})]
        )
        with pytest.raises(UpstreamError):
            await provider.get_item_detail(2)
        assert await provider.get_item_detail(2) == {"id": 2}
        assert client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_index_parses_entries(self) -> None:
        payload = {
            "item_sets": [
                {"id": 1060, "name": "Dreadnaught's Battlegear"},
                {"id": 2001, "name": {"en_US": "Vestments of Faith", "de_DE": "Gewänder"}},
                {"name": "missing id"},
            ]
        }
        provider, _ = _provider(get_responses=[httpx.Response(200, json=payload)])
        index = await provider.get_index()
        assert [(e.id, e.name) for e in index] == [
            (1060, "Dreadnaught's Battlegear"),
            (2001, "Vestments of Faith"),
        ]

    @pytest.mark.asyncio
    async def test_missing_index_is_an_error(self) -> None:
        provider, _ = _provider(get_responses=[httpx.Response(404)])
        with pytest.raises(UpstreamError):
            await provider.get_index()
