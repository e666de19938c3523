"""Abstract base class for the upstream game-data API client.

The hydration pipeline and the serving layer only ever talk to the game
data service through this contract, so tests can substitute a fake that
returns canned payloads without touching the network.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SetIndexEntry:
    """One entry of the upstream item-set index.

    Attributes
    ----------
    id:
        Stable upstream identifier of the set.
    name:
        Display name as listed in the index.
    """

    id: int
    name: str


class IGameDataProvider(ABC):
    """Contract for the bearer-authenticated game data REST API.

    Detail lookups return ``None`` when the upstream answers 404; only
    genuine failures raise.
    """

    @abstractmethod
    async def get_token(self) -> str:
        """Return a valid bearer token, refreshing it when absent or expired.

        Raises
        ------
        transmog_catalog.utils.errors.AuthError
            If credentials are unset or the token endpoint rejects them.
        """

    @abstractmethod
    async def get_index(self) -> list[SetIndexEntry]:
        """Return every item set listed in the upstream index.

        Raises
        ------
        transmog_catalog.utils.errors.UpstreamError
            On a network failure or a non-2xx response.
        """

    @abstractmethod
    async def get_set_detail(self, set_id: int) -> dict[str, Any] | None:
        """Return the raw set payload, or ``None`` if the set does not exist."""

    @abstractmethod
    async def get_item_detail(self, item_id: int) -> dict[str, Any] | None:
        """Return the raw item payload, or ``None`` if the item does not exist."""

    @abstractmethod
    async def get_item_media(self, item_id: int) -> dict[str, Any] | None:
        """Return the raw item media payload, or ``None`` if it does not exist."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs and error messages."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when credentials are configured."""
