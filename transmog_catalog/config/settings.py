"""Application settings loaded from environment variables via pydantic-settings.

Values are read from two sources, in priority order:

  1. Environment variables, e.g. ``BLIZZARD_CLIENT_ID=abc123`` (always wins)
  2. A ``.env`` file in the project root (local development)

Field names map to env vars by upper-casing: ``blizzard_region`` is read
from ``BLIZZARD_REGION``.  Defaults apply when neither source sets a value.

Missing Blizzard credentials are not an error here: the server still starts
and serves whatever the cache file holds, it just cannot hydrate.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

APP_VERSION = "0.1.0"

_OAUTH_URL = "https://oauth.battle.net/token"
_API_BASE_TEMPLATE = "https://{region}.api.blizzard.com/data/wow"


class Settings(BaseSettings):
    """Transmog catalog settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # === Blizzard Game Data API ===
    blizzard_client_id: str = ""
    blizzard_client_secret: str = ""
    blizzard_region: str = "us"
    blizzard_locale: str = "en_US"

    # === Persistence ===
    cache_file: str = "data/transmogs.json"
    item_cache_file: str = "data/item_cache.json"
    config_file: str = "config/config.yaml"

    # === Hydration ===
    hydration_batch_size: int = 4
    hydration_batch_delay_ms: int = 750
    hydration_persist_every: int = 5  # batches between disk writes
    hydration_on_startup: bool = True
    hydration_interval_hours: float = 0  # 0 disables the periodic timer

    # === Upstream throttling ===
    upstream_rate_per_second: float = 20
    upstream_burst: int = 20
    upstream_timeout_seconds: float = 15

    # === Response cache ===
    response_cache_ttl: int = 3600
    response_cache_size: int = 512

    # === Scrape fallback ===
    scrape_enabled: bool = True

    # === App Config ===
    app_host: str = "0.0.0.0"
    port: int = 5001
    frontend_url: str = ""  # CORS origin; "*" when unset
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def has_credentials(self) -> bool:
        """True when both halves of the client-credentials pair are set."""
        return bool(self.blizzard_client_id and self.blizzard_client_secret)

    @property
    def oauth_url(self) -> str:
        return _OAUTH_URL

    @property
    def api_base_url(self) -> str:
        return _API_BASE_TEMPLATE.format(region=self.blizzard_region.lower())

    @property
    def static_namespace(self) -> str:
        return f"static-{self.blizzard_region.lower()}"

    def get_cors_origins(self) -> list[str]:
        """Return the allowed CORS origins derived from ``FRONTEND_URL``."""
        if not self.frontend_url:
            return ["*"]
        return [origin.strip() for origin in self.frontend_url.split(",") if origin.strip()]
