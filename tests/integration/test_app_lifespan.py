"""Integration tests for application wiring in ``transmog_catalog.main``."""

from __future__ import annotations

import json
from pathlib import Path

from fastapi.testclient import TestClient

from transmog_catalog.config.settings import Settings
from transmog_catalog.main import create_app
from transmog_catalog.pipeline.hydration_pipeline import HydrationPipeline
from transmog_catalog.providers.store.json_set_store import JsonSetStore


def _settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "blizzard_client_id": "",
        "blizzard_client_secret": "",
        "cache_file": str(tmp_path / "transmogs.json"),
        "config_file": str(tmp_path / "missing.yaml"),
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)


class TestLifespan:
    def test_cold_start_without_credentials_serves_empty_catalog(self, tmp_path: Path) -> None:
        app = create_app(_settings(tmp_path))
        with TestClient(app) as client:
            assert isinstance(app.state.store, JsonSetStore)
            assert isinstance(app.state.pipeline, HydrationPipeline)
            assert app.state.scheduler.running is False

            health = client.get("/api/health").json()
            assert health["sets"] == 0
            assert health["hydration"] == "Idle"

            started = client.post("/api/hydration/run").json()
            assert started["started"] is False

    def test_existing_cache_file_is_loaded(self, tmp_path: Path) -> None:
        cache_file = tmp_path / "transmogs.json"
        cache_file.write_text(
            json.dumps(
                [{"id": 1060, "name": "Dreadnaught's Battlegear", "classes": ["Warrior"]}]
            ),
            encoding="utf-8",
        )
        with TestClient(create_app(_settings(tmp_path))) as client:
            body = client.get("/api/transmogs").json()
            assert body["pagination"]["totalItems"] == 1
            assert body["transmogs"][0]["items"] == []

    def test_cors_wildcard_by_default(self, tmp_path: Path) -> None:
        with TestClient(create_app(_settings(tmp_path))) as client:
            response = client.get("/api/health", headers={"Origin": "https://example.com"})
            assert response.headers["access-control-allow-origin"] == "*"
