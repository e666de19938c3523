"""Unit tests for domain models and configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from transmog_catalog.config.loader import (
    hydration_options,
    load_classification_tables,
    load_config,
)
from transmog_catalog.config.settings import Settings
from transmog_catalog.models.hydration import BatchReport, HydrationReport, SetOutcome
from transmog_catalog.models.item_set import ItemSet, SetItem, normalize_classes
from transmog_catalog.utils.errors import ConfigurationError


# ======================================================================
# ItemSet
# ======================================================================


class TestItemSet:
    def test_defaults(self) -> None:
        item_set = ItemSet(id=1, name="Bare")
        assert item_set.classes == ["All"]
        assert item_set.expansion == "Unknown"
        assert item_set.quality == "Unknown"
        assert item_set.items == []
        assert item_set.is_unrestricted
        assert item_set.needs_refresh()

    def test_complete_record_does_not_need_refresh(self) -> None:
        item_set = ItemSet(id=1, name="x", classes=["Mage"], expansion="Legion")
        assert not item_set.needs_refresh()

    def test_wowhead_link(self) -> None:
        assert ItemSet(id=1060, name="x").wowhead_link == "https://www.wowhead.com/item-set=1060"

    def test_frozen(self) -> None:
        item_set = ItemSet(id=1, name="x")
        with pytest.raises(ValidationError):
            item_set.name = "y"  # type: ignore[misc]

    def test_model_copy_produces_new_instance(self) -> None:
        item_set = ItemSet(id=1, name="x", items=[SetItem(id=5)])
        updated = item_set.model_copy(update={"expansion": "Classic"})
        assert updated.expansion == "Classic"
        assert item_set.expansion == "Unknown"


class TestNormalizeClasses:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (["Death Knight", "warrior"], ["DeathKnight", "Warrior"]),
            (["Mage", "Mage"], ["Mage"]),
            (["Mage", "All"], ["All"]),
            (["Bard"], ["All"]),
            ([], ["All"]),
            (None, ["All"]),
        ],
    )
    def test_normalization(self, raw, expected: list[str]) -> None:
        assert normalize_classes(raw) == expected

    def test_single_string_is_accepted(self) -> None:
        assert ItemSet(id=1, name="x", classes="Demon Hunter").classes == ["DemonHunter"]


# ======================================================================
# Hydration reports
# ======================================================================


class TestReports:
    def test_batch_report_from_outcomes(self) -> None:
        outcomes = [
            SetOutcome.success(ItemSet(id=1, name="a")),
            SetOutcome.failure(2, "timeout"),
        ]
        report = BatchReport.from_outcomes(0, outcomes)
        assert report.succeeded == [1]
        assert [(f.id, f.reason) for f in report.failed] == [(2, "timeout")]

    def test_report_serializes_with_camel_case(self) -> None:
        dumped = HydrationReport(index_size=3).model_dump(by_alias=True, mode="json")
        assert dumped["indexSize"] == 3
        assert dumped["state"] == "Running"
        assert dumped["finishedAt"] is None

    def test_duration_requires_finish(self) -> None:
        assert HydrationReport().duration_seconds is None


# ======================================================================
# Configuration
# ======================================================================


class TestConfig:
    def test_settings_derived_values(self) -> None:
        settings = Settings(blizzard_region="EU", _env_file=None)
        assert settings.api_base_url == "https://eu.api.blizzard.com/data/wow"
        assert settings.static_namespace == "static-eu"
        assert settings.has_credentials is False
        assert settings.get_cors_origins() == ["*"]

    def test_cors_origins_from_frontend_url(self) -> None:
        settings = Settings(frontend_url="https://a.example, https://b.example", _env_file=None)
        assert settings.get_cors_origins() == ["https://a.example", "https://b.example"]

    def test_missing_yaml_uses_env_layer(self, tmp_path: Path) -> None:
        settings = Settings(hydration_batch_size=3, _env_file=None)
        config = load_config(str(tmp_path / "nope.yaml"), settings=settings)
        assert config["hydration"]["batch_size"] == 3

    def test_yaml_hydration_block_drives_pipeline_options(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "hydration:\n  batch_size: 8\n  batch_delay_ms: 250\n  interval_hours: 6\n",
            encoding="utf-8",
        )
        config = load_config(str(path), settings=Settings(_env_file=None))

        assert hydration_options(config) == {
            "batch_size": 8,
            "batch_delay_ms": 250,
            "persist_every": 5,
            "on_startup": True,
            "interval_hours": 6.0,
        }

    def test_explicit_setting_beats_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("hydration:\n  batch_size: 8\n  persist_every: 2\n", encoding="utf-8")
        settings = Settings(hydration_batch_size=3, _env_file=None)

        options = hydration_options(load_config(str(path), settings=settings))

        assert options["batch_size"] == 3
        assert options["persist_every"] == 2

    def test_invalid_hydration_value_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("hydration:\n  batch_size: lots\n", encoding="utf-8")
        config = load_config(str(path), settings=Settings(_env_file=None))
        with pytest.raises(ConfigurationError):
            hydration_options(config)

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("app: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path), settings=Settings(_env_file=None))

    def test_classification_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "classification:\n"
            "  class_keywords:\n"
            "    Rogue: [Shroud]\n"
            "  gladiator_hints:\n"
            "    cowl: [Priest]\n",
            encoding="utf-8",
        )
        config = load_config(str(path), settings=Settings(_env_file=None))
        keywords, hints = load_classification_tables(config)

        assert keywords["Rogue"] == ["shroud"]
        assert "netherwind" in keywords["Mage"]
        assert list(keywords)[0] == "Warrior"
        assert hints["cowl"] == ["Priest"]
        assert hints["wildhide"] == ["Druid"]

    def test_non_list_override_is_rejected(self) -> None:
        config = {"classification": {"class_keywords": {"Rogue": "shroud"}}}
        with pytest.raises(ConfigurationError):
            load_classification_tables(config)
