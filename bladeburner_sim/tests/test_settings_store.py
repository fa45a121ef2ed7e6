from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from bladeburner_sim.app.services.settings_store import SettingsStore
from bladeburner_sim.core.settings import SimulationSettings, merge_settings


def test_settings_store_read_write(tmp_path: Path) -> None:
    path = tmp_path / "config" / "settings.json"
    store = SettingsStore(path)
    loaded = store.load()
    assert path.exists()
    assert loaded.rank_gain_mult == 1.0
    assert loaded.max_seconds_per_process == 5

    store.save(loaded.model_copy(update={"rank_gain_mult": 2.5, "random_events_enabled": False}))

    reloaded = store.load()
    assert reloaded.rank_gain_mult == 2.5
    assert reloaded.random_events_enabled is False


def test_settings_store_drops_unknown_keys_and_survives_bad_files(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"skill_cost_mult": 0.5, "legacy_option": True}), encoding="utf-8")
    store = SettingsStore(path)

    assert store.load().skill_cost_mult == 0.5
    assert "legacy_option" not in json.loads(path.read_text(encoding="utf-8"))

    path.write_text("{not json", encoding="utf-8")
    assert store.load() == SimulationSettings()

    path.write_text(json.dumps({"rank_gain_mult": -3}), encoding="utf-8")
    assert store.load().rank_gain_mult == 1.0


def test_settings_validation() -> None:
    with pytest.raises(ValidationError):
        merge_settings({"random_event_min_seconds": 600, "random_event_max_seconds": 10})
    assert merge_settings(None) == SimulationSettings()
