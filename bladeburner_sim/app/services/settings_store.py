from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bladeburner_sim.core.settings import SimulationSettings, default_settings, merge_settings

logger = logging.getLogger(__name__)


def _known_keys(data: dict[str, Any]) -> dict[str, Any]:
    defaults = default_settings()
    return {key: value for key, value in data.items() if key in defaults}


class SettingsStore:
    """JSON-backed simulation tuning. Missing or broken files fall back to defaults."""

    def __init__(self, settings_path: Path) -> None:
        self.settings_path = settings_path

    def load(self) -> SimulationSettings:
        if not self.settings_path.exists():
            settings = SimulationSettings()
            self.save(settings)
            return settings
        try:
            payload = json.loads(self.settings_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Settings file %s is not valid JSON; using defaults.", self.settings_path)
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        try:
            settings = merge_settings(_known_keys(payload))
        except ValidationError as exc:
            logger.warning("Settings file %s rejected (%d issues); using defaults.", self.settings_path, exc.error_count())
            settings = SimulationSettings()
        self.save(settings)
        return settings

    def save(self, settings: SimulationSettings | dict[str, Any]) -> None:
        if not isinstance(settings, SimulationSettings):
            settings = merge_settings(settings)
        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        self.settings_path.write_text(json.dumps(settings.as_dict(), indent=2), encoding="utf-8")
