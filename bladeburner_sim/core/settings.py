from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

CYCLES_PER_SECOND = 5


class SimulationSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Global multipliers (per-game-mode tuning).
    rank_gain_mult: float = Field(default=1.0, gt=0)
    skill_cost_mult: float = Field(default=1.0, gt=0)
    success_chance_mult: float = Field(default=1.0, gt=0)
    max_stamina_mult: float = Field(default=1.0, gt=0)
    stamina_gain_mult: float = Field(default=1.0, gt=0)

    stamina_cost_per_second: float = Field(default=0.1, ge=0)
    failure_stamina_fraction: float = Field(default=0.5, ge=0, le=1)
    ranks_per_skill_point: float = Field(default=3.0, gt=0)

    chaos_threshold: float = Field(default=50.0, ge=0)
    chaos_decay_per_second: float = Field(default=0.0001, ge=0)
    population_threshold: float = Field(default=1e9, gt=0)
    population_exponent: float = Field(default=0.7, gt=0)

    action_count_growth_period: float = Field(default=480.0, gt=0)
    max_seconds_per_process: int = Field(default=5, ge=1, le=60)
    random_event_min_seconds: int = Field(default=240, ge=1)
    random_event_max_seconds: int = Field(default=600, ge=1)
    random_events_enabled: bool = True

    @model_validator(mode="after")
    def validate_event_window(self) -> "SimulationSettings":
        if self.random_event_max_seconds < self.random_event_min_seconds:
            raise ValueError("random_event_max_seconds must be >= random_event_min_seconds.")
        return self

    def as_dict(self) -> dict[str, Any]:
        return json.loads(self.model_dump_json())


def merge_settings(payload: dict[str, Any] | None) -> SimulationSettings:
    if not isinstance(payload, dict):
        payload = {}
    return SimulationSettings.model_validate(payload)


def default_settings() -> dict[str, Any]:
    return SimulationSettings().as_dict()
