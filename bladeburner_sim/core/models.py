from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .settings import SimulationSettings

StatName = Literal["hacking", "strength", "defense", "dexterity", "agility", "charisma", "intelligence"]
ChanceModel = Literal["stats", "certain", "recruitment"]
SkillEffect = Literal[
    "successChanceAll",
    "successChanceStealth",
    "successChanceKill",
    "successChanceContract",
    "successChanceOperation",
    "successChanceEstimate",
    "actionTime",
    "effStrength",
    "effDefense",
    "effDexterity",
    "effAgility",
    "effCharisma",
    "stamina",
]
ActionLogCategory = Literal["ACTION", "SUCCESS", "FAILURE", "CITY", "SKILL", "TEAM", "EVENT", "SYSTEM"]

STAT_NAMES: tuple[StatName, ...] = (
    "hacking",
    "strength",
    "defense",
    "dexterity",
    "agility",
    "charisma",
    "intelligence",
)
CITY_NAMES: tuple[str, ...] = ("Aevum", "Chongqing", "Sector-12", "New Tokyo", "Ishima", "Volhaven")
DEFAULT_CITY = "Sector-12"


class ActionType(str, Enum):
    CONTRACT = "contract"
    OPERATION = "operation"
    BLACK_OP = "blackop"
    GENERAL = "general"

    @property
    def label(self) -> str:
        return _TYPE_LABELS[self]

    @property
    def has_pool(self) -> bool:
        return self in (ActionType.CONTRACT, ActionType.OPERATION)

    @property
    def costs_stamina(self) -> bool:
        return self is not ActionType.GENERAL


_TYPE_LABELS = {
    ActionType.CONTRACT: "Contracts",
    ActionType.OPERATION: "Operations",
    ActionType.BLACK_OP: "BlackOps",
    ActionType.GENERAL: "General",
}


def action_key(action_type: ActionType, name: str) -> str:
    return f"{action_type.value}:{name}"


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class StatWeights(StrictModel):
    hacking: float = Field(default=0.0, ge=0)
    strength: float = Field(default=0.0, ge=0)
    defense: float = Field(default=0.0, ge=0)
    dexterity: float = Field(default=0.0, ge=0)
    agility: float = Field(default=0.0, ge=0)
    charisma: float = Field(default=0.0, ge=0)
    intelligence: float = Field(default=0.0, ge=0)

    def get(self, stat: StatName) -> float:
        return float(getattr(self, stat))


class OperativeStats(StrictModel):
    hacking: float = Field(default=1.0, ge=0)
    strength: float = Field(default=100.0, ge=0)
    defense: float = Field(default=100.0, ge=0)
    dexterity: float = Field(default=100.0, ge=0)
    agility: float = Field(default=100.0, ge=0)
    charisma: float = Field(default=1.0, ge=0)
    intelligence: float = Field(default=0.0, ge=0)

    def get(self, stat: StatName) -> float:
        return float(getattr(self, stat))


class ActionDefinition(StrictModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    name: str = Field(min_length=1)
    type: ActionType
    description: str = ""
    base_difficulty: float = Field(alias="baseDifficulty", gt=0)
    difficulty_fac: float = Field(default=1.01, alias="difficultyFac", ge=1)
    reward_fac: float = Field(default=1.02, alias="rewardFac", ge=1)
    rank_gain: float = Field(default=0.0, alias="rankGain", ge=0)
    rank_loss: float = Field(default=0.0, alias="rankLoss", ge=0)
    max_level: int | None = Field(default=None, alias="maxLevel", ge=1)
    successes_per_level: float | None = Field(default=None, alias="successesPerLevel", gt=0)
    required_rank: float | None = Field(default=None, alias="requiredRank", ge=0)
    duration: float | None = Field(default=None, gt=0)
    charisma_scaled_duration: bool = Field(default=False, alias="charismaScaledDuration")
    chance_model: ChanceModel | None = Field(default=None, alias="chanceModel")
    weights: StatWeights = Field(default_factory=StatWeights)
    decays: StatWeights = Field(default_factory=StatWeights)
    is_stealth: bool = Field(default=False, alias="isStealth")
    is_kill: bool = Field(default=False, alias="isKill")
    team_capable: bool = Field(default=False, alias="teamCapable")
    requires_communities: bool = Field(default=False, alias="requiresCommunities")
    count_range: tuple[int, int] | None = Field(default=None, alias="count")
    count_growth_range: tuple[float, float] | None = Field(default=None, alias="countGrowth")
    on_success: list[dict[str, Any]] = Field(default_factory=list, alias="onSuccess")
    on_failure: list[dict[str, Any]] = Field(default_factory=list, alias="onFailure")

    @model_validator(mode="after")
    def validate_shape(self) -> "ActionDefinition":
        if self.type is ActionType.BLACK_OP and self.required_rank is None:
            raise ValueError(f"BlackOp '{self.name}' must declare requiredRank.")
        if self.type is not ActionType.BLACK_OP and self.required_rank is not None:
            raise ValueError(f"Only BlackOps may declare requiredRank ('{self.name}').")
        if self.type.has_pool:
            if self.count_range is None or self.count_growth_range is None:
                raise ValueError(f"'{self.name}' needs count and countGrowth ranges.")
            if self.successes_per_level is None:
                raise ValueError(f"'{self.name}' needs successesPerLevel.")
        if self.count_range is not None and self.count_range[0] > self.count_range[1]:
            raise ValueError(f"'{self.name}' count range is inverted.")
        if self.count_growth_range is not None and self.count_growth_range[0] > self.count_growth_range[1]:
            raise ValueError(f"'{self.name}' countGrowth range is inverted.")
        if self.type is ActionType.GENERAL and self.duration is None:
            raise ValueError(f"General action '{self.name}' needs a duration.")
        return self

    @property
    def initial_max_level(self) -> int:
        if self.type.has_pool:
            return self.max_level or 1
        return 1

    @property
    def level_cap(self) -> int | None:
        """Hard cap on the unlocked level; None while the action keeps scaling."""
        if self.type.has_pool:
            return self.max_level
        return 1

    @property
    def effective_chance_model(self) -> ChanceModel:
        if self.chance_model is not None:
            return self.chance_model
        return "certain" if self.type is ActionType.GENERAL else "stats"


class SkillDefinition(StrictModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    name: str = Field(min_length=1)
    description: str = ""
    base_cost: float = Field(alias="baseCost", gt=0)
    cost_inc: float = Field(alias="costInc", ge=1)
    max_level: int | None = Field(default=None, alias="maxLevel", ge=1)
    effects: dict[SkillEffect, float] = Field(min_length=1)


class CityState(StrictModel):
    name: str = Field(min_length=1)
    population: float = Field(ge=0)
    population_estimate: float = Field(ge=0)
    communities: int = Field(default=0, ge=0)
    chaos: float = Field(default=0.0, ge=0)


class ActionProgress(StrictModel):
    level: int = Field(default=1, ge=1)
    max_level: int = Field(default=1, ge=1)
    auto_level: bool = False
    count: float | None = Field(default=None, ge=0)
    count_growth: float = Field(default=0.0, ge=0)
    successes: int = Field(default=0, ge=0)
    failures: int = Field(default=0, ge=0)
    team_size: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_level(self) -> "ActionProgress":
        if self.level > self.max_level:
            raise ValueError("Action level cannot exceed its unlocked max level.")
        return self

    @property
    def remaining(self) -> float:
        return float("inf") if self.count is None else self.count


class CurrentAction(StrictModel):
    action_type: ActionType
    name: str = Field(min_length=1)
    elapsed_time: float = Field(default=0.0, ge=0)
    total_duration: float = Field(gt=0)
    overflow_time: float = Field(default=0.0, ge=0)

    @property
    def key(self) -> str:
        return action_key(self.action_type, self.name)

    @property
    def progress_seconds(self) -> float:
        return min(self.elapsed_time + self.overflow_time, self.total_duration)


class ActionLogEntry(StrictModel):
    sim_time: float = Field(default=0.0, ge=0)
    category: ActionLogCategory
    message: str = Field(min_length=1)
    details: dict[str, Any] = Field(default_factory=dict)

    def format(self) -> str:
        return f"[t={self.sim_time:9.1f}] [{self.category}] {self.message}"


class OperativeSession(StrictModel):
    seed: int | str
    rank: float = Field(default=0.0, ge=0)
    max_rank: float = Field(default=0.0, ge=0)
    skill_points: int = Field(default=0, ge=0)
    total_skill_points: int = Field(default=0, ge=0)
    skill_levels: dict[str, int] = Field(default_factory=dict)
    stamina: float = Field(default=1.0, ge=0)
    max_stamina: float = Field(default=1.0, gt=0)
    stamina_bonus: float = Field(default=0.0, ge=0)
    stats: OperativeStats = Field(default_factory=OperativeStats)
    city: str = DEFAULT_CITY
    cities: dict[str, CityState]
    actions: dict[str, ActionProgress] = Field(default_factory=dict)
    completed_black_ops: set[str] = Field(default_factory=set)
    personnel: int = Field(default=0, ge=0)
    team_lost: int = Field(default=0, ge=0)
    current_action: CurrentAction | None = None
    stored_cycles: float = Field(default=0.0, ge=0)
    sim_seconds: float = Field(default=0.0, ge=0)
    random_event_timer: float = Field(default=0.0, ge=0)
    rng_state: int = Field(gt=0)
    rng_calls: int = Field(default=0, ge=0)
    action_log: list[ActionLogEntry] = Field(default_factory=list)
    action_log_max: int = Field(default=300, ge=50, le=1000)
    settings: SimulationSettings = Field(default_factory=SimulationSettings)

    @field_validator("skill_levels")
    @classmethod
    def validate_skill_levels(cls, levels: dict[str, int]) -> dict[str, int]:
        for skill_name, level in levels.items():
            if level < 0:
                raise ValueError(f"Skill level for '{skill_name}' cannot be negative.")
        return levels

    @model_validator(mode="after")
    def validate_ledger(self) -> "OperativeSession":
        if self.stamina > self.max_stamina:
            raise ValueError("Stamina cannot exceed max stamina.")
        if self.city not in self.cities:
            raise ValueError(f"Current city '{self.city}' is not a known city.")
        assigned = sum(progress.team_size for progress in self.actions.values())
        if assigned > self.personnel:
            raise ValueError("Team assignments exceed recruited personnel.")
        return self

    @property
    def current_city(self) -> CityState:
        return self.cities[self.city]

    def append_action_log(
        self,
        category: ActionLogCategory,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> ActionLogEntry:
        entry = ActionLogEntry(
            sim_time=self.sim_seconds,
            category=category,
            message=message,
            details=details or {},
        )
        self.action_log.append(entry)
        overflow = len(self.action_log) - int(self.action_log_max)
        if overflow > 0:
            del self.action_log[:overflow]
        return entry


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))
