"""Core deterministic action-economy modules."""

from .api import ActionEconomy
from .catalog import ActionCatalog, parse_action_type
from .engine import (
    CompletionResult,
    TickResult,
    bonus_time_ms,
    create_session,
    process,
    reset_action,
    resolve_outcome,
    run_simulation,
    start_action,
    tick,
)
from .errors import (
    ActionEconomyError,
    InsufficientPersonnelError,
    InsufficientRankError,
    InsufficientResourceError,
    InsufficientSkillPointsError,
    InsufficientStaminaError,
    InvalidActionError,
    InvalidStateError,
    NotFoundError,
    OutOfRangeError,
    UnknownCityError,
    UnknownSkillError,
)
from .formulas import compute_success_chance, next_level
from .loader import ContentValidationError, default_catalog, load_catalog
from .models import ActionDefinition, ActionProgress, ActionType, CityState, OperativeSession, OperativeStats
from .settings import SimulationSettings
from .skills import skill_upgrade_cost, upgrade_skill

__all__ = [
    "ActionCatalog",
    "ActionDefinition",
    "ActionEconomy",
    "ActionEconomyError",
    "ActionProgress",
    "ActionType",
    "CityState",
    "CompletionResult",
    "ContentValidationError",
    "InsufficientPersonnelError",
    "InsufficientRankError",
    "InsufficientResourceError",
    "InsufficientSkillPointsError",
    "InsufficientStaminaError",
    "InvalidActionError",
    "InvalidStateError",
    "NotFoundError",
    "OperativeSession",
    "OperativeStats",
    "OutOfRangeError",
    "SimulationSettings",
    "TickResult",
    "UnknownCityError",
    "UnknownSkillError",
    "bonus_time_ms",
    "compute_success_chance",
    "create_session",
    "default_catalog",
    "load_catalog",
    "next_level",
    "parse_action_type",
    "process",
    "reset_action",
    "resolve_outcome",
    "run_simulation",
    "skill_upgrade_cost",
    "start_action",
    "tick",
    "upgrade_skill",
]
