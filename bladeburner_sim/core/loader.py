from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .catalog import ActionCatalog
from .models import ActionDefinition, ActionType, SkillDefinition

DEFAULT_CONTENT_DIR = Path(__file__).resolve().parents[1] / "content"

ACTION_FILES: tuple[tuple[ActionType, str], ...] = (
    (ActionType.CONTRACT, "contracts.json"),
    (ActionType.OPERATION, "operations.json"),
    (ActionType.BLACK_OP, "blackops.json"),
    (ActionType.GENERAL, "general.json"),
)

_NUMBER_OPS = {"changeChaosByCount", "gainRank", "gainMaxStamina", "loseStamina", "fieldAnalysis"}
_FLAG_OPS = {"recruit", "diplomacy", "inciteViolence"}
_CITY_OPS = {
    "changeChaosByCount",
    "changeChaosByPercentage",
    "changePopulationByCount",
    "changePopulationByPercentage",
    "improvePopulationEstimateByCount",
    "improvePopulationEstimateByPercentage",
    "changeCommunities",
    "triggerMigration",
}


class ContentValidationError(ValueError):
    def __init__(self, message: str, details: list[str] | None = None) -> None:
        self.details = details or []
        suffix = "\n".join(self.details)
        super().__init__(f"{message}\n{suffix}" if suffix else message)


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ContentValidationError(f"Missing content file: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ContentValidationError(f"Invalid JSON in {path.name}: {exc.msg} at line {exc.lineno}") from exc


def _validation_details(path: Path, exc: ValidationError) -> list[str]:
    details = []
    for issue in exc.errors():
        issue_path = ".".join(str(part) for part in issue.get("loc", [])) or "(root)"
        details.append(f"{path.name}:{issue_path}: {issue.get('msg', 'validation error')}")
    return details


def _load_actions(path: Path, action_type: ActionType) -> list[ActionDefinition]:
    data = _load_json(path)
    if not isinstance(data, list):
        raise ContentValidationError(f"{path.name} must contain a JSON array.")
    tagged = [{**entry, "type": action_type.value} if isinstance(entry, dict) else entry for entry in data]
    try:
        return TypeAdapter(list[ActionDefinition]).validate_python(tagged)
    except ValidationError as exc:
        raise ContentValidationError(f"Schema validation failed for {path.name}.", _validation_details(path, exc)) from exc


def _load_skills(path: Path) -> list[SkillDefinition]:
    data = _load_json(path)
    try:
        return TypeAdapter(list[SkillDefinition]).validate_python(data)
    except ValidationError as exc:
        raise ContentValidationError(f"Schema validation failed for {path.name}.", _validation_details(path, exc)) from exc


def _assert_unique_names(kind: str, values: list[Any]) -> None:
    seen: set[str] = set()
    for entry in values:
        if entry.name in seen:
            raise ContentValidationError(f"Duplicate {kind} name '{entry.name}'.")
        seen.add(entry.name)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_range(value: Any) -> bool:
    return isinstance(value, list) and len(value) == 2 and all(_is_number(part) for part in value) and value[0] <= value[1]


def _lowest(value: Any) -> float:
    return float(value[0]) if isinstance(value, list) else float(value)


def _validate_outcome(outcome: Any, path: str, definition: ActionDefinition) -> None:
    if not isinstance(outcome, dict):
        raise ContentValidationError(f"{path} must be an object.")
    if len(outcome) != 1:
        raise ContentValidationError(f"{path} must contain exactly one outcome operator.")

    (op, value), = outcome.items()
    if op in _NUMBER_OPS:
        if not _is_number(value):
            raise ContentValidationError(f"{path}.{op} must be numeric.")
        if op != "changeChaosByCount" and value < 0:
            raise ContentValidationError(f"{path}.{op} cannot be negative.")
    elif op in _FLAG_OPS:
        if value is not True:
            raise ContentValidationError(f"{path}.{op} must be true.")
    elif op == "changeChaosByPercentage":
        if not (_is_number(value) or _is_range(value)):
            raise ContentValidationError(f"{path}.{op} must be a number or a [low, high] range.")
    elif op == "changePopulationByCount":
        if not isinstance(value, dict) or not _is_number(value.get("count")):
            raise ContentValidationError(f"{path}.{op}.count must be numeric.")
        if not isinstance(value.get("changeEstimate", False), bool):
            raise ContentValidationError(f"{path}.{op}.changeEstimate must be a boolean.")
    elif op == "changePopulationByPercentage":
        if not isinstance(value, dict):
            raise ContentValidationError(f"{path}.{op} must be an object.")
        percent = value.get("percent")
        if not (_is_number(percent) or _is_range(percent)):
            raise ContentValidationError(f"{path}.{op}.percent must be a number or a [low, high] range.")
        for flag in ("changeEstEqually", "nonZero"):
            if not isinstance(value.get(flag, False), bool):
                raise ContentValidationError(f"{path}.{op}.{flag} must be a boolean.")
    elif op == "improvePopulationEstimateByCount":
        if not (_is_number(value) or _is_range(value)) or _lowest(value) <= 0:
            raise ContentValidationError(f"{path}.{op} must be a positive number or range.")
    elif op == "improvePopulationEstimateByPercentage":
        if not _is_number(value) or value <= 0:
            raise ContentValidationError(f"{path}.{op} must be a positive number.")
    elif op == "changeCommunities":
        if not isinstance(value, int) or isinstance(value, bool):
            raise ContentValidationError(f"{path}.{op} must be an integer.")
    elif op == "triggerMigration":
        if not _is_number(value) or value < 0 or value > 1:
            raise ContentValidationError(f"{path}.{op} must be a probability between 0 and 1.")
    elif op == "regenerateStamina":
        if not _is_number(value) or value <= 0 or value > 100:
            raise ContentValidationError(f"{path}.{op} must be a percentage in (0, 100].")
    else:
        raise ContentValidationError(f"{path} uses unsupported outcome operator '{op}'.")

    # Contracts and operations only calm a city through stealth work.
    if definition.type is not ActionType.GENERAL and not definition.is_stealth:
        if op in {"changeChaosByCount", "changeChaosByPercentage"} and _lowest(value) < 0:
            raise ContentValidationError(f"{path}.{op} may only reduce chaos on stealth actions.")
    if definition.type is ActionType.BLACK_OP and op in _CITY_OPS:
        raise ContentValidationError(f"{path}.{op} is not allowed on BlackOps.")


def _validate_black_op_order(black_ops: list[ActionDefinition]) -> None:
    previous: ActionDefinition | None = None
    for black_op in black_ops:
        if previous is not None and float(black_op.required_rank or 0) < float(previous.required_rank or 0):
            raise ContentValidationError(
                f"BlackOp '{black_op.name}' cannot require less rank than '{previous.name}'."
            )
        previous = black_op


def _validate_references(actions: dict[ActionType, list[ActionDefinition]]) -> None:
    for definitions in actions.values():
        for definition in definitions:
            for branch, outcomes in (("onSuccess", definition.on_success), ("onFailure", definition.on_failure)):
                for index, outcome in enumerate(outcomes):
                    _validate_outcome(outcome, f"{definition.type.value} '{definition.name}' {branch}[{index}]", definition)
    _validate_black_op_order(actions[ActionType.BLACK_OP])


def load_catalog(content_dir: Path | str | None = None) -> ActionCatalog:
    base_path = Path(content_dir) if content_dir is not None else DEFAULT_CONTENT_DIR
    actions = {action_type: _load_actions(base_path / filename, action_type) for action_type, filename in ACTION_FILES}
    skills = _load_skills(base_path / "skills.json")

    for action_type, definitions in actions.items():
        _assert_unique_names(action_type.label, definitions)
    _assert_unique_names("skill", skills)

    _validate_references(actions)

    return ActionCatalog(
        actions={action_type: {d.name: d for d in definitions} for action_type, definitions in actions.items()},
        skills={skill.name: skill for skill in skills},
    )


@lru_cache(maxsize=1)
def default_catalog() -> ActionCatalog:
    return load_catalog(DEFAULT_CONTENT_DIR)
