from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidActionError, UnknownSkillError
from .models import ActionDefinition, ActionType, SkillDefinition

_TYPE_ALIASES: dict[str, ActionType] = {
    "contract": ActionType.CONTRACT,
    "contracts": ActionType.CONTRACT,
    "operation": ActionType.OPERATION,
    "operations": ActionType.OPERATION,
    "op": ActionType.OPERATION,
    "ops": ActionType.OPERATION,
    "blackop": ActionType.BLACK_OP,
    "blackops": ActionType.BLACK_OP,
    "black op": ActionType.BLACK_OP,
    "black ops": ActionType.BLACK_OP,
    "blackoperation": ActionType.BLACK_OP,
    "blackoperations": ActionType.BLACK_OP,
    "black operation": ActionType.BLACK_OP,
    "black operations": ActionType.BLACK_OP,
    "general": ActionType.GENERAL,
    "general action": ActionType.GENERAL,
    "general actions": ActionType.GENERAL,
    "gen": ActionType.GENERAL,
}


def parse_action_type(raw: ActionType | str) -> ActionType | None:
    if isinstance(raw, ActionType):
        return raw
    if not isinstance(raw, str):
        return None
    return _TYPE_ALIASES.get(raw.strip().lower())


@dataclass(frozen=True, slots=True)
class ActionCatalog:
    """Read-only registry of action and skill definitions, keyed by type then name."""

    actions: dict[ActionType, dict[str, ActionDefinition]]
    skills: dict[str, SkillDefinition]

    def find(self, action_type: ActionType | str, name: str) -> ActionDefinition | None:
        parsed = parse_action_type(action_type)
        if parsed is None:
            return None
        return self.actions.get(parsed, {}).get(name)

    def lookup(self, action_type: ActionType | str, name: str) -> ActionDefinition:
        definition = self.find(action_type, name)
        if definition is None:
            raise InvalidActionError(action_type, name)
        return definition

    def list_names(self, action_type: ActionType) -> list[str]:
        return list(self.actions.get(action_type, {}))

    def definitions(self, action_type: ActionType) -> list[ActionDefinition]:
        return list(self.actions.get(action_type, {}).values())

    def black_op_predecessor(self, name: str) -> ActionDefinition | None:
        ordered = self.list_names(ActionType.BLACK_OP)
        if name not in ordered:
            return None
        index = ordered.index(name)
        if index == 0:
            return None
        return self.actions[ActionType.BLACK_OP][ordered[index - 1]]

    def skill(self, name: str) -> SkillDefinition:
        skill = self.skills.get(name)
        if skill is None:
            raise UnknownSkillError(name)
        return skill

    def skill_names(self) -> list[str]:
        return list(self.skills)
