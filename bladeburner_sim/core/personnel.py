from __future__ import annotations

import math

from .catalog import ActionCatalog, parse_action_type
from .errors import InsufficientPersonnelError, InvalidActionError, OutOfRangeError
from .ledger import get_progress
from .models import ActionDefinition, ActionProgress, ActionType, OperativeSession, action_key
from .rng import DeterministicRNG


def assigned_personnel(session: OperativeSession, exclude_key: str | None = None) -> int:
    return sum(progress.team_size for key, progress in session.actions.items() if key != exclude_key)


def validate_team_size(
    session: OperativeSession,
    catalog: ActionCatalog,
    action_type: ActionType | str,
    name: str,
    size: int,
) -> ActionDefinition:
    parsed = parse_action_type(action_type)
    if parsed is None:
        raise InvalidActionError(action_type, name, "unknown action type")
    definition = catalog.lookup(parsed, name)
    if not definition.team_capable:
        raise InvalidActionError(parsed, name, "action does not take a team")
    if size < 0:
        raise OutOfRangeError(f"Team size cannot be negative, got {size}.")

    others = assigned_personnel(session, exclude_key=action_key(parsed, name))
    if others + size > session.personnel:
        raise InsufficientPersonnelError(
            f"Team of {size} for '{name}' needs {others + size} personnel in total; only {session.personnel} recruited."
        )
    return definition


def set_team_size(
    session: OperativeSession,
    catalog: ActionCatalog,
    action_type: ActionType | str,
    name: str,
    size: int,
) -> int:
    definition = validate_team_size(session, catalog, action_type, name, size)
    progress = get_progress(session, definition)
    progress.team_size = int(size)
    session.append_action_log("TEAM", f"Team for {name} set to {size}.", {"action": name, "teamSize": size})
    return progress.team_size


def apply_team_casualties(
    session: OperativeSession,
    definition: ActionDefinition,
    progress: ActionProgress,
    success: bool,
    rng: DeterministicRNG,
) -> int:
    """Lose up to half the team on success, up to all of it on failure."""
    if not definition.team_capable or progress.team_size < 1:
        return 0
    ceiling = math.ceil(progress.team_size / 2) if success else progress.team_size
    losses = min(rng.random_int(0, ceiling), progress.team_size, session.personnel)
    if losses <= 0:
        return 0
    progress.team_size -= losses
    session.personnel -= losses
    session.team_lost += losses
    return losses
