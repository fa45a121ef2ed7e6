from __future__ import annotations

from dataclasses import dataclass, field

from .catalog import ActionCatalog, parse_action_type
from .cities import create_cities, decay_chaos
from .errors import (
    ActionEconomyError,
    InsufficientRankError,
    InsufficientResourceError,
    InsufficientStaminaError,
    InvalidActionError,
    InvalidStateError,
    OutOfRangeError,
)
from .formulas import (
    action_duration,
    compute_success_chance,
    next_level,
    rank_penalty,
    rank_reward,
    skill_multipliers,
    stamina_cost,
    successes_needed,
)
from .ledger import (
    change_rank,
    change_stamina,
    get_progress,
    recalculate_max_stamina,
    regenerate_stamina,
    rng_from_session,
    sync_rng_to_session,
)
from .models import (
    ActionDefinition,
    ActionLogEntry,
    ActionProgress,
    ActionType,
    CurrentAction,
    OperativeSession,
    OperativeStats,
)
from .outcomes import OutcomeReport, apply_outcomes
from .personnel import apply_team_casualties
from .rng import DeterministicRNG
from .settings import CYCLES_PER_SECOND, SimulationSettings
from .world_events import next_event_delay, random_event


@dataclass(slots=True)
class CompletionResult:
    action_type: ActionType
    name: str
    success: bool
    chance: float
    roll: float
    level: int
    rank_delta: float
    skill_points_gained: int
    team_losses: int
    report: OutcomeReport
    logs: list[ActionLogEntry]


@dataclass(slots=True)
class TickResult:
    seconds: float = 0.0
    completions: list[CompletionResult] = field(default_factory=list)
    logs: list[ActionLogEntry] = field(default_factory=list)


def create_session(
    seed: int | str,
    catalog: ActionCatalog,
    stats: OperativeStats | None = None,
    settings: SimulationSettings | None = None,
) -> OperativeSession:
    rng = DeterministicRNG.from_seed(seed)
    cities = create_cities(rng)
    session = OperativeSession(
        seed=seed,
        cities=cities,
        stats=stats or OperativeStats(),
        settings=settings or SimulationSettings(),
        rng_state=rng.state,
        rng_calls=rng.calls,
    )
    session.random_event_timer = next_event_delay(session, rng)
    sync_rng_to_session(session, rng)
    recalculate_max_stamina(session, catalog)
    session.stamina = session.max_stamina
    return session


def _resolve_definition(catalog: ActionCatalog, action_type: ActionType | str, name: str) -> ActionDefinition:
    parsed = parse_action_type(action_type)
    if parsed is None:
        raise InvalidActionError(action_type, name, "unknown action type")
    return catalog.lookup(parsed, name)


def _check_startable(
    session: OperativeSession,
    catalog: ActionCatalog,
    definition: ActionDefinition,
    progress: ActionProgress,
) -> None:
    if definition.type.has_pool and progress.remaining < 1:
        raise InsufficientResourceError(f"No {definition.name} {definition.type.label.lower()} remaining.")
    if definition.requires_communities and session.current_city.communities <= 0:
        raise InsufficientResourceError(f"{definition.name} needs a known community in {session.city}.")
    if definition.type is ActionType.BLACK_OP:
        if definition.name in session.completed_black_ops:
            raise InvalidStateError(f"BlackOp '{definition.name}' is already complete.")
        required = float(definition.required_rank or 0)
        if session.rank < required:
            raise InsufficientRankError(f"'{definition.name}' requires rank {required:,.0f}; have {session.rank:,.2f}.")
        predecessor = catalog.black_op_predecessor(definition.name)
        if predecessor is not None and predecessor.name not in session.completed_black_ops:
            raise InsufficientRankError(f"Complete '{predecessor.name}' before '{definition.name}'.")


def _begin(
    session: OperativeSession,
    catalog: ActionCatalog,
    definition: ActionDefinition,
    carried: float,
) -> CurrentAction:
    progress = get_progress(session, definition)
    _check_startable(session, catalog, definition, progress)
    duration = action_duration(definition, progress.level, session, skill_multipliers(session, catalog))
    cost = stamina_cost(definition, duration, session.settings)
    if session.stamina < cost:
        raise InsufficientStaminaError(cost, session.stamina)
    change_stamina(session, -cost)
    session.current_action = CurrentAction(
        action_type=definition.type,
        name=definition.name,
        total_duration=duration,
        overflow_time=min(max(0.0, carried), duration),
    )
    return session.current_action


def start_action(
    session: OperativeSession,
    catalog: ActionCatalog,
    action_type: ActionType | str,
    name: str,
) -> CurrentAction:
    """Replace whatever is running with ``name``; its progress is discarded."""
    definition = _resolve_definition(catalog, action_type, name)
    current = _begin(session, catalog, definition, 0.0)
    session.append_action_log(
        "ACTION",
        f"Started {definition.type.label} '{definition.name}' ({current.total_duration:.0f}s).",
        {"action": current.key, "duration": current.total_duration},
    )
    return current


def reset_action(session: OperativeSession) -> bool:
    if session.current_action is None:
        return False
    name = session.current_action.name
    session.current_action = None
    session.append_action_log("ACTION", f"Stopped '{name}'.", {"action": name})
    return True


def set_action_level(
    session: OperativeSession,
    catalog: ActionCatalog,
    action_type: ActionType | str,
    name: str,
    level: int,
) -> int:
    definition = _resolve_definition(catalog, action_type, name)
    progress = get_progress(session, definition)
    if level < 1 or level > progress.max_level:
        raise OutOfRangeError(f"Level for '{name}' must be within [1, {progress.max_level}], got {level}.")
    progress.level = int(level)
    return progress.level


def set_auto_level(
    session: OperativeSession,
    catalog: ActionCatalog,
    action_type: ActionType | str,
    name: str,
    enabled: bool,
) -> bool:
    definition = _resolve_definition(catalog, action_type, name)
    progress = get_progress(session, definition)
    progress.auto_level = bool(enabled)
    return progress.auto_level


def _grow_max_level(definition: ActionDefinition, progress: ActionProgress) -> None:
    if not definition.type.has_pool:
        return
    cap = definition.level_cap
    if cap is not None and progress.max_level >= cap:
        return
    if progress.successes >= successes_needed(definition, progress.max_level):
        progress.max_level += 1


def _effects_rng(session: OperativeSession, roll: float) -> DeterministicRNG:
    # Keyed on the roll so every consequence of a completion is fixed once the roll is.
    return DeterministicRNG.from_seed(f"{session.seed}:{roll!r}")


def resolve_outcome(
    session: OperativeSession,
    catalog: ActionCatalog,
    definition: ActionDefinition,
    roll: float,
) -> CompletionResult:
    progress = get_progress(session, definition)
    level = progress.level
    chance = compute_success_chance(definition, level, session, session.current_city, catalog, progress.team_size)
    success = roll < chance
    rng = _effects_rng(session, roll)
    rank_before = session.rank

    logs = [
        session.append_action_log(
            "SUCCESS" if success else "FAILURE",
            (
                f"{definition.type.label} '{definition.name}' (level {level}) "
                f"{'succeeded' if success else 'failed'}: chance {chance * 100:.1f}%, roll {roll:.4f}."
            ),
            {"action": definition.name, "chance": chance, "roll": roll, "level": level},
        )
    ]

    skill_points = 0
    if success:
        progress.successes += 1
        skill_points += change_rank(session, rank_reward(definition, level, session.settings))
        _grow_max_level(definition, progress)
        outcome_logs, report = apply_outcomes(session, catalog, definition.on_success, rng)
        if definition.type is ActionType.BLACK_OP:
            session.completed_black_ops.add(definition.name)
    else:
        progress.failures += 1
        change_rank(session, -rank_penalty(definition, level))
        duration = action_duration(definition, level, session, skill_multipliers(session, catalog))
        penalty = session.settings.failure_stamina_fraction * stamina_cost(definition, duration, session.settings)
        change_stamina(session, -penalty)
        outcome_logs, report = apply_outcomes(session, catalog, definition.on_failure, rng)
    logs.extend(outcome_logs)
    skill_points += report.skill_points_gained

    losses = apply_team_casualties(session, definition, progress, success, rng)
    if losses:
        logs.append(
            session.append_action_log(
                "TEAM",
                f"Lost {losses} team member(s) on '{definition.name}'.",
                {"action": definition.name, "losses": losses},
            )
        )

    progress.level = next_level(progress)
    if definition.type.has_pool and progress.count is not None:
        progress.count = max(0.0, progress.count - 1)

    rank_delta = session.rank - rank_before
    if abs(rank_delta) > 1e-12 or skill_points:
        logs.append(
            session.append_action_log(
                "ACTION",
                f"Rank {rank_delta:+.3f} (now {session.rank:.3f}), skill points +{skill_points}.",
                {"rankDelta": rank_delta, "skillPoints": skill_points},
            )
        )

    return CompletionResult(
        action_type=definition.type,
        name=definition.name,
        success=success,
        chance=chance,
        roll=roll,
        level=level,
        rank_delta=rank_delta,
        skill_points_gained=skill_points,
        team_losses=losses,
        report=report,
        logs=logs,
    )


def _continue(
    session: OperativeSession,
    catalog: ActionCatalog,
    definition: ActionDefinition,
    excess: float,
    result: TickResult,
) -> CurrentAction | None:
    if definition.type is ActionType.BLACK_OP:
        session.current_action = None
        return None
    try:
        return _begin(session, catalog, definition, excess)
    except ActionEconomyError as exc:
        session.current_action = None
        result.logs.append(
            session.append_action_log("SYSTEM", f"Stopped '{definition.name}': {exc}", {"action": definition.name})
        )
        return None


def tick(session: OperativeSession, catalog: ActionCatalog, seconds: float) -> TickResult:
    """Advance the current action and resolve every completion the time covers.

    Time past a completion is banked as overflow on the restarted action, never
    more than one full run of it, so a single tick resolves at most two runs.
    """
    if seconds < 0:
        raise OutOfRangeError(f"Cannot advance by negative time ({seconds}).")
    result = TickResult(seconds=seconds)
    current = session.current_action
    if current is None:
        return result

    current.elapsed_time += seconds
    while current is not None and current.elapsed_time + current.overflow_time >= current.total_duration:
        excess = current.elapsed_time + current.overflow_time - current.total_duration
        definition = catalog.lookup(current.action_type, current.name)

        rng = rng_from_session(session)
        roll = rng.roll()
        sync_rng_to_session(session, rng)

        completion = resolve_outcome(session, catalog, definition, roll)
        result.completions.append(completion)
        result.logs.extend(completion.logs)
        current = _continue(session, catalog, definition, excess, result)
    return result


def _grow_action_counts(session: OperativeSession, seconds: float) -> None:
    period = session.settings.action_count_growth_period
    for progress in session.actions.values():
        if progress.count is not None and progress.count_growth > 0:
            progress.count += seconds * progress.count_growth / period


def process(session: OperativeSession, catalog: ActionCatalog, cycles: float = CYCLES_PER_SECOND) -> TickResult:
    """Scheduler entry point: bank game cycles, then spend whole seconds of them."""
    if cycles < 0:
        raise OutOfRangeError(f"Cannot process a negative number of cycles ({cycles}).")
    session.stored_cycles += cycles
    if session.stored_cycles < CYCLES_PER_SECOND:
        return TickResult()

    seconds = min(int(session.stored_cycles // CYCLES_PER_SECOND), session.settings.max_seconds_per_process)
    session.stored_cycles -= seconds * CYCLES_PER_SECOND
    session.sim_seconds += seconds
    result = TickResult(seconds=seconds)

    mults = skill_multipliers(session, catalog)
    recalculate_max_stamina(session, catalog, mults)
    current = session.current_action
    if current is None or current.action_type is ActionType.GENERAL:
        regenerate_stamina(session, catalog, seconds, mults)
    _grow_action_counts(session, seconds)
    decay_chaos(session.cities, session.settings.chaos_decay_per_second * seconds)

    if session.settings.random_events_enabled:
        session.random_event_timer -= seconds
        if session.random_event_timer <= 0:
            rng = rng_from_session(session)
            entry = random_event(session, rng)
            session.random_event_timer = next_event_delay(session, rng)
            sync_rng_to_session(session, rng)
            if entry is not None:
                result.logs.append(entry)

    ticked = tick(session, catalog, seconds)
    result.completions.extend(ticked.completions)
    result.logs.extend(ticked.logs)
    return result


def bonus_time_ms(session: OperativeSession) -> int:
    # Half-up rounding of banked seconds.
    seconds = int(session.stored_cycles / CYCLES_PER_SECOND + 0.5)
    return seconds * 1000


def run_simulation(
    session: OperativeSession,
    catalog: ActionCatalog,
    seconds: int,
) -> tuple[OperativeSession, list[ActionLogEntry]]:
    timeline: list[ActionLogEntry] = []
    for _ in range(seconds):
        timeline.extend(process(session, catalog, CYCLES_PER_SECOND).logs)
    return session, timeline
