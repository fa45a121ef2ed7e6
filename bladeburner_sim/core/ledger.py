from __future__ import annotations

from .catalog import ActionCatalog
from .errors import UnknownCityError
from .formulas import (
    SkillMultipliers,
    max_stamina,
    skill_multipliers,
    skill_points_earned,
    stamina_gain_per_second,
)
from .models import ActionDefinition, ActionProgress, OperativeSession, action_key
from .rng import DeterministicRNG


def rng_from_session(session: OperativeSession) -> DeterministicRNG:
    return DeterministicRNG(seed=session.seed, state=session.rng_state, calls=session.rng_calls)


def sync_rng_to_session(session: OperativeSession, rng: DeterministicRNG) -> None:
    session.rng_state = rng.state
    session.rng_calls = rng.calls


def _progress_rng(session: OperativeSession, key: str) -> DeterministicRNG:
    # Separate stream per action so lookup order never shifts the main roll sequence.
    return DeterministicRNG.from_seed(f"{session.seed}:{key}")


def get_progress(session: OperativeSession, definition: ActionDefinition) -> ActionProgress:
    key = action_key(definition.type, definition.name)
    progress = session.actions.get(key)
    if progress is not None:
        return progress

    if definition.type.has_pool:
        assert definition.count_range is not None and definition.count_growth_range is not None
        rng = _progress_rng(session, key)
        progress = ActionProgress(
            max_level=definition.initial_max_level,
            count=float(rng.random_int(*definition.count_range)),
            count_growth=rng.uniform(*definition.count_growth_range),
        )
    else:
        progress = ActionProgress(max_level=definition.initial_max_level)
    session.actions[key] = progress
    return progress


def change_rank(session: OperativeSession, delta: float) -> int:
    """Apply a rank change and award any skill points the new max rank unlocks."""
    session.rank = max(0.0, session.rank + delta)
    session.max_rank = max(session.max_rank, session.rank)
    gained = skill_points_earned(
        session.max_rank,
        session.total_skill_points,
        session.settings.ranks_per_skill_point,
    )
    if gained > 0:
        session.skill_points += gained
        session.total_skill_points += gained
    return gained


def change_stamina(session: OperativeSession, delta: float) -> float:
    before = session.stamina
    session.stamina = max(0.0, min(session.max_stamina, session.stamina + delta))
    return session.stamina - before


def recalculate_max_stamina(
    session: OperativeSession,
    catalog: ActionCatalog,
    mults: SkillMultipliers | None = None,
) -> float:
    """Refresh max stamina; current stamina keeps its ratio to the maximum."""
    mults = mults or skill_multipliers(session, catalog)
    updated = max_stamina(session, mults)
    if updated != session.max_stamina:
        ratio = session.stamina / session.max_stamina
        session.max_stamina = updated
        session.stamina = min(updated, updated * ratio)
    return session.max_stamina


def regenerate_stamina(
    session: OperativeSession,
    catalog: ActionCatalog,
    seconds: float,
    mults: SkillMultipliers | None = None,
) -> float:
    mults = mults or skill_multipliers(session, catalog)
    return change_stamina(session, stamina_gain_per_second(session, mults) * seconds)


def switch_city(session: OperativeSession, city_name: str) -> str:
    if city_name not in session.cities:
        raise UnknownCityError(city_name)
    if city_name != session.city:
        session.city = city_name
        session.append_action_log("CITY", f"Moved operations to {city_name}.", {"city": city_name})
    return session.city
