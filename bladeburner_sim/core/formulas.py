from __future__ import annotations

import math
from dataclasses import dataclass

from .catalog import ActionCatalog
from .models import (
    STAT_NAMES,
    ActionDefinition,
    ActionProgress,
    ActionType,
    CityState,
    OperativeSession,
    StatName,
    clamp_unit,
)
from .settings import SimulationSettings

DIFFICULTY_TO_TIME_FACTOR = 10.0
RECRUITMENT_MIN_SECONDS = 10


@dataclass(frozen=True, slots=True)
class SkillMultipliers:
    success_all: float = 1.0
    success_stealth: float = 1.0
    success_kill: float = 1.0
    success_contract: float = 1.0
    success_operation: float = 1.0
    success_estimate: float = 1.0
    action_time: float = 1.0
    eff_strength: float = 1.0
    eff_defense: float = 1.0
    eff_dexterity: float = 1.0
    eff_agility: float = 1.0
    eff_charisma: float = 1.0
    stamina: float = 1.0


_EFFECT_FIELDS = {
    "successChanceAll": "success_all",
    "successChanceStealth": "success_stealth",
    "successChanceKill": "success_kill",
    "successChanceContract": "success_contract",
    "successChanceOperation": "success_operation",
    "successChanceEstimate": "success_estimate",
    "actionTime": "action_time",
    "effStrength": "eff_strength",
    "effDefense": "eff_defense",
    "effDexterity": "eff_dexterity",
    "effAgility": "eff_agility",
    "effCharisma": "eff_charisma",
    "stamina": "stamina",
}

_STAT_EFFECTS: dict[str, str] = {
    "strength": "eff_strength",
    "defense": "eff_defense",
    "dexterity": "eff_dexterity",
    "agility": "eff_agility",
    "charisma": "eff_charisma",
}


def skill_multipliers(session: OperativeSession, catalog: ActionCatalog) -> SkillMultipliers:
    """Fold every purchased skill level into one multiplier set.

    Skill effects are written as percent-per-level, so five levels of a
    ``successChanceAll: 3`` skill yields a 1.15 multiplier.
    """
    totals = {field: 1.0 for field in _EFFECT_FIELDS.values()}
    for skill_name, level in session.skill_levels.items():
        if level <= 0:
            continue
        skill = catalog.skills.get(skill_name)
        if skill is None:
            continue
        for effect, per_level in skill.effects.items():
            totals[_EFFECT_FIELDS[effect]] += (per_level / 100.0) * level
    return SkillMultipliers(**{field: max(0.0, value) for field, value in totals.items()})


def effective_stat(session: OperativeSession, mults: SkillMultipliers, stat: StatName) -> float:
    base = session.stats.get(stat)
    field = _STAT_EFFECTS.get(stat)
    if field is None:
        return base
    return base * getattr(mults, field)


def action_difficulty(definition: ActionDefinition, level: int) -> float:
    return definition.base_difficulty * definition.difficulty_fac ** (level - 1)


def stamina_penalty(session: OperativeSession) -> float:
    return min(1.0, session.stamina / (0.5 * session.max_stamina))


def intelligence_bonus(intelligence: float) -> float:
    return 1.0 + 0.75 * intelligence**0.8 / 600.0


def team_bonus(team_size: int) -> float:
    return max(1, team_size) ** 0.05


def _type_bonus(definition: ActionDefinition, mults: SkillMultipliers) -> float:
    bonus = mults.success_all
    if definition.type is ActionType.CONTRACT:
        bonus *= mults.success_contract
    elif definition.type in (ActionType.OPERATION, ActionType.BLACK_OP):
        bonus *= mults.success_operation
    if definition.is_stealth:
        bonus *= mults.success_stealth
    if definition.is_kill:
        bonus *= mults.success_kill
    return bonus


def competence(
    definition: ActionDefinition,
    session: OperativeSession,
    mults: SkillMultipliers,
    team_size: int = 0,
) -> float:
    total = 0.0
    for stat in STAT_NAMES:
        weight = definition.weights.get(stat)
        if weight <= 0:
            continue
        total += weight * effective_stat(session, mults, stat) ** definition.decays.get(stat)
    total *= intelligence_bonus(session.stats.intelligence)
    total *= stamina_penalty(session)
    if definition.team_capable:
        total *= team_bonus(team_size)
    return total * _type_bonus(definition, mults) * session.settings.success_chance_mult


def city_population_factor(population: float, settings: SimulationSettings) -> float:
    if population <= 0:
        return 0.0
    return (population / settings.population_threshold) ** settings.population_exponent


def city_chaos_factor(chaos: float, settings: SimulationSettings) -> float:
    if chaos <= settings.chaos_threshold:
        return 1.0
    return math.sqrt(1.0 + chaos - settings.chaos_threshold)


def raw_success_chance(
    definition: ActionDefinition,
    level: int,
    session: OperativeSession,
    city: CityState,
    catalog: ActionCatalog,
    team_size: int = 0,
    estimate: bool = False,
) -> float:
    """Unclamped chance; may leave [0, 1] for extreme stats or chaos."""
    model = definition.effective_chance_model
    if model == "certain":
        return 1.0
    if model == "recruitment":
        return session.stats.charisma**0.45 / (session.personnel + 1)

    mults = skill_multipliers(session, catalog)
    difficulty = action_difficulty(definition, level)
    value = competence(definition, session, mults, team_size)
    if definition.type is not ActionType.BLACK_OP:
        population = city.population_estimate if estimate else city.population
        value *= city_population_factor(population, session.settings)
        difficulty *= city_chaos_factor(city.chaos, session.settings)
    return value / difficulty


def compute_success_chance(
    definition: ActionDefinition,
    level: int,
    session: OperativeSession,
    city: CityState,
    catalog: ActionCatalog,
    team_size: int = 0,
    estimate: bool = False,
) -> float:
    return clamp_unit(raw_success_chance(definition, level, session, city, catalog, team_size, estimate))


def estimated_success_range(
    definition: ActionDefinition,
    level: int,
    session: OperativeSession,
    city: CityState,
    catalog: ActionCatalog,
    team_size: int = 0,
) -> tuple[float, float]:
    """Confidence pair that widens with the error in the city's population estimate."""
    if definition.effective_chance_model != "stats":
        chance = compute_success_chance(definition, level, session, city, catalog, team_size)
        return chance, chance
    estimated = raw_success_chance(definition, level, session, city, catalog, team_size, estimate=True)
    real = raw_success_chance(definition, level, session, city, catalog, team_size, estimate=False)
    spread = abs(real - estimated)
    low = real - spread
    high = real + spread
    if definition.type is not ActionType.BLACK_OP and city.population_estimate > 0:
        ratio = city.population / city.population_estimate
        if ratio < 1:
            low *= ratio
        else:
            high *= ratio
    return clamp_unit(low), clamp_unit(high)


def action_duration(
    definition: ActionDefinition,
    level: int,
    session: OperativeSession,
    mults: SkillMultipliers,
) -> float:
    """Seconds needed for one run of the action."""
    if definition.type is ActionType.GENERAL:
        base = float(definition.duration or 1)
        if definition.charisma_scaled_duration:
            charisma = effective_stat(session, mults, "charisma")
            return float(max(RECRUITMENT_MIN_SECONDS, round(base - (charisma**0.81 + charisma / 90.0))))
        return base

    agility = effective_stat(session, mults, "agility")
    dexterity = effective_stat(session, mults, "dexterity")
    stat_factor = 0.5 * (agility**0.04 + dexterity**0.035 + agility / 10000.0 + dexterity / 10000.0)
    stat_factor = max(1.0, stat_factor)
    base_time = action_difficulty(definition, level) / DIFFICULTY_TO_TIME_FACTOR
    return float(math.ceil(max(1.0, base_time * mults.action_time / stat_factor)))


def stamina_cost(definition: ActionDefinition, duration: float, settings: SimulationSettings) -> float:
    if not definition.type.costs_stamina:
        return 0.0
    return settings.stamina_cost_per_second * duration


def rank_reward(definition: ActionDefinition, level: int, settings: SimulationSettings) -> float:
    return definition.rank_gain * definition.reward_fac ** (level - 1) * settings.rank_gain_mult


def rank_penalty(definition: ActionDefinition, level: int) -> float:
    return definition.rank_loss * definition.reward_fac ** (level - 1)


def max_stamina(session: OperativeSession, mults: SkillMultipliers) -> float:
    agility = effective_stat(session, mults, "agility")
    value = (agility**0.8 + session.stamina_bonus) * mults.stamina * session.settings.max_stamina_mult
    return max(1.0, value)


def stamina_gain_per_second(session: OperativeSession, mults: SkillMultipliers) -> float:
    agility = effective_stat(session, mults, "agility")
    gain = (0.0085 + session.max_stamina / 70000.0) * agility**0.17
    return gain * mults.stamina * session.settings.stamina_gain_mult


def successes_needed(definition: ActionDefinition, max_level: int) -> int:
    per_level = float(definition.successes_per_level or 1)
    return math.ceil(0.5 * max_level * (2 * per_level + (max_level - 1)))


def next_level(progress: ActionProgress) -> int:
    """Auto-level policy applied after each completion."""
    if progress.auto_level:
        return progress.max_level
    return min(progress.level, progress.max_level)


def skill_points_earned(max_rank: float, total_skill_points: int, ranks_per_point: float) -> int:
    needed = (total_skill_points + 1) * ranks_per_point
    if max_rank < needed:
        return 0
    return int(math.floor((max_rank - needed) / ranks_per_point + 1))
