from __future__ import annotations

import math

from .catalog import ActionCatalog
from .errors import InsufficientSkillPointsError, OutOfRangeError
from .ledger import recalculate_max_stamina
from .models import OperativeSession
from .settings import SimulationSettings

# Effects that feed the max stamina formula.
_STAMINA_EFFECTS = {"stamina", "effAgility"}


def skill_level(session: OperativeSession, skill_name: str) -> int:
    return max(0, int(session.skill_levels.get(skill_name, 0)))


def skill_upgrade_cost(
    catalog: ActionCatalog,
    skill_name: str,
    from_level: int,
    count: int = 1,
    settings: SimulationSettings | None = None,
) -> int:
    """Skill points needed to buy ``count`` levels starting at ``from_level``.

    Each level costs ``baseCost + level * costInc`` (scaled by the global skill
    cost multiplier), so the curve is linear per level and convex in ``count``.
    """
    skill = catalog.skill(skill_name)
    if count < 1:
        raise OutOfRangeError(f"Skill upgrade count must be at least 1, got {count}.")
    if from_level < 0:
        raise OutOfRangeError(f"Skill level cannot be negative, got {from_level}.")
    if skill.max_level is not None and from_level + count > skill.max_level:
        raise OutOfRangeError(
            f"'{skill_name}' caps at level {skill.max_level}; cannot buy {count} from level {from_level}."
        )

    mult = settings.skill_cost_mult if settings is not None else 1.0
    total = 0
    for level in range(from_level, from_level + count):
        total += int(math.floor((skill.base_cost + level * skill.cost_inc) * mult))
    return total


def upgrade_skill(session: OperativeSession, catalog: ActionCatalog, skill_name: str, count: int = 1) -> int:
    """Buy ``count`` levels at once or nothing at all. Returns the points spent."""
    current = skill_level(session, skill_name)
    cost = skill_upgrade_cost(catalog, skill_name, current, count, session.settings)
    if cost > session.skill_points:
        raise InsufficientSkillPointsError(cost, session.skill_points)

    session.skill_points -= cost
    session.skill_levels[skill_name] = current + count
    if _STAMINA_EFFECTS & set(catalog.skill(skill_name).effects):
        recalculate_max_stamina(session, catalog)
    session.append_action_log(
        "SKILL",
        f"Upgraded {skill_name} to level {current + count} for {cost} SP.",
        {"skill": skill_name, "level": current + count, "cost": cost},
    )
    return cost
