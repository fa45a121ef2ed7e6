from __future__ import annotations

import math

import pytest

from bladeburner_sim.core.engine import create_session
from bladeburner_sim.core.formulas import (
    action_duration,
    next_level,
    rank_penalty,
    rank_reward,
    skill_multipliers,
    skill_points_earned,
    successes_needed,
)
from bladeburner_sim.core.ledger import change_rank, recalculate_max_stamina
from bladeburner_sim.core.loader import default_catalog
from bladeburner_sim.core.models import ActionDefinition, ActionProgress, ActionType, OperativeStats
from bladeburner_sim.core.settings import SimulationSettings


def _probe(**overrides) -> ActionDefinition:
    fields = {
        "name": "Probe",
        "type": ActionType.OPERATION,
        "base_difficulty": 100.0,
        "reward_fac": 1.1,
        "rank_gain": 2.0,
        "rank_loss": 0.5,
        "successes_per_level": 2.5,
        "count_range": (1, 1),
        "count_growth_range": (0.0, 0.0),
    }
    fields.update(overrides)
    return ActionDefinition(**fields)


def test_rank_reward_compounds_reward_factor_per_level() -> None:
    definition = _probe()
    reward = rank_reward(definition, 3, SimulationSettings())
    assert reward == 2 * 1.1**2
    assert reward == pytest.approx(2.42)
    assert rank_reward(definition, 3, SimulationSettings(rank_gain_mult=0.5)) == pytest.approx(1.21)
    assert rank_penalty(definition, 1) == 0.5


def test_next_level_is_a_pure_policy() -> None:
    assert next_level(ActionProgress(level=1, max_level=4, auto_level=True)) == 4
    assert next_level(ActionProgress(level=2, max_level=4, auto_level=False)) == 2


def test_successes_needed_grows_with_unlocked_level() -> None:
    contract = _probe(successes_per_level=3)
    assert successes_needed(contract, 1) == 3
    assert successes_needed(contract, 2) == 7
    assert successes_needed(_probe(), 1) == 3


def test_skill_points_follow_max_rank() -> None:
    assert skill_points_earned(2.99, 0, 3.0) == 0
    assert skill_points_earned(3.0, 0, 3.0) == 1
    assert skill_points_earned(9.0, 0, 3.0) == 3
    assert skill_points_earned(9.0, 3, 3.0) == 0


def test_change_rank_tracks_max_rank_and_awards_once() -> None:
    catalog = default_catalog()
    session = create_session(1, catalog)

    assert change_rank(session, 9.0) == 3
    assert change_rank(session, -4.0) == 0
    assert session.rank == 5.0
    assert session.max_rank == 9.0
    assert change_rank(session, 4.0) == 0
    assert change_rank(session, 3.0) == 1
    assert session.total_skill_points == 4
    assert change_rank(session, -100.0) == 0
    assert session.rank == 0.0


def test_operation_duration_scales_with_difficulty_and_skills() -> None:
    catalog = default_catalog()
    session = create_session(1, catalog)
    tracking = catalog.lookup(ActionType.CONTRACT, "Tracking")
    mults = skill_multipliers(session, catalog)

    agility = dexterity = 100.0
    stat_factor = 0.5 * (agility**0.04 + dexterity**0.035 + agility / 10000 + dexterity / 10000)
    assert action_duration(tracking, 1, session, mults) == math.ceil(12.5 / stat_factor)
    assert action_duration(tracking, 10, session, mults) > action_duration(tracking, 1, session, mults)

    session.skill_levels["Overclock"] = 50
    faster = skill_multipliers(session, catalog)
    assert faster.action_time == pytest.approx(0.5)
    assert action_duration(tracking, 1, session, faster) < action_duration(tracking, 1, session, mults)


def test_recruitment_duration_shrinks_with_charisma_but_has_a_floor() -> None:
    catalog = default_catalog()
    recruitment = catalog.lookup(ActionType.GENERAL, "Recruitment")

    plain = create_session(1, catalog)
    charming = create_session(1, catalog, stats=OperativeStats(charisma=500))
    legendary = create_session(1, catalog, stats=OperativeStats(charisma=1e6))

    plain_time = action_duration(recruitment, 1, plain, skill_multipliers(plain, catalog))
    assert plain_time == 299
    assert action_duration(recruitment, 1, charming, skill_multipliers(charming, catalog)) < plain_time
    assert action_duration(recruitment, 1, legendary, skill_multipliers(legendary, catalog)) == 10


def test_max_stamina_rescales_current_stamina() -> None:
    catalog = default_catalog()
    session = create_session(1, catalog)
    session.stamina = session.max_stamina / 2
    before = session.max_stamina

    session.skill_levels["Cyber's Edge"] = 5
    recalculate_max_stamina(session, catalog)

    assert session.max_stamina == pytest.approx(before * 1.1)
    assert session.stamina == pytest.approx(session.max_stamina / 2)
