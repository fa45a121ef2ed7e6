from __future__ import annotations

import logging
import math

import pytest

from bladeburner_sim.core.api import ActionEconomy
from bladeburner_sim.core.engine import create_session
from bladeburner_sim.core.errors import InvalidActionError, UnknownCityError
from bladeburner_sim.core.loader import default_catalog
from bladeburner_sim.core.settings import SimulationSettings


def _economy(seed: int | str = 99) -> ActionEconomy:
    catalog = default_catalog()
    session = create_session(seed, catalog, settings=SimulationSettings(random_events_enabled=False))
    return ActionEconomy(session, catalog)


def test_unknown_action_queries_return_sentinels_without_raising(caplog) -> None:
    economy = _economy()
    with caplog.at_level(logging.DEBUG, logger="bladeburner_sim.core.api"):
        assert economy.get_action_estimated_success_chance("contract", "Nope") == [-1, -1]
        assert economy.get_action_estimated_success_chance("bogus", "Tracking") == [-1, -1]
    assert "Unknown action" in caplog.text

    assert economy.get_action_time("operation", "Nope") == -1
    assert economy.get_action_count_remaining("operation", "Nope") == -1
    assert economy.get_action_max_level("operation", "Nope") == -1
    assert economy.get_action_current_level("operation", "Nope") == -1
    assert economy.get_action_autolevel("operation", "Nope") is False
    assert economy.get_action_rep_gain("operation", "Nope") == -1
    assert economy.get_team_size("operation", "Nope") == -1
    assert economy.get_black_op_rank("Operation Nope") == -1
    assert economy.get_city_chaos("Atlantis") == -1
    assert economy.get_city_communities("Atlantis") == -1
    assert economy.get_city_estimated_population("Atlantis") == -1


def test_estimated_success_chance_is_an_ordered_pair() -> None:
    economy = _economy()
    low, high = economy.get_action_estimated_success_chance("contracts", "Bounty Hunter")
    assert 0.0 <= low <= high <= 1.0
    assert economy.get_action_estimated_success_chance("general", "Training") == [1.0, 1.0]


def test_mutations_raise_structured_errors() -> None:
    economy = _economy()
    with pytest.raises(InvalidActionError):
        economy.start_action("contract", "Nope")
    with pytest.raises(InvalidActionError):
        economy.set_action_autolevel("contract", "Nope", True)
    with pytest.raises(UnknownCityError):
        economy.switch_city("Atlantis")


def test_current_action_and_times() -> None:
    economy = _economy()
    assert economy.get_current_action() == {"type": "Idle", "name": "Idle"}
    assert economy.get_action_current_time() == 0

    economy.start_action("contract", "Tracking")
    assert economy.get_current_action() == {"type": "Contracts", "name": "Tracking"}
    assert economy.get_action_time("contract", "Tracking") == int(economy.session.current_action.total_duration * 1000)

    economy.process(10)
    assert economy.get_action_current_time() == 2000
    assert economy.stop_action() is True
    assert economy.get_current_action()["type"] == "Idle"


def test_count_remaining_by_category() -> None:
    economy = _economy()
    assert economy.get_action_count_remaining("general", "Training") == math.inf
    assert economy.get_action_count_remaining("blackop", "Operation Typhoon") == 1
    economy.session.completed_black_ops.add("Operation Typhoon")
    assert economy.get_action_count_remaining("blackop", "Operation Typhoon") == 0
    remaining = economy.get_action_count_remaining("contract", "Tracking")
    assert 25 <= remaining <= 150


def test_bonus_time_rounds_banked_cycles_half_up() -> None:
    economy = _economy()
    economy.session.stored_cycles = 12
    assert economy.get_bonus_time() == 2000
    economy.session.stored_cycles = 12.5
    assert economy.get_bonus_time() == 3000


def test_process_banks_cycles_and_spends_at_most_five_seconds() -> None:
    economy = _economy()
    economy.process(3)
    assert economy.session.sim_seconds == 0
    economy.process(3)
    assert economy.session.sim_seconds == 1
    assert economy.session.stored_cycles == 1

    economy.process(100)
    assert economy.session.sim_seconds == 6
    assert economy.get_bonus_time() == 15000


def test_idle_operatives_regenerate_stamina() -> None:
    economy = _economy()
    economy.session.stamina = 1.0
    economy.process(25)
    current, maximum = economy.get_stamina()
    assert 1.0 < current <= maximum


def test_switch_city_leaves_other_cities_alone() -> None:
    economy = _economy()
    before = {name: city.model_dump() for name, city in economy.session.cities.items()}
    assert economy.switch_city("Volhaven") == "Volhaven"
    assert economy.get_city() == "Volhaven"
    assert {name: city.model_dump() for name, city in economy.session.cities.items()} == before


def test_level_and_autolevel_round_trip() -> None:
    economy = _economy()
    assert economy.get_action_current_level("operation", "Raid") == 1
    assert economy.get_action_max_level("operation", "Raid") == 1
    assert economy.set_action_autolevel("operation", "Raid", True) is True
    assert economy.get_action_autolevel("operation", "Raid") is True
    assert economy.get_action_rep_gain("operation", "Raid") == pytest.approx(55.0)
    assert economy.get_black_op_rank("Operation Daedalus") == 400000
