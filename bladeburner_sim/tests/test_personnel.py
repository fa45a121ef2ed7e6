from __future__ import annotations

import pytest

from bladeburner_sim.core.engine import create_session
from bladeburner_sim.core.errors import (
    InsufficientPersonnelError,
    InsufficientResourceError,
    InvalidActionError,
    OutOfRangeError,
)
from bladeburner_sim.core.ledger import get_progress
from bladeburner_sim.core.loader import default_catalog
from bladeburner_sim.core.models import ActionType
from bladeburner_sim.core.personnel import apply_team_casualties, assigned_personnel, set_team_size
from bladeburner_sim.core.rng import DeterministicRNG


def _session():
    catalog = default_catalog()
    session = create_session("teams", catalog)
    session.personnel = 10
    return catalog, session


def test_assignments_up_to_the_pool_succeed_and_one_more_fails() -> None:
    catalog, session = _session()
    assert set_team_size(session, catalog, ActionType.OPERATION, "Investigation", 6) == 6
    assert set_team_size(session, catalog, ActionType.OPERATION, "Raid", 4) == 4
    assert assigned_personnel(session) == 10

    with pytest.raises(InsufficientResourceError):
        set_team_size(session, catalog, ActionType.OPERATION, "Sting Operation", 1)
    with pytest.raises(InsufficientPersonnelError):
        set_team_size(session, catalog, ActionType.OPERATION, "Raid", 5)
    assert get_progress(session, catalog.lookup(ActionType.OPERATION, "Raid")).team_size == 4


def test_resizing_replaces_the_previous_assignment() -> None:
    catalog, session = _session()
    set_team_size(session, catalog, ActionType.OPERATION, "Investigation", 10)
    set_team_size(session, catalog, ActionType.OPERATION, "Investigation", 7)
    assert set_team_size(session, catalog, ActionType.BLACK_OP, "Operation Typhoon", 3) == 3
    assert assigned_personnel(session) == 10


def test_invalid_team_requests() -> None:
    catalog, session = _session()
    with pytest.raises(OutOfRangeError):
        set_team_size(session, catalog, ActionType.OPERATION, "Investigation", -1)
    with pytest.raises(InvalidActionError, match="does not take a team"):
        set_team_size(session, catalog, ActionType.CONTRACT, "Tracking", 1)
    with pytest.raises(InvalidActionError):
        set_team_size(session, catalog, ActionType.OPERATION, "Missing", 1)


def test_casualties_shrink_team_and_pool_together() -> None:
    catalog, session = _session()
    definition = catalog.lookup(ActionType.OPERATION, "Raid")
    set_team_size(session, catalog, ActionType.OPERATION, "Raid", 8)
    progress = get_progress(session, definition)

    rng = DeterministicRNG.from_seed("casualties")
    total = 0
    for _ in range(20):
        team_before = progress.team_size
        losses = apply_team_casualties(session, definition, progress, success=True, rng=rng)
        assert 0 <= losses <= -(-team_before // 2)
        total += losses

    assert progress.team_size == 8 - total
    assert session.personnel == 10 - total
    assert session.team_lost == total
    assert assigned_personnel(session) <= session.personnel


def test_no_casualties_without_a_team() -> None:
    catalog, session = _session()
    definition = catalog.lookup(ActionType.OPERATION, "Raid")
    progress = get_progress(session, definition)
    assert apply_team_casualties(session, definition, progress, success=False, rng=DeterministicRNG.from_seed(1)) == 0
    assert session.personnel == 10
