from __future__ import annotations

import pytest

from bladeburner_sim.core.catalog import parse_action_type
from bladeburner_sim.core.errors import InvalidActionError, NotFoundError, UnknownSkillError
from bladeburner_sim.core.loader import default_catalog
from bladeburner_sim.core.models import ActionType


def test_default_catalog_lists_every_category_in_content_order() -> None:
    catalog = default_catalog()
    assert catalog.list_names(ActionType.CONTRACT) == ["Tracking", "Bounty Hunter", "Retirement"]
    assert catalog.list_names(ActionType.OPERATION)[0] == "Investigation"
    assert catalog.list_names(ActionType.OPERATION)[-1] == "Assassination"
    assert len(catalog.list_names(ActionType.BLACK_OP)) == 21
    assert catalog.list_names(ActionType.BLACK_OP)[-1] == "Operation Daedalus"
    assert "Recruitment" in catalog.list_names(ActionType.GENERAL)
    assert len(catalog.skill_names()) == 10


def test_black_ops_never_decrease_in_required_rank() -> None:
    catalog = default_catalog()
    ranks = [definition.required_rank for definition in catalog.definitions(ActionType.BLACK_OP)]
    assert all(later >= earlier for earlier, later in zip(ranks, ranks[1:]))
    assert ranks[:2] == [2500, 2500]


def test_lookup_unknown_name_raises_not_found() -> None:
    catalog = default_catalog()
    with pytest.raises(InvalidActionError, match="name='Nope'"):
        catalog.lookup(ActionType.CONTRACT, "Nope")
    with pytest.raises(NotFoundError):
        catalog.lookup("bogus", "Tracking")
    with pytest.raises(UnknownSkillError):
        catalog.skill("Telekinesis")


def test_lookup_is_scoped_to_type() -> None:
    catalog = default_catalog()
    assert catalog.find(ActionType.OPERATION, "Tracking") is None
    assert catalog.find("contracts", "Tracking") is catalog.lookup(ActionType.CONTRACT, "Tracking")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("contract", ActionType.CONTRACT),
        ("Contracts", ActionType.CONTRACT),
        ("ops", ActionType.OPERATION),
        ("Black Operations", ActionType.BLACK_OP),
        ("blackop", ActionType.BLACK_OP),
        (" general action ", ActionType.GENERAL),
        ("gen", ActionType.GENERAL),
        (ActionType.OPERATION, ActionType.OPERATION),
        ("hacking", None),
    ],
)
def test_parse_action_type_aliases(raw, expected) -> None:
    assert parse_action_type(raw) == expected


def test_black_op_predecessor_follows_list_order() -> None:
    catalog = default_catalog()
    assert catalog.black_op_predecessor("Operation Typhoon") is None
    assert catalog.black_op_predecessor("Operation X").name == "Operation Zero"
