from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from bladeburner_sim.core.loader import ContentValidationError, load_catalog


def _copy_content(tmp_path: Path) -> Path:
    source_content = Path(__file__).resolve().parents[1] / "content"
    test_content = tmp_path / "content"
    shutil.copytree(source_content, test_content)
    return test_content


def _rewrite(path: Path, mutate) -> None:
    payload = json.loads(path.read_text(encoding="utf-8"))
    mutate(payload)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def test_shipped_content_loads(tmp_path: Path) -> None:
    catalog = load_catalog(_copy_content(tmp_path))
    assert catalog.skill("Overclock").max_level == 90


def test_unknown_outcome_operator_is_rejected(tmp_path: Path) -> None:
    content = _copy_content(tmp_path)
    _rewrite(content / "contracts.json", lambda data: data[0]["onSuccess"].append({"summonMeteor": 1}))

    with pytest.raises(ContentValidationError, match="unsupported outcome operator 'summonMeteor'"):
        load_catalog(content)


def test_chaos_reduction_requires_stealth(tmp_path: Path) -> None:
    content = _copy_content(tmp_path)

    def mutate(data):
        raid = next(entry for entry in data if entry["name"] == "Raid")
        raid["onSuccess"].append({"changeChaosByCount": -5})

    _rewrite(content / "operations.json", mutate)

    with pytest.raises(ContentValidationError, match="may only reduce chaos on stealth actions"):
        load_catalog(content)


def test_black_ops_out_of_rank_order_are_rejected(tmp_path: Path) -> None:
    content = _copy_content(tmp_path)

    def mutate(data):
        data[1], data[2] = data[2], data[1]

    _rewrite(content / "blackops.json", mutate)

    with pytest.raises(ContentValidationError, match="cannot require less rank than"):
        load_catalog(content)


def test_city_outcomes_are_not_allowed_on_black_ops(tmp_path: Path) -> None:
    content = _copy_content(tmp_path)
    _rewrite(content / "blackops.json", lambda data: data[0].setdefault("onSuccess", []).append({"changeCommunities": -1}))

    with pytest.raises(ContentValidationError, match="not allowed on BlackOps"):
        load_catalog(content)


def test_duplicate_names_are_rejected(tmp_path: Path) -> None:
    content = _copy_content(tmp_path)
    _rewrite(content / "general.json", lambda data: data.append(dict(data[0])))

    with pytest.raises(ContentValidationError, match="Duplicate General name 'Training'"):
        load_catalog(content)


def test_schema_errors_carry_field_details(tmp_path: Path) -> None:
    content = _copy_content(tmp_path)
    _rewrite(content / "contracts.json", lambda data: data[1].pop("baseDifficulty"))

    with pytest.raises(ContentValidationError) as excinfo:
        load_catalog(content)
    assert "Schema validation failed for contracts.json" in str(excinfo.value)
    assert any("baseDifficulty" in detail for detail in excinfo.value.details)


def test_unknown_skill_effect_is_rejected(tmp_path: Path) -> None:
    content = _copy_content(tmp_path)
    _rewrite(content / "skills.json", lambda data: data[0]["effects"].update({"luck": 5}))

    with pytest.raises(ContentValidationError, match="skills.json"):
        load_catalog(content)


def test_missing_content_file_is_reported(tmp_path: Path) -> None:
    content = _copy_content(tmp_path)
    (content / "general.json").unlink()

    with pytest.raises(ContentValidationError, match="Missing content file"):
        load_catalog(content)
