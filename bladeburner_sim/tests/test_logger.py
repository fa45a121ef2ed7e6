from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bladeburner_sim.app.services.logger import ACTIONS_LOGGER, ROOT_LOGGER, configure_logging, write_action_log
from bladeburner_sim.core.engine import create_session, run_simulation, start_action
from bladeburner_sim.core.loader import default_catalog


@pytest.fixture
def restore_loggers():
    yield
    for name in (ROOT_LOGGER, ACTIONS_LOGGER):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


def test_configure_logging_rotates_latest_and_writes_action_log(tmp_path: Path, restore_loggers) -> None:
    logs_dir = tmp_path / "logs"
    logs_dir.mkdir()
    (logs_dir / "latest.log").write_text("previous run\n", encoding="utf-8")

    bundle = configure_logging(logs_dir, console=False)
    bundle.app.info("simulation started")

    catalog = default_catalog()
    session = create_session(5, catalog)
    start_action(session, catalog, "general", "Training")
    _, timeline = run_simulation(session, catalog, seconds=60)
    written = write_action_log(bundle.actions, timeline)

    for handler in bundle.app.handlers + bundle.actions.handlers:
        handler.flush()

    assert written == len(timeline) > 0
    assert len(list(logs_dir.glob("latest_*.log"))) == 1
    assert "simulation started" in bundle.latest_log_path.read_text(encoding="utf-8")
    assert "Training" in bundle.actions_log_path.read_text(encoding="utf-8")
