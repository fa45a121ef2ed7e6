from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable

from bladeburner_sim.core.models import ActionLogEntry

ROOT_LOGGER = "bladeburner_sim"
ACTIONS_LOGGER = "bladeburner_sim.actions"


@dataclass(slots=True)
class SimLoggerBundle:
    app: logging.Logger
    actions: logging.Logger
    latest_log_path: Path
    actions_log_path: Path


def _rotate_latest_log(logs_dir: Path, keep_archives: int = 5) -> Path:
    logs_dir.mkdir(parents=True, exist_ok=True)
    latest = logs_dir / "latest.log"
    if latest.exists():
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        latest.replace(logs_dir / f"latest_{stamp}.log")

    archives = sorted(
        (path for path in logs_dir.glob("latest_*.log") if path.is_file()),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    for stale in archives[keep_archives:]:
        stale.unlink(missing_ok=True)
    return latest


def configure_logging(logs_dir: Path, level: int = logging.INFO, console: bool = True) -> SimLoggerBundle:
    latest = _rotate_latest_log(logs_dir)
    actions_log_path = logs_dir / "actions.log"
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    app_logger = logging.getLogger(ROOT_LOGGER)
    app_logger.setLevel(level)
    app_logger.handlers.clear()
    app_logger.propagate = False

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        app_logger.addHandler(stream_handler)

    file_handler = logging.FileHandler(latest, mode="w", encoding="utf-8")
    file_handler.setFormatter(formatter)
    app_logger.addHandler(file_handler)

    # Action timeline goes to its own file only.
    actions_logger = logging.getLogger(ACTIONS_LOGGER)
    actions_logger.setLevel(logging.INFO)
    actions_logger.handlers.clear()
    actions_logger.propagate = False
    actions_handler = logging.FileHandler(actions_log_path, mode="w", encoding="utf-8")
    actions_handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
    actions_logger.addHandler(actions_handler)

    return SimLoggerBundle(
        app=app_logger,
        actions=actions_logger,
        latest_log_path=latest,
        actions_log_path=actions_log_path,
    )


def write_action_log(logger: logging.Logger, entries: Iterable[ActionLogEntry]) -> int:
    written = 0
    for entry in entries:
        logger.info(entry.format())
        written += 1
    return written
