from __future__ import annotations

import logging
import math
from typing import Any

from . import engine
from .catalog import ActionCatalog
from .errors import NotFoundError, OutOfRangeError
from .formulas import action_duration, estimated_success_range, rank_reward, skill_multipliers
from .ledger import get_progress, switch_city
from .models import ActionDefinition, ActionType, CityState, OperativeSession
from .personnel import set_team_size
from .settings import CYCLES_PER_SECOND
from .skills import skill_level, skill_upgrade_cost, upgrade_skill

logger = logging.getLogger(__name__)

IDLE = {"type": "Idle", "name": "Idle"}


class ActionEconomy:
    """Script-facing surface over one operative session.

    Queries answer with -1, [-1, -1] or False when the action, skill or city
    does not exist; mutations raise.
    """

    def __init__(self, session: OperativeSession, catalog: ActionCatalog) -> None:
        self.session = session
        self.catalog = catalog

    def _find(self, action_type: ActionType | str, name: str) -> ActionDefinition | None:
        definition = self.catalog.find(action_type, name)
        if definition is None:
            logger.debug("Unknown action type=%r name=%r", action_type, name)
        return definition

    def _city(self, city_name: str | None) -> CityState | None:
        name = self.session.city if city_name is None else city_name
        city = self.session.cities.get(name)
        if city is None:
            logger.debug("Unknown city %r", name)
        return city

    # Catalog listings

    def get_contract_names(self) -> list[str]:
        return self.catalog.list_names(ActionType.CONTRACT)

    def get_operation_names(self) -> list[str]:
        return self.catalog.list_names(ActionType.OPERATION)

    def get_black_op_names(self) -> list[str]:
        return self.catalog.list_names(ActionType.BLACK_OP)

    def get_general_action_names(self) -> list[str]:
        return self.catalog.list_names(ActionType.GENERAL)

    def get_skill_names(self) -> list[str]:
        return self.catalog.skill_names()

    def get_black_op_rank(self, name: str) -> float:
        definition = self._find(ActionType.BLACK_OP, name)
        if definition is None:
            return -1
        return float(definition.required_rank or 0)

    # Action queries

    def get_current_action(self) -> dict[str, str]:
        current = self.session.current_action
        if current is None:
            return dict(IDLE)
        return {"type": current.action_type.label, "name": current.name}

    def get_action_time(self, action_type: ActionType | str, name: str) -> int:
        definition = self._find(action_type, name)
        if definition is None:
            return -1
        progress = get_progress(self.session, definition)
        mults = skill_multipliers(self.session, self.catalog)
        return int(action_duration(definition, progress.level, self.session, mults) * 1000)

    def get_action_current_time(self) -> int:
        current = self.session.current_action
        if current is None:
            return 0
        return int(current.progress_seconds * 1000)

    def get_action_estimated_success_chance(self, action_type: ActionType | str, name: str) -> list[float]:
        definition = self._find(action_type, name)
        if definition is None:
            return [-1, -1]
        progress = get_progress(self.session, definition)
        low, high = estimated_success_range(
            definition,
            progress.level,
            self.session,
            self.session.current_city,
            self.catalog,
            progress.team_size,
        )
        return [low, high]

    def get_action_rep_gain(self, action_type: ActionType | str, name: str, level: int | None = None) -> float:
        definition = self._find(action_type, name)
        if definition is None:
            return -1
        if level is None:
            level = get_progress(self.session, definition).level
        return rank_reward(definition, level, self.session.settings)

    def get_action_count_remaining(self, action_type: ActionType | str, name: str) -> float:
        definition = self._find(action_type, name)
        if definition is None:
            return -1
        if definition.type is ActionType.BLACK_OP:
            return 0 if definition.name in self.session.completed_black_ops else 1
        progress = get_progress(self.session, definition)
        if progress.count is None:
            return math.inf
        return math.floor(progress.count)

    def get_action_max_level(self, action_type: ActionType | str, name: str) -> int:
        definition = self._find(action_type, name)
        if definition is None:
            return -1
        return get_progress(self.session, definition).max_level

    def get_action_current_level(self, action_type: ActionType | str, name: str) -> int:
        definition = self._find(action_type, name)
        if definition is None:
            return -1
        return get_progress(self.session, definition).level

    def get_action_autolevel(self, action_type: ActionType | str, name: str) -> bool:
        definition = self._find(action_type, name)
        if definition is None:
            return False
        return get_progress(self.session, definition).auto_level

    def get_team_size(self, action_type: ActionType | str, name: str) -> int:
        definition = self._find(action_type, name)
        if definition is None:
            return -1
        return get_progress(self.session, definition).team_size

    # Ledger telemetry

    def get_rank(self) -> float:
        return self.session.rank

    def get_skill_points(self) -> int:
        return self.session.skill_points

    def get_skill_level(self, skill_name: str) -> int:
        if skill_name not in self.catalog.skills:
            logger.debug("Unknown skill %r", skill_name)
            return -1
        return skill_level(self.session, skill_name)

    def get_skill_upgrade_cost(self, skill_name: str, count: int = 1) -> float:
        try:
            return skill_upgrade_cost(
                self.catalog,
                skill_name,
                skill_level(self.session, skill_name),
                count,
                self.session.settings,
            )
        except NotFoundError:
            logger.debug("Unknown skill %r", skill_name)
            return -1
        except OutOfRangeError:
            return math.inf

    def get_stamina(self) -> list[float]:
        return [self.session.stamina, self.session.max_stamina]

    def get_city(self) -> str:
        return self.session.city

    def get_city_estimated_population(self, city_name: str | None = None) -> float:
        city = self._city(city_name)
        return -1 if city is None else city.population_estimate

    def get_city_communities(self, city_name: str | None = None) -> int:
        city = self._city(city_name)
        return -1 if city is None else city.communities

    def get_city_chaos(self, city_name: str | None = None) -> float:
        city = self._city(city_name)
        return -1 if city is None else city.chaos

    def get_bonus_time(self) -> int:
        return engine.bonus_time_ms(self.session)

    # Mutations

    def start_action(self, action_type: ActionType | str, name: str) -> None:
        engine.start_action(self.session, self.catalog, action_type, name)

    def stop_action(self) -> bool:
        return engine.reset_action(self.session)

    def set_action_level(self, action_type: ActionType | str, name: str, level: int) -> int:
        return engine.set_action_level(self.session, self.catalog, action_type, name, level)

    def set_action_autolevel(self, action_type: ActionType | str, name: str, enabled: bool) -> bool:
        return engine.set_auto_level(self.session, self.catalog, action_type, name, enabled)

    def upgrade_skill(self, skill_name: str, count: int = 1) -> int:
        return upgrade_skill(self.session, self.catalog, skill_name, count)

    def set_team_size(self, action_type: ActionType | str, name: str, size: int) -> int:
        return set_team_size(self.session, self.catalog, action_type, name, size)

    def switch_city(self, city_name: str) -> str:
        return switch_city(self.session, city_name)

    def process(self, cycles: float = CYCLES_PER_SECOND) -> engine.TickResult:
        return engine.process(self.session, self.catalog, cycles)

    def snapshot(self) -> dict[str, Any]:
        return {
            "rank": self.session.rank,
            "skillPoints": self.session.skill_points,
            "stamina": self.get_stamina(),
            "city": self.session.city,
            "personnel": self.session.personnel,
            "currentAction": self.get_current_action(),
            "bonusTime": self.get_bonus_time(),
        }
