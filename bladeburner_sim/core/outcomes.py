from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from . import cities as city_ops
from .catalog import ActionCatalog
from .formulas import skill_multipliers
from .ledger import change_rank, change_stamina, get_progress, recalculate_max_stamina
from .models import ActionLogEntry, ActionType, OperativeSession
from .rng import DeterministicRNG

INCITE_COUNT_SECONDS = 180.0
INCITE_CHAOS_FLAT = 10.0


@dataclass(slots=True)
class OutcomeReport:
    rank_delta: float = 0.0
    skill_points_gained: int = 0
    stamina_delta: float = 0.0
    stamina_bonus_delta: float = 0.0
    chaos_delta: dict[str, float] = field(default_factory=dict)
    population_delta: dict[str, float] = field(default_factory=dict)
    estimate_delta: dict[str, float] = field(default_factory=dict)
    communities_delta: dict[str, int] = field(default_factory=dict)
    recruited: int = 0
    migrations: list[dict[str, Any]] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def _accumulate(counter: dict[str, Any], key: str, delta: float) -> None:
    if abs(delta) <= 1e-12:
        return
    counter[key] = counter.get(key, 0) + delta


def _draw(value: Any, rng: DeterministicRNG) -> float:
    # [low, high] ranges of ints roll an int; anything else rolls a float.
    if isinstance(value, list):
        low, high = value
        if isinstance(low, int) and isinstance(high, int):
            return float(rng.random_int(low, high))
        return rng.uniform(float(low), float(high))
    return float(value)


def field_analysis_effectiveness(session: OperativeSession) -> float:
    stats = session.stats
    return 0.04 * stats.hacking**0.3 + 0.04 * stats.intelligence**0.9 + 0.02 * stats.charisma**0.3


def diplomacy_factor(session: OperativeSession) -> float:
    charisma = session.stats.charisma
    return (100.0 - (charisma**0.045 + charisma / 1000.0)) / 100.0


def _incite_violence(session: OperativeSession, catalog: ActionCatalog, report: OutcomeReport) -> None:
    period = session.settings.action_count_growth_period
    for action_type in (ActionType.CONTRACT, ActionType.OPERATION):
        for definition in catalog.definitions(action_type):
            progress = get_progress(session, definition)
            progress.count = (progress.count or 0.0) + INCITE_COUNT_SECONDS * progress.count_growth / period
    for city in session.cities.values():
        before = city.chaos
        city.chaos += INCITE_CHAOS_FLAT
        city.chaos += city.chaos / math.log10(city.chaos)
        _accumulate(report.chaos_delta, city.name, city.chaos - before)


def apply_outcomes(
    session: OperativeSession,
    catalog: ActionCatalog,
    outcomes: list[dict[str, Any]],
    rng: DeterministicRNG,
) -> tuple[list[ActionLogEntry], OutcomeReport]:
    logs: list[ActionLogEntry] = []
    report = OutcomeReport()
    city = session.current_city
    mults = skill_multipliers(session, catalog)

    for outcome in outcomes:
        (op, value), = outcome.items()

        if op == "changeChaosByCount":
            _accumulate(report.chaos_delta, city.name, city_ops.change_chaos_by_count(city, float(value)))

        elif op == "changeChaosByPercentage":
            delta = city_ops.change_chaos_by_percentage(city, _draw(value, rng))
            _accumulate(report.chaos_delta, city.name, delta)

        elif op == "changePopulationByCount":
            delta = city_ops.change_population_by_count(
                city,
                float(value["count"]),
                change_estimate=bool(value.get("changeEstimate", False)),
            )
            _accumulate(report.population_delta, city.name, delta)
            if value.get("changeEstimate", False):
                _accumulate(report.estimate_delta, city.name, delta)

        elif op == "changePopulationByPercentage":
            estimate_before = city.population_estimate
            delta = city_ops.change_population_by_percentage(
                city,
                _draw(value["percent"], rng),
                change_est_equally=bool(value.get("changeEstEqually", False)),
                non_zero=bool(value.get("nonZero", False)),
            )
            _accumulate(report.population_delta, city.name, delta)
            _accumulate(report.estimate_delta, city.name, city.population_estimate - estimate_before)

        elif op == "improvePopulationEstimateByCount":
            delta = city_ops.improve_estimate_by_count(city, _draw(value, rng))
            _accumulate(report.estimate_delta, city.name, delta)

        elif op == "improvePopulationEstimateByPercentage":
            delta = city_ops.improve_estimate_by_percentage(city, float(value), mults.success_estimate)
            _accumulate(report.estimate_delta, city.name, delta)

        elif op == "fieldAnalysis":
            effectiveness = field_analysis_effectiveness(session) * float(value)
            delta = city_ops.improve_estimate_by_percentage(city, effectiveness, mults.success_estimate)
            _accumulate(report.estimate_delta, city.name, delta)

        elif op == "changeCommunities":
            _accumulate(report.communities_delta, city.name, city_ops.change_communities(city, int(value)))

        elif op == "triggerMigration":
            if rng.roll() < float(value):
                migration = city_ops.trigger_migration(session.cities, city.name, rng)
                report.migrations.append(migration)
                _accumulate(report.population_delta, city.name, -float(migration["count"]))
                _accumulate(report.population_delta, str(migration["to"]), float(migration["count"]))

        elif op == "gainRank":
            before = session.rank
            report.skill_points_gained += change_rank(session, float(value) * session.settings.rank_gain_mult)
            report.rank_delta += session.rank - before

        elif op == "gainMaxStamina":
            bonus = float(value) * mults.stamina
            session.stamina_bonus += bonus
            report.stamina_bonus_delta += bonus
            recalculate_max_stamina(session, catalog, mults)

        elif op == "loseStamina":
            report.stamina_delta += change_stamina(session, -float(value))

        elif op == "regenerateStamina":
            report.stamina_delta += change_stamina(session, session.max_stamina * float(value) / 100.0)

        elif op == "recruit":
            session.personnel += 1
            report.recruited += 1

        elif op == "diplomacy":
            before = city.chaos
            city.chaos = max(0.0, city.chaos * diplomacy_factor(session))
            _accumulate(report.chaos_delta, city.name, city.chaos - before)

        elif op == "inciteViolence":
            _incite_violence(session, catalog, report)

        else:
            raise ValueError(f"Unsupported outcome operator '{op}'.")

    if report.chaos_delta:
        logs.append(
            session.append_action_log(
                "CITY",
                "Chaos " + ", ".join(f"{name} {delta:+.3f}" for name, delta in sorted(report.chaos_delta.items())) + ".",
                {"chaosDelta": dict(report.chaos_delta)},
            )
        )
    if report.population_delta:
        logs.append(
            session.append_action_log(
                "CITY",
                "Population "
                + ", ".join(f"{name} {delta:+,.0f}" for name, delta in sorted(report.population_delta.items()))
                + ".",
                {"populationDelta": dict(report.population_delta)},
            )
        )
    if report.estimate_delta:
        logs.append(
            session.append_action_log(
                "CITY",
                "Population estimate "
                + ", ".join(f"{name} {delta:+,.0f}" for name, delta in sorted(report.estimate_delta.items()))
                + ".",
                {"estimateDelta": dict(report.estimate_delta)},
            )
        )
    if report.communities_delta:
        logs.append(
            session.append_action_log(
                "CITY",
                "Communities "
                + ", ".join(f"{name} {delta:+d}" for name, delta in sorted(report.communities_delta.items()))
                + ".",
                {"communitiesDelta": dict(report.communities_delta)},
            )
        )
    for migration in report.migrations:
        logs.append(
            session.append_action_log(
                "CITY",
                f"{migration['count']:,.0f} people migrated from {migration['from']} to {migration['to']}.",
                dict(migration),
            )
        )
    if report.recruited:
        logs.append(
            session.append_action_log(
                "TEAM",
                f"Recruited {report.recruited} new team member(s); personnel now {session.personnel}.",
                {"recruited": report.recruited},
            )
        )
    if abs(report.stamina_bonus_delta) > 1e-12:
        logs.append(
            session.append_action_log(
                "ACTION",
                f"Max stamina now {session.max_stamina:.3f}.",
                {"staminaBonusDelta": report.stamina_bonus_delta},
            )
        )

    return logs, report
