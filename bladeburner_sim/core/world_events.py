from __future__ import annotations

from . import cities as city_ops
from .models import ActionLogEntry, CityState, OperativeSession
from .rng import DeterministicRNG, WeightedEntry

EVENT_TABLE: tuple[WeightedEntry[str], ...] = (
    WeightedEntry("new_community", 0.05),
    WeightedEntry("community_migration", 0.05),
    WeightedEntry("population_boom", 0.20),
    WeightedEntry("migration", 0.20),
    WeightedEntry("riots", 0.20),
    WeightedEntry("population_loss", 0.20),
    WeightedEntry("quiet", 0.10),
)


def next_event_delay(session: OperativeSession, rng: DeterministicRNG) -> float:
    settings = session.settings
    return float(rng.random_int(settings.random_event_min_seconds, settings.random_event_max_seconds))


def _change_population_share(city: CityState, low: int, high: int, sign: int, rng: DeterministicRNG) -> float:
    share = rng.random_int(low, high) / 100.0
    return city_ops.change_population_by_count(city, sign * float(round(city.population * share)))


def random_event(session: OperativeSession, rng: DeterministicRNG) -> ActionLogEntry | None:
    """Roll one background event against a random city. Estimates are left stale on purpose."""
    source = session.cities[rng.pick(list(session.cities))]
    kind = rng.pick_weighted(EVENT_TABLE)

    if kind == "new_community":
        city_ops.change_communities(source, 1)
        message = f"Intelligence reports a new community formed in {source.name}."
    elif kind == "community_migration":
        destination = city_ops.pick_other_city(session.cities, source.name, rng)
        if source.communities <= 0:
            return None
        source.communities -= 1
        destination.communities += 1
        message = f"A community relocated from {source.name} to {destination.name}."
    elif kind == "population_boom":
        delta = _change_population_share(source, 8, 24, 1, rng)
        message = f"Population in {source.name} grew by {delta:,.0f}."
    elif kind == "migration":
        migration = city_ops.trigger_migration(session.cities, source.name, rng)
        message = f"{migration['count']:,.0f} people migrated from {source.name} to {migration['to']}."
    elif kind == "riots":
        city_ops.change_chaos_by_count(source, 1)
        city_ops.change_chaos_by_percentage(source, rng.random_int(5, 20))
        message = f"Riots broke out in {source.name}; chaos is now {source.chaos:.2f}."
    elif kind == "population_loss":
        delta = _change_population_share(source, 8, 20, -1, rng)
        message = f"Population in {source.name} fell by {-delta:,.0f}."
    else:
        return None

    return session.append_action_log("EVENT", message, {"event": kind, "city": source.name})
