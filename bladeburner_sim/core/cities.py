from __future__ import annotations

from .models import CITY_NAMES, CityState
from .rng import DeterministicRNG

POPULATION_RANGE = (1_000_000_000, 1_500_000_000)
COMMUNITY_RANGE = (5, 150)


def create_cities(rng: DeterministicRNG) -> dict[str, CityState]:
    cities: dict[str, CityState] = {}
    for name in CITY_NAMES:
        population = float(rng.random_int(*POPULATION_RANGE))
        # Estimates start off by up to 50% in either direction.
        estimate = population * (rng.roll() + 0.5)
        cities[name] = CityState(
            name=name,
            population=population,
            population_estimate=estimate,
            communities=rng.random_int(*COMMUNITY_RANGE),
        )
    return cities


def improve_estimate_by_count(city: CityState, count: float) -> float:
    """Move the estimate ``count`` people toward the true population. Returns the signed change."""
    if count < 0:
        raise ValueError("Population estimate improvements must be non-negative.")
    before = city.population_estimate
    if city.population_estimate < city.population:
        city.population_estimate = min(city.population, city.population_estimate + count)
    elif city.population_estimate > city.population:
        city.population_estimate = max(city.population, city.population_estimate - count)
    return city.population_estimate - before


def improve_estimate_by_percentage(city: CityState, percent: float, skill_mult: float = 1.0) -> float:
    if percent < 0:
        raise ValueError("Population estimate improvements must be non-negative.")
    percent *= skill_mult
    before = city.population_estimate
    if city.population_estimate < city.population:
        # +1 so an estimate of zero can still recover.
        estimate = (city.population_estimate + 1) * (1 + percent / 100.0)
        city.population_estimate = min(city.population, estimate)
    elif city.population_estimate > city.population:
        estimate = city.population_estimate * (1 - percent / 100.0) + 1
        city.population_estimate = max(city.population, estimate)
    return city.population_estimate - before


def change_population_by_count(city: CityState, count: float, change_estimate: bool = False) -> float:
    before = city.population
    city.population = max(0.0, city.population + count)
    delta = city.population - before
    if change_estimate:
        city.population_estimate = max(0.0, city.population_estimate + delta)
    return delta


def change_population_by_percentage(
    city: CityState,
    percent: float,
    change_est_equally: bool = False,
    non_zero: bool = False,
) -> float:
    if percent == 0:
        return 0.0
    change = float(round(city.population * (percent / 100.0)))
    if non_zero and change == 0:
        change = 1.0 if percent > 0 else -1.0
    return change_population_by_count(city, change, change_estimate=change_est_equally)


def change_chaos_by_count(city: CityState, count: float) -> float:
    before = city.chaos
    city.chaos = max(0.0, city.chaos + count)
    return city.chaos - before


def change_chaos_by_percentage(city: CityState, percent: float) -> float:
    before = city.chaos
    city.chaos = max(0.0, city.chaos * (1 + percent / 100.0))
    return city.chaos - before


def change_communities(city: CityState, count: int) -> int:
    before = city.communities
    city.communities = max(0, city.communities + count)
    return city.communities - before


def decay_chaos(cities: dict[str, CityState], amount: float) -> None:
    for city in cities.values():
        city.chaos = max(0.0, city.chaos - amount)


def pick_other_city(cities: dict[str, CityState], source: str, rng: DeterministicRNG) -> CityState:
    others = [name for name in cities if name != source]
    return cities[rng.pick(others)]


def trigger_migration(cities: dict[str, CityState], source: str, rng: DeterministicRNG) -> dict[str, object]:
    """Move 3-15% of a city's people elsewhere; occasionally a whole community moves with them."""
    source_city = cities[source]
    destination = pick_other_city(cities, source, rng)
    percentage = rng.random_int(3, 15) / 100.0
    community_moved = False
    if rng.roll() < 0.05 and source_city.communities > 0:
        source_city.communities -= 1
        destination.communities += 1
        percentage = rng.random_int(10, 20) / 100.0
        community_moved = True

    count = float(round(source_city.population * percentage))
    source_city.population -= count
    destination.population += count
    return {
        "from": source,
        "to": destination.name,
        "count": count,
        "communityMoved": community_moved,
    }
