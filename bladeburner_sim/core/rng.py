from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")

_ZERO_STATE_FALLBACK = 0x6D2B79F5


def seed_to_uint32(seed: int | str) -> int:
    digest = hashlib.sha256(str(seed).encode("utf-8")).hexdigest()
    value = int(digest[:8], 16)
    return value if value != 0 else 0x9E3779B9


@dataclass(slots=True)
class WeightedEntry(Generic[T]):
    value: T
    weight: float


@dataclass(slots=True)
class DeterministicRNG:
    """Xorshift32 stream whose state lives on the session so runs replay exactly."""

    seed: int | str
    state: int
    calls: int = 0

    @classmethod
    def from_seed(cls, seed: int | str) -> "DeterministicRNG":
        return cls(seed=seed, state=seed_to_uint32(seed), calls=0)

    def _next_uint32(self) -> int:
        value = self.state & 0xFFFFFFFF
        value ^= (value << 13) & 0xFFFFFFFF
        value ^= (value >> 17) & 0xFFFFFFFF
        value ^= (value << 5) & 0xFFFFFFFF
        value &= 0xFFFFFFFF
        self.state = value if value != 0 else _ZERO_STATE_FALLBACK
        self.calls += 1
        return self.state

    def roll(self) -> float:
        """Uniform float in [0, 1); used for every success roll."""
        return self._next_uint32() / 2**32

    def random_int(self, low: int, high: int) -> int:
        # Inclusive on both ends, matching how outcome ranges are written in content.
        if high < low:
            raise ValueError(f"random_int requires high ({high}) >= low ({low}).")
        return low + int(self.roll() * (high - low + 1))

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.roll()

    def pick(self, values: Sequence[T]) -> T:
        if not values:
            raise ValueError("pick requires a non-empty sequence.")
        return values[int(self.roll() * len(values))]

    def pick_weighted(self, entries: Sequence[WeightedEntry[T]]) -> T:
        valid_entries = [entry for entry in entries if entry.weight > 0]
        if not valid_entries:
            raise ValueError("pick_weighted requires at least one positive weight.")

        cursor = self.roll() * sum(entry.weight for entry in valid_entries)
        for entry in valid_entries:
            if cursor < entry.weight:
                return entry.value
            cursor -= entry.weight
        return valid_entries[-1].value
