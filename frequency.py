"""Weighted multisets for the chatterchain engine.

A :class:`FrequencySet` counts how many times each element has been seen and
draws random elements with a probability proportional to those counts.  The
chain builds one of these for every transition query and throws it away
afterwards, so the structure is deliberately small: a dict keyed by the
element's serialized form plus a running total.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterator, List, Protocol, Tuple, TypeVar


class Serializable(Protocol):
    def serialize(self) -> str:
        ...


T = TypeVar("T", bound=Serializable)

# Module-level random instance used for sampling; tests may reseed it.
_rng = random.Random()


class EmptySetError(LookupError):
    """Raised when a random element is requested from an empty set."""


@dataclass
class _Entry(Generic[T]):
    element: T
    frequency: int = 0


class FrequencySet(Generic[T]):
    """Multiset whose random draws follow the relative frequencies."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._entries: Dict[str, _Entry[T]] = {}
        self._total = 0
        self._rng = rng or _rng

    @property
    def total(self) -> int:
        return self._total

    def increment(self, element: T, count: int = 1) -> int:
        """Add *count* appearances of *element* and return its new frequency."""
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        key = element.serialize()
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry(element)
        entry.frequency += count
        self._total += count
        return entry.frequency

    def decrement(self, element: T, count: int = 1) -> int:
        """Remove up to *count* appearances of *element*.

        Frequencies never drop below zero; the total shrinks by the amount
        actually removed.
        """
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        entry = self._entries.get(element.serialize())
        if entry is None:
            return 0
        effective = min(count, entry.frequency)
        entry.frequency -= effective
        self._total -= effective
        return entry.frequency

    def discard(self, element: T) -> None:
        """Drop every appearance of *element*."""
        entry = self._entries.pop(element.serialize(), None)
        if entry is not None:
            self._total -= entry.frequency

    def frequency(self, element: T) -> int:
        entry = self._entries.get(element.serialize())
        return entry.frequency if entry else 0

    def probability(self, element: T) -> float:
        if self._total == 0:
            return 0.0
        return self.frequency(element) / self._total

    def random_element(self) -> T:
        """Return an element drawn according to the relative frequencies.

        Raises:
            EmptySetError: if the set holds no appearances at all.
        """
        if self._total == 0:
            raise EmptySetError("The set is empty")
        dice = self._rng.random() * self._total
        accumulated = 0
        chosen = None
        for entry in self._entries.values():
            if entry.frequency == 0:
                continue
            accumulated += entry.frequency
            chosen = entry
            if accumulated > dice:
                break
        return chosen.element

    def elements(self) -> List[T]:
        """All elements with a nonzero frequency, in insertion order."""
        return [e.element for e in self._entries.values() if e.frequency > 0]

    def items(self) -> Iterator[Tuple[T, int]]:
        for entry in self._entries.values():
            if entry.frequency > 0:
                yield entry.element, entry.frequency

    def filter(self, criterion: Callable[[T], bool]) -> "FrequencySet[T]":
        """Return a new set keeping only the elements accepted by *criterion*."""
        filtered: FrequencySet[T] = FrequencySet(self._rng)
        for element, frequency in self.items():
            if criterion(element):
                filtered.increment(element, frequency)
        return filtered

    def is_empty(self) -> bool:
        return self._total == 0

    def __len__(self) -> int:
        return sum(1 for e in self._entries.values() if e.frequency > 0)

    def __contains__(self, element: T) -> bool:
        return self.frequency(element) > 0

    def __repr__(self) -> str:
        pairs = ", ".join(f"{e.serialize()}: {f}" for e, f in self.items())
        return f"FrequencySet({{{pairs}}})"
