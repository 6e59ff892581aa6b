"""Markov chains over persisted transition counters.

A :class:`MarkovChain` is a short-lived view of one chain id inside a
:class:`store.TransitionStore`.  It records transitions between consecutive
states and produces random walks, forwards or backwards, where every step is
drawn from a :class:`frequency.FrequencySet` rebuilt from the store.

Walks are generic: the caller decides when to stop (``stop(state, index)``)
and may veto individual candidates (``can_advance(state)``).  A vetoed
candidate is removed from that step's options and another one is drawn, so
a step either finds an acceptable state or runs out of options and ends the
walk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, List, Literal, Optional, Sequence, Type, TypeVar

from frequency import EmptySetError, FrequencySet
from store import TransitionStore
from words import Word

logger = logging.getLogger(__name__)

FORWARDS = "forwards"
BACKWARDS = "backwards"
Direction = Literal["forwards", "backwards"]

DEFAULT_MAX_WALK_LENGTH = 200

S = TypeVar("S")
StopCriterion = Callable[[S, int], bool]
AdvanceCriterion = Callable[[S], bool]


class NoTransitionError(EmptySetError):
    """Raised when a state has no usable transition in the walk direction."""


@dataclass(frozen=True)
class ChainProperties:
    """Generation options shared by the chains of an application.

    ``mutation_probability`` is carried for configuration compatibility but
    sampling does not use it yet.  ``max_walk_length`` bounds the number of
    steps of a single walk; ``None`` disables the bound.
    """

    mutation_probability: float = 0.2
    max_walk_length: Optional[int] = DEFAULT_MAX_WALK_LENGTH


class MarkovChain(Generic[S]):
    """View over the transitions stored for one chain id."""

    def __init__(
        self,
        chain_id: int,
        store: TransitionStore,
        properties: Optional[ChainProperties] = None,
        state_type: Type[S] = Word,
    ) -> None:
        self.id = chain_id
        self.store = store
        self.properties = properties or ChainProperties()
        self.state_type = state_type

    def add_transition(self, from_state: S, to_state: S) -> None:
        """Increment by one the frequency of ``from_state -> to_state``."""
        self.store.increment(self.id, from_state.serialize(), to_state.serialize())

    def add_transitions(self, states: Sequence[S]) -> None:
        """Add a transition between every pair of consecutive states."""
        for index in range(1, len(states)):
            self.add_transition(states[index - 1], states[index])

    def transitions_from(self, state: S) -> FrequencySet[S]:
        """States that may follow *state*, weighted by observed frequency."""
        return self._frequency_set(self.store.query_from(self.id, state.serialize()))

    def transitions_to(self, state: S) -> FrequencySet[S]:
        """States that may precede *state*, weighted by observed frequency."""
        return self._frequency_set(self.store.query_to(self.id, state.serialize()))

    def _frequency_set(self, rows) -> FrequencySet[S]:
        transitions: FrequencySet[S] = FrequencySet()
        for key, frequency in rows:
            transitions.increment(self.state_type.deserialize(key), frequency)
        return transitions

    def random_step(
        self,
        state: S,
        direction: Direction = FORWARDS,
        can_advance: Optional[AdvanceCriterion] = None,
    ) -> S:
        """Draw the state visited after *state* when walking in *direction*.

        Candidates rejected by *can_advance* are discarded and another one is
        drawn, until one is accepted or none remain.

        Raises:
            NoTransitionError: if there is no acceptable candidate.
        """
        if direction == FORWARDS:
            candidates = self.transitions_from(state)
        elif direction == BACKWARDS:
            candidates = self.transitions_to(state)
        else:
            raise ValueError(f"Unknown walk direction: {direction!r}")

        while True:
            try:
                candidate = candidates.random_element()
            except EmptySetError as exc:
                raise NoTransitionError(
                    f"No acceptable transition {direction} from {state}"
                ) from exc
            if can_advance is None or can_advance(candidate):
                return candidate
            logger.debug(f"random_step: rejected candidate {candidate}")
            candidates.discard(candidate)

    def random_walk(
        self,
        start: S,
        stop: StopCriterion,
        direction: Direction = FORWARDS,
        can_advance: Optional[AdvanceCriterion] = None,
    ) -> List[S]:
        """Generate a random walk ``[start, s1, s2, ...]`` through the chain.

        ``stop(state, index)`` is evaluated right after each state is added;
        the walk finishes as soon as it returns true.  The walk also finishes
        when the current state has no acceptable transition or when the
        configured maximum length is reached.
        """
        limit = self.properties.max_walk_length
        walk = [start]
        current = start
        index = 0
        while not stop(current, index):
            if limit is not None and index >= limit:
                logger.debug(f"random_walk: chain {self.id} reached {limit} steps")
                break
            try:
                current = self.random_step(current, direction, can_advance)
            except NoTransitionError as exc:
                logger.debug(f"random_walk: dead end on chain {self.id}: {exc}")
                break
            index += 1
            walk.append(current)
        return walk
