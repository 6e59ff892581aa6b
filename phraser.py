"""Phrase level operations on word chains.

The :class:`Phraser` is what the chat shell talks to.  It stores incoming
phrases into the chain of their conversation and generates new text from
it: free phrases, extensions of a given phrase, and haikus.

Haiku generation drives an ordinary forward walk with two hooks.  The stop
hook feeds every visited word into a :class:`haiku.Haiku` and stops once
the poem is valid.  The advance hook vetoes words that would overflow the
current verse, and words that close a verse early but cannot be followed by
anything.  There is no backtracking: a walk that gets stuck is thrown away
and a new one is started, a bounded number of times.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from chain import BACKWARDS, FORWARDS, ChainProperties, MarkovChain
from haiku import COMPLETE, FALSE, Haiku
from metrics import SyllabificationError
from store import TransitionStore
from words import INITIAL, Word, render, tokenize

logger = logging.getLogger(__name__)

DEFAULT_HAIKU_ATTEMPTS = 20


class ImpossibleHaikuError(Exception):
    """Raised when no haiku could be built for a chain."""


class Phraser:
    """Generates and learns phrases using one word chain per chat."""

    def __init__(
        self,
        store: TransitionStore,
        chain_properties: Optional[ChainProperties] = None,
        haiku_attempts: int = DEFAULT_HAIKU_ATTEMPTS,
    ) -> None:
        self.store = store
        self.chain_properties = chain_properties or ChainProperties()
        self.haiku_attempts = haiku_attempts

    def chain(self, chain_id: int) -> MarkovChain[Word]:
        return MarkovChain(chain_id, self.store, self.chain_properties)

    def store_phrase(self, chain_id: int, phrase: str) -> None:
        """Feed the chain of *chain_id* with the words of *phrase*."""
        words = tokenize(phrase)
        if len(words) <= 2:
            logger.debug(f"store_phrase: nothing to learn from {phrase!r}")
            return
        self.chain(chain_id).add_transitions(words)

    def generate_phrase(self, chain_id: int) -> str:
        """Return a random phrase; empty if the chain has not learnt anything."""
        walk = self.chain(chain_id).random_walk(INITIAL, lambda w, i: w.is_terminal)
        return render(walk)

    def extend_phrase(
        self, chain_id: int, phrase: str, before: bool, after: bool
    ) -> str:
        """Randomly add words before and/or after *phrase*.

        A side is only extended when the chain knows how to continue from
        the word at that edge.
        """
        words = phrase.split()
        if not words:
            return phrase
        chain = self.chain(chain_id)
        extended = phrase
        if before:
            first = Word(words[0])
            if not chain.transitions_to(first).is_empty():
                walk = chain.random_walk(first, lambda w, i: w.is_initial, BACKWARDS)
                prefix = render(reversed(walk[1:]))
                if prefix:
                    extended = f"{prefix} {extended}"
        if after:
            last = Word(words[-1])
            if not chain.transitions_from(last).is_empty():
                walk = chain.random_walk(last, lambda w, i: w.is_terminal, FORWARDS)
                suffix = render(walk[1:])
                if suffix:
                    extended = f"{extended} {suffix}"
        return extended

    def generate_haiku(
        self, chain_id: int, initial_text: str = "", max_tries: Optional[int] = None
    ) -> List[str]:
        """Build a 5-7-5 haiku from the chain of *chain_id*.

        Words from *initial_text* open the poem.

        Raises:
            ImpossibleHaikuError: if every attempt ends without a valid poem.
        """
        chain = self.chain(chain_id)
        seed = initial_text.split()
        start = Word(seed[-1]) if seed else INITIAL
        tries = self.haiku_attempts if max_tries is None else max_tries

        for attempt in range(tries):
            try:
                haiku = Haiku(*seed)
                chain.random_walk(
                    start,
                    lambda word, index: self._grow(haiku, word, index),
                    FORWARDS,
                    lambda word: self._can_grow(chain, haiku, word),
                )
            except SyllabificationError as exc:
                logger.debug(f"generate_haiku: attempt {attempt} failed: {exc}")
                continue
            if haiku.is_valid():
                logger.debug(f"generate_haiku: built on attempt {attempt}")
                return haiku.to_strings()
            logger.debug(
                f"generate_haiku: attempt {attempt} ended with {haiku.to_strings()}"
            )
        raise ImpossibleHaikuError(f"Unable to build a haiku for chain {chain_id}")

    @staticmethod
    def _grow(haiku: Haiku, word: Word, index: int) -> bool:
        # The start state is either a sentinel or the last seed word, which
        # is already part of the poem.
        if index > 0 and not word.is_sentinel:
            haiku.extend_with(word.token)
        return haiku.is_valid()

    @staticmethod
    def _can_grow(chain: MarkovChain[Word], haiku: Haiku, word: Word) -> bool:
        if word.is_sentinel:
            return word.is_terminal and haiku.is_valid()
        fit = haiku.can_be_extended_with(word.token)
        if fit == FALSE:
            return False
        if fit == COMPLETE and not haiku.is_last_verse(haiku.next_verse_index()):
            # Closing a verse is only useful if the poem can go on afterwards.
            following = chain.transitions_from(word)
            return any(not w.is_sentinel for w in following.elements())
        return True

    def transitions_from(self, chain_id: int, word: str) -> List[Tuple[str, float]]:
        """Words that may follow *word*, with their probabilities."""
        transitions = self.chain(chain_id).transitions_from(Word(word))
        return [(str(w), transitions.probability(w)) for w in transitions.elements()]

    def transitions_to(self, chain_id: int, word: str) -> List[Tuple[str, float]]:
        """Words that may precede *word*, with their probabilities."""
        transitions = self.chain(chain_id).transitions_to(Word(word))
        return [(str(w), transitions.probability(w)) for w in transitions.elements()]
