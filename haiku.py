"""Verses and haikus measured with :mod:`metrics`.

A :class:`Haiku` grows one word at a time: words go into the current verse
until it reaches its target length, then a new verse is started.  It is
valid once it has exactly three verses measuring 5, 7 and 5 syllables.
"""

from __future__ import annotations

from typing import List, Optional

import metrics
from metrics import SyllabificationError, WordMetrics

COMPLETE = "complete"
INCOMPLETE = "incomplete"
FALSE = "false"


class Verse:
    """Ordered words of one line with a cached metrical length."""

    def __init__(self, *words: str) -> None:
        self.words: List[WordMetrics] = []
        self._metric_length: Optional[int] = None
        self.add_words(*words)

    def add_words(self, *words: str) -> None:
        self.words.extend(metrics.analyze(w) for w in words)
        self._metric_length = None

    def metric_length(self, *additional_words: str) -> int:
        """Length of the verse, optionally as if *additional_words* followed.

        The verse itself is never modified.
        """
        if not additional_words:
            if self._metric_length is None:
                self._metric_length = metrics.verse_metric_length(self.words)
            return self._metric_length
        extra = [metrics.analyze(w) for w in additional_words]
        return metrics.verse_metric_length(self.words + extra)

    def __len__(self) -> int:
        return len(self.words)

    def __str__(self) -> str:
        return " ".join(w.word for w in self.words)


class Haiku:
    STRUCTURE = (5, 7, 5)

    def __init__(self, *initial_words: str) -> None:
        self.verses: List[Verse] = [Verse()]
        for word in initial_words:
            self.extend_with(word)

    def _target(self, index: int) -> int:
        return self.STRUCTURE[index] if index < len(self.STRUCTURE) else 0

    def _current_is_full(self) -> bool:
        index = len(self.verses) - 1
        return self.verses[index].metric_length() >= self._target(index)

    def next_verse_index(self) -> int:
        """Index of the verse that the next word would go into."""
        if self._current_is_full():
            return len(self.verses)
        return len(self.verses) - 1

    def can_be_extended_with(self, word: str) -> str:
        """Classify *word* as the next word of the poem.

        Returns ``"complete"`` when the word fills its verse exactly,
        ``"incomplete"`` when it fits with room to spare and ``"false"`` when
        it overflows the verse, no verse is left or it cannot be syllabified.
        """
        index = self.next_verse_index()
        if index >= len(self.STRUCTURE):
            return FALSE
        try:
            if index == len(self.verses) - 1:
                length = self.verses[index].metric_length(word)
            else:
                length = Verse(word).metric_length()
        except SyllabificationError:
            return FALSE
        expected = self.STRUCTURE[index]
        if length == expected:
            return COMPLETE
        if length < expected:
            return INCOMPLETE
        return FALSE

    def extend_with(self, word: str) -> None:
        if self._current_is_full():
            self.verses.append(Verse(word))
        else:
            self.verses[-1].add_words(word)

    def is_valid(self) -> bool:
        return len(self.verses) == len(self.STRUCTURE) and all(
            verse.metric_length() == target
            for verse, target in zip(self.verses, self.STRUCTURE)
        )

    def is_last_verse(self, index: int) -> bool:
        return index == len(self.STRUCTURE) - 1

    def to_strings(self) -> List[str]:
        return [str(verse) for verse in self.verses]
