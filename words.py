"""Words used as chain states, plus conversion to and from raw text.

A :class:`Word` is either a regular, lower-cased token or one of two
sentinels marking where a phrase starts (:data:`INITIAL`) and ends
(:data:`TERMINAL`).  Every word has a canonical string form used as the
storage key for transitions.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List

INITIAL_KEY = "INIT"
TERMINAL_KEY = "TERM"
ESCAPE = "_"


class Kind(enum.Enum):
    REGULAR = "regular"
    INITIAL = "initial"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class Word:
    """A chain state: a normalized token or a phrase boundary sentinel."""

    token: str = ""
    kind: Kind = Kind.REGULAR

    def __post_init__(self) -> None:
        if self.kind is Kind.REGULAR:
            object.__setattr__(self, "token", self.token.lower())
        else:
            object.__setattr__(self, "token", "")

    @property
    def is_initial(self) -> bool:
        return self.kind is Kind.INITIAL

    @property
    def is_terminal(self) -> bool:
        return self.kind is Kind.TERMINAL

    @property
    def is_sentinel(self) -> bool:
        return self.kind is not Kind.REGULAR

    def serialize(self) -> str:
        """Return the storage key for this word.

        Regular tokens that match a sentinel key case-insensitively, or that
        already start with the escape character, get one escape prefix, so
        keys stay distinct even under a case-insensitive collation.
        """
        if self.kind is Kind.INITIAL:
            return INITIAL_KEY
        if self.kind is Kind.TERMINAL:
            return TERMINAL_KEY
        if self.token.upper() in (INITIAL_KEY, TERMINAL_KEY) or self.token.startswith(ESCAPE):
            return ESCAPE + self.token
        return self.token

    @classmethod
    def deserialize(cls, key: str) -> "Word":
        if key == INITIAL_KEY:
            return INITIAL
        if key == TERMINAL_KEY:
            return TERMINAL
        if key.startswith(ESCAPE):
            return cls(key[len(ESCAPE):])
        return cls(key)

    def __str__(self) -> str:
        if self.kind is Kind.INITIAL:
            return "<start>"
        if self.kind is Kind.TERMINAL:
            return "<end>"
        return self.token


INITIAL = Word(kind=Kind.INITIAL)
TERMINAL = Word(kind=Kind.TERMINAL)


def tokenize(text: str) -> List[Word]:
    """Split *text* on whitespace and bracket the words with the sentinels."""
    return [INITIAL, *(Word(t) for t in text.split()), TERMINAL]


def render(words: Iterable[Word]) -> str:
    """Join the regular words of a state sequence with single spaces."""
    return " ".join(w.token for w in words if not w.is_sentinel)
