"""Syllable and stress analysis for Spanish verse.

The rules here are heuristics tuned for Spanish spelling: a syllable is an
optional onset (one consonant or an inseparable consonant group), a vowel
nucleus (single vowel, diphthong or triphthong) and a coda decided by the
letters that follow.  Stress falls on a syllable with a written accent, or
otherwise on the penultimate syllable for words ending in a vowel, ``n`` or
``s`` and on the last syllable for the rest.

Verse length follows the usual metrical conventions: vowel-final and
vowel-initial neighbours may merge into one syllable (synalepha), and the
last word is corrected by its stress position.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

S_VOWEL = "aeoáéóíú"  # strong vowels
W_VOWEL = "iuü"  # weak vowels

VOWEL = re.compile(r"[aeiouáéíóúü]", re.IGNORECASE)
CONSONANT = re.compile(r"[b-df-hj-np-tv-zñ]", re.IGNORECASE)
ACCENTED_VOWEL = re.compile(r"[áéóíú]", re.IGNORECASE)

DIPHTHONG = re.compile(
    rf"(?!ií)([{S_VOWEL}]h?[{W_VOWEL}]|[{W_VOWEL}]h?[{S_VOWEL}]|ui|iu|uy|yu)",
    re.IGNORECASE,
)
TRIPHTHONG = re.compile(rf"[{W_VOWEL}][{S_VOWEL}](?:[{W_VOWEL}]|y)", re.IGNORECASE)
CONSONANT_GROUP = re.compile(r"[bcdfgpt][lr]|dr|kr|ll|rr|ch", re.IGNORECASE)

# Final letters that move the default stress to the penultimate syllable.
PAROXYTONE_ENDINGS = "nsaeiou"

# Characters stripped from both ends of a word before analysis.
EDGE_PUNCTUATION = "¡!¿?.,;:…\"'()[]{}«»-—_*~`"


class SyllabificationError(ValueError):
    """Raised when a word cannot be split into syllables."""


@dataclass(frozen=True)
class WordMetrics:
    word: str
    syllables: Tuple[str, ...]
    stress_from_end: int
    starts_with_vowel: bool
    ends_with_vowel: bool

    @property
    def syllable_count(self) -> int:
        return len(self.syllables)


def _is(pattern: re.Pattern, word: str, position: int) -> bool:
    return position < len(word) and pattern.match(word[position]) is not None


def _starts(pattern: re.Pattern, word: str, position: int) -> bool:
    return pattern.match(word, position) is not None


def syllabify(word: str) -> List[str]:
    """Split *word* into its syllables.

    Raises:
        SyllabificationError: when a syllable without vowel is found.
    """
    syllables = []
    length = len(word)
    letter = jump = 0
    while letter < length:
        # Onset; a "y" with no vowel after it is the nucleus itself.
        if _starts(CONSONANT_GROUP, word, jump):
            jump += 2
        elif _is(CONSONANT, word, jump) and not (
            word[jump] in "yY" and not _is(VOWEL, word, jump + 1)
        ):
            jump += 1

        # Nucleus; "y" may act as a vowel.
        if _starts(TRIPHTHONG, word, jump):
            jump += 3
        elif _starts(DIPHTHONG, word, jump):
            jump += 2
        elif _is(VOWEL, word, jump) or (jump < length and word[jump] in "yY"):
            jump += 1
        else:
            raise SyllabificationError(f"A vowel was expected in {word!r}")

        # Coda
        left = length - jump
        if left < 2 and _is(CONSONANT, word, jump):
            jump += 1
        elif left > 1 and _starts(CONSONANT_GROUP, word, jump):
            pass
        elif left > 1 and _is(CONSONANT, word, jump) and _is(VOWEL, word, jump + 1):
            pass
        elif (
            left > 2
            and _is(CONSONANT, word, jump)
            and _is(CONSONANT, word, jump + 1)
            and _is(VOWEL, word, jump + 2)
        ):
            jump += 1
        elif (
            left > 3
            and _is(CONSONANT, word, jump)
            and _starts(CONSONANT_GROUP, word, jump + 1)
            and _is(VOWEL, word, jump + 3)
        ):
            jump += 1
        elif (
            left > 3
            and _is(CONSONANT, word, jump)
            and _is(CONSONANT, word, jump + 1)
            and _is(CONSONANT, word, jump + 2)
            and _is(VOWEL, word, jump + 3)
        ):
            jump += 2
        elif (
            left > 3
            and _is(CONSONANT, word, jump)
            and _is(CONSONANT, word, jump + 1)
            and _is(CONSONANT, word, jump + 2)
            and _is(CONSONANT, word, jump + 3)
        ):
            jump += 2

        syllables.append(word[letter:jump])
        letter = jump
    return syllables


def stress_from_end(word: str, syllables: Sequence[str]) -> int:
    """Return the stressed syllable of *word*, counted from its end (0 = last)."""
    if not syllables:
        return 0
    for index, syllable in enumerate(syllables):
        if ACCENTED_VOWEL.search(syllable):
            break
    else:
        if word and word[-1].lower() in PAROXYTONE_ENDINGS:
            index = max(0, len(syllables) - 2)
        else:
            index = len(syllables) - 1
    return len(syllables) - index - 1


def analyze(word: str) -> WordMetrics:
    """Syllables, stress and vowel boundaries of *word*.

    Surrounding punctuation is ignored.

    Raises:
        SyllabificationError: if the word cannot be syllabified.
    """
    clean = word.strip(EDGE_PUNCTUATION).lower()
    if not clean:
        raise SyllabificationError(f"No letters to syllabify in {word!r}")
    syllables = syllabify(clean)
    starts = _is(VOWEL, clean, 0) or (clean[0] == "h" and _is(VOWEL, clean, 1))
    ends = _is(VOWEL, clean, len(clean) - 1) or clean[-1] == "y"
    return WordMetrics(
        word=word,
        syllables=tuple(syllables),
        stress_from_end=stress_from_end(clean, syllables),
        starts_with_vowel=starts,
        ends_with_vowel=ends,
    )


def verse_metric_length(words: Iterable[WordMetrics]) -> int:
    """Metrical length of a verse made of already analyzed words.

    A boundary between a vowel-final word not stressed on its last syllable
    and a vowel-initial word counts one syllable less.  The last word adds
    ``max(-1, 1 - stress_from_end)``.
    """
    words = list(words)
    length = 0
    for i, word in enumerate(words):
        count = word.syllable_count
        if i > 0:
            previous = words[i - 1]
            if (
                previous.ends_with_vowel
                and word.starts_with_vowel
                and previous.stress_from_end != 0
            ):
                count -= 1
        if i == len(words) - 1:
            count += max(-1, 1 - word.stress_from_end)
        length += count
    return length
