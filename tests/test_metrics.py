"""Tests for syllable counting and verse metrics."""

from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parent.parent))

from metrics import (  # noqa: E402
    SyllabificationError,
    analyze,
    stress_from_end,
    syllabify,
    verse_metric_length,
)


def measure(*words):
    return verse_metric_length(analyze(w) for w in words)


class TestSyllabify:
    """Tests for splitting words into syllables."""

    @pytest.mark.parametrize(
        "word, expected",
        [
            ("el", ["el"]),
            ("perro", ["pe", "rro"]),
            ("come", ["co", "me"]),
            ("niña", ["ni", "ña"]),
            ("hijo", ["hi", "jo"]),
            ("mucho", ["mu", "cho"]),
            ("canción", ["can", "ción"]),
            ("música", ["mú", "si", "ca"]),
            ("comía", ["co", "mí", "a"]),
            ("ciudad", ["ciu", "dad"]),
            ("duerme", ["duer", "me"]),
            ("transporte", ["trans", "por", "te"]),
            ("amargo", ["a", "mar", "go"]),
            ("hoy", ["hoy"]),
            ("muy", ["muy"]),
            ("y", ["y"]),
        ],
    )
    def test_split(self, word, expected):
        assert syllabify(word) == expected

    @pytest.mark.parametrize("word", ["brrr", "123", "pfff"])
    def test_words_without_vowel(self, word):
        with pytest.raises(SyllabificationError):
            syllabify(word)


class TestStress:
    """Tests for locating the stressed syllable."""

    @pytest.mark.parametrize(
        "word, expected",
        [
            ("canción", 0),
            ("reloj", 0),
            ("pan", 0),
            ("casa", 1),
            ("árbol", 1),
            ("música", 2),
        ],
    )
    def test_stress_from_end(self, word, expected):
        assert stress_from_end(word, syllabify(word)) == expected

    def test_no_syllables(self):
        assert stress_from_end("", []) == 0


class TestAnalyze:
    """Tests for the per-word analysis."""

    def test_punctuation_is_ignored(self):
        metrics = analyze("¡Hola!")
        assert metrics.word == "¡Hola!"
        assert metrics.syllables == ("ho", "la")
        assert metrics.syllable_count == 2
        assert metrics.stress_from_end == 1

    def test_vowel_boundaries(self):
        assert analyze("hijo").starts_with_vowel
        assert analyze("alma").starts_with_vowel
        assert not analyze("perro").starts_with_vowel
        assert analyze("perro").ends_with_vowel
        assert analyze("rey").ends_with_vowel
        assert not analyze("pan").ends_with_vowel

    @pytest.mark.parametrize("word", ["...", "", "¡!"])
    def test_nothing_to_analyze(self, word):
        with pytest.raises(SyllabificationError):
            analyze(word)


class TestVerseMetricLength:
    """Tests for the metrical length of verses."""

    def test_plain_five_syllables(self):
        assert measure("el", "perro", "come") == 5

    def test_empty_verse(self):
        assert verse_metric_length([]) == 0

    def test_oxytone_ending_adds_one(self):
        assert measure("el", "perro", "come", "pan") == 7
        assert measure("canción") == 3

    def test_proparoxytone_ending_subtracts_one(self):
        assert measure("la", "música") == 3

    def test_synalepha(self):
        """Vowel meeting vowel across words counts once."""
        assert measure("perro", "come") == 4
        assert measure("perro", "amargo") == 4

    def test_synalepha_after_stressed_final_syllable(self):
        """No merge when the first word is stressed on its last syllable."""
        assert measure("café", "amargo") == 5

    def test_silent_h_allows_synalepha(self):
        assert measure("perro", "hijo") == 3

    def test_measurement_does_not_depend_on_case(self):
        assert measure("EL", "Perro", "COME") == 5
