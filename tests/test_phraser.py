"""Tests for phrase storage and generation."""

from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parent.parent))

from phraser import ImpossibleHaikuError, Phraser  # noqa: E402
from store import MemoryStore  # noqa: E402

HAIKU_PHRASE = "el perro come la niña bebe pan un gato duerme"


@pytest.fixture
def phraser():
    return Phraser(MemoryStore())


class TestStoreAndGenerate:
    """Tests for learning phrases and generating new ones."""

    def test_empty_chain_generates_empty_phrase(self, phraser):
        assert phraser.generate_phrase(99) == ""

    def test_single_phrase_is_reproduced(self, phraser):
        phraser.store_phrase(1, "El perro come")
        for _ in range(10):
            assert phraser.generate_phrase(1) == "el perro come"

    def test_blank_phrase_is_ignored(self, phraser):
        phraser.store_phrase(1, "   ")
        assert phraser.transitions_from(1, "") == []
        assert phraser.generate_phrase(1) == ""

    def test_chats_do_not_share_chains(self, phraser):
        phraser.store_phrase(1, "hola mundo")
        assert phraser.generate_phrase(2) == ""

    def test_generated_words_come_from_the_chain(self, phraser):
        phraser.store_phrase(1, "a b a")
        phraser.store_phrase(1, "b c")
        for _ in range(20):
            assert set(phraser.generate_phrase(1).split()) <= {"a", "b", "c"}

    def test_transition_listings(self, phraser):
        phraser.store_phrase(1, "a b a")
        assert sorted(phraser.transitions_from(1, "a")) == [
            ("<end>", pytest.approx(0.5)),
            ("b", pytest.approx(0.5)),
        ]
        assert sorted(phraser.transitions_to(1, "a")) == [
            ("<start>", pytest.approx(0.5)),
            ("b", pytest.approx(0.5)),
        ]
        assert phraser.transitions_from(1, "zzz") == []


class TestExtendPhrase:
    """Tests for extending phrases in either direction."""

    @pytest.fixture(autouse=True)
    def learn(self, phraser):
        phraser.store_phrase(1, "uno dos tres cuatro")

    def test_extend_after(self, phraser):
        assert phraser.extend_phrase(1, "dos", False, True) == "dos tres cuatro"

    def test_extend_before(self, phraser):
        assert phraser.extend_phrase(1, "tres", True, False) == "uno dos tres"

    def test_extend_both_sides(self, phraser):
        assert phraser.extend_phrase(1, "dos tres", True, True) == "uno dos tres cuatro"

    def test_original_text_is_kept(self, phraser):
        assert phraser.extend_phrase(1, "Dos", True, False) == "uno Dos"

    def test_unknown_words_are_left_alone(self, phraser):
        assert phraser.extend_phrase(1, "zzz", True, True) == "zzz"

    def test_edges_without_more_words(self, phraser):
        assert phraser.extend_phrase(1, "uno", True, False) == "uno"
        assert phraser.extend_phrase(1, "cuatro", False, True) == "cuatro"

    def test_blank_phrase(self, phraser):
        assert phraser.extend_phrase(1, "", True, True) == ""


class TestGenerateHaiku:
    """Tests for constrained haiku generation."""

    def test_haiku_from_chain(self, phraser):
        phraser.store_phrase(1, HAIKU_PHRASE)
        assert phraser.generate_haiku(1) == [
            "el perro come",
            "la niña bebe pan",
            "un gato duerme",
        ]

    def test_haiku_from_seed(self, phraser):
        phraser.store_phrase(1, HAIKU_PHRASE)
        assert phraser.generate_haiku(1, "el perro") == [
            "el perro come",
            "la niña bebe pan",
            "un gato duerme",
        ]

    def test_short_chain_is_impossible(self, phraser):
        phraser.store_phrase(1, "hola mundo")
        with pytest.raises(ImpossibleHaikuError):
            phraser.generate_haiku(1, max_tries=3)

    def test_empty_chain_is_impossible(self, phraser):
        with pytest.raises(ImpossibleHaikuError):
            phraser.generate_haiku(5, max_tries=2)

    def test_unsyllabifiable_seed_is_impossible(self, phraser):
        phraser.store_phrase(1, HAIKU_PHRASE)
        with pytest.raises(ImpossibleHaikuError):
            phraser.generate_haiku(1, "brrr", max_tries=2)

    def test_attempts_are_bounded(self, phraser, monkeypatch):
        phraser.store_phrase(1, "hola mundo")
        calls = []
        chain = phraser.chain(1)
        original = type(chain).random_walk

        def counting_walk(self, *args, **kwargs):
            calls.append(1)
            return original(self, *args, **kwargs)

        monkeypatch.setattr(type(chain), "random_walk", counting_walk)
        with pytest.raises(ImpossibleHaikuError):
            phraser.generate_haiku(1, max_tries=4)
        assert len(calls) == 4
