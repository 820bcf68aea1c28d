"""
Treble API — Moderation Filter Unit Tests
==========================================

What we test:
    ✅ Word list loading (blank lines dropped, missing file is fatal)
    ✅ Whole-word matching, never substrings of longer words
    ✅ Case-insensitivity
    ✅ Punctuation-spliced words caught through the stripped variant
    ✅ Terms with punctuation only match the unstripped text
"""

import re

import pytest

from treble_api.exceptions import WordListError
from treble_api.services.moderation import (
    ModerationFilter,
    load_blocked_terms,
    strip_punctuation,
)


class TestLoadBlockedTerms:

    def test_blank_lines_dropped(self, blocked_terms_file):
        terms = load_blocked_terms(blocked_terms_file)
        assert terms == ["darn", "heck", "Rubbish", "dang it"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(WordListError, match="Could not load blocked terms"):
            load_blocked_terms(str(tmp_path / "missing.txt"))

    def test_from_file_normalizes_terms(self, blocked_terms_file):
        moderation = ModerationFilter.from_file(blocked_terms_file)
        assert len(moderation) == 4
        assert moderation.contains_blocked_term("what rubbish")

    def test_bundled_list_loads(self):
        from treble_api.config import DEFAULT_BLOCKED_TERMS_PATH

        assert len(load_blocked_terms(DEFAULT_BLOCKED_TERMS_PATH)) > 0


class TestStripPunctuation:

    def test_removes_listed_characters(self):
        assert strip_punctuation("d.a.r.n") == "darn"
        assert strip_punctuation("h_e-c~k") == "heck"
        assert strip_punctuation("(a){b}=c;d:e") == "abcde"

    def test_collapses_and_trims_whitespace(self):
        assert strip_punctuation("  a \t\n  b  ") == "a b"

    def test_keeps_unlisted_characters(self):
        assert strip_punctuation("it's @home?") == "it's @home?"


class TestContainsBlockedTerm:

    @pytest.mark.parametrize("text", [None, ""])
    def test_empty_text_never_matches(self, moderation, text):
        assert moderation.contains_blocked_term(text) is False

    @pytest.mark.parametrize(
        "text",
        [
            "darn",
            "oh darn it",
            "well, darn!",
            "(darn)",
            "heck.",
            "what a load of rubbish",
        ],
    )
    def test_standalone_word_matches(self, moderation, text):
        assert moderation.contains_blocked_term(text) is True

    @pytest.mark.parametrize(
        "text",
        [
            "darnell",
            "undarned socks",
            "checkered",
            "hecks",
            "rubbishy",
            "a lovely highland reel",
        ],
    )
    def test_substring_of_longer_word_does_not_match(self, moderation, text):
        assert moderation.contains_blocked_term(text) is False

    @pytest.mark.parametrize("text", ["DARN", "Darn", "dArN", "HeCk yes"])
    def test_case_insensitive(self, moderation, text):
        assert moderation.contains_blocked_term(text) is True
        assert moderation.contains_blocked_term(text.lower()) is True

    def test_punctuation_spliced_word_matches(self, moderation):
        assert moderation.contains_blocked_term("d.a.r.n") is True
        assert moderation.contains_blocked_term("h-e-c-k off") is True

    def test_multi_word_term_matches_across_collapsed_whitespace(self, moderation):
        assert moderation.contains_blocked_term("dang   it") is True
        assert moderation.contains_blocked_term("dang, it") is True

    def test_term_with_punctuation_only_matches_unstripped_text(self):
        moderation = ModerationFilter(["no-no"])
        assert moderation.contains_blocked_term("that is a no-no") is True
        # Stripping turns "no-no" into "nono", which the term cannot match
        assert moderation.contains_blocked_term("that is a no_no") is False

    def test_regex_metacharacters_are_literal(self):
        moderation = ModerationFilter(["a.b"])
        assert moderation.contains_blocked_term("a.b") is True
        assert moderation.contains_blocked_term("axb") is False

    def test_terms_precompiled_once(self, moderation):
        assert all(isinstance(matcher, re.Pattern) for _, matcher in moderation._matchers)
        assert [term for term, _ in moderation._matchers] == ["darn", "heck", "rubbish", "dang it"]

    def test_blank_terms_ignored(self):
        moderation = ModerationFilter(["", "   ", "heck"])
        assert len(moderation) == 1
        assert moderation.contains_blocked_term("anything at all") is False

    def test_first_blocked_term_reports_match(self, moderation):
        assert moderation.first_blocked_term("Oh HECK, darn") == "darn"
        assert moderation.first_blocked_term("all fine here") is None
