"""Tests for sentence segmentation and word counting."""

import pytest

from ttsdoc.config import DEFAULT_ABBREVIATIONS, DEFAULT_BOUNDARY_PATTERNS
from ttsdoc.segmentation import (
    count_words,
    estimate_duration,
    extract_sentences,
    has_formatting,
    paragraph_confidence,
)


def split(text, min_length=5, abbreviations=()):
    return extract_sentences(text, min_length, DEFAULT_BOUNDARY_PATTERNS, abbreviations)


class TestExtractSentences:
    """Test sentence splitting."""

    def test_two_sentences(self):
        sentences = split("Hello world. This is a test.")
        assert [s.text for s in sentences] == ["Hello world.", "This is a test."]
        assert [s.word_count for s in sentences] == [2, 4]
        assert [s.position for s in sentences] == [0, 1]
        assert [s.id for s in sentences] == ["sentence-1", "sentence-2"]

    def test_no_boundary_is_one_sentence(self):
        sentences = split("just some words without an end")
        assert len(sentences) == 1
        assert sentences[0].text == "just some words without an end"

    def test_short_text_is_one_sentence(self):
        sentences = split("Hi")
        assert [s.text for s in sentences] == ["Hi"]

    def test_blank_text(self):
        assert split("") == []
        assert split("   \n ") == []

    def test_short_fragments_carry_forward(self):
        sentences = split("Hi. Yes. This is longer.")
        assert [s.text for s in sentences] == ["Hi. Yes.", "This is longer."]

    def test_short_tail_merges_into_previous(self):
        sentences = split("This is a sentence. Ok")
        assert [s.text for s in sentences] == ["This is a sentence. Ok"]

    def test_newline_is_a_boundary(self):
        sentences = split("First line here\nSecond line here")
        assert [s.text for s in sentences] == ["First line here", "Second line here"]

    def test_question_and_exclamation(self):
        sentences = split("Is it ready? Yes it is! Ship it now.")
        assert len(sentences) == 3

    def test_abbreviation_does_not_split(self):
        text = "We met Dr. Smith today. He was late."
        with_rules = split(text, abbreviations=DEFAULT_ABBREVIATIONS)
        assert [s.text for s in with_rules] == ["We met Dr. Smith today.", "He was late."]
        without_rules = split(text)
        assert len(without_rules) == 3

    def test_custom_patterns(self):
        sentences = extract_sentences("one; two; three", 0, [r";\s*"])
        assert [s.text for s in sentences] == ["one;", "two;", "three"]

    def test_duration(self):
        sentence = split("One two three four five.")[0]
        assert sentence.estimated_duration == pytest.approx(2.0)

    def test_formatting_flag(self):
        sentences = split("This is **important** stuff. This is plain stuff.")
        assert [s.has_formatting for s in sentences] == [True, False]


class TestCountWords:
    """Test word counting."""

    def test_simple(self):
        assert count_words("one two  three\nfour") == 4

    def test_empty(self):
        assert count_words("") == 0
        assert count_words("   ") == 0

    def test_url_is_one_word(self):
        assert count_words("Visit https://example.com/a?b=c now") == 3

    def test_email_is_one_word(self):
        assert count_words("mail me at jane.doe@example.org") == 4

    def test_url_glued_to_text(self):
        assert count_words("see:https://example.com/x") == 2


class TestHasFormatting:
    """Test inline markup detection."""

    @pytest.mark.parametrize(
        "text",
        ["**bold**", "__bold__", "*italic*", "_italic_", "`code`", "[link](http://x)", "![i](p)"],
    )
    def test_formatted(self, text):
        assert has_formatting(text)

    @pytest.mark.parametrize("text", ["plain text", "snake_case_name", "2 * 3 = 6", ""])
    def test_plain(self, text):
        assert not has_formatting(text)


class TestParagraphConfidence:
    """Test paragraph confidence scoring."""

    def test_well_formed(self):
        sentences = split("The first sentence is here. The second one follows.")
        assert paragraph_confidence(sentences) == pytest.approx(1.0)

    def test_fragment(self):
        assert paragraph_confidence(split("Hello")) == pytest.approx(0.5)

    def test_single_punctuated_sentence(self):
        assert paragraph_confidence(split("A complete sentence.")) == pytest.approx(0.9)

    def test_no_sentences(self):
        assert paragraph_confidence([]) == pytest.approx(0.5)


def test_estimate_duration():
    """150 words per minute."""
    assert estimate_duration(150) == pytest.approx(60.0)
