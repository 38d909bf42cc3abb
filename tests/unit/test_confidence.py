"""Tests for document confidence scoring."""

import pytest

from ttsdoc.extractors.confidence import (
    EDGE_CASE_RULES,
    ConfidenceRule,
    DocumentMetrics,
    apply_edge_case_rules,
    base_confidence,
    calculate_document_confidence,
)
from ttsdoc.models import Chapter


def chapters(n):
    return [
        Chapter(
            id=f"chapter-{i + 1}",
            title=f"C{i}",
            level=2,
            paragraphs=(),
            position=i,
            word_count=0,
            estimated_duration=0.0,
            start_position=0,
            end_position=0,
        )
        for i in range(n)
    ]


class TestEdgeCaseLadder:
    """Test the ordered override rules."""

    def test_rule_order(self):
        assert [r.name for r in EDGE_CASE_RULES] == [
            "single_word",
            "near_empty_unstructured",
            "near_empty",
            "no_clear_structure",
            "minimal_structure",
            "multiple_chapters",
            "reasonable_size",
            "default_floor",
        ]

    def test_single_word(self):
        assert calculate_document_confidence([], 1, 1, 1) == pytest.approx(0.8)

    def test_near_empty_unstructured(self):
        assert calculate_document_confidence([], 0, 0, 2) == pytest.approx(0.6)

    def test_near_empty(self):
        assert calculate_document_confidence([], 1, 1, 3) == pytest.approx(0.2)

    def test_no_clear_structure(self):
        # 0.7 + 0.05 (paragraph ratio) + 0.10 (sentence ratio)
        assert calculate_document_confidence([], 1, 2, 8) == pytest.approx(0.85)
        assert calculate_document_confidence([], 0, 0, 10) == pytest.approx(0.8)

    def test_minimal_structure(self):
        assert calculate_document_confidence(chapters(1), 1, 1, 10) >= 0.8

    def test_multiple_chapters_floor(self):
        assert calculate_document_confidence(chapters(2), 0, 0, 10) == pytest.approx(0.85)

    def test_reasonable_size(self):
        assert calculate_document_confidence(chapters(1), 0, 0, 25) == pytest.approx(0.8)

    def test_default_floor(self):
        assert calculate_document_confidence(chapters(1), 0, 0, 10) == pytest.approx(0.75)

    def test_first_match_wins(self):
        rules = (
            ConfidenceRule("always", lambda m: True, lambda c: 0.1),
            ConfidenceRule("never_reached", lambda m: True, lambda c: 0.9),
        )
        metrics = DocumentMetrics(50, 2, 4, 8)
        assert apply_edge_case_rules(0.7, metrics, rules) == 0.1

    def test_no_rule_matches(self):
        assert apply_edge_case_rules(0.42, DocumentMetrics(50, 2, 4, 8), ()) == 0.42


class TestBaseConfidence:
    """Test the bonuses before the ladder."""

    def test_base(self):
        assert base_confidence(DocumentMetrics(0, 0, 0, 0)) == pytest.approx(0.7)

    @pytest.mark.parametrize("count,bonus", [(1, 0.0), (2, 0.05), (3, 0.10), (5, 0.15), (9, 0.15)])
    def test_chapter_bonus(self, count, bonus):
        assert base_confidence(DocumentMetrics(0, count, 0, 0)) == pytest.approx(0.7 + bonus)

    @pytest.mark.parametrize(
        "words,bonus", [(100, 0.0), (101, 0.05), (201, 0.10), (501, 0.15)]
    )
    def test_size_bonus(self, words, bonus):
        assert base_confidence(DocumentMetrics(words, 0, 0, 0)) == pytest.approx(0.7 + bonus)

    def test_distribution_bonus(self):
        # 4 paragraphs per chapter and 3 sentences per paragraph
        metrics = DocumentMetrics(0, 1, 4, 12)
        assert base_confidence(metrics) == pytest.approx(0.9)

    def test_partial_distribution_bonus(self):
        # 12 paragraphs per chapter, 6 sentences per paragraph
        metrics = DocumentMetrics(0, 1, 12, 72)
        assert base_confidence(metrics) == pytest.approx(0.8)

    def test_paragraphs_without_chapters(self):
        # No chapters: only the partial paragraph bonus, never the full one
        assert base_confidence(DocumentMetrics(9, 0, 3, 3)) == pytest.approx(0.8)
        assert calculate_document_confidence([], 3, 3, 9) == pytest.approx(0.8)

    def test_no_paragraphs_no_distribution_bonus(self):
        assert base_confidence(DocumentMetrics(9, 0, 0, 0)) == pytest.approx(0.7)


class TestBounds:
    """Confidence always stays within [0, 1]."""

    def test_clamped_to_one(self):
        assert calculate_document_confidence(chapters(6), 20, 60, 1000) == 1.0

    @pytest.mark.parametrize("words", [0, 1, 2, 3, 5, 50, 5000])
    @pytest.mark.parametrize("n_chapters", [0, 1, 2, 7])
    def test_in_range(self, words, n_chapters):
        value = calculate_document_confidence(chapters(n_chapters), n_chapters * 2, 3, words)
        assert 0.0 <= value <= 1.0
