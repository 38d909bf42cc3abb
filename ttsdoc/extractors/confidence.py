"""
Document confidence scoring.

The score starts from a base value, gains bonuses for chapter count,
content distribution and size, and is then adjusted by an ordered ladder
of edge-case rules (first match wins). The ladder is data: a tuple of
ConfidenceRule objects that can be inspected and tested one by one.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ttsdoc.models import Chapter

BASE_CONFIDENCE = 0.7

# (minimum chapters, bonus), checked in order
CHAPTER_COUNT_BONUSES: tuple[tuple[int, float], ...] = ((5, 0.15), (3, 0.10), (2, 0.05))

# (minimum words exclusive, bonus), checked in order
SIZE_BONUSES: tuple[tuple[int, float], ...] = ((500, 0.15), (200, 0.10), (100, 0.05))

GOOD_PARAGRAPHS_PER_CHAPTER = (2, 10)
GOOD_SENTENCES_PER_PARAGRAPH = (2, 4)
DISTRIBUTION_BONUS = 0.10
PARTIAL_DISTRIBUTION_BONUS = 0.05


@dataclass(frozen=True)
class DocumentMetrics:
    """Counts the confidence rules look at."""

    word_count: int
    chapter_count: int
    total_paragraphs: int
    total_sentences: int


@dataclass(frozen=True)
class ConfidenceRule:
    """One rung of the edge-case ladder.

    Attributes:
        name: Rule identifier, for logs and tests.
        applies: Predicate over the document metrics.
        resolve: Maps the computed confidence to the final one.
    """

    name: str
    applies: Callable[[DocumentMetrics], bool]
    resolve: Callable[[float], float]


EDGE_CASE_RULES: tuple[ConfidenceRule, ...] = (
    ConfidenceRule("single_word", lambda m: m.word_count == 1, lambda c: 0.8),
    ConfidenceRule(
        "near_empty_unstructured",
        lambda m: m.word_count <= 3 and m.chapter_count == 0 and m.total_paragraphs == 0,
        lambda c: min(c, 0.6),
    ),
    ConfidenceRule("near_empty", lambda m: m.word_count <= 3, lambda c: 0.2),
    ConfidenceRule(
        "no_clear_structure",
        lambda m: m.chapter_count == 0 and m.total_paragraphs <= 1,
        lambda c: max(c, 0.8),
    ),
    ConfidenceRule(
        "minimal_structure",
        lambda m: m.chapter_count == 1 and m.total_paragraphs == 1 and m.word_count < 20,
        lambda c: max(c, 0.8),
    ),
    ConfidenceRule("multiple_chapters", lambda m: m.chapter_count >= 2, lambda c: max(c, 0.85)),
    ConfidenceRule("reasonable_size", lambda m: m.word_count >= 20, lambda c: max(c, 0.8)),
    ConfidenceRule("default_floor", lambda m: True, lambda c: max(c, 0.75)),
)


def _ratio_bonus(ratio: float, good: tuple[int, int]) -> float:
    low, high = good
    if low <= ratio <= high:
        return DISTRIBUTION_BONUS
    if ratio >= 1:
        return PARTIAL_DISTRIBUTION_BONUS
    return 0.0


def base_confidence(metrics: DocumentMetrics) -> float:
    """Confidence before the edge-case ladder is applied."""
    confidence = BASE_CONFIDENCE

    for minimum, bonus in CHAPTER_COUNT_BONUSES:
        if metrics.chapter_count >= minimum:
            confidence += bonus
            break

    if metrics.total_paragraphs:
        if metrics.chapter_count:
            paragraphs_per_chapter = metrics.total_paragraphs / metrics.chapter_count
            confidence += _ratio_bonus(paragraphs_per_chapter, GOOD_PARAGRAPHS_PER_CHAPTER)
        else:
            # Paragraphs without chapters have an unbounded ratio
            confidence += PARTIAL_DISTRIBUTION_BONUS
        sentences_per_paragraph = metrics.total_sentences / metrics.total_paragraphs
        confidence += _ratio_bonus(sentences_per_paragraph, GOOD_SENTENCES_PER_PARAGRAPH)

    for minimum, bonus in SIZE_BONUSES:
        if metrics.word_count > minimum:
            confidence += bonus
            break

    return confidence


def apply_edge_case_rules(
    confidence: float,
    metrics: DocumentMetrics,
    rules: Sequence[ConfidenceRule] = EDGE_CASE_RULES,
) -> float:
    """Apply the first matching rule of the ladder."""
    for rule in rules:
        if rule.applies(metrics):
            return rule.resolve(confidence)
    return confidence


def calculate_document_confidence(
    chapters: Sequence[Chapter],
    total_paragraphs: int,
    total_sentences: int,
    word_count: int,
) -> float:
    """
    Score how reliable the detected structure is.

    Args:
        chapters: Detected chapters
        total_paragraphs: Paragraph count, preamble included
        total_sentences: Sentence count, preamble included
        word_count: Word count of the source text

    Returns:
        Confidence in [0, 1]
    """
    metrics = DocumentMetrics(
        word_count=word_count,
        chapter_count=len(chapters),
        total_paragraphs=total_paragraphs,
        total_sentences=total_sentences,
    )
    confidence = apply_edge_case_rules(base_confidence(metrics), metrics)
    return min(max(confidence, 0.0), 1.0)
