"""
Sentence segmentation and word counting.

Splits paragraph text into sentences using the configured boundary
patterns, counts words, and estimates speaking time. All patterns here
are bounded so adversarial input cannot trigger catastrophic backtracking.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from ttsdoc.models import WORDS_PER_SECOND, Sentence

URL_RE = re.compile(r"\bhttps?://[^\s<>\"']{1,2048}")
EMAIL_RE = re.compile(
    r"\b[0-9A-Za-z][\w%+.-]{0,63}@[0-9A-Za-z][0-9A-Za-z-]{0,62}"
    r"(?:\.[0-9A-Za-z-]{1,63}){0,8}\.[A-Za-z]{2,63}\b"
)

FORMATTING_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\*\*[^*\n]+\*\*|__[^_\n]+__"),  # bold
    re.compile(r"(?<![*\w])\*[^*\n]+\*(?!\*)|(?<![_\w])_[^_\n]+_(?![_\w])"),  # italic
    re.compile(r"`[^`\n]{1,1000}`"),  # inline code
    re.compile(r"!?\[[^\]\n]{0,1000}\]\([^)\n]{0,2048}\)"),  # links and images
)

# Paragraph confidence
BASE_PARAGRAPH_CONFIDENCE = 0.5
LENGTH_BONUS = 0.2
PUNCTUATION_BONUS = 0.2
MULTI_SENTENCE_BONUS = 0.1
GOOD_SENTENCE_LENGTH = (10, 200)
END_PUNCTUATION_RE = re.compile(r"[!.?][\"')\]*_]*$")


def count_words(text: str) -> int:
    """Count words, treating each URL and e-mail address as one word."""
    text = URL_RE.sub(" URL ", text)
    text = EMAIL_RE.sub(" EMAIL ", text)
    return len(text.split())


def has_formatting(text: str) -> bool:
    """True if text contains inline Markdown (bold, italic, code, links)."""
    return any(pattern.search(text) for pattern in FORMATTING_PATTERNS)


def estimate_duration(word_count: int) -> float:
    """Seconds needed to speak ``word_count`` words."""
    return word_count / WORDS_PER_SECOND


def compile_boundaries(patterns: Sequence[str]) -> re.Pattern[str]:
    """OR-combine boundary patterns into a single regex."""
    return re.compile("|".join(f"(?:{p})" for p in patterns))


def _ends_with_abbreviation(text: str, abbreviations: frozenset[str]) -> bool:
    words = text.split()
    if not words:
        return False
    last = words[-1].lstrip("([\"'").rstrip(".").lower()
    return last in abbreviations


def split_spans(
    text: str,
    min_length: int,
    boundaries: re.Pattern[str],
    abbreviations: Iterable[str] = (),
) -> list[tuple[int, int]]:
    """
    Find sentence spans as (start, end) offsets into ``text``.

    A boundary match closes a sentence only when the text accumulated
    since the previous close, trimmed, is longer than ``min_length``;
    shorter text carries forward. A short trailing remainder is folded
    into the last sentence. The spans are contiguous and cover the text.
    """
    abbrevs = frozenset(a.rstrip(".").lower() for a in abbreviations)
    spans: list[tuple[int, int]] = []
    start = 0
    for match in boundaries.finditer(text):
        end = match.end()
        if end <= start:
            continue
        if len(text[start:end].strip()) <= min_length:
            continue
        if (
            abbrevs
            and text[match.start()] == "."
            and _ends_with_abbreviation(text[start : match.start()], abbrevs)
        ):
            continue
        spans.append((start, end))
        start = end

    if start < len(text):
        if spans and len(text[start:].strip()) <= min_length:
            spans[-1] = (spans[-1][0], len(text))
        else:
            spans.append((start, len(text)))
    return spans


def extract_sentences(
    text: str,
    min_length: int,
    boundary_patterns: Sequence[str],
    abbreviations: Iterable[str] = (),
) -> list[Sentence]:
    """
    Split text into sentences.

    Args:
        text: Paragraph text
        min_length: Minimum sentence length in characters
        boundary_patterns: Regexes marking the end of a sentence
        abbreviations: Words whose trailing period does not end a sentence

    Returns:
        Sentences in order; at least one for any non-blank text
    """
    if not text.strip():
        return []

    boundaries = compile_boundaries(boundary_patterns)
    sentences = []
    for start, end in split_spans(text, min_length, boundaries, abbreviations):
        chunk = text[start:end].strip()
        if not chunk:
            continue
        words = count_words(chunk)
        sentences.append(
            Sentence(
                id=f"sentence-{len(sentences) + 1}",
                text=chunk,
                position=len(sentences),
                word_count=words,
                estimated_duration=estimate_duration(words),
                has_formatting=has_formatting(chunk),
            )
        )
    return sentences


def paragraph_confidence(sentences: Sequence[Sentence]) -> float:
    """Score how cleanly a paragraph split into sentences, in [0, 1]."""
    if not sentences:
        return BASE_PARAGRAPH_CONFIDENCE

    confidence = BASE_PARAGRAPH_CONFIDENCE
    average_length = sum(len(s.text) for s in sentences) / len(sentences)
    low, high = GOOD_SENTENCE_LENGTH
    if low <= average_length <= high:
        confidence += LENGTH_BONUS
    if END_PUNCTUATION_RE.search(sentences[-1].text):
        confidence += PUNCTUATION_BONUS
    if len(sentences) > 1:
        confidence += MULTI_SENTENCE_BONUS
    return min(confidence, 1.0)
