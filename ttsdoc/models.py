"""
Data models for ttsdoc.

These models represent the output of Markdown parsing: a document split
into chapters, paragraphs and sentences, plus metadata, extracted
elements and validation results. All of them are frozen dataclasses
with tuple collections and read-only mapping fields, so a returned
structure is an immutable snapshot. Values nested inside those mappings
(front matter lists, table rows) are plain JSON-style data.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

# 150 words per minute
WORDS_PER_SECOND = 2.5

UNTITLED_DOCUMENT = "Untitled Document"


def _freeze_mapping(instance: Any, name: str) -> None:
    """Replace a dataclass mapping field with a read-only copy."""
    value = getattr(instance, name)
    if not isinstance(value, MappingProxyType):
        object.__setattr__(instance, name, MappingProxyType(dict(value)))


class ParagraphType(str, Enum):
    """Kind of block a paragraph was built from."""

    TEXT = "text"
    CODE = "code"
    BLOCKQUOTE = "blockquote"
    LIST = "list"
    TABLE = "table"


@dataclass(frozen=True)
class Sentence:
    """A single sentence, the smallest unit handed to speech synthesis."""

    id: str
    text: str
    position: int
    word_count: int
    estimated_duration: float  # seconds
    has_formatting: bool = False


@dataclass(frozen=True)
class Paragraph:
    """
    A block of content inside a chapter (or the preamble).

    Code and table paragraphs carry no sentences; their word_count is 0.
    """

    id: str
    type: ParagraphType
    sentences: tuple[Sentence, ...]
    position: int
    word_count: int
    raw_text: str
    include_in_audio: bool
    confidence: float

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be between 0.0 and 1.0, got {self.confidence}")

    @property
    def estimated_duration(self) -> float:
        return sum(s.estimated_duration for s in self.sentences)


@dataclass(frozen=True)
class Chapter:
    """A chapter opened by a heading at one of the configured levels."""

    id: str
    title: str
    level: int
    paragraphs: tuple[Paragraph, ...]
    position: int
    word_count: int
    estimated_duration: float  # seconds, audio paragraphs only
    start_position: int  # character offset of the heading
    end_position: int  # character offset where the chapter content ends

    def __post_init__(self):
        if not 1 <= self.level <= 6:
            raise ValueError(f"level must be between 1 and 6, got {self.level}")

    @property
    def sentence_count(self) -> int:
        return sum(len(p.sentences) for p in self.paragraphs)


@dataclass(frozen=True)
class DocumentMetadata:
    """Document metadata extracted from headings, front matter and key lines."""

    title: str = UNTITLED_DOCUMENT
    author: str | None = None
    created_date: str | None = None
    modified_date: str | None = None
    language: str | None = None
    word_count: int = 0
    character_count: int = 0
    custom_metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        _freeze_mapping(self, "custom_metadata")


@dataclass(frozen=True)
class ProcessingMetrics:
    """Timing and diagnostics for one parse."""

    parse_start_time: datetime
    parse_end_time: datetime
    parse_duration_ms: float
    source_length: int
    processing_errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentStatistics:
    """Summary counts computed once when the structure is assembled."""

    paragraphs_by_type: Mapping[str, int] = field(default_factory=dict)
    elements_by_type: Mapping[str, int] = field(default_factory=dict)
    audio_paragraphs: int = 0
    average_sentences_per_paragraph: float = 0.0
    average_words_per_sentence: float = 0.0

    def __post_init__(self):
        _freeze_mapping(self, "paragraphs_by_type")
        _freeze_mapping(self, "elements_by_type")


@dataclass(frozen=True)
class MarkdownElement:
    """A structural element (code, table, list, link, ...) found in the source."""

    type: str
    raw: str
    content: str
    position: int
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        _freeze_mapping(self, "attributes")


@dataclass(frozen=True)
class DocumentStructure:
    """
    The main output type for users.

    Paragraphs that appear before the first chapter heading are not part
    of any chapter; they are kept in ``preamble`` and counted in the totals.

    Example:
        >>> result = ttsdoc.parse_markdown(text)
        >>> for chapter in result.structure.chapters:
        ...     print(chapter.title, chapter.estimated_duration)
    """

    metadata: DocumentMetadata
    chapters: tuple[Chapter, ...]
    preamble: tuple[Paragraph, ...]
    elements: tuple[MarkdownElement, ...]
    total_paragraphs: int
    total_sentences: int
    total_word_count: int
    estimated_total_duration: float
    confidence: float
    processing_metrics: ProcessingMetrics
    stats: DocumentStatistics = field(default_factory=DocumentStatistics)

    @property
    def total_chapters(self) -> int:
        return len(self.chapters)

    def iter_paragraphs(self) -> Iterator[Paragraph]:
        """Yield every paragraph in reading order, preamble first."""
        yield from self.preamble
        for chapter in self.chapters:
            yield from chapter.paragraphs

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the structure
        """
        metrics = self.processing_metrics
        return {
            "metadata": {
                "title": self.metadata.title,
                "author": self.metadata.author,
                "created_date": self.metadata.created_date,
                "modified_date": self.metadata.modified_date,
                "language": self.metadata.language,
                "word_count": self.metadata.word_count,
                "character_count": self.metadata.character_count,
                "custom_metadata": dict(self.metadata.custom_metadata),
            },
            "chapters": [_chapter_to_dict(c) for c in self.chapters],
            "preamble": [_paragraph_to_dict(p) for p in self.preamble],
            "elements": [
                {
                    "type": e.type,
                    "content": e.content,
                    "position": e.position,
                    "attributes": dict(e.attributes),
                }
                for e in self.elements
            ],
            "total_chapters": self.total_chapters,
            "total_paragraphs": self.total_paragraphs,
            "total_sentences": self.total_sentences,
            "total_word_count": self.total_word_count,
            "estimated_total_duration": self.estimated_total_duration,
            "confidence": self.confidence,
            "processing_metrics": {
                "parse_start_time": metrics.parse_start_time.isoformat(),
                "parse_end_time": metrics.parse_end_time.isoformat(),
                "parse_duration_ms": metrics.parse_duration_ms,
                "source_length": metrics.source_length,
                "processing_errors": list(metrics.processing_errors),
            },
        }

    def save(self, path: str | Path) -> None:
        """
        Save the structure as JSON.

        Args:
            path: Output file path
        """
        Path(path).write_text(
            json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
        )


def _paragraph_to_dict(paragraph: Paragraph) -> dict[str, Any]:
    return {
        "id": paragraph.id,
        "type": paragraph.type.value,
        "position": paragraph.position,
        "word_count": paragraph.word_count,
        "include_in_audio": paragraph.include_in_audio,
        "confidence": paragraph.confidence,
        "raw_text": paragraph.raw_text,
        "sentences": [
            {
                "id": s.id,
                "text": s.text,
                "position": s.position,
                "word_count": s.word_count,
                "estimated_duration": s.estimated_duration,
                "has_formatting": s.has_formatting,
            }
            for s in paragraph.sentences
        ],
    }


def _chapter_to_dict(chapter: Chapter) -> dict[str, Any]:
    return {
        "id": chapter.id,
        "title": chapter.title,
        "level": chapter.level,
        "position": chapter.position,
        "word_count": chapter.word_count,
        "estimated_duration": chapter.estimated_duration,
        "start_position": chapter.start_position,
        "end_position": chapter.end_position,
        "paragraphs": [_paragraph_to_dict(p) for p in chapter.paragraphs],
    }


# ─────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class IssueLocation:
    """Ids of the chapter/paragraph/sentence an issue refers to."""

    chapter: str | None = None
    paragraph: str | None = None
    sentence: str | None = None


@dataclass(frozen=True)
class ValidationIssue:
    """A problem found in a parsed structure."""

    code: str  # "NO_CHAPTERS", "SHORT_SENTENCE", ...
    message: str
    severity: Severity
    location: IssueLocation = field(default_factory=IssueLocation)
    suggestion: str | None = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a DocumentStructure. Never blocks a parse."""

    is_valid: bool
    errors: tuple[ValidationIssue, ...]
    warnings: tuple[ValidationIssue, ...]
    score: float

    @property
    def issues(self) -> tuple[ValidationIssue, ...]:
        return self.errors + self.warnings


# ─────────────────────────────────────────────────────────────
# Streaming
# ─────────────────────────────────────────────────────────────


class ChunkType(str, Enum):
    METADATA = "metadata"
    CHAPTER = "chapter"
    PARAGRAPHS = "paragraphs"
    COMPLETE = "complete"


@dataclass(frozen=True)
class DocumentChunk:
    """One unit of streamed output. Progress is a percentage in [0, 100]."""

    id: str
    type: ChunkType
    position: int
    progress: float
    chapter: Chapter | None = None
    paragraphs: tuple[Paragraph, ...] = ()
    metadata: DocumentMetadata | None = None
