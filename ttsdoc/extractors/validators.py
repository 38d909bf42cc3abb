"""
Validation rules for parsed document structures.

Validators check a DocumentStructure for quality problems. Issues are
reported but never block a parse. Errors lower the score twice as much
as warnings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence

from ttsdoc.config import ParserConfig
from ttsdoc.models import (
    Chapter,
    DocumentStructure,
    IssueLocation,
    Paragraph,
    ParagraphType,
    Severity,
    ValidationIssue,
    ValidationResult,
)

ERROR_CODES = frozenset({"NO_CHAPTERS", "NO_PARAGRAPHS", "LONG_SENTENCE"})

# Score weights
CHAPTER_WEIGHT = 3
PARAGRAPH_WEIGHT = 2
SENTENCE_WEIGHT = 1
ERROR_WEIGHT = 2
WARNING_WEIGHT = 1


def _located_paragraphs(
    structure: DocumentStructure,
) -> Iterator[tuple[Chapter | None, Paragraph]]:
    for paragraph in structure.preamble:
        yield None, paragraph
    for chapter in structure.chapters:
        for paragraph in chapter.paragraphs:
            yield chapter, paragraph


class ValidationRule(ABC):
    """Abstract base for validation rules."""

    name: str = "base"

    @abstractmethod
    def check(self, structure: DocumentStructure, config: ParserConfig) -> list[ValidationIssue]:
        """Check a structure for issues.

        Returns list of issues found (empty if all good).
        """
        pass


class DocumentContentRule(ValidationRule):
    """The document must have chapters and paragraphs."""

    name = "document_content"

    def check(self, structure: DocumentStructure, config: ParserConfig) -> list[ValidationIssue]:
        issues = []
        if not structure.chapters:
            levels = ", ".join(f"H{level}" for level in config.chapter_header_levels)
            issues.append(
                ValidationIssue(
                    code="NO_CHAPTERS",
                    message=f"No chapters found (looked for {levels} headings)",
                    severity=Severity.HIGH,
                )
            )
        if structure.total_paragraphs == 0:
            issues.append(
                ValidationIssue(
                    code="NO_PARAGRAPHS",
                    message="No paragraphs found",
                    severity=Severity.HIGH,
                )
            )
        return issues


class ChapterRule(ValidationRule):
    """Chapters should have a title and some content."""

    name = "chapter"

    def check(self, structure: DocumentStructure, config: ParserConfig) -> list[ValidationIssue]:
        issues = []
        for chapter in structure.chapters:
            location = IssueLocation(chapter=chapter.id)
            if not chapter.title.strip():
                issues.append(
                    ValidationIssue(
                        code="EMPTY_CHAPTER_TITLE",
                        message=f"Chapter {chapter.position + 1} has an empty title",
                        severity=Severity.MEDIUM,
                        location=location,
                        suggestion="Add a descriptive heading text",
                    )
                )
            if not chapter.paragraphs:
                issues.append(
                    ValidationIssue(
                        code="EMPTY_CHAPTER",
                        message=f"Chapter '{chapter.title}' has no content",
                        severity=Severity.MEDIUM,
                        location=location,
                        suggestion="Add content or remove the heading",
                    )
                )
        return issues


class ParagraphRule(ValidationRule):
    """Text paragraphs should contain at least one sentence."""

    name = "paragraph"

    def check(self, structure: DocumentStructure, config: ParserConfig) -> list[ValidationIssue]:
        issues = []
        for chapter, paragraph in _located_paragraphs(structure):
            if paragraph.type is ParagraphType.TEXT and not paragraph.sentences:
                issues.append(
                    ValidationIssue(
                        code="EMPTY_PARAGRAPH",
                        message=f"Paragraph {paragraph.id} has no sentences",
                        severity=Severity.LOW,
                        location=IssueLocation(
                            chapter=chapter.id if chapter else None, paragraph=paragraph.id
                        ),
                        suggestion="Remove the empty paragraph",
                    )
                )
        return issues


class SentenceLengthRule(ValidationRule):
    """Sentences should fall within the configured length bounds.

    Too-short sentences are warnings; too-long ones are errors, since
    speech synthesis handles them badly.
    """

    name = "sentence_length"

    def check(self, structure: DocumentStructure, config: ParserConfig) -> list[ValidationIssue]:
        issues = []
        for chapter, paragraph in _located_paragraphs(structure):
            for sentence in paragraph.sentences:
                location = IssueLocation(
                    chapter=chapter.id if chapter else None,
                    paragraph=paragraph.id,
                    sentence=sentence.id,
                )
                length = len(sentence.text)
                if length < config.min_sentence_length:
                    issues.append(
                        ValidationIssue(
                            code="SHORT_SENTENCE",
                            message=f"Sentence is very short ({length} chars "
                            f"< {config.min_sentence_length})",
                            severity=Severity.LOW,
                            location=location,
                            suggestion="Merge it with a neighbouring sentence",
                        )
                    )
                elif length > config.max_sentence_length:
                    issues.append(
                        ValidationIssue(
                            code="LONG_SENTENCE",
                            message=f"Sentence is too long ({length} chars "
                            f"> {config.max_sentence_length})",
                            severity=Severity.MEDIUM,
                            location=location,
                        )
                    )
        return issues


DEFAULT_RULES: tuple[ValidationRule, ...] = (
    DocumentContentRule(),
    ChapterRule(),
    ParagraphRule(),
    SentenceLengthRule(),
)


def validation_score(structure: DocumentStructure, errors: int, warnings: int) -> float:
    """Score in [0, 1]: 1 minus weighted issues over weighted checks."""
    total_checks = (
        structure.total_chapters * CHAPTER_WEIGHT
        + structure.total_paragraphs * PARAGRAPH_WEIGHT
        + structure.total_sentences * SENTENCE_WEIGHT
    )
    penalty = errors * ERROR_WEIGHT + warnings * WARNING_WEIGHT
    return max(0.0, 1.0 - penalty / max(total_checks, 1))


def validate_structure(
    structure: DocumentStructure,
    config: ParserConfig | None = None,
    rules: Sequence[ValidationRule] = DEFAULT_RULES,
) -> ValidationResult:
    """
    Validate a parsed structure.

    Args:
        structure: Structure to check
        config: Parser config (sentence bounds, chapter levels)
        rules: Rules to apply

    Returns:
        ValidationResult; is_valid is True when there are no errors
    """
    config = config or ParserConfig()
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    for rule in rules:
        for issue in rule.check(structure, config):
            (errors if issue.code in ERROR_CODES else warnings).append(issue)

    return ValidationResult(
        is_valid=not errors,
        errors=tuple(errors),
        warnings=tuple(warnings),
        score=validation_score(structure, len(errors), len(warnings)),
    )
