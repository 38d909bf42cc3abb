"""
Markdown parser orchestrator.

This module provides MarkdownParser and the ``parse_markdown()`` entry
point, which turn Markdown text into a DocumentStructure by wiring
together:
- the input gate and markup screening (builder)
- the tokenizer (markdown-it-py)
- metadata, element and chapter extraction
- confidence scoring and structure validation

Parse failures are returned in a ParseResult, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from pathlib import Path

from ttsdoc.builder import run_pipeline
from ttsdoc.config import ParserConfig
from ttsdoc.exceptions import (
    ConfigurationError,
    MarkdownParseError,
    TtsDocError,
    UnsupportedFormatError,
)
from ttsdoc.extractors.validators import validate_structure
from ttsdoc.models import (
    DocumentStructure,
    IssueLocation,
    Severity,
    ValidationIssue,
    ValidationResult,
)
from ttsdoc.readers.tokenizer import Token, decode_input, tokenize
from ttsdoc.streaming import DocumentStream

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of a parse.

    On success ``structure`` and ``validation`` are set. On failure
    ``error`` is set; for a LOW_CONFIDENCE rejection the structure and its
    validation are attached too, so callers can inspect what was found.
    """

    success: bool
    structure: DocumentStructure | None = None
    error: MarkdownParseError | None = None
    validation: ValidationResult | None = None

    def unwrap(self) -> DocumentStructure:
        """Return the structure, or raise the parse error."""
        if self.error is not None:
            raise self.error
        if self.structure is None:
            raise TtsDocError("ParseResult has neither a structure nor an error")
        return self.structure


class MarkdownParser:
    """
    Parses Markdown into chapters, paragraphs and sentences.

    Each call is independent; nothing is cached between calls.

    Usage:
        parser = MarkdownParser(ParserConfig.from_preset("blog"))
        result = parser.parse(text)
        if result.success:
            for chapter in result.structure.chapters:
                print(chapter.title)
        else:
            print(result.error.code, result.error.suggested_actions)
    """

    def __init__(
        self,
        config: ParserConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration (defaults if None)
            logger: Where to log; the module logger if None
        """
        self.config = config or ParserConfig()
        self.logger = logger or logging.getLogger(__name__)

    def parse(self, source: str | bytes) -> ParseResult:
        """
        Parse Markdown into a DocumentStructure.

        Args:
            source: Markdown text or UTF-8 bytes

        Returns:
            ParseResult with the structure and its validation, or the error
        """
        config = self.config
        self.logger.info(
            "Parsing %s input (strategy=%s)", type(source).__name__, config.error_handling_strategy
        )

        try:
            structure = run_pipeline(source, config)
        except MarkdownParseError as e:
            self.logger.warning("Parse failed [%s]: %s", e.code.value, e)
            return ParseResult(success=False, error=e)
        except MemoryError:
            error = MarkdownParseError.memory_error()
            self.logger.error("Parse failed [%s]: %s", error.code.value, error)
            return ParseResult(success=False, error=error)
        except Exception as e:
            self.logger.exception("Unexpected error while parsing")
            error = MarkdownParseError.parse_failed(e)
            error.__cause__ = e
            return ParseResult(success=False, error=error)

        validation = self.validate(structure)

        if structure.confidence < config.confidence_threshold:
            error = MarkdownParseError.low_confidence(
                structure.confidence, config.confidence_threshold
            )
            if config.error_handling_strategy != "lenient":
                self.logger.warning("Rejected: %s", error)
                return ParseResult(
                    success=False, structure=structure, error=error, validation=validation
                )
            self.logger.warning("Accepting low-confidence structure: %s", error)
            validation = replace(
                validation,
                warnings=validation.warnings
                + (
                    ValidationIssue(
                        code="LOW_CONFIDENCE",
                        message=str(error),
                        severity=Severity.MEDIUM,
                        location=IssueLocation(),
                        suggestion=error.suggested_actions[0],
                    ),
                ),
            )

        self.logger.info(
            "Parsed %d chapters, %d paragraphs, %d sentences (confidence %.2f) in %.1f ms",
            structure.total_chapters,
            structure.total_paragraphs,
            structure.total_sentences,
            structure.confidence,
            structure.processing_metrics.parse_duration_ms,
        )
        return ParseResult(success=True, structure=structure, validation=validation)

    def validate(self, structure: DocumentStructure) -> ValidationResult:
        """Check a structure for quality issues. Never raises for content issues."""
        return validate_structure(structure, self.config)

    def tokenize(self, source: str | bytes) -> list[Token]:
        """Tokenize Markdown with this parser's nesting limit."""
        return tokenize(source, max_nesting_depth=self.config.max_nesting_depth)

    def should_stream(self, source: str | bytes) -> bool:
        """True if streaming is enabled and the input exceeds max_chunk_size."""
        return self.config.enable_streaming and len(source) > self.config.max_chunk_size

    def create_stream(self, source: str | bytes) -> DocumentStream:
        """
        Create a lazily evaluated chunk stream.

        Raises:
            ConfigurationError: If streaming is disabled
            MarkdownParseError: ENCODING_ERROR for undecodable bytes
        """
        if not self.config.enable_streaming:
            raise ConfigurationError("Streaming is disabled (enable_streaming=False)")
        return DocumentStream(decode_input(source), self.config)


# ═══════════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════════


def parse_markdown(source: str | bytes, config: ParserConfig | None = None) -> ParseResult:
    """
    Parse Markdown text.

    This is the main entry point for ttsdoc.

    Args:
        source: Markdown text or UTF-8 bytes
        config: Parser configuration (uses defaults if None)

    Returns:
        ParseResult; check ``success`` before using ``structure``

    Example:
        >>> result = parse_markdown("## Intro\\n\\nHello there. How are you?")
        >>> result.structure.chapters[0].title
        'Intro'
    """
    return MarkdownParser(config).parse(source)


def parse_file(path: str | Path, config: ParserConfig | None = None) -> ParseResult:
    """
    Parse a Markdown file.

    Args:
        path: Path to a .md / .markdown / .txt file
        config: Parser configuration

    Returns:
        ParseResult for the file contents

    Raises:
        FileNotFoundError: If the file doesn't exist
        UnsupportedFormatError: If the file is not Markdown
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")

    fmt = detect_format(path)
    if fmt not in supported_formats():
        raise UnsupportedFormatError(
            f"Format '{fmt}' is not supported. Supported: {', '.join(supported_formats())}"
        )

    config = config or ParserConfig()
    size = path.stat().st_size
    if size > config.max_file_size_bytes:
        # Don't read files we would reject anyway
        return ParseResult(
            success=False,
            error=MarkdownParseError.file_too_large(size, config.max_file_size_bytes),
        )

    logger.info("Parsing %s", path)
    return MarkdownParser(config).parse(path.read_bytes())


def parse_batch(
    paths: Iterable[str | Path],
    config: ParserConfig | None = None,
) -> Iterator[tuple[Path, ParseResult | Exception]]:
    """
    Parse multiple files, yielding results as they complete.

    Args:
        paths: Paths to Markdown files
        config: Parser configuration shared by all files

    Yields:
        (path, result) tuples; result is a ParseResult, or the exception
        raised for a missing or unsupported file
    """
    config = config or ParserConfig()
    for path in paths:
        path = Path(path)
        try:
            yield (path, parse_file(path, config))
        except (OSError, UnsupportedFormatError) as e:
            logger.warning("Skipping %s: %s", path, e)
            yield (path, e)


def detect_format(path: str | Path) -> str:
    """
    Detect document format from the file extension and magic bytes.

    Args:
        path: Path to document file

    Returns:
        Format string: "markdown", "pdf", "epub"

    Raises:
        UnsupportedFormatError: If format cannot be detected
    """
    path = Path(path)

    ext_map = {
        ".md": "markdown",
        ".markdown": "markdown",
        ".mdown": "markdown",
        ".mkd": "markdown",
        ".txt": "markdown",
        ".pdf": "pdf",
        ".epub": "epub",
    }
    ext = path.suffix.lower()
    if ext in ext_map:
        return ext_map[ext]

    # Magic bytes: PDF header, EPUB is a zip container
    try:
        with open(path, "rb") as f:
            header = f.read(8)
    except OSError as e:
        raise UnsupportedFormatError(f"Cannot detect format for: {path}") from e
    if header.startswith(b"%PDF"):
        return "pdf"
    if header.startswith(b"PK\x03\x04"):
        return "epub"

    raise UnsupportedFormatError(f"Cannot detect format for: {path}")


def supported_formats() -> list[str]:
    """Return list of supported input formats."""
    return ["markdown"]
