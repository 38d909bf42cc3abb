"""
Exception classes for ttsdoc.

All ttsdoc exceptions inherit from TtsDocError, making it easy to catch
all library errors. Parse failures are reported as MarkdownParseError,
which carries a machine-readable ErrorCode, an optional source location
and a confidence value.

Example:
    >>> try:
    ...     result = ttsdoc.parse_file("notes.pdf")
    ... except ttsdoc.UnsupportedFormatError as e:
    ...     print(f"Format not supported: {e}")
    ... except ttsdoc.TtsDocError as e:
    ...     print(f"ttsdoc error: {e}")
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any


class TtsDocError(Exception):
    """
    Base exception for all ttsdoc errors.

    Catch this to handle any ttsdoc-specific error.
    """

    pass


class UnsupportedFormatError(TtsDocError):
    """
    Raised when a file format is not handled by this pipeline.

    Example:
        >>> ttsdoc.parse_file("book.epub")
        UnsupportedFormatError: Format 'epub' is not supported. Supported: markdown
    """

    pass


class ConfigurationError(TtsDocError, ValueError):
    """
    Raised for invalid configuration.

    Also a ValueError so callers validating plain values can catch either.

    Example:
        >>> ParserConfig(confidence_threshold=1.5)
        ConfigurationError: confidence_threshold must be between 0.0 and 1.0, got 1.5
    """

    pass


class ErrorCode(str, Enum):
    """Machine-readable failure categories for Markdown parsing."""

    INVALID_SYNTAX = "INVALID_SYNTAX"
    MALFORMED_HEADER = "MALFORMED_HEADER"
    UNCLOSED_CODE_BLOCK = "UNCLOSED_CODE_BLOCK"
    INVALID_TABLE = "INVALID_TABLE"
    MALFORMED_LIST = "MALFORMED_LIST"
    NESTING_TOO_DEEP = "NESTING_TOO_DEEP"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    ENCODING_ERROR = "ENCODING_ERROR"
    MEMORY_ERROR = "MEMORY_ERROR"
    PARSE_FAILED = "PARSE_FAILED"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
    INVALID_INPUT = "INVALID_INPUT"


ERROR_DESCRIPTIONS: MappingProxyType[ErrorCode, str] = MappingProxyType(
    {
        ErrorCode.INVALID_SYNTAX: "The document contains invalid Markdown syntax.",
        ErrorCode.MALFORMED_HEADER: "A heading is not formatted correctly.",
        ErrorCode.UNCLOSED_CODE_BLOCK: "A code block was opened but never closed.",
        ErrorCode.INVALID_TABLE: "A table is not formatted correctly.",
        ErrorCode.MALFORMED_LIST: "A list is not formatted correctly.",
        ErrorCode.NESTING_TOO_DEEP: "The document nests lists or quotes too deeply.",
        ErrorCode.FILE_TOO_LARGE: "The document is larger than the allowed size.",
        ErrorCode.ENCODING_ERROR: "The document is not valid UTF-8 text.",
        ErrorCode.MEMORY_ERROR: "Not enough memory to process the document.",
        ErrorCode.PARSE_FAILED: "The document could not be parsed.",
        ErrorCode.LOW_CONFIDENCE: "The detected structure is too unreliable to use.",
        ErrorCode.INVALID_INPUT: "The input is empty or not text.",
    }
)

_SYNTAX_ACTIONS = (
    "Check the Markdown syntax around the reported line",
    "Run the document through a Markdown linter",
    "Fix the formatting manually and try again",
)

SUGGESTED_ACTIONS: MappingProxyType[ErrorCode, tuple[str, ...]] = MappingProxyType(
    {
        ErrorCode.INVALID_SYNTAX: _SYNTAX_ACTIONS,
        ErrorCode.MALFORMED_HEADER: _SYNTAX_ACTIONS,
        ErrorCode.INVALID_TABLE: _SYNTAX_ACTIONS,
        ErrorCode.MALFORMED_LIST: _SYNTAX_ACTIONS,
        ErrorCode.UNCLOSED_CODE_BLOCK: (
            "Add a closing ``` after the code block",
            "Check that opening and closing backticks match",
            "Make sure code blocks are not nested",
        ),
        ErrorCode.NESTING_TOO_DEEP: (
            "Simplify the document structure",
            "Reduce the nesting of lists and quotes",
            "Split deeply nested content into separate sections",
        ),
        ErrorCode.FILE_TOO_LARGE: (
            "Split the document into smaller files",
            "Enable streaming for large documents",
            "Reduce the document size",
        ),
        ErrorCode.MEMORY_ERROR: (
            "Split the document into smaller files",
            "Enable streaming for large documents",
            "Reduce the document size",
        ),
        ErrorCode.LOW_CONFIDENCE: (
            "Improve the document structure",
            "Add chapter headings at the configured levels",
            "Use consistent formatting throughout",
        ),
        ErrorCode.ENCODING_ERROR: (
            "Check that the file is saved as UTF-8",
            "Convert the file to UTF-8",
            "Remove unusual special characters",
        ),
    }
)

DEFAULT_ACTIONS: tuple[str, ...] = (
    "Check the document format",
    "Try a simpler document",
    "Report the issue if it persists",
)


@dataclass(frozen=True)
class ErrorLocation:
    """Position of a problem in the source (1-based line and column)."""

    line: int
    column: int
    context: str | None = None


class MarkdownParseError(TtsDocError):
    """
    Raised (or returned inside a ParseResult) when parsing fails.

    Attributes:
        code: ErrorCode naming the failure category.
        location: Where in the source the problem was found, if known.
        confidence: Structure confidence at the time of failure, in [0, 1].

    Example:
        >>> err = MarkdownParseError.unclosed_code_block(ErrorLocation(12, 1))
        >>> str(err)
        'Code block opened here is never closed (Line 12, Column 1)'
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        location: ErrorLocation | None = None,
        confidence: float = 0.0,
    ):
        if location is not None:
            message = f"{message} (Line {location.line}, Column {location.column})"
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message
        self.location = location
        self.confidence = min(1.0, max(0.0, confidence))

    @property
    def description(self) -> str:
        """Plain-language description of the error category."""
        return ERROR_DESCRIPTIONS.get(self.code, ERROR_DESCRIPTIONS[ErrorCode.PARSE_FAILED])

    @property
    def suggested_actions(self) -> tuple[str, ...]:
        """Things a user can try to fix the document."""
        return SUGGESTED_ACTIONS.get(self.code, DEFAULT_ACTIONS)

    @property
    def is_policy_rejection(self) -> bool:
        """True when parsing succeeded but the result was rejected."""
        return self.code is ErrorCode.LOW_CONFIDENCE

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        location = None
        if self.location is not None:
            location = {
                "line": self.location.line,
                "column": self.location.column,
                "context": self.location.context,
            }
        return {
            "code": self.code.value,
            "message": self.message,
            "location": location,
            "confidence": self.confidence,
            "description": self.description,
            "suggested_actions": list(self.suggested_actions),
        }

    # ─────────────────────────────────────────────────────────────
    # Factories
    # ─────────────────────────────────────────────────────────────

    @classmethod
    def invalid_input(cls, message: str) -> MarkdownParseError:
        return cls(ErrorCode.INVALID_INPUT, message)

    @classmethod
    def encoding_error(cls, detail: str) -> MarkdownParseError:
        return cls(ErrorCode.ENCODING_ERROR, f"Input is not valid UTF-8: {detail}")

    @classmethod
    def file_too_large(cls, size_bytes: int, limit_bytes: int) -> MarkdownParseError:
        return cls(
            ErrorCode.FILE_TOO_LARGE,
            f"Input is {size_bytes} bytes, limit is {limit_bytes} bytes",
        )

    @classmethod
    def unclosed_code_block(cls, location: ErrorLocation) -> MarkdownParseError:
        return cls(
            ErrorCode.UNCLOSED_CODE_BLOCK,
            "Code block opened here is never closed",
            location=location,
        )

    @classmethod
    def malformed_header(cls, location: ErrorLocation) -> MarkdownParseError:
        return cls(
            ErrorCode.MALFORMED_HEADER,
            "Heading marker is not followed by a space",
            location=location,
        )

    @classmethod
    def nesting_too_deep(
        cls, depth: int, limit: int, location: ErrorLocation | None = None
    ) -> MarkdownParseError:
        return cls(
            ErrorCode.NESTING_TOO_DEEP,
            f"Nesting depth {depth} exceeds the limit of {limit}",
            location=location,
        )

    @classmethod
    def invalid_syntax(cls, detail: str) -> MarkdownParseError:
        return cls(ErrorCode.INVALID_SYNTAX, f"Tokenizer rejected the input: {detail}")

    @classmethod
    def low_confidence(cls, confidence: float, threshold: float) -> MarkdownParseError:
        return cls(
            ErrorCode.LOW_CONFIDENCE,
            f"Structure confidence {confidence:.2f} is below the threshold {threshold:.2f}",
            confidence=confidence,
        )

    @classmethod
    def parse_failed(cls, cause: BaseException) -> MarkdownParseError:
        return cls(ErrorCode.PARSE_FAILED, f"Unexpected error while parsing: {cause}")

    @classmethod
    def memory_error(cls) -> MarkdownParseError:
        return cls(ErrorCode.MEMORY_ERROR, "Ran out of memory while parsing")
