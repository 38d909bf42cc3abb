"""
ttsdoc: Turn Markdown documents into speech-ready structure.

This library parses Markdown into a uniform hierarchy of chapters,
paragraphs and sentences, with word counts, speaking-time estimates,
a confidence score and validation results, ready for a text-to-speech
pipeline.

Example:
    >>> import ttsdoc
    >>> result = ttsdoc.parse_markdown(open("book.md").read())
    >>> if result.success:
    ...     for chapter in result.structure.chapters:
    ...         print(chapter.title, round(chapter.estimated_duration), "s")

    >>> # Large documents can be streamed chapter by chapter
    >>> parser = ttsdoc.MarkdownParser(ttsdoc.ParserConfig.from_preset("narrative"))
    >>> for chunk in parser.create_stream(text):
    ...     print(chunk.type, chunk.progress)
"""

from ttsdoc.builder import build_document_structure
from ttsdoc.config import LanguageRules, ParserConfig
from ttsdoc.exceptions import (
    ConfigurationError,
    ErrorCode,
    ErrorLocation,
    MarkdownParseError,
    TtsDocError,
    UnsupportedFormatError,
)
from ttsdoc.models import (
    # Structure
    Chapter,
    # Streaming
    ChunkType,
    DocumentChunk,
    # Metadata
    DocumentMetadata,
    DocumentStatistics,
    DocumentStructure,
    # Validation
    IssueLocation,
    MarkdownElement,
    Paragraph,
    ParagraphType,
    ProcessingMetrics,
    Sentence,
    Severity,
    ValidationIssue,
    ValidationResult,
)
from ttsdoc.parser import (
    MarkdownParser,
    ParseResult,
    detect_format,
    parse_batch,
    parse_file,
    parse_markdown,
    supported_formats,
)
from ttsdoc.presets import PRESETS, ParserPreset, get_preset
from ttsdoc.streaming import DocumentStream

__version__ = "0.1.0"
__all__ = [
    # Main API
    "parse_markdown",
    "parse_file",
    "parse_batch",
    "build_document_structure",
    "detect_format",
    "supported_formats",
    "MarkdownParser",
    "ParseResult",
    "DocumentStream",
    # Configuration
    "ParserConfig",
    "LanguageRules",
    "ParserPreset",
    "PRESETS",
    "get_preset",
    # Structure
    "DocumentStructure",
    "Chapter",
    "Paragraph",
    "ParagraphType",
    "Sentence",
    "MarkdownElement",
    # Metadata
    "DocumentMetadata",
    "DocumentStatistics",
    "ProcessingMetrics",
    # Validation
    "ValidationResult",
    "ValidationIssue",
    "IssueLocation",
    "Severity",
    # Streaming
    "DocumentChunk",
    "ChunkType",
    # Exceptions
    "TtsDocError",
    "ConfigurationError",
    "UnsupportedFormatError",
    "MarkdownParseError",
    "ErrorCode",
    "ErrorLocation",
]
