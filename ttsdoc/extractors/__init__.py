"""
Structure extraction module.

Each extractor makes one pass over the token stream:
- chapters: chapter/paragraph/sentence hierarchy (fold over tokens)
- elements: code, tables, lists, quotes, links, images
- metadata: title, author, dates, language, front matter

Then the document is scored (confidence) and checked (validators).
"""

from ttsdoc.extractors.chapters import (
    TOKEN_TYPE_TO_PARAGRAPH,
    BuilderPhase,
    BuilderState,
    BuildOutput,
    ChapterBuilder,
    build_chapters,
)
from ttsdoc.extractors.confidence import (
    EDGE_CASE_RULES,
    ConfidenceRule,
    DocumentMetrics,
    calculate_document_confidence,
)
from ttsdoc.extractors.elements import extract_elements
from ttsdoc.extractors.metadata import (
    extract_basic_metadata,
    extract_metadata,
    load_front_matter,
    strip_front_matter,
)
from ttsdoc.extractors.validators import (
    ChapterRule,
    DocumentContentRule,
    ParagraphRule,
    SentenceLengthRule,
    ValidationRule,
    validate_structure,
)

__all__ = [
    # Chapters
    "ChapterBuilder",
    "BuilderPhase",
    "BuilderState",
    "BuildOutput",
    "TOKEN_TYPE_TO_PARAGRAPH",
    "build_chapters",
    # Elements and metadata
    "extract_elements",
    "extract_metadata",
    "extract_basic_metadata",
    "load_front_matter",
    "strip_front_matter",
    # Confidence
    "ConfidenceRule",
    "DocumentMetrics",
    "EDGE_CASE_RULES",
    "calculate_document_confidence",
    # Validators
    "ValidationRule",
    "DocumentContentRule",
    "ChapterRule",
    "ParagraphRule",
    "SentenceLengthRule",
    "validate_structure",
]
