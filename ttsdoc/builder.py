"""
Document structure assembly.

Wires the pipeline stages together for one input:
- input gate (type, encoding, size, blank input)
- markup screening (unclosed fences, malformed headings) per strategy
- tokenizing (markdown-it-py)
- metadata, element and chapter extraction
- confidence scoring and statistics

``build_document_structure()`` runs only the extraction stages and never
rejects input, so it also covers inputs the gate would refuse (such as
the empty string). ``run_pipeline()`` runs everything and raises
MarkdownParseError on fatal problems.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from ttsdoc.config import ParserConfig
from ttsdoc.exceptions import ErrorCode, MarkdownParseError
from ttsdoc.extractors.chapters import ChapterBuilder
from ttsdoc.extractors.confidence import calculate_document_confidence
from ttsdoc.extractors.elements import extract_elements
from ttsdoc.extractors.metadata import (
    extract_basic_metadata,
    extract_metadata,
    load_front_matter,
    strip_front_matter,
)
from ttsdoc.models import (
    DocumentStatistics,
    DocumentStructure,
    MarkdownElement,
    Paragraph,
    ProcessingMetrics,
)
from ttsdoc.readers.tokenizer import (
    decode_input,
    find_markup_issues,
    repair_markdown,
    tokenize,
)

logger = logging.getLogger(__name__)


@dataclass
class ParseContext:
    """Context accumulated while building one structure."""

    content: str
    config: ParserConfig
    started_at: datetime = field(default_factory=datetime.now)
    started_clock: float = field(default_factory=time.perf_counter)
    processing_errors: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# Input gate and markup screening
# ═══════════════════════════════════════════════════════════════════════════════


def prepare_input(source: str | bytes, config: ParserConfig) -> str:
    """
    Check and decode raw input.

    Args:
        source: Markdown text or UTF-8 bytes
        config: Parser config (size limit)

    Returns:
        The decoded text

    Raises:
        MarkdownParseError: INVALID_INPUT, ENCODING_ERROR or FILE_TOO_LARGE
    """
    if not isinstance(source, (str, bytes, bytearray)):
        raise MarkdownParseError.invalid_input(
            f"Expected str or bytes, got {type(source).__name__}"
        )

    limit = config.max_file_size_bytes
    if isinstance(source, str):
        # Cheap upper bound before encoding: UTF-8 uses at most 4 bytes per char
        size = len(source) if len(source) * 4 <= limit else len(source.encode("utf-8"))
    else:
        size = len(source)
    if size > limit:
        raise MarkdownParseError.file_too_large(size, limit)

    content = decode_input(source)
    if not content.strip():
        raise MarkdownParseError.invalid_input("Input is empty")
    return content


def screen_markup(ctx: ParseContext) -> str:
    """
    Apply the error handling strategy to markup problems.

    strict: the first problem is fatal. recover: unclosed code fences are
    closed and every problem is logged. lenient: problems are logged and the
    text is left to the tokenizer as-is.

    Returns:
        The text to tokenize
    """
    strategy = ctx.config.error_handling_strategy
    issues = find_markup_issues(ctx.content)
    if not issues:
        return ctx.content

    if strategy == "strict":
        raise issues[0].to_error()

    for issue in issues:
        ctx.processing_errors.append(f"{issue.code.value}: {issue.message}")
        logger.warning("Markup issue (%s): %s", strategy, issue.message)

    if strategy == "recover" and any(i.code is ErrorCode.UNCLOSED_CODE_BLOCK for i in issues):
        return repair_markdown(ctx.content)
    return ctx.content


# ═══════════════════════════════════════════════════════════════════════════════
# Assembly
# ═══════════════════════════════════════════════════════════════════════════════


def _statistics(
    paragraphs: list[Paragraph], elements: list[MarkdownElement]
) -> DocumentStatistics:
    sentences = [s for p in paragraphs for s in p.sentences]
    return DocumentStatistics(
        paragraphs_by_type=dict(Counter(p.type.value for p in paragraphs)),
        elements_by_type=dict(Counter(e.type for e in elements)),
        audio_paragraphs=sum(1 for p in paragraphs if p.include_in_audio),
        average_sentences_per_paragraph=len(sentences) / len(paragraphs) if paragraphs else 0.0,
        average_words_per_sentence=(
            sum(s.word_count for s in sentences) / len(sentences) if sentences else 0.0
        ),
    )


def build_document_structure(
    content: str,
    config: ParserConfig | None = None,
    *,
    ctx: ParseContext | None = None,
    text: str | None = None,
) -> DocumentStructure:
    """
    Build a DocumentStructure without any input or confidence gate.

    Args:
        content: Original document text
        config: Parser configuration (defaults if None)
        ctx: Existing context to record timing and problems in
        text: Text to tokenize, if markup screening already changed it

    Returns:
        The assembled structure

    Raises:
        MarkdownParseError: NESTING_TOO_DEEP or INVALID_SYNTAX from the tokenizer
    """
    config = config or (ctx.config if ctx else ParserConfig())
    ctx = ctx or ParseContext(content=content, config=config)
    text = content if text is None else text

    # Step 1: Front matter (blanked before tokenizing only if it is a mapping)
    front_matter, problem = load_front_matter(text)
    if problem:
        ctx.processing_errors.append(problem)
        logger.warning("Leading --- block kept as Markdown: %s", problem)

    # Step 2: Tokenize
    tokens = tokenize(strip_front_matter(text), max_nesting_depth=config.max_nesting_depth)
    logger.debug("Tokenized %d characters into %d tokens", len(text), len(tokens))

    # Step 3: Independent extractions over the same tokens
    metadata = extract_metadata(content, tokens, front_matter=front_matter)
    elements = extract_elements(tokens)
    built = ChapterBuilder(config).build(tokens)

    # Step 4: Totals (preamble included)
    paragraphs = list(built.paragraphs)
    total_sentences = sum(len(p.sentences) for p in paragraphs)
    preamble_duration = sum(p.estimated_duration for p in built.preamble if p.include_in_audio)

    # Step 5: Confidence
    confidence = calculate_document_confidence(
        built.chapters, len(paragraphs), total_sentences, metadata.word_count
    )

    finished = datetime.now()
    metrics = ProcessingMetrics(
        parse_start_time=ctx.started_at,
        parse_end_time=finished,
        parse_duration_ms=(time.perf_counter() - ctx.started_clock) * 1000,
        source_length=len(content),
        processing_errors=tuple(ctx.processing_errors),
    )

    return DocumentStructure(
        metadata=metadata,
        chapters=built.chapters,
        preamble=built.preamble,
        elements=tuple(elements),
        total_paragraphs=len(paragraphs),
        total_sentences=total_sentences,
        total_word_count=sum(p.word_count for p in paragraphs),
        estimated_total_duration=(
            sum(c.estimated_duration for c in built.chapters) + preamble_duration
        ),
        confidence=confidence,
        processing_metrics=metrics,
        stats=_statistics(paragraphs, elements),
    )


def run_pipeline(source: str | bytes, config: ParserConfig) -> DocumentStructure:
    """Gate, screen and build. Raises MarkdownParseError on fatal problems."""
    content = prepare_input(source, config)
    ctx = ParseContext(content=content, config=config)
    text = screen_markup(ctx)
    return build_document_structure(content, config, ctx=ctx, text=text)


def minimal_structure(content: str) -> DocumentStructure:
    """A structure with metadata only, for when parsing is impossible."""
    now = datetime.now()
    return DocumentStructure(
        metadata=extract_basic_metadata(content),
        chapters=(),
        preamble=(),
        elements=(),
        total_paragraphs=0,
        total_sentences=0,
        total_word_count=0,
        estimated_total_duration=0.0,
        confidence=0.0,
        processing_metrics=ProcessingMetrics(
            parse_start_time=now,
            parse_end_time=now,
            parse_duration_ms=0.0,
            source_length=len(content),
        ),
    )
