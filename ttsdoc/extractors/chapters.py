"""
Chapter and paragraph builder.

Walks the token stream once as a fold (``functools.reduce``) over a
single accumulator. The builder moves through three phases:

    NO_CHAPTER --chapter heading--> IN_CHAPTER --end of tokens--> DONE

A heading at one of the configured chapter levels closes the open chapter
and starts a new one. Content blocks become paragraphs; anything before
the first chapter heading goes to the preamble. Chapter totals are
computed once, after the walk.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from functools import reduce
from types import MappingProxyType

from ttsdoc.config import ParserConfig
from ttsdoc.models import Chapter, Paragraph, ParagraphType
from ttsdoc.readers.tokenizer import Token
from ttsdoc.segmentation import extract_sentences, paragraph_confidence

logger = logging.getLogger(__name__)

TOKEN_TYPE_TO_PARAGRAPH: MappingProxyType[str, ParagraphType] = MappingProxyType(
    {
        "paragraph": ParagraphType.TEXT,
        "code": ParagraphType.CODE,
        "blockquote": ParagraphType.BLOCKQUOTE,
        "list": ParagraphType.LIST,
        "table": ParagraphType.TABLE,
    }
)

TABLE_PLACEHOLDER = "[Table]"

# Token types that are synthesized from inline content and have no source span
_INLINE_TYPES = frozenset({"link", "image"})


class BuilderPhase(Enum):
    NO_CHAPTER = "no_chapter"
    IN_CHAPTER = "in_chapter"
    DONE = "done"


@dataclass
class ChapterDraft:
    """A chapter still collecting paragraphs."""

    title: str
    level: int
    start_position: int
    end_position: int
    paragraphs: list[Paragraph] = field(default_factory=list)


@dataclass
class BuilderState:
    """Accumulator threaded through the fold."""

    phase: BuilderPhase = BuilderPhase.NO_CHAPTER
    closed: list[ChapterDraft] = field(default_factory=list)
    current: ChapterDraft | None = None
    preamble: list[Paragraph] = field(default_factory=list)
    paragraph_count: int = 0


@dataclass(frozen=True)
class BuildOutput:
    """Chapters and preamble paragraphs produced by the builder."""

    chapters: tuple[Chapter, ...]
    preamble: tuple[Paragraph, ...]

    @property
    def paragraphs(self) -> tuple[Paragraph, ...]:
        return self.preamble + tuple(p for c in self.chapters for p in c.paragraphs)


def include_in_audio(paragraph_type: ParagraphType, config: ParserConfig) -> bool:
    """Whether paragraphs of this type are voiced under ``config``."""
    if paragraph_type is ParagraphType.CODE:
        return config.include_code_blocks
    if paragraph_type is ParagraphType.TABLE:
        return config.include_tables
    if paragraph_type is ParagraphType.BLOCKQUOTE:
        return config.include_blockquotes
    if paragraph_type is ParagraphType.LIST:
        return config.include_lists
    return True


def make_paragraph(
    token: Token,
    paragraph_type: ParagraphType,
    paragraph_id: str,
    position: int,
    config: ParserConfig,
) -> Paragraph:
    """Build a Paragraph from a content token.

    Code and table paragraphs are not split into sentences.
    """
    if paragraph_type in (ParagraphType.CODE, ParagraphType.TABLE):
        raw_text = TABLE_PLACEHOLDER if paragraph_type is ParagraphType.TABLE else token.text
        return Paragraph(
            id=paragraph_id,
            type=paragraph_type,
            sentences=(),
            position=position,
            word_count=0,
            raw_text=raw_text,
            include_in_audio=include_in_audio(paragraph_type, config),
            confidence=1.0,
        )

    sentences = tuple(
        extract_sentences(
            token.text,
            config.min_sentence_length,
            config.sentence_boundary_patterns,
            config.language_rules.abbreviations,
        )
    )
    return Paragraph(
        id=paragraph_id,
        type=paragraph_type,
        sentences=sentences,
        position=position,
        word_count=sum(s.word_count for s in sentences),
        raw_text=token.text,
        include_in_audio=include_in_audio(paragraph_type, config),
        confidence=paragraph_confidence(sentences),
    )


def finalize_chapter(draft: ChapterDraft, index: int) -> Chapter:
    """Freeze a draft and compute its totals."""
    paragraphs = tuple(draft.paragraphs)
    return Chapter(
        id=f"chapter-{index + 1}",
        title=draft.title,
        level=draft.level,
        paragraphs=paragraphs,
        position=index,
        word_count=sum(p.word_count for p in paragraphs),
        estimated_duration=sum(p.estimated_duration for p in paragraphs if p.include_in_audio),
        start_position=draft.start_position,
        end_position=draft.end_position,
    )


class ChapterBuilder:
    """Groups tokens into chapters and paragraphs.

    Usage:
        builder = ChapterBuilder(config)
        output = builder.build(tokens)
        for chapter in output.chapters:
            print(chapter.title, len(chapter.paragraphs))
    """

    def __init__(self, config: ParserConfig | None = None):
        self.config = config or ParserConfig()

    def is_chapter_heading(self, token: Token) -> bool:
        return token.type == "heading" and token.depth in self.config.chapter_header_levels

    def step(self, state: BuilderState, token: Token) -> BuilderState:
        """Apply one token to the accumulator."""
        if state.phase is BuilderPhase.DONE:
            raise RuntimeError("Builder already finished")

        # 1. Chapter heading: close the open chapter, open a new one
        if self.is_chapter_heading(token):
            if state.current is not None:
                state.closed.append(state.current)
            state.current = ChapterDraft(
                title=token.text,
                level=token.depth or 1,
                start_position=token.position,
                end_position=token.position + len(token.raw),
            )
            if state.phase is BuilderPhase.NO_CHAPTER:
                logger.debug("First chapter %r at offset %d", token.text, token.position)
            state.phase = BuilderPhase.IN_CHAPTER
            return state

        if state.current is not None and token.type not in _INLINE_TYPES:
            state.current.end_position = max(
                state.current.end_position, token.position + len(token.raw)
            )

        # 2. Content block: add a paragraph
        paragraph_type = TOKEN_TYPE_TO_PARAGRAPH.get(token.type)
        if paragraph_type is None:
            return state

        target = state.current.paragraphs if state.current is not None else state.preamble
        state.paragraph_count += 1
        target.append(
            make_paragraph(
                token,
                paragraph_type,
                paragraph_id=f"paragraph-{state.paragraph_count}",
                position=len(target),
                config=self.config,
            )
        )
        return state

    def finish(self, state: BuilderState) -> BuildOutput:
        """Flush the open chapter and compute aggregates."""
        drafts = list(state.closed)
        if state.current is not None:
            drafts.append(state.current)
        state.closed, state.current = drafts, None
        state.phase = BuilderPhase.DONE
        return BuildOutput(
            chapters=tuple(finalize_chapter(d, i) for i, d in enumerate(drafts)),
            preamble=tuple(state.preamble),
        )

    def build(self, tokens: Iterable[Token]) -> BuildOutput:
        """Run the builder over a token sequence."""
        state = reduce(self.step, tokens, BuilderState())
        output = self.finish(state)
        logger.debug(
            "Built %d chapters and %d preamble paragraphs",
            len(output.chapters),
            len(output.preamble),
        )
        return output


def build_chapters(tokens: Iterable[Token], config: ParserConfig | None = None) -> BuildOutput:
    """Convenience wrapper around ChapterBuilder.build()."""
    return ChapterBuilder(config).build(tokens)
