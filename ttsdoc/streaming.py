"""
Streaming delivery of parsed documents.

A DocumentStream yields DocumentChunks lazily: a metadata chunk first,
then one chunk per chapter, then a completion chunk at 100% progress.
Documents without chapters are streamed as windows of at most
LINES_PER_CHUNK lines (and at most ``max_chunk_size`` characters).

Note: chapter chunks come from one full parse performed when the first
chapter chunk is requested, so peak memory still scales with the
document. Only the line-window fallback is built incrementally.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from ttsdoc.builder import minimal_structure, run_pipeline
from ttsdoc.config import ParserConfig
from ttsdoc.exceptions import MarkdownParseError
from ttsdoc.extractors.chapters import make_paragraph
from ttsdoc.extractors.metadata import extract_basic_metadata
from ttsdoc.models import Chapter, ChunkType, DocumentChunk, DocumentStructure, ParagraphType
from ttsdoc.readers.tokenizer import Token

logger = logging.getLogger(__name__)

LINES_PER_CHUNK = 100
MAX_PARTIAL_PROGRESS = 99.0


def _windows(
    content: str, max_lines: int, max_chars: int
) -> Iterator[tuple[int, int, int, str]]:
    """Yield (start line, end line, start offset, text) windows over the content."""
    lines = content.splitlines(keepends=True)
    buffer: list[str] = []
    size = 0
    start = 0
    start_offset = 0
    offset = 0
    for index, line in enumerate(lines):
        body = line.rstrip("\r\n")
        # Over-long single lines are split so no window exceeds max_chars
        pieces = [body[i : i + max_chars] for i in range(0, len(body), max_chars)] or [""]
        for piece in pieces:
            if buffer and (len(buffer) >= max_lines or size + len(piece) + 1 > max_chars):
                yield start, index, start_offset, "\n".join(buffer)
                buffer, size, start, start_offset = [], 0, index, offset
            buffer.append(piece)
            size += len(piece) + 1
            offset += len(piece)
        offset += len(line) - len(body)
    if buffer:
        yield start, len(lines), start_offset, "\n".join(buffer)


class DocumentStream:
    """
    Lazily yields chunks of a parsed document.

    Iterate the stream (or call chunks()) to pull chunks; stop iterating
    to cancel.

    Example:
        >>> stream = parser.create_stream(text)
        >>> for chunk in stream:
        ...     print(chunk.type, f"{chunk.progress:.0f}%")
    """

    def __init__(self, content: str, config: ParserConfig | None = None):
        self.content = content
        self.config = config or ParserConfig()

    def __iter__(self) -> Iterator[DocumentChunk]:
        return self.chunks()

    def _chapters(self) -> tuple[Chapter, ...]:
        try:
            return run_pipeline(self.content, self.config).chapters
        except MarkdownParseError as e:
            logger.warning("Streaming without chapters: %s", e)
            return ()

    def _line_chunks(self) -> Iterator[DocumentChunk]:
        total_lines = max(len(self.content.splitlines()), 1)
        for number, (start, end, offset, text) in enumerate(
            _windows(self.content, LINES_PER_CHUNK, self.config.max_chunk_size), start=1
        ):
            if not text.strip():
                continue
            token = Token(type="paragraph", text=text, raw=text, position=offset, line=start + 1)
            paragraph = make_paragraph(
                token, ParagraphType.TEXT, f"chunk-{number}", number - 1, self.config
            )
            yield DocumentChunk(
                id=f"chunk-{number}",
                type=ChunkType.PARAGRAPHS,
                position=start,
                progress=min(end / total_lines * 100, MAX_PARTIAL_PROGRESS),
                paragraphs=(paragraph,),
            )

    def chunks(self) -> Iterator[DocumentChunk]:
        """Yield metadata, chapter (or line-window) and completion chunks."""
        yield DocumentChunk(
            id="metadata-0",
            type=ChunkType.METADATA,
            position=0,
            progress=0.0,
            metadata=extract_basic_metadata(self.content),
        )

        chapters = self._chapters()
        for i, chapter in enumerate(chapters):
            yield DocumentChunk(
                id=f"chapter-{i + 1}",
                type=ChunkType.CHAPTER,
                position=i,
                progress=(i + 1) / (len(chapters) + 1) * 100,
                chapter=chapter,
            )
        if not chapters:
            yield from self._line_chunks()

        yield DocumentChunk(
            id="complete",
            type=ChunkType.COMPLETE,
            position=len(self.content),
            progress=100.0,
        )

    def get_structure(self) -> DocumentStructure:
        """Parse the whole document, falling back to a minimal structure."""
        try:
            return run_pipeline(self.content, self.config)
        except MarkdownParseError as e:
            logger.warning("Falling back to a minimal structure: %s", e)
            return minimal_structure(self.content)
