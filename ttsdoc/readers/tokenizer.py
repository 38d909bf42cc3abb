"""
Markdown tokenizer built on markdown-it-py.

Turns Markdown text into a flat list of block-level Tokens (heading,
paragraph, code, table, list, blockquote, hr, html) in document order.
Links and images found inside a block are emitted as separate tokens
right after that block.

This module also screens the raw text for markup problems the tokenizer
silently tolerates (unclosed code fences, ``#Heading`` without a space)
so the parser can apply its error handling strategy before tokenizing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from markdown_it import MarkdownIt
from markdown_it.token import Token as MdToken

from ttsdoc.exceptions import ErrorCode, ErrorLocation, MarkdownParseError

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
HEADING_RE = re.compile(r"^ {0,3}#{1,6}(?:[ \t]|$)")
MALFORMED_HEADING_RE = re.compile(r"^#{1,6}[^\s#!]")
FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?P<body>.*?)^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)", re.S | re.M
)

_CONTAINER_OPEN = frozenset({"bullet_list_open", "ordered_list_open", "blockquote_open"})
_CONTAINER_CLOSE = frozenset({"bullet_list_close", "ordered_list_close", "blockquote_close"})


@dataclass(frozen=True)
class Token:
    """A block-level piece of Markdown.

    Attributes:
        type: "heading", "paragraph", "code", "table", "list", "blockquote",
            "hr", "html", "link" or "image".
        text: Text content (inline markup kept for paragraphs).
        raw: Source text the token was built from.
        position: Character offset of the token in the source.
        line: 1-based source line.
    """

    type: str
    text: str
    raw: str
    position: int
    line: int
    depth: int | None = None  # headings
    lang: str | None = None  # code
    ordered: bool | None = None  # lists
    items: tuple[str, ...] = ()  # lists
    header: tuple[str, ...] = ()  # tables
    rows: tuple[tuple[str, ...], ...] = ()  # tables
    href: str | None = None  # links and images
    title: str | None = None  # links and images


@dataclass(frozen=True)
class MarkupIssue:
    """A markup problem found before tokenizing."""

    code: ErrorCode
    line: int
    message: str

    def to_error(self) -> MarkdownParseError:
        location = ErrorLocation(line=self.line, column=1)
        if self.code is ErrorCode.UNCLOSED_CODE_BLOCK:
            return MarkdownParseError.unclosed_code_block(location)
        return MarkdownParseError.malformed_header(location)


def decode_input(data: str | bytes) -> str:
    """Return input as text, decoding bytes as UTF-8.

    Raises:
        MarkdownParseError: ENCODING_ERROR if bytes are not valid UTF-8,
            INVALID_INPUT if the input is neither str nor bytes.
    """
    if isinstance(data, str):
        return data
    if isinstance(data, (bytes, bytearray)):
        try:
            return bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MarkdownParseError.encoding_error(str(e)) from e
    raise MarkdownParseError.invalid_input(
        f"Expected str or bytes, got {type(data).__name__}"
    )


# ─────────────────────────────────────────────────────────────
# Pre-tokenization screening
# ─────────────────────────────────────────────────────────────


def find_front_matter(content: str) -> re.Match[str] | None:
    """Match a leading ``---`` YAML front matter block, if any."""
    return FRONT_MATTER_RE.match(content)


def mask_front_matter(content: str) -> str:
    """Blank out front matter so it is not tokenized.

    Every character except newlines is replaced by a space, so offsets
    and line numbers of the remaining content are unchanged.
    """
    match = find_front_matter(content)
    if match is None:
        return content
    blanked = re.sub(r"[^\r\n]", " ", match.group(0))
    return blanked + content[match.end() :]


def _unclosed_fence(lines: list[str], start: int = 0) -> tuple[int, str] | None:
    """Find a fence that is never closed.

    Returns (line index, fence marker) or None.
    """
    open_at: tuple[int, str] | None = None
    for i in range(start, len(lines)):
        match = FENCE_RE.match(lines[i].rstrip("\r\n"))
        if match is None:
            continue
        marker, rest = match.group(1), match.group(2)
        if open_at is None:
            open_at = (i, marker)
        elif marker[0] == open_at[1][0] and len(marker) >= len(open_at[1]) and not rest.strip():
            open_at = None
    return open_at


def _first_heading(lines: list[str], start: int) -> int | None:
    for i in range(start, len(lines)):
        if HEADING_RE.match(lines[i]):
            return i
    return None


def find_markup_issues(content: str) -> list[MarkupIssue]:
    """Report unclosed code fences and headings missing their space.

    A fence that is closed later is never reported, even when it contains
    lines that look like headings (shell or Python comments).
    """
    lines = content.splitlines(keepends=True)
    issues: list[MarkupIssue] = []

    in_fence = False
    for i, line in enumerate(lines):
        if FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if not in_fence and MALFORMED_HEADING_RE.match(line):
            issues.append(
                MarkupIssue(
                    ErrorCode.MALFORMED_HEADER,
                    i + 1,
                    f"Line {i + 1}: heading marker without a space",
                )
            )

    start = 0
    while (unclosed := _unclosed_fence(lines, start)) is not None:
        fence_line, _ = unclosed
        heading = _first_heading(lines, fence_line + 1)
        if heading is None:
            issues.append(
                MarkupIssue(
                    ErrorCode.UNCLOSED_CODE_BLOCK,
                    fence_line + 1,
                    f"Line {fence_line + 1}: code block is never closed",
                )
            )
            break
        issues.append(
            MarkupIssue(
                ErrorCode.UNCLOSED_CODE_BLOCK,
                fence_line + 1,
                f"Line {fence_line + 1}: code block runs into the heading on line {heading + 1}",
            )
        )
        start = heading

    issues.sort(key=lambda issue: issue.line)
    return issues


def repair_markdown(content: str) -> str:
    """Close unclosed code fences.

    A fence left open is closed right before the first heading inside it,
    or at the end of the input when no heading follows.
    """
    lines = content.splitlines(keepends=True)
    start = 0
    while (unclosed := _unclosed_fence(lines, start)) is not None:
        fence_line, marker = unclosed
        closing = marker[0] * len(marker)
        heading = _first_heading(lines, fence_line + 1)
        if heading is None:
            if lines and not lines[-1].endswith("\n"):
                lines[-1] += "\n"
            lines.append(closing + "\n")
            logger.debug("Closed code fence from line %d at end of input", fence_line + 1)
            break
        lines.insert(heading, closing + "\n")
        logger.debug("Closed code fence from line %d before line %d", fence_line + 1, heading + 1)
        start = heading + 1
    return "".join(lines)


# ─────────────────────────────────────────────────────────────
# Tokenizing
# ─────────────────────────────────────────────────────────────


def _make_markdown(max_nesting_depth: int) -> MarkdownIt:
    # markdown-it counts every open token (list item, paragraph) towards its
    # own limit, so keep it well above the container limit we enforce.
    md = MarkdownIt("commonmark", {"maxNesting": max(100, max_nesting_depth * 4 + 20)})
    return md.enable(["table", "strikethrough"])


def _plain_text(children: list[MdToken] | None) -> str:
    """Text of inline children: text, emphasis, inline code and link labels."""
    parts = []
    for child in children or ():
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
    return "".join(parts)


def _find_close(tokens: list[MdToken], start: int) -> int:
    """Index of the token closing the block opened at ``start``."""
    level = tokens[start].level
    for j in range(start + 1, len(tokens)):
        if tokens[j].nesting == -1 and tokens[j].level == level:
            return j
    return len(tokens) - 1


def _inline_links(inline: MdToken, position: int, line: int) -> list[Token]:
    """Link and image tokens found in an inline token's children."""
    found: list[Token] = []
    children = inline.children or []
    i = 0
    while i < len(children):
        child = children[i]
        if child.type == "link_open":
            j = i + 1
            while j < len(children) and children[j].type != "link_close":
                j += 1
            label = _plain_text(children[i + 1 : j])
            href = str(child.attrGet("href") or "")
            title = child.attrGet("title")
            found.append(
                Token(
                    type="link",
                    text=label,
                    raw=f"[{label}]({href})",
                    position=position,
                    line=line,
                    href=href,
                    title=str(title) if title else None,
                )
            )
            i = j
        elif child.type == "image":
            src = str(child.attrGet("src") or "")
            title = child.attrGet("title")
            found.append(
                Token(
                    type="image",
                    text=child.content,
                    raw=f"![{child.content}]({src})",
                    position=position,
                    line=line,
                    href=src,
                    title=str(title) if title else None,
                )
            )
        i += 1
    return found


def _list_items(tokens: list[MdToken], start: int, end: int) -> tuple[str, ...]:
    """Direct item texts of the list spanning tokens[start:end]."""
    item_level = tokens[start].level + 1
    items: list[str] = []
    current: list[str] | None = None
    nested = 0
    for tok in tokens[start + 1 : end]:
        if tok.type == "list_item_open" and tok.level == item_level:
            current = []
        elif tok.type == "list_item_close" and tok.level == item_level:
            items.append(" ".join(p for p in current or [] if p))
            current = None
        elif tok.type in ("bullet_list_open", "ordered_list_open"):
            nested += 1
        elif tok.type in ("bullet_list_close", "ordered_list_close"):
            nested -= 1
        elif tok.type == "inline" and current is not None and nested == 0:
            current.append(_plain_text(tok.children))
    return tuple(items)


def _table_cells(tokens: list[MdToken], start: int, end: int):
    header: list[str] = []
    rows: list[tuple[str, ...]] = []
    row: list[str] = []
    in_head = False
    for tok in tokens[start + 1 : end]:
        if tok.type == "thead_open":
            in_head = True
        elif tok.type == "thead_close":
            in_head = False
        elif tok.type == "tr_open":
            row = []
        elif tok.type == "inline":
            row.append(tok.content.strip())
        elif tok.type == "tr_close":
            if in_head:
                header = row
            else:
                rows.append(tuple(row))
    return tuple(header), tuple(rows)


class _Source:
    """Maps markdown-it line ranges back to character offsets."""

    def __init__(self, content: str):
        self.content = content
        self.offsets = [0]
        for line in content.splitlines(keepends=True):
            self.offsets.append(self.offsets[-1] + len(line))

    def span(self, line_map: list[int] | None) -> tuple[int, int, int]:
        """(start offset, end offset, 1-based line) of a line range."""
        if not line_map:
            return 0, 0, 1
        first = min(line_map[0], len(self.offsets) - 1)
        last = min(line_map[1], len(self.offsets) - 1)
        return self.offsets[first], self.offsets[last], first + 1


def _check_nesting(tokens: list[MdToken], source: _Source, limit: int) -> None:
    depth = 0
    for tok in tokens:
        if tok.type in _CONTAINER_OPEN:
            depth += 1
            if depth > limit:
                _, _, line = source.span(tok.map)
                raise MarkdownParseError.nesting_too_deep(
                    depth, limit, ErrorLocation(line=line, column=1)
                )
        elif tok.type in _CONTAINER_CLOSE:
            depth -= 1


def tokenize(content: str | bytes, *, max_nesting_depth: int = 10) -> list[Token]:
    """
    Tokenize Markdown into block-level tokens.

    Args:
        content: Markdown text, or UTF-8 bytes
        max_nesting_depth: Maximum depth of nested lists and block quotes

    Returns:
        Tokens in document order

    Raises:
        MarkdownParseError: ENCODING_ERROR, NESTING_TOO_DEEP, or
            INVALID_SYNTAX when markdown-it rejects the input
    """
    text = decode_input(content)
    source = _Source(text)
    md = _make_markdown(max_nesting_depth)
    try:
        md_tokens = md.parse(text)
    except (ValueError, IndexError, RecursionError) as e:
        raise MarkdownParseError.invalid_syntax(str(e)) from e

    _check_nesting(md_tokens, source, max_nesting_depth)

    tokens: list[Token] = []
    i = 0
    while i < len(md_tokens):
        tok = md_tokens[i]
        if tok.level != 0 or tok.nesting == -1:
            i += 1
            continue

        end = _find_close(md_tokens, i) if tok.nesting == 1 else i
        start_offset, end_offset, line = source.span(tok.map)
        raw = text[start_offset:end_offset]
        inlines = [t for t in md_tokens[i : end + 1] if t.type == "inline"]

        block: Token | None = None
        if tok.type == "heading_open":
            title = _plain_text(inlines[0].children) if inlines else ""
            block = Token("heading", title.strip(), raw, start_offset, line, depth=int(tok.tag[1:]))
        elif tok.type == "paragraph_open":
            block = Token("paragraph", inlines[0].content if inlines else "", raw, start_offset, line)
        elif tok.type in ("fence", "code_block"):
            lang = tok.info.strip().split()[0] if tok.info.strip() else None
            block = Token("code", tok.content, raw, start_offset, line, lang=lang)
        elif tok.type == "table_open":
            header, rows = _table_cells(md_tokens, i, end)
            block = Token("table", raw.strip(), raw, start_offset, line, header=header, rows=rows)
        elif tok.type in ("bullet_list_open", "ordered_list_open"):
            items = _list_items(md_tokens, i, end)
            block = Token(
                "list",
                "\n".join(items),
                raw,
                start_offset,
                line,
                ordered=tok.type == "ordered_list_open",
                items=items,
            )
        elif tok.type == "blockquote_open":
            quoted = "\n".join(t.content for t in inlines)
            block = Token("blockquote", quoted, raw, start_offset, line)
        elif tok.type == "hr":
            block = Token("hr", "", raw, start_offset, line)
        elif tok.type == "html_block":
            block = Token("html", tok.content, raw, start_offset, line)
        else:
            logger.debug("Skipping unhandled block token %s", tok.type)

        if block is not None:
            tokens.append(block)
        for inline in inlines:
            tokens.extend(_inline_links(inline, start_offset, line))
        i = end + 1

    return tokens
