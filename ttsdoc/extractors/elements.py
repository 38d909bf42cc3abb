"""Structural element extraction.

One independent pass over the tokens, collecting code blocks, tables,
lists, block quotes, links and images with their attributes.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ttsdoc.models import MarkdownElement
from ttsdoc.readers.tokenizer import Token

ELEMENT_TYPES = ("code", "table", "list", "blockquote", "link", "image")


def _attributes(token: Token) -> dict[str, Any]:
    if token.type == "code":
        return {"language": token.lang or "text"}
    if token.type == "table":
        return {
            "headers": list(token.header),
            "rows": [list(row) for row in token.rows],
            "has_header": bool(token.header),
            "row_count": len(token.rows),
            "column_count": len(token.header) if token.header else max(
                (len(row) for row in token.rows), default=0
            ),
        }
    if token.type == "list":
        return {
            "ordered": bool(token.ordered),
            "items": list(token.items),
            "item_count": len(token.items),
        }
    if token.type == "link":
        return {"url": token.href, "text": token.text, "title": token.title}
    if token.type == "image":
        return {"src": token.href, "alt": token.text, "title": token.title}
    return {}


def extract_elements(tokens: Iterable[Token]) -> list[MarkdownElement]:
    """Collect structural elements in document order."""
    return [
        MarkdownElement(
            type=token.type,
            raw=token.raw,
            content=token.text,
            position=token.position,
            attributes=_attributes(token),
        )
        for token in tokens
        if token.type in ELEMENT_TYPES
    ]
