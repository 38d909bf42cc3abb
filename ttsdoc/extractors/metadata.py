"""
Document metadata extraction.

Sources, in order of precedence:
1. A leading YAML front matter block (``---`` ... ``---``)
2. ``Key: value`` lines near the top of the document (Author, Date, ...)
3. The first level-1 heading, for the title

The key-line scan stops as soon as real content starts (two plain lines
in a row) or after MAX_METADATA_LINES non-blank lines.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from collections.abc import Iterable
from types import MappingProxyType
from typing import Any

import yaml

from ttsdoc.models import UNTITLED_DOCUMENT, DocumentMetadata
from ttsdoc.readers.tokenizer import Token, find_front_matter, mask_front_matter
from ttsdoc.segmentation import count_words

logger = logging.getLogger(__name__)

MAX_METADATA_LINES = 20

KEY_LINE_RE = re.compile(
    r"^(author|by|date|created|modified|updated|language|lang):[ \t]*(\S.*)$",
    re.IGNORECASE,
)

FIELD_FOR_KEY: MappingProxyType[str, str] = MappingProxyType(
    {
        "author": "author",
        "by": "author",
        "date": "created_date",
        "created": "created_date",
        "modified": "modified_date",
        "updated": "modified_date",
        "language": "language",
        "lang": "language",
    }
)

# Lines starting like this are markup, not prose
FORMATTING_PREFIXES = ("#", "```", "|", "-", "*")


def _plain(value: Any) -> Any:
    """Make YAML values JSON-friendly (dates become ISO strings)."""
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def _parse_front_matter(content: str) -> tuple[dict[str, Any] | None, str | None]:
    """Parsed front matter mapping, or None when there is no usable block."""
    match = find_front_matter(content)
    if match is None:
        return None, None
    try:
        data = yaml.safe_load(match.group("body"))
    except yaml.YAMLError as e:
        return None, f"Invalid YAML front matter: {e}"
    if data is None:
        return None, None
    if not isinstance(data, dict):
        return None, "Front matter must be a mapping"
    return _plain(data), None


def load_front_matter(content: str) -> tuple[dict[str, Any], str | None]:
    """
    Parse leading YAML front matter.

    Args:
        content: Document text

    Returns:
        (data, problem): the parsed mapping (empty if absent or invalid) and
        a description of why it could not be used, or None
    """
    data, problem = _parse_front_matter(content)
    return data or {}, problem


def strip_front_matter(content: str) -> str:
    """
    Blank out front matter before tokenizing.

    Only a block that parses to a mapping is front matter. Anything else
    between two leading ``---`` lines (thematic breaks around ordinary
    Markdown, broken YAML) is left in the text.
    """
    data, _ = _parse_front_matter(content)
    return content if data is None else mask_front_matter(content)


def scan_key_lines(content: str) -> dict[str, str]:
    """Collect ``Key: value`` metadata lines from the top of the document."""
    found: dict[str, str] = {}
    plain_run = 0
    seen = 0
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        seen += 1
        if seen > MAX_METADATA_LINES:
            break

        match = KEY_LINE_RE.match(stripped)
        if match:
            found.setdefault(FIELD_FOR_KEY[match.group(1).lower()], match.group(2).strip())
            plain_run = 0
            continue
        if stripped.startswith(FORMATTING_PREFIXES):
            plain_run = 0
            continue

        plain_run += 1
        if plain_run >= 2:
            break
    return found


def _first_title(tokens: Iterable[Token]) -> str | None:
    for token in tokens:
        if token.type == "heading" and token.depth == 1 and token.text:
            return token.text
    return None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def extract_metadata(
    content: str,
    tokens: Iterable[Token],
    front_matter: dict[str, Any] | None = None,
) -> DocumentMetadata:
    """
    Extract document metadata.

    Args:
        content: Original document text (counts are taken from it)
        tokens: Tokens of the document
        front_matter: Already-parsed front matter; loaded from content if None

    Returns:
        DocumentMetadata with title, author, dates, language and counts
    """
    if front_matter is None:
        front_matter, problem = load_front_matter(content)
        if problem:
            logger.warning(problem)

    custom = dict(front_matter)
    known: dict[str, Any] = {}
    for key in ("title", *FIELD_FOR_KEY):
        if key in custom:
            value = custom.pop(key)
            target = FIELD_FOR_KEY.get(key, key)
            known.setdefault(target, _as_text(value))

    for target, value in scan_key_lines(strip_front_matter(content)).items():
        known.setdefault(target, value)

    title = _first_title(tokens) or known.get("title") or UNTITLED_DOCUMENT

    return DocumentMetadata(
        title=title,
        author=known.get("author"),
        created_date=known.get("created_date"),
        modified_date=known.get("modified_date"),
        language=known.get("language"),
        word_count=count_words(content),
        character_count=len(content),
        custom_metadata=custom,
    )


def extract_basic_metadata(content: str) -> DocumentMetadata:
    """Cheap metadata for streaming: first-line title and counts only."""
    first_line = content.lstrip().split("\n", 1)[0] if content.strip() else ""
    title = first_line[2:].strip() if first_line.startswith("# ") else ""
    return DocumentMetadata(
        title=title or UNTITLED_DOCUMENT,
        word_count=count_words(content),
        character_count=len(content),
    )
