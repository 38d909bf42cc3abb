"""Markdown reading module.

Tokenizing is delegated to markdown-it-py; see tokenizer.py.
"""

from ttsdoc.readers.tokenizer import (
    MarkupIssue,
    Token,
    decode_input,
    find_markup_issues,
    mask_front_matter,
    repair_markdown,
    tokenize,
)

__all__ = [
    # Classes
    "Token",
    "MarkupIssue",
    # Functions
    "tokenize",
    "decode_input",
    "find_markup_issues",
    "repair_markdown",
    "mask_front_matter",
]
