"""Tests for the markdown-it-py tokenizer adapter."""

import pytest

from ttsdoc.exceptions import ErrorCode, MarkdownParseError
from ttsdoc.readers.tokenizer import (
    decode_input,
    find_markup_issues,
    mask_front_matter,
    repair_markdown,
    tokenize,
)


def types(tokens):
    return [t.type for t in tokens]


class TestTokenize:
    """Test block tokens produced from Markdown."""

    def test_heading_and_paragraph(self):
        tokens = tokenize("# Title\n\nHello world.")
        assert types(tokens) == ["heading", "paragraph"]
        assert tokens[0].depth == 1
        assert tokens[0].text == "Title"
        assert tokens[1].text == "Hello world."

    def test_heading_text_drops_inline_markup(self):
        tokens = tokenize("## The *Big* Day")
        assert tokens[0].text == "The Big Day"
        assert tokens[0].depth == 2

    def test_positions_and_lines(self):
        content = "# A\n\nSecond block."
        tokens = tokenize(content)
        assert tokens[1].position == content.index("Second")
        assert tokens[1].line == 3
        assert tokens[1].raw == "Second block."

    def test_paragraph_keeps_inline_markup(self):
        tokens = tokenize("Some **bold** text.")
        assert tokens[0].text == "Some **bold** text."

    def test_fenced_code(self):
        tokens = tokenize("```python\nprint(1)\n```\n")
        assert types(tokens) == ["code"]
        assert tokens[0].lang == "python"
        assert tokens[0].text == "print(1)\n"

    def test_indented_code_has_no_language(self):
        tokens = tokenize("    x = 1\n")
        assert tokens[0].type == "code"
        assert tokens[0].lang is None

    def test_table(self):
        tokens = tokenize("| a | b |\n|---|---|\n| 1 | 2 |\n| 3 | 4 |\n")
        assert types(tokens) == ["table"]
        assert tokens[0].header == ("a", "b")
        assert tokens[0].rows == (("1", "2"), ("3", "4"))

    def test_bullet_list(self):
        tokens = tokenize("- one\n- two\n")
        assert types(tokens) == ["list"]
        assert tokens[0].ordered is False
        assert tokens[0].items == ("one", "two")
        assert tokens[0].text == "one\ntwo"

    def test_ordered_list(self):
        tokens = tokenize("1. first\n2. second\n")
        assert tokens[0].ordered is True
        assert tokens[0].items == ("first", "second")

    def test_nested_list_items_not_repeated(self):
        tokens = tokenize("- a\n  - b\n- c\n")
        assert tokens[0].items == ("a", "c")

    def test_list_item_text_is_plain(self):
        tokens = tokenize("- use `pip` and **uv**\n")
        assert tokens[0].items == ("use pip and uv",)

    def test_blockquote(self):
        tokens = tokenize("> Quoted line.\n")
        assert types(tokens) == ["blockquote"]
        assert tokens[0].text == "Quoted line."

    def test_hr_and_html(self):
        tokens = tokenize("---\n\n<div>x</div>\n")
        assert types(tokens) == ["hr", "html"]

    def test_link_follows_its_block(self):
        tokens = tokenize('See [the docs](https://example.com "Docs") now.\n\nNext.')
        assert types(tokens) == ["paragraph", "link", "paragraph"]
        link = tokens[1]
        assert link.href == "https://example.com"
        assert link.text == "the docs"
        assert link.title == "Docs"

    def test_image(self):
        tokens = tokenize("![A diagram](img/d.png)")
        assert types(tokens) == ["paragraph", "image"]
        assert tokens[1].href == "img/d.png"
        assert tokens[1].text == "A diagram"

    def test_empty_input(self):
        assert tokenize("") == []

    def test_bytes_input(self):
        tokens = tokenize("# Café".encode())
        assert tokens[0].text == "Café"

    def test_deterministic(self):
        content = "# T\n\n## A\n\nText.\n\n- x\n- y\n"
        assert tokenize(content) == tokenize(content)


class TestNesting:
    """Test the nesting depth limit."""

    def test_within_limit(self):
        tokens = tokenize("> > quoted\n", max_nesting_depth=2)
        assert tokens[0].type == "blockquote"

    def test_too_deep(self):
        with pytest.raises(MarkdownParseError) as exc_info:
            tokenize("> > > > deep\n", max_nesting_depth=3)
        assert exc_info.value.code is ErrorCode.NESTING_TOO_DEEP
        assert exc_info.value.location.line == 1

    def test_nested_lists_count(self):
        content = "- a\n  - b\n    - c\n"
        with pytest.raises(MarkdownParseError):
            tokenize(content, max_nesting_depth=2)
        assert tokenize(content, max_nesting_depth=3)


class TestDecodeInput:
    """Test input decoding."""

    def test_str_passthrough(self):
        assert decode_input("abc") == "abc"

    def test_utf8_bytes(self):
        assert decode_input("über".encode()) == "über"

    def test_invalid_bytes(self):
        with pytest.raises(MarkdownParseError) as exc_info:
            decode_input(b"\xff\xfe\xfa")
        assert exc_info.value.code is ErrorCode.ENCODING_ERROR

    def test_wrong_type(self):
        with pytest.raises(MarkdownParseError) as exc_info:
            decode_input(42)
        assert exc_info.value.code is ErrorCode.INVALID_INPUT


class TestMarkupScreening:
    """Test detection and repair of markup problems."""

    def test_clean_document(self):
        assert find_markup_issues("# Title\n\nText.\n") == []

    def test_closed_fence_with_comment_lines(self):
        content = "```bash\n# install\npip install x\n```\n"
        assert find_markup_issues(content) == []

    def test_unclosed_fence_at_end(self):
        issues = find_markup_issues("Intro.\n\n```\ncode\n")
        assert len(issues) == 1
        assert issues[0].code is ErrorCode.UNCLOSED_CODE_BLOCK
        assert issues[0].line == 3

    def test_unclosed_fence_into_heading(self):
        issues = find_markup_issues("```py\nx = 1\n## Next\ntext\n")
        assert [i.code for i in issues] == [ErrorCode.UNCLOSED_CODE_BLOCK]
        assert "line 3" in issues[0].message

    def test_malformed_heading(self):
        issues = find_markup_issues("#Title\n\nText.\n")
        assert [i.code for i in issues] == [ErrorCode.MALFORMED_HEADER]
        assert issues[0].to_error().code is ErrorCode.MALFORMED_HEADER

    def test_shebang_not_malformed(self):
        assert find_markup_issues("#!/bin/sh\n") == []

    def test_repair_at_end(self):
        assert repair_markdown("```\ncode") == "```\ncode\n```\n"

    def test_repair_before_heading(self):
        repaired = repair_markdown("```\nx\n## Next\nbody\n")
        assert repaired == "```\nx\n```\n## Next\nbody\n"
        assert find_markup_issues(repaired) == []

    def test_repair_keeps_tilde_marker(self):
        assert repair_markdown("~~~~\ncode\n").endswith("~~~~\n")

    def test_repair_leaves_clean_text_alone(self):
        content = "```\na\n```\n\n## B\n"
        assert repair_markdown(content) == content


class TestFrontMatterMask:
    """Test front matter masking."""

    def test_mask_preserves_offsets(self):
        content = "---\ntitle: X\n---\n# Real\n"
        masked = mask_front_matter(content)
        assert len(masked) == len(content)
        assert masked.count("\n") == content.count("\n")
        assert masked.endswith("# Real\n")
        assert "title" not in masked

    def test_front_matter_not_tokenized(self):
        tokens = tokenize(mask_front_matter("---\nauthor: X\n---\n\nBody.\n"))
        assert types(tokens) == ["paragraph"]

    def test_no_front_matter(self):
        assert mask_front_matter("# T\n") == "# T\n"
