"""Tests for structural element extraction."""

from ttsdoc.extractors.elements import extract_elements
from ttsdoc.readers.tokenizer import tokenize


def elements_of(content):
    return extract_elements(tokenize(content))


class TestExtractElements:
    """Test element types and attributes."""

    def test_code_language(self):
        (element,) = elements_of("```rust\nfn main() {}\n```\n")
        assert element.type == "code"
        assert element.attributes == {"language": "rust"}
        assert element.content == "fn main() {}\n"

    def test_code_without_language(self):
        (element,) = elements_of("```\nplain\n```\n")
        assert element.attributes["language"] == "text"

    def test_table(self):
        (element,) = elements_of("| a | b | c |\n|---|---|---|\n| 1 | 2 | 3 |\n")
        assert element.type == "table"
        assert element.attributes["headers"] == ["a", "b", "c"]
        assert element.attributes["rows"] == [["1", "2", "3"]]
        assert element.attributes["row_count"] == 1
        assert element.attributes["column_count"] == 3
        assert element.attributes["has_header"] is True

    def test_list(self):
        (element,) = elements_of("1. alpha\n2. *beta*\n")
        assert element.type == "list"
        assert element.attributes == {
            "ordered": True,
            "items": ["alpha", "beta"],
            "item_count": 2,
        }

    def test_blockquote(self):
        (element,) = elements_of("> Wise words.\n")
        assert element.type == "blockquote"
        assert element.content == "Wise words."

    def test_link_and_image(self):
        elements = elements_of('A [site](https://x.org "X") and ![pic](p.png "P").')
        assert [e.type for e in elements] == ["link", "image"]
        assert elements[0].attributes == {"url": "https://x.org", "text": "site", "title": "X"}
        assert elements[1].attributes == {"src": "p.png", "alt": "pic", "title": "P"}

    def test_paragraphs_and_headings_are_not_elements(self):
        assert elements_of("# T\n\nJust text.\n") == []

    def test_document_order(self, fixtures_dir):
        content = (fixtures_dir / "api_notes.md").read_text(encoding="utf-8")
        elements = elements_of(content)
        assert [e.type for e in elements] == ["code", "link", "table", "list", "image"]
        positions = [e.position for e in elements]
        assert positions == sorted(positions)
