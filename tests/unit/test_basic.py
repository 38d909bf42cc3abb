"""
Basic tests for ttsdoc package.
"""

import ttsdoc


def test_version():
    """Package has a version string."""
    assert ttsdoc.__version__ == "0.1.0"


def test_public_api_exports():
    """Every name in __all__ is importable from the package."""
    for name in ttsdoc.__all__:
        assert hasattr(ttsdoc, name), name


def test_supported_formats():
    """Only Markdown is parsed directly."""
    assert ttsdoc.supported_formats() == ["markdown"]


def test_parse_markdown_smoke():
    """The main entry point returns a ParseResult."""
    result = ttsdoc.parse_markdown("## Intro\n\nHello there. How are you today?")
    assert isinstance(result, ttsdoc.ParseResult)
    assert result.success
    assert result.structure.chapters[0].title == "Intro"
