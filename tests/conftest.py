"""
Pytest configuration and fixtures for ttsdoc tests.
"""

from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def default_config():
    """Return a default ParserConfig."""
    from ttsdoc import ParserConfig

    return ParserConfig()


@pytest.fixture
def two_chapter_markdown() -> str:
    """A small document with two H2 chapters."""
    return (
        "# Guide\n"
        "\n"
        "## Chapter One\n"
        "\n"
        "The first chapter starts here. It has two sentences.\n"
        "\n"
        "A second paragraph follows.\n"
        "\n"
        "## Chapter Two\n"
        "\n"
        "Another chapter with some words in it.\n"
    )
