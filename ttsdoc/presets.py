"""Parser presets for common kinds of Markdown documents.

A preset names a set of overrides on top of the default ParserConfig:
which block types are voiced, which heading levels open chapters, how
strict the confidence gate is and how markup problems are handled.

Use ``ParserConfig.from_preset("technical")`` to build a config from one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ErrorStrategy = Literal["strict", "recover", "lenient"]


@dataclass(frozen=True)
class ParserPreset:
    """Named configuration overrides for one document style.

    Attributes:
        name: Preset identifier (e.g., "technical", "blog").
        description: Human-readable description.
        include_code_blocks: Whether code blocks are read aloud.
        include_tables: Whether tables are read aloud.
        include_blockquotes: Whether block quotes are read aloud.
        chapter_header_levels: Heading depths that open a chapter.
        confidence_threshold: Minimum structure confidence to accept a parse.
        error_handling_strategy: How markup problems are handled.
        max_sentence_length: Sentences longer than this are validation errors.
    """

    name: str
    description: str
    include_code_blocks: bool = False
    include_tables: bool = False
    include_blockquotes: bool = True
    chapter_header_levels: tuple[int, ...] = (2,)
    confidence_threshold: float = 0.8
    error_handling_strategy: ErrorStrategy = "recover"
    max_sentence_length: int = 500

    def overrides(self) -> dict[str, object]:
        """Config field values this preset sets."""
        return {
            "include_code_blocks": self.include_code_blocks,
            "include_tables": self.include_tables,
            "include_blockquotes": self.include_blockquotes,
            "chapter_header_levels": self.chapter_header_levels,
            "confidence_threshold": self.confidence_threshold,
            "error_handling_strategy": self.error_handling_strategy,
            "max_sentence_length": self.max_sentence_length,
        }


TECHNICAL_PRESET = ParserPreset(
    name="technical",
    description="API docs and manuals: code and tables are voiced",
    include_code_blocks=True,
    include_tables=True,
    chapter_header_levels=(1, 2),
    confidence_threshold=0.9,
)

NARRATIVE_PRESET = ParserPreset(
    name="narrative",
    description="Fiction and essays with top-level chapter headings",
    chapter_header_levels=(1,),
    error_handling_strategy="lenient",
)

ACADEMIC_PRESET = ParserPreset(
    name="academic",
    description="Papers and theses with long sentences and deep sectioning",
    include_code_blocks=True,
    include_tables=True,
    chapter_header_levels=(1, 2, 3),
    confidence_threshold=0.95,
    max_sentence_length=1000,
)

BLOG_PRESET = ParserPreset(
    name="blog",
    description="Blog posts with H2 sections and occasional code",
    include_code_blocks=True,
    confidence_threshold=0.75,
)

PRESETS: dict[str, ParserPreset] = {
    "technical": TECHNICAL_PRESET,
    "narrative": NARRATIVE_PRESET,
    "academic": ACADEMIC_PRESET,
    "blog": BLOG_PRESET,
}


def get_preset(name: str) -> ParserPreset:
    """Look up a preset by name.

    Args:
        name: Preset name, case-insensitive.

    Returns:
        The matching ParserPreset.

    Raises:
        KeyError: If no preset has that name.
    """
    try:
        return PRESETS[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown preset {name!r}. Available: {', '.join(PRESETS)}") from None
