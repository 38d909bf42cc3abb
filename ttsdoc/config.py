"""
Configuration for ttsdoc Markdown parsing.

All options have sensible defaults. Loading configuration from files or
the environment is left to the caller; this module only models and
validates it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

from ttsdoc.exceptions import ConfigurationError
from ttsdoc.presets import get_preset

DEFAULT_BOUNDARY_PATTERNS: tuple[str, ...] = (
    r"[.!?]+\s+",
    r"[.!?]\s+[A-Z]",
    r"\n\s*",
)

DEFAULT_ABBREVIATIONS: tuple[str, ...] = (
    "Mr", "Mrs", "Ms", "Dr", "Prof", "St", "Ave", "Rd", "Blvd",
    "etc", "e.g", "i.e", "vs", "al", "et", "ca", "cf",
)  # fmt: skip

VALID_STRATEGIES = ("strict", "recover", "lenient")


@dataclass
class LanguageRules:
    """
    Language-specific sentence rules.

    A sentence boundary directly after one of the abbreviations does not
    end the sentence ("Dr. Smith" stays in one piece).

    Example:
        >>> config = ParserConfig(
        ...     language_rules=LanguageRules(language="de", abbreviations=("z.B", "usw"))
        ... )
    """

    language: str = "en"
    abbreviations: tuple[str, ...] = DEFAULT_ABBREVIATIONS

    def __post_init__(self):
        """Validate configuration."""
        self.abbreviations = tuple(self.abbreviations)
        if not self.language:
            raise ConfigurationError("language must not be empty")


@dataclass
class ParserConfig:
    """
    Configuration for Markdown parsing.

    Create a config only if you need to customize behavior, or start from
    one of the presets.

    Example:
        >>> config = ParserConfig(chapter_header_levels=(1, 2), include_tables=True)
        >>> result = ttsdoc.parse_markdown(text, config)
        >>> config = ParserConfig.from_preset("blog", confidence_threshold=0.7)
    """

    # Acceptance
    confidence_threshold: float = 0.8

    # Structure
    chapter_header_levels: tuple[int, ...] = (2,)

    # Which paragraph types are voiced (text is always voiced)
    include_code_blocks: bool = False
    include_tables: bool = False
    include_blockquotes: bool = True
    include_lists: bool = True

    # Sentences
    min_sentence_length: int = 5
    max_sentence_length: int = 500
    sentence_boundary_patterns: tuple[str, ...] = DEFAULT_BOUNDARY_PATTERNS
    language_rules: LanguageRules = field(default_factory=LanguageRules)

    # Error handling
    error_handling_strategy: Literal["strict", "recover", "lenient"] = "recover"

    # Limits
    enable_streaming: bool = True
    max_chunk_size: int = 50_000  # characters
    max_file_size_mb: float = 10
    max_nesting_depth: int = 10

    def __post_init__(self):
        """Validate configuration."""
        self.chapter_header_levels = tuple(self.chapter_header_levels)
        self.sentence_boundary_patterns = tuple(self.sentence_boundary_patterns)

        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ConfigurationError(
                f"confidence_threshold must be between 0.0 and 1.0, "
                f"got {self.confidence_threshold}"
            )

        if not self.chapter_header_levels:
            raise ConfigurationError("chapter_header_levels must not be empty")
        for level in self.chapter_header_levels:
            if not isinstance(level, int) or not 1 <= level <= 6:
                raise ConfigurationError(
                    f"chapter_header_levels must contain integers 1-6, got {level!r}"
                )

        if self.min_sentence_length < 0:
            raise ConfigurationError(
                f"min_sentence_length must be >= 0, got {self.min_sentence_length}"
            )
        if self.max_sentence_length <= self.min_sentence_length:
            raise ConfigurationError(
                f"max_sentence_length ({self.max_sentence_length}) must be greater than "
                f"min_sentence_length ({self.min_sentence_length})"
            )

        if not self.sentence_boundary_patterns:
            raise ConfigurationError("sentence_boundary_patterns must not be empty")
        for pattern in self.sentence_boundary_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigurationError(
                    f"Invalid sentence boundary pattern {pattern!r}: {e}"
                ) from e

        if self.error_handling_strategy not in VALID_STRATEGIES:
            raise ConfigurationError(
                f"error_handling_strategy must be one of {VALID_STRATEGIES}, "
                f"got {self.error_handling_strategy!r}"
            )

        if self.max_chunk_size < 1:
            raise ConfigurationError(f"max_chunk_size must be >= 1, got {self.max_chunk_size}")
        if self.max_file_size_mb <= 0:
            raise ConfigurationError(
                f"max_file_size_mb must be positive, got {self.max_file_size_mb}"
            )
        if self.max_nesting_depth < 1:
            raise ConfigurationError(
                f"max_nesting_depth must be >= 1, got {self.max_nesting_depth}"
            )

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)

    @classmethod
    def from_preset(cls, name: str, **overrides) -> ParserConfig:
        """
        Build a config from a named preset.

        Args:
            name: Preset name ("technical", "narrative", "academic", "blog")
            **overrides: Field values applied on top of the preset

        Returns:
            A validated ParserConfig

        Raises:
            ConfigurationError: If the preset is unknown or a value is invalid
        """
        try:
            preset = get_preset(name)
        except KeyError as e:
            raise ConfigurationError(str(e.args[0])) from e
        values = preset.overrides()
        values.update(overrides)
        return cls(**values)
