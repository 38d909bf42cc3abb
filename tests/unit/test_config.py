"""Tests for ParserConfig and presets."""

import pytest

from ttsdoc.config import DEFAULT_ABBREVIATIONS, LanguageRules, ParserConfig
from ttsdoc.exceptions import ConfigurationError
from ttsdoc.presets import (
    ACADEMIC_PRESET,
    BLOG_PRESET,
    NARRATIVE_PRESET,
    PRESETS,
    TECHNICAL_PRESET,
    get_preset,
)


class TestParserConfig:
    """Test ParserConfig defaults and validation."""

    def test_defaults(self):
        config = ParserConfig()
        assert config.confidence_threshold == 0.8
        assert config.chapter_header_levels == (2,)
        assert config.include_code_blocks is False
        assert config.include_tables is False
        assert config.include_blockquotes is True
        assert config.include_lists is True
        assert config.min_sentence_length == 5
        assert config.max_sentence_length == 500
        assert config.error_handling_strategy == "recover"
        assert config.enable_streaming is True
        assert config.max_chunk_size == 50_000
        assert config.max_file_size_bytes == 10 * 1024 * 1024
        assert config.language_rules.language == "en"
        assert "Dr" in config.language_rules.abbreviations

    def test_lists_become_tuples(self):
        config = ParserConfig(chapter_header_levels=[1, 2], sentence_boundary_patterns=[r"\.\s"])
        assert config.chapter_header_levels == (1, 2)
        assert config.sentence_boundary_patterns == (r"\.\s",)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"confidence_threshold": 1.5},
            {"confidence_threshold": -0.1},
            {"chapter_header_levels": ()},
            {"chapter_header_levels": (0,)},
            {"chapter_header_levels": (7,)},
            {"min_sentence_length": -1},
            {"min_sentence_length": 50, "max_sentence_length": 10},
            {"sentence_boundary_patterns": ()},
            {"sentence_boundary_patterns": ("[unclosed",)},
            {"error_handling_strategy": "ignore"},
            {"max_chunk_size": 0},
            {"max_file_size_mb": 0},
            {"max_nesting_depth": 0},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            ParserConfig(**kwargs)

    def test_language_rules(self):
        rules = LanguageRules(language="de", abbreviations=["z.B", "usw"])
        assert rules.abbreviations == ("z.B", "usw")
        assert LanguageRules().abbreviations == DEFAULT_ABBREVIATIONS
        with pytest.raises(ConfigurationError):
            LanguageRules(language="")


class TestPresets:
    """Test the standard presets."""

    def test_all_presets_registered(self):
        assert set(PRESETS) == {"technical", "narrative", "academic", "blog"}

    def test_technical(self):
        assert TECHNICAL_PRESET.include_code_blocks is True
        assert TECHNICAL_PRESET.include_tables is True
        assert TECHNICAL_PRESET.chapter_header_levels == (1, 2)
        assert TECHNICAL_PRESET.confidence_threshold == 0.9

    def test_narrative(self):
        assert NARRATIVE_PRESET.include_code_blocks is False
        assert NARRATIVE_PRESET.chapter_header_levels == (1,)
        assert NARRATIVE_PRESET.error_handling_strategy == "lenient"

    def test_academic(self):
        assert ACADEMIC_PRESET.chapter_header_levels == (1, 2, 3)
        assert ACADEMIC_PRESET.confidence_threshold == 0.95
        assert ACADEMIC_PRESET.max_sentence_length == 1000

    def test_blog(self):
        assert BLOG_PRESET.include_code_blocks is True
        assert BLOG_PRESET.include_tables is False
        assert BLOG_PRESET.confidence_threshold == 0.75

    def test_get_preset_case_insensitive(self):
        assert get_preset("Blog") is BLOG_PRESET

    def test_get_preset_unknown(self):
        with pytest.raises(KeyError, match="Unknown preset"):
            get_preset("poetry")

    def test_from_preset(self):
        config = ParserConfig.from_preset("academic")
        assert config.chapter_header_levels == (1, 2, 3)
        assert config.max_sentence_length == 1000
        # Fields the preset doesn't set keep their defaults
        assert config.min_sentence_length == 5

    def test_from_preset_overrides(self):
        config = ParserConfig.from_preset("technical", confidence_threshold=0.5)
        assert config.confidence_threshold == 0.5
        assert config.include_code_blocks is True

    def test_from_preset_unknown(self):
        with pytest.raises(ConfigurationError):
            ParserConfig.from_preset("poetry")
