# -*- coding: utf-8 -*-
"""
Tests for MetaConfig, ServiceSettings and the shared models.
"""

import pytest

from seo_meta_generator.config import DEFAULT_DESCRIPTION_FILLER, MetaConfig, ServiceSettings
from seo_meta_generator.models import ConstraintSpec, MetaResult, PageMeta, TextCandidate, TextRole
from seo_meta_generator.text_repair import collapse_whitespace, repair_text


class TestMetaConfig:
    """Tests for MetaConfig dataclass."""

    def test_default_config(self):
        """Test default configuration values."""
        config = MetaConfig()
        assert config.title_max_length == 60
        assert config.description_min_length == 140
        assert config.description_max_length == 160
        assert config.description_target_length == 158
        assert config.slug_max_length == 80
        assert config.max_titles == 5
        assert config.max_metas == 3
        assert config.body_snippet_chars == 1200
        assert config.description_filler == DEFAULT_DESCRIPTION_FILLER
        assert "best" in config.stop_words

    def test_relaxed(self):
        """Test the relaxed factory and its overrides."""
        config = MetaConfig.relaxed(title_max_length=70)
        assert config.description_min_length == 120
        assert config.description_target_length == 155
        assert config.title_max_length == 70

    @pytest.mark.parametrize("overrides", [
        {"title_max_length": 0},
        {"description_min_length": 170},
        {"description_target_length": 100},
        {"slug_max_length": 0},
        {"max_titles": 0},
        {"max_metas": 0},
        {"description_filler": ("", "  ")},
        {"body_snippet_chars": 0},
    ])
    def test_invalid_values(self, overrides):
        """Test that inconsistent limits raise ValueError."""
        with pytest.raises(ValueError):
            MetaConfig(**overrides)


class TestServiceSettings:
    """Tests for environment-driven settings."""

    def test_from_env(self, monkeypatch):
        """Test reading provider, cache and CORS settings."""
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        monkeypatch.setenv("OPENROUTER_MODEL", "meta/llama")
        monkeypatch.setenv("OPENROUTER_MAX_TOKENS", "256")
        monkeypatch.setenv("GEMINI_TEMPERATURE", "0.2")
        monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
        monkeypatch.setenv("CACHE_TTL_SEC", "60")
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://example.com, https://www.other.org ,")
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)

        settings = ServiceSettings.from_env()

        assert settings.gemini_api_key == "g-key"
        assert settings.anthropic_api_key is None
        assert settings.openrouter_model == "meta/llama"
        assert settings.openrouter_max_tokens == 256
        assert settings.gemini_temperature == 0.2
        assert settings.redis_url == "redis://localhost:6379/0"
        assert settings.cache_ttl_seconds == 60
        assert settings.allowed_origins == ["https://example.com", "https://www.other.org"]
        assert settings.has_any_provider is True

    def test_defaults_without_env(self, monkeypatch):
        """Test defaults when nothing is configured."""
        for name in ("ANTHROPIC_API_KEY", "GEMINI_API_KEY", "OPENROUTER_API_KEY", "REDIS_URL",
                     "CACHE_TTL_SEC", "ALLOWED_ORIGINS"):
            monkeypatch.delenv(name, raising=False)

        settings = ServiceSettings.from_env()

        assert settings.has_any_provider is False
        assert settings.cache_ttl_seconds == 86400
        assert settings.redis_url is None

    def test_invalid_integer(self, monkeypatch):
        """Test that malformed numeric variables are reported."""
        monkeypatch.setenv("CACHE_TTL_SEC", "one day")
        with pytest.raises(ValueError, match="CACHE_TTL_SEC"):
            ServiceSettings.from_env()

    def test_cors_variants(self):
        """Test that www / non-www variants are added."""
        settings = ServiceSettings(allowed_origins=["https://example.com", "https://www.other.org"])

        assert settings.cors_origins() == [
            "https://example.com",
            "https://www.example.com",
            "https://www.other.org",
            "https://other.org",
        ]

    def test_cors_wildcard(self):
        """Test that a wildcard allows every origin."""
        assert ServiceSettings(allowed_origins=["https://a.com", "*"]).cors_origins() == ["*"]


class TestModels:
    """Tests for shared data models."""

    def test_constraint_spec(self):
        """Test constraint checks and their messages."""
        constraints = ConstraintSpec.for_title("seo tool")

        assert constraints.is_satisfied_by("Best SEO Tool")
        assert constraints.violations("x" * 61) == [
            "length 61 exceeds maximum 60",
            "missing required phrase 'seo tool'",
        ]

    def test_text_candidate_immutable(self):
        """Test that with_text returns a new candidate."""
        candidate = TextCandidate("a", TextRole.TITLE)
        updated = candidate.with_text("bb")

        assert candidate.text == "a"
        assert updated.text == "bb"
        assert len(updated) == 2

    def test_page_meta_to_dict(self, sample_page: PageMeta):
        """Test serialization with the response field names."""
        data = sample_page.to_dict()

        assert data["titleTag"] == sample_page.title
        assert data["metaDesc"] == sample_page.meta_description
        assert PageMeta().is_empty is True
        assert sample_page.is_empty is False

    def test_meta_result_to_dict(self):
        """Test that internal flags are not serialized."""
        result = MetaResult(main_keyword="kw", titles=["t"], metas=["m"], slug="kw", used_fallback_titles=True)

        assert result.to_dict() == {"main_keyword": "kw", "titles": ["t"], "metas": ["m"], "slug": "kw"}


class TestTextRepair:
    """Tests for text cleanup helpers."""

    def test_repair_text(self):
        """Test entity unescaping and space normalization."""
        assert repair_text("Fast &amp; Secure\u00a0Plans\u200b ") == "Fast & Secure Plans"

    def test_collapse_whitespace(self):
        """Test whitespace collapsing."""
        assert collapse_whitespace("  a \n\t b  ") == "a b"
        assert collapse_whitespace(None) == ""

    def test_repair_mojibake(self):
        """Test that UTF-8 decoded as Latin-1 is repaired."""
        assert repair_text("CafÃ© Menu") == "Café Menu"
