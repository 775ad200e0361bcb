"""Tests for main keyword derivation."""

import pytest

from seo_meta_generator.keyword_deriver import (
    NoKeywordDerivableError,
    derive_keyword,
    derive_keyword_from_page,
    resolve_main_keyword,
)
from seo_meta_generator.models import PageMeta


class TestDeriveKeyword:
    """Tests for derive_keyword."""

    def test_title_with_stop_word(self):
        """Test that stop words are removed from a title-derived keyword."""
        keyword = derive_keyword(h1="", title="Best WordPress Hosting | Reviews")

        assert keyword == "wordpress hosting reviews"
        assert "best" not in keyword.split()

    def test_h1_has_priority(self):
        """Test that the H1 wins over every other field."""
        keyword = derive_keyword(
            h1="Managed Web Hosting for Small Businesses",
            title="Acme | Home",
            meta="Something else entirely",
            body="Body text",
        )
        assert keyword == "managed web hosting"

    def test_falls_through_empty_fields(self):
        """Test that empty fields are skipped in priority order."""
        assert derive_keyword(h1=None, title="", meta="Cloud backups made simple") == "cloud backups made"
        assert derive_keyword(body="Email marketing") == "email marketing"

    def test_short_source_gives_short_phrase(self):
        """Test that one usable word gives a one-word keyword."""
        assert derive_keyword(h1="The Pricing") == "pricing"

    def test_punctuation_and_hyphens(self):
        """Test that punctuation is stripped but hyphenated words survive."""
        assert derive_keyword(h1="Step-by-step: SEO, simplified!") == "step-by-step seo simplified"

    def test_bare_hyphen_is_not_a_word(self):
        """Test that a separator hyphen is not taken as a word."""
        assert derive_keyword(h1="Hosting - Reviews") == "hosting reviews"

    def test_all_stop_words_falls_back_to_title_prefix(self):
        """Test the title fallback when every word is a stop word."""
        keyword = derive_keyword(h1="How to", title="The Guide | Acme")

        assert keyword == "The Guide"

    def test_nothing_usable(self):
        """Test that an empty page yields an empty keyword."""
        assert derive_keyword() == ""
        assert derive_keyword(h1="!!!") == ""

    def test_custom_stop_words(self):
        """Test that stop words are configurable."""
        keyword = derive_keyword(h1="Acme Web Hosting", stop_words={"acme"})

        assert keyword == "web hosting"

    def test_accented_title(self):
        """Test that accented words survive derivation."""
        assert derive_keyword(title="Déjà Vu Café | Paris") == "déjà vu café"

    def test_cjk_heading(self):
        """Test that CJK words are kept as words."""
        assert derive_keyword(h1="東京 ホテル ガイド 2025") == "東京 ホテル ガイド"

    def test_accented_title_prefix_fallback(self):
        """Test the title fallback with accented text."""
        assert derive_keyword(h1="The Guide", title="Crème Brûlée - Recettes") == "Crème Brûlée"

    def test_derive_from_page(self, sample_page: PageMeta):
        """Test derivation from an extracted page."""
        assert derive_keyword_from_page(sample_page) == "managed web hosting"


class TestResolveMainKeyword:
    """Tests for resolve_main_keyword."""

    def test_provided_keyword_wins(self, sample_page: PageMeta):
        """Test that a supplied keyword is used as-is (trimmed)."""
        assert resolve_main_keyword("  seo tool ", sample_page) == "seo tool"

    def test_blank_keyword_derived(self, sample_page: PageMeta):
        """Test that a blank keyword triggers derivation."""
        assert resolve_main_keyword("   ", sample_page) == "managed web hosting"

    def test_no_keyword_and_empty_page(self):
        """Test the error when nothing can be derived."""
        with pytest.raises(NoKeywordDerivableError, match="Please provide a keyword"):
            resolve_main_keyword(None, PageMeta())

    def test_no_keyword_and_no_page(self):
        """Test the error when there is no page at all."""
        with pytest.raises(NoKeywordDerivableError):
            resolve_main_keyword("")
