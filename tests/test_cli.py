"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner
from unittest.mock import patch

from seo_meta_generator.cli import main
from seo_meta_generator.config import MetaConfig
from seo_meta_generator.models import PageMeta
from seo_meta_generator.service import MetaService

PROVIDER_ENV = ("ANTHROPIC_API_KEY", "GEMINI_API_KEY", "OPENROUTER_API_KEY")


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def configured_env(monkeypatch):
    for name in PROVIDER_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("REDIS_URL", raising=False)


class TestSlugCommand:
    """Tests for the slug command."""

    def test_slug(self, runner: CliRunner):
        """Test that text is slugified."""
        result = runner.invoke(main, ["slug", "Hello, World! Café Guide"])

        assert result.exit_code == 0
        assert result.output.strip() == "hello-world-cafe-guide"

    def test_max_length(self, runner: CliRunner):
        """Test that --max-length caps the slug."""
        result = runner.invoke(main, ["slug", "alpha beta gamma", "--max-length", "10"])

        assert result.exit_code == 0
        assert result.output.strip() == "alpha-beta"


class TestFitCommand:
    """Tests for offline fitting."""

    def test_fit_json(self, runner: CliRunner):
        """Test fitting supplied candidates."""
        result = runner.invoke(main, [
            "fit",
            "--keyword", "seo tool",
            "--title", "Our SEO Tool",
            "--description", "Short desc.",
            "--json",
        ])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["main_keyword"] == "seo tool"
        assert payload["titles"] == ["Our SEO Tool"]
        assert len(payload["metas"]) == 1
        assert 140 <= len(payload["metas"][0]) <= 160
        assert "seo tool" in payload["metas"][0].lower()
        assert payload["slug"] == "seo-tool"

    def test_fit_derives_keyword(self, runner: CliRunner):
        """Test keyword derivation from --source-h1 and template fallback."""
        result = runner.invoke(main, [
            "fit",
            "--source-h1", "Best WordPress Hosting Reviews",
            "--json",
        ])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["main_keyword"] == "wordpress hosting reviews"
        assert len(payload["titles"]) == 5
        assert len(payload["metas"]) == 3

    def test_fit_without_keyword_source(self, runner: CliRunner):
        """Test that fitting with nothing to derive from fails."""
        result = runner.invoke(main, ["fit", "--title", "Some Title"])

        assert result.exit_code == 1
        assert "Keyword error" in result.output

    def test_fit_uses_context_config(self, runner: CliRunner):
        """Test that fitting uses the config held on the click context."""
        result = runner.invoke(
            main,
            ["fit", "--keyword", "seo tool", "--title", "Our SEO Tool Reviews and Comparisons for Agencies", "--json"],
            obj={"config": MetaConfig(title_max_length=30)},
        )

        assert result.exit_code == 0
        title = json.loads(result.output)["titles"][0]
        assert len(title) <= 30
        assert "seo tool" in title.lower()

    def test_fit_tables(self, runner: CliRunner):
        """Test the table output."""
        result = runner.invoke(main, ["fit", "--keyword", "seo tool", "--title", "Our SEO Tool"])

        assert result.exit_code == 0
        assert "Meta Titles" in result.output
        assert "Our SEO Tool" in result.output


class TestGenerationCommands:
    """Tests for the provider-backed commands."""

    def test_no_provider_configured(self, runner: CliRunner, monkeypatch):
        """Test that a missing provider key exits with an error."""
        for name in PROVIDER_ENV:
            monkeypatch.delenv(name, raising=False)

        result = runner.invoke(main, ["keyword", "seo tool"])

        assert result.exit_code == 1
        assert "No provider configured" in result.output

    def test_keyword_json(self, runner: CliRunner, configured_env, service_factory, fake_generator):
        """Test keyword generation with JSON output."""
        service = service_factory(fake_generator)

        with patch.object(MetaService, "from_settings", return_value=service):
            result = runner.invoke(main, ["keyword", "managed web hosting", "--note", "budget", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["provider"] == "fake"
        assert payload["slug"] == "managed-web-hosting-plans"
        assert payload["note"] == "budget"

    def test_url_tables(self, runner: CliRunner, configured_env, service_factory, fake_generator):
        """Test URL generation with table output."""
        service = service_factory(fake_generator)

        with patch.object(MetaService, "from_settings", return_value=service):
            result = runner.invoke(main, ["url", "https://example.com/hosting"])

        assert result.exit_code == 0
        assert "Extracted Page Fields" in result.output
        assert "managed-web-hosting-plans" in result.output

    def test_url_invalid(self, runner: CliRunner, configured_env, service_factory, fake_generator):
        """Test that an invalid URL exits with an error."""
        service = service_factory(fake_generator)

        with patch.object(MetaService, "from_settings", return_value=service):
            result = runner.invoke(main, ["url", "example.com"])

        assert result.exit_code == 1
        assert "Invalid input" in result.output

    def test_url_no_keyword(self, runner: CliRunner, configured_env, service_factory, fake_generator):
        """Test that a page without keyword sources exits with an error."""
        service = service_factory(fake_generator, page=PageMeta(url="https://example.com/"))

        with patch.object(MetaService, "from_settings", return_value=service):
            result = runner.invoke(main, ["url", "https://example.com/"])

        assert result.exit_code == 1
        assert "Keyword error" in result.output
        assert fake_generator.prompts == []

    def test_provider_failure(self, runner: CliRunner, configured_env, service_factory):
        """Test that provider failures exit with an error."""
        from conftest import FakeGenerator

        service = service_factory(FakeGenerator(error="quota exceeded"))

        with patch.object(MetaService, "from_settings", return_value=service):
            result = runner.invoke(main, ["keyword", "seo tool"])

        assert result.exit_code == 1
        assert "LLM error" in result.output

    def test_service_shares_context_config(self, runner: CliRunner, configured_env, service_factory, fake_generator):
        """Test that generation commands build the service with the context config."""
        config = MetaConfig(title_max_length=50)
        service = service_factory(fake_generator)

        with patch.object(MetaService, "from_settings", return_value=service) as mock_from_settings:
            result = runner.invoke(main, ["keyword", "seo tool", "--json"], obj={"config": config})

        assert result.exit_code == 0
        assert mock_from_settings.call_args.kwargs["config"] is config
