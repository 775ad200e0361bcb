"""
Pytest fixtures and configuration for SEO Meta Generator tests.
"""

import json

import pytest

from seo_meta_generator.cache import MemoryCache
from seo_meta_generator.llm_client import GenerationResponse, LLMClientError, ProviderChain
from seo_meta_generator.models import PageMeta
from seo_meta_generator.service import MetaService


class FakeGenerator:
    """Generator returning canned output and recording prompts."""

    def __init__(self, raw: str = "", name: str = "fake", error: str = None):
        self.raw = raw
        self.name = name
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> GenerationResponse:
        self.prompts.append(prompt)
        if self.error:
            raise LLMClientError(self.error)
        return GenerationResponse(provider=self.name, raw=self.raw, meta={})


@pytest.fixture
def sample_html_content() -> str:
    """Sample HTML page with title, meta description, H1 and body copy."""
    return """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Managed Web Hosting | Fast &amp; Secure Plans</title>
    <meta name="description" content="Managed web hosting with daily backups, free SSL and 24/7 support for growing sites.">
    <script>var tracking = "should not appear";</script>
    <style>body { color: red; }</style>
</head>
<body>
    <nav>Home | Pricing | Contact</nav>
    <h1>Managed   Web Hosting for Small Businesses</h1>
    <p>Our managed web hosting plans take care of server updates, security patches
    and performance tuning so you can focus on running your business. Every plan
    includes automatic daily backups and a free SSL certificate.</p>
    <h2>Why choose managed hosting?</h2>
    <p>Unlike shared hosting, managed web hosting gives you dedicated resources and
    expert support around the clock. Sites load faster, stay online and recover
    quickly when something goes wrong.</p>
    <p>Plans start at a low monthly price with no long-term contract and a
    thirty-day money-back guarantee.</p>
</body>
</html>
"""


@pytest.fixture
def sample_page() -> PageMeta:
    """Extracted fields of a typical page."""
    return PageMeta(
        title="Managed Web Hosting | Fast & Secure Plans",
        meta_description="Managed web hosting with daily backups, free SSL and 24/7 support.",
        h1="Managed Web Hosting for Small Businesses",
        body_snippet="Our managed web hosting plans take care of server updates. Every plan includes backups.",
        url="https://example.com/hosting",
    )


@pytest.fixture
def provider_json() -> str:
    """Provider output wrapping a JSON object in prose."""
    payload = {
        "main_keyword": "managed web hosting",
        "titles": [
            "Managed Web Hosting Plans for Small Businesses",
            "Fast, Secure Managed Web Hosting With Daily Backups and SSL Included",
        ],
        "metas": [
            "Managed web hosting with daily backups, free SSL and expert support.",
        ],
        "slug": "Managed Web Hosting Plans",
    }
    return "Here is the JSON you asked for:\n```json\n" + json.dumps(payload) + "\n```"


@pytest.fixture
def fake_generator(provider_json: str) -> FakeGenerator:
    """Generator returning provider_json."""
    return FakeGenerator(raw=provider_json)


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def service_factory(memory_cache: MemoryCache, sample_page: PageMeta):
    """Build a MetaService around fake generators and a canned page fetcher."""

    def _factory(*generators, page: PageMeta = None, cache=None):
        fetched = page if page is not None else sample_page
        calls = []

        def fetcher(url, timeout=30, snippet_chars=1200):
            calls.append(url)
            return fetched

        service = MetaService(
            providers=ProviderChain(list(generators)),
            cache=cache if cache is not None else memory_cache,
            fetcher=fetcher,
        )
        service.fetch_calls = calls
        return service

    return _factory
