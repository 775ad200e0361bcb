"""
Generation provider clients.

Each generator sends a strict-JSON prompt to one LLM provider and returns
the raw text it produced. ProviderChain tries generators in order and
returns the first success, so a provider outage degrades to the next one.

Supported providers:
- Anthropic Claude (anthropic SDK)
- Google Gemini (Generative Language REST API)
- OpenRouter (OpenAI-compatible chat completions)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

import anthropic
import httpx

from .config import ServiceSettings
from .models import PageMeta

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"

# Error bodies are cut to this length in exception messages
ERROR_DETAIL_CHARS = 300


class LLMClientError(Exception):
    """Raised when LLM operations fail."""
    pass


class AllProvidersFailedError(LLMClientError):
    """Raised when every configured provider failed."""

    def __init__(self, message: str, errors: Optional[list[LLMClientError]] = None):
        super().__init__(message)
        self.errors = errors or []


@dataclass
class GenerationResponse:
    """Raw output of one provider call."""
    provider: str
    raw: str
    meta: dict = field(default_factory=dict)


def build_keyword_prompt(
    keyword: str,
    note: str = "",
    max_title_chars: int = 60,
    max_meta_chars: int = 160,
) -> str:
    """Prompt for keyword-based generation."""
    return f"""You are an expert SEO copywriter. Generate meta details for a blog post:

Keyword: "{keyword}"
Context: "{note}"

Requirements:
- Generate an array "titles" of 5 meta titles, each <= {max_title_chars} characters, include the keyword.
- Generate an array "metas" of 3 meta descriptions, each <= {max_meta_chars} characters, include the keyword.
- Generate a slug suggestion suitable for a URL.
Return ONLY strict JSON like:
{{
  "titles": ["...","..."],
  "metas": ["...","..."],
  "slug": "your-slug-here"
}}"""


def build_page_prompt(main_keyword: str, page: PageMeta, note: str = "") -> str:
    """Prompt for URL-based generation, embedding the extracted page fields."""
    context = f'\nAdditional context: "{note}"\n' if note else ""
    return f"""You are an expert SEO writer. Using the provided page content below, produce a strict JSON object with these fields:
- "main_keyword": a short phrase (1-4 words) that is the primary keyword for this page. It must EXACTLY match the main keyword you choose.
- "titles": an array of 5 SEO meta titles. Each title MUST include the main_keyword EXACTLY (case may vary). Each title must be <= 60 characters.
- "metas": an array of 3 meta descriptions. Each description MUST include the main_keyword EXACTLY, and each must be between 150 and 160 characters long (aim for ~158). Do not include URLs or extra quotes.
- "slug": a recommended URL-friendly slug (lowercase, hyphens, no spaces), up to 80 characters.

Return ONLY valid JSON (no explanations). Use the content to make titles and metas accurate and compelling.

PAGE CONTENT:
Title tag: "{page.title or ''}"
H1: "{page.h1 or ''}"
Meta description: "{page.meta_description or ''}"
Page snippet: "{page.body_snippet or ''}"
{context}
Main keyword: "{main_keyword}". Use it exactly."""


class Generator(Protocol):
    """A single generation provider."""

    name: str

    def generate(self, prompt: str) -> GenerationResponse:
        ...


def _http_error(provider: str, response: httpx.Response) -> LLMClientError:
    detail = response.text[:ERROR_DETAIL_CHARS]
    return LLMClientError(f"{provider} API error {response.status_code}: {detail}")


class AnthropicGenerator:
    """Generator backed by the Anthropic Messages API."""

    name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 512,
        timeout: float = 60.0,
        client: Optional["anthropic.Anthropic"] = None,
    ):
        if not api_key:
            raise LLMClientError(
                "No API key provided. Set ANTHROPIC_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.model = model
        self.max_tokens = max_tokens

        if client is None:
            http_client = httpx.Client(
                timeout=httpx.Timeout(timeout, connect=min(timeout, 30.0)),
                follow_redirects=True,
            )
            client = anthropic.Anthropic(api_key=api_key, http_client=http_client)
        self.client = client

    def generate(self, prompt: str) -> GenerationResponse:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise LLMClientError(f"Anthropic API call failed: {e}") from e

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        )
        return GenerationResponse(
            provider=self.name,
            raw=text,
            meta={"model": self.model, "id": getattr(response, "id", None)},
        )


class GeminiGenerator:
    """Generator backed by the Google Gemini generateContent endpoint."""

    name = "google"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash",
        max_tokens: int = 512,
        temperature: float = 0.6,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise LLMClientError("No GEMINI_API_KEY configured")
        self.api_key = api_key
        self.model = model.removeprefix("models/")
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.http_client = http_client or httpx.Client(timeout=timeout)

    def generate(self, prompt: str) -> GenerationResponse:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": self.max_tokens,
                "temperature": self.temperature,
            },
        }
        try:
            response = self.http_client.post(
                GEMINI_URL.format(model=self.model),
                headers={"x-goog-api-key": self.api_key},
                json=body,
            )
        except httpx.HTTPError as e:
            raise LLMClientError(f"Google API request failed: {e}") from e

        if response.status_code >= 400:
            raise _http_error("Google", response)

        try:
            data = response.json()
        except ValueError as e:
            raise LLMClientError(f"Google API returned invalid JSON: {e}") from e

        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError):
            logger.warning("Unexpected Gemini response shape, passing the body through")
            text = response.text

        return GenerationResponse(provider=self.name, raw=text, meta=data)


class OpenRouterGenerator:
    """Generator backed by OpenRouter chat completions."""

    name = "openrouter"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        max_tokens: int = 400,
        temperature: float = 0.6,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise LLMClientError("No OPENROUTER_API_KEY configured")
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.http_client = http_client or httpx.Client(timeout=timeout)

    def generate(self, prompt: str) -> GenerationResponse:
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        try:
            response = self.http_client.post(
                OPENROUTER_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=body,
            )
        except httpx.HTTPError as e:
            raise LLMClientError(f"OpenRouter API request failed: {e}") from e

        if response.status_code >= 400:
            raise _http_error("OpenRouter", response)

        try:
            data = response.json()
        except ValueError as e:
            raise LLMClientError(f"OpenRouter API returned invalid JSON: {e}") from e

        try:
            text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            logger.warning("Unexpected OpenRouter response shape, passing the body through")
            text = response.text

        return GenerationResponse(provider=self.name, raw=text, meta=data)


class ProviderChain:
    """
    Ordered list of generators with fallback.

    generate() returns the first successful response. Each failure is logged
    and the next generator is tried.
    """

    def __init__(self, generators: Sequence[Generator]):
        self.generators = list(generators)

    @property
    def names(self) -> list[str]:
        return [generator.name for generator in self.generators]

    def __bool__(self) -> bool:
        return bool(self.generators)

    def generate(self, prompt: str) -> GenerationResponse:
        """
        Call generators in order until one succeeds.

        Raises:
            AllProvidersFailedError: If the chain is empty or every generator
                raised LLMClientError.
        """
        if not self.generators:
            raise AllProvidersFailedError(
                "No generation providers configured. Set ANTHROPIC_API_KEY, "
                "GEMINI_API_KEY or OPENROUTER_API_KEY."
            )

        errors: list[LLMClientError] = []
        for generator in self.generators:
            try:
                response = generator.generate(prompt)
            except LLMClientError as e:
                logger.warning(f"Provider {generator.name} failed: {e}")
                errors.append(e)
                continue
            logger.info(f"Generated with provider {generator.name}")
            return response

        raise AllProvidersFailedError(f"All providers failed: {errors[-1]}", errors)


def create_provider_chain(settings: Optional[ServiceSettings] = None) -> ProviderChain:
    """
    Build the provider chain from settings.

    Order: Anthropic, Gemini, OpenRouter. Providers without an API key are
    skipped.
    """
    settings = settings or ServiceSettings.from_env()
    generators: list[Generator] = []

    if settings.anthropic_api_key:
        generators.append(
            AnthropicGenerator(
                settings.anthropic_api_key,
                model=settings.anthropic_model,
                max_tokens=settings.anthropic_max_tokens,
                timeout=max(settings.request_timeout, 60.0),
            )
        )
    if settings.gemini_api_key:
        generators.append(
            GeminiGenerator(
                settings.gemini_api_key,
                model=settings.gemini_model,
                max_tokens=settings.gemini_max_tokens,
                temperature=settings.gemini_temperature,
                timeout=settings.request_timeout,
            )
        )
    if settings.openrouter_api_key:
        generators.append(
            OpenRouterGenerator(
                settings.openrouter_api_key,
                model=settings.openrouter_model,
                max_tokens=settings.openrouter_max_tokens,
                temperature=settings.openrouter_temperature,
                timeout=settings.request_timeout,
            )
        )

    if not generators:
        logger.warning("No generation provider API keys configured")
    return ProviderChain(generators)
