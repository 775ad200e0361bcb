"""
Meta generation service.

Glues the pieces together for the two request flows:

    from_keyword: validate -> cache -> prompt -> provider chain -> parse -> generate_meta
    from_url:     validate -> cache -> fetch page -> resolve keyword -> prompt
                  -> provider chain -> parse -> generate_meta

The cache and provider chain are injected, so the service holds no global
state and can be shared between request handlers.
"""

import logging
import time
from typing import Callable, Optional

from .cache import (
    DEFAULT_TTL_SECONDS,
    KEYWORD_PREFIX,
    URL_PREFIX,
    CacheBackend,
    NullCache,
    cache_key,
    create_cache,
)
from .config import MetaConfig, ServiceSettings
from .content_sources import ContentExtractionError, fetch_page, validate_url
from .keyword_deriver import resolve_main_keyword
from .llm_client import (
    ProviderChain,
    build_keyword_prompt,
    build_page_prompt,
    create_provider_chain,
)
from .models import PageMeta
from .pipeline import generate_meta, generate_meta_for_page
from .provider_output import parse_generation

logger = logging.getLogger(__name__)

MIN_KEYWORD_CHARS = 2
MAX_KEYWORD_CHARS = 200
MAX_NOTE_CHARS = 1000


class InvalidRequestError(Exception):
    """Raised when request input fails validation."""
    pass


def _clean_note(note: Optional[str]) -> str:
    if note is None:
        return ""
    if not isinstance(note, str):
        raise InvalidRequestError("note must be a string")
    return note.strip()[:MAX_NOTE_CHARS]


def _clean_keyword(keyword: Optional[str], required: bool) -> str:
    """Validate a keyword. Optional keywords may be None or blank."""
    if keyword is not None and not isinstance(keyword, str):
        raise InvalidRequestError("keyword must be a string")
    keyword = (keyword or "").strip()
    if required and len(keyword) < MIN_KEYWORD_CHARS:
        raise InvalidRequestError("keyword is required and must be a short string")
    return keyword[:MAX_KEYWORD_CHARS]


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


class MetaService:
    """
    Request-level orchestration of meta generation.

    Args:
        providers: Provider chain used for generation.
        cache: Response cache. Defaults to NullCache.
        config: Length budgets for fitting.
        fetcher: Callable (url, timeout, snippet_chars) -> PageMeta.
        cache_ttl: Seconds a response stays cached.
        timeout: Page fetch timeout in seconds.
    """

    def __init__(
        self,
        providers: ProviderChain,
        cache: Optional[CacheBackend] = None,
        config: Optional[MetaConfig] = None,
        fetcher: Callable[..., PageMeta] = fetch_page,
        cache_ttl: int = DEFAULT_TTL_SECONDS,
        timeout: float = 30.0,
    ):
        self.providers = providers
        self.cache = cache if cache is not None else NullCache()
        self.config = config or MetaConfig()
        self.fetcher = fetcher
        self.cache_ttl = cache_ttl
        self.timeout = timeout

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ServiceSettings] = None,
        config: Optional[MetaConfig] = None,
    ) -> "MetaService":
        """Build a service with providers and cache from settings (or the environment)."""
        settings = settings or ServiceSettings.from_env()
        return cls(
            providers=create_provider_chain(settings),
            cache=create_cache(settings),
            config=config,
            cache_ttl=settings.cache_ttl_seconds,
            timeout=settings.request_timeout,
        )

    def _cached(self, key: str) -> Optional[dict]:
        cached = self.cache.get(key)
        if cached is None:
            return None
        logger.info("Serving meta from cache")
        return {"fromCache": True, **cached}

    def from_keyword(self, keyword: str, note: Optional[str] = "") -> dict:
        """
        Generate meta for a keyword.

        Args:
            keyword: Main keyword (at least two characters).
            note: Optional context for the provider.

        Returns:
            Payload with provider, main_keyword, titles, metas, slug, note and
            timestamp. Cached responses also carry fromCache=True.

        Raises:
            InvalidRequestError: If the keyword or note is invalid.
            AllProvidersFailedError: If no provider produced output.
        """
        keyword = _clean_keyword(keyword, required=True)
        note = _clean_note(note)

        key = cache_key(KEYWORD_PREFIX, keyword, note)
        cached = self._cached(key)
        if cached is not None:
            return cached

        prompt = build_keyword_prompt(
            keyword,
            note,
            max_title_chars=self.config.title_max_length,
            max_meta_chars=self.config.description_max_length,
        )
        response = self.providers.generate(prompt)
        generation = parse_generation(response.raw)

        result = generate_meta(keyword, generation=generation, config=self.config)

        payload = {
            "provider": response.provider,
            **result.to_dict(),
            "note": note,
            "timestamp": _timestamp_ms(),
        }
        self.cache.set(key, payload, self.cache_ttl)
        return payload

    def from_url(
        self,
        url: str,
        keyword: Optional[str] = None,
        note: Optional[str] = "",
    ) -> dict:
        """
        Generate meta for a web page.

        Args:
            url: Absolute http(s) URL.
            keyword: Optional main keyword; derived from the page when blank.
            note: Optional context for the provider.

        Returns:
            Same payload as from_keyword plus "extracted" (the page fields).

        Raises:
            InvalidRequestError: If the URL, keyword or note is invalid.
            ContentExtractionError: If the page cannot be fetched.
            NoKeywordDerivableError: If no keyword was given and none can be
                derived from the page. Raised before any provider call.
            AllProvidersFailedError: If no provider produced output.
        """
        try:
            url = validate_url(url)
        except ContentExtractionError as e:
            raise InvalidRequestError(
                "url is required and must start with http:// or https://"
            ) from e
        keyword = _clean_keyword(keyword, required=False)
        note = _clean_note(note)

        key = cache_key(URL_PREFIX, url, keyword, note)
        cached = self._cached(key)
        if cached is not None:
            return cached

        page = self.fetcher(url, timeout=self.timeout, snippet_chars=self.config.body_snippet_chars)
        main_keyword = resolve_main_keyword(keyword, page, self.config.stop_words)

        prompt = build_page_prompt(main_keyword, page, note)
        response = self.providers.generate(prompt)
        generation = parse_generation(response.raw)

        result = generate_meta_for_page(
            page, keyword=main_keyword, generation=generation, config=self.config
        )

        payload = {
            "provider": response.provider,
            "main_keyword": result.main_keyword,
            "extracted": page.to_dict(),
            "titles": result.titles,
            "metas": result.metas,
            "slug": result.slug,
            "note": note,
            "timestamp": _timestamp_ms(),
        }
        self.cache.set(key, payload, self.cache_ttl)
        return payload
