# -*- coding: utf-8 -*-
"""
Centralized configuration for SEO Meta Generator.

This module provides two dataclasses:
- MetaConfig: the length budgets and templates the fitters enforce
- ServiceSettings: provider keys, cache and CORS settings read from the environment
"""

import os
from dataclasses import dataclass, field
from typing import Optional


# Sentences appended to descriptions that fall short of the minimum length.
# "{keyword}" is replaced with the main keyword.
DEFAULT_DESCRIPTION_FILLER: tuple[str, ...] = (
    "Learn more about this topic and improve your results.",
    "Explore practical tips and proven best practices for {keyword}.",
    "Get clear, step-by-step guidance you can apply today.",
)

# Stop words dropped when deriving a keyword from page text
DEFAULT_STOP_WORDS: frozenset[str] = frozenset({
    "the", "and", "for", "with", "a", "an", "of", "to", "in", "on",
    "best", "top", "how", "what", "is", "guide",
})


@dataclass
class MetaConfig:
    """
    Length budgets and templates for meta element fitting.

    Attributes:
        title_max_length: Maximum characters in a meta title (inclusive).
        description_min_length: Minimum characters in a meta description.
        description_max_length: Maximum characters in a meta description.
        description_target_length: Ideal description length. Used to pick
            the word boundary when padded text has to be cut back.
        slug_max_length: Maximum characters in a URL slug.
        max_titles: Number of title candidates kept from a provider.
        max_metas: Number of description candidates kept from a provider.
        description_filler: Sentences cycled onto short descriptions until
            they reach description_min_length. May contain "{keyword}".
        body_snippet_chars: Cap on the body text snippet taken from a page.
        stop_words: Words ignored by the keyword deriver.
    """

    title_max_length: int = 60

    description_min_length: int = 140
    description_max_length: int = 160
    description_target_length: int = 158

    slug_max_length: int = 80

    max_titles: int = 5
    max_metas: int = 3

    description_filler: tuple[str, ...] = DEFAULT_DESCRIPTION_FILLER

    body_snippet_chars: int = 1200

    stop_words: frozenset[str] = field(default=DEFAULT_STOP_WORDS)

    def __post_init__(self):
        """Validate configuration values."""
        if self.title_max_length < 1:
            raise ValueError(
                f"title_max_length must be >= 1, got {self.title_max_length}"
            )
        if self.description_min_length < 0:
            raise ValueError(
                f"description_min_length must be >= 0, got {self.description_min_length}"
            )
        if self.description_max_length < self.description_min_length:
            raise ValueError(
                f"description_max_length ({self.description_max_length}) must be >= "
                f"description_min_length ({self.description_min_length})"
            )
        if not (
            self.description_min_length
            <= self.description_target_length
            <= self.description_max_length
        ):
            raise ValueError(
                f"description_target_length ({self.description_target_length}) must lie "
                f"between {self.description_min_length} and {self.description_max_length}"
            )
        if self.slug_max_length < 1:
            raise ValueError(f"slug_max_length must be >= 1, got {self.slug_max_length}")
        if self.max_titles < 1:
            raise ValueError(f"max_titles must be >= 1, got {self.max_titles}")
        if self.max_metas < 1:
            raise ValueError(f"max_metas must be >= 1, got {self.max_metas}")
        if not any(sentence.strip() for sentence in self.description_filler):
            raise ValueError("description_filler must contain at least one non-empty sentence")
        if self.body_snippet_chars < 1:
            raise ValueError(
                f"body_snippet_chars must be >= 1, got {self.body_snippet_chars}"
            )

    @classmethod
    def relaxed(cls, **overrides) -> "MetaConfig":
        """Create config with a wider description window (120-160 characters).

        Args:
            **overrides: Override any config values.

        Returns:
            MetaConfig with relaxed description bounds.
        """
        defaults = {
            "description_min_length": 120,
            "description_target_length": 155,
        }
        defaults.update(overrides)
        return cls(**defaults)


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


@dataclass
class ServiceSettings:
    """
    Runtime settings for the service layer (providers, cache, CORS).

    Empty API keys disable the corresponding provider.
    """

    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 512

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_max_tokens: int = 512
    gemini_temperature: float = 0.6

    openrouter_api_key: Optional[str] = None
    openrouter_model: str = "gpt-4o-mini"
    openrouter_max_tokens: int = 400
    openrouter_temperature: float = 0.6

    redis_url: Optional[str] = None
    cache_ttl_seconds: int = 60 * 60 * 24

    allowed_origins: list[str] = field(default_factory=list)

    request_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        """Build settings from environment variables."""
        origins = [
            origin.strip()
            for origin in os.environ.get("ALLOWED_ORIGINS", "").split(",")
            if origin.strip()
        ]
        return cls(
            anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
            anthropic_model=os.environ.get("ANTHROPIC_MODEL", cls.anthropic_model),
            anthropic_max_tokens=_env_int("ANTHROPIC_MAX_TOKENS", cls.anthropic_max_tokens),
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
            gemini_model=os.environ.get("GEMINI_MODEL", cls.gemini_model),
            gemini_max_tokens=_env_int("GEMINI_MAX_TOKENS", cls.gemini_max_tokens),
            gemini_temperature=_env_float("GEMINI_TEMPERATURE", cls.gemini_temperature),
            openrouter_api_key=os.environ.get("OPENROUTER_API_KEY") or None,
            openrouter_model=os.environ.get("OPENROUTER_MODEL", cls.openrouter_model),
            openrouter_max_tokens=_env_int("OPENROUTER_MAX_TOKENS", cls.openrouter_max_tokens),
            openrouter_temperature=_env_float(
                "OPENROUTER_TEMPERATURE", cls.openrouter_temperature
            ),
            redis_url=os.environ.get("REDIS_URL") or None,
            cache_ttl_seconds=_env_int("CACHE_TTL_SEC", cls.cache_ttl_seconds),
            allowed_origins=origins,
            request_timeout=_env_float("REQUEST_TIMEOUT", cls.request_timeout),
        )

    @property
    def has_any_provider(self) -> bool:
        """Check if at least one generation provider is configured."""
        return bool(self.anthropic_api_key or self.gemini_api_key or self.openrouter_api_key)

    def cors_origins(self) -> list[str]:
        """Allowed CORS origins with www / non-www variants added.

        Returns ["*"] when the wildcard is configured.
        """
        if "*" in self.allowed_origins:
            return ["*"]

        expanded: list[str] = []
        for origin in self.allowed_origins:
            candidates = [origin]
            scheme, sep, host = origin.partition("://")
            if sep and scheme.lower() in ("http", "https"):
                bare = host[4:] if host.lower().startswith("www.") else host
                candidates += [f"https://{bare}", f"https://www.{bare}"]
            for candidate in candidates:
                if candidate not in expanded:
                    expanded.append(candidate)
        return expanded
