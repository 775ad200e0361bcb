"""
Main keyword derivation from page fields.

When no keyword is supplied, a short phrase (1-3 words) is picked from the
first non-empty page field in priority order: H1, title tag, meta
description, body snippet.
"""

import logging
import re
from typing import Iterable, Optional

from .config import DEFAULT_STOP_WORDS
from .models import PageMeta

logger = logging.getLogger(__name__)

# Anything that is not a word character, whitespace or hyphen
PUNCTUATION_PATTERN = re.compile(r"[^\w\s-]")

# Words considered after stop-word filtering
MAX_CANDIDATE_WORDS = 8

# Words joined into the final phrase
MAX_PHRASE_WORDS = 3


class NoKeywordDerivableError(Exception):
    """Raised when no keyword was supplied and none can be derived from the page."""
    pass


def _candidate_words(source: str, stop_words: Iterable[str]) -> list[str]:
    stop = set(stop_words)
    cleaned = PUNCTUATION_PATTERN.sub(" ", source).lower()
    # A bare "-" between words is a separator, not a word
    words = [word for word in cleaned.split() if word.strip("-") and word not in stop]
    return words[:MAX_CANDIDATE_WORDS]


def _title_prefix(title: Optional[str]) -> str:
    """Leading segment of a title tag, e.g. "Acme Hosting | Reviews" -> "Acme Hosting"."""
    return (title or "").split("|")[0].split("-")[0].strip()


def derive_keyword(
    h1: Optional[str] = None,
    title: Optional[str] = None,
    meta: Optional[str] = None,
    body: Optional[str] = None,
    stop_words: Iterable[str] = DEFAULT_STOP_WORDS,
) -> str:
    """
    Derive a short keyword phrase from page fields.

    Args:
        h1: First heading text (highest priority).
        title: Title tag text.
        meta: Meta description content.
        body: Body text snippet (lowest priority).
        stop_words: Words that never become part of the phrase.

    Returns:
        A phrase of 1-3 lowercase words, the title prefix when every word of
        the source is a stop word, or "" when nothing is usable.

    Examples:
        >>> derive_keyword(title="Best WordPress Hosting | Reviews")
        'wordpress hosting reviews'
    """
    source = next((field for field in (h1, title, meta, body) if field), "")

    words = _candidate_words(source, stop_words)
    if not words:
        fallback = _title_prefix(title)
        logger.debug(f"No usable words in '{source[:60]}', falling back to title prefix '{fallback}'")
        return fallback

    return " ".join(words[:min(MAX_PHRASE_WORDS, len(words))])


def derive_keyword_from_page(
    page: PageMeta,
    stop_words: Iterable[str] = DEFAULT_STOP_WORDS,
) -> str:
    """Derive a keyword from an extracted page."""
    return derive_keyword(
        h1=page.h1,
        title=page.title,
        meta=page.meta_description,
        body=page.body_snippet,
        stop_words=stop_words,
    )


def resolve_main_keyword(
    provided: Optional[str],
    page: Optional[PageMeta] = None,
    stop_words: Iterable[str] = DEFAULT_STOP_WORDS,
) -> str:
    """
    Choose the main keyword: the supplied one if present, else a derived one.

    Args:
        provided: Keyword given by the caller, may be None or blank.
        page: Page fields to derive from.
        stop_words: Stop words for derivation.

    Returns:
        Non-empty keyword.

    Raises:
        NoKeywordDerivableError: If no keyword was supplied and the page
            yields none.
    """
    if provided and provided.strip():
        return provided.strip()

    derived = derive_keyword_from_page(page, stop_words).strip() if page else ""
    if not derived:
        raise NoKeywordDerivableError(
            "Could not derive a main keyword from the page. Please provide a keyword."
        )

    logger.info(f"Derived main keyword: '{derived}'")
    return derived
