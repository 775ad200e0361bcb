"""
URL slug generation.

Produces lowercase, hyphen-separated identifiers made only of [a-z0-9-]:
- Accented letters are reduced to their base letter ("é" -> "e")
- Every other run of unsafe characters becomes a single hyphen
- Length is capped without leaving a trailing hyphen
"""

import re
import unicodedata
from typing import Optional

# Runs of characters that are not allowed in a slug
UNSAFE_RUN_PATTERN = re.compile(r"[^a-z0-9]+")

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

DEFAULT_SLUG_MAX_LENGTH = 80


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def slugify(text: Optional[str], max_length: int = DEFAULT_SLUG_MAX_LENGTH) -> str:
    """
    Convert text to a URL-safe slug.

    Args:
        text: Text to convert.
        max_length: Maximum slug length.

    Returns:
        Slug matching ^[a-z0-9]+(-[a-z0-9]+)*$, or "" when nothing usable
        remains (callers treat that as "no slug", not as an error).

    Examples:
        >>> slugify("Café Déjà Vu!!")
        'cafe-deja-vu'

        >>> slugify("  Hello,   World  ")
        'hello-world'
    """
    if not text:
        return ""

    slug = _strip_diacritics(text.lower().strip())
    # NFKD can surface uppercase compatibility forms, lower again
    slug = slug.lower()
    slug = UNSAFE_RUN_PATTERN.sub("-", slug).strip("-")

    if len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")

    return slug


def is_valid_slug(slug: str) -> bool:
    """Check that slug only holds hyphen-separated [a-z0-9] groups."""
    return bool(SLUG_PATTERN.match(slug))


def build_slug(
    provider_slug: Optional[str],
    keyword: str,
    title: Optional[str] = None,
    h1: Optional[str] = None,
    max_length: int = DEFAULT_SLUG_MAX_LENGTH,
) -> str:
    """
    Pick the slug for a page.

    A slug suggested by the generation provider is cleaned and kept when it
    survives slugification; otherwise the slug is built from the keyword
    followed by the page title (or H1).

    Args:
        provider_slug: Slug proposed upstream, may be empty or messy.
        keyword: Main keyword.
        title: Page title tag text.
        h1: Page H1 text, used when there is no title.
        max_length: Maximum slug length.

    Returns:
        Slug string, possibly empty.
    """
    if provider_slug:
        slug = slugify(provider_slug, max_length)
        if slug:
            return slug

    source = f"{keyword or ''} {title or h1 or ''}"
    return slugify(source, max_length)
