"""
Template-based fallback candidates.

Used only when the generation provider returns no usable titles or
descriptions. The templates do not guarantee any constraint on their own;
every candidate produced here still goes through the title/description
fitters.
"""

from typing import Optional

from .models import PageMeta
from .text_repair import collapse_whitespace

TITLE_TEMPLATES: tuple[str, ...] = (
    "{keyword} \u2013 {base}",
    "{keyword}: Key Tips & Best Practices",
    "How to {keyword} \u2013 Complete Guide",
    "Top {keyword} Strategies",
    "Best {keyword} Resources",
)

DESCRIPTION_TEMPLATES: tuple[str, ...] = (
    "{short} Improve results with {keyword}. Learn key tips and best practices for better performance.",
    "{short} Discover how {keyword} can boost your outcomes. Get step-by-step guidance and best actions.",
    "{short} Use practical {keyword} strategies to increase effectiveness and ROI. Start today.",
)

# Templates are pre-clipped to these lengths before fitting
TITLE_CLIP_LENGTH = 60
DESCRIPTION_CLIP_LENGTH = 158

# Characters of source text carried into each description template
SOURCE_EXCERPT_LENGTH = 120


def title_base(page: Optional[PageMeta], keyword: str) -> str:
    """Best title-like text: title tag, then H1, then the first body sentence, then the keyword."""
    if page:
        for candidate in (page.title, page.h1, (page.body_snippet or "").split(".")[0]):
            candidate = collapse_whitespace(candidate)
            if candidate:
                return candidate
    return keyword


def description_source(page: Optional[PageMeta]) -> str:
    """Best description-like text: meta description, then the body snippet."""
    if not page:
        return ""
    return collapse_whitespace(page.meta_description or page.body_snippet or "")


def fallback_titles(keyword: str, base: str) -> list[str]:
    """
    Build the five template titles.

    Args:
        keyword: Main keyword.
        base: Title-like source text (see title_base).

    Returns:
        Exactly len(TITLE_TEMPLATES) candidates.
    """
    return [
        template.format(keyword=keyword, base=base)[:TITLE_CLIP_LENGTH]
        for template in TITLE_TEMPLATES
    ]


def fallback_descriptions(keyword: str, source: str) -> list[str]:
    """
    Build the three template descriptions.

    Args:
        keyword: Main keyword.
        source: Description-like source text (see description_source).

    Returns:
        Exactly len(DESCRIPTION_TEMPLATES) candidates.
    """
    short = collapse_whitespace(source)[:SOURCE_EXCERPT_LENGTH]
    return [
        template.format(short=short, keyword=keyword).strip()[:DESCRIPTION_CLIP_LENGTH]
        for template in DESCRIPTION_TEMPLATES
    ]
