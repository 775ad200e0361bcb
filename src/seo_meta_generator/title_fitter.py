"""
Meta title fitting.

Forces a title under its character budget while guaranteeing that the main
keyword survives:

1. An empty title is seeded with the keyword.
2. A missing keyword is prepended after an em dash separator.
3. Titles within budget are returned unchanged.
4. If the keyword ends inside the budget, the title is simply cut.
5. Otherwise the keyword is moved to the front ("<keyword> - <rest>") and
   the result is cut.
6. Without a keyword, the title is cut at the last word boundary past
   position 35 (or hard-cut if there is none).
"""

import logging
from typing import Optional

from .models import find_phrase, contains_phrase
from .text_repair import collapse_whitespace

logger = logging.getLogger(__name__)

DEFAULT_TITLE_MAX_LENGTH = 60

# Separator used when a missing keyword is prepended
PREPEND_SEPARATOR = " \u2014 "

# Separator used when the keyword has to be moved to the front
RELOCATE_SEPARATOR = " - "

# A word-boundary cut is only used when the boundary lies past this position
WORD_BOUNDARY_MIN_POSITION = 35

# Characters that should not be left hanging at the end of a cut title
DANGLING_CHARS = " -\u2013\u2014|:,;"


def _strip_dangling(text: str, keyword: str) -> str:
    """Drop separators left at the end of a cut, unless that would damage the keyword."""
    stripped = text.rstrip(DANGLING_CHARS)
    if stripped and (not keyword or contains_phrase(stripped, keyword)):
        return stripped
    return text.rstrip()


def _truncate_at_word(text: str, max_length: int) -> str:
    cut = text[:max_length]
    last_space = cut.rfind(" ")
    if last_space > WORD_BOUNDARY_MIN_POSITION:
        cut = cut[:last_space]
    return cut.strip()


def _move_keyword_to_front(title: str, keyword: str, start: int, end: int, max_length: int) -> str:
    rest = collapse_whitespace(title[:start] + " " + title[end:]).strip(DANGLING_CHARS)
    rebuilt = f"{keyword}{RELOCATE_SEPARATOR}{rest}" if rest else keyword
    return _strip_dangling(rebuilt[:max_length].strip(), keyword)


def fit_title(
    title: Optional[str],
    keyword: Optional[str],
    max_length: int = DEFAULT_TITLE_MAX_LENGTH,
) -> str:
    """
    Fit a title to max_length characters, keeping the keyword.

    Args:
        title: Raw title (provider candidate or template output).
        keyword: Main keyword. Empty disables keyword preservation.
        max_length: Maximum title length (inclusive).

    Returns:
        Title of at most max_length characters that contains keyword
        (case-insensitive) whenever keyword is non-empty. A keyword longer
        than max_length is returned alone, hard-truncated.

    Examples:
        >>> fit_title("", "seo tool")
        'seo tool'
    """
    keyword = (keyword or "").strip()
    title = (title or "").strip() or keyword

    if not keyword:
        if len(title) <= max_length:
            return title
        logger.debug(f"Title over {max_length} chars without keyword, cutting at word boundary")
        return _strip_dangling(_truncate_at_word(title, max_length), "")

    match = find_phrase(title, keyword)
    if match is None:
        title = f"{keyword}{PREPEND_SEPARATOR}{title}"
        match = find_phrase(title, keyword)

    if len(title) <= max_length:
        return title

    if len(keyword) > max_length:
        logger.debug(f"Keyword longer than {max_length} chars, returning it truncated")
        return keyword[:max_length].rstrip()

    if match.end() <= max_length:
        return _strip_dangling(title[:max_length].strip(), keyword)

    logger.debug("Truncation would cut the keyword, moving it to the front")
    return _move_keyword_to_front(title, keyword, match.start(), match.end(), max_length)
