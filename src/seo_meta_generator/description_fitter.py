"""
Meta description fitting.

Forces a description into a length window (140-160 characters by default)
while guaranteeing that the main keyword is present. Priorities when both
cannot be met: keyword inclusion first, then the upper bound, then the lower
bound.
"""

import logging
from typing import Iterable, Optional

from .config import DEFAULT_DESCRIPTION_FILLER
from .models import find_phrase
from .text_repair import collapse_whitespace

logger = logging.getLogger(__name__)

DEFAULT_TARGET_LENGTH = 158
DEFAULT_MIN_LENGTH = 140
DEFAULT_MAX_LENGTH = 160

# Separator used when a missing keyword is appended
APPEND_SEPARATOR = " \u2014 "

# A word-boundary cut of an over-long description must land past this share
# of the maximum length
WORD_BOUNDARY_RATIO = 0.6

DANGLING_CHARS = " -\u2013\u2014|:,;"

SENTENCE_ENDINGS = (".", "!", "?")


def _keyword_end(text: str, keyword: str) -> int:
    match = find_phrase(text, keyword)
    return match.end() if match else 0


def _strip_dangling(text: str, keep: int) -> str:
    """Drop trailing separators without cutting into the first `keep` characters."""
    stripped = text.rstrip(DANGLING_CHARS)
    return stripped if len(stripped) >= keep else text.rstrip()


def _shorten(text: str, keyword: str, max_length: int) -> str:
    """
    Cut text to max_length, preferring a word boundary and keeping the keyword.

    When the keyword lies beyond the cut, it is removed from its position and
    re-appended after the shortened remainder.
    """
    if len(text) <= max_length:
        return text

    match = find_phrase(text, keyword) if keyword else None

    if match and match.end() > max_length:
        found = match.group(0)
        suffix = f"{APPEND_SEPARATOR}{found}"
        budget = max_length - len(suffix)
        if budget <= 0:
            return found[:max_length].rstrip()
        rest = collapse_whitespace(text[:match.start()] + " " + text[match.end():])
        head = _shorten(rest, "", budget).rstrip(DANGLING_CHARS)
        logger.debug("Keyword fell past the description budget, re-appended after the cut")
        return f"{head}{suffix}" if head else found

    keep = match.end() if match else 0
    cut = text[:max_length]
    last_space = cut.rfind(" ")
    if last_space > int(max_length * WORD_BOUNDARY_RATIO) and last_space >= keep:
        cut = cut[:last_space]
    return _strip_dangling(cut.strip(), keep)


def _filler_sentences(filler: Iterable[str], keyword: str) -> list[str]:
    sentences = []
    for sentence in filler:
        sentence = collapse_whitespace(sentence.replace("{keyword}", keyword))
        if sentence:
            sentences.append(sentence)
    return sentences


def _pad(text: str, keyword: str, min_length: int, filler: Iterable[str]) -> str:
    """Append filler sentences, cycling through them, until min_length is reached."""
    sentences = _filler_sentences(filler, keyword)
    if not sentences:
        return text

    result = text
    index = 0
    while len(result) < min_length:
        if result and not result.endswith(SENTENCE_ENDINGS):
            result += "."
        sentence = sentences[index % len(sentences)]
        result = f"{result} {sentence}" if result else sentence
        index += 1
    return result


def _cut_to_window(
    text: str,
    keyword: str,
    min_length: int,
    target_length: int,
    max_length: int,
) -> str:
    """
    Cut padded text back under max_length.

    Picks the word boundary inside [min_length, max_length] closest to
    target_length, falling back to a hard cut at max_length.
    """
    if len(text) <= max_length:
        return text

    keep = _keyword_end(text, keyword) if keyword else 0
    boundaries = [
        index for index, char in enumerate(text[:max_length + 1])
        if char == " " and index >= max(min_length, keep)
    ]
    if boundaries:
        best = min(boundaries, key=lambda index: (abs(index - target_length), index))
        return text[:best].rstrip()
    return text[:max_length].rstrip()


def fit_description(
    description: Optional[str],
    keyword: Optional[str],
    target_length: int = DEFAULT_TARGET_LENGTH,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_length: int = DEFAULT_MAX_LENGTH,
    filler: Optional[Iterable[str]] = None,
) -> str:
    """
    Fit a meta description into [min_length, max_length], keeping the keyword.

    Args:
        description: Raw description.
        keyword: Main keyword. Empty disables keyword handling.
        target_length: Preferred length when padded text is cut back.
        min_length: Minimum description length (inclusive).
        max_length: Maximum description length (inclusive).
        filler: Sentences appended to short descriptions, "{keyword}" is
            interpolated. Defaults to DEFAULT_DESCRIPTION_FILLER.

    Returns:
        Description within the window and containing keyword. Only an empty
        filler or a keyword longer than max_length can leave it short of the
        window.
    """
    keyword = (keyword or "").strip()
    filler = DEFAULT_DESCRIPTION_FILLER if filler is None else filler

    text = collapse_whitespace(description)

    if keyword and find_phrase(text, keyword) is None:
        text = f"{text}{APPEND_SEPARATOR}{keyword}" if text else keyword

    if len(text) > max_length:
        text = _shorten(text, keyword, max_length)

    if len(text) < min_length:
        logger.debug(f"Description at {len(text)} chars, padding to {min_length}")
        text = _pad(text, keyword, min_length, filler)
        text = _cut_to_window(text, keyword, min_length, target_length, max_length)

    if len(text) > max_length:
        text = text[:max_length].rstrip()

    return text
