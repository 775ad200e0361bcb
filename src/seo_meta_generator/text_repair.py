# -*- coding: utf-8 -*-
"""
Text cleanup for scraped and generated fragments.

Handles:
- HTML entity unescaping
- Mojibake (UTF-8 read as Latin-1 / cp1252) via ftfy
- Invisible / exotic space characters
- Whitespace collapsing
- Unicode normalization (NFC)
"""

import html
import re
import unicodedata

import ftfy

# Space variants mapped to a plain space, zero-width characters removed
SPACE_MAP = {
    '\u00a0': ' ',   # Non-breaking space
    '\u2002': ' ',   # En space
    '\u2003': ' ',   # Em space
    '\u2009': ' ',   # Thin space
    '\u200a': ' ',   # Hair space
    '\u2028': ' ',   # Line separator
    '\u2029': ' ',   # Paragraph separator
    '\u200b': '',    # Zero-width space
    '\u200c': '',    # Zero-width non-joiner
    '\u200d': '',    # Zero-width joiner
    '\u2060': '',    # Word joiner
    '\ufeff': '',    # BOM
}

_WHITESPACE_RUN = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """
    Collapse every whitespace run (spaces, tabs, newlines) to one space and trim.

    Args:
        text: Text to collapse. None is treated as empty.

    Returns:
        Single-line text.
    """
    if not text:
        return ""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def normalize_spaces(text: str) -> str:
    """Replace exotic space characters and drop zero-width characters."""
    if not text:
        return ""
    result = text
    for char, replacement in SPACE_MAP.items():
        result = result.replace(char, replacement)
    return result


def repair_text(text: str) -> str:
    """
    Full cleanup pipeline for a single-line fragment.

    Applies, in order:
    1. HTML unescape (so "&amp;" from a title tag becomes "&")
    2. Mojibake repair (ftfy, quotes left curly)
    3. Space normalization
    4. Whitespace collapsing
    5. Unicode normalization (NFC)

    Args:
        text: Raw fragment.

    Returns:
        Cleaned fragment ("" for empty input).
    """
    if not text:
        return ""

    result = html.unescape(text)
    result = ftfy.fix_text(result, uncurl_quotes=False)
    result = normalize_spaces(result)
    result = collapse_whitespace(result)
    return unicodedata.normalize("NFC", result)
