"""
Data models for SEO Meta Generator.

This module defines the core data structures passed between the fitters,
the pipeline and the service layer.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .config import MetaConfig


class TextRole(Enum):
    """Semantic role of a text fragment."""
    TITLE = "title"
    DESCRIPTION = "description"
    KEYWORD = "keyword"
    SLUG_SOURCE = "slug-source"


@dataclass(frozen=True)
class TextCandidate:
    """A text fragment together with its role. Transforms return new instances."""
    text: str
    role: TextRole

    def with_text(self, text: str) -> "TextCandidate":
        """Return a copy of this candidate holding different text."""
        return replace(self, text=text)

    def __len__(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class ConstraintSpec:
    """
    Length and inclusion rule a piece of generated text must satisfy.

    Length bounds are inclusive. must_contain is matched case-insensitively.
    """
    max_length: Optional[int] = None
    min_length: Optional[int] = None
    must_contain: Optional[str] = None

    def is_satisfied_by(self, text: str) -> bool:
        """Check whether text meets every bound."""
        if self.max_length is not None and len(text) > self.max_length:
            return False
        if self.min_length is not None and len(text) < self.min_length:
            return False
        if self.must_contain and not contains_phrase(text, self.must_contain):
            return False
        return True

    def violations(self, text: str) -> list[str]:
        """List human-readable reasons text fails these constraints."""
        problems = []
        if self.max_length is not None and len(text) > self.max_length:
            problems.append(f"length {len(text)} exceeds maximum {self.max_length}")
        if self.min_length is not None and len(text) < self.min_length:
            problems.append(f"length {len(text)} is below minimum {self.min_length}")
        if self.must_contain and not contains_phrase(text, self.must_contain):
            problems.append(f"missing required phrase '{self.must_contain}'")
        return problems

    @classmethod
    def for_title(cls, keyword: str, config: Optional["MetaConfig"] = None) -> "ConstraintSpec":
        max_length = config.title_max_length if config else 60
        return cls(max_length=max_length, must_contain=keyword or None)

    @classmethod
    def for_description(
        cls, keyword: str, config: Optional["MetaConfig"] = None
    ) -> "ConstraintSpec":
        if config:
            return cls(
                min_length=config.description_min_length,
                max_length=config.description_max_length,
                must_contain=keyword or None,
            )
        return cls(min_length=140, max_length=160, must_contain=keyword or None)

    @classmethod
    def for_slug(cls, config: Optional["MetaConfig"] = None) -> "ConstraintSpec":
        return cls(max_length=config.slug_max_length if config else 80)


def find_phrase(text: str, phrase: str) -> Optional[re.Match]:
    """
    Locate phrase in text, ignoring case.

    Offsets of the returned match refer to the original text, so they stay
    valid even where lowercasing would change string length.
    """
    if not text or not phrase:
        return None
    return re.search(re.escape(phrase), text, re.IGNORECASE)


def contains_phrase(text: str, phrase: str) -> bool:
    """Case-insensitive substring check."""
    return find_phrase(text, phrase) is not None


@dataclass
class PageMeta:
    """Fields extracted from a web page."""
    title: Optional[str] = None
    meta_description: Optional[str] = None
    h1: Optional[str] = None
    body_snippet: Optional[str] = None
    url: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """Check if no text field carries content."""
        return not any(
            (value or "").strip()
            for value in (self.title, self.meta_description, self.h1, self.body_snippet)
        )

    def to_dict(self) -> dict:
        """Serialize using the field names of the original API response."""
        return {
            "titleTag": self.title or "",
            "h1": self.h1 or "",
            "metaDesc": self.meta_description or "",
            "snippet": self.body_snippet or "",
        }


@dataclass
class ParsedGeneration:
    """Candidates recovered from a generation provider's output."""
    main_keyword: str = ""
    titles: list[str] = field(default_factory=list)
    metas: list[str] = field(default_factory=list)
    slug: str = ""
    raw: Optional[str] = None
    is_structured: bool = False

    @classmethod
    def unstructured(cls, raw: Optional[str]) -> "ParsedGeneration":
        """Wrap provider text that held no usable JSON object."""
        return cls(raw=raw, is_structured=False)


@dataclass
class MetaResult:
    """Fitted meta elements for one page or keyword."""
    main_keyword: str
    titles: list[str] = field(default_factory=list)
    metas: list[str] = field(default_factory=list)
    slug: str = ""
    used_fallback_titles: bool = False
    used_fallback_metas: bool = False

    def to_dict(self) -> dict:
        """Serialize to the public response shape."""
        return {
            "main_keyword": self.main_keyword,
            "titles": list(self.titles),
            "metas": list(self.metas),
            "slug": self.slug,
        }
