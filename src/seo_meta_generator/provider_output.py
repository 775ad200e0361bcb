"""
Parsing of generation provider output.

Providers are asked for strict JSON but often wrap it in prose or code
fences. The parser takes the span from the first "{" to the last "}",
decodes it, and validates it against GenerationPayload. Anything that does
not parse is kept as raw text so the pipeline can fall back to templates.
"""

import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import ParsedGeneration

logger = logging.getLogger(__name__)

# Keys tried, in order, when a provider returns objects instead of strings
CANDIDATE_TEXT_KEYS = ("title", "meta", "description", "text")


class MalformedProviderOutputError(Exception):
    """Raised when provider output holds no decodable JSON object."""
    pass


def _candidate_text(item: Any) -> Optional[str]:
    if item is None:
        return None
    if isinstance(item, dict):
        for key in CANDIDATE_TEXT_KEYS:
            value = item.get(key)
            if isinstance(value, str):
                return value
        return None
    if isinstance(item, (list, tuple)):
        return None
    return str(item)


class GenerationPayload(BaseModel):
    """Schema for the JSON object a provider is asked to return."""

    model_config = ConfigDict(extra="ignore")

    main_keyword: str = Field("", description="Primary keyword chosen by the provider (1-4 words)")
    titles: list[str] = Field(default_factory=list, description="Up to 5 meta titles")
    metas: list[str] = Field(default_factory=list, description="Up to 3 meta descriptions")
    slug: str = Field("", description="Suggested URL slug")

    @field_validator("main_keyword", "slug", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        if isinstance(value, str):
            return value.strip()
        return ""

    @field_validator("titles", "metas", mode="before")
    @classmethod
    def coerce_candidates(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            return []
        candidates = []
        for item in value:
            text = _candidate_text(item)
            if text is not None:
                candidates.append(text)
        return candidates


def extract_json_block(text: Optional[str]) -> dict:
    """
    Decode the JSON object embedded in provider output.

    Args:
        text: Provider output.

    Returns:
        The decoded object.

    Raises:
        MalformedProviderOutputError: If there is no "{...}" span or it does not
            decode.
    """
    if not text or not isinstance(text, str):
        raise MalformedProviderOutputError("Provider output is empty")

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise MalformedProviderOutputError("No JSON object found in provider output")

    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise MalformedProviderOutputError(f"Invalid JSON in provider output: {e}") from e

    return data


def parse_generation(text: Optional[str]) -> ParsedGeneration:
    """
    Parse provider output into candidates, falling back to raw text.

    Args:
        text: Provider output.

    Returns:
        ParsedGeneration with is_structured=True when a JSON object was
        recovered, otherwise an unstructured result carrying the raw text.
    """
    try:
        data = extract_json_block(text)
        payload = GenerationPayload.model_validate(data)
    except MalformedProviderOutputError as e:
        logger.warning(f"Falling back to raw provider text: {e}")
        return ParsedGeneration.unstructured(text)
    except ValidationError as e:
        logger.warning(f"Provider JSON failed validation, falling back to raw text: {e}")
        return ParsedGeneration.unstructured(text)

    return ParsedGeneration(
        main_keyword=payload.main_keyword,
        titles=payload.titles,
        metas=payload.metas,
        slug=payload.slug,
        raw=text,
        is_structured=True,
    )
