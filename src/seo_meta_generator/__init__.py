"""
SEO Meta Generator

Generates search-engine meta elements for a keyword or a web page:
- Meta titles (at most 60 characters, main keyword kept)
- Meta descriptions (140-160 characters, main keyword kept)
- URL slugs
"""

__version__ = "1.0.0"
__author__ = "SEO Meta Generator Team"

from .config import MetaConfig, ServiceSettings

from .models import (
    TextRole,
    TextCandidate,
    ConstraintSpec,
    PageMeta,
    ParsedGeneration,
    MetaResult,
)

from .keyword_deriver import (
    NoKeywordDerivableError,
    derive_keyword,
    derive_keyword_from_page,
    resolve_main_keyword,
)

from .title_fitter import fit_title
from .description_fitter import fit_description
from .slugs import slugify, build_slug, is_valid_slug

from .templates import fallback_titles, fallback_descriptions

from .provider_output import (
    MalformedProviderOutputError,
    parse_generation,
)

from .pipeline import generate_meta, generate_meta_for_page, fit_candidate

from .content_sources import ContentExtractionError, fetch_page, extract_page_meta

from .llm_client import (
    LLMClientError,
    AllProvidersFailedError,
    ProviderChain,
    create_provider_chain,
)

from .cache import MemoryCache, RedisCache, NullCache, create_cache

from .service import InvalidRequestError, MetaService

__all__ = [
    "__version__",
    # Configuration
    "MetaConfig",
    "ServiceSettings",
    # Models
    "TextRole",
    "TextCandidate",
    "ConstraintSpec",
    "PageMeta",
    "ParsedGeneration",
    "MetaResult",
    # Core transforms
    "derive_keyword",
    "derive_keyword_from_page",
    "resolve_main_keyword",
    "fit_title",
    "fit_description",
    "slugify",
    "build_slug",
    "is_valid_slug",
    "fallback_titles",
    "fallback_descriptions",
    "parse_generation",
    "generate_meta",
    "generate_meta_for_page",
    "fit_candidate",
    # Service layer
    "fetch_page",
    "extract_page_meta",
    "ProviderChain",
    "create_provider_chain",
    "MemoryCache",
    "RedisCache",
    "NullCache",
    "create_cache",
    "MetaService",
    # Errors
    "NoKeywordDerivableError",
    "MalformedProviderOutputError",
    "ContentExtractionError",
    "LLMClientError",
    "AllProvidersFailedError",
    "InvalidRequestError",
]
