"""
FastAPI wrapper for SEO Meta Generator - Vercel Serverless Function.

Exposes keyword- and URL-based meta generation, plus offline fitting and
slug helpers, as a REST API.
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from seo_meta_generator import __version__
from seo_meta_generator.config import ServiceSettings
from seo_meta_generator.content_sources import ContentExtractionError
from seo_meta_generator.keyword_deriver import NoKeywordDerivableError
from seo_meta_generator.llm_client import AllProvidersFailedError
from seo_meta_generator.models import ParsedGeneration
from seo_meta_generator.pipeline import generate_meta
from seo_meta_generator.service import InvalidRequestError, MetaService
from seo_meta_generator.slugs import DEFAULT_SLUG_MAX_LENGTH, slugify

logger = logging.getLogger(__name__)

settings = ServiceSettings.from_env()

app = FastAPI(
    title="SEO Meta Generator API",
    description="Generates SEO meta titles, meta descriptions and URL slugs from a keyword or a web page",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins() or ["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


class MetaGenRequest(BaseModel):
    """Request model for keyword-based generation."""
    keyword: Optional[str] = Field(None, description="Main keyword (at least 2 characters)")
    note: Optional[str] = Field("", description="Optional context for the generator")


class MetaFromUrlRequest(BaseModel):
    """Request model for URL-based generation."""
    url: Optional[str] = Field(None, description="Full http:// or https:// URL of the page")
    keyword: Optional[str] = Field(None, description="Main keyword; derived from the page when omitted")
    note: Optional[str] = Field("", description="Optional context for the generator")


class SlugifyRequest(BaseModel):
    """Request model for slug generation."""
    text: str = Field(..., description="Text to slugify")
    max_length: int = Field(DEFAULT_SLUG_MAX_LENGTH, ge=1, le=500, description="Maximum slug length")


class FitRequest(BaseModel):
    """Request model for offline fitting of existing candidates."""
    keyword: Optional[str] = Field(None, description="Main keyword; derived from the sources when omitted")
    titles: list[str] = Field(default_factory=list, description="Title candidates")
    metas: list[str] = Field(default_factory=list, description="Meta description candidates")
    slug: Optional[str] = Field(None, description="Slug candidate")
    title_source: Optional[str] = Field(None, description="Page title tag")
    heading_source: Optional[str] = Field(None, description="Page H1")
    description_source: Optional[str] = Field(None, description="Page meta description")
    body_source: Optional[str] = Field(None, description="Page body text")


class MetaResponse(BaseModel):
    """Fitted meta elements."""
    main_keyword: str
    titles: list[str]
    metas: list[str]
    slug: str


class SlugResponse(BaseModel):
    """Slug generation response."""
    slug: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


@lru_cache(maxsize=1)
def get_service() -> MetaService:
    """Shared service instance, built from environment settings."""
    return MetaService.from_settings(settings)


def _http_error(error: Exception) -> HTTPException:
    """Translate a domain error to an HTTPException."""
    if isinstance(error, (InvalidRequestError, NoKeywordDerivableError, ContentExtractionError)):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, AllProvidersFailedError):
        return HTTPException(status_code=502, detail=str(error))
    logger.exception("Unhandled error during meta generation")
    return HTTPException(status_code=500, detail=str(error) or "internal error")


@app.get("/", response_class=HTMLResponse)
def root():
    """Short landing message."""
    return HTMLResponse(
        content="<h1>SEO Meta Generator API</h1>"
        "<p>Use POST /api/meta-gen or POST /api/meta-from-url. "
        "Visit <a href='/docs'>/docs</a> for API documentation.</p>"
    )


@app.get("/api/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@app.post("/api/meta-gen")
def meta_gen(request: MetaGenRequest, service: MetaService = Depends(get_service)):
    """Generate titles, descriptions and a slug for a keyword."""
    try:
        return service.from_keyword(request.keyword, request.note)
    except Exception as e:
        raise _http_error(e) from e


@app.post("/api/meta-from-url")
def meta_from_url(request: MetaFromUrlRequest, service: MetaService = Depends(get_service)):
    """Fetch a page and generate titles, descriptions and a slug for it."""
    try:
        return service.from_url(request.url, keyword=request.keyword, note=request.note)
    except Exception as e:
        raise _http_error(e) from e


@app.post("/api/slugify", response_model=SlugResponse)
def slugify_text(request: SlugifyRequest):
    """Turn arbitrary text into a URL slug."""
    return SlugResponse(slug=slugify(request.text, request.max_length))


@app.post("/api/fit", response_model=MetaResponse)
def fit_candidates(request: FitRequest, service: MetaService = Depends(get_service)):
    """
    Fit existing candidates without calling a provider.

    Missing titles or descriptions are filled from templates. Length budgets
    are the ones the generation endpoints use.
    """
    generation = ParsedGeneration(
        titles=request.titles,
        metas=request.metas,
        slug=request.slug or "",
        is_structured=True,
    )
    try:
        result = generate_meta(
            request.keyword,
            title_source=request.title_source,
            heading_source=request.heading_source,
            description_source_text=request.description_source,
            body_source=request.body_source,
            generation=generation,
            config=service.config,
        )
    except NoKeywordDerivableError as e:
        raise _http_error(e) from e
    return MetaResponse(**result.to_dict())


@app.get("/api/info")
def api_info(service: MetaService = Depends(get_service)):
    """Get API information and usage instructions."""
    return {
        "name": "SEO Meta Generator API",
        "version": __version__,
        "description": "SEO meta title, description and slug generator",
        "endpoints": {
            "GET /": "Landing page",
            "GET /api/health": "Health check",
            "POST /api/meta-gen": "Generate meta from a keyword (+ optional note)",
            "POST /api/meta-from-url": "Generate meta from a page URL (+ optional keyword and note)",
            "POST /api/slugify": "Slugify text",
            "POST /api/fit": "Fit supplied titles/descriptions to length and keyword rules",
            "GET /api/info": "This endpoint",
        },
        "providers": service.providers.names,
        "documentation": "/docs",
        "openapi": "/openapi.json",
    }
