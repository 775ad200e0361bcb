"""
Meta generation pipeline.

Turns a keyword (or page fields to derive one from) plus optional provider
candidates into fitted meta elements:

    Keyword Deriver -> (Template Fallback) -> Title / Description Fitter -> Slug Builder

Every function here is pure: no I/O, no shared state.
"""

import logging
from typing import Iterable, Optional

from .config import MetaConfig
from .description_fitter import fit_description
from .keyword_deriver import resolve_main_keyword
from .models import (
    MetaResult,
    PageMeta,
    ParsedGeneration,
    TextCandidate,
    TextRole,
)
from .slugs import build_slug, slugify
from .templates import (
    description_source,
    fallback_descriptions,
    fallback_titles,
    title_base,
)
from .title_fitter import fit_title

logger = logging.getLogger(__name__)


def usable_candidates(candidates: Optional[Iterable], limit: int) -> list[str]:
    """
    Keep the first `limit` non-blank candidates.

    Non-string scalars are converted with str(); None and blank strings are
    dropped.
    """
    usable = []
    for candidate in candidates or []:
        if candidate is None:
            continue
        text = candidate if isinstance(candidate, str) else str(candidate)
        if text.strip():
            usable.append(text)
        if len(usable) >= limit:
            break
    return usable


def fit_candidate(
    candidate: TextCandidate,
    keyword: str,
    config: Optional[MetaConfig] = None,
) -> TextCandidate:
    """
    Run a candidate through the fitter that matches its role.

    Args:
        candidate: Text plus role.
        keyword: Main keyword.
        config: Length budgets. Defaults to MetaConfig().

    Returns:
        New candidate with fitted text. Keyword candidates are returned with
        surrounding whitespace removed.
    """
    config = config or MetaConfig()

    if candidate.role is TextRole.TITLE:
        return candidate.with_text(
            fit_title(candidate.text, keyword, config.title_max_length)
        )
    if candidate.role is TextRole.DESCRIPTION:
        return candidate.with_text(
            fit_description(
                candidate.text,
                keyword,
                target_length=config.description_target_length,
                min_length=config.description_min_length,
                max_length=config.description_max_length,
                filler=config.description_filler,
            )
        )
    if candidate.role is TextRole.SLUG_SOURCE:
        return candidate.with_text(slugify(candidate.text, config.slug_max_length))
    return candidate.with_text(candidate.text.strip())


def generate_meta(
    keyword: Optional[str],
    title_source: Optional[str] = None,
    heading_source: Optional[str] = None,
    description_source_text: Optional[str] = None,
    body_source: Optional[str] = None,
    generation: Optional[ParsedGeneration] = None,
    config: Optional[MetaConfig] = None,
) -> MetaResult:
    """
    Produce fitted titles, descriptions and a slug.

    Args:
        keyword: Supplied main keyword; derived from the sources when blank.
        title_source: Page title tag text.
        heading_source: Page H1 text.
        description_source_text: Page meta description.
        body_source: Page body snippet.
        generation: Candidates recovered from a provider, if any.
        config: Length budgets. Defaults to MetaConfig().

    Returns:
        MetaResult with up to config.max_titles titles and config.max_metas
        descriptions, each satisfying its length and keyword constraints.

    Raises:
        NoKeywordDerivableError: If no keyword was supplied and none can be
            derived from the sources.
    """
    config = config or MetaConfig()
    generation = generation or ParsedGeneration()
    page = PageMeta(
        title=title_source,
        meta_description=description_source_text,
        h1=heading_source,
        body_snippet=body_source,
    )

    main_keyword = resolve_main_keyword(keyword, page, config.stop_words)

    titles = usable_candidates(generation.titles, config.max_titles)
    used_fallback_titles = not titles
    if used_fallback_titles:
        logger.info("No usable provider titles, using templates")
        titles = fallback_titles(main_keyword, title_base(page, main_keyword))

    metas = usable_candidates(generation.metas, config.max_metas)
    used_fallback_metas = not metas
    if used_fallback_metas:
        logger.info("No usable provider descriptions, using templates")
        metas = fallback_descriptions(main_keyword, description_source(page))

    fitted_titles = [
        fit_candidate(TextCandidate(title, TextRole.TITLE), main_keyword, config).text
        for title in titles
    ]
    fitted_metas = [
        fit_candidate(TextCandidate(meta, TextRole.DESCRIPTION), main_keyword, config).text
        for meta in metas
    ]

    slug = build_slug(
        generation.slug,
        main_keyword,
        title=title_source,
        h1=heading_source,
        max_length=config.slug_max_length,
    )

    return MetaResult(
        main_keyword=main_keyword,
        titles=fitted_titles,
        metas=fitted_metas,
        slug=slug,
        used_fallback_titles=used_fallback_titles,
        used_fallback_metas=used_fallback_metas,
    )


def generate_meta_for_page(
    page: PageMeta,
    keyword: Optional[str] = None,
    generation: Optional[ParsedGeneration] = None,
    config: Optional[MetaConfig] = None,
) -> MetaResult:
    """Convenience wrapper around generate_meta for an extracted page."""
    return generate_meta(
        keyword,
        title_source=page.title,
        heading_source=page.h1,
        description_source_text=page.meta_description,
        body_source=page.body_snippet,
        generation=generation,
        config=config,
    )
