"""
Page extraction for URL-based generation.

Fetches a web page with requests and pulls out the fields used to derive a
keyword and to prompt the generation provider:
- <title> text
- <meta name="description"> content
- first <h1> text
- a body snippet (trafilatura main-content extraction, falling back to the
  BeautifulSoup DOM text)
"""

import logging
import re
from typing import Optional
from urllib.parse import urlparse

import requests
import trafilatura
from bs4 import BeautifulSoup
from charset_normalizer import from_bytes

from .models import PageMeta
from .text_repair import collapse_whitespace, repair_text

logger = logging.getLogger(__name__)

# Default headers for web requests
DEFAULT_HEADERS = {
    "User-Agent": "MetaGenTool/1.0 (+https://github.com/seo-meta-generator)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

DEFAULT_SNIPPET_CHARS = 1200

ALLOWED_SCHEMES = ("http", "https")

_META_CHARSET = re.compile(r"<meta[^>]+charset=[\"']?([^\"'>\s;]+)", re.I)


class ContentExtractionError(Exception):
    """Raised when a page cannot be fetched or parsed."""
    pass


def validate_url(url: Optional[str]) -> str:
    """
    Check that url is an absolute http(s) URL.

    Returns:
        The stripped URL.

    Raises:
        ContentExtractionError: If the URL is missing, relative, or uses
            another scheme.
    """
    if not url or not isinstance(url, str):
        raise ContentExtractionError("Invalid URL: a full http:// or https:// URL is required")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.netloc:
        raise ContentExtractionError(f"Invalid URL: {url}")
    return url


def _decode_html(response: requests.Response) -> str:
    """
    Decode a response body to text.

    Detection order: Content-Type charset, <meta> charset in the first 8KB,
    charset_normalizer, then UTF-8 with replacement characters.
    """
    content_bytes = response.content

    content_type = response.headers.get("Content-Type", "")
    if "charset=" in content_type.lower():
        charset = content_type.lower().split("charset=")[-1].split(";")[0].strip().strip("\"'")
        try:
            return content_bytes.decode(charset)
        except (UnicodeDecodeError, LookupError) as e:
            logger.debug(f"Header charset {charset} failed: {e}")

    head_text = content_bytes[:8192].decode("ascii", errors="ignore")
    charset_match = _META_CHARSET.search(head_text)
    if charset_match:
        charset = charset_match.group(1)
        try:
            return content_bytes.decode(charset)
        except (UnicodeDecodeError, LookupError) as e:
            logger.debug(f"Meta charset {charset} failed: {e}")

    best = from_bytes(content_bytes).best()
    if best is not None:
        logger.debug(f"charset_normalizer detected: {best.encoding}")
        return str(best)

    return content_bytes.decode("utf-8", errors="replace")


def _body_text_fallback(soup: BeautifulSoup) -> str:
    """DOM text of <body> (or the whole document) without scripts and styles."""
    root = soup.body or soup
    for element in root.find_all(["script", "style", "noscript"]):
        element.decompose()
    return root.get_text(separator=" ")


def _extract_body_text(html: str, soup: BeautifulSoup) -> str:
    content = None
    try:
        content = trafilatura.extract(
            html,
            include_comments=False,
            include_tables=True,
            include_links=False,
            include_images=False,
            favor_recall=True,
        )
    except (ValueError, TypeError) as e:
        logger.warning(f"trafilatura extraction failed, using DOM text: {e}")

    if content and content.strip():
        return content

    logger.debug("trafilatura returned nothing, using DOM text")
    return _body_text_fallback(soup)


def extract_page_meta(
    html: str,
    url: Optional[str] = None,
    snippet_chars: int = DEFAULT_SNIPPET_CHARS,
) -> PageMeta:
    """
    Extract title, meta description, first H1 and a body snippet from HTML.

    Args:
        html: Page HTML.
        url: Source URL, recorded on the result.
        snippet_chars: Maximum body snippet length.

    Returns:
        PageMeta. Fields that are absent on the page are empty strings.
    """
    soup = BeautifulSoup(html or "", "lxml")

    title = ""
    if soup.title:
        title = soup.title.get_text()

    meta_description = ""
    meta_tag = soup.find("meta", attrs={"name": re.compile(r"^description$", re.I)})
    if meta_tag and meta_tag.get("content"):
        meta_description = meta_tag["content"]

    h1 = ""
    h1_tag = soup.find("h1")
    if h1_tag:
        h1 = h1_tag.get_text(separator=" ")

    body = collapse_whitespace(repair_text(_extract_body_text(html or "", soup)))

    page = PageMeta(
        title=collapse_whitespace(repair_text(title)),
        meta_description=collapse_whitespace(repair_text(meta_description)),
        h1=collapse_whitespace(repair_text(h1)),
        body_snippet=body[:snippet_chars].strip(),
        url=url,
    )
    logger.info(
        f"Extracted page fields: title={len(page.title)} chars, "
        f"h1={len(page.h1)} chars, snippet={len(page.body_snippet)} chars"
    )
    return page


def fetch_page(
    url: str,
    timeout: float = 30,
    snippet_chars: int = DEFAULT_SNIPPET_CHARS,
) -> PageMeta:
    """
    Fetch a URL and extract its meta fields.

    Args:
        url: Absolute http(s) URL.
        timeout: Request timeout in seconds.
        snippet_chars: Maximum body snippet length.

    Returns:
        PageMeta for the page.

    Raises:
        ContentExtractionError: If the URL is invalid or the fetch fails.
    """
    url = validate_url(url)

    try:
        response = requests.get(
            url,
            headers=DEFAULT_HEADERS,
            timeout=timeout,
            allow_redirects=True,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise ContentExtractionError(f"Failed to fetch URL: {e}") from e

    html = _decode_html(response)
    return extract_page_meta(html, url=url, snippet_chars=snippet_chars)
