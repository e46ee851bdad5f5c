"""
Live SERP Source

Fetches a Google results page with httpx and extracts organic result links:
- /url?q= redirect links and direct outbound links, in document order
- search-engine-internal, video and cache links dropped
- one result per hostname, positions 1..100

Titles come from the <h3> inside the link or its result container.
Snippets are not extracted.
"""

import logging
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

import httpx
from bs4 import BeautifulSoup, Tag

from solar_rank.utils.domain_filter import hostname_from_url

from .base import MAX_RESULTS, SearchResult, SerpSource, SerpSourceError

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.google.com/search"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Hostname fragments that are never organic results
INTERNAL_HOST_FRAGMENTS = (
    "google.",
    "youtube.com",
    "webcache.",
    "policies.google.",
)


def _resolve_href(href: str) -> Optional[str]:
    """Outbound URL behind a result href, or None for internal links."""
    if href.startswith("/url?"):
        params = parse_qs(urlparse(href).query)
        target = (params.get("q") or params.get("url") or [None])[0]
        if not target or not target.startswith("http"):
            return None
        return target
    if href.startswith("http://") or href.startswith("https://"):
        return href
    return None


def _is_internal(hostname: str) -> bool:
    return any(fragment in hostname for fragment in INTERNAL_HOST_FRAGMENTS)


def _extract_title(link: Tag) -> str:
    heading = link.find("h3")
    if heading is None and link.parent is not None:
        heading = link.parent.find("h3")
    if heading is None:
        return ""
    return heading.get_text(" ", strip=True)


def parse_organic_results(page: str, max_results: int = MAX_RESULTS) -> List[SearchResult]:
    """
    Extract organic results from a results page.

    Args:
        page: Raw HTML
        max_results: Cap on returned results

    Returns:
        Results in document order with 1-based positions
    """
    results: List[SearchResult] = []
    seen_hosts = set()

    soup = BeautifulSoup(page or "", "html.parser")
    for link in soup.find_all("a", href=True):
        url = _resolve_href(link["href"])
        if not url:
            continue

        hostname = hostname_from_url(url)
        if not hostname or _is_internal(hostname) or hostname in seen_hosts:
            continue
        seen_hosts.add(hostname)

        results.append(SearchResult(
            title=_extract_title(link) or hostname,
            url=url,
            position=len(results) + 1,
        ))
        if len(results) >= max_results:
            break

    return results


class LiveSerpSource(SerpSource):
    """
    Scrapes live search results.

    Usage:
        async with LiveSerpSource(timeout=20.0) as serp:
            results = await serp.search("solar installation", "Austin, TX")
    """

    mode = "live"

    def __init__(
        self,
        timeout: float = 20.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers={
                "User-Agent": USER_AGENT,
                "Accept-Language": "en-US,en;q=0.9",
            },
        )

    async def search(self, query: str, location: Optional[str] = None) -> List[SearchResult]:
        full_query = f"{query} {location}" if location and location.lower() not in query.lower() else query
        params = {
            "q": full_query,
            "num": MAX_RESULTS,
            "hl": "en",
            "gl": "us",
            "pws": "0",
        }

        try:
            response = await self._client.get(SEARCH_URL, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"SERP request failed for '{full_query}': HTTP {e.response.status_code}")
            raise SerpSourceError(
                f"HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                query=full_query,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"SERP request error for '{full_query}': {e}")
            raise SerpSourceError(str(e) or e.__class__.__name__, query=full_query) from e

        try:
            results = parse_organic_results(response.text)
        except Exception as e:
            logger.warning(f"SERP parse failed for '{full_query}': {e}")
            raise SerpSourceError(f"Unparseable results page: {e}", query=full_query) from e

        logger.debug(f"Live search '{full_query}': {len(results)} organic results")
        return results

    async def close(self):
        if self._owns_client:
            await self._client.aclose()
