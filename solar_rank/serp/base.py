"""
SERP Source Contract

Every search backend (simulated roster, live scraper) implements `search`;
`find_domain_ranking` is shared and turns a matched position into an
estimated-traffic figure with the scoring primitives.
"""

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from solar_rank.scoring import estimate_traffic
from solar_rank.utils.domain_filter import hostname_from_url, normalize_domain

logger = logging.getLogger(__name__)

MAX_RESULTS = 100
FALLBACK_MAX_POSITION = 50


class SerpSourceError(Exception):
    """Network or parse failure while fetching search results."""
    def __init__(self, message: str, status_code: int = None, query: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.query = query


@dataclass
class SearchResult:
    """One organic result, positions are 1-based."""
    title: str
    url: str
    position: int
    snippet: str = ""

    @property
    def hostname(self) -> str:
        return hostname_from_url(self.url)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "position": self.position,
            "snippet": self.snippet,
        }


@dataclass
class DomainRanking:
    """Where a domain ranks for a query, with estimated monthly traffic."""
    position: Optional[int]
    url: Optional[str] = None
    title: Optional[str] = None
    estimated_traffic: int = 0
    source: str = "serp"  # serp | fallback

    @property
    def found(self) -> bool:
        return self.position is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "url": self.url,
            "title": self.title,
            "estimatedTraffic": self.estimated_traffic,
            "source": self.source,
        }


class SerpSource(ABC):
    """
    Abstract search results provider.

    Usage:
        async with get_serp_source(settings) as serp:
            results = await serp.search("solar installation", "Austin, TX")
            ranking = await serp.find_domain_ranking("solar panels", "sunrun.com", "Austin, TX")
    """

    mode: str = "abstract"

    @abstractmethod
    async def search(self, query: str, location: Optional[str] = None) -> List[SearchResult]:
        """Ordered organic results for a query."""

    async def find_domain_ranking(
        self,
        query: str,
        domain: str,
        location: Optional[str] = None,
    ) -> DomainRanking:
        """
        Find a domain in the first 100 results for a query.

        Matches when the result hostname contains the normalized domain.

        Returns:
            DomainRanking with position=None and estimated_traffic=0 when absent

        Raises:
            SerpSourceError: When the underlying search fails
        """
        target = normalize_domain(domain)
        if not target:
            return DomainRanking(position=None)

        results = await self.search(query, location)

        for result in results[:MAX_RESULTS]:
            if target in result.hostname:
                return DomainRanking(
                    position=result.position,
                    url=result.url,
                    title=result.title,
                    estimated_traffic=estimate_traffic(result.position, query, location),
                )

        return DomainRanking(position=None, estimated_traffic=0)

    async def close(self):
        """Release network resources (no-op by default)."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def fallback_ranking(
    keyword: str,
    location: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> DomainRanking:
    """
    Locally generated ranking used when the SERP source fails.

    Position is uniform in [1, 50]; traffic follows the normal estimate.
    """
    rng = rng or random.Random()
    position = rng.randint(1, FALLBACK_MAX_POSITION)
    return DomainRanking(
        position=position,
        estimated_traffic=estimate_traffic(position, keyword, location),
        source="fallback",
    )
