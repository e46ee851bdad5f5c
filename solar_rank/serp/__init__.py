"""
SERP Sources

Two implementations of one contract:
- SimulatedSerpSource: deterministic roster (default)
- LiveSerpSource: scraped results page (LIVE_SCRAPER_ENABLED=true)

Failures raise SerpSourceError; callers substitute `fallback_ranking`.
"""

from typing import Optional

from solar_rank.utils.config import Settings, get_settings

from .base import (
    DomainRanking,
    SearchResult,
    SerpSource,
    SerpSourceError,
    fallback_ranking,
)
from .live import LiveSerpSource, parse_organic_results
from .simulated import SIMULATED_ROSTER, SimulatedSerpSource


def get_serp_source(settings: Optional[Settings] = None) -> SerpSource:
    """Pick the SERP implementation from configuration."""
    settings = settings or get_settings()
    if settings.LIVE_SCRAPER_ENABLED:
        return LiveSerpSource(timeout=settings.SERP_TIMEOUT)
    return SimulatedSerpSource()


__all__ = [
    "DomainRanking",
    "SearchResult",
    "SerpSource",
    "SerpSourceError",
    "fallback_ranking",
    "LiveSerpSource",
    "parse_organic_results",
    "SimulatedSerpSource",
    "SIMULATED_ROSTER",
    "get_serp_source",
]
