"""
Keyword Discovery

Generates candidate keywords for a service area from fixed templates
(core, product, incentive/financing), estimates volume and competition
for each, and ranks them by opportunity.

Deterministic: the same area always yields the same list in the same order.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from solar_rank.scoring import (
    calculate_keyword_opportunity,
    estimate_volume,
    simulate_competitor_count,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 12

CORE_TEMPLATES = [
    "solar installation {city}",
    "best solar company {city}",
    "solar panels {city}",
    "solar installer near me {city}",
    "affordable solar {city}",
    "cheap solar {city}",
    "top rated solar installers {city}",
]

PRODUCT_TEMPLATES = [
    "tesla powerwall {city}",
    "home battery backup {city}",
    "enphase installer {city}",
    "rec solar panels {city}",
]

INCENTIVE_TEMPLATES = [
    "solar rebates {city}",
    "solar tax credit {city}",
    "solar financing {city}",
    "net metering {city}",
]

KEYWORD_TEMPLATES = CORE_TEMPLATES + PRODUCT_TEMPLATES + INCENTIVE_TEMPLATES


@dataclass
class KeywordSuggestion:
    """A scored keyword candidate."""
    keyword: str
    estimated_volume: int
    competitor_count: int
    opportunity: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "estimatedVolume": self.estimated_volume,
            "competitorCount": self.competitor_count,
            "opportunity": self.opportunity,
        }


class KeywordDiscovery:
    """
    Scores template keywords for a service area.

    Usage:
        discovery = KeywordDiscovery()
        suggestions = discovery.discover("Austin, TX", limit=12)
    """

    def __init__(self, templates: List[str] = None):
        self.templates = list(templates or KEYWORD_TEMPLATES)

    def candidates(self, area: str) -> List[str]:
        """Template keywords instantiated with the lower-cased area."""
        city = (area or "").strip().lower()
        return [template.format(city=city).strip() for template in self.templates]

    def score(self, keyword: str, area: str) -> KeywordSuggestion:
        volume = estimate_volume(keyword, area)
        competitor_count = simulate_competitor_count(keyword)
        return KeywordSuggestion(
            keyword=keyword,
            estimated_volume=volume,
            competitor_count=competitor_count,
            opportunity=calculate_keyword_opportunity(volume, competitor_count),
        )

    def discover(self, area: str, limit: int = DEFAULT_LIMIT) -> List[KeywordSuggestion]:
        """
        Top keyword suggestions for an area.

        Sorted by opportunity (descending); ties keep template order.
        """
        suggestions = [self.score(keyword, area) for keyword in self.candidates(area)]
        suggestions.sort(key=lambda s: s.opportunity, reverse=True)
        if limit is not None and limit >= 0:
            suggestions = suggestions[:limit]
        logger.debug(f"Discovered {len(suggestions)} keywords for {area}")
        return suggestions


def discover_for_areas(areas: List[str], limit: int = DEFAULT_LIMIT) -> Dict[str, List[KeywordSuggestion]]:
    """Suggestions per service area, keyed by area name."""
    discovery = KeywordDiscovery()
    return {area: discovery.discover(area, limit) for area in areas}
