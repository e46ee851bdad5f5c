"""
Business Configuration

The operator's business profile: name, website, service areas and the
target keyword set. The keyword set is stored as JSON in one of two shapes
(a bare list, or {global, areas, competitors}); `TargetKeywords.parse`
normalizes both at the persistence boundary so the pipeline only ever sees
the structured form.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from solar_rank.utils.domain_filter import normalize_domain

logger = logging.getLogger(__name__)

DEFAULT_KEYWORDS = ["solar installation", "solar panels"]


class ConfigurationError(Exception):
    """Business configuration is missing or unusable."""
    pass


def _clean_list(values: Any) -> List[str]:
    if not isinstance(values, (list, tuple)):
        return []
    cleaned = []
    for value in values:
        text = str(value).strip() if value is not None else ""
        if text:
            cleaned.append(text)
    return cleaned


def _dedupe(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


@dataclass
class TargetKeywords:
    """Global keywords, per-area keywords and per-area manual competitors."""
    global_keywords: List[str] = field(default_factory=list)
    areas: Dict[str, List[str]] = field(default_factory=dict)
    competitors: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def parse(cls, raw: Any) -> "TargetKeywords":
        """
        Normalize a stored keyword target.

        - list -> global keywords only
        - dict -> {global, areas, competitors}, malformed parts dropped
        - anything else -> empty
        """
        if isinstance(raw, (list, tuple)):
            return cls(global_keywords=_clean_list(raw))

        if not isinstance(raw, dict):
            return cls()

        areas = raw.get("areas") if isinstance(raw.get("areas"), dict) else {}
        competitors = raw.get("competitors") if isinstance(raw.get("competitors"), dict) else {}

        return cls(
            global_keywords=_clean_list(raw.get("global")),
            areas={str(area): _clean_list(kws) for area, kws in areas.items()},
            competitors={str(area): _clean_list(doms) for area, doms in competitors.items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "global": list(self.global_keywords),
            "areas": {area: list(kws) for area, kws in self.areas.items()},
            "competitors": {area: list(doms) for area, doms in self.competitors.items()},
        }


@dataclass
class BusinessConfig:
    """Current business profile (latest saved row)."""
    business_name: str = ""
    website: str = ""
    service_areas: List[str] = field(default_factory=list)
    target_keywords: TargetKeywords = field(default_factory=TargetKeywords)

    @property
    def own_domain(self) -> str:
        return normalize_domain(self.website)

    @property
    def primary_area(self) -> str:
        if not self.service_areas:
            raise ConfigurationError("No service areas configured. Please complete setup first.")
        return self.service_areas[0]

    def require_service_areas(self) -> List[str]:
        if not self.service_areas:
            raise ConfigurationError("No service areas configured. Please complete setup first.")
        return list(self.service_areas)

    def keywords_for_area(self, area: str) -> List[str]:
        """Global plus area-specific keywords, deduped; defaults when empty."""
        keywords = _dedupe(self.target_keywords.global_keywords + self.target_keywords.areas.get(area, []))
        return keywords or list(DEFAULT_KEYWORDS)

    def all_keywords(self) -> List[str]:
        """Global plus every area's keywords, deduped; defaults when empty."""
        keywords = list(self.target_keywords.global_keywords)
        for area_keywords in self.target_keywords.areas.values():
            keywords.extend(area_keywords)
        keywords = _dedupe(keywords)
        return keywords or list(DEFAULT_KEYWORDS)

    def manual_competitors(self, area: Optional[str] = None) -> List[str]:
        """Manual competitor domains for one area, or across all areas."""
        if area is not None:
            return _dedupe(self.target_keywords.competitors.get(area, []))
        domains = []
        for area_domains in self.target_keywords.competitors.values():
            domains.extend(area_domains)
        return _dedupe(domains)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "businessName": self.business_name,
            "websiteUrl": self.website,
            "serviceAreas": list(self.service_areas),
            "targetKeywords": self.target_keywords.to_dict(),
        }


def require_config(config: Optional[BusinessConfig]) -> BusinessConfig:
    """Raise ConfigurationError when setup has not been completed."""
    if config is None:
        raise ConfigurationError("Business configuration not found. Please complete setup first.")
    return config
