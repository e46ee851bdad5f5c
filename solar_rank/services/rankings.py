"""
Ranking Services

Operator-facing ranking jobs built on the SERP source and the repository:
- check_ranking: one lookup with fallback on SERP failure
- bootstrap_area_keywords: seed a service area with template keywords
- run_auto_ranking: ad-hoc keyword × location checks for any domain
- run_live_rankings / check_live_area: tracked keywords per service area

Per-keyword failures are recorded in `errors` and never abort a batch.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from solar_rank.business import BusinessConfig, ConfigurationError, require_config
from solar_rank.database import repository
from solar_rank.discovery import DEFAULT_LIMIT, KeywordDiscovery
from solar_rank.serp import SerpSource, SerpSourceError, fallback_ranking
from solar_rank.utils.domain_filter import normalize_domain

logger = logging.getLogger(__name__)

BOOTSTRAP_SCORE = 75
BOOTSTRAP_SUMMARY_DAYS = 90


@dataclass
class RankingCheck:
    """Result of one ranking lookup."""
    keyword: str
    location: Optional[str]
    position: Optional[int]
    url: Optional[str] = None
    estimated_traffic: int = 0
    source: str = "serp"
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.position is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "keyword": self.keyword,
            "location": self.location,
            "position": self.position,
            "url": self.url,
            "estimatedTraffic": self.estimated_traffic,
            "source": self.source,
            "found": self.found,
        }
        if self.error:
            data["error"] = self.error
        return data


async def check_ranking(
    serp: SerpSource,
    keyword: str,
    domain: str,
    location: Optional[str] = None,
    rng: Optional[random.Random] = None,
    query: Optional[str] = None,
) -> RankingCheck:
    """
    Look up a domain's position, substituting a fallback on SERP failure.

    Args:
        keyword: Keyword the result is recorded under
        query: Search string sent to the source (defaults to keyword)
    """
    search_query = query or keyword
    try:
        ranking = await serp.find_domain_ranking(search_query, domain, location)
        error = None
    except SerpSourceError as e:
        logger.warning(f"SERP lookup failed for '{search_query}' ({location}), using fallback: {e}")
        ranking = fallback_ranking(search_query, location, rng)
        error = str(e)

    return RankingCheck(
        keyword=keyword,
        location=location,
        position=ranking.position,
        url=ranking.url,
        estimated_traffic=ranking.estimated_traffic,
        source=ranking.source,
        error=error,
    )


async def _pause(delay: float):
    if delay > 0:
        await asyncio.sleep(delay)


# =============================================================================
# BOOTSTRAP
# =============================================================================

async def bootstrap_area_keywords(
    db: Session,
    serp: SerpSource,
    config: Optional[BusinessConfig],
    area: str,
    limit: int = DEFAULT_LIMIT,
    request_delay: float = 0.6,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Seed a service area with ranking facts.

    Candidates are the area's configured keywords, or the discovery
    templates when none are configured.
    """
    config = require_config(config)
    if not area or not area.strip():
        raise ConfigurationError("area is required")
    area = area.strip()

    candidates = config.target_keywords.areas.get(area) or KeywordDiscovery().candidates(area)
    candidates = list(dict.fromkeys(candidates))[:max(0, limit)]

    location = repository.ensure_location(db, area, overall_score=BOOTSTRAP_SCORE)
    domain = config.own_domain

    processed = []
    errors = []
    for index, keyword in enumerate(candidates):
        if index > 0:
            await _pause(request_delay)

        check = await check_ranking(serp, keyword, domain, area, rng)
        if check.error:
            errors.append(f"{keyword}: {check.error}")

        repository.record_keyword_ranking(db, location, keyword, check.position, source=check.source)
        processed.append(check.to_dict())

    logger.info(f"Bootstrapped {len(processed)} keywords for {area} ({len(errors)} fallbacks)")

    return {
        "success": True,
        "area": area,
        "processed": len(processed),
        "results": processed,
        "top": repository.get_keyword_summary(
            db, days=BOOTSTRAP_SUMMARY_DAYS, location_id=location.id,
        ),
        "errors": errors,
    }


# =============================================================================
# AUTO RANKING
# =============================================================================

async def run_auto_ranking(
    db: Session,
    serp: SerpSource,
    keywords: List[str],
    locations: List[str],
    domain: str,
    request_delay: float = 1.0,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Check every keyword in every location for a domain.

    Found (or fallback) positions are stored; misses are reported only.
    """
    domain = normalize_domain(domain)
    if not domain:
        raise ConfigurationError("domain is required")

    logger.info(f"Starting ranking check for {len(keywords)} keywords across {len(locations)} locations")

    results = []
    errors = []
    first = True
    for location_name in locations:
        for keyword in keywords:
            if not first:
                await _pause(request_delay)
            first = False

            check = await check_ranking(
                serp, keyword, domain, location_name, rng,
                query=f"{keyword} {location_name}",
            )
            if check.error:
                errors.append({"location": location_name, "keyword": keyword, "error": check.error})

            entry = check.to_dict()
            if check.found:
                location = repository.ensure_location(db, location_name, overall_score=BOOTSTRAP_SCORE)
                ranking = repository.record_keyword_ranking(
                    db, location, keyword, check.position, source=check.source,
                )
                entry.update({
                    "estimatedClicks": ranking.clicks,
                    "estimatedImpressions": ranking.impressions,
                })
            else:
                entry.update({
                    "estimatedClicks": 0,
                    "estimatedImpressions": 0,
                    "message": "Domain not found in top 100 results",
                })
            results.append(entry)

    found = sum(1 for r in results if r["found"])
    return {
        "success": True,
        "domain": domain,
        "results": results,
        "errors": errors,
        "summary": {
            "totalChecked": len(results),
            "found": found,
            "notFound": len(results) - found,
        },
    }


# =============================================================================
# LIVE RANKINGS
# =============================================================================

def live_preview(config: Optional[BusinessConfig], area: Optional[str] = None) -> Dict[str, Any]:
    """What a live check would do, without touching the network."""
    config = require_config(config)
    target_area = area or config.primary_area
    return {
        "mode": "simulation",
        "area": target_area,
        "domain": config.own_domain,
        "keywords": config.keywords_for_area(target_area),
        "message": "Live scraper disabled. Set LIVE_SCRAPER_ENABLED=1 to enable.",
    }


async def check_live_area(
    db: Session,
    serp: SerpSource,
    config: BusinessConfig,
    area: str,
    request_delay: float = 1.0,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Check the tracked keywords of one area and store the hits.

    Rows are recorded as "<keyword> <area>".
    """
    location = repository.ensure_location(db, area)
    domain = config.own_domain

    results = []
    errors = []
    for index, keyword in enumerate(config.keywords_for_area(area)):
        if index > 0:
            await _pause(request_delay)

        area_keyword = f"{keyword} {area}"
        check = await check_ranking(serp, area_keyword, domain, area, rng, query=keyword)
        if check.error:
            errors.append(f"{area_keyword}: {check.error}")
        if check.found:
            repository.record_keyword_ranking(db, location, area_keyword, check.position, source=check.source)
        results.append({
            "keyword": area_keyword,
            "position": check.position,
            "found": check.found,
            "source": check.source,
        })

    repository.touch_location(db, location)

    return {
        "mode": "live",
        "area": area,
        "domain": domain,
        "results": results,
        "errors": errors,
        "updatedAt": datetime.utcnow().isoformat(),
    }


async def run_live_rankings(
    db: Session,
    serp: SerpSource,
    config: Optional[BusinessConfig],
    areas: Optional[List[str]] = None,
    live_enabled: bool = False,
    request_delay: float = 1.0,
    area_delay: float = 1.0,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Live ranking pass over several areas.

    With the scraper disabled only areas are registered and keyword counts
    reported.
    """
    config = require_config(config)
    all_areas = list(areas or []) or config.require_service_areas()
    mode = "live" if live_enabled else "simulation"

    processed = []
    for index, area in enumerate(all_areas):
        if not live_enabled:
            repository.ensure_location(db, area)
            processed.append({
                "area": area,
                "keywords": len(config.keywords_for_area(area)),
                "mode": mode,
            })
            continue

        if index > 0:
            await _pause(area_delay)
        outcome = await check_live_area(db, serp, config, area, request_delay, rng)
        processed.append({
            "area": area,
            "keywords": len(outcome["results"]),
            "found": sum(1 for r in outcome["results"] if r["found"]),
            "errors": outcome["errors"],
            "mode": mode,
        })

    return {
        "success": True,
        "mode": mode,
        "processed": processed,
        "timestamp": datetime.utcnow().isoformat(),
    }
