"""
Competitor Tracking Services

Glue between the tracker and persistence:
- run_competitor_tracking: dashboard read, served from the cache window when
  every manual competitor is present, otherwise a fresh pass on the first
  service area
- run_scheduled_tracking: fresh pass over every service area
"""

import asyncio
import logging
import random
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from solar_rank.business import BusinessConfig, require_config
from solar_rank.competitors import (
    Competitor,
    CompetitorRanking,
    CompetitorTracker,
)
from solar_rank.database import repository
from solar_rank.serp import SerpSource
from solar_rank.utils.config import Settings
from solar_rank.utils.domain_filter import normalize_domain

logger = logging.getLogger(__name__)


def make_persist_callback(db: Session):
    """Persistence step for CompetitorTracker.run."""
    def persist(competitors: List[Competitor], rankings: List[CompetitorRanking]):
        repository.upsert_competitors(db, competitors)
        return repository.replace_competitor_rankings(db, [c.id for c in competitors], rankings)
    return persist


def _tracking_response(tracker: CompetitorTracker, competitors, rankings, from_cache: bool, errors=None):
    analyses = tracker.analyze(competitors, rankings)
    return {
        "competitors": [a.to_dict() for a in analyses],
        "summary": tracker.summarize(analyses).to_dict(),
        "insights": [i.to_dict() for i in tracker.insights(analyses)],
        "fromCache": from_cache,
        "errors": list(errors or []),
    }


async def run_competitor_tracking(
    db: Session,
    serp: SerpSource,
    config: Optional[BusinessConfig],
    settings: Settings,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Competitor overview for the first service area.

    Raises:
        ConfigurationError: No business configuration or service areas
    """
    config = require_config(config)
    location = config.primary_area
    keywords = config.all_keywords()
    manual_domains = config.manual_competitors()

    tracker = CompetitorTracker(
        serp, keywords, location, config.own_domain,
        request_delay=settings.SERP_REQUEST_DELAY, rng=rng,
    )

    cached = repository.get_cached_competitors(db, settings.COMPETITOR_CACHE_HOURS)
    if cached:
        cached_domains = {entry["competitor"].domain for entry in cached}
        missing_manual = [d for d in manual_domains if normalize_domain(d) not in cached_domains]
        if not missing_manual:
            logger.info(f"Serving {len(cached)} competitors from cache")
            competitors = [entry["competitor"] for entry in cached]
            rankings = [r for entry in cached for r in entry["rankings"]]
            return _tracking_response(tracker, competitors, rankings, from_cache=True)
        logger.info(f"Cache missing manual competitors {missing_manual}, refreshing")

    result = await tracker.run(manual_domains, persist=make_persist_callback(db))
    response = result.to_dict()
    response["fromCache"] = False
    return response


async def run_scheduled_tracking(
    db: Session,
    serp: SerpSource,
    config: Optional[BusinessConfig],
    settings: Settings,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Fresh tracking pass for every service area.

    Keywords per area are the global plus area-specific set; manual
    competitors are those configured for the area.
    """
    config = require_config(config)
    areas = config.require_service_areas()

    processed = []
    errors = []
    for index, area in enumerate(areas):
        if index > 0 and settings.SERP_AREA_DELAY > 0:
            await asyncio.sleep(settings.SERP_AREA_DELAY)

        tracker = CompetitorTracker(
            serp, config.keywords_for_area(area), area, config.own_domain,
            request_delay=settings.SERP_REQUEST_DELAY, rng=rng,
        )
        try:
            result = await tracker.run(
                config.manual_competitors(area),
                persist=make_persist_callback(db),
            )
        except Exception as e:
            logger.error(f"Scheduled tracking failed for {area}: {e}")
            errors.append({"area": area, "error": str(e)})
            continue

        errors.extend({"area": area, "error": message} for message in result.errors)
        processed.append({
            "area": area,
            "competitors": len(result.competitors),
            "rankings": len(result.rankings),
        })

    return {
        "success": len(processed) == len(areas),
        "processed": processed,
        "totalAreas": len(areas),
        "totalCompetitors": sum(p["competitors"] for p in processed),
        "totalRankings": sum(p["rankings"] for p in processed),
        "timestamp": datetime.utcnow().isoformat(),
        "errors": errors,
    }


def get_schedule_status(db: Session) -> Dict[str, Any]:
    status = repository.get_tracking_status(db)
    status["status"] = "active" if status["totalCompetitors"] else "idle"
    return status
