"""
Repository Layer - Clean Interface for Data Operations

Functions take an open Session and hide the SQLAlchemy details:
- Service areas: ensure_location (upsert by name, geocoded)
- Keyword rankings: append-only facts plus windowed summaries
- Competitors: upsert by id, snapshot replacement of rankings, cache reads
- Business configuration: insert-only history, latest row wins

Aggregates average non-null positions only; CTR is clicks / impressions × 100,
0 when there are no impressions.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from solar_rank.business import BusinessConfig, TargetKeywords
from solar_rank.competitors.models import (
    BusinessType,
    Competitor,
    CompetitorRanking,
)
from solar_rank.scoring import average_position, estimate_volume, get_ctr_for_position
from solar_rank.utils.geo import get_city_coords

from .models import (
    BusinessInfo,
    CompetitorRankingRecord,
    CompetitorRecord,
    KeywordRanking,
    Location,
)
from .session import transaction

logger = logging.getLogger(__name__)

TOP_KEYWORDS_LIMIT = 10


# =============================================================================
# SERVICE AREAS
# =============================================================================

def ensure_location(db: Session, name: str, overall_score: Optional[int] = None) -> Location:
    """
    Get or create a service area by exact name.

    New areas are geocoded from the static city table (0, 0 when unknown).
    """
    location = db.query(Location).filter(Location.name == name).first()
    if location:
        return location

    lat, lng = get_city_coords(name) or (0.0, 0.0)
    with transaction(db):
        location = Location(
            name=name,
            lat=lat,
            lng=lng,
            overall_score=overall_score,
            last_updated=datetime.utcnow(),
        )
        db.add(location)
    logger.info(f"Created service area {name} ({lat}, {lng})")
    return location


def touch_location(db: Session, location: Location) -> None:
    with transaction(db):
        location.last_updated = datetime.utcnow()


# =============================================================================
# KEYWORD RANKINGS
# =============================================================================

def record_keyword_ranking(
    db: Session,
    location: Location,
    keyword: str,
    position: Optional[int],
    source: str = "serp",
    created_at: Optional[datetime] = None,
) -> KeywordRanking:
    """
    Append one ranking observation.

    Impressions are the estimated volume; clicks follow the position CTR.
    """
    impressions = estimate_volume(keyword, location.name)
    ctr = get_ctr_for_position(position)
    clicks = int(impressions * ctr / 100)

    with transaction(db):
        ranking = KeywordRanking(
            location_id=location.id,
            keyword=keyword,
            position=position,
            clicks=clicks,
            impressions=impressions,
            ctr=ctr,
            source=source,
            created_at=created_at or datetime.utcnow(),
        )
        db.add(ranking)
    return ranking


def _ctr(clicks: int, impressions: int) -> float:
    if not impressions:
        return 0.0
    return round(clicks * 100 / impressions, 2)


def _summary_row(keyword: str, avg_position, clicks, impressions) -> Dict[str, Any]:
    clicks = int(clicks or 0)
    impressions = int(impressions or 0)
    return {
        "keyword": keyword,
        "avgPosition": round(float(avg_position), 2) if avg_position else 0,
        "clicks": clicks,
        "impressions": impressions,
        "ctr": _ctr(clicks, impressions),
    }


def _sort_summary(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Most clicks first, then best average position
    return sorted(rows, key=lambda r: (-r["clicks"], r["avgPosition"] or float("inf")))


def get_keyword_summary(
    db: Session,
    days: int = 60,
    location_id: Optional[int] = None,
    limit: int = TOP_KEYWORDS_LIMIT,
) -> List[Dict[str, Any]]:
    """Top keywords in the window, aggregated across observations."""
    cutoff = datetime.utcnow() - timedelta(days=days)
    q = (
        db.query(
            KeywordRanking.keyword,
            func.avg(KeywordRanking.position),
            func.sum(func.coalesce(KeywordRanking.clicks, 0)),
            func.sum(func.coalesce(KeywordRanking.impressions, 0)),
        )
        .filter(KeywordRanking.created_at >= cutoff)
    )
    if location_id is not None:
        q = q.filter(KeywordRanking.location_id == location_id)

    rows = [_summary_row(*row) for row in q.group_by(KeywordRanking.keyword).all()]
    return _sort_summary(rows)[:limit]


def get_rankings_by_area(
    db: Session,
    days: int = 60,
    limit: int = TOP_KEYWORDS_LIMIT,
) -> Dict[str, List[Dict[str, Any]]]:
    """Top keywords per service area."""
    cutoff = datetime.utcnow() - timedelta(days=days)
    rows = (
        db.query(
            Location.name,
            KeywordRanking.keyword,
            func.avg(KeywordRanking.position),
            func.sum(func.coalesce(KeywordRanking.clicks, 0)),
            func.sum(func.coalesce(KeywordRanking.impressions, 0)),
        )
        .join(Location, KeywordRanking.location_id == Location.id)
        .filter(KeywordRanking.created_at >= cutoff)
        .group_by(Location.name, KeywordRanking.keyword)
        .all()
    )

    areas: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for area, keyword, avg_position, clicks, impressions in rows:
        areas[area].append(_summary_row(keyword, avg_position, clicks, impressions))

    return {area: _sort_summary(items)[:limit] for area, items in areas.items()}


def get_ranking_status(db: Session, area: Optional[str] = None, mode: str = "simulation") -> List[Dict[str, Any]]:
    """Latest ranking timestamp per service area."""
    q = (
        db.query(Location.name, func.max(KeywordRanking.created_at))
        .outerjoin(KeywordRanking, KeywordRanking.location_id == Location.id)
    )
    if area:
        q = q.filter(Location.name == area)

    return [
        {
            "area": name,
            "lastUpdated": last_update.isoformat() if last_update else None,
            "mode": mode,
        }
        for name, last_update in q.group_by(Location.name).all()
    ]


def get_recent_rankings(db: Session, days: int = 7, limit: int = 50) -> List[Dict[str, Any]]:
    """Most recent ranking observations, newest first."""
    cutoff = datetime.utcnow() - timedelta(days=days)
    rows = (
        db.query(KeywordRanking)
        .join(Location, KeywordRanking.location_id == Location.id)
        .filter(KeywordRanking.created_at >= cutoff)
        .order_by(KeywordRanking.created_at.desc(), KeywordRanking.id.desc())
        .limit(limit)
        .all()
    )
    return [r.to_dict() for r in rows]


def get_location_performance(db: Session, days: int = 60) -> List[Dict[str, Any]]:
    """Per-area aggregate for the map view."""
    cutoff = datetime.utcnow() - timedelta(days=days)
    stats = {
        location_id: (keyword_count, avg_position, clicks, impressions)
        for location_id, keyword_count, avg_position, clicks, impressions in (
            db.query(
                KeywordRanking.location_id,
                func.count(func.distinct(KeywordRanking.keyword)),
                func.avg(KeywordRanking.position),
                func.sum(func.coalesce(KeywordRanking.clicks, 0)),
                func.sum(func.coalesce(KeywordRanking.impressions, 0)),
            )
            .filter(KeywordRanking.created_at >= cutoff)
            .group_by(KeywordRanking.location_id)
            .all()
        )
    }

    performance = []
    for location in db.query(Location).order_by(Location.name).all():
        keyword_count, avg_position, clicks, impressions = stats.get(location.id, (0, None, 0, 0))
        entry = location.to_dict()
        entry.update({
            "keywordCount": int(keyword_count or 0),
            "avgPosition": round(float(avg_position), 2) if avg_position else 0,
            "clicks": int(clicks or 0),
            "impressions": int(impressions or 0),
            "ctr": _ctr(int(clicks or 0), int(impressions or 0)),
        })
        performance.append(entry)
    return performance


# =============================================================================
# COMPETITORS
# =============================================================================

def _record_to_competitor(record: CompetitorRecord) -> Competitor:
    try:
        business_type = BusinessType(record.business_type)
    except ValueError:
        business_type = BusinessType.SOLAR_RETAILER
    return Competitor(
        id=record.id,
        name=record.competitor_name,
        domain=record.domain,
        location=record.location or "",
        business_type=business_type,
        last_updated=record.last_updated or datetime.utcnow(),
        previous_average_position=record.previous_average_position,
    )


def _record_to_ranking(record: CompetitorRankingRecord) -> CompetitorRanking:
    return CompetitorRanking(
        competitor_id=record.competitor_id,
        keyword=record.keyword,
        position=record.position,
        url=record.ranking_url,
        title=record.page_title,
        location=record.location or "",
        estimated_traffic=record.estimated_traffic or 0,
        last_checked=record.last_checked or datetime.utcnow(),
        source=record.source or "serp",
    )


def upsert_competitors(db: Session, competitors: List[Competitor]) -> int:
    """Insert or update competitors by id; last_updated is refreshed."""
    now = datetime.utcnow()
    with transaction(db):
        for competitor in competitors:
            record = db.get(CompetitorRecord, competitor.id)
            if record is None:
                record = CompetitorRecord(id=competitor.id, domain=competitor.domain)
                db.add(record)
            record.competitor_name = competitor.name
            record.domain = competitor.domain
            record.location = competitor.location
            record.business_type = competitor.business_type.value
            record.last_updated = now
    logger.info(f"Upserted {len(competitors)} competitors")
    return len(competitors)


def replace_competitor_rankings(
    db: Session,
    competitor_ids: List[str],
    rankings: List[CompetitorRanking],
) -> List[CompetitorRanking]:
    """
    Replace the ranking snapshot for the given competitors.

    Delete and insert run in one transaction. Each competitor row keeps the
    average position of its replaced snapshot (None when it had none) so
    cached reads report the same trend as the run that wrote them.

    Returns:
        The rankings that were replaced (previous snapshot)
    """
    ids = list(dict.fromkeys(competitor_ids))
    if not ids:
        return []

    previous_records = (
        db.query(CompetitorRankingRecord)
        .filter(CompetitorRankingRecord.competitor_id.in_(ids))
        .all()
    )
    previous = [_record_to_ranking(r) for r in previous_records]

    previous_positions: Dict[str, List[Optional[int]]] = defaultdict(list)
    for ranking in previous:
        previous_positions[ranking.competitor_id].append(ranking.position)

    with transaction(db):
        for competitor_id in ids:
            record = db.get(CompetitorRecord, competitor_id)
            if record is None:
                continue
            positions = previous_positions.get(competitor_id)
            record.previous_average_position = average_position(positions) if positions else None

        db.query(CompetitorRankingRecord).filter(
            CompetitorRankingRecord.competitor_id.in_(ids)
        ).delete(synchronize_session=False)

        for ranking in rankings:
            db.add(CompetitorRankingRecord(
                competitor_id=ranking.competitor_id,
                keyword=ranking.keyword,
                position=ranking.position,
                ranking_url=ranking.url,
                page_title=ranking.title,
                estimated_traffic=ranking.estimated_traffic,
                source=ranking.source,
                location=ranking.location,
                last_checked=ranking.last_checked,
            ))

    logger.info(f"Replaced rankings for {len(ids)} competitors "
                f"({len(previous)} old rows, {len(rankings)} new rows)")
    return previous


def get_cached_competitors(db: Session, max_age_hours: int = 6) -> List[Dict[str, Any]]:
    """
    Competitors refreshed within the cache window, with their rankings.

    Returns:
        List of {"competitor": Competitor, "rankings": [CompetitorRanking]}
    """
    cutoff = datetime.utcnow() - timedelta(hours=max_age_hours)
    records = (
        db.query(CompetitorRecord)
        .filter(CompetitorRecord.last_updated > cutoff)
        .order_by(CompetitorRecord.last_updated.desc())
        .all()
    )
    if not records:
        return []

    rankings: Dict[str, List[CompetitorRanking]] = defaultdict(list)
    for row in (
        db.query(CompetitorRankingRecord)
        .filter(CompetitorRankingRecord.competitor_id.in_([r.id for r in records]))
        .order_by(CompetitorRankingRecord.id)
        .all()
    ):
        rankings[row.competitor_id].append(_record_to_ranking(row))

    return [
        {
            "competitor": _record_to_competitor(record),
            "rankings": rankings.get(record.id, []),
        }
        for record in records
    ]


def clear_competitor_data(db: Session) -> Dict[str, int]:
    """Delete every competitor and competitor ranking."""
    with transaction(db):
        rankings = db.query(CompetitorRankingRecord).delete(synchronize_session=False)
        competitors = db.query(CompetitorRecord).delete(synchronize_session=False)
    db.expire_all()
    logger.info(f"Cleared {competitors} competitors and {rankings} rankings")
    return {"competitors": competitors, "rankings": rankings}


def remove_competitor(db: Session, competitor_id: str) -> bool:
    """Delete one competitor and its rankings. False when unknown."""
    with transaction(db):
        db.query(CompetitorRankingRecord).filter(
            CompetitorRankingRecord.competitor_id == competitor_id
        ).delete(synchronize_session=False)
        removed = db.query(CompetitorRecord).filter(
            CompetitorRecord.id == competitor_id
        ).delete(synchronize_session=False)
    db.expire_all()

    if removed:
        logger.info(f"Removed competitor {competitor_id}")
    return bool(removed)


def get_tracking_status(db: Session) -> Dict[str, Any]:
    """Counts and freshness for the scheduled tracking job."""
    last_updated = db.query(func.max(CompetitorRecord.last_updated)).scalar()
    last_checked = db.query(func.max(CompetitorRankingRecord.last_checked)).scalar()
    return {
        "totalCompetitors": db.query(func.count(CompetitorRecord.id)).scalar() or 0,
        "totalRankings": db.query(func.count(CompetitorRankingRecord.id)).scalar() or 0,
        "trackedLocations": db.query(func.count(func.distinct(CompetitorRecord.location))).scalar() or 0,
        "lastUpdated": last_updated.isoformat() if last_updated else None,
        "lastChecked": last_checked.isoformat() if last_checked else None,
    }


# =============================================================================
# BUSINESS CONFIGURATION
# =============================================================================

def get_business_config(db: Session) -> Optional[BusinessConfig]:
    """Latest saved business profile, or None when setup never ran."""
    row = (
        db.query(BusinessInfo)
        .order_by(BusinessInfo.created_at.desc(), BusinessInfo.id.desc())
        .first()
    )
    if row is None:
        return None

    service_areas = row.service_areas if isinstance(row.service_areas, list) else []
    return BusinessConfig(
        business_name=row.business_name or "",
        website=row.website or "",
        service_areas=[str(a) for a in service_areas if a],
        target_keywords=TargetKeywords.parse(row.target_keywords),
    )


def save_business_config(db: Session, config: BusinessConfig) -> BusinessInfo:
    """Insert a new profile version; history is kept."""
    with transaction(db):
        row = BusinessInfo(
            business_name=config.business_name,
            website=config.website,
            service_areas=list(config.service_areas),
            target_keywords=config.target_keywords.to_dict(),
            created_at=datetime.utcnow(),
        )
        db.add(row)
    logger.info(f"Saved business config ({len(config.service_areas)} service areas)")
    return row
