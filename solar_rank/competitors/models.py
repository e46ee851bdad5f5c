"""
Competitor Tracking Data Models

Dataclasses and enums passed between the tracker stages and serialized
for the dashboard (camelCase keys).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class BusinessType(str, Enum):
    """Coarse classification of a competing business."""
    SOLAR_INSTALLER = "solar_installer"
    SOLAR_RETAILER = "solar_retailer"
    ENERGY_COMPANY = "energy_company"


class TrackingState(str, Enum):
    """Lifecycle of one tracking pass."""
    IDLE = "idle"
    DISCOVERING = "discovering"
    RANKING = "ranking"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class BusinessSignal(str, Enum):
    """Business-type heuristic (not a trend)."""
    STRONG_LOCAL_INSTALLER = "strong_local_installer"
    WEAK_ENERGY_COMPANY = "weak_energy_company"
    NEUTRAL = "neutral"


@dataclass
class Competitor:
    """A business competing for the tracked keywords."""
    id: str
    name: str
    domain: str
    location: str
    business_type: BusinessType
    last_updated: datetime = field(default_factory=datetime.utcnow)
    manual: bool = False
    # Baseline for trends when no previous snapshot is passed to analyze()
    previous_average_position: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "domain": self.domain,
            "location": self.location,
            "businessType": self.business_type.value,
            "lastUpdated": self.last_updated.isoformat(),
        }


@dataclass
class CompetitorRanking:
    """A competitor's position for one keyword."""
    competitor_id: str
    keyword: str
    position: Optional[int]
    url: Optional[str]
    title: Optional[str]
    location: str
    estimated_traffic: int = 0
    last_checked: datetime = field(default_factory=datetime.utcnow)
    source: str = "serp"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "competitorId": self.competitor_id,
            "keyword": self.keyword,
            "position": self.position,
            "url": self.url,
            "title": self.title,
            "location": self.location,
            "estimatedTraffic": self.estimated_traffic,
            "lastChecked": self.last_checked.isoformat(),
            "source": self.source,
        }


@dataclass
class CompetitorAnalysis:
    """Aggregated metrics for one competitor."""
    competitor: Competitor
    rankings: List[CompetitorRanking]
    average_position: float
    total_keywords: int
    estimated_traffic: int
    visibility_score: int
    trending: Trend = Trend.STABLE
    business_signal: BusinessSignal = BusinessSignal.NEUTRAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "competitor": self.competitor.to_dict(),
            "rankings": [r.to_dict() for r in self.rankings],
            "averagePosition": round(self.average_position, 2),
            "totalKeywords": self.total_keywords,
            "estimatedTraffic": self.estimated_traffic,
            "visibilityScore": self.visibility_score,
            "trending": self.trending.value,
            "businessSignal": self.business_signal.value,
        }


@dataclass
class KeywordGap:
    keyword: str
    competitor_count: int
    opportunity: str  # high | medium | low

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "competitorCount": self.competitor_count,
            "opportunity": self.opportunity,
        }


@dataclass
class CompetitorSummary:
    """
    Market overview across all analyzed competitors.

    market_share is an illustrative heuristic (100 / total visibility), not a
    measured share of search traffic.
    """
    total_competitors: int
    average_position: int
    market_share: float
    top_competitors: List[Dict[str, Any]]
    keyword_gaps: List[KeywordGap]
    last_updated: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCompetitors": self.total_competitors,
            "averagePosition": self.average_position,
            "marketShare": self.market_share,
            "topCompetitors": list(self.top_competitors),
            "keywordGaps": [g.to_dict() for g in self.keyword_gaps],
            "lastUpdated": self.last_updated.isoformat(),
        }


@dataclass
class CompetitorInsight:
    insight: str
    type: str  # opportunity | threat | trend
    priority: str  # high | medium | low
    actionable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "insight": self.insight,
            "type": self.type,
            "priority": self.priority,
            "actionable": self.actionable,
        }


@dataclass
class TrackingResult:
    """Everything one tracking pass produced."""
    location: str
    keywords: List[str]
    competitors: List[Competitor]
    rankings: List[CompetitorRanking]
    analyses: List[CompetitorAnalysis]
    summary: CompetitorSummary
    insights: List[CompetitorInsight]
    errors: List[str] = field(default_factory=list)
    state: TrackingState = TrackingState.DONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "keywords": list(self.keywords),
            "competitors": [a.to_dict() for a in self.analyses],
            "summary": self.summary.to_dict(),
            "insights": [i.to_dict() for i in self.insights],
            "errors": list(self.errors),
            "state": self.state.value,
        }
