"""
Competitor Discovery & Tracking

Example Usage:
    from solar_rank.competitors import CompetitorTracker
    from solar_rank.serp import SimulatedSerpSource

    tracker = CompetitorTracker(SimulatedSerpSource(), ["solar installation"],
                                "Round Rock, TX", "mysolar.com", request_delay=0)
    result = await tracker.run()
"""

from .models import (
    BusinessSignal,
    BusinessType,
    Competitor,
    CompetitorAnalysis,
    CompetitorInsight,
    CompetitorRanking,
    CompetitorSummary,
    KeywordGap,
    TrackingResult,
    TrackingState,
    Trend,
)
from .tracker import (
    CompetitorTracker,
    classify_business_type,
    determine_business_signal,
    determine_trend,
    extract_business_name,
)

__all__ = [
    "BusinessSignal",
    "BusinessType",
    "Competitor",
    "CompetitorAnalysis",
    "CompetitorInsight",
    "CompetitorRanking",
    "CompetitorSummary",
    "KeywordGap",
    "TrackingResult",
    "TrackingState",
    "Trend",
    "CompetitorTracker",
    "classify_business_type",
    "determine_business_signal",
    "determine_trend",
    "extract_business_name",
]
