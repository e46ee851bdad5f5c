"""
Competitor Discovery & Tracking

Runs one tracking pass for a keyword set in a service area:

    IDLE -> DISCOVERING -> RANKING -> PERSISTING -> DONE
                 \\            \\           \\
                  +------------+-----------+--> FAILED

1. DISCOVERING: search each keyword, keep top-20 results, drop the
   operator's own domain and non-business platforms, dedupe by domain.
2. RANKING: look up every (competitor, keyword) pair; SERP failures are
   replaced by a fallback ranking and recorded.
3. PERSISTING: hand competitors and rankings to the persistence callback,
   which returns the previous snapshot for trend comparison.
4. Analysis, market summary and insights are computed from the result.

Per-keyword and per-pair failures never abort the pass. Anything else moves
the tracker to FAILED and is re-raised; writes already committed stay.
"""

import asyncio
import logging
import random
import re
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from solar_rank.scoring import (
    average_position,
    calculate_visibility_score,
    classify_keyword_gap,
    round_half_up,
)
from solar_rank.serp import SerpSource, SerpSourceError, fallback_ranking
from solar_rank.utils.domain_filter import (
    domain_to_id,
    hostname_from_url,
    is_excluded_domain,
    normalize_domain,
)

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

logger = logging.getLogger(__name__)

DISCOVERY_MAX_POSITION = 20
TOP_COMPETITORS = 5
TREND_THRESHOLD = 1.0

# persist(competitors, rankings) -> previous rankings for those competitors
PersistCallback = Callable[[List[Competitor], List[CompetitorRanking]], Optional[List[CompetitorRanking]]]


# ============================================================================
# NAME & TYPE HEURISTICS
# ============================================================================

_NAME_SUFFIX_PATTERNS = [
    re.compile(r"\s*-\s*Solar.*$", re.IGNORECASE),
    re.compile(r"\s*\|.*$"),
    re.compile(r"\s*:.*$"),
]


def _name_from_domain(domain: str) -> str:
    base = domain.rsplit(".", 1)[0] if "." in domain else domain
    base = re.sub(r"[-_.]+", " ", base).strip()
    return base.title()


def extract_business_name(title: Optional[str], domain: str) -> str:
    """
    Business name from a result title, falling back to the domain.

    "Sunrun - Solar Panel Installation" -> "Sunrun"
    "Momentum Solar | Residential"      -> "Momentum Solar"
    """
    name = title or ""
    for pattern in _NAME_SUFFIX_PATTERNS:
        name = pattern.sub("", name)
    name = name.strip()

    if len(name) < 3:
        name = _name_from_domain(domain)
    return name


def classify_business_type(title: Optional[str], snippet: Optional[str]) -> BusinessType:
    content = f"{title or ''} {snippet or ''}".lower()

    if "install" in content or "contractor" in content or "roofing" in content:
        return BusinessType.SOLAR_INSTALLER
    if "energy company" in content or "utility" in content or "electric" in content:
        return BusinessType.ENERGY_COMPANY
    return BusinessType.SOLAR_RETAILER


def determine_business_signal(business_type: BusinessType, avg_position: float) -> BusinessSignal:
    """Heuristic label from business type and average position."""
    if avg_position <= 0:
        return BusinessSignal.NEUTRAL
    if business_type == BusinessType.SOLAR_INSTALLER and avg_position < 15:
        return BusinessSignal.STRONG_LOCAL_INSTALLER
    if business_type == BusinessType.ENERGY_COMPANY and avg_position > 20:
        return BusinessSignal.WEAK_ENERGY_COMPANY
    return BusinessSignal.NEUTRAL


def determine_trend(current_avg: float, previous_avg: Optional[float]) -> Trend:
    """
    Trend from two average positions (lower is better).

    Needs a previous ranked snapshot; moves under one position are stable.
    """
    if not previous_avg or not current_avg:
        return Trend.STABLE
    delta = previous_avg - current_avg
    if delta >= TREND_THRESHOLD:
        return Trend.UP
    if delta <= -TREND_THRESHOLD:
        return Trend.DOWN
    return Trend.STABLE


# ============================================================================
# TRACKER
# ============================================================================

class CompetitorTracker:
    """
    One competitor tracking pass over a keyword set in a service area.

    Usage:
        tracker = CompetitorTracker(serp, ["solar installation"], "Round Rock, TX", "mysolar.com")
        result = await tracker.run(manual_domains=["rival.com"], persist=save_snapshot)
    """

    def __init__(
        self,
        serp: SerpSource,
        keywords: List[str],
        location: str,
        own_domain: str,
        request_delay: float = 1.0,
        rng: Optional[random.Random] = None,
    ):
        self.serp = serp
        self.keywords = list(dict.fromkeys(k.strip() for k in keywords if k and k.strip()))
        self.location = location
        self.own_domain = normalize_domain(own_domain)
        self.request_delay = request_delay
        self.rng = rng or random.Random()

        self.state = TrackingState.IDLE
        self.errors: List[str] = []

    async def _pause(self):
        if self.request_delay > 0:
            await asyncio.sleep(self.request_delay)

    def _transition(self, state: TrackingState):
        logger.debug(f"Tracker [{self.location}] {self.state.value} -> {state.value}")
        self.state = state

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def discover_competitors(self) -> List[Competitor]:
        """Competing business domains from the top 20 of every keyword."""
        competitors: Dict[str, Competitor] = {}

        for index, keyword in enumerate(self.keywords):
            if index > 0:
                await self._pause()
            try:
                results = await self.serp.search(keyword, self.location)
            except SerpSourceError as e:
                message = f"Discovery failed for '{keyword}': {e}"
                logger.warning(message)
                self.errors.append(message)
                continue

            for result in results:
                if result.position > DISCOVERY_MAX_POSITION:
                    continue

                domain = hostname_from_url(result.url)
                if not domain or domain == self.own_domain or is_excluded_domain(domain):
                    continue
                if domain in competitors:
                    continue

                competitors[domain] = Competitor(
                    id=domain_to_id(domain),
                    name=extract_business_name(result.title, domain),
                    domain=domain,
                    location=self.location,
                    business_type=classify_business_type(result.title, result.snippet),
                )

        logger.info(f"Discovered {len(competitors)} competitors in {self.location} "
                    f"across {len(self.keywords)} keywords")
        return list(competitors.values())

    def merge_manual_competitors(
        self,
        discovered: List[Competitor],
        domains: Iterable[str],
    ) -> List[Competitor]:
        """
        Add operator-specified competitor domains.

        Manual entries are typed as installers and are not checked against
        the operator's own domain or the platform denylist.
        """
        merged = list(discovered)
        known = {c.domain for c in merged}

        for raw in domains or []:
            domain = normalize_domain(raw)
            if not domain or domain in known:
                continue
            known.add(domain)
            merged.append(Competitor(
                id=domain_to_id(domain),
                name=_name_from_domain(domain),
                domain=domain,
                location=self.location,
                business_type=BusinessType.SOLAR_INSTALLER,
                manual=True,
            ))

        return merged

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    async def track_rankings(self, competitors: List[Competitor]) -> List[CompetitorRanking]:
        """Position of every competitor for every keyword, sequentially."""
        rankings: List[CompetitorRanking] = []
        first = True

        for competitor in competitors:
            for keyword in self.keywords:
                if not first:
                    await self._pause()
                first = False

                try:
                    ranking = await self.serp.find_domain_ranking(keyword, competitor.domain, self.location)
                except SerpSourceError as e:
                    message = f"Ranking failed for {competitor.domain} on '{keyword}': {e}"
                    logger.warning(message)
                    self.errors.append(message)
                    ranking = fallback_ranking(keyword, self.location, self.rng)

                rankings.append(CompetitorRanking(
                    competitor_id=competitor.id,
                    keyword=keyword,
                    position=ranking.position,
                    url=ranking.url or "",
                    title=ranking.title or "",
                    location=self.location,
                    estimated_traffic=ranking.estimated_traffic,
                    source=ranking.source,
                ))

        return rankings

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(
        self,
        competitors: List[Competitor],
        rankings: List[CompetitorRanking],
        previous: Optional[List[CompetitorRanking]] = None,
    ) -> List[CompetitorAnalysis]:
        """
        Per-competitor metrics.

        Trends compare against `previous` when given, otherwise against each
        competitor's stored previous_average_position.
        """
        by_competitor: Dict[str, List[CompetitorRanking]] = defaultdict(list)
        for ranking in rankings:
            by_competitor[ranking.competitor_id].append(ranking)

        previous_positions: Dict[str, List[Optional[int]]] = defaultdict(list)
        for ranking in previous or []:
            previous_positions[ranking.competitor_id].append(ranking.position)

        analyses = []
        for competitor in competitors:
            competitor_rankings = by_competitor.get(competitor.id, [])
            positions = [r.position for r in competitor_rankings]
            avg = average_position(positions)

            if previous is None:
                previous_avg = competitor.previous_average_position
            elif competitor.id in previous_positions:
                previous_avg = average_position(previous_positions[competitor.id])
            else:
                previous_avg = None

            analyses.append(CompetitorAnalysis(
                competitor=competitor,
                rankings=competitor_rankings,
                average_position=avg,
                total_keywords=sum(1 for p in positions if p),
                estimated_traffic=sum(r.estimated_traffic for r in competitor_rankings),
                visibility_score=(
                    calculate_visibility_score(positions, len(self.keywords))
                    if competitor_rankings else 0
                ),
                trending=determine_trend(avg, previous_avg),
                business_signal=determine_business_signal(competitor.business_type, avg),
            ))

        return analyses

    def summarize(self, analyses: List[CompetitorAnalysis]) -> CompetitorSummary:
        """Market summary; the average covers competitors that rank at all."""
        ranked = [a.average_position for a in analyses if a.average_position > 0]
        avg = round_half_up(sum(ranked) / len(ranked)) if ranked else 0

        total_visibility = sum(a.visibility_score for a in analyses)
        market_share = round(100 / total_visibility, 2) if total_visibility > 0 else 0

        top = sorted(analyses, key=lambda a: a.visibility_score, reverse=True)[:TOP_COMPETITORS]
        top_competitors = [
            {
                "name": a.competitor.name,
                "domain": a.competitor.domain,
                "averagePosition": round_half_up(a.average_position),
                "visibilityScore": a.visibility_score,
            }
            for a in top
        ]

        return CompetitorSummary(
            total_competitors=len(analyses),
            average_position=avg,
            market_share=market_share,
            top_competitors=top_competitors,
            keyword_gaps=self.keyword_gaps(analyses),
        )

    def keyword_gaps(self, analyses: List[CompetitorAnalysis]) -> List[KeywordGap]:
        """How crowded each tracked keyword's top 20 is."""
        counts: Dict[str, int] = defaultdict(int)
        for analysis in analyses:
            for ranking in analysis.rankings:
                if ranking.position and ranking.position <= DISCOVERY_MAX_POSITION:
                    counts[ranking.keyword] += 1

        return [
            KeywordGap(
                keyword=keyword,
                competitor_count=counts.get(keyword, 0),
                opportunity=classify_keyword_gap(counts.get(keyword, 0)),
            )
            for keyword in self.keywords
        ]

    def insights(self, analyses: List[CompetitorAnalysis]) -> List[CompetitorInsight]:
        insights = []

        weak = [a for a in analyses if a.visibility_score < 20 and a.total_keywords > 0]
        if weak:
            insights.append(CompetitorInsight(
                insight=f"{len(weak)} competitors have low visibility scores - opportunity to outrank them",
                type="opportunity",
                priority="high",
            ))

        strong = [a for a in analyses if a.visibility_score > 70]
        if strong:
            insights.append(CompetitorInsight(
                insight=f"{len(strong)} competitors dominate rankings - analyze their strategies",
                type="threat",
                priority="high",
            ))

        rising = [a for a in analyses if a.trending == Trend.UP]
        if rising:
            insights.append(CompetitorInsight(
                insight=f"{len(rising)} competitors are trending upward - monitor closely",
                type="trend",
                priority="medium",
            ))

        local_leaders = [
            a for a in analyses
            if a.competitor.business_type == BusinessType.SOLAR_INSTALLER
            and 0 < a.average_position < 10
        ]
        if len(local_leaders) > 2:
            insights.append(CompetitorInsight(
                insight="Local installers dominating search results - focus on local SEO strategies",
                type="trend",
                priority="high",
            ))

        return insights

    # ------------------------------------------------------------------
    # Full pass
    # ------------------------------------------------------------------

    async def run(
        self,
        manual_domains: Optional[Iterable[str]] = None,
        persist: Optional[PersistCallback] = None,
    ) -> TrackingResult:
        """
        Discover, rank, persist and analyze.

        Args:
            manual_domains: Operator-specified competitor domains
            persist: Called with (competitors, rankings); returns the previous
                rankings of those competitors (or None)

        Raises:
            Exception: Any non-SERP failure, after moving to FAILED
        """
        self.errors = []
        started = datetime.utcnow()

        try:
            self._transition(TrackingState.DISCOVERING)
            discovered = await self.discover_competitors()
            competitors = self.merge_manual_competitors(discovered, manual_domains or [])

            self._transition(TrackingState.RANKING)
            rankings = await self.track_rankings(competitors)

            self._transition(TrackingState.PERSISTING)
            previous = persist(competitors, rankings) if persist else None

            analyses = self.analyze(competitors, rankings, previous)
            summary = self.summarize(analyses)
            insights = self.insights(analyses)

            self._transition(TrackingState.DONE)
        except Exception as e:
            logger.error(f"Competitor tracking failed in {self.location} during {self.state.value}: {e}")
            self._transition(TrackingState.FAILED)
            raise

        duration = (datetime.utcnow() - started).total_seconds()
        logger.info(f"Tracked {len(competitors)} competitors / {len(rankings)} rankings "
                    f"in {self.location} ({duration:.1f}s, {len(self.errors)} errors)")

        return TrackingResult(
            location=self.location,
            keywords=list(self.keywords),
            competitors=competitors,
            rankings=rankings,
            analyses=analyses,
            summary=summary,
            insights=insights,
            errors=list(self.errors),
            state=self.state,
        )
