"""
Opportunity Scoring

Keyword opportunity (0-100) balances estimated search volume against the
assumed competitor density for the keyword:

    opportunity = clamp(0, 100, round(volume / 120) - min(60, competitors × 10))

Higher is better. Gap tiers classify tracked keywords by how many discovered
competitors already hold a top-20 position.
"""

from .helpers import round_half_up

VOLUME_DIVISOR = 120
COMPETITOR_PENALTY = 10
MAX_COMPETITOR_PENALTY = 60


def calculate_keyword_opportunity(volume: int, competitor_count: int) -> int:
    """Opportunity score for a keyword, clamped to [0, 100]."""
    volume_score = round_half_up(max(0, volume) / VOLUME_DIVISOR)
    penalty = min(MAX_COMPETITOR_PENALTY, max(0, competitor_count) * COMPETITOR_PENALTY)
    return max(0, min(100, volume_score - penalty))


def classify_keyword_gap(competitor_count: int) -> str:
    """
    Gap tier for a tracked keyword.

    ≤2 competitors in the top 20 -> "high", ≤5 -> "medium", else "low".
    """
    if competitor_count <= 2:
        return "high"
    if competitor_count <= 5:
        return "medium"
    return "low"
