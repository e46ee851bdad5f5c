"""
Visibility Scoring

Position-based visibility for a competitor across the tracked keyword set.
Each ranked keyword earns max(0, 101 - position) points, so #1 is worth 100.
The score is the share of the maximum (ranked #1 for every tracked keyword).
"""

from typing import Iterable, Optional

from .helpers import round_half_up


def calculate_visibility_score(positions: Iterable[Optional[int]], keyword_count: int) -> int:
    """
    Visibility score (0-100).

    Args:
        positions: Position per tracked keyword, None when not ranked
        keyword_count: Number of tracked keywords (the denominator)
    """
    if keyword_count <= 0:
        return 0
    actual = sum(max(0, 101 - p) for p in positions if p)
    # 100 × actual / (keyword_count × 100)
    return round_half_up(actual / keyword_count)


def average_position(positions: Iterable[Optional[int]]) -> float:
    """Mean over ranked keywords only; 0.0 when nothing ranks."""
    ranked = [p for p in positions if p]
    if not ranked:
        return 0.0
    return sum(ranked) / len(ranked)
