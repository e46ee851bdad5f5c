"""
Scoring Helper Functions and Constants

Contains the CTR curve, keyword volume table, location multipliers and
utility functions used across all scoring calculations.
"""

import math
from typing import Dict, List, Optional, Tuple


# ============================================================================
# CTR CURVE (industry average organic CTR, percent)
# ============================================================================

CTR_CURVE: Dict[int, float] = {
    1: 31.7,
    2: 24.7,
    3: 18.7,
    4: 13.1,
    5: 9.5,
    6: 6.9,
    7: 5.1,
    8: 3.8,
    9: 2.8,
    10: 2.2,
}


def get_ctr_for_position(position: Optional[int]) -> float:
    """
    Get estimated CTR for a SERP position.

    Args:
        position: SERP position (1-100), None when not ranked

    Returns:
        Estimated CTR as a percentage (0.0 - 100.0)
    """
    if not position or position <= 0:
        return 0.0
    if position <= 10:
        return CTR_CURVE[position]
    if position <= 20:
        return 1.0
    if position <= 50:
        return 0.5
    return 0.1


# ============================================================================
# SEARCH VOLUME
# ============================================================================

DEFAULT_BASE_VOLUME = 1000

# Estimated monthly searches for a keyword stem
BASE_VOLUMES: Dict[str, int] = {
    "solar installation": 5000,
    "solar panels": 8000,
    "solar financing": 2000,
    "solar company": 3000,
    "solar quotes": 4000,
    "residential solar": 3500,
    "commercial solar": 1500,
    "solar roof": 2500,
    "best solar company": 2500,
    "solar installer near me": 4500,
    "affordable solar": 2200,
    "cheap solar": 1800,
    "top rated solar installers": 1600,
    "tesla powerwall": 4000,
    "home battery backup": 2600,
    "enphase": 1200,
    "rec solar panels": 900,
    "solar rebates": 3000,
    "solar tax credit": 2800,
    "net metering": 1500,
}

# First matching metro wins
LOCATION_MULTIPLIERS: List[Tuple[Tuple[str, ...], float]] = [
    (("los angeles",), 2.0),
    (("phoenix",), 1.5),
    (("san diego",), 1.3),
    (("austin", "san antonio", "las vegas"), 1.2),
    (("round rock", "cedar park", "georgetown", "leander", "pflugerville", "hutto"), 0.6),
]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (dashboard convention)."""
    return int(math.floor(value + 0.5))


def match_base_volume(keyword: str) -> int:
    """Base volume of the longest table stem that prefixes the keyword."""
    keyword_lower = (keyword or "").strip().lower()
    best_stem = None
    for stem in BASE_VOLUMES:
        if keyword_lower.startswith(stem):
            if best_stem is None or len(stem) > len(best_stem):
                best_stem = stem
    return BASE_VOLUMES[best_stem] if best_stem else DEFAULT_BASE_VOLUME


def get_location_multiplier(location: Optional[str]) -> float:
    """Search volume multiplier for a service area (1.0 when unknown)."""
    if not location:
        return 1.0
    location_lower = location.lower()
    for names, multiplier in LOCATION_MULTIPLIERS:
        if any(name in location_lower for name in names):
            return multiplier
    return 1.0


def estimate_volume(keyword: str, location: Optional[str] = None) -> int:
    """
    Estimate monthly search volume for a keyword in a location.

    Example:
        estimate_volume("solar installation", "Phoenix, AZ") -> 7500
    """
    return int(math.floor(match_base_volume(keyword) * get_location_multiplier(location)))


def estimate_traffic(position: Optional[int], keyword: str, location: Optional[str] = None) -> int:
    """Estimated monthly clicks: volume × ctr(position) / 100."""
    if not position:
        return 0
    return int(math.floor(estimate_volume(keyword, location) * get_ctr_for_position(position) / 100))


# ============================================================================
# COMPETITION
# ============================================================================

# (substrings, assumed competitor count); first match wins
COMPETITION_RULES: List[Tuple[Tuple[str, ...], int]] = [
    (("tesla powerwall", "battery"), 3),
    (("rebates", "tax credit", "financ"), 4),
    (("best", "top rated"), 6),
]
DEFAULT_COMPETITOR_COUNT = 5


def simulate_competitor_count(keyword: str) -> int:
    """Proxy for how many established competitors fight for a keyword."""
    keyword_lower = (keyword or "").lower()
    for needles, count in COMPETITION_RULES:
        if any(needle in keyword_lower for needle in needles):
            return count
    return DEFAULT_COMPETITOR_COUNT
