"""
Scoring Module for Solar Rank Intelligence

Pure functions used by every stage of the ranking pipeline:

1. **CTR & traffic** - fixed position→CTR table, keyword volume heuristics,
   location multipliers, estimated traffic.
2. **Keyword opportunity** (0-100) - volume against assumed competitor density.
3. **Visibility** (0-100) - position points as a share of the maximum.

Example Usage:
    from solar_rank.scoring import estimate_volume, calculate_keyword_opportunity

    volume = estimate_volume("solar installation", "Phoenix, AZ")   # 7500
    score = calculate_keyword_opportunity(volume, competitor_count=5)
"""

from .helpers import (
    CTR_CURVE,
    BASE_VOLUMES,
    DEFAULT_BASE_VOLUME,
    LOCATION_MULTIPLIERS,
    get_ctr_for_position,
    match_base_volume,
    get_location_multiplier,
    estimate_volume,
    estimate_traffic,
    simulate_competitor_count,
    round_half_up,
)
from .opportunity import (
    calculate_keyword_opportunity,
    classify_keyword_gap,
)
from .visibility import (
    calculate_visibility_score,
    average_position,
)

__all__ = [
    # CTR and volume
    "CTR_CURVE",
    "BASE_VOLUMES",
    "DEFAULT_BASE_VOLUME",
    "LOCATION_MULTIPLIERS",
    "get_ctr_for_position",
    "match_base_volume",
    "get_location_multiplier",
    "estimate_volume",
    "estimate_traffic",
    "simulate_competitor_count",
    "round_half_up",
    # Opportunity
    "calculate_keyword_opportunity",
    "classify_keyword_gap",
    # Visibility
    "calculate_visibility_score",
    "average_position",
]
