"""Utility modules for Solar Rank Intelligence."""

from .config import Settings, get_settings
from .domain_filter import (
    EXCLUDED_DOMAINS,
    normalize_domain,
    hostname_from_url,
    domain_to_id,
    is_excluded_domain,
    get_exclusion_reason,
)
from .geo import CITY_COORDINATES, get_city_coords

__all__ = [
    "Settings",
    "get_settings",
    # Domains
    "EXCLUDED_DOMAINS",
    "normalize_domain",
    "hostname_from_url",
    "domain_to_id",
    "is_excluded_domain",
    "get_exclusion_reason",
    # Geo
    "CITY_COORDINATES",
    "get_city_coords",
]
