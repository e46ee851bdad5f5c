"""
Domain Filtering Utilities

Shared domain normalization and exclusion logic used by every competitor path:
- SERP-based competitor discovery
- Operator-supplied (manual) competitors
- Domain ranking lookups

Platforms like Facebook, YouTube or lead-gen marketplaces are NEVER turned into
competitors, regardless of how high they rank for a solar keyword.
"""

import re
import logging
from typing import Optional, Set
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


# =============================================================================
# EXCLUDED DOMAINS - non-business results that show up in solar SERPs
# =============================================================================

SOCIAL_MEDIA = {
    "facebook.com", "fb.com",
    "twitter.com", "x.com",
    "instagram.com",
    "linkedin.com",
    "tiktok.com",
    "pinterest.com",
    "reddit.com",
    "nextdoor.com",
}

VIDEO_PLATFORMS = {
    "youtube.com", "youtu.be",
    "vimeo.com",
}

REFERENCE_SITES = {
    "wikipedia.org",
    "quora.com",
    "investopedia.com",
    "forbes.com",
    "consumerreports.org",
}

TECH_GIANTS = {
    "google.com", "maps.google.com",
    "bing.com",
    "amazon.com",
    "apple.com",
}

# Directories and review aggregators
REVIEW_DIRECTORIES = {
    "yelp.com",
    "bbb.org",
    "angieslist.com", "angi.com",
    "homeadvisor.com",
    "thumbtack.com",
    "yellowpages.com",
    "houzz.com",
}

# Lead-gen marketplaces: they sell leads to installers, they don't install
LEAD_GEN_PLATFORMS = {
    "energysage.com",
    "solar.com",
    "solarreviews.com",
    "modernize.com",
    "solar-estimate.org",
}

# Trade associations and government programs
TRADE_AND_GOVERNMENT = {
    "seia.org",
    "solarpower.org",
    "energy.gov",
    "dsireusa.org",
    "nrel.gov",
}

GOVERNMENT_PATTERNS = {
    ".gov",
    ".edu",
    ".mil",
}

EXCLUDED_DOMAINS: Set[str] = (
    SOCIAL_MEDIA |
    VIDEO_PLATFORMS |
    REFERENCE_SITES |
    TECH_GIANTS |
    REVIEW_DIRECTORIES |
    LEAD_GEN_PLATFORMS |
    TRADE_AND_GOVERNMENT
)

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://")


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize_domain(value: Optional[str]) -> str:
    """
    Normalize a URL or bare domain to its comparable host form.

    Strips the scheme, any leading "www.", the path/query/fragment and the port.
    Idempotent: normalize_domain(normalize_domain(x)) == normalize_domain(x).

    Examples:
        "https://www.SunPower.com/residential" -> "sunpower.com"
        "sunpower.com" -> "sunpower.com"
    """
    if not value:
        return ""

    domain = value.strip().lower()
    domain = _SCHEME_RE.sub("", domain)
    domain = re.split(r"[/?#]", domain, maxsplit=1)[0]
    domain = domain.split("@")[-1]
    domain = domain.split(":")[0]
    # Stray dots can hide a "www." prefix, so strip them before each check
    domain = domain.strip(".")
    while domain.startswith("www."):
        domain = domain[4:].strip(".")
    return domain


def hostname_from_url(url: Optional[str]) -> str:
    """Extract the normalized hostname from a result URL ("" when unparseable)."""
    if not url:
        return ""
    try:
        parsed = urlparse(url if "://" in url else f"https://{url}")
    except ValueError:
        return ""
    return normalize_domain(parsed.hostname or "")


def domain_to_id(domain: str) -> str:
    """Stable competitor id derived from a normalized domain."""
    return re.sub(r"[^a-z0-9]", "-", normalize_domain(domain))


# =============================================================================
# EXCLUSION
# =============================================================================

def is_excluded_domain(domain: Optional[str]) -> bool:
    """
    Check if a domain should be excluded from competitor discovery.

    Matching strategies:
    1. Exact match against known platforms
    2. Subdomain match (business.facebook.com -> facebook.com)
    3. Government/educational TLD patterns
    """
    if not domain:
        return True

    domain_lower = normalize_domain(domain)
    if not domain_lower:
        return True

    if domain_lower in EXCLUDED_DOMAINS:
        return True

    for excluded in EXCLUDED_DOMAINS:
        if domain_lower.endswith("." + excluded):
            return True

    for pattern in GOVERNMENT_PATTERNS:
        if domain_lower.endswith(pattern) or (pattern + ".") in domain_lower:
            return True

    return False


def get_exclusion_reason(domain: str) -> Optional[str]:
    """
    Get the reason why a domain is excluded.

    Returns:
        Reason string if excluded, None if the domain is a valid competitor
    """
    if not domain:
        return "Empty domain"

    domain_lower = normalize_domain(domain)

    categories = [
        (SOCIAL_MEDIA, "Social media platform"),
        (VIDEO_PLATFORMS, "Video platform"),
        (REFERENCE_SITES, "Reference/media site"),
        (TECH_GIANTS, "Technology platform"),
        (REVIEW_DIRECTORIES, "Review/directory site"),
        (LEAD_GEN_PLATFORMS, "Lead-generation marketplace"),
        (TRADE_AND_GOVERNMENT, "Trade association/government program"),
    ]
    for domains, reason in categories:
        if domain_lower in domains or any(domain_lower.endswith("." + d) for d in domains):
            return reason

    for pattern in GOVERNMENT_PATTERNS:
        if domain_lower.endswith(pattern) or (pattern + ".") in domain_lower:
            return "Government/official site"

    return None
