"""Keyword discovery for service areas."""

from .keyword_discovery import (
    DEFAULT_LIMIT,
    KEYWORD_TEMPLATES,
    KeywordDiscovery,
    KeywordSuggestion,
    discover_for_areas,
)

__all__ = [
    "DEFAULT_LIMIT",
    "KEYWORD_TEMPLATES",
    "KeywordDiscovery",
    "KeywordSuggestion",
    "discover_for_areas",
]
