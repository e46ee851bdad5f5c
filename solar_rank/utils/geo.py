"""Static geocoding for service areas the business operates in."""

from typing import Dict, Optional, Tuple

CITY_COORDINATES: Dict[str, Tuple[float, float]] = {
    "austin, tx": (30.2672, -97.7431),
    "central austin": (30.2672, -97.7431),
    "round rock, tx": (30.5084, -97.6789),
    "cedar park, tx": (30.5052, -97.8203),
    "georgetown, tx": (30.6332, -97.6779),
    "pflugerville, tx": (30.4394, -97.6200),
    "leander, tx": (30.5788, -97.8531),
    "hutto, tx": (30.5427, -97.5464),
    "lakeway, tx": (30.3632, -97.9961),
    "san antonio, tx": (29.4241, -98.4936),
    "phoenix, az": (33.4484, -112.0740),
    "tucson, az": (32.2226, -110.9747),
    "mesa, az": (33.4152, -111.8315),
    "scottsdale, az": (33.4942, -111.9261),
    "tempe, az": (33.4255, -111.9400),
}


def get_city_coords(area: str) -> Optional[Tuple[float, float]]:
    """Return (lat, lng) for a known "City, ST" area, or None."""
    if not area:
        return None
    return CITY_COORDINATES.get(area.strip().lower())
