"""
Simulated SERP Source

Deterministic stand-in for a live search engine. Every query returns the same
roster of solar-industry domains on the same position ladder, so rankings,
discovery and scoring are reproducible in tests and demos.

The roster mixes real businesses with platforms that the domain filter must
reject (YouTube, Facebook, Yelp, EnergySage, ...). The operator's own domain is
never injected.
"""

import logging
from typing import List, Optional, Tuple

from .base import SearchResult, SerpSource

logger = logging.getLogger(__name__)


# (position, url, title, snippet)
SIMULATED_ROSTER: List[Tuple[int, str, str, str]] = [
    (1, "https://www.sunpower.com/solar-installation",
     "SunPower - Solar Panels & Home Solar Installation",
     "Residential solar installation by certified SunPower installers."),
    (2, "https://www.youtube.com/watch?v=solar101",
     "How Solar Panels Work - YouTube",
     "Watch how rooftop solar turns sunlight into electricity."),
    (3, "https://www.texassolarpros.com/",
     "Texas Solar Pros | Local Solar Installer",
     "Licensed solar contractor serving Central Texas homeowners."),
    (4, "https://www.energysage.com/local-data/solar-cost/",
     "Compare Solar Quotes | EnergySage",
     "Get competing quotes from pre-screened installers."),
    (5, "https://www.tesla.com/solarpanels",
     "Tesla Solar Panels | Tesla",
     "Power your home with solar panels and Powerwall storage."),
    (6, "https://www.facebook.com/localsolargroup",
     "Local Solar Group | Facebook",
     "Community page for solar owners."),
    (7, "https://www.freedomsolarpower.com/",
     "Freedom Solar Power: Texas Solar Installers",
     "Top-rated solar panel installation company in Texas."),
    (8, "https://www.yelp.com/search?find_desc=solar+installers",
     "Top 10 Best Solar Installers Near Me - Yelp",
     "Reviews of local solar companies."),
    (9, "https://www.austinenergy.com/green-power/solar-solutions",
     "Solar Solutions - Austin Energy",
     "Austin Energy is the community-owned electric utility for Austin."),
    (10, "https://www.sunrun.com/",
     "Sunrun - Solar Panel Installation & Home Battery Storage",
     "America's leading home solar and battery storage company."),
    (11, "https://en.wikipedia.org/wiki/Solar_power",
     "Solar power - Wikipedia",
     "Solar power is the conversion of energy from sunlight into electricity."),
    (12, "https://www.blueravensolar.com/texas/",
     "Blue Raven Solar - Solar Company in Texas",
     "Solar energy systems designed for your home."),
    (13, "https://www.ionsolarpros.com/",
     "ION Solar: Solar Installation Company",
     "Custom solar installs with a 25-year warranty."),
    (14, "https://www.seia.org/initiatives/solar-market-insight",
     "Solar Market Insight | SEIA",
     "Quarterly solar market data from the Solar Energy Industries Association."),
    (15, "https://www.momentumsolar.com/",
     "Momentum Solar | Residential Solar Installer",
     "Go solar with a trusted installer."),
    (17, "https://www.homedepot.com/b/Electrical-Renewable-Energy-Solar-Panels/N-5yc1vZc7u6",
     "Solar Panels - The Home Depot",
     "Shop solar panels, kits and accessories."),
    (19, "https://www.txu.com/residential/solar",
     "TXU Energy Solar Club",
     "Texas electric provider plans for solar homes."),
    (21, "https://www.greenbrilliance.com/",
     "GreenBrilliance - Solar Energy Contractor",
     "Solar and roofing contractor for homes and businesses."),
    (24, "https://www.palmetto.com/",
     "Palmetto Solar | Clean Energy for Homes",
     "Lease or buy solar with monitoring included."),
    (27, "https://www.solarreviews.com/solar-companies",
     "Best Solar Companies 2024 | SolarReviews",
     "Ratings of solar companies by homeowners."),
    (31, "https://www.sunnova.com/",
     "Sunnova - Solar & Storage Service Provider",
     "Energy as a service for homeowners."),
    (35, "https://us.ecoflow.com/collections/solar-panels",
     "EcoFlow Portable Solar Panels",
     "Portable solar panels for power stations."),
    (40, "https://www.renogy.com/",
     "Renogy: Solar Panels, Batteries & Kits",
     "Off-grid solar products."),
    (47, "https://www.bbb.org/us/tx/austin/category/solar-energy",
     "Solar Energy near Austin, TX | Better Business Bureau",
     "BBB accredited solar businesses."),
]


class SimulatedSerpSource(SerpSource):
    """SERP source backed by the fixed roster; ignores the query."""

    mode = "simulation"

    def __init__(self, roster: Optional[List[Tuple[int, str, str, str]]] = None):
        self.roster = list(roster if roster is not None else SIMULATED_ROSTER)

    async def search(self, query: str, location: Optional[str] = None) -> List[SearchResult]:
        logger.debug(f"Simulated search: '{query}' ({location or 'no location'})")
        return [
            SearchResult(title=title, url=url, position=position, snippet=snippet)
            for position, url, title, snippet in self.roster
        ]
