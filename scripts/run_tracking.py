#!/usr/bin/env python3
"""
Scheduled Tracking Runner

Runs the ranking jobs outside the API (cron, scheduler):
1. Competitor tracking across every service area
2. Live ranking pass for the configured areas
3. Keyword bootstrap for a single area

Usage:
    # Uses DATABASE_URL / LIVE_SCRAPER_ENABLED from the environment or .env
    python scripts/run_tracking.py competitors

    python scripts/run_tracking.py live --area "Austin, TX"
    python scripts/run_tracking.py bootstrap --area "Round Rock, TX" --limit 8
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def run_job(job: str, area: str = None, limit: int = 12) -> dict:
    """Run one job against the configured database and SERP source."""

    load_dotenv()

    from solar_rank.business import ConfigurationError
    from solar_rank.database import get_db_context, init_db
    from solar_rank.database.repository import get_business_config
    from solar_rank.serp import get_serp_source
    from solar_rank.services import (
        bootstrap_area_keywords,
        run_live_rankings,
        run_scheduled_tracking,
    )
    from solar_rank.utils.config import get_settings

    settings = get_settings()
    init_db()

    async with get_serp_source(settings) as serp:
        with get_db_context() as db:
            config = get_business_config(db)
            try:
                if job == "competitors":
                    return await run_scheduled_tracking(db, serp, config, settings)
                if job == "live":
                    return await run_live_rankings(
                        db, serp, config, [area] if area else None,
                        live_enabled=settings.LIVE_SCRAPER_ENABLED,
                        request_delay=settings.SERP_REQUEST_DELAY,
                        area_delay=settings.SERP_AREA_DELAY,
                    )
                return await bootstrap_area_keywords(
                    db, serp, config, area,
                    limit=limit,
                    request_delay=settings.SERP_REQUEST_DELAY,
                )
            except ConfigurationError as e:
                logger.error(f"Configuration error: {e}")
                return {"success": False, "error": str(e)}


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run solar ranking and competitor tracking jobs"
    )
    parser.add_argument(
        "job",
        choices=["competitors", "live", "bootstrap"],
        help="Job to run"
    )
    parser.add_argument(
        "--area",
        default=None,
        help="Service area, e.g. \"Austin, TX\" (required for bootstrap)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=12,
        help="Keywords to check when bootstrapping (default: 12)"
    )

    args = parser.parse_args()
    if args.job == "bootstrap" and not args.area:
        parser.error("--area is required for bootstrap")

    result = asyncio.run(run_job(args.job, area=args.area, limit=args.limit))
    print(json.dumps(result, indent=2, default=str))

    if not result.get("success", False):
        sys.exit(1)


if __name__ == "__main__":
    main()
