"""Ranking and competitor tracking jobs."""

from .competitor_tracking import (
    get_schedule_status,
    make_persist_callback,
    run_competitor_tracking,
    run_scheduled_tracking,
)
from .rankings import (
    RankingCheck,
    bootstrap_area_keywords,
    check_live_area,
    check_ranking,
    live_preview,
    run_auto_ranking,
    run_live_rankings,
)

__all__ = [
    "get_schedule_status",
    "make_persist_callback",
    "run_competitor_tracking",
    "run_scheduled_tracking",
    "RankingCheck",
    "bootstrap_area_keywords",
    "check_live_area",
    "check_ranking",
    "live_preview",
    "run_auto_ranking",
    "run_live_rankings",
]
