"""
Solar Rank Intelligence

Ranking and competitor intelligence backend for a solar-installation business:
1. Discovers local keyword opportunities per service area
2. Checks search rankings (simulated or live SERP)
3. Discovers and tracks competitors across keyword sets
4. Persists rankings to PostgreSQL and derives summaries for the dashboard
"""

__version__ = "0.4.0"
