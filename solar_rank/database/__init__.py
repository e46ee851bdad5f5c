"""Persistence layer: SQLAlchemy models, sessions and repository functions."""

from .models import (
    Base,
    BusinessInfo,
    CompetitorRankingRecord,
    CompetitorRecord,
    KeywordRanking,
    Location,
    OAuthToken,
)
from .session import (
    check_db_connection,
    create_db_engine,
    get_database_url,
    get_db,
    get_db_context,
    get_db_info,
    get_engine,
    get_session_factory,
    init_db,
    transaction,
)
from . import repository

__all__ = [
    "Base",
    "BusinessInfo",
    "CompetitorRankingRecord",
    "CompetitorRecord",
    "KeywordRanking",
    "Location",
    "OAuthToken",
    "check_db_connection",
    "create_db_engine",
    "get_database_url",
    "get_db",
    "get_db_context",
    "get_db_info",
    "get_engine",
    "get_session_factory",
    "init_db",
    "transaction",
    "repository",
]
