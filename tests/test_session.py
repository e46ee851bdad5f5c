"""
Test Suite for Database Session Configuration
"""

from solar_rank.database import get_database_url
from solar_rank.utils.config import Settings


class TestDatabaseUrl:
    """Test URL resolution from settings."""

    def test_database_url_wins(self):
        settings = Settings(DATABASE_URL="postgresql://u:p@db/solar", POSTGRES_URL="postgresql://other/x")
        assert get_database_url(settings) == "postgresql://u:p@db/solar"

    def test_postgres_scheme_rewritten(self):
        settings = Settings(DATABASE_URL=None, POSTGRES_URL="postgres://u:p@db/solar")
        assert get_database_url(settings) == "postgresql://u:p@db/solar"

    def test_sqlite_fallback(self):
        settings = Settings(DATABASE_URL=None, POSTGRES_URL=None, SQLITE_PATH="local.db")
        assert get_database_url(settings) == "sqlite:///local.db"
