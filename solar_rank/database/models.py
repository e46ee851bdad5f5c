"""
SQLAlchemy Models for Solar Rank Intelligence

Tables:
1. solar_locations - service areas (upserted by name, never deleted)
2. solar_keyword_rankings - append-only ranking facts per area/keyword
3. solar_competitors - discovered and manual competitors (upserted by id)
4. solar_competitor_rankings - latest snapshot per competitor (replaced per run)
5. solar_business_info - business profile history (latest row is current)
6. oauth_tokens - provider credentials for external integrations

JSON columns use JSONB on PostgreSQL and plain JSON elsewhere.
"""

from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, Text,
    ForeignKey, Index, CheckConstraint, JSON,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

JSONType = JSON().with_variant(JSONB, "postgresql")


# =============================================================================
# RANKING FACTS
# =============================================================================

class Location(Base):
    """A service area ("City, ST")."""

    __tablename__ = "solar_locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    lat = Column(Float)
    lng = Column(Float)
    overall_score = Column(Integer)
    last_updated = Column(DateTime, default=datetime.utcnow)

    rankings = relationship("KeywordRanking", back_populates="location")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "lat": self.lat,
            "lng": self.lng,
            "overallScore": self.overall_score,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }


class KeywordRanking(Base):
    """One observation of the operator's position for a keyword."""

    __tablename__ = "solar_keyword_rankings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(Integer, ForeignKey("solar_locations.id"), nullable=False)
    keyword = Column(String(500), nullable=False)
    position = Column(Integer)  # None when not ranked
    clicks = Column(Integer, default=0)
    impressions = Column(Integer, default=0)
    ctr = Column(Float, default=0.0)  # percent
    source = Column(String(20), default="serp")  # serp | fallback
    created_at = Column(DateTime, default=datetime.utcnow)

    location = relationship("Location", back_populates="rankings")

    __table_args__ = (
        CheckConstraint("position IS NULL OR (position >= 1 AND position <= 100)", name="ck_ranking_position"),
        Index("idx_ranking_location_time", "location_id", "created_at"),
        Index("idx_ranking_keyword", "keyword"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "location": self.location.name if self.location else None,
            "keyword": self.keyword,
            "position": self.position,
            "clicks": self.clicks,
            "impressions": self.impressions,
            "ctr": self.ctr,
            "source": self.source,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


# =============================================================================
# COMPETITORS
# =============================================================================

class CompetitorRecord(Base):
    """A competing business; id is derived from the normalized domain."""

    __tablename__ = "solar_competitors"

    id = Column(String(255), primary_key=True)
    competitor_name = Column(String(255), nullable=False)
    domain = Column(String(255), unique=True, nullable=False)
    location = Column(String(255))
    business_type = Column(String(50))  # solar_installer, solar_retailer, energy_company
    # Average position of the snapshot replaced by the latest run (trend baseline)
    previous_average_position = Column(Float)
    last_updated = Column(DateTime, default=datetime.utcnow)

    rankings = relationship(
        "CompetitorRankingRecord",
        back_populates="competitor",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_competitor_updated", "last_updated"),
    )


class CompetitorRankingRecord(Base):
    """A competitor's position for one keyword at the last check."""

    __tablename__ = "solar_competitor_rankings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    competitor_id = Column(String(255), ForeignKey("solar_competitors.id", ondelete="CASCADE"), nullable=False)
    keyword = Column(String(500), nullable=False)
    position = Column(Integer)
    ranking_url = Column(Text)
    page_title = Column(Text)
    estimated_traffic = Column(Integer, default=0)
    source = Column(String(20), default="serp")  # serp | fallback
    location = Column(String(255))
    last_checked = Column(DateTime, default=datetime.utcnow)

    competitor = relationship("CompetitorRecord", back_populates="rankings")

    # Rows are bulk-replaced every run; ids must never be reused
    __table_args__ = (
        Index("idx_competitor_ranking_lookup", "competitor_id", "keyword"),
        {"sqlite_autoincrement": True},
    )


# =============================================================================
# CONFIGURATION
# =============================================================================

class BusinessInfo(Base):
    """One saved version of the business profile."""

    __tablename__ = "solar_business_info"

    id = Column(Integer, primary_key=True, autoincrement=True)
    business_name = Column(String(255))
    website = Column(String(500))
    service_areas = Column(JSONType, default=list)
    target_keywords = Column(JSONType, default=dict)  # list or {global, areas, competitors}
    created_at = Column(DateTime, default=datetime.utcnow)


class OAuthToken(Base):
    """Stored OAuth credentials, one row per provider."""

    __tablename__ = "oauth_tokens"

    provider = Column(String(50), primary_key=True)
    access_token = Column(Text)
    refresh_token = Column(Text)
    token_type = Column(String(50), default="Bearer")
    scope = Column(Text)
    expires_at = Column(DateTime)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
