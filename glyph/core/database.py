"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- Connection pooling with sane defaults
- In-memory SQLite support for tests
- Table definitions for glyphs, discoveries, streaks and interactions
"""
import logging
from typing import Optional
from contextlib import contextmanager
from sqlalchemy import (
    create_engine,
    event,
    MetaData,
    Table,
    Column,
    Integer,
    Float,
    String,
    Date,
    DateTime,
    Boolean,
    Text,
    Index,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    text,
)
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql import func
import os

from glyph.core.config import settings

logger = logging.getLogger("glyph")

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour

# Global engine and session factory
_engine = None
_SessionLocal = None


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings or environment.

    For testing, use TEST_DATABASE_URL if available.
    """
    test_url = os.getenv("TEST_DATABASE_URL")
    if test_url:
        return test_url

    return settings.DATABASE_URL


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with foreign key enforcement off
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_engine(database_url: Optional[str] = None):
    """
    Initialize the SQLAlchemy engine.

    Args:
        database_url: Optional override for DATABASE_URL
    """
    global _engine, _SessionLocal

    url = database_url or get_database_url()

    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    if url.startswith("sqlite"):
        # A single shared connection keeps in-memory databases alive across sessions
        _engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
        event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
    else:
        _engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            echo=False,  # Set to True for SQL query logging
        )

    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine
    )

    return _engine


def get_engine():
    """Get the current SQLAlchemy engine."""
    global _engine
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory():
    """Get the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.execute(...)
    """
    SessionLocal = get_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables():
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    engine = get_engine()
    metadata.create_all(bind=engine)


def drop_all_tables():
    """
    Drop all tables defined in metadata.

    WARNING: This is destructive! Only use in tests or development.
    """
    engine = get_engine()
    metadata.drop_all(bind=engine)


def reset_database():
    """
    Reset the database by dropping and recreating all tables.

    WARNING: This is destructive! Only use in tests.
    """
    drop_all_tables()
    create_all_tables()


def check_connection() -> bool:
    """
    Check if database connection is available.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database connection check failed: {e}")
        return False


# Glyphs: user-authored geotagged notes. Rows are soft-deleted via is_active.
glyphs = Table(
    'glyphs',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('latitude', Float, nullable=False),
    Column('longitude', Float, nullable=False),
    Column('text', String(280), nullable=False),
    Column('category', String(20), nullable=False, server_default='Hint'),
    Column('user_id', String(100), nullable=True, index=True),
    Column('is_active', Boolean, nullable=False, server_default=text('true')),
    Column('photo_url', Text, nullable=True),
    Column('rating_average', Float, nullable=False, server_default=text('0')),
    Column('rating_count', Integer, nullable=False, server_default=text('0')),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False),
    CheckConstraint('latitude >= -90 AND latitude <= 90', name='ck_glyphs_latitude'),
    CheckConstraint('longitude >= -180 AND longitude <= 180', name='ck_glyphs_longitude'),
    # Candidate scans filter on the active flag
    Index('idx_glyphs_active_category', 'is_active', 'category'),
)

# Discoveries: one row per (user, glyph), never mutated
glyph_discoveries = Table(
    'glyph_discoveries',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('glyph_id', String(36), ForeignKey('glyphs.id'), nullable=False, index=True),
    Column('discovery_location_lat', Float, nullable=True),
    Column('discovery_location_lng', Float, nullable=True),
    Column('discovered_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    UniqueConstraint('user_id', 'glyph_id', name='uq_glyph_discoveries_user_glyph'),
    Index('idx_glyph_discoveries_user_discovered', 'user_id', 'discovered_at'),
)

# Streaks: a single row per user, written by upsert
user_streaks = Table(
    'user_streaks',
    metadata,
    Column('user_id', String(100), primary_key=True),
    Column('current_streak', Integer, nullable=False, server_default=text('0')),
    Column('longest_streak', Integer, nullable=False, server_default=text('0')),
    Column('last_discovery_date', Date, nullable=True),
    Column('total_discovery_days', Integer, nullable=False, server_default=text('0')),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False),
)

# Ratings: one rating per (glyph, user), overwritten on re-rate
glyph_ratings = Table(
    'glyph_ratings',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('glyph_id', String(36), ForeignKey('glyphs.id'), nullable=False, index=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('rating', Integer, nullable=False),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False),
    UniqueConstraint('glyph_id', 'user_id', name='uq_glyph_ratings_glyph_user'),
    CheckConstraint('rating >= 1 AND rating <= 5', name='ck_glyph_ratings_range'),
)

# Comments
glyph_comments = Table(
    'glyph_comments',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('glyph_id', String(36), ForeignKey('glyphs.id'), nullable=False, index=True),
    Column('user_id', String(100), nullable=True, index=True),
    Column('comment', Text, nullable=False),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False),
    # Listing pattern: newest comments for a glyph
    Index('idx_glyph_comments_glyph_created', 'glyph_id', 'created_at'),
)
