# glyph/conftest.py
import os
import sys
import pytest
from pathlib import Path

# Add repository root to PYTHONPATH
REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture(scope="session")
def db_url():
    """
    Provide the database URL for tests.

    TEST_DATABASE_URL points the suite at a real Postgres; otherwise
    an in-memory SQLite database shared through a StaticPool is used.
    """
    return os.getenv("TEST_DATABASE_URL") or "sqlite://"


@pytest.fixture(scope="session", autouse=True)
def create_tables(db_url):
    """
    Bind the engine and create all tables once per test session.
    """
    from glyph.core.database import init_engine, create_all_tables

    init_engine(db_url)
    create_all_tables()
    yield


@pytest.fixture(scope="function", autouse=True)
def reset_db(create_tables):
    """
    Clear all tables before each test so every test starts from an empty store.
    """
    from glyph.core.database import get_db_session, metadata

    with get_db_session() as session:
        # Reverse dependency order to respect foreign keys
        for table in reversed(metadata.sorted_tables):
            session.execute(table.delete())
    yield


@pytest.fixture
def make_glyph():
    """Factory that inserts an active glyph and returns it."""
    from glyph.features.glyphs.service import create_glyph
    from glyph.models.glyph import GlyphCreateRequest

    def _make(lat=40.7129, lng=-74.0061, text="Look under the bench", category="Hint", user_id="creator-1"):
        return create_glyph(
            GlyphCreateRequest(latitude=lat, longitude=lng, text=text, category=category),
            user_id=user_id,
        )

    return _make
