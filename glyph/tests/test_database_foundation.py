import pytest
from sqlalchemy import inspect, select

from glyph.core.database import (
    check_connection,
    get_db_session,
    get_engine,
    glyphs,
    reset_database,
)


def test_check_connection():
    assert check_connection() is True


def test_session_rolls_back_on_error(make_glyph):
    glyph = make_glyph()
    with pytest.raises(RuntimeError):
        with get_db_session() as session:
            session.execute(glyphs.update().where(glyphs.c.id == glyph.id).values(text="changed"))
            raise RuntimeError("abort")

    with get_db_session() as session:
        assert session.execute(select(glyphs.c.text).where(glyphs.c.id == glyph.id)).scalar_one() == glyph.text


def test_reset_database_recreates_tables(make_glyph):
    make_glyph()
    reset_database()

    inspector = inspect(get_engine())
    for table in ("glyphs", "glyph_discoveries", "user_streaks", "glyph_ratings", "glyph_comments"):
        assert inspector.has_table(table)
    with get_db_session() as session:
        assert session.execute(select(glyphs.c.id)).all() == []
