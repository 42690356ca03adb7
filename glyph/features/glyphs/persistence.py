"""
glyph/features/glyphs/persistence.py

Relational storage for glyph rows.

Soft delete is the only delete: every read goes through active_glyphs() so
the is_active filter lives in exactly one place.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from sqlalchemy import select, insert, update
from sqlalchemy.sql import Select

from glyph.core.database import get_db_session, glyphs
from glyph.models.glyph import Glyph


def active_glyphs(*columns) -> Select:
    """SELECT over glyphs restricted to active rows."""
    stmt = select(*columns) if columns else select(glyphs)
    return stmt.where(glyphs.c.is_active.is_(True))


def row_to_glyph(row) -> Glyph:
    return Glyph(
        id=row.id,
        latitude=row.latitude,
        longitude=row.longitude,
        text=row.text,
        category=row.category,
        user_id=row.user_id,
        is_active=row.is_active,
        photo_url=row.photo_url,
        rating_average=row.rating_average or 0.0,
        rating_count=row.rating_count or 0,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class GlyphPersistence:
    """SQLAlchemy-backed glyph storage."""

    @staticmethod
    def insert_glyph(values: Dict[str, Any]) -> Glyph:
        with get_db_session() as session:
            session.execute(insert(glyphs).values(**values))
            row = session.execute(select(glyphs).where(glyphs.c.id == values["id"])).first()
            return row_to_glyph(row)

    @staticmethod
    def get_active(glyph_id: str) -> Optional[Glyph]:
        with get_db_session() as session:
            row = session.execute(active_glyphs().where(glyphs.c.id == glyph_id)).first()
            return row_to_glyph(row) if row else None

    @staticmethod
    def list_active(category: Optional[str] = None, user_id: Optional[str] = None) -> List[Glyph]:
        stmt = active_glyphs()
        if category:
            stmt = stmt.where(glyphs.c.category == category)
        if user_id:
            stmt = stmt.where(glyphs.c.user_id == user_id)
        stmt = stmt.order_by(glyphs.c.created_at, glyphs.c.id)
        with get_db_session() as session:
            return [row_to_glyph(row) for row in session.execute(stmt)]

    @staticmethod
    def update_active(glyph_id: str, values: Dict[str, Any]) -> Optional[Glyph]:
        """Apply values to an active glyph. Returns None if no active row matched."""
        values = dict(values)
        values.setdefault("updated_at", datetime.now(timezone.utc))
        with get_db_session() as session:
            result = session.execute(
                update(glyphs)
                .where(glyphs.c.id == glyph_id, glyphs.c.is_active.is_(True))
                .values(**values)
            )
            if result.rowcount == 0:
                return None
            row = session.execute(select(glyphs).where(glyphs.c.id == glyph_id)).first()
            return row_to_glyph(row)
