"""
glyph/features/discovery/persistence.py

Storage for discovery rows.

The UNIQUE (user_id, glyph_id) constraint is the only guard against
duplicate discoveries; a violation is reported as ALREADY_EXISTED rather
than an error so the result does not depend on backend-specific error codes.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select, insert
from sqlalchemy.exc import IntegrityError

from glyph.core.database import get_db_session, glyph_discoveries, glyphs
from glyph.features.glyphs.persistence import active_glyphs, row_to_glyph
from glyph.models.discovery import (
    DiscoveredGlyph,
    Discovery,
    DiscoveryLocation,
    DiscoveryOutcome,
    DiscoveryResult,
)


def _row_to_discovery(row) -> Discovery:
    return Discovery(
        id=row.id,
        user_id=row.user_id,
        glyph_id=row.glyph_id,
        discovery_location=DiscoveryLocation(
            lat=row.discovery_location_lat,
            lng=row.discovery_location_lng,
        ),
        discovered_at=row.discovered_at,
    )


class DiscoveryPersistence:

    @staticmethod
    def insert_discovery(
        user_id: str,
        glyph_id: str,
        lat: Optional[float],
        lng: Optional[float],
        discovered_at: datetime,
    ) -> DiscoveryResult:
        """
        Insert a discovery row, absorbing the duplicate-key case.

        Returns:
            DiscoveryResult tagged CREATED with the new row, or
            ALREADY_EXISTED with the row that was already stored.

        Raises:
            IntegrityError for violations other than (user_id, glyph_id) uniqueness,
            and any other SQLAlchemyError unchanged.
        """
        try:
            with get_db_session() as session:
                session.execute(
                    insert(glyph_discoveries).values(
                        user_id=user_id,
                        glyph_id=glyph_id,
                        discovery_location_lat=lat,
                        discovery_location_lng=lng,
                        discovered_at=discovered_at,
                    )
                )
                row = session.execute(
                    select(glyph_discoveries).where(
                        glyph_discoveries.c.user_id == user_id,
                        glyph_discoveries.c.glyph_id == glyph_id,
                    )
                ).first()
                return DiscoveryResult(outcome=DiscoveryOutcome.CREATED, discovery=_row_to_discovery(row))
        except IntegrityError:
            existing = DiscoveryPersistence.get_discovery(user_id, glyph_id)
            if existing is None:
                # Not the uniqueness constraint (e.g. unknown glyph_id)
                raise
            return DiscoveryResult(outcome=DiscoveryOutcome.ALREADY_EXISTED, discovery=existing)

    @staticmethod
    def get_discovery(user_id: str, glyph_id: str) -> Optional[Discovery]:
        with get_db_session() as session:
            row = session.execute(
                select(glyph_discoveries).where(
                    glyph_discoveries.c.user_id == user_id,
                    glyph_discoveries.c.glyph_id == glyph_id,
                )
            ).first()
            return _row_to_discovery(row) if row else None

    @staticmethod
    def list_discovered_glyphs(user_id: str) -> List[DiscoveredGlyph]:
        """Discovery rows joined to their active glyphs, oldest discovery first."""
        stmt = (
            active_glyphs(
                glyphs,
                glyph_discoveries.c.discovered_at,
                glyph_discoveries.c.discovery_location_lat,
                glyph_discoveries.c.discovery_location_lng,
            )
            .select_from(glyph_discoveries.join(glyphs, glyph_discoveries.c.glyph_id == glyphs.c.id))
            .where(glyph_discoveries.c.user_id == user_id)
            .order_by(glyph_discoveries.c.discovered_at, glyph_discoveries.c.id)
        )
        with get_db_session() as session:
            results = []
            for row in session.execute(stmt):
                glyph = row_to_glyph(row)
                results.append(
                    DiscoveredGlyph(
                        **glyph.model_dump(),
                        discovered_at=row.discovered_at,
                        discovery_location=DiscoveryLocation(
                            lat=row.discovery_location_lat,
                            lng=row.discovery_location_lng,
                        ),
                    )
                )
            return results

    @staticmethod
    def list_category_timestamps(user_id: str) -> List[Tuple[str, datetime]]:
        """(category, discovered_at) for each of the user's discoveries of active glyphs."""
        stmt = (
            active_glyphs(glyphs.c.category, glyph_discoveries.c.discovered_at)
            .select_from(glyph_discoveries.join(glyphs, glyph_discoveries.c.glyph_id == glyphs.c.id))
            .where(glyph_discoveries.c.user_id == user_id)
        )
        with get_db_session() as session:
            return [(row.category, row.discovered_at) for row in session.execute(stmt)]
