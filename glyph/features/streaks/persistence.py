"""
glyph/features/streaks/persistence.py

One row per user in user_streaks, written by upsert keyed on user_id.
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select, insert, update
from sqlalchemy.exc import IntegrityError

from glyph.core.database import get_db_session, user_streaks
from glyph.models.streak import StreakRecord


def _row_to_record(row) -> StreakRecord:
    return StreakRecord(
        user_id=row.user_id,
        current_streak=row.current_streak,
        longest_streak=row.longest_streak,
        last_discovery_date=row.last_discovery_date,
        total_discovery_days=row.total_discovery_days,
    )


class StreakPersistence:

    @staticmethod
    def get(user_id: str) -> Optional[StreakRecord]:
        with get_db_session() as session:
            row = session.execute(select(user_streaks).where(user_streaks.c.user_id == user_id)).first()
            return _row_to_record(row) if row else None

    @staticmethod
    def _update(record: StreakRecord, now: datetime) -> int:
        with get_db_session() as session:
            result = session.execute(
                update(user_streaks)
                .where(user_streaks.c.user_id == record.user_id)
                .values(
                    current_streak=record.current_streak,
                    longest_streak=record.longest_streak,
                    last_discovery_date=record.last_discovery_date,
                    total_discovery_days=record.total_discovery_days,
                    updated_at=now,
                )
            )
            return result.rowcount

    @staticmethod
    def upsert(record: StreakRecord) -> StreakRecord:
        """Write the full record. Insert when the user has no row yet."""
        now = datetime.now(timezone.utc)
        if StreakPersistence._update(record, now):
            return record
        try:
            with get_db_session() as session:
                session.execute(
                    insert(user_streaks).values(
                        user_id=record.user_id,
                        current_streak=record.current_streak,
                        longest_streak=record.longest_streak,
                        last_discovery_date=record.last_discovery_date,
                        total_discovery_days=record.total_discovery_days,
                        updated_at=now,
                    )
                )
        except IntegrityError:
            # Row created concurrently; last writer wins
            StreakPersistence._update(record, now)
        return record

    @staticmethod
    def reset_current(user_id: str, last_discovery_date: Optional[date]) -> int:
        """Zero current_streak only if the row still has last_discovery_date.

        Returns the number of rows reset; 0 means a discovery landed after
        the caller read the row.
        """
        with get_db_session() as session:
            result = session.execute(
                update(user_streaks)
                .where(
                    user_streaks.c.user_id == user_id,
                    user_streaks.c.last_discovery_date == last_discovery_date,
                )
                .values(current_streak=0, updated_at=datetime.now(timezone.utc))
            )
            return result.rowcount
