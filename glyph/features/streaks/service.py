from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from glyph.core.logging import log_event
from glyph.features.streaks.milestones import achievements_for
from glyph.features.streaks.persistence import StreakPersistence
from glyph.models.streak import Achievement, StreakRecord


class StreakService:
    """Deterministic, once-per-day streak state machine for discoveries.

    State is the stored tuple (current, longest, last_discovery_date, total_days).
    Every operation takes an optional `today` so callers and tests can pin
    the calendar; otherwise the UTC date is used.
    """

    def get_user_streak(self, user_id: str) -> StreakRecord:
        """Stored streak, or the zero state for users who never discovered anything."""
        return StreakPersistence.get(user_id) or StreakRecord(user_id=user_id)

    def record_discovery_event(self, user_id: str, *, today: Optional[date] = None) -> StreakRecord:
        """Advance the streak for a confirmed new discovery. Same-day calls are no-ops."""
        day = today or self.today()
        record = self.get_user_streak(user_id)
        gap = self._gap_days(record.last_discovery_date, day)

        # Already counted today (a stored date ahead of `day` is clock skew, treated the same)
        if gap is not None and gap <= 0:
            return record

        if gap == 1:
            current = record.current_streak + 1
        else:
            current = 1

        updated = replace(
            record,
            current_streak=current,
            longest_streak=max(record.longest_streak, current),
            last_discovery_date=day,
            total_discovery_days=record.total_discovery_days + 1,
        )
        StreakPersistence.upsert(updated)

        event = "streak.incremented" if current > 1 else "streak.started"
        log_event(
            "info",
            event,
            user_id=user_id,
            event_type=event,
            extra={"current": updated.current_streak, "longest": updated.longest_streak, "day": day.isoformat()},
        )
        return updated

    def check_and_reconcile(self, user_id: str, *, today: Optional[date] = None) -> StreakRecord:
        """Zero a lapsed streak. Run before trusting current_streak for display.

        Best effort: if the reset cannot be written, the stored state is returned.
        """
        day = today or self.today()
        record = self.get_user_streak(user_id)
        gap = self._gap_days(record.last_discovery_date, day)

        if gap is None or gap <= 1 or record.current_streak == 0:
            return record

        try:
            reset = StreakPersistence.reset_current(user_id, record.last_discovery_date)
        except SQLAlchemyError as exc:
            log_event(
                "warning",
                "streak.reconcile_failed",
                user_id=user_id,
                event_type="streak.reconcile_failed",
                error_code=type(exc).__name__,
            )
            return record

        if not reset:
            # A discovery was recorded after our read; the stored row is current
            log_event("debug", "streak.reset_skipped", user_id=user_id, event_type="streak.reset_skipped")
            return self.get_user_streak(user_id)

        log_event(
            "info",
            "streak.reset",
            user_id=user_id,
            event_type="streak.reset",
            extra={"lapsed_days": gap, "previous": record.current_streak},
        )
        return replace(record, current_streak=0)

    def get_achievements(self, current: int, longest: int) -> List[Achievement]:
        return achievements_for(current, longest)

    def has_discovered_today(self, state: StreakRecord, *, today: Optional[date] = None) -> bool:
        return state.last_discovery_date == (today or self.today())

    def encouragement_message(self, state: StreakRecord, *, today: Optional[date] = None) -> str:
        if not self.has_discovered_today(state, today=today):
            return "Discover a glyph today to continue your streak!"
        current = state.current_streak
        if current <= 1:
            return "Great start! Discovery streak begun."
        if current < 7:
            return f"{current} day streak! Keep exploring."
        if current < 30:
            return f"{current} days strong! You're building a great habit."
        return f"Amazing {current} day streak! You're a true explorer."

    def days_until_risk(self, state: StreakRecord, *, today: Optional[date] = None) -> Optional[int]:
        """0 when today's discovery is still needed to keep the streak, else None."""
        if self.has_discovered_today(state, today=today):
            return None
        if state.current_streak == 0:
            return None
        return 0

    # Internal helpers -------------------------------------------------
    @staticmethod
    def today() -> date:
        return StreakService._normalize_day(datetime.now(timezone.utc))

    @staticmethod
    def _normalize_day(occurred_at: datetime) -> date:
        aware = occurred_at if occurred_at.tzinfo else occurred_at.replace(tzinfo=timezone.utc)
        return aware.astimezone(timezone.utc).date()

    @staticmethod
    def _gap_days(last: Optional[date], day: date) -> Optional[int]:
        if last is None:
            return None
        return (day - last).days


# Singleton service used by routes
streak_service = StreakService()
