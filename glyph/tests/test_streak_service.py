from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from glyph.features.streaks.milestones import MILESTONES
from glyph.features.streaks.persistence import StreakPersistence
from glyph.features.streaks.service import StreakService
from glyph.models.streak import StreakRecord

TODAY = date(2024, 6, 15)


@pytest.fixture
def service():
    return StreakService()


def test_achievements_for_new_user(service):
    achievements = service.get_achievements(0, 0)

    assert len(achievements) == 1
    assert achievements[0].milestone == 3
    assert achievements[0].achieved is False
    assert achievements[0].progress_toward_next == 0


def test_achievements_list_reached_then_next(service):
    achievements = service.get_achievements(2, 8)

    assert [a.milestone for a in achievements] == [3, 7, 14]
    assert [a.achieved for a in achievements] == [True, True, False]
    assert achievements[-1].progress_toward_next == 2
    assert achievements[0].title == "Explorer"
    assert "progress_toward_next" not in achievements[0].to_dict()


def test_achievements_all_reached(service):
    achievements = service.get_achievements(400, 400)

    assert [a.milestone for a in achievements] == list(MILESTONES)
    assert all(a.achieved for a in achievements)


def test_encouragement_message_tiers(service):
    def state(current, last=TODAY):
        return StreakRecord(user_id="u", current_streak=current, longest_streak=current, last_discovery_date=last)

    assert service.encouragement_message(state(3, TODAY - timedelta(days=1)), today=TODAY) == (
        "Discover a glyph today to continue your streak!"
    )
    assert service.encouragement_message(state(1), today=TODAY) == "Great start! Discovery streak begun."
    assert service.encouragement_message(state(5), today=TODAY) == "5 day streak! Keep exploring."
    assert "12 days strong" in service.encouragement_message(state(12), today=TODAY)
    assert service.encouragement_message(state(45), today=TODAY).startswith("Amazing 45 day streak")


def test_days_until_risk(service):
    active_yesterday = StreakRecord(user_id="u", current_streak=4, longest_streak=4,
                                    last_discovery_date=TODAY - timedelta(days=1))
    done_today = StreakRecord(user_id="u", current_streak=4, longest_streak=4, last_discovery_date=TODAY)
    no_streak = StreakRecord(user_id="u")

    assert service.days_until_risk(active_yesterday, today=TODAY) == 0
    assert service.days_until_risk(done_today, today=TODAY) is None
    assert service.days_until_risk(no_streak, today=TODAY) is None


def test_has_discovered_today(service):
    service.record_discovery_event("u1", today=TODAY)
    state = service.get_user_streak("u1")

    assert service.has_discovered_today(state, today=TODAY)
    assert not service.has_discovered_today(state, today=TODAY + timedelta(days=1))


def test_reconcile_write_failure_returns_stored_state(monkeypatch, service, caplog):
    service.record_discovery_event("u2", today=TODAY)

    def failing_reset(user_id, last_discovery_date):
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    monkeypatch.setattr(StreakPersistence, "reset_current", staticmethod(failing_reset))

    with caplog.at_level("WARNING", logger="glyph"):
        state = service.check_and_reconcile("u2", today=TODAY + timedelta(days=3))

    assert state.current_streak == 1
    assert any(r.getMessage() == "streak.reconcile_failed" for r in caplog.records)


def test_today_is_utc_date():
    assert isinstance(StreakService.today(), date)
