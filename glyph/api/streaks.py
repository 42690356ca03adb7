from fastapi import APIRouter, Depends

from glyph.core.auth import get_current_user_id
from glyph.features.streaks.service import streak_service

router = APIRouter(prefix="/v1/streaks", tags=["streaks"])


@router.get("/current")
def get_current_streak(user_id: str = Depends(get_current_user_id)):
    """Return the reconciled streak state for the caller."""
    record = streak_service.check_and_reconcile(user_id)
    return {
        "data": {
            **record.to_dict(),
            "discovered_today": streak_service.has_discovered_today(record),
            "days_until_risk": streak_service.days_until_risk(record),
            "message": streak_service.encouragement_message(record),
        }
    }


@router.get("/achievements")
def get_achievements(user_id: str = Depends(get_current_user_id)):
    record = streak_service.check_and_reconcile(user_id)
    achievements = streak_service.get_achievements(record.current_streak, record.longest_streak)
    return {"data": [a.to_dict() for a in achievements], "count": len(achievements)}
