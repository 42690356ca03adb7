"""
Discovery API.

The discover endpoint sequences the two writes: the discovery insert is
written first and the streak is only advanced when it created a new row.
Responses that skip the streak write still reconcile before reporting it.
The writes are not transactional; a failed streak update is repaired by
reconciliation on the next read.
"""

from fastapi import APIRouter, Depends, Query

from glyph.core.auth import get_current_user_id
from glyph.core.errors import OutOfRangeError
from glyph.features.discovery.service import discovery_service
from glyph.features.glyphs import service as glyph_service
from glyph.features.glyphs.validators import validate_coordinate, validate_radius
from glyph.features.location.service import distance, format_distance
from glyph.features.streaks.service import streak_service
from glyph.models.discovery import AutoDiscoverRequest, DiscoverRequest

router = APIRouter(prefix="/v1/discoveries", tags=["discoveries"])


@router.post("")
def discover_glyph(payload: DiscoverRequest, user_id: str = Depends(get_current_user_id)):
    validate_coordinate(payload.latitude, payload.longitude)
    glyph = glyph_service.get_glyph(payload.glyph_id)

    meters = distance(payload.latitude, payload.longitude, glyph.latitude, glyph.longitude)
    if not discovery_service.is_discoverable(payload.latitude, payload.longitude, glyph):
        raise OutOfRangeError(
            f"Glyph is {format_distance(meters)} away; get within "
            f"{format_distance(discovery_service.discovery_radius_m)} to discover it"
        )

    result = discovery_service.record_discovery(user_id, glyph.id, payload.latitude, payload.longitude)
    if result.created:
        streak = streak_service.record_discovery_event(user_id)
    else:
        streak = streak_service.check_and_reconcile(user_id)

    return {
        "data": {
            "outcome": result.outcome.value,
            "discovery": result.discovery,
            "glyph": glyph,
            "distance_m": meters,
            "streak": streak.to_dict(),
        }
    }


@router.post("/auto")
def auto_discover(payload: AutoDiscoverRequest, user_id: str = Depends(get_current_user_id)):
    validate_coordinate(payload.latitude, payload.longitude)
    if payload.radius_m is not None:
        validate_radius(payload.radius_m)

    found = discovery_service.auto_discover_nearby(user_id, payload.latitude, payload.longitude, payload.radius_m)
    streak = streak_service.record_discovery_event(user_id) if found else streak_service.check_and_reconcile(user_id)
    return {"data": {"discoveries": found, "count": len(found), "streak": streak.to_dict()}}


@router.get("")
def list_discoveries(user_id: str = Depends(get_current_user_id)):
    discovered = discovery_service.get_user_discoveries(user_id)
    return {"data": discovered, "count": len(discovered)}


@router.get("/stats")
def discovery_stats(user_id: str = Depends(get_current_user_id)):
    return {"data": discovery_service.get_discovery_stats(user_id)}


@router.get("/search")
def search_discoveries(q: str = Query("", max_length=280), user_id: str = Depends(get_current_user_id)):
    matches = discovery_service.search_discoveries(user_id, q)
    return {"data": matches, "count": len(matches)}


@router.get("/{glyph_id}/status")
def discovery_status(glyph_id: str, user_id: str = Depends(get_current_user_id)):
    return {"data": {"glyph_id": glyph_id, "discovered": discovery_service.has_discovered(user_id, glyph_id)}}
