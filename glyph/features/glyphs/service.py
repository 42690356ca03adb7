"""
Glyph catalogue service.
- create_glyph(payload, user_id)
- get_glyph(glyph_id)
- update_glyph / delete_glyph (creator only, soft delete)
- load_nearby(lat, lng, radius_m)
- glyphs_by_category(category, lat, lng, radius_m)
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from glyph.core.config import settings
from glyph.core.errors import NotFoundError, PermissionError
from glyph.core.logging import log_event
from glyph.features.glyphs.persistence import GlyphPersistence
from glyph.features.glyphs.validators import (
    validate_accuracy,
    validate_category,
    validate_coordinate,
    validate_radius,
    validate_text,
)
from glyph.features.location.service import distance, is_within_radius
from glyph.models.glyph import Glyph, GlyphCreateRequest, GlyphUpdateRequest


def create_glyph(
    payload: GlyphCreateRequest,
    *,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Glyph:
    validate_coordinate(payload.latitude, payload.longitude)
    validate_accuracy(payload.accuracy_m)
    text = validate_text(payload.text)
    category = validate_category(payload.category)

    created_at = now or datetime.now(timezone.utc)
    glyph = GlyphPersistence.insert_glyph(
        {
            "id": str(uuid4()),
            "latitude": payload.latitude,
            "longitude": payload.longitude,
            "text": text,
            "category": category.value,
            "user_id": user_id,
            "is_active": True,
            "photo_url": payload.photo_url,
            "rating_average": 0.0,
            "rating_count": 0,
            "created_at": created_at,
            "updated_at": created_at,
        }
    )
    log_event(
        "info",
        "glyph.created",
        user_id=user_id,
        glyph_id=glyph.id,
        event_type="glyph.created",
        extra={"category": category.value},
    )
    return glyph


def get_glyph(glyph_id: str) -> Glyph:
    glyph = GlyphPersistence.get_active(glyph_id)
    if glyph is None:
        raise NotFoundError(f"Glyph {glyph_id} not found")
    return glyph


def _require_owner(glyph: Glyph, user_id: str) -> None:
    if glyph.user_id is None or glyph.user_id != user_id:
        raise PermissionError("Only the creator can modify this glyph")


def update_glyph(glyph_id: str, payload: GlyphUpdateRequest, *, user_id: str) -> Glyph:
    values: Dict[str, object] = {}
    if payload.text is not None:
        values["text"] = validate_text(payload.text)
    if payload.category is not None:
        values["category"] = validate_category(payload.category).value
    if payload.photo_url is not None:
        values["photo_url"] = payload.photo_url

    glyph = get_glyph(glyph_id)
    _require_owner(glyph, user_id)
    if not values:
        return glyph

    updated = GlyphPersistence.update_active(glyph_id, values)
    if updated is None:
        # Soft-deleted between the read and the write
        raise NotFoundError(f"Glyph {glyph_id} not found")
    log_event("info", "glyph.updated", user_id=user_id, glyph_id=glyph_id, event_type="glyph.updated")
    return updated


def delete_glyph(glyph_id: str, *, user_id: str) -> Glyph:
    """Soft delete: the row stays, is_active flips to False."""
    glyph = get_glyph(glyph_id)
    _require_owner(glyph, user_id)
    deleted = GlyphPersistence.update_active(glyph_id, {"is_active": False})
    if deleted is None:
        raise NotFoundError(f"Glyph {glyph_id} not found")
    log_event("info", "glyph.deleted", user_id=user_id, glyph_id=glyph_id, event_type="glyph.deleted")
    return deleted


def list_active_glyphs() -> List[Glyph]:
    return GlyphPersistence.list_active()


def load_nearby(lat: float, lng: float, radius_m: Optional[float] = None) -> List[Glyph]:
    """All active glyphs within radius_m of (lat, lng).

    Scans every active glyph and filters in process. Order follows the store.
    """
    radius = settings.GLYPH_SEARCH_RADIUS_M if radius_m is None else radius_m
    validate_radius(radius)
    candidates = GlyphPersistence.list_active()
    nearby = [g for g in candidates if is_within_radius(lat, lng, g.latitude, g.longitude, radius)]

    extra = {"radius_m": radius, "scanned": len(candidates), "matched": len(nearby)}
    if not nearby and candidates:
        closest = min(distance(lat, lng, g.latitude, g.longitude) for g in candidates)
        extra["closest_m"] = round(closest)
    log_event("debug", "glyphs.nearby", event_type="glyphs.nearby", extra=extra)
    return nearby


def glyphs_by_category(
    category: str,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius_m: Optional[float] = None,
) -> List[Glyph]:
    wanted = validate_category(category)
    if lat is not None and lng is not None:
        validate_coordinate(lat, lng)
        return [g for g in load_nearby(lat, lng, radius_m) if g.category == wanted]
    return GlyphPersistence.list_active(category=wanted.value)
