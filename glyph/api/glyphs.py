"""
Glyph catalogue API.

POST   /v1/glyphs               drop a glyph at the caller's position
GET    /v1/glyphs/nearby        active glyphs within the search radius
GET    /v1/glyphs               active glyphs, optionally by category / near a point
GET    /v1/glyphs/{glyph_id}
PATCH  /v1/glyphs/{glyph_id}    creator only
DELETE /v1/glyphs/{glyph_id}    creator only, soft delete
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from glyph.core.auth import get_current_user_id, get_optional_user_id
from glyph.features.glyphs import service as glyph_service
from glyph.features.glyphs.validators import validate_coordinate
from glyph.features.location.service import bearing, bearing_to_compass, distance, format_distance
from glyph.models.glyph import GlyphCreateRequest, GlyphUpdateRequest

router = APIRouter(prefix="/v1/glyphs", tags=["glyphs"])


@router.post("", status_code=201)
def create_glyph(payload: GlyphCreateRequest, user_id: Optional[str] = Depends(get_optional_user_id)):
    glyph = glyph_service.create_glyph(payload, user_id=user_id)
    return {"data": glyph}


@router.get("/nearby")
def nearby_glyphs(
    lat: float = Query(...),
    lng: float = Query(...),
    radius_m: Optional[float] = Query(None, ge=0),
):
    validate_coordinate(lat, lng)
    glyphs = glyph_service.load_nearby(lat, lng, radius_m)
    items = []
    for g in glyphs:
        meters = distance(lat, lng, g.latitude, g.longitude)
        heading = bearing(lat, lng, g.latitude, g.longitude)
        items.append(
            {
                **g.model_dump(mode="json"),
                "icon": g.icon,
                "distance_m": meters,
                "distance_label": format_distance(meters),
                "bearing": heading,
                "compass": bearing_to_compass(heading),
            }
        )
    return {"data": items, "count": len(items)}


@router.get("")
def list_glyphs(
    category: Optional[str] = Query(None),
    lat: Optional[float] = Query(None),
    lng: Optional[float] = Query(None),
    radius_m: Optional[float] = Query(None, ge=0),
):
    if category:
        glyphs = glyph_service.glyphs_by_category(category, lat, lng, radius_m)
    elif lat is not None and lng is not None:
        validate_coordinate(lat, lng)
        glyphs = glyph_service.load_nearby(lat, lng, radius_m)
    else:
        glyphs = glyph_service.list_active_glyphs()
    return {"data": glyphs, "count": len(glyphs)}


@router.get("/{glyph_id}")
def get_glyph(glyph_id: str):
    return {"data": glyph_service.get_glyph(glyph_id)}


@router.patch("/{glyph_id}")
def update_glyph(glyph_id: str, payload: GlyphUpdateRequest, user_id: str = Depends(get_current_user_id)):
    return {"data": glyph_service.update_glyph(glyph_id, payload, user_id=user_id)}


@router.delete("/{glyph_id}")
def delete_glyph(glyph_id: str, user_id: str = Depends(get_current_user_id)):
    glyph = glyph_service.delete_glyph(glyph_id, user_id=user_id)
    return {"data": {"id": glyph.id, "is_active": glyph.is_active}}
