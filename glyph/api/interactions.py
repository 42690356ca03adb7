"""Ratings and comments API."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from glyph.core.auth import get_current_user_id
from glyph.features.interactions import service as interactions
from glyph.models.interaction import CommentRequest, RatingRequest

router = APIRouter(prefix="/v1", tags=["interactions"])


@router.post("/glyphs/{glyph_id}/ratings")
def rate_glyph(glyph_id: str, payload: RatingRequest, user_id: str = Depends(get_current_user_id)):
    return {"data": interactions.rate_glyph(glyph_id, user_id, payload.rating)}


@router.get("/glyphs/{glyph_id}/ratings/mine")
def my_rating(glyph_id: str, user_id: str = Depends(get_current_user_id)):
    return {"data": {"glyph_id": glyph_id, "rating": interactions.get_user_rating(glyph_id, user_id)}}


@router.get("/glyphs/{glyph_id}/comments")
def list_comments(glyph_id: str, limit: Optional[int] = Query(None, ge=1, le=200)):
    comments = interactions.list_comments(glyph_id, limit)
    return {"data": comments, "count": len(comments)}


@router.post("/glyphs/{glyph_id}/comments", status_code=201)
def add_comment(glyph_id: str, payload: CommentRequest, user_id: str = Depends(get_current_user_id)):
    return {"data": interactions.add_comment(glyph_id, user_id, payload.comment)}


@router.patch("/comments/{comment_id}")
def update_comment(comment_id: int, payload: CommentRequest, user_id: str = Depends(get_current_user_id)):
    return {"data": interactions.update_comment(comment_id, user_id, payload.comment)}


@router.delete("/comments/{comment_id}")
def delete_comment(comment_id: int, user_id: str = Depends(get_current_user_id)):
    comment = interactions.delete_comment(comment_id, user_id)
    return {"data": {"id": comment.id, "deleted": True}}
