"""
Ratings and comments on glyphs.

Ratings are 1-5 stars, one per (glyph, user); re-rating overwrites.
Each rating write recomputes rating_average / rating_count on the glyph row.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.exc import IntegrityError

from glyph.core.config import settings
from glyph.core.database import get_db_session, glyph_ratings, glyph_comments, glyphs
from glyph.core.errors import NotFoundError, ValidationError
from glyph.core.logging import log_event
from glyph.features.glyphs.service import get_glyph
from glyph.features.glyphs.validators import validate_text
from glyph.models.interaction import Comment, Rating

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def _write_rating(glyph_id: str, user_id: str, rating: int, now: datetime) -> None:
    with get_db_session() as session:
        result = session.execute(
            update(glyph_ratings)
            .where(glyph_ratings.c.glyph_id == glyph_id, glyph_ratings.c.user_id == user_id)
            .values(rating=rating, updated_at=now)
        )
        if result.rowcount:
            return
    try:
        with get_db_session() as session:
            session.execute(
                insert(glyph_ratings).values(
                    glyph_id=glyph_id,
                    user_id=user_id,
                    rating=rating,
                    created_at=now,
                    updated_at=now,
                )
            )
    except IntegrityError:
        # Concurrent first rating by the same user
        with get_db_session() as session:
            session.execute(
                update(glyph_ratings)
                .where(glyph_ratings.c.glyph_id == glyph_id, glyph_ratings.c.user_id == user_id)
                .values(rating=rating, updated_at=now)
            )


def _refresh_aggregate(glyph_id: str) -> None:
    with get_db_session() as session:
        avg, count = session.execute(
            select(func.avg(glyph_ratings.c.rating), func.count(glyph_ratings.c.id))
            .where(glyph_ratings.c.glyph_id == glyph_id)
        ).one()
        session.execute(
            update(glyphs)
            .where(glyphs.c.id == glyph_id)
            .values(rating_average=round(float(avg or 0), 2), rating_count=int(count or 0))
        )


def rate_glyph(glyph_id: str, user_id: str, rating, *, now: Optional[datetime] = None) -> Rating:
    value = validate_rating(rating)
    get_glyph(glyph_id)

    moment = now or datetime.now(timezone.utc)
    _write_rating(glyph_id, user_id, value, moment)
    _refresh_aggregate(glyph_id)

    log_event("info", "glyph.rated", user_id=user_id, glyph_id=glyph_id, event_type="glyph.rated", extra={"rating": value})
    return Rating(glyph_id=glyph_id, user_id=user_id, rating=value, updated_at=moment)


def get_user_rating(glyph_id: str, user_id: str) -> Optional[int]:
    with get_db_session() as session:
        row = session.execute(
            select(glyph_ratings.c.rating).where(
                glyph_ratings.c.glyph_id == glyph_id,
                glyph_ratings.c.user_id == user_id,
            )
        ).first()
        return row.rating if row else None


def _row_to_comment(row) -> Comment:
    return Comment(
        id=row.id,
        glyph_id=row.glyph_id,
        user_id=row.user_id,
        comment=row.comment,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def add_comment(glyph_id: str, user_id: Optional[str], text: str, *, now: Optional[datetime] = None) -> Comment:
    cleaned = validate_text(text, max_length=settings.COMMENT_MAX, field="comment")
    get_glyph(glyph_id)

    moment = now or datetime.now(timezone.utc)
    with get_db_session() as session:
        result = session.execute(
            insert(glyph_comments).values(
                glyph_id=glyph_id,
                user_id=user_id,
                comment=cleaned,
                created_at=moment,
                updated_at=moment,
            )
        )
        comment_id = result.inserted_primary_key[0]
        row = session.execute(select(glyph_comments).where(glyph_comments.c.id == comment_id)).first()
        comment = _row_to_comment(row)

    log_event("info", "comment.added", user_id=user_id, glyph_id=glyph_id, event_type="comment.added")
    return comment


def list_comments(glyph_id: str, limit: Optional[int] = None) -> List[Comment]:
    """Newest first."""
    page = settings.COMMENTS_PAGE_LIMIT if limit is None else limit
    if page < 1:
        raise ValidationError("limit must be at least 1")
    with get_db_session() as session:
        rows = session.execute(
            select(glyph_comments)
            .where(glyph_comments.c.glyph_id == glyph_id)
            .order_by(glyph_comments.c.created_at.desc(), glyph_comments.c.id.desc())
            .limit(page)
        ).all()
        return [_row_to_comment(row) for row in rows]


def _owned_comment(session, comment_id: int, user_id: str):
    row = session.execute(
        select(glyph_comments).where(
            glyph_comments.c.id == comment_id,
            glyph_comments.c.user_id == user_id,
        )
    ).first()
    if row is None:
        raise NotFoundError(f"Comment {comment_id} not found")
    return row


def update_comment(comment_id: int, user_id: str, text: str, *, now: Optional[datetime] = None) -> Comment:
    cleaned = validate_text(text, max_length=settings.COMMENT_MAX, field="comment")
    moment = now or datetime.now(timezone.utc)
    with get_db_session() as session:
        _owned_comment(session, comment_id, user_id)
        session.execute(
            update(glyph_comments)
            .where(glyph_comments.c.id == comment_id)
            .values(comment=cleaned, updated_at=moment)
        )
        row = session.execute(select(glyph_comments).where(glyph_comments.c.id == comment_id)).first()
        return _row_to_comment(row)


def delete_comment(comment_id: int, user_id: str) -> Comment:
    with get_db_session() as session:
        row = _owned_comment(session, comment_id, user_id)
        session.execute(delete(glyph_comments).where(glyph_comments.c.id == comment_id))
        return _row_to_comment(row)
