from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class Rating(BaseModel):
    model_config = ConfigDict(frozen=True)

    glyph_id: str
    user_id: str
    rating: int
    updated_at: Optional[datetime] = None


class Comment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    glyph_id: str
    user_id: Optional[str] = None
    comment: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class RatingRequest(BaseModel):
    # Range is checked in the service so out-of-range values get validation_error
    rating: int


class CommentRequest(BaseModel):
    comment: str
