"""
glyph/models/glyph.py
Glyph models: geotagged notes, soft-deleted through is_active.
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from enum import Enum
from typing import Optional


class GlyphCategory(str, Enum):
    HINT = "Hint"
    WARNING = "Warning"
    SECRET = "Secret"
    PRAISE = "Praise"
    LORE = "Lore"


CATEGORY_ICONS = {
    GlyphCategory.HINT: "💡",
    GlyphCategory.WARNING: "⚠️",
    GlyphCategory.SECRET: "💰",
    GlyphCategory.PRAISE: "❤️",
    GlyphCategory.LORE: "👁️",
}


class Glyph(BaseModel):
    """A persisted glyph row."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="UUID")
    latitude: float
    longitude: float
    text: str
    category: GlyphCategory
    user_id: Optional[str] = Field(default=None, description="Creator; None for anonymous glyphs")
    is_active: bool = True
    photo_url: Optional[str] = None
    rating_average: float = 0.0
    rating_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def icon(self) -> str:
        return CATEGORY_ICONS.get(self.category, "📍")


class GlyphCreateRequest(BaseModel):
    """Payload for dropping a glyph at the caller's position.

    Field ranges are checked by glyph.features.glyphs.validators so failures
    share the normalized validation_error contract.
    """

    latitude: float
    longitude: float
    text: str
    category: str = GlyphCategory.HINT.value
    photo_url: Optional[str] = None
    accuracy_m: Optional[float] = Field(default=None, description="GPS accuracy of the device sample")


class GlyphUpdateRequest(BaseModel):
    text: Optional[str] = None
    category: Optional[str] = None
    photo_url: Optional[str] = None
