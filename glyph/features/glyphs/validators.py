"""Glyph input validators.

Everything here runs before any write, so a rejected request never touches
the store.
"""

from typing import Optional

from glyph.core.config import settings
from glyph.core.errors import ValidationError
from glyph.features.location.service import is_accuracy_sufficient, is_valid_coordinate
from glyph.models.glyph import GlyphCategory


def validate_coordinate(lat, lng) -> None:
    if not is_valid_coordinate(lat, lng):
        raise ValidationError(
            "Invalid coordinate: latitude must be within [-90, 90] and longitude within [-180, 180]"
        )


def validate_text(text: Optional[str], *, max_length: Optional[int] = None, field: str = "text") -> str:
    """Trim and bound free text. Returns the trimmed value."""
    limit = max_length or settings.GLYPH_TEXT_MAX
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} cannot be empty")
    if len(cleaned) > limit:
        raise ValidationError(f"{field} must be at most {limit} characters")
    return cleaned


def validate_category(category: Optional[str]) -> GlyphCategory:
    if category is None:
        return GlyphCategory.HINT
    try:
        return GlyphCategory(category)
    except ValueError:
        allowed = ", ".join(c.value for c in GlyphCategory)
        raise ValidationError(f"Unknown category '{category}'. Expected one of: {allowed}")


def validate_accuracy(accuracy_m: Optional[float]) -> None:
    if accuracy_m is None:
        return
    if accuracy_m < 0 or not is_accuracy_sufficient(accuracy_m):
        raise ValidationError(
            "GPS accuracy is too low. Please move to an open area and try again."
        )


def validate_radius(radius_m: float) -> None:
    if radius_m is None or radius_m < 0:
        raise ValidationError("radius must be a non-negative number of meters")
