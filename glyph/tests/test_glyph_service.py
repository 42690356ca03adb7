"""Tests for the glyph catalogue: validation, soft delete, nearby search."""

import pytest

from glyph.core.errors import NotFoundError, PermissionError, ValidationError
from glyph.features.glyphs import service as glyph_service
from glyph.features.glyphs.persistence import GlyphPersistence
from glyph.models.glyph import GlyphCategory, GlyphCreateRequest, GlyphUpdateRequest

NYC = (40.7128, -74.0060)


def _req(**overrides):
    data = dict(latitude=40.7129, longitude=-74.0061, text="Free coffee at the corner", category="Praise")
    data.update(overrides)
    return GlyphCreateRequest(**data)


def test_create_glyph_persists_defaults():
    glyph = glyph_service.create_glyph(_req(text="  padded  "), user_id="u1")

    assert glyph.text == "padded"
    assert glyph.category == GlyphCategory.PRAISE
    assert glyph.is_active is True
    assert glyph.rating_count == 0
    assert glyph_service.get_glyph(glyph.id).id == glyph.id


def test_anonymous_glyph_allowed():
    glyph = glyph_service.create_glyph(_req())
    assert glyph.user_id is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"latitude": 91},
        {"longitude": -181},
        {"text": "   "},
        {"text": "x" * 281},
        {"category": "Gossip"},
        {"accuracy_m": 25},
    ],
)
def test_invalid_glyph_rejected_before_write(monkeypatch, overrides):
    def boom(values):
        raise AssertionError("store must not be touched")

    monkeypatch.setattr(GlyphPersistence, "insert_glyph", staticmethod(boom))
    with pytest.raises(ValidationError):
        glyph_service.create_glyph(_req(**overrides), user_id="u1")


def test_text_at_limit_is_accepted():
    glyph = glyph_service.create_glyph(_req(text="x" * 280, accuracy_m=10))
    assert len(glyph.text) == 280


def test_get_missing_glyph_raises_not_found():
    with pytest.raises(NotFoundError):
        glyph_service.get_glyph("does-not-exist")


def test_soft_delete_hides_glyph_but_keeps_row(make_glyph):
    glyph = make_glyph(user_id="owner")

    deleted = glyph_service.delete_glyph(glyph.id, user_id="owner")

    assert deleted.is_active is False
    with pytest.raises(NotFoundError):
        glyph_service.get_glyph(glyph.id)
    assert glyph_service.list_active_glyphs() == []
    assert glyph_service.load_nearby(*NYC, 200) == []


def test_only_creator_can_modify(make_glyph):
    glyph = make_glyph(user_id="owner")

    with pytest.raises(PermissionError):
        glyph_service.delete_glyph(glyph.id, user_id="someone-else")
    with pytest.raises(PermissionError):
        glyph_service.update_glyph(glyph.id, GlyphUpdateRequest(text="mine now"), user_id="someone-else")

    assert glyph_service.get_glyph(glyph.id).is_active


def test_anonymous_glyph_cannot_be_modified(make_glyph):
    glyph = make_glyph(user_id=None)
    with pytest.raises(PermissionError):
        glyph_service.delete_glyph(glyph.id, user_id="anyone")


def test_update_glyph_validates_and_applies(make_glyph):
    glyph = make_glyph(user_id="owner")

    updated = glyph_service.update_glyph(
        glyph.id, GlyphUpdateRequest(text="Updated", category="Lore"), user_id="owner"
    )
    assert updated.text == "Updated"
    assert updated.category == GlyphCategory.LORE

    with pytest.raises(ValidationError):
        glyph_service.update_glyph(glyph.id, GlyphUpdateRequest(category="Nope"), user_id="owner")


def test_load_nearby_includes_close_and_excludes_far(make_glyph):
    close = make_glyph(lat=40.7129, lng=-74.0061)
    far = make_glyph(lat=40.7578, lng=-74.0060)  # ~5 km north

    ids = {g.id for g in glyph_service.load_nearby(*NYC, 200)}

    assert close.id in ids
    assert far.id not in ids


def test_glyphs_by_category(make_glyph):
    hint = make_glyph(category="Hint")
    lore = make_glyph(category="Lore")
    far_lore = make_glyph(category="Lore", lat=41.0, lng=-74.0)

    everywhere = {g.id for g in glyph_service.glyphs_by_category("Lore")}
    assert everywhere == {lore.id, far_lore.id}

    near = {g.id for g in glyph_service.glyphs_by_category("Lore", *NYC, radius_m=200)}
    assert near == {lore.id}
    assert hint.id not in near

    with pytest.raises(ValidationError):
        glyph_service.glyphs_by_category("Unknown")
