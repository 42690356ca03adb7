import logging

import pytest

from glyph.core.config import Settings, validate_config


def make_settings(**overrides):
    values = dict(DATABASE_URL="postgresql://u:p@localhost/glyph", AUTH_JWT_SECRET="secret")
    values.update(overrides)
    return Settings(**values)


def test_defaults_match_proximity_constants():
    cfg = Settings()
    assert cfg.DISCOVERY_RADIUS_M == 50
    assert cfg.GLYPH_SEARCH_RADIUS_M == 200
    assert cfg.MAX_GPS_ACCURACY_M == 10
    assert cfg.GLYPH_TEXT_MAX == 280


def test_complete_config_passes_strict():
    assert validate_config(strict=True, settings_obj=make_settings())


def test_missing_keys_warn_when_not_strict(caplog):
    cfg = make_settings(DATABASE_URL=None, AUTH_JWT_SECRET=None)
    with caplog.at_level(logging.WARNING, logger="glyph"):
        assert validate_config(strict=False, settings_obj=cfg)
    assert any("DATABASE_URL" in r.getMessage() for r in caplog.records)


def test_missing_keys_raise_when_strict():
    with pytest.raises(RuntimeError):
        validate_config(strict=True, settings_obj=make_settings(AUTH_JWT_SECRET=None))


def test_search_radius_smaller_than_discovery_radius():
    cfg = make_settings(GLYPH_SEARCH_RADIUS_M=20, DISCOVERY_RADIUS_M=50)
    with pytest.raises(RuntimeError, match="GLYPH_SEARCH_RADIUS_M"):
        validate_config(strict=True, settings_obj=cfg)
