import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Database
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None

    # Auth (JWT issued by the hosted auth provider)
    AUTH_JWT_SECRET: Optional[str] = None
    AUTH_JWT_AUDIENCE: Optional[str] = None

    # App URLs
    CORS_ORIGINS: str = "http://localhost:3000"  # comma-separated

    # Proximity (meters)
    DISCOVERY_RADIUS_M: float = 50.0
    GLYPH_SEARCH_RADIUS_M: float = 200.0
    MAX_GPS_ACCURACY_M: float = 10.0

    # Text limits
    GLYPH_TEXT_MAX: int = 280
    COMMENT_MAX: int = 500
    COMMENTS_PAGE_LIMIT: int = 50

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
settings = Settings()


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate required configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("glyph")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    required_keys = [
        "DATABASE_URL",
        "AUTH_JWT_SECRET",
    ]

    problems = []
    missing = [key for key in required_keys if not getattr(cfg, key, None)]
    if missing:
        problems.append(f"Missing required configuration: {', '.join(missing)}")

    # The nearby set must contain everything that can be discovered.
    if cfg.GLYPH_SEARCH_RADIUS_M < cfg.DISCOVERY_RADIUS_M:
        problems.append(
            f"GLYPH_SEARCH_RADIUS_M ({cfg.GLYPH_SEARCH_RADIUS_M}) is smaller than "
            f"DISCOVERY_RADIUS_M ({cfg.DISCOVERY_RADIUS_M})"
        )

    for message in problems:
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
