import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

# Load env from glyph/.env
package_dir = os.path.dirname(os.path.abspath(__file__))
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv(dotenv_path=os.path.join(package_dir, ".env"))

from glyph.core.config import settings, validate_config
from glyph.core.logging import configure_logging
from glyph.core.middleware.request_id import RequestIdMiddleware
from glyph.core.validation import validate_env
from glyph.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    unhandled_exception_handler,
)
from glyph.api import discovery, glyphs, health, interactions, streaks

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("glyph")
    logger.info("Starting Glyph backend...")
    app.state.startup_time = time.time()
    try:
        yield
    finally:
        logging.getLogger("glyph").info("Stopping Glyph backend...")


app = FastAPI(title="Glyph - Proximity & Streaks", lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(glyphs.router)
app.include_router(discovery.router)
app.include_router(streaks.router)
app.include_router(interactions.router)
app.include_router(health.root_router)
