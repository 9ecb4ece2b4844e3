import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskdesk.api.router import api_router
from taskdesk.api.routes import health
from taskdesk.core.config import settings
from taskdesk.core.errors import register_exception_handlers
from taskdesk.core.logging import setup_logging
from taskdesk.db.init_db import create_tables, seed_admin

logger = logging.getLogger(__name__)

def _run_migrations_if_needed():
    """Apply Alembic migrations automatically in production if enabled.

    Controlled by env var AUTO_APPLY_MIGRATIONS (default: '1'). Safe to run repeatedly.
    """
    if settings.env.lower() != "prod":
        return
    if os.getenv("AUTO_APPLY_MIGRATIONS", "1") != "1":
        return
    from alembic import command
    from alembic.config import Config
    alembic_ini = Path(__file__).resolve().parents[1] / "alembic.ini"
    if not alembic_ini.exists():
        logger.warning("[migrate] alembic.ini not found at %s, skipping auto-migrations", alembic_ini)
        return
    cfg = Config(str(alembic_ini))
    # keep the handlers and levels set up by setup_logging
    cfg.attributes["configure_logger"] = False
    # script_location must resolve when launched from an arbitrary CWD
    cfg.set_main_option("script_location", str(alembic_ini.parent / "alembic"))
    logger.info("[migrate] Applying Alembic migrations -> head ...")
    try:
        command.upgrade(cfg, "head")
    except Exception:
        # Keep serving; migrations can be retried manually
        logger.exception("[migrate] Migration failed")
        return
    logger.info("[migrate] Migrations applied successfully")

@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    _run_migrations_if_needed()
    if settings.env.lower() in {"dev", "development"}:
        create_tables()
        seed_admin()
    yield

setup_logging(settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

origins = settings.cors_origins
logger.info("[startup] Resolved CORS origins: %s", origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.api_prefix)
app.include_router(health.router, prefix="/health", tags=["health"])

@app.get("/", include_in_schema=False)
def root():
    return {"message": "API is running..."}
