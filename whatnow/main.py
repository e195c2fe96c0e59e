# whatnow/main.py
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# .env first: settings and the DB engine read the environment at import time
load_dotenv()

from fastapi import FastAPI, HTTPException  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from sqlmodel import text  # noqa: E402

from whatnow.core.config import settings  # noqa: E402
from whatnow.core.logging_config import setup_logging  # noqa: E402
from whatnow.db.session import DATABASE_URL, create_all_tables, session_scope  # noqa: E402

from whatnow.routers import billing, task  # noqa: E402

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Postgres schema comes from alembic; a local sqlite file gets create_all
    if DATABASE_URL.startswith("sqlite"):
        create_all_tables()
    yield


app = FastAPI(
    title="What Do I Do Now? API",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(task.router)
app.include_router(billing.router)


@app.get("/health")
def health_app():
    return {"ok": True}


@app.get("/health/db")
def health_db():
    # Migration is a deployment concern. Runtime only verifies DB connectivity.
    try:
        with session_scope() as s:
            s.connection().execute(text("SELECT 1"))
        return {"ok": True}
    except Exception:
        logger.exception("database health check failed")
        raise HTTPException(status_code=500, detail="Database connection failed")
