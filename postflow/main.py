"""PostFlow API entrypoint"""

import logging
from contextlib import asynccontextmanager

import redis
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from postflow.core.config import settings
from postflow.api.router import api_router
from postflow.db.database import session_scope

# registers every mapper before the first query
import postflow.infrastructure.orm  # noqa: F401

API_VERSION = "1.0.0"

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s API starting (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
    yield
    logger.info("%s API stopped", settings.PROJECT_NAME)


app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Guest-post ordering, publisher marketplace and outreach import",
    version=API_VERSION,
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


def _database_ok() -> bool:
    try:
        with session_scope() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return False
    return True


def _redis_ok() -> bool:
    # only the Celery workers depend on Redis
    try:
        redis.from_url(settings.REDIS_URL).ping()
    except redis.RedisError as e:
        logger.warning("Redis health check failed: %s", e)
        return False
    return True


@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} API", "version": API_VERSION}


@app.get("/health")
async def health_check():
    """Database and Redis connectivity; a Redis outage only degrades"""
    database, cache = _database_ok(), _redis_ok()
    label = {True: "healthy", False: "unhealthy"}
    return {
        "status": "healthy" if database else "degraded",
        "database": label[database],
        "redis": label[cache],
        "version": API_VERSION,
    }


if __name__ == "__main__":
    uvicorn.run("postflow.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG, log_level="info")
