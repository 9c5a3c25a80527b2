# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import text

from careerprofile.cache.connection import close_redis
from careerprofile.core.config import app_settings, database_settings
from careerprofile.core.logging_config import setup_logging
from careerprofile.db.session import async_engine, create_tables, db_session
from careerprofile.routers import riasec as riasec_router

setup_logging(app_settings.log_level, service=app_settings.name)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {app_settings.name}")
    if database_settings.create_tables:
        await create_tables(async_engine)
        logger.info("Database tables ensured")
    yield
    await close_redis()
    await async_engine.dispose()
    logger.info(f"{app_settings.name} shut down")


app = FastAPI(
    title=app_settings.name,
    description="Scores RIASEC assessment attempts and composes career reports.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(riasec_router.router, prefix=app_settings.api_prefix, tags=["riasec"])


@app.get("/health", tags=["Health Check"])
async def health_check():
    return {"status": "ok", "service": app_settings.name}


@app.get("/health/db", tags=["Health Check"])
async def health_check_db(db: AsyncSession = Depends(db_session)):
    """Runs SELECT 1 against the configured database."""
    try:
        result = (await db.execute(text("SELECT 1"))).scalar_one()
    except SQLAlchemyError as e:
        logger.error(f"DB health check failed: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=f"Database connection error: {e}")
    return {"status": "ok", "db_check": result}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
