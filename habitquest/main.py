from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
from pathlib import Path

from habitquest.database import engine, Base, SessionLocal
from habitquest import models  # Import all models to register them with Base
from habitquest.exceptions import ProgressionException
from habitquest.services.achievement_service import seed_catalog
from habitquest.services.scheduler_service import start_scheduler, stop_scheduler
from habitquest.routes import habits, challenges, achievements, points, activity
from habitquest.constants import (
    DEFAULT_LOG_DIRECTORY_PROD,
    DEFAULT_LOG_DIRECTORY_DEV,
    CORS_ALLOWED_ORIGINS,
    SCHEDULER_ENABLED,
)

LOG_DIR = os.getenv("HABITQUEST_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("HABITQUEST_LOG_FILE", "app.log")

try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("habitquest")

# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the achievement catalogue, then run the scheduler while the app is up"""
    db = SessionLocal()
    try:
        seed_catalog(db)
    finally:
        db.close()

    logger.info(f"HabitQuest API started. Logging to: {log_path}")
    if SCHEDULER_ENABLED:
        start_scheduler()

    yield

    logger.info("Shutting down HabitQuest API")
    stop_scheduler()


app = FastAPI(
    title="HabitQuest API",
    description="Progression and rewards engine: habits, streaks, levels, challenges, achievements",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ProgressionException)
async def progression_exception_handler(request: Request, exc: ProgressionException):
    """Render domain errors as {"error": {code, message}, "detail"}"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {"code": exc.code, "message": exc.message},
            "detail": exc.message,
        },
    )


app.include_router(habits.router)
app.include_router(challenges.router)
app.include_router(achievements.router)
app.include_router(points.router)
app.include_router(activity.router)


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "HabitQuest API", "status": "active"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("habitquest.main:app", host="0.0.0.0", port=8000, reload=False)
