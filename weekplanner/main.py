from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from weekplanner.api.planner_routes import router as planner_router
from weekplanner.api.routes import get_cache, router as api_router
from weekplanner.config.settings import get_settings
from weekplanner.storage.cache import ScheduleCache
from weekplanner.storage.database import init_db
from weekplanner.utils.logging_config import setup_logging


# Setup logging
logger = setup_logging()
settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    description="Weekly planner that auto-schedules due-dated tasks into free working hours",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.app_name}...")
    init_db()
    logger.info("Database initialized")
    logger.info(f"Chunk size: {settings.chunk_minutes} min")
    logger.info(
        f"Default working hours: {settings.default_work_start_minutes}-{settings.default_work_end_minutes}"
    )

@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.app_name}...")

app.include_router(api_router, prefix="/api/v1", tags=["scheduling"])
app.include_router(planner_router, prefix="/api/v1", tags=["planner"])


@app.get("/health", tags=["health"])
def health_check(cache: ScheduleCache = Depends(get_cache)):
    """Health check endpoint for monitoring and load balancers."""
    return {
        "status": "ok",
        "app": settings.app_name,
        "version": "1.0.0",
        "cache": "ok" if cache.health_check() else "unavailable",
    }
