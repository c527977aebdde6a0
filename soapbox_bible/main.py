"""SoapBox Bible verse store FastAPI application."""
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from soapbox_bible.config import get_settings
from soapbox_bible.database import Database
from soapbox_bible.services.cache_service import initialize_redis, close_redis
from soapbox_bible.models.schemas import HealthCheck
from soapbox_bible.utils.exceptions import DatabaseError
from soapbox_bible.routers import bible

# Get settings
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Multi-translation Bible verse store",
    version="1.0.0"
)


@app.on_event("startup")
async def startup_event():
    """Open the storage handle and cache on application startup."""
    logger.info("Initializing application resources...")
    try:
        database = Database.from_settings(settings)
        database.open()
        app.state.database = database

        initialize_redis(settings)

        logger.info("Application startup complete")
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Release resources on application shutdown."""
    logger.info("Shutting down application...")
    database = getattr(app.state, "database", None)
    if database is not None:
        database.close()
    close_redis()
    logger.info("Application shutdown complete")


app.include_router(bible.router)


@app.get("/", response_model=HealthCheck)
async def health_check(request: Request):
    """Health check endpoint."""
    database = getattr(request.app.state, "database", None)
    return HealthCheck(
        status="healthy",
        timestamp=datetime.utcnow(),
        database="connected" if database is not None and database.is_open else "unavailable",
    )


# Error handlers
@app.exception_handler(DatabaseError)
async def database_error_handler(request, exc):
    logger.error(f"Database error: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )
