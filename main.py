import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.database import engine
from app.core.exceptions import ComputationFault, InvalidDurationError
from app.core.logging_config import setup_logging
from app.middleware.logging import AccessLogMiddleware
from app.db.base import Base
from app.api.v1.api import api_router
from app import models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"🚀 Staff portal started ({settings.ENVIRONMENT})")
    yield
    await engine.dispose()
    logger.info("Staff portal stopped")


# Create FastAPI app
app_config = {
    "title": "Cafe Piranha Staff Portal",
    "description": "Attendance, overtime, salary advances and payroll for Cafe Piranha staff",
    "version": "1.0.0",
    "lifespan": lifespan,
}

app = FastAPI(**app_config)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS
)
app.add_middleware(AccessLogMiddleware)


@app.exception_handler(InvalidDurationError)
async def invalid_duration_handler(request: Request, exc: InvalidDurationError):
    logger.warning(f"Invalid work duration on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


@app.exception_handler(ComputationFault)
async def computation_fault_handler(request: Request, exc: ComputationFault):
    logger.error(f"Overtime computation fault on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Overtime could not be calculated"},
    )


# Include routers
app.include_router(api_router, prefix="/api/v1")

@app.get("/")
async def root():
    return {
        "message": f"☕ Welcome to the {settings.CAFE_NAME} Staff Portal!",
        "status": "active",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "timezone": settings.TIMEZONE,
    }


if __name__ == "__main__":
    import uvicorn

    print("🚀 Starting Cafe Piranha Staff Portal on port 9106...")
    uvicorn.run(
        "main:app",  # Use string import
        host="0.0.0.0",
        port=9106,
        reload=settings.DEBUG
    )
