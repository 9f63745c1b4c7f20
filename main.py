"""
Picking Tracker Backend - Main Application
Worker time tracking for warehouse work types with admin reporting
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import uvicorn
from datetime import datetime, timezone

from config import settings
from database import SessionLocal, init_db, test_connection
from routes import pickings, workers
from services import workers as worker_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def seed_admin():
    """Create the configured admin account if it does not exist yet"""
    if not settings.ADMIN_PASSWORD:
        logger.info("ADMIN_PASSWORD not set, skipping admin seeding")
        return
    db = SessionLocal()
    try:
        admin = worker_service.ensure_admin(db, settings.ADMIN_NAME, settings.ADMIN_PASSWORD)
        if admin.admin:
            logger.info(f"👤 Admin account ready (id={admin.id})")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("🚀 Picking Tracker Backend Starting...")

    try:
        logger.info("📊 Initializing database...")
        init_db()

        logger.info("🔍 Testing database connection...")
        if test_connection():
            logger.info("✅ Database connection successful")
        else:
            logger.error("❌ Database connection failed")

        seed_admin()
        logger.info("✅ Backend startup completed successfully")

    except Exception as e:
        logger.error(f"❌ Startup error: {str(e)}")
        raise

    yield

    # Shutdown
    logger.info("🛑 Picking Tracker Backend Shutting Down...")

# Create FastAPI app
app = FastAPI(
    title="Picking Tracker Backend API",
    description="Worker task time tracking and reporting",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Missing or malformed request fields are answered with 400
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
    if first.get("type") == "missing":
        message = f"Missing input {field}"
    else:
        message = f"Invalid input {field}: {first.get('msg', 'invalid value')}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message}
    )

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Global exception: {str(exc)}")
    logger.error(f"📍 Request: {request.method} {request.url}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": str(exc),
            "error_type": type(exc).__name__,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    )

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    db_status = test_connection()
    if not db_status:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "database": "disconnected"
            }
        )
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected",
        "version": "1.0.0"
    }

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Picking Tracker Backend API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": "/health"
    }

# Include route modules
app.include_router(workers.router, prefix="/worker", tags=["Workers"])
app.include_router(pickings.router, prefix="/picking", tags=["Picking"])

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level="info"
    )
