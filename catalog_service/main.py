"""FastAPI application entry point."""
from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from catalog_service.core.config import ADMIN_PASSWORD, ADMIN_USERNAME
from catalog_service.core.database import engine, Base, SessionLocal
from catalog_service.core.exceptions import CatalogServiceError, catalog_service_error_handler
from catalog_service.core.logging_config import logger
from catalog_service.api.v1.router import api_router
from catalog_service.services.authenticator import Authenticator
from catalog_service.services.catalog import CatalogCache
from catalog_service.services.users import ensure_admin

# Initialize logging
logger.info("Starting Catalog Service")

# Create database tables
try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized successfully")
except Exception as e:
    logger.error(f"Failed to initialize database tables: {e}")
    raise

# Initialize FastAPI app
app = FastAPI(
    title="Catalog Service",
    description="A write-through book catalog with token authentication and permission bitmasks",
    version="1.0.0"
)

# One catalog cache and one authenticator per application, reached through dependencies
app.state.catalog = CatalogCache()
app.state.authenticator = Authenticator()

app.add_exception_handler(CatalogServiceError, catalog_service_error_handler)

app.include_router(api_router)
logger.info("API routes registered successfully")


@app.on_event("startup")
def startup_event():
    """Create the bootstrap administrator and warm the cache."""
    db = SessionLocal()
    try:
        if ADMIN_USERNAME and ADMIN_PASSWORD:
            ensure_admin(db, ADMIN_USERNAME, ADMIN_PASSWORD)
        app.state.catalog.reconcile(db)
    except CatalogServiceError as e:
        # The first listing request reconciles again
        logger.warning(f"Startup initialization incomplete: {e.error_code}")
    finally:
        db.close()
    logger.info("Application startup complete")


@app.on_event("shutdown")
def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Application shutting down")


@app.get("/", tags=["Health"])
def read_root():
    """Basic health check endpoint."""
    return {"status": "Catalog Service is Operational", "docs": "/docs"}


@app.get("/health", tags=["Health"], status_code=status.HTTP_200_OK)
def health_check():
    """Detailed health check endpoint with system status."""
    health_status = {
        "status": "healthy",
        "service": "Catalog Service",
        "version": "1.0.0",
        "checks": {}
    }

    # Database connectivity check
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
        health_status["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    except Exception as e:
        health_status["status"] = "degraded"
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "message": "Database connection failed"
        }
        logger.warning(f"Database health check failed: {e}")

    health_status["checks"]["cache"] = {
        "status": "healthy",
        "cached_records": app.state.catalog.size()
    }

    status_code = status.HTTP_200_OK
    if health_status["status"] == "degraded":
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(content=health_status, status_code=status_code)
