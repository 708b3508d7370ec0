"""
EduOpps - Main Application

FastAPI backend with:
- PostgreSQL (SQLite for local runs and tests) for structured data
- Local disk or MongoDB GridFS for uploaded documents
- JWT authentication with role permissions
- SMTP for e-mailed application forms

Run: uvicorn eduopps.main:app --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from eduopps.api.routes import api_router
from eduopps.core.config import get_settings
from eduopps.core.logger import is_configured, setup_logger
from eduopps.db.database import test_database_connection
from eduopps.db.mongodb import init_mongo_indexes, test_mongo_connection
from eduopps.db.seed import init_db

settings = get_settings()

# Create FastAPI app
app = FastAPI(
    title="EduOpps",
    description="""
    Career opportunities platform for schools.

    ## Features
    - **Authentication**: JWT bearer tokens, role-based permissions
    - **Schools**: Multi-school tenancy with per-school users and content
    - **Opportunities**: Post, browse, filter and register interest
    - **Documents**: Attach application forms and flyers to opportunities
    - **Form requests**: Application forms e-mailed as signed links
    - **News**: School and global news feed
    - **Reports**: Opportunity, registration and teacher activity numbers
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log anything the routes did not turn into an HTTPException."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Startup event
@app.on_event("startup")
async def startup_event():
    """Configure logging, create tables and seed default roles."""
    if not is_configured():
        setup_logger()

    init_db(seed=settings.seed_on_startup)
    logger.info("Database schema ready")

    if settings.file_storage_backend == "gridfs":
        try:
            init_mongo_indexes()
        except Exception as e:
            logger.warning(f"MongoDB index initialization failed: {e}")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "EduOpps", "docs": "/docs"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    if settings.file_storage_backend == "gridfs":
        storage = "connected" if test_mongo_connection() else "disconnected"
    else:
        storage = "local"

    return {
        "status": "healthy",
        "database": "connected" if test_database_connection() else "disconnected",
        "file_storage": storage
    }
