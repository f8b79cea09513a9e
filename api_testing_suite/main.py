"""
API Testing Suite - FastAPI Application Entry Point

Manages test suites, runs them against live APIs, configures mock
endpoints and stores CMS content, and reports dashboard metrics.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import init_db
from .exceptions import register_exception_handlers
from .logging_config import configure_logging
from .routers import content, dashboard, environments, mock_endpoints, test_runs, test_suites
from .services.content_store import SchemaManager

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    configure_logging(settings.log_level)
    init_db()
    SchemaManager(settings.schemas_dir).ensure_defaults()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Test suites, assertions, mock endpoints and content for API development",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
register_exception_handlers(app)


@app.get("/")
async def root():
    """Root endpoint returning API information."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Register routers
app.include_router(test_suites.router)
app.include_router(test_runs.router)
app.include_router(environments.router)
app.include_router(mock_endpoints.router)
app.include_router(content.router)
app.include_router(dashboard.router)
