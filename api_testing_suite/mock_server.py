"""
Mock server application.

Serves the stub routes configured under ``/api/mock/endpoints`` on its
own port. Run it standalone with ``python -m api_testing_suite.mock_server``.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import get_settings
from .database import get_db, init_db
from .exceptions import register_exception_handlers
from .logging_config import configure_logging
from .models.mock_endpoint import MockEndpoint
from .services.mock_matcher import find_matching_endpoint

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

# Computed by the response class from the decoded body
_SKIPPED_HEADERS = {"content-length"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Mock server lifespan handler for startup and shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    init_db()
    logger.info("Mock server ready on port %s", settings.mock_port)
    yield


app = FastAPI(
    title="API Testing Suite Mock Server",
    description="Serves configured mock endpoints",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
register_exception_handlers(app)


def _load_endpoints(db: Session) -> list[MockEndpoint]:
    try:
        return (
            db.query(MockEndpoint)
            .filter(MockEndpoint.enabled == True)  # noqa: E712
            .order_by(MockEndpoint.created_at.asc(), MockEndpoint.id.asc())
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load mock endpoints")
        return []


def _decode_body(raw: str):
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "port": get_settings().mock_port,
    }


@app.api_route("/{full_path:path}", methods=ALL_METHODS)
async def serve_mock(full_path: str, request: Request, db: Session = Depends(get_db)):
    """
    Answer a request with the first enabled endpoint that matches it.

    Returns 404 listing the available endpoints when nothing matches.
    """
    path = request.url.path
    method = request.method
    endpoints = _load_endpoints(db)

    endpoint = find_matching_endpoint(endpoints, method, path)
    if endpoint is None:
        logger.info("No mock endpoint for %s %s", method, path)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "Mock endpoint not found",
                "path": path,
                "method": method,
                "available_endpoints": [
                    {"path": e.path, "method": e.method} for e in endpoints
                ],
            }
        )

    if endpoint.delay_ms > 0:
        await asyncio.sleep(endpoint.delay_ms / 1000)

    headers = {
        name: value
        for name, value in (endpoint.headers or {}).items()
        if name.lower() not in _SKIPPED_HEADERS
    }
    return JSONResponse(
        status_code=endpoint.status_code,
        content=_decode_body(endpoint.response_body),
        headers=headers,
    )


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.mock_host, port=settings.mock_port)
