"""
Mock endpoint model.

A mock endpoint is a stub route served by the mock server: a path
pattern (``/users/:id``), a method, and the canned response.
"""

from datetime import datetime

from sqlalchemy import String, Text, JSON, Integer, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, utcnow


def _default_headers() -> dict:
    return {"Content-Type": "application/json"}


class MockEndpoint(Base):
    """
    SQLAlchemy model for mock endpoints.

    Attributes:
        id: Unique identifier
        name: Human-readable name
        path: Path pattern; ``:name`` segments match any single segment
        method: Upper-cased HTTP method
        status_code: Status returned on match
        response_body: Body text; served as JSON when it parses as JSON
        headers: Response headers
        delay_ms: Artificial latency before responding
        enabled: Disabled endpoints are never matched
    """
    __tablename__ = "mock_endpoints"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    path: Mapped[str] = mapped_column(String(1000))
    method: Mapped[str] = mapped_column(String(10))
    status_code: Mapped[int] = mapped_column(Integer, default=200)
    response_body: Mapped[str] = mapped_column(Text, default="{}")
    headers: Mapped[dict] = mapped_column(JSON, default=_default_headers)
    delay_ms: Mapped[int] = mapped_column(Integer, default=0)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)
