"""
Pydantic schemas for mock endpoints.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .test_suite import HttpMethod


class MockEndpointBase(BaseModel):
    """Base schema with common mock endpoint fields."""
    name: str = Field(min_length=1)
    path: str = Field(min_length=1)
    method: HttpMethod
    status_code: int = Field(default=200, ge=100, le=599)
    response_body: str = "{}"
    headers: dict[str, str] = {"Content-Type": "application/json"}
    delay_ms: int = Field(default=0, ge=0)
    enabled: bool = True

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("path")
    @classmethod
    def path_must_be_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("path must start with '/'")
        return value


class MockEndpointCreate(MockEndpointBase):
    """Schema for creating a mock endpoint."""
    pass


class MockEndpointUpdate(BaseModel):
    """Schema for updating a mock endpoint. All fields are optional."""
    name: str | None = Field(default=None, min_length=1)
    path: str | None = Field(default=None, min_length=1)
    method: HttpMethod | None = None
    status_code: int | None = Field(default=None, ge=100, le=599)
    response_body: str | None = None
    headers: dict[str, str] | None = None
    delay_ms: int | None = Field(default=None, ge=0)
    enabled: bool | None = None

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("path")
    @classmethod
    def path_must_be_absolute(cls, value: str | None) -> str | None:
        if value is not None and not value.startswith("/"):
            raise ValueError("path must start with '/'")
        return value


class MockEndpointResponse(MockEndpointBase):
    """Schema for mock endpoint response."""
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MockServerStatus(BaseModel):
    """Mock server status as reported by the API service."""
    status: str
    endpoints: int
    port: int
