"""
Pydantic schemas for the file-backed content store.

Content items and schemas are persisted as one JSON document per record;
these models define both the on-disk layout and the API payloads.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


ContentStatus = Literal["draft", "published", "archived"]

FieldType = Literal[
    "text", "textarea", "rich", "number", "boolean", "date",
    "select", "multiselect", "image", "file", "url", "email",
]


# Schema definitions

class FieldValidation(BaseModel):
    """Optional constraints for a schema field."""
    min: float | None = None
    max: float | None = None
    pattern: str | None = None
    message: str | None = None


class SchemaField(BaseModel):
    """One field of a content schema."""
    id: str
    name: str
    type: FieldType
    label: str
    description: str | None = None
    required: bool = False
    default_value: Any = None
    options: list[str] | None = None
    validation: FieldValidation | None = None


class SchemaCreate(BaseModel):
    """Schema for creating a content schema."""
    id: str | None = Field(default=None, pattern=r"^[A-Za-z0-9_-]+$")
    name: str
    description: str
    fields: list[SchemaField]
    created_by: str = "admin"


class SchemaUpdate(BaseModel):
    """Schema for updating a content schema. All fields are optional."""
    name: str | None = None
    description: str | None = None
    fields: list[SchemaField] | None = None
    updated_by: str | None = None


class ContentSchema(BaseModel):
    """A stored content schema."""
    id: str
    name: str
    description: str
    fields: list[SchemaField]
    created_at: datetime
    updated_at: datetime
    created_by: str = "system"
    updated_by: str = "system"


# Content items

class ContentCreate(BaseModel):
    """Schema for creating a content item."""
    title: str = Field(min_length=1)
    slug: str | None = None
    schema_id: str = Field(alias="schema", min_length=1)
    content: dict[str, Any] = {}
    status: ContentStatus = "draft"
    author: str = "admin"
    metadata: dict[str, Any] = {}

    model_config = ConfigDict(populate_by_name=True)


class ContentUpdate(BaseModel):
    """Schema for updating a content item. All fields are optional."""
    title: str | None = Field(default=None, min_length=1)
    slug: str | None = None
    schema_id: str | None = Field(default=None, alias="schema")
    content: dict[str, Any] | None = None
    status: ContentStatus | None = None
    author: str | None = None
    metadata: dict[str, Any] | None = None

    model_config = ConfigDict(populate_by_name=True)


class ContentItem(BaseModel):
    """A stored content item."""
    id: str
    title: str
    slug: str
    schema_id: str = Field(alias="schema")
    content: dict[str, Any] = {}
    status: ContentStatus = "draft"
    author: str = "admin"
    metadata: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(populate_by_name=True)
