"""
File-backed content store for the headless CMS.

Each content item and each schema is one pretty-printed JSON file named
after its id. Listing reads every ``*.json`` file of the directory and
sorts by ``updated_at`` descending.
"""

import json
import logging
import re
import secrets
import string
from pathlib import Path
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..database import utcnow
from ..schemas.content import (
    ContentCreate,
    ContentItem,
    ContentSchema,
    SchemaCreate,
    SchemaField,
)

logger = logging.getLogger(__name__)

# Ids are used as file names; anything else is treated as not found
RECORD_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')

_ID_ALPHABET = string.ascii_lowercase + string.digits

RecordT = TypeVar("RecordT", bound=BaseModel)


class SlugConflictError(Exception):
    """Raised when a slug is already used by another content item."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Slug '{slug}' is already in use")


def generate_id(length: int = 9) -> str:
    """Random lower-case alphanumeric record id."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def slugify(title: str) -> str:
    """Lower-case the title and replace whitespace runs with '-'."""
    return re.sub(r'\s+', '-', title.strip().lower())


class JsonFileRepository(Generic[RecordT]):
    """One JSON file per record, keyed by record id."""

    def __init__(self, directory: str | Path, model: Type[RecordT]):
        self.directory = Path(directory)
        self.model = model
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, record_id: str) -> Optional[Path]:
        if not RECORD_ID_PATTERN.match(record_id or ""):
            return None
        return self.directory / f"{record_id}.json"

    def _read(self, path: Path) -> RecordT:
        with path.open("r", encoding="utf-8") as f:
            return self.model.model_validate(json.load(f))

    def write(self, record_id: str, record: RecordT) -> RecordT:
        path = self._path(record_id)
        if path is None:
            raise ValueError(f"Invalid record id: {record_id!r}")
        data = record.model_dump(mode="json", by_alias=True)
        tmp_path = path.with_suffix(".json.tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)
        return record

    def list_all(self) -> list[RecordT]:
        records = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                records.append(self._read(path))
            except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
                logger.warning("Skipping unreadable record file %s: %s", path, e)
        records.sort(key=lambda r: r.updated_at, reverse=True)
        return records

    def get(self, record_id: str) -> Optional[RecordT]:
        path = self._path(record_id)
        if path is None or not path.exists():
            return None
        try:
            return self._read(path)
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning("Record file %s is unreadable: %s", path, e)
            return None

    def exists(self, record_id: str) -> bool:
        path = self._path(record_id)
        return path is not None and path.exists()

    def delete(self, record_id: str) -> bool:
        path = self._path(record_id)
        if path is None or not path.exists():
            return False
        path.unlink()
        return True

    def new_id(self) -> str:
        while True:
            record_id = generate_id()
            if not self.exists(record_id):
                return record_id


class ContentManager:
    """CRUD over content items stored under ``content_dir``."""

    def __init__(self, content_dir: str | Path):
        self.repository: JsonFileRepository[ContentItem] = JsonFileRepository(content_dir, ContentItem)

    def list_all(self) -> list[ContentItem]:
        return self.repository.list_all()

    def get(self, content_id: str) -> Optional[ContentItem]:
        return self.repository.get(content_id)

    def list_by_schema(self, schema_id: str) -> list[ContentItem]:
        return [item for item in self.list_all() if item.schema_id == schema_id]

    def get_by_slug(self, slug: str) -> Optional[ContentItem]:
        for item in self.list_all():
            if item.slug == slug:
                return item
        return None

    def _ensure_slug_free(self, slug: str, own_id: str | None = None) -> None:
        existing = self.get_by_slug(slug)
        if existing is not None and existing.id != own_id:
            raise SlugConflictError(slug)

    def create(self, data: ContentCreate) -> ContentItem:
        """
        Create a content item with a generated id and timestamps.

        Raises:
            SlugConflictError: the slug is already taken
        """
        slug = data.slug or slugify(data.title)
        self._ensure_slug_free(slug)

        now = utcnow()
        item = ContentItem(
            id=self.repository.new_id(),
            title=data.title,
            slug=slug,
            schema_id=data.schema_id,
            content=data.content,
            status=data.status,
            author=data.author,
            metadata=data.metadata,
            created_at=now,
            updated_at=now,
        )
        self.repository.write(item.id, item)
        logger.info("Created content %s (%s)", item.id, item.slug)
        return item

    def update(self, content_id: str, changes: dict[str, Any]) -> Optional[ContentItem]:
        """
        Merge changes into an item and bump ``updated_at``.

        ``id`` and ``created_at`` never change. Returns None when the
        item does not exist.

        Raises:
            SlugConflictError: the new slug is taken by another item
        """
        existing = self.get(content_id)
        if existing is None:
            return None

        changes = {k: v for k, v in changes.items() if k not in ("id", "created_at", "updated_at")}
        if changes.get("slug"):
            self._ensure_slug_free(changes["slug"], own_id=content_id)

        merged = existing.model_dump()
        merged.update(changes)
        merged["updated_at"] = utcnow()
        updated = ContentItem.model_validate(merged)
        self.repository.write(content_id, updated)
        return updated

    def delete(self, content_id: str) -> bool:
        return self.repository.delete(content_id)


def _default_schemas() -> list[dict[str, Any]]:
    return [
        {
            "id": "blog",
            "name": "Blog Post",
            "description": "Article content structure",
            "fields": [
                {"id": "title", "name": "title", "type": "text", "label": "Title",
                 "description": "The title of the blog post", "required": True,
                 "validation": {"min": 1, "max": 200,
                                "message": "Title must be between 1 and 200 characters"}},
                {"id": "slug", "name": "slug", "type": "text", "label": "Slug",
                 "description": "URL-friendly version of the title", "required": True,
                 "validation": {"pattern": "^[a-z0-9-]+$",
                                "message": "Slug must contain only lowercase letters, numbers, and hyphens"}},
                {"id": "content", "name": "content", "type": "rich", "label": "Content",
                 "description": "The main content of the blog post", "required": True},
                {"id": "excerpt", "name": "excerpt", "type": "textarea", "label": "Excerpt",
                 "description": "Short description of the blog post", "required": False,
                 "validation": {"max": 500, "message": "Excerpt must be less than 500 characters"}},
                {"id": "cover", "name": "cover", "type": "image", "label": "Cover Image",
                 "description": "Featured image for the blog post", "required": False},
                {"id": "tags", "name": "tags", "type": "multiselect", "label": "Tags",
                 "description": "Tags to categorize the blog post", "required": False,
                 "options": ["Technology", "AI", "Web Development", "Design", "Business"]},
                {"id": "featured", "name": "featured", "type": "boolean", "label": "Featured",
                 "description": "Mark this post as featured", "required": False,
                 "default_value": False},
                {"id": "status", "name": "status", "type": "select", "label": "Status",
                 "description": "Publication status", "required": True,
                 "options": ["draft", "published", "archived"], "default_value": "draft"},
            ],
        },
        {
            "id": "page",
            "name": "Page",
            "description": "Static page structure",
            "fields": [
                {"id": "title", "name": "title", "type": "text", "label": "Title",
                 "description": "The title of the page", "required": True},
                {"id": "slug", "name": "slug", "type": "text", "label": "Slug",
                 "description": "URL-friendly version of the title", "required": True},
                {"id": "content", "name": "content", "type": "rich", "label": "Content",
                 "description": "The main content of the page", "required": True},
                {"id": "meta_title", "name": "meta_title", "type": "text", "label": "Meta Title",
                 "description": "SEO title for search engines", "required": False},
                {"id": "meta_description", "name": "meta_description", "type": "textarea",
                 "label": "Meta Description",
                 "description": "SEO description for search engines", "required": False},
            ],
        },
    ]


class SchemaManager:
    """CRUD over content schemas stored under ``schemas_dir``."""

    def __init__(self, schemas_dir: str | Path):
        self.repository: JsonFileRepository[ContentSchema] = JsonFileRepository(schemas_dir, ContentSchema)

    def ensure_defaults(self) -> None:
        """Write the built-in ``blog`` and ``page`` schemas into an empty store."""
        if any(self.repository.directory.glob("*.json")):
            return
        now = utcnow()
        for data in _default_schemas():
            schema = ContentSchema(created_at=now, updated_at=now, **data)
            self.repository.write(schema.id, schema)
        logger.info("Created default content schemas in %s", self.repository.directory)

    def list_all(self) -> list[ContentSchema]:
        return self.repository.list_all()

    def get(self, schema_id: str) -> Optional[ContentSchema]:
        return self.repository.get(schema_id)

    def exists(self, schema_id: str) -> bool:
        return self.repository.exists(schema_id)

    def create(self, data: SchemaCreate) -> ContentSchema:
        now = utcnow()
        schema = ContentSchema(
            id=data.id or self.repository.new_id(),
            name=data.name,
            description=data.description,
            fields=data.fields,
            created_at=now,
            updated_at=now,
            created_by=data.created_by,
            updated_by=data.created_by,
        )
        return self.repository.write(schema.id, schema)

    def update(self, schema_id: str, changes: dict[str, Any]) -> Optional[ContentSchema]:
        existing = self.get(schema_id)
        if existing is None:
            return None
        changes = {k: v for k, v in changes.items() if v is not None}
        merged = existing.model_dump()
        merged.update(changes)
        merged["updated_at"] = utcnow()
        updated = ContentSchema.model_validate(merged)
        return self.repository.write(schema_id, updated)

    def delete(self, schema_id: str) -> bool:
        return self.repository.delete(schema_id)


def validate_schema(name: str, description: str, fields: list[SchemaField]) -> list[str]:
    """
    Check a schema definition and return human-readable problems.

    An empty list means the definition is valid.
    """
    errors: list[str] = []

    if not name or not name.strip():
        errors.append("Schema name is required")
    if not description or not description.strip():
        errors.append("Schema description is required")
    if not fields:
        errors.append("Schema must have at least one field")

    field_ids: set[str] = set()
    field_names: set[str] = set()
    for index, field in enumerate(fields or [], start=1):
        if not field.id or not field.id.strip():
            errors.append(f"Field {index}: ID is required")
        elif field.id in field_ids:
            errors.append(f'Field {index}: Duplicate field ID "{field.id}"')
        else:
            field_ids.add(field.id)

        if not field.name or not field.name.strip():
            errors.append(f"Field {index}: Name is required")
        elif field.name in field_names:
            errors.append(f'Field {index}: Duplicate field name "{field.name}"')
        else:
            field_names.add(field.name)

        if not field.label or not field.label.strip():
            errors.append(f"Field {index}: Label is required")

        if field.type in ("select", "multiselect") and not field.options:
            errors.append(f"Field {index}: Options are required for select/multiselect fields")

    return errors


EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
URL_PATTERN = re.compile(r'^https?://\S+$')


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == []


def _validate_field(field: SchemaField, value: Any) -> list[str]:
    label = field.label or field.name
    rules = field.validation
    custom = rules.message if rules and rules.message else None
    errors: list[str] = []

    if field.type == "number":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return [f"{label} must be a number"]
        if rules and rules.min is not None and value < rules.min:
            errors.append(custom or f"{label} must be at least {rules.min:g}")
        if rules and rules.max is not None and value > rules.max:
            errors.append(custom or f"{label} must be at most {rules.max:g}")
        return errors

    if field.type == "boolean":
        if not isinstance(value, bool):
            return [f"{label} must be true or false"]
        return errors

    if field.type == "multiselect":
        if not isinstance(value, list):
            return [f"{label} must be a list"]
        invalid = [v for v in value if field.options and v not in field.options]
        if invalid:
            errors.append(f"{label} has invalid options: {', '.join(map(str, invalid))}")
        return errors

    if field.type == "select":
        if field.options and value not in field.options:
            errors.append(f"{label} must be one of: {', '.join(field.options)}")
        return errors

    # Editor documents are stored as JSON objects
    if field.type == "rich" and not isinstance(value, str):
        return errors

    if not isinstance(value, str):
        return [f"{label} must be a string"]

    if field.type == "email" and not EMAIL_PATTERN.match(value):
        errors.append(f"{label} must be a valid email address")
    if field.type == "url" and not URL_PATTERN.match(value):
        errors.append(f"{label} must be a valid URL")

    if rules:
        if rules.min is not None and len(value) < rules.min:
            errors.append(custom or f"{label} must be at least {rules.min:g} characters")
        if rules.max is not None and len(value) > rules.max:
            errors.append(custom or f"{label} must be at most {rules.max:g} characters")
        if rules.pattern:
            try:
                if not re.search(rules.pattern, value):
                    errors.append(custom or f"{label} has an invalid format")
            except re.error:
                logger.warning("Invalid pattern on field %s: %s", field.name, rules.pattern)

    return errors


def validate_content(
    schema: ContentSchema,
    content: dict[str, Any],
    item_fields: dict[str, Any] | None = None,
) -> list[str]:
    """
    Check content values against a schema's fields.

    Missing optional fields are skipped; missing required fields are
    reported. Returns human-readable problems, empty when valid.

    Args:
        schema: The schema the content claims to follow
        content: The item's content values
        item_fields: Item-level values such as ``title``, ``slug`` and
            ``status`` used for schema fields that ``content`` leaves out
    """
    values = {**(item_fields or {}), **content}
    errors: list[str] = []
    for field in schema.fields:
        value = values.get(field.name)
        if _is_missing(value):
            if field.required:
                errors.append(f"{field.label or field.name} is required")
            continue
        errors.extend(_validate_field(field, value))
    return errors
