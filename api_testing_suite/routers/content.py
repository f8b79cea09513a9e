"""
Content and schema API routes for the file-backed CMS store.

Content items are validated against their schema when the schema
exists. Schema definitions are validated before they are written.
"""

from fastapi import APIRouter, Depends, Query, status

from ..config import get_settings
from ..exceptions import ConflictError, ContentValidationError, ResourceNotFoundError
from ..schemas.content import (
    ContentCreate,
    ContentItem,
    ContentSchema,
    ContentUpdate,
    SchemaCreate,
    SchemaUpdate,
)
from ..services.content_store import (
    ContentManager,
    SchemaManager,
    SlugConflictError,
    slugify,
    validate_content,
    validate_schema,
)


router = APIRouter(prefix="/api", tags=["content"])


def get_content_manager() -> ContentManager:
    """Dependency returning the content store rooted at the configured directory."""
    return ContentManager(get_settings().content_dir)


def get_schema_manager() -> SchemaManager:
    """Dependency returning the schema store rooted at the configured directory."""
    return SchemaManager(get_settings().schemas_dir)


def _item_fields(title: str, slug: str, status: str, content: dict) -> dict:
    # The item body itself stands in for a schema field named "content"
    return {"title": title, "slug": slug, "status": status, "content": content or None}


def _check_content(schemas: SchemaManager, schema_id: str, content: dict, item_fields: dict) -> None:
    schema = schemas.get(schema_id)
    if schema is None:
        return
    errors = validate_content(schema, content, item_fields)
    if errors:
        raise ContentValidationError(errors)


# Content endpoints

@router.get("/content", response_model=list[ContentItem])
def list_content(
    schema: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    contents: ContentManager = Depends(get_content_manager),
):
    """
    List content items, most recently updated first.

    Args:
        schema: Only items of this schema when given
        status_filter: Only items with this status when given (``?status=``)
    """
    items = contents.list_by_schema(schema) if schema else contents.list_all()
    if status_filter:
        items = [item for item in items if item.status == status_filter]
    return items


@router.get("/content/slug/{slug}", response_model=ContentItem)
def get_content_by_slug(slug: str, contents: ContentManager = Depends(get_content_manager)):
    """Get a content item by its slug."""
    item = contents.get_by_slug(slug)
    if item is None:
        raise ResourceNotFoundError("Content", slug, key="slug")
    return item


@router.get("/content/{content_id}", response_model=ContentItem)
def get_content(content_id: str, contents: ContentManager = Depends(get_content_manager)):
    """Get a content item by ID."""
    item = contents.get(content_id)
    if item is None:
        raise ResourceNotFoundError("Content", content_id)
    return item


@router.post("/content", response_model=ContentItem, status_code=status.HTTP_201_CREATED)
def create_content(
    content_data: ContentCreate,
    contents: ContentManager = Depends(get_content_manager),
    schemas: SchemaManager = Depends(get_schema_manager),
):
    """
    Create a content item.

    The slug defaults to the title lower-cased with spaces as hyphens.

    Raises:
        ContentValidationError: 422 if the content breaks its schema
        ConflictError: 409 if the slug is already used
    """
    _check_content(
        schemas,
        content_data.schema_id,
        content_data.content,
        _item_fields(
            content_data.title,
            content_data.slug or slugify(content_data.title),
            content_data.status,
            content_data.content,
        ),
    )
    try:
        return contents.create(content_data)
    except SlugConflictError as e:
        raise ConflictError(str(e))


@router.put("/content/{content_id}", response_model=ContentItem)
def update_content(
    content_id: str,
    content_data: ContentUpdate,
    contents: ContentManager = Depends(get_content_manager),
    schemas: SchemaManager = Depends(get_schema_manager),
):
    """Update a content item. Only provided fields change."""
    existing = contents.get(content_id)
    if existing is None:
        raise ResourceNotFoundError("Content", content_id)

    changes = content_data.model_dump(exclude_unset=True, exclude_none=True)
    if changes.keys() & {"content", "schema_id", "title", "slug", "status"}:
        content = changes.get("content", existing.content)
        _check_content(
            schemas,
            changes.get("schema_id", existing.schema_id),
            content,
            _item_fields(
                changes.get("title", existing.title),
                changes.get("slug", existing.slug),
                changes.get("status", existing.status),
                content,
            ),
        )

    try:
        return contents.update(content_id, changes)
    except SlugConflictError as e:
        raise ConflictError(str(e))


@router.delete("/content/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_content(content_id: str, contents: ContentManager = Depends(get_content_manager)):
    """Delete a content item by ID."""
    if not contents.delete(content_id):
        raise ResourceNotFoundError("Content", content_id)
    return None


# Schema endpoints

@router.get("/schemas", response_model=list[ContentSchema])
def list_schemas(schemas: SchemaManager = Depends(get_schema_manager)):
    """List content schemas, most recently updated first."""
    return schemas.list_all()


@router.get("/schemas/{schema_id}", response_model=ContentSchema)
def get_schema(schema_id: str, schemas: SchemaManager = Depends(get_schema_manager)):
    """Get a content schema by ID."""
    schema = schemas.get(schema_id)
    if schema is None:
        raise ResourceNotFoundError("Schema", schema_id)
    return schema


@router.post("/schemas", response_model=ContentSchema, status_code=status.HTTP_201_CREATED)
def create_schema(schema_data: SchemaCreate, schemas: SchemaManager = Depends(get_schema_manager)):
    """
    Create a content schema.

    Raises:
        ContentValidationError: 422 if the definition is invalid
        ConflictError: 409 if a schema with the requested id exists
    """
    errors = validate_schema(schema_data.name, schema_data.description, schema_data.fields)
    if errors:
        raise ContentValidationError(errors)
    if schema_data.id and schemas.exists(schema_data.id):
        raise ConflictError(f"Schema with id {schema_data.id} already exists")
    return schemas.create(schema_data)


@router.put("/schemas/{schema_id}", response_model=ContentSchema)
def update_schema(
    schema_id: str,
    schema_data: SchemaUpdate,
    schemas: SchemaManager = Depends(get_schema_manager),
):
    """Update a content schema. The merged definition must stay valid."""
    existing = schemas.get(schema_id)
    if existing is None:
        raise ResourceNotFoundError("Schema", schema_id)

    errors = validate_schema(
        schema_data.name if schema_data.name is not None else existing.name,
        schema_data.description if schema_data.description is not None else existing.description,
        schema_data.fields if schema_data.fields is not None else existing.fields,
    )
    if errors:
        raise ContentValidationError(errors)

    return schemas.update(schema_id, schema_data.model_dump(exclude_unset=True, exclude_none=True))


@router.delete("/schemas/{schema_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schema(schema_id: str, schemas: SchemaManager = Depends(get_schema_manager)):
    """Delete a content schema by ID. Existing content items are kept."""
    if not schemas.delete(schema_id):
        raise ResourceNotFoundError("Schema", schema_id)
    return None
