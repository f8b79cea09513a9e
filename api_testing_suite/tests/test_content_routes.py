"""
Tests for the content and schema API routes.
"""

import pytest
from fastapi.testclient import TestClient

from api_testing_suite.main import app
from api_testing_suite.routers.content import get_content_manager, get_schema_manager
from api_testing_suite.services.content_store import ContentManager, SchemaManager


@pytest.fixture
def client(tmp_path):
    content_manager = ContentManager(tmp_path / "content")
    schema_manager = SchemaManager(tmp_path / "schemas")
    schema_manager.ensure_defaults()

    app.dependency_overrides[get_content_manager] = lambda: content_manager
    app.dependency_overrides[get_schema_manager] = lambda: schema_manager
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def valid_blog_post(**overrides):
    payload = {
        "title": "Hello World",
        "schema": "blog",
        "content": {
            "title": "Hello World",
            "slug": "hello-world",
            "content": "<p>Hi</p>",
            "status": "draft",
        },
    }
    payload.update(overrides)
    return payload


class TestContentRoutes:

    def test_create_and_fetch(self, client):
        response = client.post("/api/content", json=valid_blog_post())
        assert response.status_code == 201
        created = response.json()
        assert created["schema"] == "blog"
        assert created["slug"] == "hello-world"

        assert client.get(f"/api/content/{created['id']}").json() == created
        assert client.get("/api/content/slug/hello-world").json()["id"] == created["id"]

    def test_content_is_validated_against_schema(self, client):
        response = client.post(
            "/api/content", json=valid_blog_post(content={"slug": "Not A Slug", "featured": "yes"})
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["errors"] == [
            "Slug must contain only lowercase letters, numbers, and hyphens",
            "Featured must be true or false",
        ]

    def test_empty_body_fails_required_rich_field(self, client):
        response = client.post("/api/content", json=valid_blog_post(content={}))

        assert response.status_code == 422
        assert response.json()["errors"] == ["Content is required"]

    def test_editor_payload_uses_item_fields(self, client):
        response = client.post("/api/content", json={
            "title": "Hello",
            "schema": "blog",
            "content": {"blocks": [{"type": "paragraph", "data": {"text": "Hi"}}]},
        })

        assert response.status_code == 201
        created = response.json()
        assert created["slug"] == "hello"
        assert created["status"] == "draft"
        assert created["content"]["blocks"][0]["data"]["text"] == "Hi"

    def test_rich_field_accepts_editor_document(self, client):
        response = client.post("/api/content", json=valid_blog_post(
            content={"content": {"time": 1, "blocks": [{"type": "header", "data": {"text": "T"}}]}}
        ))
        assert response.status_code == 201

    def test_unknown_schema_skips_validation(self, client):
        response = client.post("/api/content", json={"title": "Free form", "schema": "custom", "content": {}})
        assert response.status_code == 201

    def test_duplicate_slug_conflicts(self, client):
        client.post("/api/content", json=valid_blog_post())

        response = client.post("/api/content", json=valid_blog_post(title="Another", slug="hello-world"))

        assert response.status_code == 409
        assert response.json()["error_code"] == "CONFLICT"

    def test_list_filters_by_schema_and_status(self, client):
        post = client.post("/api/content", json=valid_blog_post()).json()
        client.post("/api/content", json={"title": "About", "schema": "custom", "status": "published"})

        assert [i["id"] for i in client.get("/api/content", params={"schema": "blog"}).json()] == [post["id"]]
        published = client.get("/api/content", params={"status": "published"}).json()
        assert [i["title"] for i in published] == ["About"]
        assert len(client.get("/api/content").json()) == 2

    def test_update_revalidates_content(self, client):
        post = client.post("/api/content", json=valid_blog_post()).json()

        ok = client.put(f"/api/content/{post['id']}", json={"status": "published"})
        assert ok.status_code == 200
        assert ok.json()["status"] == "published"
        assert ok.json()["title"] == "Hello World"

        bad = client.put(f"/api/content/{post['id']}", json={"content": {"slug": "Bad Slug"}})
        assert bad.status_code == 422

        renamed = client.put(f"/api/content/{post['id']}", json={"slug": "Bad Slug"})
        assert renamed.status_code == 422

    def test_missing_content_returns_404(self, client):
        assert client.get("/api/content/nothing").status_code == 404
        assert client.get("/api/content/slug/nothing").status_code == 404
        assert client.put("/api/content/nothing", json={"title": "x"}).status_code == 404
        assert client.delete("/api/content/nothing").status_code == 404

    def test_delete(self, client):
        post = client.post("/api/content", json=valid_blog_post()).json()

        assert client.delete(f"/api/content/{post['id']}").status_code == 204
        assert client.get(f"/api/content/{post['id']}").status_code == 404


class TestSchemaRoutes:

    def product_schema(self, **overrides):
        payload = {
            "id": "product",
            "name": "Product",
            "description": "Catalog item",
            "fields": [
                {"id": "name", "name": "name", "type": "text", "label": "Name", "required": True},
                {"id": "price", "name": "price", "type": "number", "label": "Price",
                 "validation": {"min": 0}},
            ],
        }
        payload.update(overrides)
        return payload

    def test_default_schemas_are_listed(self, client):
        ids = {s["id"] for s in client.get("/api/schemas").json()}
        assert ids == {"blog", "page"}

    def test_create_get_update_delete(self, client):
        created = client.post("/api/schemas", json=self.product_schema())
        assert created.status_code == 201

        assert client.get("/api/schemas/product").json()["name"] == "Product"

        updated = client.put("/api/schemas/product", json={"name": "Catalog Product"})
        assert updated.status_code == 200
        assert updated.json()["name"] == "Catalog Product"
        assert len(updated.json()["fields"]) == 2

        assert client.delete("/api/schemas/product").status_code == 204
        assert client.get("/api/schemas/product").status_code == 404

    def test_existing_id_conflicts(self, client):
        response = client.post("/api/schemas", json=self.product_schema(id="blog"))
        assert response.status_code == 409

    def test_invalid_definition_is_rejected(self, client):
        response = client.post("/api/schemas", json=self.product_schema(fields=[]))

        assert response.status_code == 422
        assert response.json()["errors"] == ["Schema must have at least one field"]

    def test_update_must_keep_definition_valid(self, client):
        response = client.put("/api/schemas/blog", json={"description": "  "})
        assert response.status_code == 422

    def test_new_schema_validates_content(self, client):
        client.post("/api/schemas", json=self.product_schema())

        response = client.post("/api/content", json={
            "title": "Widget",
            "schema": "product",
            "content": {"name": "Widget", "price": -1},
        })

        assert response.status_code == 422
        assert response.json()["errors"] == ["Price must be at least 0"]
