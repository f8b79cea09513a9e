"""
End-to-end tests for running suites over HTTP.

The run endpoints send their requests to the mock server application
through ``httpx.ASGITransport``, so a whole run exercises the runner,
the mock matcher and the run history routes together.
"""

from contextlib import contextmanager

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from api_testing_suite.main import app
from api_testing_suite.mock_server import app as mock_app
from api_testing_suite.database import Base, get_db
from api_testing_suite.services import http_executor


# Test database setup
TEST_DATABASE_URL = "sqlite:///./test_run_endpoints.db"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)


@event.listens_for(test_engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def route_to_mock_server(monkeypatch):
    """Send every test request to the in-process mock server."""
    def create_client(timeout):
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=mock_app), timeout=timeout)

    monkeypatch.setattr(http_executor, "create_client", create_client)


@contextmanager
def get_test_client():
    """Context manager to create a test client with fresh database."""
    Base.metadata.create_all(bind=test_engine)
    app.dependency_overrides[get_db] = override_get_db
    mock_app.dependency_overrides[get_db] = override_get_db

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        Base.metadata.drop_all(bind=test_engine)
        app.dependency_overrides.clear()
        mock_app.dependency_overrides.clear()


def setup_suite(client):
    """Create mock endpoints and a suite with one passing and one failing test."""
    client.post("/api/mock/endpoints", json={
        "name": "user",
        "path": "/users/:id",
        "method": "GET",
        "response_body": '{"id": 1, "name": "ada"}',
        "headers": {"Content-Type": "application/json", "X-Mock": "yes"},
    })
    suite = client.post("/api/test-suites", json={"name": "Users API"}).json()
    passing = client.post(f"/api/test-suites/{suite['id']}/tests", json={
        "name": "get user",
        "method": "GET",
        "url": "/users/{{user_id}}",
        "assertions": [
            {"type": "status", "expected": 200},
            {"type": "json_path", "expected": "ada", "json_path": "name"},
            {"type": "header", "expected": "yes", "header_name": "x-mock"},
            {"type": "body_contains", "expected": "ada"},
            {"type": "response_time", "expected": 10000},
        ],
    }).json()
    failing = client.post(f"/api/test-suites/{suite['id']}/tests", json={
        "name": "missing route",
        "method": "GET",
        "url": "/orders",
        "assertions": [{"type": "status", "expected": 200}],
    }).json()
    environment = client.post("/api/environments", json={
        "name": "mock",
        "base_url": "http://mock.test",
        "is_active": True,
        "variables": [{"key": "user_id", "value": "1"}],
    }).json()
    return suite, passing, failing, environment


class TestRunSuiteEndpoint:

    def test_run_reports_each_test(self):
        with get_test_client() as client:
            suite, passing, failing, _ = setup_suite(client)

            response = client.post(f"/api/test-suites/{suite['id']}/run")

            assert response.status_code == 200
            report = response.json()
            assert report["status"] == "failed"
            assert report["summary"] == {"total": 2, "passed": 1, "failed": 1, "skipped": 0}

            first, second = report["results"]
            assert first["test_id"] == passing["id"]
            assert first["status"] == "passed"
            assert first["response"]["body"] == {"id": 1, "name": "ada"}
            assert all(a["passed"] for a in first["assertions"])
            assert second["test_id"] == failing["id"]
            assert second["response"]["status_code"] == 404
            assert second["assertions"][0]["actual"] == 404

    def test_run_without_environment_reports_warnings(self):
        with get_test_client() as client:
            suite, _, _, environment = setup_suite(client)
            client.put(f"/api/environments/{environment['id']}", json={"is_active": False})
            test = client.post(f"/api/test-suites/{suite['id']}/tests", json={
                "name": "absolute",
                "method": "GET",
                "url": "http://mock.test/users/{{user_id}}",
            }).json()

            report = client.post(f"/api/test-suites/{suite['id']}/tests/{test['id']}/run").json()

            assert report["results"][0]["warnings"] == ["Undefined variable in URL: {{user_id}}"]

    def test_run_with_explicit_environment(self):
        with get_test_client() as client:
            suite, _, _, environment = setup_suite(client)
            client.put(f"/api/environments/{environment['id']}", json={"is_active": False})

            response = client.post(
                f"/api/test-suites/{suite['id']}/run",
                json={"environment_id": environment["id"]},
            )

            assert response.json()["results"][0]["status"] == "passed"

    def test_unknown_environment_returns_404(self):
        with get_test_client() as client:
            suite, _, _, _ = setup_suite(client)

            response = client.post(f"/api/test-suites/{suite['id']}/run", json={"environment_id": 999})

            assert response.status_code == 404

    def test_run_single_test(self):
        with get_test_client() as client:
            suite, passing, _, _ = setup_suite(client)

            response = client.post(f"/api/test-suites/{suite['id']}/tests/{passing['id']}/run")

            assert response.status_code == 200
            report = response.json()
            assert report["status"] == "completed"
            assert report["summary"]["total"] == 1


class TestRunHistory:

    def test_runs_are_listed_newest_first_and_filterable(self):
        with get_test_client() as client:
            suite, passing, _, _ = setup_suite(client)
            other = client.post("/api/test-suites", json={"name": "Other"}).json()

            first = client.post(f"/api/test-suites/{suite['id']}/run").json()
            second = client.post(f"/api/test-suites/{suite['id']}/tests/{passing['id']}/run").json()
            client.post(f"/api/test-suites/{other['id']}/run")

            listing = client.get("/api/test-runs", params={"suite_id": suite["id"]}).json()
            assert listing["total"] == 2
            assert [run["id"] for run in listing["items"]] == [second["test_run_id"], first["test_run_id"]]

            assert client.get("/api/test-runs").json()["total"] == 3
            assert len(client.get("/api/test-runs", params={"limit": 1}).json()["items"]) == 1

    def test_run_detail_includes_results_and_assertions(self):
        with get_test_client() as client:
            suite, _, _, _ = setup_suite(client)
            report = client.post(f"/api/test-suites/{suite['id']}/run").json()

            detail = client.get(f"/api/test-runs/{report['test_run_id']}").json()

            assert detail["status"] == "failed"
            assert detail["finished_at"] is not None
            assert len(detail["results"]) == 2
            assert len(detail["results"][0]["assertion_results"]) == 5

    def test_deleting_a_test_keeps_its_results(self):
        with get_test_client() as client:
            suite, passing, _, _ = setup_suite(client)
            report = client.post(f"/api/test-suites/{suite['id']}/run").json()

            client.delete(f"/api/test-suites/{suite['id']}/tests/{passing['id']}")

            detail = client.get(f"/api/test-runs/{report['test_run_id']}").json()
            assert detail["results"][0]["test_id"] is None
            assert detail["results"][0]["status"] == "passed"

    def test_delete_run(self):
        with get_test_client() as client:
            suite, _, _, _ = setup_suite(client)
            report = client.post(f"/api/test-suites/{suite['id']}/run").json()

            assert client.delete(f"/api/test-runs/{report['test_run_id']}").status_code == 204
            assert client.get(f"/api/test-runs/{report['test_run_id']}").status_code == 404
            assert client.delete(f"/api/test-runs/{report['test_run_id']}").status_code == 404
