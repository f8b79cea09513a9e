"""
Tests for building and sending test requests.

HTTP traffic goes through ``httpx.MockTransport`` by replacing the
client factory of the executor module.
"""

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest

from api_testing_suite.services import http_executor
from api_testing_suite.services.http_executor import (
    PreparedRequest,
    RequestExecutionError,
    build_test_request,
    send_test_request,
)


def make_test(method="GET", url="/users", headers=None, body=None):
    return SimpleNamespace(id=1, method=method, url=url, headers=headers or {}, body=body)


def make_environment(base_url="", headers=None, variables=None):
    variables = variables or {}
    return SimpleNamespace(
        base_url=base_url,
        headers=headers or {},
        variable_map=lambda: dict(variables),
    )


@pytest.fixture
def transport(monkeypatch):
    """Route requests to a handler set by the test; records what was sent."""
    state = {"handler": lambda request: httpx.Response(200, json={"ok": True}), "requests": []}

    def handle(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return state["handler"](request)

    def create_client(timeout):
        return httpx.AsyncClient(transport=httpx.MockTransport(handle), timeout=timeout)

    monkeypatch.setattr(http_executor, "create_client", create_client)
    return state


class TestBuildTestRequest:

    def test_without_environment_keeps_url_and_reports_placeholders(self):
        prepared = build_test_request(make_test(url="http://api/{{version}}/users"), None)

        assert prepared.url == "http://api/{{version}}/users"
        assert prepared.method == "GET"
        assert prepared.warnings == ["Undefined variable in URL: {{version}}"]

    def test_base_url_prefixes_relative_url(self):
        environment = make_environment(base_url="https://api.example.com/")

        prepared = build_test_request(make_test(url="/users"), environment)

        assert prepared.url == "https://api.example.com/users"

    def test_absolute_url_ignores_base_url(self):
        environment = make_environment(base_url="https://api.example.com")

        prepared = build_test_request(make_test(url="http://other.test/ping"), environment)

        assert prepared.url == "http://other.test/ping"

    def test_variables_substituted_in_url_headers_and_body(self):
        environment = make_environment(
            base_url="https://{{host}}",
            variables={"host": "api.example.com", "token": "secret", "name": "ada"},
        )
        test = make_test(
            method="post",
            url="/users/{{name}}",
            headers={"Authorization": "Bearer {{token}}"},
            body={"name": "{{name}}", "age": 36},
        )

        prepared = build_test_request(test, environment)

        assert prepared.method == "POST"
        assert prepared.url.endswith("/users/ada")
        assert prepared.headers == {"Authorization": "Bearer secret"}
        assert prepared.body == {"name": "ada", "age": 36}

    def test_environment_headers_win(self):
        environment = make_environment(
            headers={"X-Env": "{{stage}}", "Accept": "application/xml"},
            variables={"stage": "staging"},
        )
        test = make_test(headers={"Accept": "application/json", "X-Test": "1"})

        prepared = build_test_request(test, environment)

        assert prepared.headers == {"Accept": "application/xml", "X-Test": "1", "X-Env": "staging"}


class TestSendTestRequest:

    def test_json_response_is_decoded(self, transport):
        transport["handler"] = lambda request: httpx.Response(
            201, json={"id": 5}, headers={"X-Trace": "t1"}
        )

        executed = asyncio.run(send_test_request(PreparedRequest("GET", "http://api.test/users"), 1000))

        assert executed.response.status_code == 201
        assert executed.response.body == {"id": 5}
        assert executed.response.headers["x-trace"] == "t1"
        assert executed.duration_ms >= 0

    def test_text_response_is_kept_as_text(self, transport):
        transport["handler"] = lambda request: httpx.Response(200, text="pong")

        executed = asyncio.run(send_test_request(PreparedRequest("GET", "http://api.test/ping"), 1000))

        assert executed.response.body == "pong"

    def test_invalid_json_falls_back_to_text(self, transport):
        transport["handler"] = lambda request: httpx.Response(
            200, content=b"{not json", headers={"Content-Type": "application/json"}
        )

        executed = asyncio.run(send_test_request(PreparedRequest("GET", "http://api.test/x"), 1000))

        assert executed.response.body == "{not json"

    def test_error_status_is_a_response(self, transport):
        transport["handler"] = lambda request: httpx.Response(500, json={"error": "boom"})

        executed = asyncio.run(send_test_request(PreparedRequest("GET", "http://api.test/x"), 1000))

        assert executed.response.status_code == 500

    def test_json_body_is_serialized_with_content_type(self, transport):
        prepared = PreparedRequest("POST", "http://api.test/users", body={"name": "ada"})

        asyncio.run(send_test_request(prepared, 1000))

        sent = transport["requests"][0]
        assert json.loads(sent.content) == {"name": "ada"}
        assert sent.headers["content-type"] == "application/json"

    def test_string_body_is_sent_verbatim(self, transport):
        prepared = PreparedRequest(
            "POST", "http://api.test/raw", headers={"Content-Type": "text/plain"}, body="hello"
        )

        asyncio.run(send_test_request(prepared, 1000))

        sent = transport["requests"][0]
        assert sent.content == b"hello"
        assert sent.headers["content-type"] == "text/plain"

    @pytest.mark.parametrize("error, kind", [
        (httpx.ReadTimeout("too slow"), "timeout"),
        (httpx.ConnectError("refused"), "network_error"),
        (httpx.UnsupportedProtocol("ftp"), "invalid_url"),
        (httpx.RemoteProtocolError("garbled"), "unknown"),
    ])
    def test_transport_failures_raise_execution_error(self, transport, error, kind):
        def fail(request):
            raise error

        transport["handler"] = fail

        with pytest.raises(RequestExecutionError) as exc_info:
            asyncio.run(send_test_request(PreparedRequest("GET", "http://api.test/x"), 50))

        assert exc_info.value.kind == kind
        assert exc_info.value.duration_ms >= 0
