"""
HTTP execution service for sending test requests.

Builds the concrete request for a test (environment base URL, headers
and variable substitution), sends it with httpx, and captures the
response. Transport failures are raised as RequestExecutionError.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx
from sqlalchemy.orm import Session

from ..models.environment import Environment
from ..schemas.test_run import CapturedResponse
from .variable_substitution import substitute, substitute_dict, substitute_value

logger = logging.getLogger(__name__)


@dataclass
class PreparedRequest:
    """A fully resolved request ready to be sent."""
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class ExecutedResponse:
    """A captured response and how long it took."""
    response: CapturedResponse
    duration_ms: int


class RequestExecutionError(Exception):
    """Raised when a request could not be completed."""

    def __init__(self, message: str, kind: str, duration_ms: int = 0):
        self.message = message
        self.kind = kind
        self.duration_ms = duration_ms
        super().__init__(message)


def create_client(timeout: float) -> httpx.AsyncClient:
    """Create the HTTP client used for test requests."""
    return httpx.AsyncClient(timeout=timeout)


def resolve_environment(db: Session, environment_id: int | None) -> Environment | None:
    """
    Return the requested environment, or the active one when no id is given.

    An unknown environment id resolves to None.
    """
    if environment_id is not None:
        return db.query(Environment).filter(Environment.id == environment_id).first()
    return db.query(Environment).filter(Environment.is_active == True).first()  # noqa: E712


def build_test_request(test, environment: Environment | None) -> PreparedRequest:
    """
    Resolve a test into a concrete request.

    Args:
        test: Object with ``method``, ``url``, ``headers`` and ``body``
        environment: Environment supplying base URL, headers and variables

    Returns:
        The prepared request with any substitution warnings
    """
    variables = environment.variable_map() if environment else {}
    warnings: list[str] = []

    url, url_unmatched = substitute(test.url, variables)
    warnings.extend(f"Undefined variable in URL: {{{{{v}}}}}" for v in url_unmatched)

    headers, headers_unmatched = substitute_dict(dict(test.headers or {}), variables)
    warnings.extend(f"Undefined variable in headers: {{{{{v}}}}}" for v in headers_unmatched)

    body, body_unmatched = substitute_value(test.body, variables)
    warnings.extend(f"Undefined variable in body: {{{{{v}}}}}" for v in body_unmatched)

    if environment is not None:
        base_url, base_unmatched = substitute(environment.base_url or "", variables)
        warnings.extend(f"Undefined variable in base URL: {{{{{v}}}}}" for v in base_unmatched)
        if base_url and not url.startswith(("http://", "https://")):
            url = base_url.rstrip("/") + "/" + url.lstrip("/")

        env_headers, env_unmatched = substitute_dict(dict(environment.headers or {}), variables)
        warnings.extend(f"Undefined variable in environment headers: {{{{{v}}}}}" for v in env_unmatched)
        headers = {**headers, **env_headers}

    return PreparedRequest(
        method=test.method.upper(),
        url=url,
        headers=headers,
        body=body,
        warnings=warnings,
    )


def decode_body(response: httpx.Response) -> Any:
    """
    Decode a response body.

    JSON content types are decoded when possible; everything else (and
    undecodable JSON) is returned as text. Empty bodies become None.
    """
    if not response.content:
        return None

    content_type = response.headers.get("content-type", "")
    if "json" in content_type.lower():
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text
    return response.text


async def send_test_request(prepared: PreparedRequest, timeout_ms: int) -> ExecutedResponse:
    """
    Send a prepared request and capture the response.

    Any HTTP status is a response; only transport failures raise.

    Raises:
        RequestExecutionError: timeout, connection failure, invalid URL
            or another httpx error
    """
    timeout = timeout_ms / 1000
    headers = dict(prepared.headers)
    content: str | None = None

    if prepared.body is not None:
        if isinstance(prepared.body, str):
            content = prepared.body
        else:
            content = json.dumps(prepared.body)
            if not any(key.lower() == "content-type" for key in headers):
                headers["Content-Type"] = "application/json"

    start_time = time.perf_counter()

    def elapsed_ms() -> int:
        return int((time.perf_counter() - start_time) * 1000)

    try:
        async with create_client(timeout) as client:
            response = await client.request(
                method=prepared.method,
                url=prepared.url,
                headers=headers,
                content=content,
            )
    except httpx.TimeoutException:
        raise RequestExecutionError(
            f"Request timed out after {timeout_ms}ms", "timeout", elapsed_ms()
        )
    except httpx.ConnectError as e:
        raise RequestExecutionError(
            f"Failed to connect to server: {e}", "network_error", elapsed_ms()
        )
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
        raise RequestExecutionError(f"Invalid URL: {e}", "invalid_url", elapsed_ms())
    except httpx.HTTPError as e:
        raise RequestExecutionError(f"HTTP error occurred: {e}", "unknown", elapsed_ms())

    duration_ms = elapsed_ms()

    captured = CapturedResponse(
        status_code=response.status_code,
        headers=dict(response.headers),
        body=decode_body(response),
    )
    return ExecutedResponse(response=captured, duration_ms=duration_ms)
