"""
Assertion evaluation against captured HTTP responses.

Every evaluation produces an outcome; a malformed assertion or an
unexpected response shape fails the assertion instead of raising.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from ..schemas.test_run import CapturedResponse

logger = logging.getLogger(__name__)


@dataclass
class AssertionOutcome:
    """Result of evaluating one assertion."""
    passed: bool
    actual: Any = None
    message: str | None = None


def get_json_path_value(body: Any, path: str | None) -> Any:
    """
    Walk a dotted path through a decoded JSON value.

    Dict keys are looked up by name and list items by non-negative
    integer index. Anything that cannot be walked yields None.

    Example:
        >>> get_json_path_value({"data": [{"id": 7}]}, "data.0.id")
        7
    """
    if not path:
        return body

    current = body
    for key in path.split("."):
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list):
            if not key.isdecimal() or int(key) >= len(current):
                return None
            current = current[int(key)]
        else:
            return None
    return current


def json_equal(actual: Any, expected: Any) -> bool:
    """Compare decoded JSON values without treating booleans as numbers."""
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    if isinstance(actual, list) and isinstance(expected, list):
        return len(actual) == len(expected) and all(
            json_equal(a, e) for a, e in zip(actual, expected)
        )
    if isinstance(actual, dict) and isinstance(expected, dict):
        return actual.keys() == expected.keys() and all(
            json_equal(actual[key], expected[key]) for key in actual
        )
    return actual == expected


def _body_as_text(body: Any) -> str:
    if isinstance(body, str):
        return body
    return json.dumps(body)


def _lookup_header(headers: dict[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def _check_status(assertion, response: CapturedResponse, duration_ms: int) -> AssertionOutcome:
    actual = response.status_code
    expected = assertion.expected
    passed = actual == expected
    if passed:
        message = f"Status code {actual} matches expected {expected}"
    else:
        message = f"Status code {actual} does not match expected {expected}"
    return AssertionOutcome(passed=passed, actual=actual, message=message)


def _check_response_time(assertion, response: CapturedResponse, duration_ms: int) -> AssertionOutcome:
    limit = assertion.expected
    passed = duration_ms <= limit
    if passed:
        message = f"Response time {duration_ms}ms is within limit {limit}ms"
    else:
        message = f"Response time {duration_ms}ms exceeds limit {limit}ms"
    return AssertionOutcome(passed=passed, actual=duration_ms, message=message)


def _check_json_path(assertion, response: CapturedResponse, duration_ms: int) -> AssertionOutcome:
    if not assertion.json_path:
        return AssertionOutcome(passed=False, message="JSON path is required for json_path assertions")

    actual = get_json_path_value(response.body, assertion.json_path)
    passed = json_equal(actual, assertion.expected)
    if passed:
        message = f"JSON path {assertion.json_path} value matches expected"
    else:
        message = (
            f"JSON path {assertion.json_path} value {actual!r} "
            f"does not match expected {assertion.expected!r}"
        )
    return AssertionOutcome(passed=passed, actual=actual, message=message)


def _check_header(assertion, response: CapturedResponse, duration_ms: int) -> AssertionOutcome:
    if not assertion.header_name:
        return AssertionOutcome(passed=False, message="Header name is required for header assertions")

    actual = _lookup_header(response.headers, assertion.header_name)
    passed = actual is not None and actual == str(assertion.expected)
    if passed:
        message = f"Header {assertion.header_name} matches expected"
    else:
        message = (
            f"Header {assertion.header_name} value {actual!r} "
            f"does not match expected {assertion.expected!r}"
        )
    return AssertionOutcome(passed=passed, actual=actual, message=message)


def _check_body_contains(assertion, response: CapturedResponse, duration_ms: int) -> AssertionOutcome:
    body_text = _body_as_text(response.body)
    needle = assertion.expected if isinstance(assertion.expected, str) else json.dumps(assertion.expected)
    passed = needle in body_text
    if passed:
        message = "Response body contains expected text"
    else:
        message = f"Response body does not contain expected text: {needle}"
    return AssertionOutcome(passed=passed, actual=body_text, message=message)


_CHECKS = {
    "status": _check_status,
    "response_time": _check_response_time,
    "json_path": _check_json_path,
    "header": _check_header,
    "body_contains": _check_body_contains,
}


def evaluate_assertion(assertion, response: CapturedResponse, duration_ms: int) -> AssertionOutcome:
    """
    Evaluate one assertion against a captured response.

    Args:
        assertion: Object with ``type``, ``expected``, ``json_path`` and
            ``header_name`` attributes (an ORM Assertion or a schema)
        response: The captured response
        duration_ms: Measured request duration

    Returns:
        The outcome; never raises
    """
    check = _CHECKS.get(assertion.type)
    if check is None:
        return AssertionOutcome(passed=False, message=f"Unknown assertion type: {assertion.type}")

    try:
        return check(assertion, response, duration_ms)
    except Exception as e:
        logger.warning("Assertion %s could not be evaluated: %s", getattr(assertion, "id", None), e)
        return AssertionOutcome(passed=False, message=f"Assertion error: {e}")
