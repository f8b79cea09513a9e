# Services package

from .variable_substitution import extract_variables, substitute, substitute_dict, substitute_value
from .assertions import evaluate_assertion, get_json_path_value
from .http_executor import build_test_request, resolve_environment, send_test_request
from .runner import execute_test, run_suite, run_single_test
from .mock_matcher import compile_path, match_path, find_matching_endpoint
from .content_store import ContentManager, SchemaManager, validate_content, validate_schema
from .dashboard import compute_metrics

__all__ = [
    "extract_variables",
    "substitute",
    "substitute_dict",
    "substitute_value",
    "evaluate_assertion",
    "get_json_path_value",
    "build_test_request",
    "resolve_environment",
    "send_test_request",
    "execute_test",
    "run_suite",
    "run_single_test",
    "compile_path",
    "match_path",
    "find_matching_endpoint",
    "ContentManager",
    "SchemaManager",
    "validate_content",
    "validate_schema",
    "compute_metrics",
]
