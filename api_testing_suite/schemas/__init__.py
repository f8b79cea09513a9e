"""
Pydantic schemas package.

Exports all schemas for API request/response validation.
"""

from .test_suite import (
    HttpMethod,
    AssertionType,
    AssertionCreate,
    AssertionResponse,
    TestCreate,
    TestUpdate,
    TestResponse,
    TestSuiteCreate,
    TestSuiteUpdate,
    TestSuiteResponse,
    TestSuiteWithTests,
    RunOptions,
)

from .test_run import (
    RunSummary,
    CapturedResponse,
    AssertionResultResponse,
    TestResultResponse,
    TestRunResponse,
    TestRunWithResults,
    TestRunListResponse,
    AssertionReportResponse,
    TestOutcomeResponse,
    RunReportResponse,
)

from .environment import (
    VariableCreate,
    VariableUpdate,
    VariableResponse,
    EnvironmentCreate,
    EnvironmentUpdate,
    EnvironmentResponse,
    EnvironmentWithVariables,
)

from .mock_endpoint import (
    MockEndpointCreate,
    MockEndpointUpdate,
    MockEndpointResponse,
    MockServerStatus,
)

from .content import (
    SchemaField,
    SchemaCreate,
    SchemaUpdate,
    ContentSchema,
    ContentCreate,
    ContentUpdate,
    ContentItem,
)

from .dashboard import DailyStats, RecentTestResult, DashboardMetrics

__all__ = [
    # Test suite schemas
    "HttpMethod",
    "AssertionType",
    "AssertionCreate",
    "AssertionResponse",
    "TestCreate",
    "TestUpdate",
    "TestResponse",
    "TestSuiteCreate",
    "TestSuiteUpdate",
    "TestSuiteResponse",
    "TestSuiteWithTests",
    "RunOptions",
    # Run schemas
    "RunSummary",
    "CapturedResponse",
    "AssertionResultResponse",
    "TestResultResponse",
    "TestRunResponse",
    "TestRunWithResults",
    "TestRunListResponse",
    "AssertionReportResponse",
    "TestOutcomeResponse",
    "RunReportResponse",
    # Environment schemas
    "VariableCreate",
    "VariableUpdate",
    "VariableResponse",
    "EnvironmentCreate",
    "EnvironmentUpdate",
    "EnvironmentResponse",
    "EnvironmentWithVariables",
    # Mock endpoint schemas
    "MockEndpointCreate",
    "MockEndpointUpdate",
    "MockEndpointResponse",
    "MockServerStatus",
    # Content schemas
    "SchemaField",
    "SchemaCreate",
    "SchemaUpdate",
    "ContentSchema",
    "ContentCreate",
    "ContentUpdate",
    "ContentItem",
    # Dashboard schemas
    "DailyStats",
    "RecentTestResult",
    "DashboardMetrics",
]
