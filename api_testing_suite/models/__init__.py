"""
Models package for the API Testing Suite.

Exports all SQLAlchemy models for database operations.
"""

from .test_suite import TestSuite, Test, Assertion
from .test_run import TestRun, TestResult, AssertionResult
from .environment import Environment, Variable
from .mock_endpoint import MockEndpoint

__all__ = [
    "TestSuite",
    "Test",
    "Assertion",
    "TestRun",
    "TestResult",
    "AssertionResult",
    "Environment",
    "Variable",
    "MockEndpoint",
]
