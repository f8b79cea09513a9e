"""
Test runner service.

Executes tests sequentially, evaluates their assertions, and records a
TestRun with a TestResult per test. A failure in one test is recorded
and never stops the remaining tests of a run.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import utcnow
from ..models.environment import Environment
from ..models.test_run import AssertionResult, TestResult, TestRun
from ..models.test_suite import Test, TestSuite
from ..schemas.test_run import CapturedResponse, RunSummary
from .assertions import evaluate_assertion
from .http_executor import (
    RequestExecutionError,
    build_test_request,
    resolve_environment,
    send_test_request,
)

logger = logging.getLogger(__name__)


@dataclass
class AssertionReport:
    """Outcome of one assertion, tied to the assertion it came from."""
    assertion_id: int | None
    passed: bool
    actual: Any = None
    message: str | None = None


@dataclass
class TestOutcome:
    """Outcome of executing one test."""
    test_id: int
    status: str
    duration_ms: int
    response: CapturedResponse | None = None
    error: str | None = None
    assertions: list[AssertionReport] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class RunReport:
    """Outcome of a whole run."""
    test_run_id: int
    status: str
    summary: RunSummary
    results: list[TestOutcome]


async def execute_test(test: Test, environment: Environment | None) -> TestOutcome:
    """
    Execute one test and evaluate its assertions.

    The test passes when every assertion passes. A request that never
    completes fails the test with its error and no assertion outcomes.
    """
    prepared = build_test_request(test, environment)
    for warning in prepared.warnings:
        logger.warning("Test %s: %s", test.id, warning)

    logger.info("Test %s: %s %s", test.id, prepared.method, prepared.url)

    try:
        executed = await send_test_request(prepared, test.timeout_ms)
    except RequestExecutionError as e:
        logger.warning("Test %s failed to execute (%s): %s", test.id, e.kind, e.message)
        return TestOutcome(
            test_id=test.id,
            status="failed",
            duration_ms=e.duration_ms,
            error=e.message,
            warnings=prepared.warnings,
        )

    reports = []
    for assertion in test.assertions:
        outcome = evaluate_assertion(assertion, executed.response, executed.duration_ms)
        reports.append(AssertionReport(
            assertion_id=assertion.id,
            passed=outcome.passed,
            actual=outcome.actual,
            message=outcome.message,
        ))

    status = "passed" if all(report.passed for report in reports) else "failed"
    return TestOutcome(
        test_id=test.id,
        status=status,
        duration_ms=executed.duration_ms,
        response=executed.response,
        assertions=reports,
        warnings=prepared.warnings,
    )


def summarize(outcomes: list[TestOutcome]) -> RunSummary:
    """Count outcomes by status."""
    return RunSummary(
        total=len(outcomes),
        passed=sum(1 for o in outcomes if o.status == "passed"),
        failed=sum(1 for o in outcomes if o.status == "failed"),
        skipped=sum(1 for o in outcomes if o.status == "skipped"),
    )


def _save_result(db: Session, test_run: TestRun, outcome: TestOutcome) -> None:
    result = TestResult(
        test_run_id=test_run.id,
        test_id=outcome.test_id,
        status=outcome.status,
        duration_ms=outcome.duration_ms,
        response=outcome.response.model_dump(mode="json") if outcome.response else None,
        error=outcome.error,
    )
    result.assertion_results = [
        AssertionResult(
            assertion_id=report.assertion_id,
            passed=report.passed,
            actual=report.actual,
            message=report.message,
        )
        for report in outcome.assertions
    ]
    db.add(result)
    db.commit()


async def _run_tests(
    db: Session,
    suite_id: int,
    tests: list[Test],
    environment: Environment | None,
) -> RunReport:
    test_run = TestRun(
        test_suite_id=suite_id,
        status="running",
        summary=RunSummary(total=len(tests)).model_dump(),
    )
    db.add(test_run)
    db.commit()
    db.refresh(test_run)

    logger.info(
        "Run %s started for suite %s with %d test(s)", test_run.id, suite_id, len(tests)
    )

    run_id = test_run.id
    outcomes: list[TestOutcome] = []
    unsaved = 0
    for test in tests:
        try:
            outcome = await execute_test(test, environment)
        except Exception as e:
            logger.exception("Unexpected error executing test %s", test.id)
            outcome = TestOutcome(
                test_id=test.id,
                status="failed",
                duration_ms=0,
                error=str(e) or "Unknown error",
            )
        outcomes.append(outcome)
        try:
            _save_result(db, test_run, outcome)
        except SQLAlchemyError:
            db.rollback()
            unsaved += 1
            logger.exception("Could not record result of test %s in run %s", outcome.test_id, run_id)

    summary = summarize(outcomes)
    test_run.status = "failed" if summary.failed > 0 or unsaved else "completed"
    test_run.finished_at = utcnow()
    test_run.summary = summary.model_dump()
    db.commit()

    logger.info(
        "Run %s %s: %d passed, %d failed",
        test_run.id, test_run.status, summary.passed, summary.failed,
    )

    return RunReport(
        test_run_id=test_run.id,
        status=test_run.status,
        summary=summary,
        results=outcomes,
    )


async def run_suite(db: Session, suite: TestSuite, environment_id: int | None = None) -> RunReport:
    """
    Run every test of a suite in order and record the run.

    Args:
        db: Database session
        suite: Suite to run
        environment_id: Environment to use; the active one when None
    """
    environment = resolve_environment(db, environment_id)
    return await _run_tests(db, suite.id, list(suite.tests), environment)


async def run_single_test(db: Session, test: Test, environment_id: int | None = None) -> RunReport:
    """Run one test as a single-test run of its suite."""
    environment = resolve_environment(db, environment_id)
    return await _run_tests(db, test.test_suite_id, [test], environment)
