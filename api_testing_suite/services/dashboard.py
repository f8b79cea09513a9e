"""
Dashboard metrics computed from recorded runs.
"""

from collections import defaultdict
from datetime import datetime, timedelta

from sqlalchemy.orm import Session, selectinload

from ..database import utcnow
from ..models.test_run import TestResult, TestRun
from ..models.test_suite import Test, TestSuite
from ..schemas.dashboard import DailyStats, DashboardMetrics, RecentTestResult

RECENT_RUN_WINDOW = 10
RECENT_RESULT_COUNT = 5
TREND_DAYS = 7


def _daily_stats(db: Session, now: datetime) -> list[DailyStats]:
    first_day = (now - timedelta(days=TREND_DAYS - 1)).date()
    since = datetime.combine(first_day, datetime.min.time())

    runs = (
        db.query(TestRun)
        .filter(TestRun.started_at >= since)
        .order_by(TestRun.started_at.asc())
        .all()
    )

    totals: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    for run in runs:
        day = run.started_at.date().isoformat()
        summary = run.summary or {}
        totals[day][0] += summary.get("total", 0)
        totals[day][1] += summary.get("passed", 0)

    stats = []
    for offset in range(TREND_DAYS):
        day = first_day + timedelta(days=offset)
        tests, success = totals.get(day.isoformat(), (0, 0))
        stats.append(DailyStats(
            date=day.isoformat(),
            name=day.strftime("%a"),
            tests=tests,
            success=success,
        ))
    return stats


def compute_metrics(db: Session, now: datetime | None = None) -> DashboardMetrics:
    """
    Aggregate counts, success rate, latency and recent activity.

    Success rate and average response time cover the results of the
    most recent runs only.
    """
    now = now or utcnow()

    recent_runs = (
        db.query(TestRun)
        .options(selectinload(TestRun.results))
        .order_by(TestRun.started_at.desc(), TestRun.id.desc())
        .limit(RECENT_RUN_WINDOW)
        .all()
    )
    recent_results = [result for run in recent_runs for result in run.results]
    if recent_results:
        passed = sum(1 for r in recent_results if r.status == "passed")
        success_rate = round(passed / len(recent_results) * 100, 1)
        avg_response_time = round(sum(r.duration_ms for r in recent_results) / len(recent_results))
    else:
        success_rate = 0.0
        avg_response_time = 0

    latest_results = (
        db.query(TestResult, Test.name, TestSuite.name)
        .join(TestRun, TestResult.test_run_id == TestRun.id)
        .join(TestSuite, TestRun.test_suite_id == TestSuite.id)
        .outerjoin(Test, TestResult.test_id == Test.id)
        .order_by(TestResult.created_at.desc(), TestResult.id.desc())
        .limit(RECENT_RESULT_COUNT)
        .all()
    )

    return DashboardMetrics(
        total_test_suites=db.query(TestSuite).count(),
        total_tests=db.query(Test).count(),
        total_test_runs=db.query(TestRun).count(),
        success_rate=success_rate,
        avg_response_time_ms=avg_response_time,
        performance_data=_daily_stats(db, now),
        recent_tests=[
            RecentTestResult(
                id=result.id,
                name=test_name or "(deleted test)",
                suite=suite_name,
                status=result.status,
                duration_ms=result.duration_ms,
                timestamp=result.created_at,
            )
            for result, test_name, suite_name in latest_results
        ],
    )
