"""
Pydantic schemas for dashboard metrics.
"""

from datetime import datetime

from pydantic import BaseModel


class DailyStats(BaseModel):
    """Tests executed and passed on one day."""
    date: str
    name: str
    tests: int
    success: int


class RecentTestResult(BaseModel):
    """A recently recorded test result."""
    id: int
    name: str
    suite: str
    status: str
    duration_ms: int
    timestamp: datetime


class DashboardMetrics(BaseModel):
    """Aggregated counts, rates and recent activity."""
    total_test_suites: int
    total_tests: int
    total_test_runs: int
    success_rate: float
    avg_response_time_ms: int
    performance_data: list[DailyStats]
    recent_tests: list[RecentTestResult]
