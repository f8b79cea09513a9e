"""
Dashboard API routes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.dashboard import DashboardMetrics
from ..services.dashboard import compute_metrics


router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/metrics", response_model=DashboardMetrics)
def get_dashboard_metrics(db: Session = Depends(get_db)):
    """
    Get totals, recent success rate, average response time, a seven-day
    trend and the latest test results.
    """
    return compute_metrics(db)
