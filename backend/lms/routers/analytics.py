"""Facilitator dashboards and student gradebook."""
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import CurrentUser, get_current_user, require_facilitator
from ..database import get_db
from ..services import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


@router.get("/dashboard")
async def get_dashboard(
    course_id: Optional[str] = None,
    today: Optional[date] = None,
    current_user: CurrentUser = Depends(require_facilitator),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Dashboard for one course, or all of the facilitator's courses."""
    return service.dashboard(current_user.id, course_id=course_id, today=today)


@router.get("/students")
async def get_student_overview(
    current_user: CurrentUser = Depends(require_facilitator),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.student_overview(current_user.id)


@router.get("/alerts")
async def get_progress_alerts(
    current_user: CurrentUser = Depends(require_facilitator),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Low progress, missed deadline and low grade alerts for the caller's courses."""
    grouped = service.progress_alerts()
    return [asdict(a) for a in grouped.get(current_user.id, [])]


@router.get("/gradebook/{course_id}")
async def get_gradebook(
    course_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.gradebook(current_user.id, course_id)
