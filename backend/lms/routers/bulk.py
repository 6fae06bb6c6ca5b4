"""Facilitator bulk actions. Each reports how many of its row writes succeeded."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import CurrentUser, require_facilitator
from ..database import get_db
from ..exceptions import LMSError
from ..schemas import (
    AnnouncementRequest, BatchResultResponse, DeadlineExtensionRequest, GradeAdjustmentRequest,
)
from ..services import BulkActionService
from .errors import to_http

router = APIRouter(prefix="/bulk", tags=["Bulk actions"])


def get_bulk_service(db: Session = Depends(get_db)) -> BulkActionService:
    return BulkActionService(db)


@router.post("/announcements", response_model=BatchResultResponse)
async def send_announcement(
    payload: AnnouncementRequest,
    current_user: CurrentUser = Depends(require_facilitator),
    service: BulkActionService = Depends(get_bulk_service),
):
    try:
        result = service.send_announcement(
            payload.student_ids, payload.title, payload.message, payload.course_id, facilitator_id=current_user.id
        )
    except LMSError as e:
        raise to_http(e)
    return result.to_dict()


@router.post("/deadline-extensions")
async def extend_deadline(
    payload: DeadlineExtensionRequest,
    current_user: CurrentUser = Depends(require_facilitator),
    service: BulkActionService = Depends(get_bulk_service),
):
    try:
        new_due, result = service.extend_deadline(
            payload.assessment_id, payload.days, payload.student_ids, facilitator_id=current_user.id
        )
    except LMSError as e:
        raise to_http(e)
    return {"due_date": new_due, "notifications": result.to_dict()}


@router.post("/grade-adjustments", response_model=BatchResultResponse)
async def adjust_grades(
    payload: GradeAdjustmentRequest,
    current_user: CurrentUser = Depends(require_facilitator),
    service: BulkActionService = Depends(get_bulk_service),
):
    try:
        result = service.adjust_grades(
            payload.assessment_id, payload.student_ids, payload.adjustment_type, payload.value,
            facilitator_id=current_user.id,
        )
    except LMSError as e:
        raise to_http(e)
    return result.to_dict()
