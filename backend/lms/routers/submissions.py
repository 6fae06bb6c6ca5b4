"""Submission endpoints: submit, grade, record resource views."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import CurrentUser, get_current_user, require_facilitator
from ..database import get_db
from ..exceptions import LMSError
from ..schemas import GradeEntry, SubmissionCreate, SubmissionResponse
from ..services import SubmissionService
from .errors import to_http

router = APIRouter(tags=["Submissions"])


def get_submission_service(db: Session = Depends(get_db)) -> SubmissionService:
    """Dependency to get an instance of SubmissionService."""
    return SubmissionService(db)


@router.post("/submissions", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_assessment(
    payload: SubmissionCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    """Submit answers for an assessment; multiple-choice questions are auto-graded."""
    try:
        return service.submit(
            payload.assessment_id,
            current_user.id,
            payload.answers,
            file_url=payload.file_url,
            file_size=payload.file_size,
        )
    except LMSError as e:
        raise to_http(e)


@router.post("/submissions/{submission_id}/grade", response_model=SubmissionResponse)
async def grade_submission(
    submission_id: str,
    payload: GradeEntry,
    current_user: CurrentUser = Depends(require_facilitator),
    service: SubmissionService = Depends(get_submission_service),
):
    """Enter a grade and feedback for a submission."""
    try:
        return service.grade(submission_id, payload.grade, payload.feedback, facilitator_id=current_user.id)
    except LMSError as e:
        raise to_http(e)


@router.post("/resources/{resource_id}/views", status_code=status.HTTP_204_NO_CONTENT)
async def record_resource_view(
    resource_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    """Record that the caller opened a resource."""
    try:
        service.record_view(resource_id, current_user.id)
    except LMSError as e:
        raise to_http(e)
