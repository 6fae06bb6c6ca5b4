"""Completion endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth import CurrentUser, get_current_user
from ..database import get_db
from ..exceptions import LMSError, NotFoundError
from ..schemas import CompletionCheckRequest, CompletionCheckResponse, ModuleCompletionResponse
from ..services import ProgressService
from .errors import to_http

router = APIRouter(prefix="/progress", tags=["Progress"])


def get_progress_service(db: Session = Depends(get_db)) -> ProgressService:
    return ProgressService(db)


def _target_student(current_user: CurrentUser, student_id: Optional[str]) -> str:
    # Students only see their own progress
    if student_id is None or student_id == current_user.id:
        return current_user.id
    if not current_user.is_facilitator:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Facilitator access required")
    return student_id


@router.get("/modules/{module_id}", response_model=ModuleCompletionResponse)
async def get_module_completion(
    module_id: str,
    student_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    student_id = _target_student(current_user, student_id)
    if service.gateway.get_module(module_id) is None:
        raise to_http(NotFoundError("Module", module_id))
    return ModuleCompletionResponse(
        module_id=module_id,
        student_id=student_id,
        completion=service.module_completion(module_id, student_id),
    )


@router.get("/courses/{course_id}")
async def get_course_completion(
    course_id: str,
    student_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    student_id = _target_student(current_user, student_id)
    if service.gateway.get_course(course_id) is None:
        raise to_http(NotFoundError("Course", course_id))
    completion, per_module = service.course_completion(course_id, student_id)
    return {"course_id": course_id, "student_id": student_id, "completion": completion, "modules": per_module}


@router.post("/check", response_model=CompletionCheckResponse)
async def check_completion(
    payload: CompletionCheckRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    """Recompute completion and create any milestone notifications now due."""
    student_id = _target_student(current_user, payload.student_id)
    try:
        result = service.check_completion(student_id, payload.module_id, payload.course_id)
    except LMSError as e:
        raise to_http(e)
    return CompletionCheckResponse(
        module_completion=result.module_completion,
        course_completion=result.course_completion,
        notifications_created=result.notifications_created,
    )
