"""Translate domain errors into HTTP errors."""
from fastapi import HTTPException, status

from ..exceptions import (
    DuplicateSubmission, EmptySelection, FileRequired, IncompleteAnswers, InvalidGrade,
    LMSError, MissingDeadline, NotCourseFacilitator, NotFoundError, UploadTooLarge,
)

_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateSubmission: status.HTTP_409_CONFLICT,
    IncompleteAnswers: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidGrade: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FileRequired: status.HTTP_400_BAD_REQUEST,
    UploadTooLarge: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    MissingDeadline: status.HTTP_400_BAD_REQUEST,
    EmptySelection: status.HTTP_400_BAD_REQUEST,
    NotCourseFacilitator: status.HTTP_403_FORBIDDEN,
}


def to_http(error: LMSError) -> HTTPException:
    status_code = _STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    if isinstance(error, IncompleteAnswers):
        detail = {"message": error.message, "question_ids": error.question_ids}
    else:
        detail = str(error)
    return HTTPException(status_code=status_code, detail=detail)
