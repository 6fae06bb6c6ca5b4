"""
Domain errors raised by the LMS services.

Services raise these; the routers translate them into HTTP responses.
Errors coming from the store itself (SQLAlchemyError) are not wrapped.
"""

from typing import Iterable, List


class LMSError(Exception):
    """Base exception for LMS domain errors."""
    pass


class NotFoundError(LMSError):
    """Raised when a referenced row does not exist."""
    def __init__(self, entity: str, entity_id: str, message: str = ""):
        self.entity = entity
        self.entity_id = entity_id
        self.message = message or f"{entity} not found: {entity_id}"
        super().__init__(self.message)


class IncompleteAnswers(LMSError):
    """Raised when one or more questions lack a recorded answer."""
    def __init__(self, question_ids: Iterable[str], message: str = ""):
        self.question_ids: List[str] = list(question_ids)
        self.message = message or (
            "Please answer all questions before submitting: "
            + ", ".join(self.question_ids)
        )
        super().__init__(self.message)


class DuplicateSubmission(LMSError):
    """Raised when a student submits the same assessment twice."""
    def __init__(self, assessment_id: str, student_id: str, message: str = ""):
        self.assessment_id = assessment_id
        self.student_id = student_id
        self.message = message or (
            f"Student {student_id} already submitted assessment {assessment_id}"
        )
        super().__init__(self.message)


class FileRequired(LMSError):
    """Raised when an assignment is submitted without an uploaded file."""
    def __init__(self, assessment_id: str, message: str = ""):
        self.assessment_id = assessment_id
        self.message = message or "Please upload your assignment file before submitting"
        super().__init__(self.message)


class UploadTooLarge(LMSError):
    """Raised when an upload exceeds the configured size limit."""
    def __init__(self, size: int, limit: int, message: str = ""):
        self.size = size
        self.limit = limit
        self.message = message or f"File size {size} exceeds maximum allowed size of {limit} bytes"
        super().__init__(self.message)


class InvalidGrade(LMSError):
    """Raised when a directly entered grade is outside [0, total_points]."""
    def __init__(self, grade: float, total_points: int, message: str = ""):
        self.grade = grade
        self.total_points = total_points
        self.message = message or f"Grade {grade} must be between 0 and {total_points}"
        super().__init__(self.message)


class MissingDeadline(LMSError):
    """Raised when extending the deadline of an assessment that has none."""
    def __init__(self, assessment_id: str, message: str = ""):
        self.assessment_id = assessment_id
        self.message = message or "Assessment has no deadline set"
        super().__init__(self.message)


class EmptySelection(LMSError):
    """Raised when a bulk action is requested for no students."""
    def __init__(self, message: str = ""):
        self.message = message or "Please select at least one student"
        super().__init__(self.message)


class NotCourseFacilitator(LMSError):
    """Raised when a facilitator acts on a course they do not teach."""
    def __init__(self, course_id: str, facilitator_id: str, message: str = ""):
        self.course_id = course_id
        self.facilitator_id = facilitator_id
        self.message = message or f"Facilitator {facilitator_id} does not teach course {course_id}"
        super().__init__(self.message)
