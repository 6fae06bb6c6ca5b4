"""Submission intake, direct grading and resource view tracking."""
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import MAX_UPLOAD_BYTES
from ..exceptions import DuplicateSubmission, FileRequired, NotFoundError, UploadTooLarge
from ..gateway import StoreGateway
from ..grading import validate_direct_grade
from ..models import NotificationType, ResourceView, Submission
from ..scoring import score, validate_answers
from .access import require_course_facilitator

logger = logging.getLogger(__name__)


def check_upload_size(size: Optional[int], limit: int = MAX_UPLOAD_BYTES) -> None:
    if size is not None and size > limit:
        raise UploadTooLarge(size, limit)


class SubmissionService:
    def __init__(self, db: Session):
        self.db = db
        self.gateway = StoreGateway(db)

    def submit(
        self,
        assessment_id: str,
        student_id: str,
        answers: Mapping[str, Any],
        file_url: Optional[str] = None,
        file_size: Optional[int] = None,
    ) -> Submission:
        """Validate and auto-grade a student's answers, then store the submission.

        Raises:
            NotFoundError: unknown assessment.
            IncompleteAnswers: a question has no answer.
            FileRequired: an assignment was submitted without a file.
            UploadTooLarge: the uploaded file exceeds the size limit.
            DuplicateSubmission: the student already submitted this assessment.
        """
        assessment = self.gateway.get_assessment(assessment_id)
        if assessment is None:
            raise NotFoundError("Assessment", assessment_id)

        questions = assessment.parsed_questions()
        validate_answers(questions, answers)
        if assessment.requires_file and not file_url:
            raise FileRequired(assessment_id)
        check_upload_size(file_size)

        if self.gateway.submission_for(assessment_id, student_id) is not None:
            raise DuplicateSubmission(assessment_id, student_id)

        submission = Submission(
            assessment_id=assessment_id,
            student_id=student_id,
            answers=dict(answers),
            auto_grade=score(questions, answers),
            file_url=file_url,
        )
        self.db.add(submission)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent submit for the same pair
            self.db.rollback()
            raise DuplicateSubmission(assessment_id, student_id)
        self.db.refresh(submission)

        logger.info(
            f"Submission {submission.id} stored for assessment {assessment_id} "
            f"(auto_grade={submission.auto_grade}/{assessment.points_possible})"
        )
        return submission

    def grade(self, submission_id: str, grade: float, feedback: Optional[str] = None,
              facilitator_id: Optional[str] = None) -> Submission:
        """Facilitator grade entry; the grade must be a whole number in [0, total_points].

        A direct grade replaces any earlier bulk adjustment, so ``adjusted_at``
        is cleared and the submission reads as graded again.
        """
        submission = self.gateway.get_submission(submission_id)
        if submission is None:
            raise NotFoundError("Submission", submission_id)
        require_course_facilitator(
            self.gateway, self.gateway.course_id_for_assessment(submission.assessment), facilitator_id
        )

        submission.grade = validate_direct_grade(grade, submission.assessment.points_possible)
        submission.feedback = feedback
        submission.graded_at = datetime.now(timezone.utc)
        submission.adjusted_at = None
        self.gateway.add_notification(
            submission.student_id,
            NotificationType.grade_posted,
            "Submission Graded",
            f'Your submission for "{submission.assessment.title}" has been graded',
            related_id=submission.assessment_id,
        )
        self.db.commit()
        self.db.refresh(submission)
        logger.info(f"Submission {submission_id} graded: {submission.grade}")
        return submission

    def record_view(self, resource_id: str, student_id: str) -> ResourceView:
        if self.gateway.get_resource(resource_id) is None:
            raise NotFoundError("Resource", resource_id)
        view = self.gateway.record_resource_view(resource_id, student_id)
        try:
            self.db.commit()
        except IntegrityError:
            # Concurrent first view inserted the row; refresh it instead
            self.db.rollback()
            view = self.gateway.record_resource_view(resource_id, student_id)
            self.db.commit()
        self.db.refresh(view)
        return view
