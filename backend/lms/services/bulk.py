"""Facilitator bulk actions: announcements, deadline extensions, grade adjustments.

Each row is written and committed on its own. A failed row is rolled back
and reported in the BatchResult; rows that already succeeded stay written.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import EmptySelection, MissingDeadline, NotFoundError
from ..gateway import StoreGateway
from ..grading import AdjustmentType, BatchResult, adjusted_grade, run_batch
from ..models import NotificationType, Submission
from ..rows import as_utc
from .access import require_course_facilitator

logger = logging.getLogger(__name__)


class BulkActionService:
    def __init__(self, db: Session):
        self.db = db
        self.gateway = StoreGateway(db)

    def _committed(self, write: Callable) -> Callable:
        def action(item):
            try:
                write(item)
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                raise
        return action

    def _log_result(self, name: str, result: BatchResult) -> None:
        if result.failed:
            logger.warning(f"{name}: {result.summary}; failed items: {[i.item_id for i in result.failures]}")
        else:
            logger.info(f"{name}: {result.summary}")

    def _notify_each(self, student_ids: Sequence[str], type: NotificationType, title: str, message: str,
                     related_id: Optional[str]) -> BatchResult:
        return run_batch(
            student_ids,
            key=lambda sid: sid,
            action=self._committed(
                lambda sid: self.gateway.add_notification(sid, type, title, message, related_id=related_id)
            ),
            catch=(SQLAlchemyError,),
        )

    @staticmethod
    def _require_selection(student_ids: Sequence[str]) -> List[str]:
        selected = list(dict.fromkeys(student_ids))
        if not selected:
            raise EmptySelection()
        return selected

    def send_announcement(self, student_ids: Sequence[str], title: str, message: str,
                          course_id: Optional[str] = None, facilitator_id: Optional[str] = None) -> BatchResult:
        selected = self._require_selection(student_ids)
        if course_id is not None:
            require_course_facilitator(self.gateway, course_id, facilitator_id)
        result = self._notify_each(selected, NotificationType.announcement, title, message, course_id)
        self._log_result("Announcement", result)
        return result

    def extend_deadline(self, assessment_id: str, days: int, student_ids: Sequence[str],
                        facilitator_id: Optional[str] = None) -> Tuple[datetime, BatchResult]:
        """Move the due date by ``days`` and notify the selected students."""
        selected = self._require_selection(student_ids)
        assessment = self.gateway.get_assessment(assessment_id)
        if assessment is None:
            raise NotFoundError("Assessment", assessment_id)
        require_course_facilitator(self.gateway, self.gateway.course_id_for_assessment(assessment), facilitator_id)
        if assessment.due_date is None:
            raise MissingDeadline(assessment_id)

        new_due = as_utc(assessment.due_date) + timedelta(days=days)
        assessment.due_date = new_due
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        result = self._notify_each(
            selected,
            NotificationType.deadline_extension,
            "Deadline Extended",
            f"The deadline has been extended by {days} day(s) to {new_due.date().isoformat()}",
            assessment_id,
        )
        self._log_result("Deadline extension", result)
        return new_due, result

    def adjust_grades(self, assessment_id: str, student_ids: Sequence[str], adjustment_type: str,
                      value: float, facilitator_id: Optional[str] = None) -> BatchResult:
        """Add to, or scale by a percentage, every graded submission of the selection."""
        selected = self._require_selection(student_ids)
        adjustment = AdjustmentType(adjustment_type)
        assessment = self.gateway.get_assessment(assessment_id)
        if assessment is None:
            raise NotFoundError("Assessment", assessment_id)
        require_course_facilitator(self.gateway, self.gateway.course_id_for_assessment(assessment), facilitator_id)

        submissions = self.gateway.graded_submissions(assessment_id, selected)
        if not submissions:
            raise NotFoundError(
                "Submission", assessment_id, "No graded submissions found for selected students"
            )

        total_points = assessment.points_possible
        # Capture ids up front; a rollback expires the loaded rows
        targets = [(s.id, s.student_id, s.grade) for s in submissions]

        def apply(target):
            submission_id, _, grade = target
            submission = self.db.get(Submission, submission_id)
            submission.grade = adjusted_grade(grade, adjustment, value, total_points)
            submission.adjusted_at = datetime.now(timezone.utc)

        result = run_batch(targets, key=lambda t: t[0], action=self._committed(apply), catch=(SQLAlchemyError,))
        self._log_result("Grade adjustment", result)

        adjusted_students = [t[1] for t, item in zip(targets, result.items) if item.success]
        if adjusted_students:
            self._notify_each(
                adjusted_students,
                NotificationType.grade_adjustment,
                "Grade Adjusted",
                "Your grade has been adjusted for the selected assessment",
                assessment_id,
            )
        return result
