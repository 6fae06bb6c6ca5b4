"""Module/course completion lookups and milestone notifications."""
import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from ..completion import course_completion, is_module_complete, module_completion, reached_milestones
from ..exceptions import NotFoundError
from ..gateway import ChangeFeed, StoreGateway
from ..models import NotificationType

logger = logging.getLogger(__name__)

MILESTONE_TITLES = {
    50: "🚀 Halfway There!",
    75: "⭐ Almost Done!",
    100: "🎓 Course Complete!",
}


@dataclass
class CompletionCheck:
    student_id: str
    module_id: str
    course_id: str
    module_completion: int
    course_completion: int
    notifications_created: List[str] = field(default_factory=list)


class ProgressService:
    def __init__(self, db: Session):
        self.db = db
        self.gateway = StoreGateway(db)

    def module_completion(
        self,
        module_id: str,
        student_id: str,
        viewed: Optional[Set[str]] = None,
        submitted: Optional[Set[str]] = None,
    ) -> int:
        """Completion of one module; id sets are fetched unless passed in."""
        if viewed is None:
            viewed = self.gateway.viewed_resource_ids(student_id)
        if submitted is None:
            submitted = self.gateway.submitted_assessment_ids(student_id)
        return module_completion(
            self.gateway.resources_for_module(module_id),
            self.gateway.assessments_for_module(module_id),
            viewed,
            submitted,
        )

    def course_completion(self, course_id: str, student_id: str) -> Tuple[int, Dict[str, int]]:
        """Course completion and the per-module values it averages."""
        # Views and submissions are fetched independently, not as one snapshot
        viewed = self.gateway.viewed_resource_ids(student_id)
        submitted = self.gateway.submitted_assessment_ids(student_id)
        per_module = {
            m.id: self.module_completion(m.id, student_id, viewed, submitted)
            for m in self.gateway.modules_for_course(course_id)
        }
        return course_completion(list(per_module.values())), per_module

    def _notify_once(self, user_id: str, type: NotificationType, related_id: str, title: str, message: str) -> bool:
        # Check-then-insert is not atomic; a concurrent check may duplicate a notification
        if self.gateway.find_notification(user_id, type, related_id) is not None:
            return False
        self.gateway.add_notification(user_id, type, title, message, related_id=related_id)
        return True

    def check_completion(self, student_id: str, module_id: str, course_id: Optional[str] = None) -> CompletionCheck:
        """Recompute completion, cache course progress and create milestone notifications."""
        module = self.gateway.get_module(module_id)
        if module is None:
            raise NotFoundError("Module", module_id)
        course_id = course_id or module.course_id
        course = self.gateway.get_course(course_id)
        if course is None:
            raise NotFoundError("Course", course_id)

        course_pct, per_module = self.course_completion(course_id, student_id)
        module_pct = per_module.get(module_id)
        if module_pct is None:
            module_pct = self.module_completion(module_id, student_id)
        logger.info(f"Completion for student {student_id}: module {module_id} {module_pct}%, course {course_id} {course_pct}%")

        created = []
        if is_module_complete(module_pct) and self._notify_once(
            student_id, NotificationType.module_complete, module_id,
            "🎉 Module Complete!",
            f'Congratulations! You\'ve completed the module "{module.title or "Untitled"}"',
        ):
            created.append(NotificationType.module_complete.value)

        for milestone in reached_milestones(course_pct):
            type = NotificationType.for_milestone(milestone)
            if self._notify_once(
                student_id, type, course_id, MILESTONE_TITLES[milestone],
                f'You\'ve reached {milestone}% completion in "{course.title or "Untitled Course"}"',
            ):
                created.append(type.value)

        enrollment = self.gateway.enrollment_for(course_id, student_id)
        if enrollment is not None:
            enrollment.progress = course_pct

        self.db.commit()
        for name in created:
            logger.info(f"Created {name} notification for student {student_id}")
        return CompletionCheck(student_id, module_id, course_id, module_pct, course_pct, created)

    def handle_change(self, table: str, row: Dict[str, Any]) -> Optional[CompletionCheck]:
        """Recompute for the student behind a changed submission or resource view."""
        student_id = row.get("student_id")
        if student_id is None:
            return None

        module_id = None
        if table == "submissions":
            assessment = self.gateway.get_assessment(row.get("assessment_id"))
            module_id = assessment.module_id if assessment is not None else None
        elif table == "resource_views":
            resource = self.gateway.get_resource(row.get("resource_id"))
            module_id = resource.module_id if resource is not None else None

        if module_id is None:
            return None
        return self.check_completion(student_id, module_id)


class CompletionWatcher:
    """Re-run the completion check whenever a submission or resource view commits."""

    TABLES = ("submissions", "resource_views")

    def __init__(self, feed: ChangeFeed, session_scope: Callable[[], AbstractContextManager]):
        self.session_scope = session_scope
        self._unsubscribers = [feed.subscribe(table, self.on_change) for table in self.TABLES]

    def on_change(self, table: str, row: Dict[str, Any]) -> Optional[CompletionCheck]:
        with self.session_scope() as db:
            return ProgressService(db).handle_change(table, row)

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
