"""
Store gateway and change feed.

The gateway is the only place that queries the relational store; services
hand its results to the pure scoring/completion/analytics functions. The
change feed replaces realtime table subscriptions: it snapshots rows written
in a session and hands them to subscribers once the session commits.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from .models import (
    Assessment, CalendarEvent, Course, Enrollment, ForumPost, ForumReply,
    Module, Notification, NotificationType, Profile, Resource, ResourceView, Submission,
)

logger = logging.getLogger(__name__)


class StoreGateway:
    """Fetch and write helpers over one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # Single rows

    def get_course(self, course_id: str) -> Optional[Course]:
        return self.db.get(Course, course_id)

    def get_module(self, module_id: str) -> Optional[Module]:
        return self.db.get(Module, module_id)

    def get_assessment(self, assessment_id: str) -> Optional[Assessment]:
        return self.db.get(Assessment, assessment_id)

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        return self.db.get(Resource, resource_id)

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        return self.db.get(Submission, submission_id)

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        return self.db.get(Profile, profile_id)

    def submission_for(self, assessment_id: str, student_id: str) -> Optional[Submission]:
        return self.db.query(Submission).filter(
            Submission.assessment_id == assessment_id,
            Submission.student_id == student_id,
        ).first()

    def course_id_for_assessment(self, assessment: Assessment) -> Optional[str]:
        module = self.get_module(assessment.module_id)
        return module.course_id if module is not None else None

    def enrollment_for(self, course_id: str, student_id: str) -> Optional[Enrollment]:
        return self.db.query(Enrollment).filter(
            Enrollment.course_id == course_id,
            Enrollment.student_id == student_id,
        ).first()

    # Collections

    def modules_for_course(self, course_id: str) -> List[Module]:
        return self.modules_for_courses([course_id])

    def modules_for_courses(self, course_ids: Iterable[str]) -> List[Module]:
        course_ids = list(course_ids)
        if not course_ids:
            return []
        return self.db.query(Module).filter(Module.course_id.in_(course_ids)).order_by(
            Module.course_id, Module.order_index
        ).all()

    def resources_for_module(self, module_id: str) -> List[Resource]:
        return self.db.query(Resource).filter(Resource.module_id == module_id).all()

    def assessments_for_module(self, module_id: str) -> List[Assessment]:
        return self.assessments_for_modules([module_id])

    def assessments_for_modules(self, module_ids: Iterable[str]) -> List[Assessment]:
        module_ids = list(module_ids)
        if not module_ids:
            return []
        return self.db.query(Assessment).filter(Assessment.module_id.in_(module_ids)).all()

    def courses_for_facilitator(self, facilitator_id: str) -> List[Course]:
        return self.db.query(Course).filter(Course.facilitator_id == facilitator_id).all()

    def courses_for_student(self, student_id: str) -> List[Course]:
        return self.db.query(Course).join(Enrollment, Enrollment.course_id == Course.id).filter(
            Enrollment.student_id == student_id
        ).all()

    def all_courses(self) -> List[Course]:
        return self.db.query(Course).all()

    def enrollments_for_courses(self, course_ids: Iterable[str]) -> List[Enrollment]:
        course_ids = list(course_ids)
        if not course_ids:
            return []
        return self.db.query(Enrollment).filter(Enrollment.course_id.in_(course_ids)).all()

    def submissions_for_assessments(self, assessment_ids: Iterable[str]) -> List[Submission]:
        assessment_ids = list(assessment_ids)
        if not assessment_ids:
            return []
        return self.db.query(Submission).filter(Submission.assessment_id.in_(assessment_ids)).all()

    def submissions_for_student(self, student_id: str) -> List[Submission]:
        return self.db.query(Submission).filter(Submission.student_id == student_id).all()

    def graded_submissions(self, assessment_id: str, student_ids: Iterable[str]) -> List[Submission]:
        return self.db.query(Submission).filter(
            Submission.assessment_id == assessment_id,
            Submission.student_id.in_(list(student_ids)),
            Submission.grade.isnot(None),
        ).all()

    def forum_posts_for_courses(self, course_ids: Iterable[str]) -> List[ForumPost]:
        course_ids = list(course_ids)
        if not course_ids:
            return []
        return self.db.query(ForumPost).filter(ForumPost.course_id.in_(course_ids)).all()

    def forum_replies_for_posts(self, post_ids: Iterable[str]) -> List[ForumReply]:
        post_ids = list(post_ids)
        if not post_ids:
            return []
        return self.db.query(ForumReply).filter(ForumReply.post_id.in_(post_ids)).all()

    def calendar_events_for_courses(self, course_ids: Iterable[str]) -> List[CalendarEvent]:
        course_ids = list(course_ids)
        if not course_ids:
            return []
        return self.db.query(CalendarEvent).filter(CalendarEvent.course_id.in_(course_ids)).all()

    # Id sets consumed by the completion aggregator

    def viewed_resource_ids(self, student_id: str) -> Set[str]:
        rows = self.db.query(ResourceView.resource_id).filter(ResourceView.student_id == student_id).all()
        return {r[0] for r in rows}

    def submitted_assessment_ids(self, student_id: str) -> Set[str]:
        rows = self.db.query(Submission.assessment_id).filter(Submission.student_id == student_id).all()
        return {r[0] for r in rows}

    # Writes

    def record_resource_view(self, resource_id: str, student_id: str) -> ResourceView:
        """Upsert the (resource, student) view row, refreshing viewed_at."""
        view = self.db.query(ResourceView).filter(
            ResourceView.resource_id == resource_id,
            ResourceView.student_id == student_id,
        ).first()
        if view is None:
            view = ResourceView(resource_id=resource_id, student_id=student_id)
            self.db.add(view)
        view.viewed_at = datetime.now(timezone.utc)
        return view

    def find_notification(self, user_id: str, type: NotificationType, related_id: Optional[str]) -> Optional[Notification]:
        return self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.type == type,
            Notification.related_id == related_id,
        ).first()

    def add_notification(self, user_id: str, type: NotificationType, title: str, message: str,
                         related_id: Optional[str] = None) -> Notification:
        notification = Notification(
            user_id=user_id, type=type, title=title, message=message, related_id=related_id, is_read=False
        )
        self.db.add(notification)
        return notification


Callback = Callable[[str, Dict[str, Any]], None]

_PENDING_KEY = "lms_change_feed_pending"


def _snapshot(obj: Any) -> Dict[str, Any]:
    # Only loaded column values; expired server defaults would need a SELECT
    state = inspect(obj)
    loaded = state.dict
    return {attr.key: loaded[attr.key] for attr in state.mapper.column_attrs if attr.key in loaded}


class ChangeFeed:
    """Dispatch committed inserts/updates to per-table subscribers.

    Rows are snapshotted as plain dicts at flush time, so callbacks never
    touch the committing session. Rolled back writes are discarded.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callback]] = defaultdict(list)

    def subscribe(self, table: str, callback: Callback) -> Callable[[], None]:
        self._subscribers[table].append(callback)

        def unsubscribe():
            if callback in self._subscribers[table]:
                self._subscribers[table].remove(callback)
        return unsubscribe

    def attach(self, target) -> None:
        """Listen on a Session, sessionmaker or Session subclass."""
        event.listen(target, "after_flush", self._collect)
        event.listen(target, "after_commit", self._dispatch)
        event.listen(target, "after_rollback", self._discard)

    def detach(self, target) -> None:
        event.remove(target, "after_flush", self._collect)
        event.remove(target, "after_commit", self._dispatch)
        event.remove(target, "after_rollback", self._discard)

    def _collect(self, session, flush_context):
        pending = session.info.setdefault(_PENDING_KEY, [])
        for obj in list(session.new) + list(session.dirty):
            table = getattr(obj, "__tablename__", None)
            if table in self._subscribers:
                pending.append((table, _snapshot(obj)))

    def _discard(self, session):
        session.info.pop(_PENDING_KEY, None)

    def _dispatch(self, session):
        pending = session.info.pop(_PENDING_KEY, [])
        for table, row in pending:
            for callback in list(self._subscribers.get(table, [])):
                try:
                    callback(table, row)
                except Exception as e:
                    # A failing subscriber must not break the writer's commit
                    logger.error(f"Change feed subscriber failed for {table}: {e}", exc_info=True)
