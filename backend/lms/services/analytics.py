"""Fetch-then-reduce helpers backing the dashboards."""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from .. import analytics
from ..agenda import AgendaItem, build_agenda
from ..completion import round_half_up
from ..gateway import StoreGateway

logger = logging.getLogger(__name__)


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db
        self.gateway = StoreGateway(db)

    def _course_ids(self, facilitator_id: str, course_id: Optional[str]) -> List[str]:
        owned = [c.id for c in self.gateway.courses_for_facilitator(facilitator_id)]
        if course_id is None:
            return owned
        return [course_id] if course_id in owned else []

    def dashboard(self, facilitator_id: str, course_id: Optional[str] = None,
                  today: Optional[date] = None) -> Dict[str, Any]:
        """Summary, grade distribution, engagement trend and per-module completion.

        ``course_id`` narrows to one course; by default every course the
        facilitator owns is included.
        """
        course_ids = self._course_ids(facilitator_id, course_id)
        enrollments = self.gateway.enrollments_for_courses(course_ids)
        modules = self.gateway.modules_for_courses(course_ids)
        assessments = self.gateway.assessments_for_modules([m.id for m in modules])
        submissions = self.gateway.submissions_for_assessments([a.id for a in assessments])
        posts = self.gateway.forum_posts_for_courses(course_ids)
        replies = self.gateway.forum_replies_for_posts([p.id for p in posts])

        summary = analytics.summarize(enrollments, submissions, len(assessments), posts, replies)
        logger.debug(f"Dashboard for {facilitator_id} over {len(course_ids)} course(s)")
        return {
            "summary": summary.to_dict(),
            "grade_distribution": analytics.grade_distribution(submissions),
            "engagement_trend": analytics.engagement_trend(submissions, posts, replies, today=today),
            "completion_by_module": analytics.completion_by_module(
                modules, assessments, submissions, summary.total_students
            ),
        }

    def student_overview(self, facilitator_id: str) -> List[Dict[str, Any]]:
        course_ids = self._course_ids(facilitator_id, None)
        enrollments = self.gateway.enrollments_for_courses(course_ids)
        modules = self.gateway.modules_for_courses(course_ids)
        assessments = self.gateway.assessments_for_modules([m.id for m in modules])
        submissions = self.gateway.submissions_for_assessments([a.id for a in assessments])
        return analytics.student_overview(enrollments, submissions)

    def gradebook(self, student_id: str, course_id: str) -> Dict[str, Any]:
        """A student's grades in one course with the points-weighted overall grade."""
        modules = self.gateway.modules_for_course(course_id)
        assessments = {a.id: a for a in self.gateway.assessments_for_modules([m.id for m in modules])}
        submissions = [s for s in self.gateway.submissions_for_student(student_id) if s.assessment_id in assessments]

        entries = []
        for s in submissions:
            assessment = assessments[s.assessment_id]
            total = assessment.points_possible
            entries.append({
                "submission_id": s.id,
                "assessment_title": assessment.title or "Unknown",
                "grade": s.grade,
                "total_points": total,
                "percentage": round_half_up(100 * s.grade / total) if s.grade is not None and total else None,
                "submitted_at": s.submitted_at,
                "feedback": s.feedback,
            })
        overall = analytics.overall_grade((e["grade"], e["total_points"]) for e in entries)
        return {
            "entries": entries,
            "overall_grade": overall,
            "letter_grade": analytics.letter_grade(overall) if overall is not None else None,
        }

    def progress_alerts(self, now: Optional[datetime] = None) -> Dict[Optional[str], List[analytics.StudentAlert]]:
        """Alerts for every facilitator's courses, grouped by facilitator."""
        courses = [c for c in self.gateway.all_courses() if c.facilitator_id is not None]
        course_ids = [c.id for c in courses]
        modules = self.gateway.modules_for_courses(course_ids)
        assessments = self.gateway.assessments_for_modules([m.id for m in modules])
        alerts = analytics.progress_alerts(
            courses,
            modules,
            self.gateway.enrollments_for_courses(course_ids),
            assessments,
            self.gateway.submissions_for_assessments([a.id for a in assessments]),
            now=now,
        )
        logger.info(f"Generated {len(alerts)} progress alert(s)")
        return analytics.group_alerts_by_facilitator(alerts)

    def agenda(self, user_id: str, since: Optional[datetime] = None, limit: Optional[int] = None) -> List[AgendaItem]:
        """Deadlines and events of every course the user teaches or attends."""
        courses = {c.id: c for c in self.gateway.courses_for_facilitator(user_id)}
        courses.update({c.id: c for c in self.gateway.courses_for_student(user_id)})
        course_ids = list(courses)
        modules = self.gateway.modules_for_courses(course_ids)
        return build_agenda(
            self.gateway.assessments_for_modules([m.id for m in modules]),
            self.gateway.calendar_events_for_courses(course_ids),
            {m.id: m.course_id for m in modules},
            since=since,
            limit=limit,
        )
