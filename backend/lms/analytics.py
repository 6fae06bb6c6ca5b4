"""
Dashboard analytics over already-fetched rows.

All functions are pure: they accept ORM rows or dicts and never query the
store. Ratios with a zero denominator report 0.
"""

from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .completion import round_half_up
from .config import ENGAGEMENT_WINDOW_DAYS, LOW_GRADE_THRESHOLD, LOW_PROGRESS_THRESHOLD
from .rows import as_utc, row_id, timestamp_text, value_of

# (label, lower bound inclusive, upper bound exclusive); the top bucket is closed at 100
GRADE_BUCKETS: Tuple[Tuple[str, float, float], ...] = (
    ("90-100", 90, float("inf")),
    ("80-89", 80, 90),
    ("70-79", 70, 80),
    ("60-69", 60, 70),
    ("Below 60", float("-inf"), 60),
)


@dataclass
class AnalyticsSummary:
    total_students: int = 0
    total_submissions: int = 0
    average_grade: float = 0.0
    completion_rate: int = 0
    forum_posts: int = 0
    forum_replies: int = 0
    pending_submissions: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _graded(submissions: Iterable[Any]) -> List[Any]:
    return [s for s in submissions if value_of(s, "grade") is not None]


def unique_student_ids(enrollments: Iterable[Any]) -> set:
    return {value_of(e, "student_id") for e in enrollments if value_of(e, "student_id") is not None}


def average_grade(submissions: Iterable[Any]) -> float:
    """Mean grade of graded submissions to one decimal; 0 when none are graded."""
    graded = _graded(submissions)
    if not graded:
        return 0.0
    mean = sum(value_of(s, "grade") for s in graded) / len(graded)
    return round_half_up(mean * 10) / 10


def completion_rate(total_submissions: int, assessment_count: int, total_students: int) -> int:
    expected = assessment_count * total_students
    if expected <= 0:
        return 0
    return round_half_up(100 * total_submissions / expected)


def summarize(
    enrollments: Sequence[Any],
    submissions: Sequence[Any],
    assessment_count: int,
    forum_posts: Sequence[Any] = (),
    forum_replies: Sequence[Any] = (),
) -> AnalyticsSummary:
    """Headline numbers for the facilitator dashboard."""
    total_students = len(unique_student_ids(enrollments))
    total_submissions = len(submissions)
    return AnalyticsSummary(
        total_students=total_students,
        total_submissions=total_submissions,
        average_grade=average_grade(submissions),
        completion_rate=completion_rate(total_submissions, assessment_count, total_students),
        forum_posts=len(forum_posts),
        forum_replies=len(forum_replies),
        pending_submissions=sum(1 for s in submissions if value_of(s, "grade") is None),
    )


def grade_bucket(grade: float) -> str:
    for label, low, high in GRADE_BUCKETS:
        if low <= grade < high:
            return label
    # unreachable: the buckets cover the whole real line
    raise ValueError(f"No bucket for grade {grade}")


def grade_distribution(submissions: Iterable[Any]) -> List[Dict[str, Any]]:
    """Count graded submissions per grade bucket, highest bucket first."""
    counts = {label: 0 for label, _, _ in GRADE_BUCKETS}
    for submission in _graded(submissions):
        counts[grade_bucket(value_of(submission, "grade"))] += 1
    return [{"range": label, "count": counts[label]} for label, _, _ in GRADE_BUCKETS]


def _count_on_day(rows: Iterable[Any], column: str, day: str) -> int:
    return sum(1 for r in rows if timestamp_text(value_of(r, column)).startswith(day))


def engagement_trend(
    submissions: Sequence[Any],
    forum_posts: Sequence[Any],
    forum_replies: Sequence[Any],
    today: Optional[date] = None,
    days: int = ENGAGEMENT_WINDOW_DAYS,
) -> List[Dict[str, Any]]:
    """Daily submission and discussion counts for the trailing window, oldest first.

    Days are matched on the date prefix of each ISO timestamp, not by interval.
    """
    today = today or datetime.now().date()
    trend = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        key = day.isoformat()
        trend.append({
            "date": key,
            "label": f"{day:%b} {day.day}",
            "submissions": _count_on_day(submissions, "submitted_at", key),
            "discussions": _count_on_day(forum_posts, "created_at", key)
            + _count_on_day(forum_replies, "created_at", key),
        })
    return trend


def completion_by_module(
    modules: Sequence[Any],
    assessments: Sequence[Any],
    submissions: Sequence[Any],
    total_students: int,
) -> List[Dict[str, Any]]:
    """Completed vs. pending submissions per module."""
    rows = []
    for module in modules:
        module_assessment_ids = {
            row_id(a) for a in assessments if value_of(a, "module_id") == row_id(module)
        }
        completed = sum(1 for s in submissions if value_of(s, "assessment_id") in module_assessment_ids)
        rows.append({
            "module_id": row_id(module),
            "name": (value_of(module, "title") or "Unknown")[:20],
            "completed": completed,
            "pending": max(0, len(module_assessment_ids) * total_students - completed),
        })
    return rows


def student_overview(enrollments: Sequence[Any], submissions: Sequence[Any]) -> List[Dict[str, Any]]:
    """Per-student enrollment count, average cached progress and average grade."""
    students: Dict[Any, Dict[str, Any]] = {}
    for enrollment in enrollments:
        entry = students.setdefault(value_of(enrollment, "student_id"), {
            "progress_total": 0, "enrollment_count": 0, "grades": [],
        })
        entry["progress_total"] += value_of(enrollment, "progress") or 0
        entry["enrollment_count"] += 1

    for submission in _graded(submissions):
        entry = students.get(value_of(submission, "student_id"))
        if entry is not None:
            entry["grades"].append(value_of(submission, "grade"))

    overview = []
    for student_id, entry in students.items():
        grades = entry["grades"]
        overview.append({
            "student_id": student_id,
            "enrollment_count": entry["enrollment_count"],
            "average_progress": round_half_up(entry["progress_total"] / entry["enrollment_count"]),
            "graded_submissions": len(grades),
            "average_grade": round_half_up(sum(grades) / len(grades)) if grades else 0,
        })
    return overview


def overall_grade(entries: Iterable[Tuple[Optional[float], int]]) -> Optional[int]:
    """Points-weighted percentage over graded (grade, total_points) pairs, or None."""
    graded = [(g, total) for g, total in entries if g is not None]
    if not graded:
        return None
    possible = sum(total for _, total in graded)
    if possible <= 0:
        return 0
    return round_half_up(100 * sum(g for g, _ in graded) / possible)


def letter_grade(percentage: float) -> str:
    if percentage >= 90:
        return "A"
    if percentage >= 80:
        return "B"
    if percentage >= 70:
        return "C"
    if percentage >= 60:
        return "D"
    return "F"


@dataclass
class StudentAlert:
    student_id: str
    course_id: str
    facilitator_id: Optional[str]
    alert_type: str
    details: str
    course_title: str = "Unknown Course"


def progress_alerts(
    courses: Sequence[Any],
    modules: Sequence[Any],
    enrollments: Sequence[Any],
    assessments: Sequence[Any],
    submissions: Sequence[Any],
    now: Optional[datetime] = None,
    low_progress: int = LOW_PROGRESS_THRESHOLD,
    low_grade: int = LOW_GRADE_THRESHOLD,
) -> List[StudentAlert]:
    """Flag students with low progress, missed deadlines or low grades."""
    now = as_utc(now or datetime.now().astimezone())
    course_by_id = {row_id(c): c for c in courses}
    course_of_module = {row_id(m): value_of(m, "course_id") for m in modules}
    course_of_assessment = {row_id(a): course_of_module.get(value_of(a, "module_id")) for a in assessments}

    def alert(student_id, course_id, alert_type, details):
        course = course_by_id.get(course_id)
        return StudentAlert(
            student_id=student_id,
            course_id=course_id,
            facilitator_id=value_of(course, "facilitator_id") if course is not None else None,
            alert_type=alert_type,
            details=details,
            course_title=(value_of(course, "title") if course is not None else None) or "Unknown Course",
        )

    alerts = []
    for enrollment in enrollments:
        progress = value_of(enrollment, "progress") or 0
        if progress < low_progress:
            alerts.append(alert(
                value_of(enrollment, "student_id"), value_of(enrollment, "course_id"), "low_progress",
                f"Student has only completed {progress}% of the course",
            ))

    submitted = {(value_of(s, "assessment_id"), value_of(s, "student_id")) for s in submissions}
    enrolled_by_course = defaultdict(list)
    for enrollment in enrollments:
        enrolled_by_course[value_of(enrollment, "course_id")].append(value_of(enrollment, "student_id"))

    for assessment in assessments:
        due = as_utc(value_of(assessment, "due_date"))
        if due is None or due >= now:
            continue
        course_id = course_of_assessment.get(row_id(assessment))
        for student_id in enrolled_by_course.get(course_id, []):
            if (row_id(assessment), student_id) not in submitted:
                alerts.append(alert(
                    student_id, course_id, "missed_deadline",
                    f'Missed deadline for "{value_of(assessment, "title")}" on {due.date().isoformat()}',
                ))

    titles = {row_id(a): value_of(a, "title") for a in assessments}
    for submission in _graded(submissions):
        grade = value_of(submission, "grade")
        if grade < low_grade:
            assessment_id = value_of(submission, "assessment_id")
            alerts.append(alert(
                value_of(submission, "student_id"), course_of_assessment.get(assessment_id), "low_grade",
                f'Received grade of {grade} on "{titles.get(assessment_id)}"',
            ))
    return alerts


def group_alerts_by_facilitator(alerts: Iterable[StudentAlert]) -> Dict[Optional[str], List[StudentAlert]]:
    grouped: Dict[Optional[str], List[StudentAlert]] = defaultdict(list)
    for a in alerts:
        grouped[a.facilitator_id].append(a)
    return dict(grouped)
