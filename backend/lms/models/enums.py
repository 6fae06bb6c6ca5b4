"""Shared enums for models and services."""
import enum


class UserRole(enum.Enum):
    student = "student"
    facilitator = "facilitator"


class AssessmentType(enum.Enum):
    assignment = "assignment"
    quiz = "quiz"
    exam = "exam"


class NotificationType(enum.Enum):
    module_complete = "module_complete"
    course_milestone_50 = "course_milestone_50"
    course_milestone_75 = "course_milestone_75"
    course_milestone_100 = "course_milestone_100"
    announcement = "announcement"
    deadline_extension = "deadline_extension"
    grade_adjustment = "grade_adjustment"
    grade_posted = "grade_posted"

    @classmethod
    def for_milestone(cls, percentage: int) -> "NotificationType":
        return cls(f"course_milestone_{percentage}")
