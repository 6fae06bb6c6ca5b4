"""SQLAlchemy models for the LMS backend."""

from .enums import UserRole, AssessmentType, NotificationType
from .user import Profile
from .course import Course, Module, Enrollment
from .content import Resource, ResourceView, CalendarEvent
from .assessment import Assessment, Submission
from .forum import ForumPost, ForumReply
from .notification import Notification

__all__ = [
    "UserRole",
    "AssessmentType",
    "NotificationType",
    "Profile",
    "Course",
    "Module",
    "Enrollment",
    "Resource",
    "ResourceView",
    "CalendarEvent",
    "Assessment",
    "Submission",
    "ForumPost",
    "ForumReply",
    "Notification",
]
