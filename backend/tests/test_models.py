"""Test cases for SQLAlchemy models."""

import pytest
from sqlalchemy.exc import IntegrityError

from lms.grading import SubmissionState
from lms.models import (
    Assessment, AssessmentType, Enrollment, ForumPost, ForumReply, Module,
    Notification, NotificationType, Profile, ResourceView, Submission, UserRole,
)
from lms.schemas import MultipleChoiceQuestion


class TestProfileModel:
    """Test cases for Profile model."""

    def test_create_profile(self, db_session):
        """Test creating a profile."""
        profile = Profile(email="new@example.com", full_name="New Person", role=UserRole.student)
        db_session.add(profile)
        db_session.commit()

        assert profile.id is not None
        assert profile.role == UserRole.student
        assert profile.created_at is not None

    def test_profile_unique_email(self, db_session, student):
        """Test that profile email must be unique."""
        db_session.add(Profile(email=student.email, full_name="Impostor", role=UserRole.student))

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_profile_repr(self, facilitator):
        repr_str = repr(facilitator)
        assert "Profile" in repr_str
        assert facilitator.email in repr_str


class TestCourseModels:
    """Test cases for Course, Module and Enrollment."""

    def test_modules_ordered(self, db_session, course):
        db_session.add_all([
            Module(course_id=course.id, title="Second", order_index=2),
            Module(course_id=course.id, title="First", order_index=1),
        ])
        db_session.commit()
        db_session.refresh(course)

        assert [m.title for m in course.modules] == ["First", "Second"]

    def test_enrollment_unique_per_course(self, db_session, course, student, enrollment):
        db_session.add(Enrollment(course_id=course.id, student_id=student.id))

        with pytest.raises(IntegrityError):
            db_session.commit()


class TestAssessmentModels:
    """Test cases for Assessment and Submission."""

    def test_default_total_points(self, db_session, module):
        assessment = Assessment(module_id=module.id, title="Exam", assessment_type=AssessmentType.exam)
        db_session.add(assessment)
        db_session.commit()

        assert assessment.total_points == 100
        assert assessment.points_possible == 100
        assert assessment.requires_file is False

    def test_parsed_questions(self, quiz):
        questions = quiz.parsed_questions()
        assert isinstance(questions[0], MultipleChoiceQuestion)
        assert [q.id for q in questions] == ["q1", "q2"]

    def test_total_points_follow_question_points(self, db_session, module):
        """A stale total is replaced by the summed question points on insert."""
        assessment = Assessment(
            module_id=module.id, title="Pop quiz", assessment_type=AssessmentType.quiz, total_points=5,
            questions=[{"id": "q1", "type": "multiple-choice", "options": ["a", "b"],
                        "correct_answer_index": 0, "points": 10}],
        )
        db_session.add(assessment)
        db_session.commit()

        assert assessment.total_points == 10

    def test_total_points_resynced_on_question_edit(self, db_session, quiz):
        quiz.questions = quiz.questions + [{"id": "q3", "type": "text", "points": 5}]
        db_session.commit()

        assert quiz.total_points == 20

    def test_question_free_assessment_keeps_total(self, db_session, module):
        assessment = Assessment(module_id=module.id, title="Essay", assessment_type=AssessmentType.assignment,
                                questions=[], total_points=40)
        db_session.add(assessment)
        db_session.commit()

        assert assessment.total_points == 40

    def test_one_submission_per_student(self, db_session, quiz, student):
        db_session.add(Submission(assessment_id=quiz.id, student_id=student.id, answers={}))
        db_session.commit()
        db_session.add(Submission(assessment_id=quiz.id, student_id=student.id, answers={}))

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_submission_state(self, db_session, quiz, student):
        submission = Submission(assessment_id=quiz.id, student_id=student.id, answers={"q1": "1"})
        assert submission.state == SubmissionState.submitted
        submission.auto_grade = 10
        assert submission.state == SubmissionState.auto_graded
        submission.grade = 11
        assert submission.state == SubmissionState.graded


class TestActivityModels:
    """Test cases for views, forum rows and notifications."""

    def test_one_view_row_per_student(self, db_session, resources, student):
        db_session.add(ResourceView(resource_id=resources[0].id, student_id=student.id))
        db_session.commit()
        db_session.add(ResourceView(resource_id=resources[0].id, student_id=student.id))

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_replies_cascade(self, db_session, course, student):
        post = ForumPost(course_id=course.id, author_id=student.id, title="Question", content="What is a median?")
        post.replies.append(ForumReply(author_id=student.id, content="The middle value"))
        db_session.add(post)
        db_session.commit()
        assert len(post.replies) == 1

        db_session.delete(post)
        db_session.commit()
        assert db_session.query(ForumReply).count() == 0

    def test_notification_defaults(self, db_session, student):
        notification = Notification(user_id=student.id, type=NotificationType.announcement,
                                    title="Hello", message="Welcome to the course")
        db_session.add(notification)
        db_session.commit()

        assert notification.is_read is False
        assert notification.created_at is not None
        assert NotificationType.for_milestone(75) == NotificationType.course_milestone_75
