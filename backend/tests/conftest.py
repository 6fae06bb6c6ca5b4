"""Test configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lms.database import Base
from lms import models  # noqa: F401  registers every table on Base.metadata


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def engine():
    """Create a fresh test database engine per test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Create test database session."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def facilitator(db_session):
    from lms.models import Profile, UserRole
    profile = Profile(email="facilitator@example.com", full_name="Fiona Facilitator", role=UserRole.facilitator)
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def other_facilitator(db_session):
    """A facilitator who teaches none of the sample courses."""
    from lms.models import Profile, UserRole
    profile = Profile(email="other.facilitator@example.com", full_name="Oscar Other", role=UserRole.facilitator)
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def student(db_session):
    from lms.models import Profile, UserRole
    profile = Profile(email="student@example.com", full_name="Sam Student", role=UserRole.student)
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def course(db_session, facilitator):
    from lms.models import Course
    course = Course(title="Intro to Statistics", description="Descriptive statistics", facilitator_id=facilitator.id)
    db_session.add(course)
    db_session.commit()
    db_session.refresh(course)
    return course


@pytest.fixture
def module(db_session, course):
    from lms.models import Module
    module = Module(course_id=course.id, title="Week 1", order_index=0)
    db_session.add(module)
    db_session.commit()
    db_session.refresh(module)
    return module


@pytest.fixture
def resources(db_session, course, module, facilitator):
    from lms.models import Resource
    rows = [
        Resource(course_id=course.id, module_id=module.id, title="Slides", file_url="https://files/slides.pdf",
                 file_type="application/pdf", uploaded_by=facilitator.id),
        Resource(course_id=course.id, module_id=module.id, title="Reading", file_url="https://files/reading.pdf",
                 file_type="application/pdf", uploaded_by=facilitator.id),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


QUIZ_QUESTIONS = [
    {"id": "q1", "type": "multiple-choice", "text": "Mean of 1, 2, 3?", "options": ["1", "2", "3"],
     "correct_answer_index": 1, "points": 10},
    {"id": "q2", "type": "text", "text": "Explain variance.", "points": 5},
]


@pytest.fixture
def quiz(db_session, module):
    from lms.models import Assessment, AssessmentType
    assessment = Assessment(
        module_id=module.id,
        title="Quiz 1",
        assessment_type=AssessmentType.quiz,
        questions=QUIZ_QUESTIONS,
        total_points=15,
        due_date=datetime.now(timezone.utc) + timedelta(days=3),
    )
    db_session.add(assessment)
    db_session.commit()
    db_session.refresh(assessment)
    return assessment


@pytest.fixture
def enrollment(db_session, course, student):
    from lms.models import Enrollment
    enrollment = Enrollment(course_id=course.id, student_id=student.id, progress=0)
    db_session.add(enrollment)
    db_session.commit()
    db_session.refresh(enrollment)
    return enrollment


@pytest.fixture
def make_student(db_session, course):
    """Create and enroll additional students."""
    from lms.models import Enrollment, Profile, UserRole

    def _make(email, progress=0):
        profile = Profile(email=email, full_name=email.split("@")[0], role=UserRole.student)
        db_session.add(profile)
        db_session.flush()
        db_session.add(Enrollment(course_id=course.id, student_id=profile.id, progress=progress))
        db_session.commit()
        db_session.refresh(profile)
        return profile
    return _make
