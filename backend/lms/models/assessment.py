"""Assessment and Submission models."""

from sqlalchemy import event, Column, String, Text, DateTime, ForeignKey, Integer, JSON, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from ..database import Base
from ..config import DEFAULT_TOTAL_POINTS
from .enums import AssessmentType


class Assessment(Base):
    """A gradeable unit (assignment, quiz or exam) inside a module."""
    __tablename__ = "assessments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    module_id = Column(String(36), ForeignKey("modules.id"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    assessment_type = Column(SQLEnum(AssessmentType), nullable=False, default=AssessmentType.quiz)
    questions = Column(JSON, default=[])
    total_points = Column(Integer, default=DEFAULT_TOTAL_POINTS)
    due_date = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    module = relationship("Module", back_populates="assessments")
    submissions = relationship("Submission", back_populates="assessment")

    def __repr__(self):
        return f"<Assessment(id={self.id}, title='{self.title}')>"

    @property
    def points_possible(self) -> int:
        """Total points, falling back to the default scale when unset."""
        return self.total_points if self.total_points is not None else DEFAULT_TOTAL_POINTS

    @property
    def requires_file(self) -> bool:
        return self.assessment_type == AssessmentType.assignment

    def parsed_questions(self):
        """Validate the stored questions payload into typed questions."""
        from ..scoring import parse_questions
        return parse_questions(self.questions or [])

    def sync_total_points(self) -> None:
        """Keep total_points equal to the summed question points.

        Assessments whose questions carry no points (file assignments) keep
        their own total, or the default scale.
        """
        question_points = sum(q.points for q in self.parsed_questions())
        if question_points > 0:
            self.total_points = question_points
        elif self.total_points is None:
            self.total_points = DEFAULT_TOTAL_POINTS


class Submission(Base):
    """One student's attempt at an assessment."""
    __tablename__ = "submissions"
    __table_args__ = (UniqueConstraint("assessment_id", "student_id", name="uq_submission_assessment_student"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    assessment_id = Column(String(36), ForeignKey("assessments.id"), nullable=False)
    student_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    answers = Column(JSON, default={})
    auto_grade = Column(Integer)
    grade = Column(Integer)
    feedback = Column(Text)
    file_url = Column(String(500))
    submitted_at = Column(DateTime(timezone=True), server_default=func.now())
    graded_at = Column(DateTime(timezone=True))
    adjusted_at = Column(DateTime(timezone=True))

    # Relationships
    assessment = relationship("Assessment", back_populates="submissions")
    student = relationship("Profile", back_populates="submissions")

    def __repr__(self):
        return f"<Submission(id={self.id}, student_id={self.student_id}, grade={self.grade})>"

    @property
    def state(self):
        """Current grading state derived from the row."""
        from ..grading import submission_state
        return submission_state(self.auto_grade, self.grade, self.adjusted_at)


@event.listens_for(Assessment, "before_insert")
@event.listens_for(Assessment, "before_update")
def sync_assessment_total_points(mapper, connection, target):
    target.sync_total_points()
