"""Course, Module and Enrollment models."""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from ..database import Base


class Course(Base):
    """Course model."""
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text)
    facilitator_id = Column(String(36), ForeignKey("profiles.id"))
    thumbnail_url = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    facilitator = relationship("Profile", back_populates="courses")
    modules = relationship("Module", back_populates="course", order_by="Module.order_index")
    enrollments = relationship("Enrollment", back_populates="course")
    forum_posts = relationship("ForumPost", back_populates="course")

    def __repr__(self):
        return f"<Course(id={self.id}, title='{self.title}')>"


class Module(Base):
    """An ordered grouping of resources and assessments within a course."""
    __tablename__ = "modules"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    course = relationship("Course", back_populates="modules")
    assessments = relationship("Assessment", back_populates="module")
    resources = relationship("Resource", back_populates="module")

    def __repr__(self):
        return f"<Module(id={self.id}, title='{self.title}', order_index={self.order_index})>"


class Enrollment(Base):
    """Links a student to a course and caches their progress."""
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("course_id", "student_id", name="uq_enrollment_course_student"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False)
    student_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    progress = Column(Integer, default=0)
    enrolled_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    course = relationship("Course", back_populates="enrollments")
    student = relationship("Profile", back_populates="enrollments")

    def __repr__(self):
        return f"<Enrollment(course_id={self.course_id}, student_id={self.student_id}, progress={self.progress})>"
