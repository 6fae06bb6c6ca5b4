"""Resource, ResourceView and CalendarEvent models."""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from ..database import Base


class Resource(Base):
    """Uploaded course material. Module-scoped resources count toward completion."""
    __tablename__ = "resources"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False)
    module_id = Column(String(36), ForeignKey("modules.id"))
    title = Column(String(255), nullable=False)
    description = Column(Text)
    file_url = Column(String(500), nullable=False)
    file_type = Column(String(100))
    uploaded_by = Column(String(36), ForeignKey("profiles.id"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    module = relationship("Module", back_populates="resources")
    views = relationship("ResourceView", back_populates="resource")

    def __repr__(self):
        return f"<Resource(id={self.id}, title='{self.title}')>"


class ResourceView(Base):
    """Evidence that a student opened a resource. Upserted on every view."""
    __tablename__ = "resource_views"
    __table_args__ = (UniqueConstraint("resource_id", "student_id", name="uq_resource_view_student"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id = Column(String(36), ForeignKey("resources.id"), nullable=False)
    student_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    viewed_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    resource = relationship("Resource", back_populates="views")

    def __repr__(self):
        return f"<ResourceView(resource_id={self.resource_id}, student_id={self.student_id})>"


class CalendarEvent(Base):
    """A dated course event shown next to assessment deadlines."""
    __tablename__ = "calendar_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id = Column(String(36), ForeignKey("courses.id"))
    title = Column(String(255), nullable=False)
    description = Column(Text)
    event_date = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(String(36), ForeignKey("profiles.id"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<CalendarEvent(id={self.id}, title='{self.title}')>"
