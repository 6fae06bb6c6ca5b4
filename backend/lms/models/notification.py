"""Notification model."""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Boolean, Enum as SQLEnum
from sqlalchemy.sql import func
import uuid

from ..database import Base
from .enums import NotificationType


class Notification(Base):
    """In-app notification for a single user.

    Milestone notifications are deduplicated on (user_id, type, related_id)
    by the progress service before insert; there is no store-level
    constraint because announcements legitimately repeat that triple.
    """
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    type = Column(SQLEnum(NotificationType), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text)
    related_id = Column(String(36))
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Notification(id={self.id}, type={self.type}, user_id={self.user_id})>"
