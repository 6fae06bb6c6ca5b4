"""Forum post and reply models."""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from ..database import Base


class ForumPost(Base):
    """Top-level discussion thread in a course."""
    __tablename__ = "forum_posts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id = Column(String(36), ForeignKey("courses.id"))
    author_id = Column(String(36), ForeignKey("profiles.id"))
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    course = relationship("Course", back_populates="forum_posts")
    replies = relationship("ForumReply", back_populates="post", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<ForumPost(id={self.id}, title='{self.title}')>"


class ForumReply(Base):
    """Reply to a forum post."""
    __tablename__ = "forum_replies"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(String(36), ForeignKey("forum_posts.id"), nullable=False)
    author_id = Column(String(36), ForeignKey("profiles.id"))
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    post = relationship("ForumPost", back_populates="replies")

    def __repr__(self):
        return f"<ForumReply(id={self.id}, post_id={self.post_id})>"
