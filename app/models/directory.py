"""Directory models: tools, community submissions and ratings."""
from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Float, Text, UUID,
    ForeignKey, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship

from app.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionStatus:
    """Moderation states for a submission."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    ALL = (PENDING, APPROVED, REJECTED)


class Tool(Base):
    """Publicly listed tool.

    Created only by approving a submission. Aggregate rating fields are
    recomputed from the ``ratings`` table on every rating upsert.
    """

    __tablename__ = "tools"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    title = Column(String(255), nullable=False)
    url = Column(String(2000), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    description = Column(Text, nullable=False)
    creator_name = Column(String(255), nullable=False)
    creator_link = Column(String(2000), nullable=True)
    creator_background = Column(Text, nullable=True)
    thumbnail_url = Column(String(2000), nullable=True)

    # Aggregates and counters
    avg_rating = Column(Float, default=0.0, nullable=False)
    total_ratings = Column(Integer, default=0, nullable=False)
    view_count = Column(Integer, default=0, nullable=False)
    click_count = Column(Integer, default=0, nullable=False)

    approved = Column(Boolean, default=False, nullable=False, index=True)

    # Submission this tool was materialized from (one tool per submission)
    source_submission_id = Column(
        UUID(as_uuid=True),
        ForeignKey("submissions.id", ondelete="SET NULL"),
        nullable=True,
        unique=True
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    ratings = relationship("Rating", back_populates="tool", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint('avg_rating >= 0 AND avg_rating <= 5', name='ck_tool_avg_rating_range'),
        CheckConstraint('total_ratings >= 0', name='ck_tool_total_ratings'),
        CheckConstraint('view_count >= 0 AND click_count >= 0', name='ck_tool_counters'),
    )


class Submission(Base):
    """User-proposed tool awaiting moderation.

    ``status`` moves from "pending" to "approved" or "rejected" exactly once
    and is never changed afterwards. ``reviewed`` and ``approved`` are
    derived from it.
    """

    __tablename__ = "submissions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Tool info from submitter
    title = Column(String(255), nullable=False)
    url = Column(String(2000), nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    creator_name = Column(String(255), nullable=False)
    creator_link = Column(String(2000), nullable=True)
    creator_background = Column(Text, nullable=True)
    thumbnail_url = Column(String(2000), nullable=True)

    # Submitter network identifier
    submitter_ip = Column(String(255), nullable=False, default="unknown")

    # Review workflow
    status = Column(String(20), nullable=False, default=SubmissionStatus.PENDING, index=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='ck_submission_status'
        ),
    )

    @property
    def reviewed(self) -> bool:
        return self.status != SubmissionStatus.PENDING

    @property
    def approved(self) -> bool:
        return self.status == SubmissionStatus.APPROVED


class Rating(Base):
    """One rating per (tool, rater); later ratings overwrite earlier ones."""

    __tablename__ = "ratings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tool_id = Column(
        UUID(as_uuid=True),
        ForeignKey("tools.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    rater_id = Column(String(255), nullable=False)  # client IP or "anonymous"
    rating = Column(Integer, nullable=False)
    review_text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    tool = relationship("Tool", back_populates="ratings")

    __table_args__ = (
        UniqueConstraint('tool_id', 'rater_id', name='uq_rating_tool_rater'),
        CheckConstraint('rating >= 1 AND rating <= 5', name='ck_rating_range'),
    )
