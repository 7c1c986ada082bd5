"""
NegotiateAI Backend - Feedback SQLAlchemy Model
================================================

What:  ORM model representing the `feedback` table: a 1-5 rating a user
       leaves on an analysis or on an improved text.
Who:   Written and aggregated by FeedbackService.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from negotiateai.database import Base

SUGGESTION_TYPES = ("analysis", "improvement")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Feedback(Base):
    """User rating of a generated analysis or improvement."""

    __tablename__ = "feedback"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    analysis_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("analyses.id", ondelete="CASCADE"),
        nullable=False,
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    model_id: Mapped[str] = mapped_column(String(50), nullable=False)

    # 'analysis' | 'improvement'
    suggestion_type: Mapped[str] = mapped_column(String(20), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_feedback_rating_range"),
        CheckConstraint(
            "suggestion_type IN ('analysis', 'improvement')",
            name="ck_feedback_suggestion_type",
        ),
        Index("idx_feedback_user_created", user_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Feedback(id={self.id}, analysis_id={self.analysis_id}, "
            f"rating={self.rating}, type='{self.suggestion_type}')>"
        )
