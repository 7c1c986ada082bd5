"""
NegotiateAI Backend - Analysis SQLAlchemy Model
================================================

What:  ORM model representing the `analyses` table.
How:   One row per analysis request. The scoring fields mirror the
       AnalysisResult schema; list fields are stored as JSON arrays.
Who:   Written by AnalysisService after the pipeline returns; read by the
       analysis history endpoints and by feedback submission.

Lifecycle:
    1. Created with the (validated or fallback) analysis result
    2. Optionally updated once with `improved_text` by the improve endpoint
    3. Deleted by its owner; feedback rows cascade with it

Query Patterns:
    - History: WHERE user_id = :uid ORDER BY created_at DESC
      → idx_analyses_user_created
    - Single record: WHERE id = :id → primary key
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
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


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Analysis(Base):
    """A scored critique of one piece of negotiation text."""

    __tablename__ = "analyses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # ── Input ─────────────────────────────────────────────────────────────
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    improved_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    model_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Industry context requested by the caller (unresolved)",
    )

    # ── AnalysisResult fields ─────────────────────────────────────────────
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    tone: Mapped[str] = mapped_column(String(100), nullable=False)
    sentiment: Mapped[str] = mapped_column(String(100), nullable=False)
    persuasive_strength: Mapped[int] = mapped_column(Integer, nullable=False)
    strengths: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    weaknesses: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    suggestions: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    frameworks_used: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    techniques_identified: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    power_dynamics: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    negotiation_phase: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # True when the stored result is the canned fallback, not a model answer
    is_fallback: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    # ── Timestamps ────────────────────────────────────────────────────────
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
        Index("idx_analyses_user_created", user_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Analysis(id={self.id}, model_id='{self.model_id}', "
            f"score={self.score}, fallback={self.is_fallback})>"
        )
