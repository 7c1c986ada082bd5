"""
NegotiateAI Backend - Feedback Service
=======================================

What:  Stores 1-5 ratings on analyses and improvements, and aggregates them.
Who:   Called by the /api/feedback route handlers.

Stats are computed over the caller's own feedback rows, aggregated in Python.
"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from negotiateai.context import RequestContext
from negotiateai.exceptions import NotFoundError, PersistenceError, ValidationError
from negotiateai.models.analysis import Analysis
from negotiateai.models.feedback import SUGGESTION_TYPES, Feedback
from negotiateai.schemas.feedback import FeedbackCreateRequest, FeedbackRecord, FeedbackStats

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _mean(values: List[int]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_stats(rows: Iterable[Feedback]) -> FeedbackStats:
    """Overall mean, count, and per-model / per-type means."""
    ratings: List[int] = []
    by_model: Dict[str, List[int]] = defaultdict(list)
    by_type: Dict[str, List[int]] = defaultdict(list)

    for row in rows:
        ratings.append(row.rating)
        by_model[row.model_id].append(row.rating)
        by_type[row.suggestion_type].append(row.rating)

    return FeedbackStats(
        average_rating=_mean(ratings),
        total_feedback=len(ratings),
        model_ratings={key: _mean(values) for key, values in by_model.items()},
        suggestion_type_ratings={key: _mean(values) for key, values in by_type.items()},
    )


class FeedbackService:

    async def submit_feedback(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        request: FeedbackCreateRequest,
    ) -> FeedbackRecord:
        """
        Validate and store one rating.

        Raises:
            ValidationError:   missing field, rating outside 1-5, unknown type
            NotFoundError:     analysisId does not exist
            PersistenceError:  the insert failed
        """
        if (
            request.analysis_id is None
            or request.rating is None
            or not request.model_id
            or not request.suggestion_type
        ):
            raise ValidationError(
                message="AnalysisId, rating, modelId, and suggestionType are required",
            )
        if not MIN_RATING <= request.rating <= MAX_RATING:
            raise ValidationError(
                message=f"Rating must be between {MIN_RATING} and {MAX_RATING}",
                field="rating",
            )
        if request.suggestion_type not in SUGGESTION_TYPES:
            raise ValidationError(
                message=f"suggestionType must be one of: {', '.join(SUGGESTION_TYPES)}",
                field="suggestionType",
            )

        try:
            analysis = await db.get(Analysis, request.analysis_id)
            if analysis is None:
                raise NotFoundError(resource="analysis", resource_id=str(request.analysis_id))

            now = datetime.now(timezone.utc)
            feedback = Feedback(
                id=uuid.uuid4(),
                user_id=ctx.user_id,
                analysis_id=request.analysis_id,
                rating=request.rating,
                comment=request.comment,
                model_id=request.model_id,
                suggestion_type=request.suggestion_type,
                created_at=now,
                updated_at=now,
            )
            db.add(feedback)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("[%s] Failed to store feedback: %s", ctx.request_id, str(e), exc_info=True)
            raise PersistenceError(
                message="Could not save your feedback. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info(
            "[%s] Feedback %s stored: rating=%d type=%s",
            ctx.request_id,
            feedback.id,
            feedback.rating,
            feedback.suggestion_type,
        )
        return FeedbackRecord.model_validate(feedback)

    async def list_feedback(self, db: AsyncSession, ctx: RequestContext) -> List[FeedbackRecord]:
        rows = await self._user_rows(db, ctx)
        return [FeedbackRecord.model_validate(row) for row in rows]

    async def get_stats(self, db: AsyncSession, ctx: RequestContext) -> FeedbackStats:
        rows = await self._user_rows(db, ctx)
        return compute_stats(rows)

    async def _user_rows(self, db: AsyncSession, ctx: RequestContext) -> List[Feedback]:
        try:
            result = await db.execute(
                select(Feedback)
                .where(Feedback.user_id == ctx.user_id)
                .order_by(desc(Feedback.created_at))
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("[%s] Database error reading feedback: %s", ctx.request_id, str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve feedback. Please try again.",
                context={"error_type": type(e).__name__},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
feedback_service = FeedbackService()
