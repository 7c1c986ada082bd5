"""
NegotiateAI Backend - Analysis Service (Business Logic Orchestrator)
=====================================================================

What:  Runs the analysis pipeline and owns the `analyses` table.
How:   Composes AnalysisPipeline with database operations. Ownership is
       checked against ctx.user_id for every read, update and delete.
Who:   Called by the /api/analysis route handlers.

Orchestration Flow (POST /api/analysis):
    ┌──────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate │───▶│  Pipeline    │───▶│  Normalize / │───▶│  Store   │
    │ (modelId)│    │  (Gateway)   │    │  Fallback    │    │  (DB)    │
    └──────────┘    └──────────────┘    └──────────────┘    └──────────┘

    A fallback result is stored like any other, with is_fallback=True.
    A client disconnect aborts before the store step.

Design Decision:
    AnalysisService is stateless; the db session and request context are
    passed to every call.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from negotiateai.context import RequestContext
from negotiateai.exceptions import (
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from negotiateai.models.analysis import Analysis
from negotiateai.schemas.analysis import AnalysisRecord
from negotiateai.services.analysis_pipeline import ImprovementOutcome, analysis_pipeline

logger = logging.getLogger(__name__)


class AnalysisService:
    """
    Responsibilities:
        - create_analysis(): analyze + persist
        - improve_text(): rewrite, optionally attached to a stored analysis
        - list_analyses() / get_analysis() / delete_analysis(): history
    """

    async def create_analysis(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        text: Optional[str],
        model_id: Optional[str],
    ) -> AnalysisRecord:
        """
        Analyze `text` and store the result for the caller.

        Raises:
            ValidationError:          text or modelId missing
            ClientDisconnectedError:  client left during the gateway call
            PersistenceError:         the insert failed
        """
        if not model_id:
            raise ValidationError(message="Text and modelId are required", field="modelId")

        outcome = await analysis_pipeline.analyze(ctx, text, model_id)
        result = outcome.result

        now = datetime.now(timezone.utc)
        analysis = Analysis(
            id=uuid.uuid4(),
            user_id=ctx.user_id,
            original_text=text,
            model_id=model_id,
            score=result.score,
            tone=result.tone,
            sentiment=result.sentiment,
            persuasive_strength=result.persuasive_strength,
            strengths=result.strengths,
            weaknesses=result.weaknesses,
            suggestions=result.suggestions,
            frameworks_used=result.frameworks_used,
            techniques_identified=result.techniques_identified,
            power_dynamics=result.power_dynamics,
            negotiation_phase=result.negotiation_phase,
            is_fallback=outcome.is_fallback,
            created_at=now,
            updated_at=now,
        )

        try:
            db.add(analysis)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("[%s] Failed to store analysis: %s", ctx.request_id, str(e), exc_info=True)
            raise PersistenceError(
                message="Could not save the analysis. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info(
            "[%s] Analysis %s stored (score=%d, fallback=%s)",
            ctx.request_id,
            analysis.id,
            analysis.score,
            analysis.is_fallback,
        )
        return AnalysisRecord.model_validate(analysis)

    async def improve_text(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        text: Optional[str],
        model_id: Optional[str],
        analysis_id: Optional[uuid.UUID] = None,
    ) -> ImprovementOutcome:
        """
        Rewrite `text`; when analysis_id names one of the caller's analyses,
        store the rewrite on it.

        An unknown or foreign analysis_id is logged and otherwise ignored;
        the improved text is still returned.
        """
        if not model_id:
            raise ValidationError(message="Text and modelId are required", field="modelId")

        outcome = await analysis_pipeline.improve(ctx, text, model_id)

        if analysis_id is None:
            return outcome

        try:
            analysis = await self._fetch(db, analysis_id)
            if analysis is None or analysis.user_id != ctx.user_id:
                logger.warning(
                    "[%s] Improved text not attached: analysis %s missing or not owned",
                    ctx.request_id,
                    analysis_id,
                )
                return outcome

            analysis.improved_text = outcome.text
            analysis.updated_at = datetime.now(timezone.utc)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("[%s] Failed to attach improved text: %s", ctx.request_id, str(e), exc_info=True)
            raise PersistenceError(
                message="Could not save the improved text. Please try again.",
                context={"analysis_id": str(analysis_id)},
            )

        logger.info("[%s] Improved text attached to analysis %s", ctx.request_id, analysis_id)
        return outcome

    async def list_analyses(self, db: AsyncSession, ctx: RequestContext) -> List[AnalysisRecord]:
        """
        The caller's analyses, newest first.

        Query plan:
            SELECT * FROM analyses WHERE user_id = :uid ORDER BY created_at DESC
            → idx_analyses_user_created
        """
        try:
            result = await db.execute(
                select(Analysis)
                .where(Analysis.user_id == ctx.user_id)
                .order_by(desc(Analysis.created_at))
            )
            rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("[%s] Database error listing analyses: %s", ctx.request_id, str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve analyses. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [AnalysisRecord.model_validate(row) for row in rows]

    async def get_analysis(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        analysis_id: uuid.UUID,
    ) -> AnalysisRecord:
        """
        Raises:
            NotFoundError:       no such analysis (404)
            AuthorizationError:  it belongs to someone else (403)
        """
        analysis = await self._get_owned(db, ctx, analysis_id)
        return AnalysisRecord.model_validate(analysis)

    async def delete_analysis(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        analysis_id: uuid.UUID,
    ) -> None:
        """Delete an owned analysis; its feedback rows cascade."""
        analysis = await self._get_owned(db, ctx, analysis_id)
        try:
            await db.delete(analysis)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("[%s] Failed to delete analysis %s: %s", ctx.request_id, analysis_id, str(e))
            raise PersistenceError(
                message="Could not delete the analysis. Please try again.",
                context={"analysis_id": str(analysis_id)},
            )
        logger.info("[%s] Analysis %s deleted", ctx.request_id, analysis_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _fetch(self, db: AsyncSession, analysis_id: uuid.UUID) -> Optional[Analysis]:
        result = await db.execute(select(Analysis).where(Analysis.id == analysis_id))
        return result.scalar_one_or_none()

    async def _get_owned(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        analysis_id: uuid.UUID,
    ) -> Analysis:
        try:
            analysis = await self._fetch(db, analysis_id)
        except SQLAlchemyError as e:
            logger.error("[%s] Database error fetching analysis %s: %s", ctx.request_id, analysis_id, str(e))
            raise PersistenceError(
                message="Could not retrieve the analysis. Please try again.",
                context={"analysis_id": str(analysis_id)},
            )

        if analysis is None:
            raise NotFoundError(resource="analysis", resource_id=str(analysis_id))
        if analysis.user_id != ctx.user_id:
            raise AuthorizationError(
                message="Not authorized to access this analysis",
                context={"analysis_id": str(analysis_id)},
            )
        return analysis


# ── Singleton Instance ────────────────────────────────────────────────────
analysis_service = AnalysisService()
