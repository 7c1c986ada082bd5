"""
NegotiateAI Backend - Feedback Route Handlers
==============================================

What:  POST /api/feedback, GET /api/feedback, GET /api/feedback/stats.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from negotiateai.context import RequestContext, get_request_context
from negotiateai.database import get_db_session
from negotiateai.schemas.common import ErrorResponse
from negotiateai.schemas.feedback import (
    FeedbackCreateRequest,
    FeedbackListResponse,
    FeedbackResponse,
    FeedbackStatsResponse,
)
from negotiateai.services.feedback_service import feedback_service

router = APIRouter(prefix="/api/feedback", tags=["Feedback"])


@router.post(
    "",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing field, rating outside 1-5, or unknown type", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Analysis not found", "model": ErrorResponse},
    },
    summary="Rate an analysis or an improvement",
)
async def submit_feedback(
    body: FeedbackCreateRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> FeedbackResponse:
    feedback = await feedback_service.submit_feedback(db, ctx, body)
    return FeedbackResponse(feedback=feedback)


@router.get(
    "",
    response_model=FeedbackListResponse,
    summary="List the caller's feedback, newest first",
)
async def list_feedback(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> FeedbackListResponse:
    feedback = await feedback_service.list_feedback(db, ctx)
    return FeedbackListResponse(count=len(feedback), feedback=feedback)


@router.get(
    "/stats",
    response_model=FeedbackStatsResponse,
    summary="Average ratings overall, per model and per type",
)
async def feedback_stats(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> FeedbackStatsResponse:
    stats = await feedback_service.get_stats(db, ctx)
    return FeedbackStatsResponse(stats=stats)
