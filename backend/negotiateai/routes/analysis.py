"""
NegotiateAI Backend - Analysis Route Handlers
==============================================

What:  POST /api/analysis, POST /api/analysis/improve, and the analysis
       history endpoints (list, get, delete).
How:   Thin handlers: pull the body, delegate to AnalysisService, wrap the
       result in a `{success: true, ...}` envelope.
Who:   Called by the browser extension's analysis panel.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from negotiateai.context import RequestContext, get_request_context
from negotiateai.database import get_db_session
from negotiateai.schemas.analysis import (
    AnalysisListResponse,
    AnalysisResponse,
    AnalyzeRequest,
    ImproveRequest,
    ImproveResponse,
)
from negotiateai.schemas.common import ErrorResponse, MessageResponse
from negotiateai.services.analysis_service import analysis_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analysis", tags=["Analysis"])

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
}


@router.post(
    "",
    response_model=AnalysisResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Text or modelId missing", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Analyze a negotiation text",
    description=(
        "Scores the text against a seven-part rubric and stores the result. "
        "If the AI service fails or returns unusable output, a fixed fallback "
        "analysis is stored and returned with isFallback=true."
    ),
)
async def create_analysis(
    body: AnalyzeRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> AnalysisResponse:
    analysis = await analysis_service.create_analysis(db, ctx, body.text, body.model_id)
    return AnalysisResponse(analysis=analysis)


@router.get(
    "",
    response_model=AnalysisListResponse,
    responses=_AUTH_ERRORS,
    summary="List the caller's analyses, newest first",
)
async def list_analyses(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> AnalysisListResponse:
    analyses = await analysis_service.list_analyses(db, ctx)
    return AnalysisListResponse(count=len(analyses), analyses=analyses)


@router.post(
    "/improve",
    response_model=ImproveResponse,
    responses={
        400: {"description": "Text or modelId missing", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Rewrite a negotiation text",
    description=(
        "Returns an improved version of the text. When analysisId names one of "
        "the caller's analyses, the improved text is also stored on it."
    ),
)
async def improve_text(
    body: ImproveRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> ImproveResponse:
    outcome = await analysis_service.improve_text(
        db,
        ctx,
        body.text,
        body.model_id,
        analysis_id=body.analysis_id,
    )
    return ImproveResponse(improved_text=outcome.text, is_fallback=outcome.is_fallback)


@router.get(
    "/{analysis_id}",
    response_model=AnalysisResponse,
    responses={
        403: {"description": "Analysis belongs to another user", "model": ErrorResponse},
        404: {"description": "Analysis not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Get one analysis",
)
async def get_analysis(
    analysis_id: UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> AnalysisResponse:
    analysis = await analysis_service.get_analysis(db, ctx, analysis_id)
    return AnalysisResponse(analysis=analysis)


@router.delete(
    "/{analysis_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Analysis belongs to another user", "model": ErrorResponse},
        404: {"description": "Analysis not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Delete one analysis",
)
async def delete_analysis(
    analysis_id: UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await analysis_service.delete_analysis(db, ctx, analysis_id)
    return MessageResponse(message="Analysis removed")
