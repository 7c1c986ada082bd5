"""
NegotiateAI Backend - Suggestion Route Handlers
================================================

What:  POST /api/suggestions/email and POST /api/suggestions/chat.
Who:   Called by the extension's inline helpers while the user is typing
       an email or a chat message. Nothing is stored.
"""

from fastapi import APIRouter, Depends

from negotiateai.context import RequestContext, get_request_context
from negotiateai.schemas.analysis import (
    ChatSuggestionRequest,
    EmailSuggestionRequest,
    SuggestionsResponse,
)
from negotiateai.schemas.common import ErrorResponse
from negotiateai.services.suggestion_pipeline import suggestion_pipeline

router = APIRouter(prefix="/api/suggestions", tags=["Suggestions"])

_ERRORS = {
    400: {"description": "Draft missing or too short", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
}


@router.post(
    "/email",
    response_model=SuggestionsResponse,
    responses=_ERRORS,
    summary="Suggestions for an email draft",
)
async def email_suggestions(
    body: EmailSuggestionRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> SuggestionsResponse:
    outcome = await suggestion_pipeline.email_suggestions(ctx, body.text)
    return SuggestionsResponse(suggestions=outcome.suggestions, is_fallback=outcome.is_fallback)


@router.post(
    "/chat",
    response_model=SuggestionsResponse,
    responses=_ERRORS,
    summary="Suggestions for a chat message in context",
    description="Only the five most recent previous messages are used as context.",
)
async def chat_suggestions(
    body: ChatSuggestionRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> SuggestionsResponse:
    outcome = await suggestion_pipeline.chat_suggestions(
        ctx,
        body.current_message,
        body.previous_messages,
    )
    return SuggestionsResponse(suggestions=outcome.suggestions, is_fallback=outcome.is_fallback)
