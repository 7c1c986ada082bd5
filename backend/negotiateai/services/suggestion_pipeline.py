"""
NegotiateAI Backend - Suggestion Pipeline
==========================================

What:  Short lists of {title, text} suggestions for a draft, in two modes:
       a standalone email draft, or a chat message with its conversation.
How:   Same contract as the analysis pipeline (one gateway call, normalize,
       fallback), but nothing is persisted.
Who:   The /api/suggestions endpoints.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from negotiateai.context import RequestContext
from negotiateai.exceptions import GatewayError, ValidationError
from negotiateai.schemas.analysis import ChatTurn, SuggestionItem, SuggestionList
from negotiateai.services.gemini_service import gemini_gateway
from negotiateai.services.llm_base import ChatMessage, ModelGateway
from negotiateai.services.prompts import (
    build_chat_suggestion_messages,
    build_email_suggestion_messages,
)
from negotiateai.services.response_normalizer import JsonShape, normalize

logger = logging.getLogger(__name__)

SUGGESTION_TEMPERATURE = 0.7
SUGGESTION_MAX_TOKENS = 1000

EMAIL_MIN_LENGTH = 10

_FALLBACK_TITLE = "Parsing Error"
_FALLBACK_EMAIL_TEXT = (
    "There was an error generating suggestions. "
    "Please try again with a more complete email draft."
)
_FALLBACK_CHAT_TEXT = (
    "There was an error generating suggestions. "
    "Please try again with a more complete message."
)


def email_fallback() -> List[SuggestionItem]:
    return [SuggestionItem(title=_FALLBACK_TITLE, text=_FALLBACK_EMAIL_TEXT)]


def chat_fallback() -> List[SuggestionItem]:
    return [SuggestionItem(title=_FALLBACK_TITLE, text=_FALLBACK_CHAT_TEXT)]


@dataclass(frozen=True)
class SuggestionOutcome:
    suggestions: List[SuggestionItem]
    is_fallback: bool = False


class SuggestionPipeline:
    def __init__(self, gateway: ModelGateway):
        self.gateway = gateway

    async def email_suggestions(self, ctx: RequestContext, text: Optional[str]) -> SuggestionOutcome:
        """
        3-5 suggestions for an email draft.

        Raises:
            ValidationError: text missing or shorter than EMAIL_MIN_LENGTH
                (after trimming surrounding whitespace).
        """
        if text is None or len(text.strip()) < EMAIL_MIN_LENGTH:
            raise ValidationError(
                message=f"Email text is required and must be at least {EMAIL_MIN_LENGTH} characters",
                field="text",
            )

        logger.info("[%s] Email suggestions for %d chars", ctx.request_id, len(text))
        messages = build_email_suggestion_messages(text)
        return await self._suggest(ctx, messages, email_fallback)

    async def chat_suggestions(
        self,
        ctx: RequestContext,
        current_message: Optional[str],
        previous_messages: Optional[Sequence[ChatTurn]] = None,
    ) -> SuggestionOutcome:
        """
        2-3 suggestions for a chat draft, given the conversation so far.

        Only the most recent turns are sent (see prompts.CHAT_HISTORY_LIMIT).

        Raises:
            ValidationError: current_message missing or blank.
        """
        if current_message is None or not current_message.strip():
            raise ValidationError(message="Current message is required", field="currentMessage")

        logger.info(
            "[%s] Chat suggestions for %d chars with %d prior turns",
            ctx.request_id,
            len(current_message),
            len(previous_messages or []),
        )
        messages = build_chat_suggestion_messages(current_message, previous_messages)
        return await self._suggest(ctx, messages, chat_fallback)

    async def _suggest(self, ctx, messages: List[ChatMessage], fallback) -> SuggestionOutcome:
        try:
            raw = await ctx.bind(self.gateway.complete(
                messages,
                temperature=SUGGESTION_TEMPERATURE,
                max_tokens=SUGGESTION_MAX_TOKENS,
            ))
        except GatewayError as e:
            logger.warning("[%s] Suggestion gateway failure, using fallback: %s", ctx.request_id, e.message)
            return SuggestionOutcome(suggestions=fallback(), is_fallback=True)

        normalized = normalize(
            raw,
            JsonShape.ARRAY,
            SuggestionList.validate_python,
            fallback,
            request_id=ctx.request_id,
        )
        logger.info("[%s] Generated %d suggestions", ctx.request_id, len(normalized.value))
        return SuggestionOutcome(suggestions=normalized.value, is_fallback=normalized.is_fallback)


# ── Singleton Instance ────────────────────────────────────────────────────
suggestion_pipeline = SuggestionPipeline(gemini_gateway)
