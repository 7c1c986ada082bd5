"""
NegotiateAI Backend - Analysis Pipeline
========================================

What:  Scores a negotiation text and rewrites it, via the model gateway.
How:   validate input → resolve industry context → build prompt →
       one gateway call (bound to the request) → normalize → outcome.
Who:   AnalysisService (which persists results) and the improve endpoint.

Failure Policy:
    - Blank text: ValidationError before any gateway call (400)
    - Gateway failure or unusable output: fixed fallback value,
      flagged is_fallback=True; the request still succeeds
    - Client disconnect: ClientDisconnectedError propagates, nothing returned

The pipeline holds no per-request state; the only shared data is the
static industry table.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from negotiateai.context import RequestContext
from negotiateai.exceptions import GatewayError, ValidationError
from negotiateai.schemas.analysis import AnalysisResult
from negotiateai.services.gemini_service import gemini_gateway
from negotiateai.services.llm_base import ModelGateway
from negotiateai.services.prompts import (
    build_analysis_messages,
    build_improvement_messages,
    resolve_industry_context,
)
from negotiateai.services.response_normalizer import JsonShape, normalize

logger = logging.getLogger(__name__)

# ── Generation parameters ─────────────────────────────────────────────────
ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 1500
IMPROVE_TEMPERATURE = 0.7
IMPROVE_MAX_TOKENS = 2000

IMPROVED_TEXT_PLACEHOLDER = (
    "[This would be an improved version of your text with better "
    "negotiation techniques and persuasive language.]"
)


def mock_analysis() -> AnalysisResult:
    """The canned analysis returned when the model gives nothing usable."""
    return AnalysisResult(
        score=75,
        tone="Professional",
        sentiment="Positive",
        persuasive_strength=70,
        strengths=[
            "Clear communication of key points",
            "Professional tone throughout",
            "Good structure and organization",
        ],
        weaknesses=[
            "Could use more specific data points",
            "Missing some key negotiation techniques",
            "Call to action could be stronger",
        ],
        suggestions=[
            "Add specific examples to support your position",
            "Incorporate more reciprocity principles",
            "End with a clearer next step or timeline",
        ],
        frameworks_used=["BATNA", "Interest-Based"],
        techniques_identified=["Mirroring", "Labeling"],
        power_dynamics="Balanced with slight advantage to counterparty",
        negotiation_phase="Bargaining",
    )


def mock_improved_text(original_text: str) -> str:
    return f"{original_text}\n\n{IMPROVED_TEXT_PLACEHOLDER}"


@dataclass(frozen=True)
class AnalysisOutcome:
    result: AnalysisResult
    is_fallback: bool = False


@dataclass(frozen=True)
class ImprovementOutcome:
    text: str
    is_fallback: bool = False


class AnalysisPipeline:
    """
    Analyze and improve negotiation text.

    Architecture:
        - Singleton instance at module bottom, wired to the Gemini gateway
        - Tests construct their own instance around a mocked gateway
    """

    def __init__(self, gateway: ModelGateway):
        self.gateway = gateway

    async def analyze(
        self,
        ctx: RequestContext,
        text: Optional[str],
        model_id: Optional[str],
    ) -> AnalysisOutcome:
        """
        Score a negotiation text.

        Args:
            ctx:       Request context (logging, cancellation)
            text:      The negotiation text; must contain non-whitespace
            model_id:  Industry id; unknown ids use the general context

        Returns:
            AnalysisOutcome with a validated result, or the mock analysis
            and is_fallback=True.

        Raises:
            ValidationError:          text is missing or blank
            ClientDisconnectedError:  the caller went away mid-call
        """
        if text is None or not text.strip():
            raise ValidationError(message="Text is required for analysis", field="text")

        industry_context = resolve_industry_context(model_id)
        session_id = secrets.token_hex(6)
        messages = build_analysis_messages(text, industry_context, session_id)

        logger.info(
            "[%s] Analyzing %d chars for industry=%s session=%s",
            ctx.request_id,
            len(text),
            model_id,
            session_id,
        )

        try:
            raw = await ctx.bind(self.gateway.complete(
                messages,
                temperature=ANALYSIS_TEMPERATURE,
                max_tokens=ANALYSIS_MAX_TOKENS,
            ))
        except GatewayError as e:
            logger.warning("[%s] Analysis gateway failure, using mock analysis: %s", ctx.request_id, e.message)
            return AnalysisOutcome(result=mock_analysis(), is_fallback=True)

        normalized = normalize(
            raw,
            JsonShape.OBJECT,
            AnalysisResult.model_validate,
            mock_analysis,
            request_id=ctx.request_id,
        )
        if not normalized.is_fallback:
            logger.info("[%s] Analysis scored %d", ctx.request_id, normalized.value.score)
        return AnalysisOutcome(result=normalized.value, is_fallback=normalized.is_fallback)

    async def improve(
        self,
        ctx: RequestContext,
        text: Optional[str],
        model_id: Optional[str],
    ) -> ImprovementOutcome:
        """
        Rewrite a negotiation text.

        The model's answer is used verbatim (trimmed). On gateway failure the
        original text is returned with a placeholder note appended.

        Raises:
            ValidationError:          text is missing or blank
            ClientDisconnectedError:  the caller went away mid-call
        """
        if text is None or not text.strip():
            raise ValidationError(message="Text is required for improvement", field="text")

        industry_context = resolve_industry_context(model_id)
        messages = build_improvement_messages(text, industry_context)

        logger.info("[%s] Improving %d chars for industry=%s", ctx.request_id, len(text), model_id)

        try:
            raw = await ctx.bind(self.gateway.complete(
                messages,
                temperature=IMPROVE_TEMPERATURE,
                max_tokens=IMPROVE_MAX_TOKENS,
            ))
        except GatewayError as e:
            logger.warning("[%s] Improvement gateway failure, returning placeholder: %s", ctx.request_id, e.message)
            return ImprovementOutcome(text=mock_improved_text(text), is_fallback=True)

        return ImprovementOutcome(text=raw.strip())


# ── Singleton Instance ────────────────────────────────────────────────────
analysis_pipeline = AnalysisPipeline(gemini_gateway)
