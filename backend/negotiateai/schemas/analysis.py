"""
NegotiateAI Backend - Analysis & Suggestion Schemas
====================================================

What:  Structured shapes produced by the model gateway (AnalysisResult,
       SuggestionItem), the request bodies of the analysis/suggestion
       endpoints, and their response envelopes.
How:   AnalysisResult and SuggestionItem double as the structural validators
       the response normalizer applies to parsed model output, so anything
       that reaches a caller has the declared field set and types.

Validation Rules for model output:
    - score and persuasiveStrength must be JSON integers in 0-100
      (strings such as "85" and floats are rejected, not coerced)
    - strengths / weaknesses / suggestions must be lists of strings
    - optional fields may be absent or null
    - unknown extra keys are ignored
"""

import uuid
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import Field, TypeAdapter

from negotiateai.schemas.common import CamelModel, SuccessResponse


# ══════════════════════════════════════════════════════════════════════════
# Model-output shapes
# ══════════════════════════════════════════════════════════════════════════


class AnalysisResult(CamelModel):
    """
    What:  Scoring and critique of one negotiation text.
    Who:   Produced by AnalysisPipeline.analyze(); persisted by AnalysisService.

    Immutable once returned; the stored record may later gain an
    `improvedText` through the improve endpoint.
    """

    score: int = Field(ge=0, le=100, strict=True, description="Overall effectiveness 0-100")
    tone: str = Field(description="Tone label, e.g. assertive, collaborative")
    sentiment: str = Field(description="positive, negative or neutral")
    persuasive_strength: int = Field(ge=0, le=100, strict=True)
    strengths: List[str]
    weaknesses: List[str]
    suggestions: List[str]
    frameworks_used: Optional[List[str]] = None
    techniques_identified: Optional[List[str]] = None
    power_dynamics: Optional[str] = None
    negotiation_phase: Optional[str] = None


class SuggestionItem(CamelModel):
    """A short actionable suggestion: 3-5 word title plus 1-2 sentences."""

    title: str
    text: str


# Validator for a suggestion array; an empty list is not a usable answer
SuggestionList = TypeAdapter(Annotated[List[SuggestionItem], Field(min_length=1)])


class ChatTurn(CamelModel):
    """One prior message of a chat conversation, as captured by the extension."""

    text: str
    is_user: bool = False


# ══════════════════════════════════════════════════════════════════════════
# Request bodies
# ══════════════════════════════════════════════════════════════════════════
# Text fields are optional at the schema level so missing and blank input
# both reach the pipelines, which raise ValidationError (400) with a
# domain-specific message.


class AnalyzeRequest(CamelModel):
    text: Optional[str] = None
    model_id: Optional[str] = None


class ImproveRequest(CamelModel):
    text: Optional[str] = None
    model_id: Optional[str] = None
    analysis_id: Optional[uuid.UUID] = None


class EmailSuggestionRequest(CamelModel):
    text: Optional[str] = None


class ChatSuggestionRequest(CamelModel):
    current_message: Optional[str] = None
    previous_messages: Optional[List[ChatTurn]] = None


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class AnalysisRecord(CamelModel):
    """
    What:  A persisted analysis as returned to the extension.
    Who:   Built from the Analysis ORM row (from_attributes).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    original_text: str
    improved_text: Optional[str] = None
    model_id: str
    score: int
    tone: str
    sentiment: str
    persuasive_strength: int
    strengths: List[str]
    weaknesses: List[str]
    suggestions: List[str]
    frameworks_used: Optional[List[str]] = None
    techniques_identified: Optional[List[str]] = None
    power_dynamics: Optional[str] = None
    negotiation_phase: Optional[str] = None
    is_fallback: bool = False
    created_at: datetime
    updated_at: datetime


class AnalysisResponse(SuccessResponse):
    analysis: AnalysisRecord


class AnalysisListResponse(SuccessResponse):
    count: int
    analyses: List[AnalysisRecord]


class ImproveResponse(SuccessResponse):
    improved_text: str
    is_fallback: bool = False


class SuggestionsResponse(SuccessResponse):
    suggestions: List[SuggestionItem]
    is_fallback: bool = False
