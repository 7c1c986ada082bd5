"""
NegotiateAI Backend - Feedback Schemas
=======================================

What:  Request/response contracts for rating analyses and improvements.

Range and enum checks (rating 1-5, suggestionType) live in FeedbackService.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from negotiateai.schemas.common import CamelModel, SuccessResponse


class FeedbackCreateRequest(CamelModel):
    analysis_id: Optional[uuid.UUID] = None
    rating: Optional[int] = None
    comment: Optional[str] = None
    model_id: Optional[str] = None
    suggestion_type: Optional[str] = None


class FeedbackRecord(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    analysis_id: uuid.UUID
    rating: int
    comment: Optional[str] = None
    model_id: str
    suggestion_type: str
    created_at: datetime
    updated_at: datetime


class FeedbackResponse(SuccessResponse):
    feedback: FeedbackRecord


class FeedbackListResponse(SuccessResponse):
    count: int
    feedback: List[FeedbackRecord]


class FeedbackStats(CamelModel):
    """
    Aggregate ratings for one user.

    model_ratings and suggestion_type_ratings map a key (model id or
    'analysis'/'improvement') to the mean rating for that key.
    """

    average_rating: float = 0.0
    total_feedback: int = 0
    model_ratings: Dict[str, float] = {}
    suggestion_type_ratings: Dict[str, float] = {}


class FeedbackStatsResponse(SuccessResponse):
    stats: FeedbackStats
