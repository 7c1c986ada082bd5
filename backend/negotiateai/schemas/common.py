"""
NegotiateAI Backend - Shared Schema Building Blocks
====================================================

What:  The camelCase base model, the error envelope and the health payload.

The extension speaks camelCase JSON (`modelId`, `persuasiveStrength`).
Python code uses snake_case attributes; `CamelModel` bridges the two with an
alias generator. FastAPI serializes response models by alias, and
`populate_by_name` lets services construct models with snake_case keywords.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON keys are the camelCase form of its attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    """Every successful response carries `success: true`."""

    success: bool = True


class MessageResponse(SuccessResponse):
    """Success envelope with a human-readable message (e.g. after delete)."""

    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "success": false,
            "error": "validation_error",
            "message": "Text is required for analysis",
            "details": {"field": "text"},
            "request_id": "a1b2c3d4"
        }
    """

    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /api/health for monitoring and load balancers.
    """

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment name")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gateway: str = Field(description="Model gateway status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
    timestamp: datetime = Field(description="Server time (UTC)")
