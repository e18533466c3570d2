"""
API response schemas (DTOs).

These Pydantic models define the JSON envelope returned to callers.
The request body itself is validated by the RequestValidator in the
application layer, so that the same rules apply whoever calls the pipeline.

Decision: Fields use the camelCase names the front end already consumes
(providerId, ...) as aliases; FastAPI serializes by alias.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SendPostcardResponse(BaseModel):
    """Response schema for an accepted postcard."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(True, description="Always true on success")
    message: str = Field(
        ...,
        description="Success message",
        examples=["Postcard sent successfully"],
    )
    sent: int = Field(..., description="Postcards sent by this process so far")
    remaining: int = Field(..., description="Postcards left before the send limit")
    provider_id: str | None = Field(
        None, alias="providerId", description="Identifier assigned by the provider"
    )
    status: str = Field(..., description="Normalized provider status", examples=["submitted"])
    raw: Any = Field(None, description="Raw provider payload, for diagnostics")


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(False, description="Always false on failure")
    error: str = Field(..., description="Human-readable error message")
    details: Any = Field(None, description="Additional diagnostic information")
    sent: int | None = Field(None, description="Postcards sent (quota errors only)")
    maximum: int | None = Field(None, alias="max", description="Send limit (quota errors only)")


class ServiceInfoResponse(BaseModel):
    """Informational answer for non-POST probes of the submission endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    service: str = Field(..., description="Service name")
    status: str = Field(..., description="Service status", examples=["ok"])
    message: str = Field(..., description="How to use the endpoint")
    sent: int = Field(..., description="Postcards sent by this process so far")
    remaining: int = Field(..., description="Postcards left before the send limit")
    maximum: int = Field(..., alias="max", description="Send limit")


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(..., description="Service status", examples=["healthy"])
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    timestamp: datetime = Field(..., description="Current server time")
