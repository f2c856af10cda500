"""
Pydantic schemas for API requests and responses
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ========== Token Schemas ==========

class TokenPair(BaseModel):
    """Tokens returned by Google's code exchange; held only for one request"""
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "Bearer"
    scope: Optional[str] = None
    
    model_config = ConfigDict(extra="ignore", frozen=True)


# ========== General Schemas ==========

class HealthCheckResponse(BaseModel):
    """Schema for health check response"""
    status: str = "healthy"
    service: str = "review-relay"
    version: str = "1.0.0"
    timestamp: datetime
    refresh_token_configured: bool


class ErrorResponse(BaseModel):
    """Schema for error response"""
    error: str = Field(..., description="Human readable error message")
