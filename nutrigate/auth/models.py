"""Pydantic models for resolved user identity."""

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """Identity resolved from a verified bearer token.
    
    Resolved once per request and never persisted by the gateway.
    
    Attributes:
        user_id: Identity-service user identifier.
        email: User's email address (optional).
    """
    
    user_id: str = Field(..., min_length=1, description="Unique user identifier")
    email: str | None = Field(None, description="User email address")
    
    model_config = ConfigDict(frozen=True)
