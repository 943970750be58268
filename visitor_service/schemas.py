from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Visitors
# ---------------------------------------------------------------------------

class VisitorSubmission(BaseModel):
    """Sanitized visitor fields, ready to be persisted."""

    first_name: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., min_length=1, max_length=255)
    user_agent: Optional[str] = Field(default=None, max_length=1000)


class VisitorRecord(BaseModel):
    """A persisted visitor row as returned to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    company: str
    role: str
    timestamp: datetime


class VisitorCreated(BaseModel):
    success: bool = True
    message: str
    data: VisitorRecord


# ---------------------------------------------------------------------------
# Errors / health
# ---------------------------------------------------------------------------

class ErrorOut(BaseModel):
    error: str
    details: Optional[List[str]] = None


class HealthOut(BaseModel):
    status: str
    database: str
    timestamp: Optional[datetime] = None
