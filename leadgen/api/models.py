"""
Request/response models for the assistant HTTP API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from leadgen.common.types import AssistantResponse, ContactRecord, DataSource


class PromptRequest(BaseModel):
    """One chat turn."""

    prompt: str = Field(..., min_length=1, description="Free-text user prompt")
    session_id: Optional[str] = Field(
        default=None,
        description="Existing session to continue; a new one is created when omitted or unknown",
    )
    data_source: DataSource = Field(default="contactout")
    selected_ids: Optional[List[str]] = Field(
        default=None,
        description="Prospect ids selected in the UI; None keeps the current selection",
    )


class PromptResponse(AssistantResponse):
    session_id: str


class SaveLeadsRequest(BaseModel):
    leads: List[ContactRecord] = Field(default_factory=list)


class SaveLeadsResponse(BaseModel):
    message: str
    inserted_count: int
    skipped_count: int = 0


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: datetime
    storage: str
