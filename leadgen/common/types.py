"""
Canonical Types and Schemas for the Lead-Generation Assistant

Defines the records produced by enrichment, search and scraping, the
classified intent of a prompt, outreach drafts, and the uniform response
envelope returned to callers.
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

from leadgen.common.error_handling import FailureRecord

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

IntentType = Literal[
    "enrich_by_profile",
    "enrich_by_domain",
    "search",
    "web_scrape",
    "command",
    "unknown",
]

INTENT_TYPES = (
    "enrich_by_profile",
    "enrich_by_domain",
    "search",
    "web_scrape",
    "command",
    "unknown",
)

# Closed set of commands the dispatcher knows how to run
CommandName = Literal[
    "show prospects",
    "generate previews",
    "send emails",
    "check replies",
    "enrich prospects from csv",
]

COMMAND_NAMES = (
    "show prospects",
    "generate previews",
    "send emails",
    "check replies",
    "enrich prospects from csv",
)

DataSource = Literal["contactout", "webscraping"]


def is_valid_email(value: Optional[str]) -> bool:
    """True when `value` looks like a deliverable address."""
    return bool(value) and bool(EMAIL_PATTERN.match(value.strip()))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Website(BaseModel):
    type: str = "work"
    url: str


class ContactRecord(BaseModel):
    """
    A prospect: one person with the means to contact them.

    `work_email` is lowercased on assignment and must look like an address.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    full_name: str = ""
    role: str = ""
    company: str = ""
    work_email: Optional[str] = None
    personal_emails: List[str] = Field(default_factory=list)
    phone_numbers: List[str] = Field(default_factory=list)
    country: str = ""
    source: str = ""
    source_details: str = ""
    query: str = ""
    confidence_score: Optional[int] = Field(default=None, ge=0, le=100)
    created_at: datetime = Field(default_factory=_utc_now)
    websites: List[Website] = Field(default_factory=list)
    linkedin_url: Optional[str] = None

    @field_validator("work_email")
    @classmethod
    def normalize_work_email(cls, v):
        """Lowercase and validate the work e-mail."""
        if v is None:
            return None
        v = v.strip().lower()
        if not v:
            return None
        if not EMAIL_PATTERN.match(v):
            raise ValueError(f"Invalid work email: {v}")
        return v

    @field_validator("personal_emails")
    @classmethod
    def unique_personal_emails(cls, v):
        """Drop duplicates while keeping first-seen order."""
        seen = []
        for email in v:
            if email and email not in seen:
                seen.append(email)
        return seen

    def email_key(self) -> Optional[str]:
        """Identity used for de-duplication: the lowercased work e-mail."""
        return self.work_email.lower() if self.work_email else None


class CompanyRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    domain: str = ""
    industry: str = ""
    size: str = ""


class Intent(BaseModel):
    """Exactly one classification of a prompt."""

    type: IntentType
    values: List[str] = Field(default_factory=list)
    command: Optional[str] = None
    count: Optional[int] = None


class OutreachDraft(BaseModel):
    prospect_id: str
    subject: str
    intro: str
    bullet_points: List[str] = Field(default_factory=list)
    closing: str


class DeliveryLogEntry(BaseModel):
    status: str
    to: str
    subject: str = ""
    error: Optional[str] = None


class RecentActivity(BaseModel):
    """One tracked e-mail event: a send, a quick-reply click, a bounce."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    prospect_id: Optional[str] = None
    email: str
    # sent | interested | more_info | unsubscribe | not_interested | bounced
    action: str
    sentiment: Optional[str] = None
    date: datetime = Field(default_factory=_utc_now)


class CampaignMetrics(BaseModel):
    emails_sent: int = 0
    replies_received: int = 0
    bounces: int = 0
    unsubscribed: int = 0
    interested_leads: int = 0
    not_interested: int = 0
    recent_activity: List[RecentActivity] = Field(default_factory=list)


class AssistantResponse(BaseModel):
    """Uniform envelope returned for every prompt."""

    text: str
    data: Optional[List[Dict[str, Any]]] = None
    metrics: Optional[CampaignMetrics] = None
    new_record_hint: Optional[ContactRecord] = None
    # Contacts produced by the request, merged into the session by the dispatcher
    contacts: List[ContactRecord] = Field(default_factory=list, exclude=True)


T = TypeVar("T")


@dataclass
class BatchResult(Generic[T]):
    """Ordered successes of a multi-target call plus its failures."""

    successes: List[T] = field(default_factory=list)
    failures: List[FailureRecord] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failures)
