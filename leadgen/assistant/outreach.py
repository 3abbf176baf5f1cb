"""
Outreach Content Generator

Generates personalised e-mail drafts in batches (one LLM call per batch),
renders them into a fixed HTML skeleton, builds previews, and sends through
the outbound e-mail sender.

Draft lifecycle:
    generate previews -> drafts cached on the session
    send emails       -> cached drafts reused, missing ones generated, cache cleared
    any other command -> cache cleared by the dispatcher
"""

import asyncio
import html
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from pydantic import ValidationError

from leadgen.assistant.prompts import OUTREACH_SYSTEM_PROMPT, build_outreach_user_prompt
from leadgen.assistant.session import ProspectSession
from leadgen.common.batching import ProgressCallback, process_in_batches
from leadgen.common.config import Config
from leadgen.common.dedupe import email_domain
from leadgen.common.error_handling import ConfigurationError, MalformedAIResponseError
from leadgen.common.llm_factory import LLMJsonClient
from leadgen.common.logger import get_logger
from leadgen.common.repositories import ContactRepositoryInterface
from leadgen.common.types import AssistantResponse, ContactRecord, DeliveryLogEntry, OutreachDraft
from leadgen.services.email_sender import EmailSender

# Checked in order; first match wins
SECTOR_KEYWORDS: Dict[str, List[str]] = {
    "Education": [".edu", "academy", "school", "university"],
    "Health": ["health", "medical", ".med", "clinic", "hospital"],
    "Finance": ["finance", "bank", "invest", ".fi", "capital", "wealth"],
    "Technology": [".io", ".ai", ".tech", "software", "cloud", "solutions"],
    "Psychology": ["psych", "therapy", "therapist", "counsel", "mental"],
    "Retail": ["retail", "shop", "store", "commerce", "fashion", "trade"],
}

PREVIEW_BODY_CHARS = 150
GENERATION_FAILED_WARNING = "content generation failed"
NO_RECIPIENTS_TEXT = "No prospects with valid emails found to send."

FALLBACK_PARAGRAPHS = [
    "I'm reaching out to share an idea for improving operational workflows at your organization.",
    "Would you be open to a brief chat next week?",
]

QUICK_REPLY_LABELS = [
    ("interested", "I'm Interested", "#4CAF50"),
    ("more_info", "Send More Info", "#008CBA"),
]


def classify_sector(email: Optional[str], company: Optional[str]) -> str:
    """
    Sector from the e-mail domain or company name.

    Examples:
        >>> classify_sector("dean@stanford.edu", "Stanford")
        'Education'
        >>> classify_sector(None, "Acme Capital")
        'Finance'
    """
    domain = email_domain(email)
    company_name = (company or "").lower()
    for sector, keywords in SECTOR_KEYWORDS.items():
        if any(k in domain for k in keywords) or any(k in company_name for k in keywords):
            return sector
    return "Other"


def fallback_subject(prospect: ContactRecord) -> str:
    return f"An idea for {prospect.company or 'your company'}"


def render_email_text(prospect: ContactRecord, draft: Optional[OutreachDraft]) -> str:
    """Plain-text rendering, used for previews."""
    lines = [f"Hi {prospect.full_name or 'there'},", ""]
    if draft is None:
        for paragraph in FALLBACK_PARAGRAPHS:
            lines.extend([paragraph, ""])
    else:
        lines.extend([draft.intro, ""])
        lines.extend(f"- {point}" for point in draft.bullet_points)
        lines.extend(["", draft.closing, ""])
    lines.append(f"Best regards,\n{Config.SENDER_NAME}")
    return "\n".join(lines)


def _quick_reply_url(base: str, prospect: ContactRecord, action: str) -> str:
    query = urlencode({
        "prospectId": prospect.id,
        "prospectEmail": prospect.work_email or "",
        "action": action,
    })
    return f"{base}?{query}"


def render_signature_html(prospect: ContactRecord, sender_name: str, quick_reply_base: Optional[str]) -> str:
    parts = [
        '<div style="font-size: 14px; color: #555555; line-height: 1.4; font-family: Arial, sans-serif;">',
        f"Best regards,<br><strong>{html.escape(sender_name)}</strong>",
    ]
    if quick_reply_base:
        buttons = "".join(
            f'<a href="{html.escape(_quick_reply_url(quick_reply_base, prospect, action))}" '
            f'style="background-color: {color}; color: white; padding: 8px 12px; text-decoration: none; '
            f'border-radius: 4px; font-size: 12px; margin: 0 5px;" target="_blank">{label}</a>'
            for action, label, color in QUICK_REPLY_LABELS
        )
        unsubscribe = html.escape(_quick_reply_url(quick_reply_base, prospect, "unsubscribe"))
        parts.append(f'<p style="margin-top: 20px; text-align: center;">{buttons}</p>')
        parts.append(
            '<p style="margin-top: 20px; font-size: 12px; color: #888888; text-align: center;">'
            f'If you no longer wish to receive these emails, you can '
            f'<a href="{unsubscribe}" style="color: #888888;" target="_blank">unsubscribe here</a>.</p>'
        )
    parts.append("</div>")
    return "\n".join(parts)


def render_email_html(
    prospect: ContactRecord,
    draft: Optional[OutreachDraft],
    sender_name: Optional[str] = None,
    quick_reply_base: Optional[str] = None,
) -> str:
    """Substitute a draft (or the fallback) into the HTML e-mail skeleton."""
    greeting = f"<p>Hi {html.escape(prospect.full_name or 'there')},</p>"

    if draft is None:
        body = "".join(f"<p>{html.escape(p)}</p>" for p in FALLBACK_PARAGRAPHS)
    else:
        bullets = "".join(f"<li>{html.escape(point)}</li>" for point in draft.bullet_points)
        body = (
            f"<p>{html.escape(draft.intro)}</p>"
            f"<ul>{bullets}</ul>"
            f"<p>{html.escape(draft.closing)}</p>"
        )

    signature = render_signature_html(prospect, sender_name or Config.SENDER_NAME, quick_reply_base)
    return (
        '<div style="font-family: Arial, sans-serif; font-size: 14px; color: #222222;">'
        f"{greeting}{body}{signature}"
        "</div>"
    )


def _parse_drafts(payload: Dict[str, Any], batch_ids: set) -> List[OutreachDraft]:
    emails = payload.get("emails")
    if not isinstance(emails, list):
        raise MalformedAIResponseError("AI returned malformed output: missing 'emails' array")

    drafts = []
    for entry in emails:
        if not isinstance(entry, dict):
            raise MalformedAIResponseError("AI returned malformed output: draft is not an object")
        try:
            draft = OutreachDraft(**entry)
        except ValidationError as e:
            raise MalformedAIResponseError(f"AI returned malformed output: {e}") from e
        if draft.prospect_id in batch_ids:
            drafts.append(draft)
    return drafts


class OutreachContentGenerator:
    """Draft generation, rendering, previews and sending for one assistant."""

    def __init__(
        self,
        llm_client: LLMJsonClient,
        email_sender: Optional[EmailSender] = None,
        repository: Optional[ContactRepositoryInterface] = None,
        batch_size: Optional[int] = None,
        send_batch_size: Optional[int] = None,
        sender_name: Optional[str] = None,
        quick_reply_base: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        self.llm_client = llm_client
        self.email_sender = email_sender
        self.repository = repository
        self.batch_size = batch_size or Config.OUTREACH_BATCH_SIZE
        self.send_batch_size = send_batch_size or Config.SEND_BATCH_SIZE
        self.sender_name = sender_name or Config.SENDER_NAME
        self.quick_reply_base = quick_reply_base if quick_reply_base is not None else Config.get_quick_reply_base()
        self.logger = get_logger(__name__, session_id=session_id, component="outreach")

    classify_sector = staticmethod(classify_sector)

    async def generate_drafts(
        self,
        prospects: List[ContactRecord],
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, OutreachDraft]:
        """
        One LLM call per batch of prospects.

        Raises:
            MalformedAIResponseError: If any batch reply is off-contract (aborts the run)
        """
        system_prompt = OUTREACH_SYSTEM_PROMPT.format(sender_name=self.sender_name)

        async def process(batch: List[ContactRecord]) -> List[OutreachDraft]:
            items = [
                {
                    "prospect_id": p.id,
                    "name": p.full_name,
                    "role": p.role,
                    "company": p.company,
                    "sector": classify_sector(p.work_email, p.company),
                }
                for p in batch
            ]
            payload = await self.llm_client.complete_json(system_prompt, build_outreach_user_prompt(items))
            return _parse_drafts(payload, {p.id for p in batch})

        def progress(done: int, total: int) -> None:
            self.logger.info(f"Generated drafts for {done}/{total} prospects")
            if on_progress is not None:
                on_progress(done, total)

        drafts = await process_in_batches(prospects, self.batch_size, process, progress)
        return {draft.prospect_id: draft for draft in drafts}

    def render(self, prospect: ContactRecord, draft: Optional[OutreachDraft]) -> str:
        return render_email_html(prospect, draft, self.sender_name, self.quick_reply_base)

    async def build_previews(self, session: ProspectSession, count: Optional[int] = None) -> List[Dict[str, Any]]:
        """Draft the selected prospects (else the first few) and cache the drafts."""
        prospects = session.selected_prospects()
        if not prospects:
            prospects = session.prospects[: count or Config.PREVIEW_DEFAULT_COUNT]

        drafts = await self.generate_drafts(prospects)
        session.draft_cache.update(drafts)

        rows = []
        for prospect in prospects:
            draft = drafts.get(prospect.id)
            body = render_email_text(prospect, draft)
            rows.append({
                "prospect_id": prospect.id,
                "prospect_name": prospect.full_name,
                "email": prospect.work_email,
                "sector": classify_sector(prospect.work_email, prospect.company),
                "subject": draft.subject if draft else fallback_subject(prospect),
                "body": body[:PREVIEW_BODY_CHARS] + "...",
                "warning": None if draft else GENERATION_FAILED_WARNING,
            })
        return rows

    async def _send_one(self, prospect: ContactRecord, draft: Optional[OutreachDraft]) -> DeliveryLogEntry:
        subject = draft.subject if draft else fallback_subject(prospect)
        to = prospect.work_email or ""
        error = None
        log = self.logger.bind(prospect_id=prospect.id)
        try:
            sent = await self.email_sender.send(to, subject, self.render(prospect, draft))
        except ConfigurationError:
            raise
        except Exception as e:
            sent = False
            error = str(e)
            log.warning(f"Send to {to} failed: {e}")

        if not sent:
            return DeliveryLogEntry(status="❌ Failed", to=to, subject=subject, error=error or "send rejected")

        if self.repository is not None:
            try:
                await asyncio.to_thread(self.repository.record_activity, to, "sent", prospect.id)
            except Exception as e:
                log.error(f"Could not record send activity for {to}: {e}")
        return DeliveryLogEntry(status="✅ Sent", to=to, subject=subject)

    async def send_emails(self, session: ProspectSession) -> AssistantResponse:
        """Send to the selected prospects (else all) that have a work e-mail."""
        pool = session.selected_prospects() or session.prospects
        recipients = [p for p in pool if p.work_email]
        if not recipients:
            return AssistantResponse(text=NO_RECIPIENTS_TEXT)

        if self.email_sender is None:
            raise ConfigurationError("No outbound email sender is configured.")

        try:
            drafts = {p.id: session.draft_cache[p.id] for p in recipients if p.id in session.draft_cache}
            missing = [p for p in recipients if p.id not in drafts]
            self.logger.info(f"Sending {len(recipients)} email(s): {len(drafts)} cached draft(s), {len(missing)} to generate")
            if missing:
                drafts.update(await self.generate_drafts(missing))

            async def send_chunk(chunk: List[ContactRecord]) -> List[DeliveryLogEntry]:
                return list(await asyncio.gather(*(self._send_one(p, drafts.get(p.id)) for p in chunk)))

            log: List[DeliveryLogEntry] = await process_in_batches(
                recipients, self.send_batch_size, send_chunk
            )
        finally:
            session.clear_drafts()

        sent = sum(1 for entry in log if entry.status == "✅ Sent")
        failed = len(log) - sent
        if failed == 0:
            text = f"✅ Successfully sent {sent} email(s)."
        elif sent == 0:
            text = f"❌ Failed to send all {failed} email(s)."
        else:
            text = f"⚠️ Sent {sent} email(s); {failed} failed."

        return AssistantResponse(text=text, data=[entry.model_dump() for entry in log])
