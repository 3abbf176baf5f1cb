"""
Reply tracking: campaign metrics from stored e-mail activity, and the
quick-reply links embedded in every outgoing e-mail.
"""

import asyncio
import html
from dataclasses import dataclass
from typing import Dict, List, Optional

from leadgen.common.config import Config
from leadgen.common.logger import get_logger
from leadgen.common.repositories import ContactRepositoryInterface
from leadgen.common.types import AssistantResponse, CampaignMetrics, RecentActivity
from leadgen.services.email_sender import EmailSender

# Quick-reply action -> recorded sentiment
QUICK_REPLY_SENTIMENTS: Dict[str, str] = {
    "interested": "Interested",
    "more_info": "More Info Requested",
    "unsubscribe": "Unsubscribed",
}

REPLY_ACTIONS = ("interested", "more_info", "not_interested")
METRICS_SCAN_LIMIT = 1000
RECENT_ACTIVITY_COUNT = 10

REPLY_CHECK_TEXT = "✅ Reply check complete. Here's the latest campaign overview:"


class InvalidQuickReplyError(ValueError):
    """Quick-reply request with missing or unknown parameters."""


def build_campaign_metrics(activity: List[RecentActivity], recent_count: int = RECENT_ACTIVITY_COUNT) -> CampaignMetrics:
    """Aggregate activity events (newest first) into campaign counters."""
    metrics = CampaignMetrics()
    for event in activity:
        if event.action == "sent":
            metrics.emails_sent += 1
        elif event.action == "bounced":
            metrics.bounces += 1
        elif event.action == "unsubscribe":
            metrics.unsubscribed += 1
        if event.action in REPLY_ACTIONS:
            metrics.replies_received += 1
        if event.sentiment == "Interested":
            metrics.interested_leads += 1
        elif event.sentiment == "Not Interested" or event.action == "not_interested":
            metrics.not_interested += 1

    metrics.recent_activity = [e for e in activity if e.action != "sent"][:recent_count]
    return metrics


async def check_replies(repository: ContactRepositoryInterface) -> AssistantResponse:
    activity = await asyncio.to_thread(repository.list_activity, METRICS_SCAN_LIMIT)
    metrics = build_campaign_metrics(activity)
    return AssistantResponse(text=REPLY_CHECK_TEXT, metrics=metrics)


@dataclass
class FollowUpEmail:
    subject: str
    html: str


def build_follow_up(action: str, meeting_link: Optional[str] = None, website: Optional[str] = None) -> FollowUpEmail:
    """Follow-up content sent after a quick-reply click."""
    sender = html.escape(Config.SENDER_NAME)
    signature = f"<p>Best regards,<br><strong>{sender}</strong></p>"
    meeting_link = meeting_link if meeting_link is not None else Config.MEETING_LINK
    website = website if website is not None else Config.COMPANY_WEBSITE

    if action == "interested":
        if meeting_link:
            booking = (
                f'<p>You can book a time that works for you here: '
                f'<a href="{html.escape(meeting_link)}">Schedule a meeting</a></p>'
            )
        else:
            booking = "<p>Reply to this email with a few times that work for you and we'll set it up.</p>"
        return FollowUpEmail(
            subject="Great! Let's schedule a meeting.",
            html=f"<p>Thank you for your interest!</p>{booking}{signature}",
        )

    if action == "more_info":
        return FollowUpEmail(
            subject=f"Here's more information about {sender}",
            html=(
                "<p>Thanks for asking! We help teams automate repetitive workflows with AI.</p>"
                f'<p>You can find an overview of what we do at <a href="{html.escape(website)}">{html.escape(website)}</a>.</p>'
                f"{signature}"
            ),
        )

    return FollowUpEmail(
        subject="Unsubscribe Confirmation",
        html=f"<p>You have been unsubscribed and will not receive further emails from us.</p>{signature}",
    )


def confirmation_page(action: str) -> str:
    """HTML shown in the browser after a quick-reply click."""
    if action == "interested":
        message = "Thank you for your interest! A follow-up email with a meeting link has been sent to your inbox."
    else:
        message = "Thank you. Your response has been recorded."
    return (
        '<html><body style="font-family: Arial, sans-serif; text-align: center; padding-top: 50px;">'
        f"<h2>{message}</h2>"
        "</body></html>"
    )


class QuickReplyService:
    """Records a quick-reply click and sends the matching follow-up."""

    def __init__(
        self,
        repository: ContactRepositoryInterface,
        email_sender: Optional[EmailSender] = None,
    ):
        self.repository = repository
        self.email_sender = email_sender
        self.logger = get_logger(__name__, component="quick_reply")

    async def handle(self, prospect_id: Optional[str], prospect_email: Optional[str], action: Optional[str]) -> str:
        """
        Returns:
            Confirmation page HTML

        Raises:
            InvalidQuickReplyError: If a parameter is missing or the action is unknown
        """
        if not prospect_id or not prospect_email or not action:
            raise InvalidQuickReplyError("Missing required parameters for quick reply action.")
        if action not in QUICK_REPLY_SENTIMENTS:
            raise InvalidQuickReplyError(f"Unknown quick reply action: {action}")
        log = self.logger.bind(prospect_id=prospect_id)

        await asyncio.to_thread(
            self.repository.record_activity,
            prospect_email,
            action,
            prospect_id,
            QUICK_REPLY_SENTIMENTS[action],
        )
        log.info(f"Recorded '{action}' from {prospect_email}")

        if self.email_sender is not None:
            follow_up = build_follow_up(action)
            try:
                sent = await self.email_sender.send(prospect_email, follow_up.subject, follow_up.html)
            except Exception as e:
                # The click is already recorded; a failed follow-up must not fail the page
                log.error(f"Follow-up email to {prospect_email} failed: {e}")
                sent = True
            if not sent:
                log.warning(f"Follow-up email to {prospect_email} was not sent")

        return confirmation_page(action)
