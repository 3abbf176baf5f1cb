"""
Prompt Dispatcher

Entry point for one chat turn: classify the prompt, route it to the matching
handler or command, merge produced contacts into the session, and return an
AssistantResponse. Every exception is turned into chat text here; nothing
escapes to the caller.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from leadgen.assistant.classifier import IntentClassifier, LLMIntentClassifier
from leadgen.assistant.handlers import EnrichmentHandler, SearchHandler, WebScrapeHandler
from leadgen.assistant.outreach import OutreachContentGenerator
from leadgen.assistant.replies import check_replies
from leadgen.assistant.session import ProspectSession
from leadgen.common.config import Config
from leadgen.common.error_handling import friendly_error_message
from leadgen.common.llm_factory import LLMJsonClient
from leadgen.common.logger import get_logger
from leadgen.common.persistence import BackgroundPersister
from leadgen.common.repositories import ContactRepositoryInterface, get_contact_repository
from leadgen.common.types import AssistantResponse, Intent
from leadgen.services.csv_import import load_linkedin_urls_from_csv
from leadgen.services.email_sender import EmailSender, ResendEmailSender
from leadgen.services.sources import ContactOutSource, FirecrawlSource

UNKNOWN_INTENT_TEXT = (
    "I'm sorry, I don't understand that command. You can ask me to 'show prospects', "
    "enrich a LinkedIn URL, or search for people and companies."
)


@dataclass
class AssistantContext:
    """Collaborators shared by every prompt."""

    classifier: IntentClassifier
    enrichment: EnrichmentHandler
    search: SearchHandler
    web_scrape: WebScrapeHandler
    outreach: OutreachContentGenerator
    repository: ContactRepositoryInterface
    persister: Optional[BackgroundPersister] = None
    csv_path: str = field(default_factory=lambda: Config.PROSPECTS_CSV_PATH)


def build_default_context(
    repository: Optional[ContactRepositoryInterface] = None,
    email_sender: Optional[EmailSender] = None,
) -> AssistantContext:
    """
    Wire the production providers.

    Nothing here needs credentials; each client raises MissingCredentialError
    on first use when its key is absent.
    """
    repository = repository or get_contact_repository()
    persister = BackgroundPersister(repository)
    analytical_llm = LLMJsonClient(temperature=Config.ANALYTICAL_TEMPERATURE)
    creative_llm = LLMJsonClient(temperature=Config.CREATIVE_TEMPERATURE)
    contactout = ContactOutSource()

    return AssistantContext(
        classifier=LLMIntentClassifier(analytical_llm),
        enrichment=EnrichmentHandler(contactout, persister),
        search=SearchHandler(contactout, analytical_llm, persister),
        web_scrape=WebScrapeHandler(FirecrawlSource(), analytical_llm, persister),
        outreach=OutreachContentGenerator(
            creative_llm,
            email_sender=email_sender or ResendEmailSender(),
            repository=repository,
        ),
        repository=repository,
        persister=persister,
    )


async def _run_command(intent: Intent, session: ProspectSession, context: AssistantContext) -> AssistantResponse:
    command = intent.command or ""

    if command == "show prospects":
        return AssistantResponse(
            text=f"Here are the {len(session.prospects)} prospects from your current session:",
            data=[p.model_dump(mode="json") for p in session.prospects],
        )

    if command == "generate previews":
        rows = await context.outreach.build_previews(session, count=intent.count)
        return AssistantResponse(text=f"✅ Generated {len(rows)} email previews.", data=rows)

    if command == "send emails":
        return await context.outreach.send_emails(session)

    if command == "check replies":
        return await check_replies(context.repository)

    if command == "enrich prospects from csv":
        urls = await asyncio.to_thread(load_linkedin_urls_from_csv, context.csv_path)
        if not urls:
            return AssistantResponse(text=f"No LinkedIn URLs found in {Path(context.csv_path).name}.")
        return await context.enrichment.enrich_profiles(urls)

    return AssistantResponse(
        text=f"I received an unknown command: '{command}'. I'm not sure how to handle that."
    )


async def _route(intent: Intent, prompt: str, session: ProspectSession, context: AssistantContext) -> AssistantResponse:
    if intent.type == "command":
        return await _run_command(intent, session, context)

    # Web-scraping mode sends every non-command prompt to the scraper as typed
    if session.data_source == "webscraping":
        return await context.web_scrape.scrape(prompt)

    if intent.type == "enrich_by_profile":
        return await context.enrichment.enrich_profiles(intent.values)
    if intent.type == "enrich_by_domain":
        return await context.enrichment.enrich_domains(intent.values)
    if intent.type == "search":
        return await context.search.search(prompt)
    if intent.type == "web_scrape":
        return await context.web_scrape.scrape(intent.values[0] if intent.values else prompt)

    return AssistantResponse(text=UNKNOWN_INTENT_TEXT)


async def process_user_prompt(
    prompt: str,
    session: ProspectSession,
    context: AssistantContext,
) -> AssistantResponse:
    """
    Handle one prompt end to end.

    Args:
        prompt: Free-text user input
        session: Working state for this conversation (mutated in place)
        context: Shared handlers and stores

    Returns:
        AssistantResponse; errors are reported through its text
    """
    logger = get_logger(__name__, session_id=session.session_id, component="dispatcher")

    try:
        intent = await context.classifier.classify(prompt)
        logger = logger.bind(intent=intent.type)
        logger.info(f"Intent: {intent.type}" + (f" ({intent.command})" if intent.command else ""))

        # Drafts survive only from "generate previews" into "send emails"
        if intent.command != "send emails":
            session.clear_drafts()

        response = await _route(intent, prompt, session, context)
    except Exception as e:
        logger.error(f"Prompt failed: {type(e).__name__}: {e}")
        return AssistantResponse(text=friendly_error_message(e))

    if response.contacts:
        added = session.add_prospects(response.contacts)
        logger.info(f"Added {added} new prospect(s) to the session")

    return response
