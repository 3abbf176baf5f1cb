"""
Web scraping for leads.

Resolves candidate pages (the prompt itself when it is a URL, otherwise a web
search followed by an LLM deep dive over the results), extracts leads from
each page with the LLM, and keeps only leads that pass the quality rules in
validate_and_clean_leads.
"""

import asyncio
import re
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import ValidationError

from leadgen.assistant.handlers.normalizers import contact_from_scraped_lead
from leadgen.assistant.prompts import LEAD_EXTRACTION_SYSTEM_PROMPT, URL_DEEP_DIVE_SYSTEM_PROMPT
from leadgen.common.config import Config
from leadgen.common.dedupe import email_domain, normalize_email
from leadgen.common.error_handling import ConfigurationError
from leadgen.common.llm_factory import LLMJsonClient
from leadgen.common.logger import get_logger
from leadgen.common.persistence import BackgroundPersister
from leadgen.common.types import AssistantResponse, ContactRecord, is_valid_email
from leadgen.services.sources import WebContentProvider, WebSearchHit

SINGLE_URL_PATTERN = re.compile(r"^(https?://[^\s/$.?#].[^\s]*)$", re.IGNORECASE)
REQUESTED_COUNT_PATTERN = re.compile(r"\b(?:top|best|first)\s+(\d{1,3})\b", re.IGNORECASE)

GENERIC_EMAIL_PREFIXES = (
    "info@", "contact@", "support@", "admin@", "hello@", "team@",
    "admissions@", "placements@", "hr@", "jobs@", "media@", "press@",
)

# Per-hit content passed to the deep-dive prompt
SEARCH_HIT_CHAR_LIMIT = 2000


def website_domain(url: str) -> Optional[str]:
    """Hostname of `url` without a leading www., or None if unparseable."""
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    try:
        host = urlparse(candidate).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host[4:] if host.startswith("www.") else host


def validate_and_clean_leads(
    leads: List[ContactRecord],
    confidence_threshold: Optional[int] = None,
) -> List[ContactRecord]:
    """
    Keep only high-quality, unique leads.

    A lead survives when it has a real name, a confidence score at or above
    the threshold, a valid non-generic work e-mail whose domain matches its
    website (when one is given), and an e-mail not seen earlier in the list.
    """
    threshold = Config.LEAD_CONFIDENCE_THRESHOLD if confidence_threshold is None else confidence_threshold
    seen_emails = set()
    cleaned: List[ContactRecord] = []

    for lead in leads:
        name = (lead.full_name or "").strip()
        if not name or name.lower() == "n/a":
            continue

        if not lead.confidence_score or lead.confidence_score < threshold:
            continue

        work_email = normalize_email(lead.work_email)
        if not is_valid_email(work_email):
            continue

        if work_email.startswith(GENERIC_EMAIL_PREFIXES):
            continue

        if lead.websites:
            site_domain = website_domain(lead.websites[0].url)
            # An unparseable website skips the domain check
            if site_domain and email_domain(work_email) != site_domain:
                continue

        if work_email in seen_emails:
            continue

        seen_emails.add(work_email)
        cleaned.append(lead)

    return cleaned


def requested_count(prompt: str, default: int) -> int:
    """A number asked for in the prompt ("top 50 ..."), else `default`."""
    match = REQUESTED_COUNT_PATTERN.search(prompt)
    if match:
        value = int(match.group(1))
        if value > 0:
            return value
    return default


class WebScrapeHandler:
    """Finds pages for a prompt and extracts validated leads from them."""

    def __init__(
        self,
        web: WebContentProvider,
        llm_client: LLMJsonClient,
        persister: Optional[BackgroundPersister] = None,
        session_id: Optional[str] = None,
    ):
        self.web = web
        self.llm_client = llm_client
        self.persister = persister
        self.logger = get_logger(__name__, session_id=session_id, component="web_scrape")

    async def resolve_targets(self, prompt: str) -> List[str]:
        prompt = prompt.strip()
        if SINGLE_URL_PATTERN.match(prompt):
            return [prompt]

        max_urls = requested_count(prompt, Config.MAX_SCRAPE_TARGETS)
        hits = await self.web.search(prompt, limit=Config.MAX_SCRAPE_TARGETS)
        if not hits:
            self.logger.warning(f"Web search returned nothing for: {prompt}")
            return []

        payload = await self.llm_client.complete_json(
            URL_DEEP_DIVE_SYSTEM_PROMPT.format(max_urls=max_urls),
            self._deep_dive_input(prompt, hits),
        )
        urls = payload.get("urls") or []
        if not isinstance(urls, list):
            urls = []

        targets: List[str] = []
        for url in urls:
            if isinstance(url, str) and url.startswith(("http://", "https://")) and url not in targets:
                targets.append(url)
        targets = targets[:max_urls]
        self.logger.info(f"Deep dive resolved {len(targets)} target URL(s)")
        return targets

    @staticmethod
    def _deep_dive_input(prompt: str, hits: List[WebSearchHit]) -> str:
        sections = [f"User query: {prompt}", "", "Search results:"]
        for index, hit in enumerate(hits, start=1):
            sections.append(f"[{index}] {hit.title} - {hit.url}")
            if hit.description:
                sections.append(hit.description)
            if hit.markdown:
                sections.append(hit.markdown[:SEARCH_HIT_CHAR_LIMIT])
            sections.append("")
        return "\n".join(sections)

    async def extract_leads(self, url: str) -> List[ContactRecord]:
        """Fetch one page and ask the LLM for its leads."""
        content = await self.web.fetch_markdown(url)
        if not content.strip():
            self.logger.warning(f"No content extracted from {url}")
            return []

        page_text = content[:Config.PAGE_TEXT_CHAR_LIMIT]
        payload = await self.llm_client.complete_json(
            LEAD_EXTRACTION_SYSTEM_PROMPT,
            f"Source URL: {url}\n\n{page_text}",
            strict=False,
        )
        raw_leads = payload.get("leads") or []
        if not isinstance(raw_leads, list):
            return []

        leads = []
        for raw in raw_leads:
            if not isinstance(raw, dict):
                continue
            try:
                leads.append(contact_from_scraped_lead(raw, url))
            except ValidationError as e:
                self.logger.debug(f"Discarded unparseable lead from {url}: {e}")
        self.logger.info(f"Extracted {len(leads)} raw lead(s) from {url}")
        return leads

    async def _extract_or_skip(self, url: str) -> List[ContactRecord]:
        try:
            return await self.extract_leads(url)
        except ConfigurationError:
            raise
        except Exception as e:
            self.logger.warning(f"Failed to scrape {url}: {e}")
            return []

    async def scrape(self, prompt: str) -> AssistantResponse:
        targets = await self.resolve_targets(prompt)

        per_page = await asyncio.gather(*(self._extract_or_skip(url) for url in targets))
        raw_leads = [lead for leads in per_page for lead in leads]
        leads = validate_and_clean_leads(raw_leads)
        self.logger.info(f"{len(leads)} of {len(raw_leads)} lead(s) passed validation")

        if self.persister is not None:
            self.persister.persist(leads)

        if not leads:
            return AssistantResponse(
                text=(
                    f"⚠️ I searched for \"{prompt}\" but couldn't find any high-quality "
                    f"contact information on the resulting pages."
                )
            )

        return AssistantResponse(
            text=f"✅ I analyzed {len(targets)} page(s) and found {len(leads)} high-quality lead(s).",
            data=[lead.model_dump(mode="json") for lead in leads],
            contacts=leads,
        )
