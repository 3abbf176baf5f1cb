"""
Unit tests for web scraping: target resolution, extraction and lead cleaning.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from leadgen.assistant.handlers.web_scrape import (
    WebScrapeHandler,
    requested_count,
    validate_and_clean_leads,
    website_domain,
)
from leadgen.common.error_handling import MissingCredentialError
from leadgen.common.types import ContactRecord, Website
from leadgen.services.sources import WebSearchHit


def lead(name="Jane Doe", email="jane@acme.com", score=90, website="https://www.acme.com"):
    return ContactRecord(
        full_name=name,
        work_email=email,
        confidence_score=score,
        websites=[Website(url=website)] if website else [],
        source="ai_web_scrape",
    )


@pytest.fixture
def web():
    web = MagicMock()
    web.search = AsyncMock(return_value=[])
    web.fetch_markdown = AsyncMock(return_value="# Team\nJane Doe, CEO, jane@acme.com")
    return web


class TestValidateAndCleanLeads:
    def test_keeps_good_lead(self):
        assert len(validate_and_clean_leads([lead()])) == 1

    def test_drops_missing_or_placeholder_name(self):
        assert validate_and_clean_leads([lead(name=""), lead(name="N/A")]) == []

    def test_drops_low_confidence(self):
        assert validate_and_clean_leads([lead(score=59), lead(score=None)]) == []

    def test_threshold_is_inclusive(self):
        assert len(validate_and_clean_leads([lead(score=60)])) == 1

    def test_drops_generic_role_addresses(self):
        leads = [lead(email=f"{prefix}acme.com") for prefix in ("info@", "hr@", "press@", "team@")]
        assert validate_and_clean_leads(leads) == []

    def test_drops_missing_email(self):
        assert validate_and_clean_leads([lead(email=None)]) == []

    def test_email_domain_must_match_website(self):
        assert validate_and_clean_leads([lead(email="jane@gmail.com")]) == []

    def test_no_website_skips_domain_check(self):
        assert len(validate_and_clean_leads([lead(email="jane@gmail.com", website=None)])) == 1

    def test_dedupes_by_email(self):
        leads = [lead(name="Jane Doe"), lead(name="J. Doe", email="JANE@acme.com")]
        cleaned = validate_and_clean_leads(leads)
        assert [c.full_name for c in cleaned] == ["Jane Doe"]


class TestHelpers:
    def test_website_domain_strips_www(self):
        assert website_domain("https://www.acme.com/about") == "acme.com"
        assert website_domain("acme.com") == "acme.com"

    def test_requested_count(self):
        assert requested_count("top 5 AI agencies in Pune", 10) == 5
        assert requested_count("AI agencies in Pune", 10) == 10


class TestResolveTargets:
    @pytest.mark.asyncio
    async def test_single_url_prompt_is_the_target(self, web, mock_llm_client):
        handler = WebScrapeHandler(web, mock_llm_client)

        assert await handler.resolve_targets("https://acme.com/team") == ["https://acme.com/team"]
        web.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_then_deep_dive(self, web, mock_llm_client):
        web.search.return_value = [
            WebSearchHit(url="https://list.example.com", title="Top agencies", markdown="Acme, Globex"),
        ]
        mock_llm_client.complete_json.return_value = {
            "urls": ["https://acme.com/contact", "https://globex.com", "https://acme.com/contact", "not a url"],
        }
        handler = WebScrapeHandler(web, mock_llm_client)

        targets = await handler.resolve_targets("AI agencies in Pune")

        assert targets == ["https://acme.com/contact", "https://globex.com"]
        system_prompt, user_prompt = mock_llm_client.complete_json.await_args.args[:2]
        assert "10" in system_prompt
        assert "Acme, Globex" in user_prompt

    @pytest.mark.asyncio
    async def test_requested_count_caps_targets(self, web, mock_llm_client):
        web.search.return_value = [WebSearchHit(url="https://list.example.com", title="List")]
        mock_llm_client.complete_json.return_value = {
            "urls": [f"https://site{i}.com" for i in range(6)],
        }

        targets = await WebScrapeHandler(web, mock_llm_client).resolve_targets("top 2 agencies")

        assert targets == ["https://site0.com", "https://site1.com"]


class TestScrape:
    @pytest.mark.asyncio
    async def test_extracts_and_validates(self, web, mock_llm_client):
        mock_llm_client.complete_json.return_value = {
            "leads": [
                {"full_name": "Jane Doe", "role": "CEO", "work_email": "jane@acme.com",
                 "website": "https://acme.com", "confidence_score": 95},
                {"full_name": "Front Desk", "work_email": "info@acme.com",
                 "website": "https://acme.com", "confidence_score": 99},
            ]
        }
        persister = MagicMock()
        handler = WebScrapeHandler(web, mock_llm_client, persister)

        response = await handler.scrape("https://acme.com/team")

        assert response.text == "✅ I analyzed 1 page(s) and found 1 high-quality lead(s)."
        contact = response.contacts[0]
        assert contact.source == "ai_web_scrape"
        assert contact.source_details == "Scraped from https://acme.com/team"
        assert contact.query == "https://acme.com/team"
        assert mock_llm_client.complete_json.await_args.kwargs["strict"] is False
        persister.persist.assert_called_once_with([contact])

    @pytest.mark.asyncio
    async def test_page_text_is_truncated(self, web, mock_llm_client, monkeypatch):
        from leadgen.common.config import Config

        monkeypatch.setattr(Config, "PAGE_TEXT_CHAR_LIMIT", 20)
        web.fetch_markdown.return_value = "x" * 100
        mock_llm_client.complete_json.return_value = {"leads": []}

        await WebScrapeHandler(web, mock_llm_client).scrape("https://acme.com")

        user_prompt = mock_llm_client.complete_json.await_args.args[1]
        assert user_prompt.endswith("x" * 20)
        assert "x" * 21 not in user_prompt

    @pytest.mark.asyncio
    async def test_failed_page_is_skipped(self, web, mock_llm_client):
        web.search.return_value = [WebSearchHit(url="https://list.example.com", title="List")]
        web.fetch_markdown = AsyncMock(side_effect=[RuntimeError("timeout"), "Jane Doe jane@globex.com"])
        mock_llm_client.complete_json.side_effect = [
            {"urls": ["https://acme.com", "https://globex.com"]},
            {"leads": [{"full_name": "Jane Doe", "work_email": "jane@globex.com",
                        "website": "globex.com", "confidence_score": 80}]},
        ]

        response = await WebScrapeHandler(web, mock_llm_client).scrape("agencies")

        assert response.text == "✅ I analyzed 2 page(s) and found 1 high-quality lead(s)."

    @pytest.mark.asyncio
    async def test_missing_credentials_are_not_skipped(self, web, mock_llm_client):
        web.fetch_markdown = AsyncMock(side_effect=MissingCredentialError("FIRECRAWL_API_KEY"))

        with pytest.raises(MissingCredentialError):
            await WebScrapeHandler(web, mock_llm_client).scrape("https://acme.com")

    @pytest.mark.asyncio
    async def test_nothing_found(self, web, mock_llm_client):
        mock_llm_client.complete_json.return_value = {"leads": []}

        response = await WebScrapeHandler(web, mock_llm_client).scrape("https://acme.com")

        assert response.text == (
            '⚠️ I searched for "https://acme.com" but couldn\'t find any high-quality '
            "contact information on the resulting pages."
        )
        assert response.contacts == []
