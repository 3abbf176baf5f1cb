"""
Unit tests for profile and domain enrichment.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from leadgen.assistant.dispatcher import AssistantContext, process_user_prompt
from leadgen.assistant.handlers.enrichment import EnrichmentHandler, summarize_enrichment
from leadgen.assistant.session import ProspectSession
from leadgen.common.error_handling import MissingCredentialError
from leadgen.common.types import Intent
from leadgen.services.sources import ContactOutSource

PROFILE_URL = "https://www.linkedin.com/in/jane-doe"


def enrich_profile_response(**overrides):
    profile = {
        "full_name": "Jane Doe",
        "headline": "VP Engineering",
        "company": {"name": "Acme"},
        "location": "Germany",
        "work_email": ["Jane.Doe@Acme.com"],
        "personal_email": ["jane@gmail.com"],
        "phone": ["+49 30 1234567"],
    }
    profile.update(overrides)
    return profile


def not_found() -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.contactout.com/v1/people/enrich")
    return httpx.HTTPStatusError(
        "Not Found", request=request, response=httpx.Response(404, request=request)
    )


@pytest.fixture
def provider():
    provider = MagicMock()
    provider.enrich_profile = AsyncMock(return_value=enrich_profile_response())
    provider.enrich_domain = AsyncMock(return_value=[])
    return provider


@pytest.fixture
def persister():
    persister = MagicMock()
    persister.persist = MagicMock()
    return persister


class TestSummarizeEnrichment:
    def test_all_failed(self):
        assert summarize_enrichment(0, 2, "profiles") == (
            "Sorry, I couldn't enrich any of the provided profiles. Please check the logs for errors."
        )

    def test_all_succeeded(self):
        assert summarize_enrichment(2, 0, "profiles") == (
            "✅ Enrichment complete. Successfully processed 2 item(s)."
        )

    def test_partial(self):
        assert summarize_enrichment(1, 1, "domains") == (
            "✅ Enrichment complete. Successfully processed 1 item(s). Failed to process 1 item(s)."
        )


class TestEnrichProfiles:
    @pytest.mark.asyncio
    async def test_single_profile_url(self, provider, persister):
        """One URL yields exactly one contact tagged with its source URL."""
        handler = EnrichmentHandler(provider, persister)

        response = await handler.enrich_profiles([PROFILE_URL])

        assert response.text == "✅ Enrichment complete. Successfully processed 1 item(s)."
        assert len(response.contacts) == 1
        contact = response.contacts[0]
        assert contact.full_name == "Jane Doe"
        assert contact.work_email == "jane.doe@acme.com"
        assert contact.company == "Acme"
        assert contact.source == "contactout_enrichment"
        assert contact.source_details == PROFILE_URL
        assert response.new_record_hint == contact
        assert response.data[0]["source_details"] == PROFILE_URL
        persister.persist.assert_called_once_with([contact])

    @pytest.mark.asyncio
    async def test_partial_failure_is_counted(self, provider, persister):
        provider.enrich_profile = AsyncMock(side_effect=[enrich_profile_response(), not_found()])
        handler = EnrichmentHandler(provider, persister)

        result = await handler.enrich_profile_records([PROFILE_URL, "linkedin.com/in/missing"])

        assert len(result.successes) == 1
        assert result.failure_count == 1
        assert result.failures[0].item == "linkedin.com/in/missing"
        assert result.failures[0].exception_type == "HTTPStatusError"

    @pytest.mark.asyncio
    async def test_all_failed(self, provider, persister):
        provider.enrich_profile = AsyncMock(side_effect=not_found())
        handler = EnrichmentHandler(provider, persister)

        response = await handler.enrich_profiles([PROFILE_URL])

        assert response.text.startswith("Sorry, I couldn't enrich any of the provided profiles.")
        assert response.contacts == []
        persister.persist.assert_not_called()

    @pytest.mark.asyncio
    async def test_profile_without_contact_details_still_builds(self, provider):
        provider.enrich_profile = AsyncMock(
            return_value={"full_name": "No Contact", "work_email": [], "phone": None}
        )

        response = await EnrichmentHandler(provider).enrich_profiles([PROFILE_URL])

        assert response.contacts[0].full_name == "No Contact"
        assert response.contacts[0].work_email is None

    @pytest.mark.asyncio
    async def test_requests_run_concurrently(self, provider):
        """Every URL is requested, in input order."""
        urls = [f"linkedin.com/in/person-{i}" for i in range(4)]

        await EnrichmentHandler(provider).enrich_profiles(urls)

        assert [c.args[0] for c in provider.enrich_profile.await_args_list] == urls

    @pytest.mark.asyncio
    async def test_missing_api_key_is_raised_not_counted(self, persister):
        handler = EnrichmentHandler(ContactOutSource(api_key=""), persister)

        with pytest.raises(MissingCredentialError):
            await handler.enrich_profiles([PROFILE_URL, "linkedin.com/in/other"])

        persister.persist.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_api_key_reaches_the_user(self):
        classifier = MagicMock()
        classifier.classify = AsyncMock(return_value=Intent(type="enrich_by_profile", values=[PROFILE_URL]))
        context = AssistantContext(
            classifier=classifier,
            enrichment=EnrichmentHandler(ContactOutSource(api_key="")),
            search=MagicMock(),
            web_scrape=MagicMock(),
            outreach=MagicMock(),
            repository=MagicMock(),
        )

        response = await process_user_prompt(PROFILE_URL, ProspectSession(), context)

        assert response.text == (
            "An error occurred: CONTACTOUT_API_KEY is not configured. Please check your .env file."
        )

    @pytest.mark.asyncio
    async def test_missing_api_key_on_domains(self):
        handler = EnrichmentHandler(ContactOutSource(api_key=""))

        with pytest.raises(MissingCredentialError):
            await handler.enrich_domains(["stripe.com"])


class TestEnrichDomains:
    @pytest.mark.asyncio
    async def test_companies_are_flattened(self, provider):
        provider.enrich_domain = AsyncMock(side_effect=[
            [{"name": "Stripe", "domain": "stripe.com", "industry": "Payments"}],
            [{"name": "Notion", "domain": "notion.so"}, {"name": "Notion Labs", "domain": "notion.so"}],
        ])

        response = await EnrichmentHandler(provider).enrich_domains(["stripe.com", "notion.so"])

        assert response.text == "✅ Enrichment complete. Successfully processed 3 item(s)."
        assert [c["name"] for c in response.data] == ["Stripe", "Notion", "Notion Labs"]
        assert response.contacts == []
