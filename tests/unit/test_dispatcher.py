"""
Unit tests for the prompt dispatcher.

Handlers are mocked; the outreach generator is real with a mocked LLM and
sender so the send/preview paths run end to end.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from leadgen.assistant.dispatcher import UNKNOWN_INTENT_TEXT, AssistantContext, process_user_prompt
from leadgen.assistant.outreach import OutreachContentGenerator
from leadgen.assistant.session import ProspectSession
from leadgen.common.error_handling import MalformedAIResponseError
from leadgen.common.repositories.memory_repository import InMemoryContactRepository
from leadgen.common.types import AssistantResponse, Intent, OutreachDraft


def status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.contactout.com/v1/people/search")
    return httpx.HTTPStatusError(
        f"HTTP {status}", request=request, response=httpx.Response(status, request=request)
    )


@pytest.fixture
def classifier():
    classifier = MagicMock()
    classifier.classify = AsyncMock(return_value=Intent(type="unknown"))
    return classifier


@pytest.fixture
def context(classifier, mock_llm_client, mock_email_sender, tmp_path):
    enrichment = MagicMock()
    enrichment.enrich_profiles = AsyncMock(return_value=AssistantResponse(text="enriched"))
    enrichment.enrich_domains = AsyncMock(return_value=AssistantResponse(text="domains"))
    search = MagicMock()
    search.search = AsyncMock(return_value=AssistantResponse(text="searched"))
    web_scrape = MagicMock()
    web_scrape.scrape = AsyncMock(return_value=AssistantResponse(text="scraped"))
    repository = InMemoryContactRepository()

    return AssistantContext(
        classifier=classifier,
        enrichment=enrichment,
        search=search,
        web_scrape=web_scrape,
        outreach=OutreachContentGenerator(
            mock_llm_client, email_sender=mock_email_sender, repository=repository, quick_reply_base=""
        ),
        repository=repository,
        csv_path=str(tmp_path / "email.csv"),
    )


def command(name: str, count=None) -> Intent:
    return Intent(type="command", command=name, count=count)


class TestRouting:
    @pytest.mark.asyncio
    async def test_profile_intent(self, context, classifier):
        classifier.classify.return_value = Intent(type="enrich_by_profile", values=["linkedin.com/in/a"])

        response = await process_user_prompt("linkedin.com/in/a", ProspectSession(), context)

        assert response.text == "enriched"
        context.enrichment.enrich_profiles.assert_awaited_once_with(["linkedin.com/in/a"])

    @pytest.mark.asyncio
    async def test_domain_intent(self, context, classifier):
        classifier.classify.return_value = Intent(type="enrich_by_domain", values=["stripe.com"])

        await process_user_prompt("enrich stripe.com", ProspectSession(), context)

        context.enrichment.enrich_domains.assert_awaited_once_with(["stripe.com"])

    @pytest.mark.asyncio
    async def test_search_intent_gets_raw_prompt(self, context, classifier):
        classifier.classify.return_value = Intent(type="search")

        await process_user_prompt("CTOs in Berlin", ProspectSession(), context)

        context.search.search.assert_awaited_once_with("CTOs in Berlin")

    @pytest.mark.asyncio
    async def test_web_scrape_intent_gets_classified_target(self, context, classifier):
        classifier.classify.return_value = Intent(type="web_scrape", values=["https://acme.io/team"])

        await process_user_prompt("find contacts on https://acme.io/team", ProspectSession(), context)

        context.web_scrape.scrape.assert_awaited_once_with("https://acme.io/team")

    @pytest.mark.asyncio
    async def test_web_scrape_intent_without_values_gets_raw_prompt(self, context, classifier):
        classifier.classify.return_value = Intent(type="web_scrape")

        await process_user_prompt("top AI agencies in Pune", ProspectSession(), context)

        context.web_scrape.scrape.assert_awaited_once_with("top AI agencies in Pune")

    @pytest.mark.asyncio
    async def test_webscraping_mode_keeps_raw_prompt_for_web_scrape_intent(self, context, classifier):
        classifier.classify.return_value = Intent(type="web_scrape", values=["https://acme.io/team"])
        session = ProspectSession(data_source="webscraping")

        await process_user_prompt("find contacts on https://acme.io/team", session, context)

        context.web_scrape.scrape.assert_awaited_once_with("find contacts on https://acme.io/team")

    @pytest.mark.asyncio
    async def test_unknown_intent(self, context):
        response = await process_user_prompt("hello?", ProspectSession(), context)

        assert response.text == UNKNOWN_INTENT_TEXT

    @pytest.mark.asyncio
    async def test_webscraping_mode_overrides_non_commands(self, context, classifier):
        classifier.classify.return_value = Intent(type="search")
        session = ProspectSession(data_source="webscraping")

        response = await process_user_prompt("AI agencies in Pune", session, context)

        assert response.text == "scraped"
        context.web_scrape.scrape.assert_awaited_once_with("AI agencies in Pune")
        context.search.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_webscraping_mode_does_not_override_commands(self, context, classifier, make_contact):
        classifier.classify.return_value = command("show prospects")
        session = ProspectSession(data_source="webscraping", prospects=[make_contact(1)])

        response = await process_user_prompt("show prospects", session, context)

        assert response.text == "Here are the 1 prospects from your current session:"
        context.web_scrape.scrape.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_contacts_are_merged_into_session(self, context, classifier, make_contact):
        classifier.classify.return_value = Intent(type="search")
        existing = make_contact(1)
        context.search.search.return_value = AssistantResponse(
            text="found",
            contacts=[make_contact(9, work_email=existing.work_email.upper()), make_contact(2)],
        )
        session = ProspectSession(prospects=[existing])

        await process_user_prompt("people at company1", session, context)

        assert [p.id for p in session.prospects] == ["p1", "p2"]


class TestCommands:
    @pytest.mark.asyncio
    async def test_show_prospects(self, context, classifier, make_contact):
        classifier.classify.return_value = command("show prospects")
        session = ProspectSession(prospects=[make_contact(1), make_contact(2)])

        response = await process_user_prompt("show prospects", session, context)

        assert response.text == "Here are the 2 prospects from your current session:"
        assert [row["id"] for row in response.data] == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_send_emails_without_addresses(self, context, classifier, mock_email_sender, make_contact):
        """No prospect has an e-mail: fixed text and zero sends."""
        classifier.classify.return_value = command("send emails")
        session = ProspectSession(prospects=[make_contact(1, work_email=None), make_contact(2, work_email=None)])

        response = await process_user_prompt("send emails", session, context)

        assert response.text == "No prospects with valid emails found to send."
        mock_email_sender.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_generate_previews(self, context, classifier, mock_llm_client, make_contact):
        classifier.classify.return_value = command("generate previews", count=2)
        mock_llm_client.complete_json.return_value = {"emails": []}
        session = ProspectSession(prospects=[make_contact(i) for i in range(1, 6)])

        response = await process_user_prompt("generate previews for 2", session, context)

        assert response.text == "✅ Generated 2 email previews."
        assert len(response.data) == 2

    @pytest.mark.asyncio
    async def test_check_replies(self, context, classifier):
        context.repository.record_activity("a@x.com", "sent", "p1")
        context.repository.record_activity("a@x.com", "interested", "p1", "Interested")
        classifier.classify.return_value = command("check replies")

        response = await process_user_prompt("check replies", ProspectSession(), context)

        assert response.text == "✅ Reply check complete. Here's the latest campaign overview:"
        assert response.metrics.emails_sent == 1
        assert response.metrics.interested_leads == 1

    @pytest.mark.asyncio
    async def test_enrich_from_csv(self, context, classifier):
        with open(context.csv_path, "w", encoding="utf-8") as handle:
            handle.write("full_name,linkedin_url\nJane,https://linkedin.com/in/jane\nNo Url,\n")
        classifier.classify.return_value = command("enrich prospects from csv")

        await process_user_prompt("enrich prospects from csv", ProspectSession(), context)

        context.enrichment.enrich_profiles.assert_awaited_once_with(["https://linkedin.com/in/jane"])

    @pytest.mark.asyncio
    async def test_enrich_from_csv_without_urls(self, context, classifier):
        with open(context.csv_path, "w", encoding="utf-8") as handle:
            handle.write("full_name,email\nJane,jane@acme.com\n")
        classifier.classify.return_value = command("enrich prospects from csv")

        response = await process_user_prompt("enrich prospects from csv", ProspectSession(), context)

        assert response.text == "No LinkedIn URLs found in email.csv."
        context.enrichment.enrich_profiles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_command(self, context, classifier):
        classifier.classify.return_value = command("dance")

        response = await process_user_prompt("dance", ProspectSession(), context)

        assert response.text == "I received an unknown command: 'dance'. I'm not sure how to handle that."


class TestDraftCacheInvalidation:
    @pytest.fixture
    def cached_session(self, make_contact):
        session = ProspectSession(prospects=[make_contact(1)])
        session.draft_cache["p1"] = OutreachDraft(
            prospect_id="p1", subject="s", intro="i", bullet_points=[], closing="c"
        )
        return session

    @pytest.mark.asyncio
    async def test_other_commands_clear_cache(self, context, classifier, cached_session):
        classifier.classify.return_value = command("show prospects")

        await process_user_prompt("show prospects", cached_session, context)

        assert cached_session.draft_cache == {}

    @pytest.mark.asyncio
    async def test_non_command_prompts_clear_cache(self, context, classifier, cached_session):
        classifier.classify.return_value = Intent(type="search")

        await process_user_prompt("CTOs", cached_session, context)

        assert cached_session.draft_cache == {}

    @pytest.mark.asyncio
    async def test_send_uses_cache(self, context, classifier, mock_llm_client, mock_email_sender, cached_session):
        classifier.classify.return_value = command("send emails")

        response = await process_user_prompt("send emails", cached_session, context)

        assert response.text == "✅ Successfully sent 1 email(s)."
        mock_llm_client.complete_json.assert_not_awaited()
        assert mock_email_sender.send.await_args.args[1] == "s"
        assert cached_session.draft_cache == {}


class TestErrorMapping:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,expected",
        [
            (status_error(403), "An error occurred: You may be out of credits or do not have access to this endpoint."),
            (status_error(404), "No match found for your request."),
            (MalformedAIResponseError("bad"), "An error occurred: AI returned malformed output. Please try again."),
            (RuntimeError("socket closed"), "An error occurred: socket closed"),
        ],
    )
    async def test_handler_errors_become_text(self, context, classifier, error, expected):
        classifier.classify.return_value = Intent(type="search")
        context.search.search.side_effect = error

        response = await process_user_prompt("CTOs", ProspectSession(), context)

        assert response.text == expected

    @pytest.mark.asyncio
    async def test_classifier_errors_become_text(self, context, classifier):
        classifier.classify.side_effect = MalformedAIResponseError()

        response = await process_user_prompt("???", ProspectSession(), context)

        assert response.text == "An error occurred: AI returned malformed output. Please try again."

    @pytest.mark.asyncio
    async def test_missing_csv_becomes_text(self, context, classifier):
        classifier.classify.return_value = command("enrich prospects from csv")

        response = await process_user_prompt("enrich prospects from csv", ProspectSession(), context)

        assert response.text.startswith("An error occurred: ")
