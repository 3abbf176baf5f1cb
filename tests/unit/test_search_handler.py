"""
Unit tests for structured people/company search.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from leadgen.assistant.handlers.search import SearchHandler, is_company_search, is_people_search


@pytest.fixture
def provider():
    provider = MagicMock()
    provider.search_people = AsyncMock(return_value=[])
    provider.search_companies = AsyncMock(return_value=[])
    return provider


class TestSearchKindDetection:
    def test_people_keyword_in_prompt(self):
        assert is_people_search("find people at fintechs", {"industry": ["Fintech"]})

    def test_people_field_in_payload(self):
        assert is_people_search("CTOs in Berlin", {"job_title": ["CTO"], "location": ["Berlin"]})

    def test_company_search(self):
        payload = {"industry": ["Fintech"], "location": ["Berlin"]}
        assert is_company_search("fintech companies in Berlin", payload)
        assert not is_people_search("fintech companies in Berlin", payload)

    def test_people_takes_precedence_over_company(self):
        payload = {"job_title": ["CTO"], "domain": ["stripe.com"]}
        assert not is_company_search("CTO at stripe.com", payload)


class TestSearchHandler:
    @pytest.mark.asyncio
    async def test_people_search(self, provider, mock_llm_client):
        mock_llm_client.complete_json.return_value = {"job_title": ["CTO"], "location": ["Berlin"]}
        provider.search_people.return_value = [
            {
                "full_name": "Max Mustermann",
                "title": "CTO",
                "company": {"name": "Fintech GmbH"},
                "li_vanity": "max-mustermann",
                "contact_info": {"work_emails": ["max@fintech.de"], "phones": ["+49 1"]},
            },
            {"full_name": "Erika Musterfrau", "title": "CTO", "contact_info": {}},
        ]
        persister = MagicMock()
        handler = SearchHandler(provider, mock_llm_client, persister)

        response = await handler.search("CTOs in Berlin")

        sent_payload = provider.search_people.await_args.args[0]
        assert sent_payload["reveal_info"] is True
        assert sent_payload["limit"] == 10
        assert sent_payload["job_title"] == ["CTO"]
        assert response.text == "I found 2 new prospects from ContactOut based on your request:"
        assert [c.source for c in response.contacts] == ["contactout_search", "contactout_search"]
        assert response.contacts[0].work_email == "max@fintech.de"
        assert response.contacts[0].company == "Fintech GmbH"
        assert response.contacts[0].linkedin_url == "https://www.linkedin.com/in/max-mustermann"
        assert response.contacts[0].query == "CTOs in Berlin"
        persister.persist.assert_called_once_with(response.contacts)

    @pytest.mark.asyncio
    async def test_company_search(self, provider, mock_llm_client):
        mock_llm_client.complete_json.return_value = {"industry": ["Fintech"]}
        provider.search_companies.return_value = [
            {"name": "Fintech GmbH", "domain": "fintech.de", "industry": "Fintech", "size": "51-200"},
        ]

        response = await SearchHandler(provider, mock_llm_client).search("fintech companies")

        assert response.text == "I found 1 companies matching your request:"
        assert response.data[0]["domain"] == "fintech.de"
        assert response.contacts == []
        provider.search_people.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_undetermined_search(self, provider, mock_llm_client):
        mock_llm_client.complete_json.return_value = {"location": ["Berlin"]}

        response = await SearchHandler(provider, mock_llm_client).search("stuff in Berlin")

        assert response.text == (
            "I couldn't determine if you're looking for people or companies. Please be more specific."
        )
        provider.search_people.assert_not_awaited()
        provider.search_companies.assert_not_awaited()
