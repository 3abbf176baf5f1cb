"""
Structured people/company search.

The LLM turns the prompt into a ContactOut search payload; keywords in the
prompt and the payload's fields decide whether it is a people or a company
search.
"""

from typing import Any, Dict, Optional

from leadgen.assistant.handlers.normalizers import company_from_provider, contact_from_search
from leadgen.assistant.prompts import SEARCH_PAYLOAD_SYSTEM_PROMPT
from leadgen.common.llm_factory import LLMJsonClient
from leadgen.common.logger import get_logger
from leadgen.common.persistence import BackgroundPersister
from leadgen.common.types import AssistantResponse
from leadgen.services.sources import ContactProvider

PEOPLE_KEYWORDS = ("people", "prospects")
PEOPLE_FIELDS = ("job_title", "skills", "seniority", "name", "education")
COMPANY_FIELDS = ("industry", "domain")
PEOPLE_SEARCH_LIMIT = 10

UNDETERMINED_SEARCH_TEXT = (
    "I couldn't determine if you're looking for people or companies. Please be more specific."
)


def is_people_search(prompt: str, payload: Dict[str, Any]) -> bool:
    lowered = prompt.lower()
    return any(k in lowered for k in PEOPLE_KEYWORDS) or any(f in payload for f in PEOPLE_FIELDS)


def is_company_search(prompt: str, payload: Dict[str, Any]) -> bool:
    return any(f in payload for f in COMPANY_FIELDS) and not is_people_search(prompt, payload)


class SearchHandler:
    """Runs LLM-structured searches against a ContactProvider."""

    def __init__(
        self,
        provider: ContactProvider,
        llm_client: LLMJsonClient,
        persister: Optional[BackgroundPersister] = None,
        session_id: Optional[str] = None,
    ):
        self.provider = provider
        self.llm_client = llm_client
        self.persister = persister
        self.logger = get_logger(__name__, session_id=session_id, component="search")

    async def build_payload(self, prompt: str) -> Dict[str, Any]:
        payload = await self.llm_client.complete_json(SEARCH_PAYLOAD_SYSTEM_PROMPT, prompt)
        self.logger.debug(f"Search payload: {payload}")
        return payload

    async def search(self, prompt: str) -> AssistantResponse:
        payload = await self.build_payload(prompt)

        if is_people_search(prompt, payload):
            payload = {**payload, "reveal_info": True, "limit": PEOPLE_SEARCH_LIMIT}
            profiles = await self.provider.search_people(payload)
            contacts = [contact_from_search(p, query=prompt) for p in profiles]
            self.logger.info(f"People search returned {len(contacts)} profile(s)")

            if self.persister is not None:
                self.persister.persist(contacts)

            return AssistantResponse(
                text=f"I found {len(contacts)} new prospects from ContactOut based on your request:",
                data=[c.model_dump(mode="json") for c in contacts],
                contacts=contacts,
            )

        if is_company_search(prompt, payload):
            raw_companies = await self.provider.search_companies(payload)
            companies = [company_from_provider(c) for c in raw_companies]
            self.logger.info(f"Company search returned {len(companies)} company(ies)")
            return AssistantResponse(
                text=f"I found {len(companies)} companies matching your request:",
                data=[c.model_dump(mode="json") for c in companies],
            )

        return AssistantResponse(text=UNDETERMINED_SEARCH_TEXT)
