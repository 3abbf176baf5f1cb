"""
ContactOut Source

Profile enrichment, domain enrichment, and people/company search against the
ContactOut REST API. Every request goes through the retrying caller so 429 and
5xx responses are retried with Retry-After honoured.

API: https://api.contactout.com (auth via `token` header)
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from leadgen.common.config import Config
from leadgen.common.error_handling import MissingCredentialError
from leadgen.common.retry import api_call_with_retry

from . import ContactProvider

logger = logging.getLogger(__name__)


class ContactOutSource(ContactProvider):
    """ContactOut REST client."""

    ENRICH_INCLUDE = ["work_email", "personal_email", "phone"]

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key if api_key is not None else Config.CONTACTOUT_API_KEY
        self._base_url = (base_url or Config.CONTACTOUT_BASE_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else Config.HTTP_TIMEOUT_SECONDS
        self._client = client

    def get_source_name(self) -> str:
        return "contactout"

    def _headers(self) -> Dict[str, str]:
        if not self._api_key:
            raise MissingCredentialError("CONTACTOUT_API_KEY")
        return {
            "token": self._api_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = self._headers()
        url = f"{self._base_url}{path}"

        async def call() -> httpx.Response:
            if self._client is not None:
                response = await self._client.post(url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as http_client:
                    response = await http_client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            return response

        def on_retry(attempt: int, delay_ms: int) -> None:
            logger.warning(
                f"ContactOut {path} rate limited or unavailable. "
                f"Retrying in {delay_ms}ms... (Attempt {attempt}/{Config.RETRY_MAX_ATTEMPTS})"
            )

        response = await api_call_with_retry(call, on_retry=on_retry)
        data = response.json()
        return data if isinstance(data, dict) else {}

    async def enrich_profile(self, linkedin_url: str) -> Dict[str, Any]:
        payload = {"linkedin_url": linkedin_url, "include": self.ENRICH_INCLUDE}
        data = await self._post("/v1/people/enrich", payload)
        return data.get("profile") or {}

    async def enrich_domain(self, domain: str) -> List[Dict[str, Any]]:
        data = await self._post("/v1/domain/enrich", {"domains": [domain]})
        return list(data.get("companies") or [])

    async def search_people(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        data = await self._post("/v1/people/search", payload)
        profiles = data.get("profiles") or []
        # Keyed by profile URL in some API versions, a plain list in others
        if isinstance(profiles, dict):
            return list(profiles.values())
        return list(profiles)

    async def search_companies(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        data = await self._post("/v1/company/search", payload)
        companies = data.get("companies") or []
        if isinstance(companies, dict):
            return list(companies.values())
        return list(companies)
