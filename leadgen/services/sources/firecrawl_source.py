"""
FireCrawl Source

Web search and clean page-to-markdown extraction through the FireCrawl SDK.
The SDK is synchronous, so each call runs in a worker thread.
"""

import asyncio
import logging
from typing import Any, List, Optional

from firecrawl import FirecrawlApp

from leadgen.common.config import Config
from leadgen.common.error_handling import MissingCredentialError
from leadgen.common.retry import api_call_with_retry

from . import WebContentProvider, WebSearchHit

logger = logging.getLogger(__name__)


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read `name` from a pydantic-style object or a dict."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        value = obj.get(name, default)
    else:
        value = getattr(obj, name, default)
    return default if value is None else value


def _extract_search_results(search_response: Any) -> List[Any]:
    """
    Normalize FireCrawl search responses across SDK versions into a list of result objects.

    Supports:
      - New client: response.web (list of objects with .url / .markdown)
      - Older client: response.data
      - Dict responses: {"web": [...]} or {"data": [...]}
      - Bare lists: [ {...}, {...} ]
    """
    if not search_response:
        return []

    results = getattr(search_response, "web", None)
    if results is None and hasattr(search_response, "data"):
        results = getattr(search_response, "data", None)

    if results is None and isinstance(search_response, dict):
        results = (
            search_response.get("web")
            or search_response.get("data")
            or search_response.get("results")
        )

    if results is None and isinstance(search_response, list):
        results = search_response

    return results or []


def _extract_markdown(scrape_response: Any) -> str:
    """Pull markdown out of a scrape response (object, dict, or {"data": {...}})."""
    markdown = _field(scrape_response, "markdown")
    if markdown is None:
        markdown = _field(_field(scrape_response, "data"), "markdown")
    return markdown or ""


class FirecrawlSource(WebContentProvider):
    """FireCrawl-backed search and content extraction."""

    def __init__(self, api_key: Optional[str] = None, app: Optional[Any] = None):
        self._api_key = api_key if api_key is not None else Config.FIRECRAWL_API_KEY
        self._app = app

    @property
    def app(self) -> Any:
        if self._app is None:
            if not self._api_key:
                raise MissingCredentialError("FIRECRAWL_API_KEY")
            self._app = FirecrawlApp(api_key=self._api_key)
        return self._app

    async def search(self, query: str, limit: int = 10) -> List[WebSearchHit]:
        app = self.app
        logger.info(f"[FireCrawl] Search: {query[:80]}")
        response = await api_call_with_retry(
            lambda: asyncio.to_thread(app.search, query, limit=limit)
        )

        hits = []
        for result in _extract_search_results(response):
            url = _field(result, "url", "")
            if not url:
                continue
            hits.append(
                WebSearchHit(
                    url=url,
                    title=_field(result, "title", ""),
                    description=_field(result, "description", ""),
                    markdown=_field(result, "markdown", ""),
                )
            )
        logger.info(f"[FireCrawl] Got {len(hits)} results")
        return hits

    async def fetch_markdown(self, url: str) -> str:
        app = self.app
        response = await api_call_with_retry(
            lambda: asyncio.to_thread(
                app.scrape, url, formats=["markdown"], only_main_content=True
            )
        )
        markdown = _extract_markdown(response)
        logger.debug(f"[FireCrawl] Scraped {url}: {len(markdown)} chars")
        return markdown
