"""
Data Sources Module

Provides unified interfaces for the external providers the assistant reads from:
- ContactOut (profile/domain enrichment, people/company search)
- FireCrawl (web search and page content extraction)

Each provider implements an abstract base class so handlers can be tested with
fakes and providers can be swapped without touching handler code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass
class WebSearchHit:
    """One web search result."""
    url: str
    title: str = ""
    description: str = ""
    markdown: str = ""


class ContactProvider(ABC):
    """Abstract base class for enrichment and search providers."""

    @abstractmethod
    async def enrich_profile(self, linkedin_url: str) -> Dict[str, Any]:
        """
        Look up one person by profile URL.

        Returns:
            The provider's raw `profile` object
        """
        pass

    @abstractmethod
    async def enrich_domain(self, domain: str) -> List[Dict[str, Any]]:
        """
        Look up companies by domain.

        Returns:
            The provider's raw company objects
        """
        pass

    @abstractmethod
    async def search_people(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Run a people search and return raw profile objects."""
        pass

    @abstractmethod
    async def search_companies(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Run a company search and return raw company objects."""
        pass

    @abstractmethod
    def get_source_name(self) -> str:
        pass


class WebContentProvider(ABC):
    """Abstract base class for web search and page-to-text extraction."""

    @abstractmethod
    async def search(self, query: str, limit: int = 10) -> List[WebSearchHit]:
        pass

    @abstractmethod
    async def fetch_markdown(self, url: str) -> str:
        """Return the cleaned main content of `url` as markdown."""
        pass


# Import concrete implementations for convenience
from .contactout_source import ContactOutSource
from .firecrawl_source import FirecrawlSource
