"""
Per-intent handlers.

Each handler turns one classified intent into an AssistantResponse:
- EnrichmentHandler: LinkedIn profiles and company domains
- SearchHandler: structured people/company search
- WebScrapeHandler: lead extraction from web pages
"""

from leadgen.assistant.handlers.enrichment import EnrichmentHandler
from leadgen.assistant.handlers.search import SearchHandler
from leadgen.assistant.handlers.web_scrape import WebScrapeHandler, validate_and_clean_leads

__all__ = [
    "EnrichmentHandler",
    "SearchHandler",
    "WebScrapeHandler",
    "validate_and_clean_leads",
]
