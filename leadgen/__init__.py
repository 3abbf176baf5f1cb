"""
Lead-generation and outreach assistant.

Turns natural-language prompts into contact enrichment, people/company
search, web scraping for leads, and batched outreach e-mail.
"""

from version import __version__

__all__ = ["__version__"]
