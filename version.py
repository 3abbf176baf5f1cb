"""
Version information for the lead-generation assistant.

This file is the single source of truth for version numbers.
Both the package and the API health check import from here.
"""

__version__ = "0.3.0"
__version_info__ = (0, 3, 0)
