"""
Repository Pattern for Contact Storage

Public API:
- get_contact_repository(): Factory to get the contact repository instance
- ContactRepositoryInterface: Abstract interface for contact storage
- SaveResult: Result dataclass for bulk saves

Usage:
    from leadgen.common.repositories import get_contact_repository

    repo = get_contact_repository()
    result = repo.save(contacts)
    print(result.inserted_count)
"""

from .base import ContactRepositoryInterface, SaveResult
from .config import get_contact_repository, reset_repository, RepositoryConfig

__all__ = [
    "get_contact_repository",
    "reset_repository",
    "ContactRepositoryInterface",
    "SaveResult",
    "RepositoryConfig",
]
