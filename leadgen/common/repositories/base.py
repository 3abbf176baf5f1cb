"""
Repository Interface Definitions

Defines the abstract interface for contact storage and e-mail activity
tracking. Enables swapping implementations (MongoDB, in-memory) without
changing consumer code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from leadgen.common.types import ContactRecord, RecentActivity


@dataclass
class SaveResult:
    """
    Result of a bulk save.

    Attributes:
        inserted_count: Number of records that were new
        skipped_count: Number of records that already existed (by e-mail or id)
    """
    inserted_count: int
    skipped_count: int = 0


class ContactRepositoryInterface(ABC):
    """
    Abstract interface for durable contact storage.

    Implementations:
    - MongoContactRepository: MongoDB via pymongo
    - InMemoryContactRepository: process-local, for tests and keyless runs

    Saving is insert-if-absent keyed by work e-mail, or by id when a record
    has no e-mail. A conflicting record is skipped, never an error.
    """

    @abstractmethod
    def save(self, records: List[ContactRecord]) -> SaveResult:
        """
        Insert records that are not stored yet.

        Args:
            records: Contacts to store

        Returns:
            SaveResult with the number of newly inserted records
        """
        pass

    @abstractmethod
    def list(self) -> List[ContactRecord]:
        """Return every stored contact, newest first."""
        pass

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """
        Delete a contact by id.

        Returns:
            True if a record was removed, False if none matched
        """
        pass

    @abstractmethod
    def record_activity(
        self,
        email: str,
        action: str,
        prospect_id: Optional[str] = None,
        sentiment: Optional[str] = None,
    ) -> RecentActivity:
        """Store one e-mail activity event and return it."""
        pass

    @abstractmethod
    def list_activity(self, limit: int = 50) -> List[RecentActivity]:
        """Return the most recent activity events, newest first."""
        pass
