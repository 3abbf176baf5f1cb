"""
In-memory contact repository, used when MongoDB is not configured and in tests.
"""

import threading
from typing import Dict, List, Optional

from leadgen.common.dedupe import normalize_email
from leadgen.common.types import ContactRecord, RecentActivity

from .base import ContactRepositoryInterface, SaveResult


class InMemoryContactRepository(ContactRepositoryInterface):
    """Process-local store with the same insert-if-absent semantics as Mongo."""

    def __init__(self):
        self._records: Dict[str, ContactRecord] = {}
        self._activity: List[RecentActivity] = []
        # save() runs in worker threads via the background persister
        self._lock = threading.Lock()

    def save(self, records: List[ContactRecord]) -> SaveResult:
        inserted = 0
        skipped = 0
        with self._lock:
            known_emails = {
                normalize_email(r.work_email) for r in self._records.values() if r.work_email
            }
            for record in records:
                email = normalize_email(record.work_email)
                if record.id in self._records or (email and email in known_emails):
                    skipped += 1
                    continue
                self._records[record.id] = record
                if email:
                    known_emails.add(email)
                inserted += 1
        return SaveResult(inserted_count=inserted, skipped_count=skipped)

    def list(self) -> List[ContactRecord]:
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def record_activity(
        self,
        email: str,
        action: str,
        prospect_id: Optional[str] = None,
        sentiment: Optional[str] = None,
    ) -> RecentActivity:
        activity = RecentActivity(
            email=email,
            action=action,
            prospect_id=prospect_id,
            sentiment=sentiment,
        )
        with self._lock:
            self._activity.append(activity)
        return activity

    def list_activity(self, limit: int = 50) -> List[RecentActivity]:
        with self._lock:
            activity = list(self._activity)
        activity.sort(key=lambda a: a.date, reverse=True)
        return activity[:limit]
