"""
MongoDB Contact Repository

Stores contacts and e-mail activity in MongoDB through pymongo. Inserts are
upserts with $setOnInsert so an existing record is never overwritten.
"""

import logging
from typing import List, Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from leadgen.common.types import ContactRecord, RecentActivity

from .base import ContactRepositoryInterface, SaveResult

logger = logging.getLogger(__name__)


class MongoContactRepository(ContactRepositoryInterface):
    """
    MongoDB-backed contact repository.

    Connection Management:
    - Uses a class-level MongoClient for connection pooling
    - Client is created on first use and reused across requests

    Error Handling:
    - Fail-fast: connection and query errors propagate to caller
    - Duplicate-key races on insert are counted as skipped
    """

    _client: Optional[MongoClient] = None
    _db: Optional[Database] = None

    def __init__(
        self,
        mongodb_uri: str,
        database: str = "email_automator_db",
        collection: str = "prospects",
        activity_collection: str = "email_activity",
    ):
        self._mongodb_uri = mongodb_uri
        self._database_name = database
        self._collection_name = collection
        self._activity_collection_name = activity_collection
        self._indexes_ready = False

    def _get_db(self) -> Database:
        if MongoContactRepository._db is None:
            MongoContactRepository._client = MongoClient(self._mongodb_uri)
            MongoContactRepository._db = MongoContactRepository._client[self._database_name]
            logger.info(f"Mongo repository connected: {self._database_name}")
        return MongoContactRepository._db

    def _get_collection(self) -> Collection:
        collection = self._get_db()[self._collection_name]
        if not self._indexes_ready:
            collection.create_index([("id", ASCENDING)], unique=True)
            collection.create_index(
                [("work_email", ASCENDING)],
                unique=True,
                partialFilterExpression={"work_email": {"$type": "string"}},
            )
            self._indexes_ready = True
        return collection

    def _get_activity_collection(self) -> Collection:
        return self._get_db()[self._activity_collection_name]

    @staticmethod
    def _identity_filter(record: ContactRecord) -> dict:
        if record.work_email:
            return {"work_email": record.work_email}
        return {"id": record.id}

    def save(self, records: List[ContactRecord]) -> SaveResult:
        collection = self._get_collection()
        inserted = 0
        skipped = 0

        for record in records:
            try:
                result = collection.update_one(
                    self._identity_filter(record),
                    {"$setOnInsert": record.model_dump()},
                    upsert=True,
                )
            except DuplicateKeyError:
                skipped += 1
                continue

            if result.upserted_id is not None:
                inserted += 1
            else:
                skipped += 1

        logger.info(f"Saved contacts: {inserted} inserted, {skipped} already present")
        return SaveResult(inserted_count=inserted, skipped_count=skipped)

    def list(self) -> List[ContactRecord]:
        collection = self._get_collection()
        cursor = collection.find({}, {"_id": 0}).sort("created_at", DESCENDING)
        return [ContactRecord(**doc) for doc in cursor]

    def delete(self, record_id: str) -> bool:
        collection = self._get_collection()
        result = collection.delete_one({"id": record_id})
        return result.deleted_count > 0

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
        self._get_activity_collection().insert_one(activity.model_dump())
        return activity

    def list_activity(self, limit: int = 50) -> List[RecentActivity]:
        cursor = (
            self._get_activity_collection()
            .find({}, {"_id": 0})
            .sort("date", DESCENDING)
            .limit(limit)
        )
        return [RecentActivity(**doc) for doc in cursor]

    @classmethod
    def reset_connection(cls) -> None:
        """Close and reset the shared client. Used for testing."""
        if cls._client is not None:
            cls._client.close()
        cls._client = None
        cls._db = None
