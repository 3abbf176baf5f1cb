"""
Repository Configuration and Factory

Provides the factory that picks the contact repository implementation
based on environment configuration.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .base import ContactRepositoryInterface

logger = logging.getLogger(__name__)


@dataclass
class RepositoryConfig:
    """
    Configuration for repository initialization.

    Loaded from environment variables with sensible defaults.
    """
    mongodb_uri: Optional[str] = None
    database: str = "email_automator_db"
    collection: str = "prospects"
    activity_collection: str = "email_activity"

    @classmethod
    def from_env(cls) -> "RepositoryConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - MONGODB_URI: MongoDB connection string (in-memory store when unset)
        - MONGODB_DATABASE: Database name
        """
        return cls(
            mongodb_uri=os.getenv("MONGODB_URI") or None,
            database=os.getenv("MONGODB_DATABASE", "email_automator_db"),
        )


# Singleton repository instance
_repository_instance: Optional[ContactRepositoryInterface] = None


def get_contact_repository() -> ContactRepositoryInterface:
    """
    Get the contact repository instance.

    Returns MongoContactRepository when MONGODB_URI is set, otherwise an
    InMemoryContactRepository. Uses singleton pattern for connection pooling.
    """
    global _repository_instance

    if _repository_instance is None:
        config = RepositoryConfig.from_env()

        if config.mongodb_uri:
            from .mongo_repository import MongoContactRepository
            _repository_instance = MongoContactRepository(
                mongodb_uri=config.mongodb_uri,
                database=config.database,
                collection=config.collection,
                activity_collection=config.activity_collection,
            )
            logger.info("Initialized MongoDB contact repository")
        else:
            from .memory_repository import InMemoryContactRepository
            _repository_instance = InMemoryContactRepository()
            logger.warning("MONGODB_URI not set; contacts are kept in memory only")

    return _repository_instance


def reset_repository() -> None:
    """
    Reset the repository singleton.

    Used for testing or when configuration changes.
    """
    global _repository_instance

    if _repository_instance is not None:
        from .mongo_repository import MongoContactRepository
        if isinstance(_repository_instance, MongoContactRepository):
            MongoContactRepository.reset_connection()

    _repository_instance = None
    logger.info("Repository singleton reset")
