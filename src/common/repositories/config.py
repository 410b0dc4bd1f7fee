"""
Repository Configuration and Factory

Builds the profile repository from environment configuration.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .base import ProfileRepositoryInterface

logger = logging.getLogger(__name__)


@dataclass
class RepositoryConfig:
    """
    Configuration for repository initialization.

    Loaded from environment variables with sensible defaults.
    """
    mongodb_uri: str
    database: str = "skill_sense"
    collection: str = "profiles"

    @classmethod
    def from_env(cls) -> "RepositoryConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - MONGODB_URI (required): MongoDB connection string
        - MONGODB_DATABASE: Database name
        - PROFILES_COLLECTION: Collection name

        Returns:
            RepositoryConfig instance

        Raises:
            ValueError: If MONGODB_URI is not set
        """
        mongodb_uri = os.getenv("MONGODB_URI")
        if not mongodb_uri:
            raise ValueError("MONGODB_URI environment variable is required")

        return cls(
            mongodb_uri=mongodb_uri,
            database=os.getenv("MONGODB_DATABASE", "skill_sense"),
            collection=os.getenv("PROFILES_COLLECTION", "profiles"),
        )


def create_profile_repository(config: Optional[RepositoryConfig] = None) -> ProfileRepositoryInterface:
    """
    Create a profile repository.

    Each call returns a new repository; callers own its lifetime and pass
    it to the services that need it.

    Args:
        config: Optional explicit config (defaults to RepositoryConfig.from_env())

    Returns:
        ProfileRepositoryInterface implementation

    Raises:
        ValueError: If MongoDB URI is not configured
    """
    config = config or RepositoryConfig.from_env()

    from .mongo_profile_repository import MongoProfileRepository
    repository = MongoProfileRepository(
        mongodb_uri=config.mongodb_uri,
        database=config.database,
        collection=config.collection,
    )
    logger.info(f"Initialized MongoDB profile repository ({config.database}.{config.collection})")
    return repository
