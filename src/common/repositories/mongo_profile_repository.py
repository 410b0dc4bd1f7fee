"""
MongoDB Profile Repository

Wraps the profiles collection behind ProfileRepositoryInterface.
"""

import logging
from typing import Any, Dict, Optional

from pymongo import MongoClient, ReturnDocument
from pymongo.collection import Collection

from src.common.error_handling import ProfileNotFoundError

from .base import ProfileRepositoryInterface

logger = logging.getLogger(__name__)


class MongoProfileRepository(ProfileRepositoryInterface):
    """
    MongoDB-backed profile store.

    Connection Management:
    - One MongoClient per repository instance, created on first use
    - PyMongo handles the connection pool internally

    Error Handling:
    - Fail-fast: driver errors propagate to caller
    - update() on an unknown user raises ProfileNotFoundError
    """

    def __init__(self, mongodb_uri: str, database: str = "skill_sense", collection: str = "profiles"):
        """
        Initialize repository with connection parameters.

        Args:
            mongodb_uri: MongoDB connection string
            database: Database name (default: "skill_sense")
            collection: Collection name (default: "profiles")
        """
        self._mongodb_uri = mongodb_uri
        self._database_name = database
        self._collection_name = collection
        self._client: Optional[MongoClient] = None
        self._collection: Optional[Collection] = None

    def _get_collection(self) -> Collection:
        """Get the MongoDB collection, creating the client if needed."""
        if self._collection is None:
            self._client = MongoClient(self._mongodb_uri)
            self._collection = self._client[self._database_name][self._collection_name]
            logger.info(
                f"Profile repository connected: {self._database_name}.{self._collection_name}"
            )
        return self._collection

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Find a profile by user id."""
        return self._get_collection().find_one({"_id": user_id})

    def update(self, user_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        """
        $set the given fields on a profile.

        Fail-fast behavior: exceptions propagate to caller.
        """
        document = self._get_collection().find_one_and_update(
            {"_id": user_id},
            {"$set": partial},
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            raise ProfileNotFoundError(user_id)
        return document

    def close(self) -> None:
        """Close the underlying client."""
        if self._client:
            self._client.close()
        self._client = None
        self._collection = None
        logger.info("Profile repository connection closed")
