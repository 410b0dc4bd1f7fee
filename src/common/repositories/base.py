"""
Repository Interface Definitions

Defines the abstract interface for profile store operations.
Connectors and services depend on this interface, not on MongoDB directly,
so tests can swap in an in-memory fake.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class ProfileRepositoryInterface(ABC):
    """
    Abstract interface for the profiles collection.

    Profiles are keyed by user id. update() has document-merge semantics:
    top-level fields in the partial replace stored fields, everything else
    is left as is. There are no field-level transactions; callers that need
    read-modify-write safety must serialize themselves.
    """

    @abstractmethod
    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a profile document.

        Args:
            user_id: Profile owner id

        Returns:
            Document dict if found, None otherwise
        """
        pass

    @abstractmethod
    def update(self, user_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge top-level fields into a profile document.

        Args:
            user_id: Profile owner id
            partial: Fields to set

        Returns:
            The updated document
        """
        pass
