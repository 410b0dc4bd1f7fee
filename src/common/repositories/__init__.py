"""
Repository Pattern for Profile Storage

Provides an abstraction layer over MongoDB for the profiles collection.

Public API:
- create_profile_repository(): Factory to build a repository from env config
- ProfileRepositoryInterface: Abstract interface for profiles
- MongoProfileRepository: pymongo implementation

Usage:
    from src.common.repositories import create_profile_repository

    profiles = create_profile_repository()
    profile = profiles.get(user_id)
    profiles.update(user_id, {"skill_count": 12})
"""

from .base import ProfileRepositoryInterface
from .config import RepositoryConfig, create_profile_repository
from .mongo_profile_repository import MongoProfileRepository

__all__ = [
    "create_profile_repository",
    "ProfileRepositoryInterface",
    "MongoProfileRepository",
    "RepositoryConfig",
]
