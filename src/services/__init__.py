"""
Services module for skill extraction orchestration.

ExtractionService queues and runs connector jobs; ProfileService merges
their output into stored profiles.
"""

from src.services.profile_service import ProfileService
from src.services.extraction_service import ExtractionService, create_extraction_service

__all__ = [
    "ProfileService",
    "ExtractionService",
    "create_extraction_service",
]
