"""
Connectors Package

Source-specific skill extraction: CV uploads, GitHub repositories and
LinkedIn profiles.
"""

from .base import SkillConnector
from .cv_connector import CVConnector, CVExtraction
from .github_connector import GitHubClient, GitHubConnector, GitHubExtraction
from .linkedin_connector import (
    LinkedInConnector,
    LinkedInExtraction,
    LinkedInProfileFetcher,
    extract_username_from_url,
    validate_linkedin_url,
)

__all__ = [
    "SkillConnector",
    "CVConnector",
    "CVExtraction",
    "GitHubClient",
    "GitHubConnector",
    "GitHubExtraction",
    "LinkedInConnector",
    "LinkedInExtraction",
    "LinkedInProfileFetcher",
    "extract_username_from_url",
    "validate_linkedin_url",
]
