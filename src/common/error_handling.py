"""
Error taxonomy and per-item error collection for skill extraction.

- ValidationError: bad input, raised synchronously, never queued
- ExternalServiceError: blob store / code host / profile store failures
- ServiceNotProvisionedError: Vertex AI service agents not ready yet
- ErrorCollector: records skippable per-item failures (e.g. a missing README)
  so a connector can finish and still report what it skipped
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


class SkillSenseError(Exception):
    """Base exception for skill extraction errors."""
    pass


class ValidationError(SkillSenseError):
    """Raised when caller input is invalid (bad URL, missing field)."""
    pass


class ExternalServiceError(SkillSenseError):
    """Raised when an upstream dependency fails."""

    def __init__(self, message: str, service: str = "unknown"):
        super().__init__(message)
        self.service = service


class ProfileNotFoundError(ExternalServiceError):
    """Raised when the profile store has no document for a user."""

    def __init__(self, user_id: str):
        super().__init__(f"Profile not found: {user_id}", service="profile_store")
        self.user_id = user_id


class ServiceNotProvisionedError(ExternalServiceError):
    """Raised when Vertex AI reports its service agents are still being provisioned."""

    GUIDANCE_URL = (
        "https://cloud.google.com/vertex-ai/docs/general/access-control#service-agents"
    )

    def __init__(self, message: str):
        super().__init__(message, service="vertex_ai")


# Substrings Vertex AI uses for the one-time service agent setup condition
_NOT_PROVISIONED_MARKERS = (
    "Service agents are being provisioned",
    "FAILED_PRECONDITION",
)


def is_not_provisioned_error(error: BaseException) -> bool:
    """Check whether an AI transport error is the service-agent provisioning condition."""
    if isinstance(error, ServiceNotProvisionedError):
        return True
    message = str(error)
    return any(marker in message for marker in _NOT_PROVISIONED_MARKERS)


@dataclass
class SkippedItem:
    """A single item that failed but did not abort the surrounding extraction."""

    source: str  # e.g., "github"
    item: str  # e.g., repository name
    operation: str  # e.g., "readme_fetch"
    message: str
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    exception_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source,
            "item": self.item,
            "operation": self.operation,
            "message": self.message,
            "timestamp": self.timestamp,
            "exception_type": self.exception_type,
        }


class ErrorCollector:
    """
    Collects skippable errors during one extraction.

    Provides aggregation for reporting alongside the connector result.
    """

    def __init__(self):
        self.errors: List[SkippedItem] = []

    def add_error(
        self,
        source: str,
        item: str,
        operation: str,
        message: str,
        exception: Optional[BaseException] = None,
    ) -> None:
        """Record a skipped item."""
        self.errors.append(
            SkippedItem(
                source=source,
                item=item,
                operation=operation,
                message=message,
                exception_type=type(exception).__name__ if exception else None,
            )
        )

    def __len__(self) -> int:
        return len(self.errors)

    def get_error_messages(self) -> List[str]:
        """Get list of error messages."""
        return [e.message for e in self.errors]

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.errors]
