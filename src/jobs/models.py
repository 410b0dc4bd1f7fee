"""
Job Data Models

Defines extraction job records and their statuses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class JobType(str, Enum):
    """Extraction job types handled by the orchestrator."""

    CV_EXTRACTION = "cv-extraction"
    GITHUB_EXTRACTION = "github-extraction"
    LINKEDIN_EXTRACTION = "linkedin-extraction"


class JobStatus(str, Enum):
    """Status values for jobs."""

    PENDING = "pending"        # Waiting for a worker
    PROCESSING = "processing"  # Currently executing
    COMPLETED = "completed"    # Processor returned a result
    FAILED = "failed"          # Processor raised, see error


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


@dataclass
class Job:
    """
    A tracked unit of asynchronous extraction work.

    type is a plain string so jobs of unknown types can still be created
    and reported (the processor decides what to do with them).
    """

    id: str                       # e.g., "job_3f2a..."
    type: str                     # JobType value
    payload: Dict[str, Any]       # e.g., {"user_id": ..., "username": ...}
    status: JobStatus = JobStatus.PENDING
    result: Optional[Any] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "type": self.type,
            "status": self.status.value,
            "payload": self.payload,
            "result": self.result,
            "error": self.error,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
