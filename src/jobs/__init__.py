"""
Jobs Package

In-memory job tracking with a bounded asyncio worker pool.
"""

from .models import Job, JobStatus, JobType
from .manager import JobQueue

__all__ = [
    "Job",
    "JobStatus",
    "JobType",
    "JobQueue",
]
