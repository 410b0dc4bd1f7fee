"""
Logging setup and job-scoped loggers.

setup_logging() configures the root logger once, from the CLI or the
service entry point. Code running inside a job logs through job_logger(job),
which prefixes every message with the job's short id, type and user and
attaches the same values to the record, so interleaved output from
concurrent workers can be filtered per job.

Usage:
    from src.common.logger import job_logger

    log = job_logger(__name__, job)
    log.info("Job started")   # [job:3f2a9c1e] [github-extraction] [user:u1] Job started
"""

import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Dict, MutableMapping, Tuple

if TYPE_CHECKING:
    from src.jobs.models import Job

JOB_FIELDS = ("job_id", "job_type", "user_id")


class JobLogAdapter(logging.LoggerAdapter):
    """LoggerAdapter carrying job_id / job_type / user_id."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return f"{self.prefix} {msg}", kwargs

    @property
    def prefix(self) -> str:
        # uuid hex after "job_" is random, 8 chars are enough to correlate
        parts = [f"[job:{self.extra['job_id'].replace('job_', '')[:8]}]", f"[{self.extra['job_type']}]"]
        if self.extra.get("user_id"):
            parts.append(f"[user:{self.extra['user_id']}]")
        return " ".join(parts)


def job_logger(name: str, job: "Job") -> JobLogAdapter:
    """Logger for code running on behalf of one job."""
    fields = {
        "job_id": job.id,
        "job_type": job.type,
        "user_id": (job.payload or {}).get("user_id"),
    }
    return JobLogAdapter(logging.getLogger(name), fields)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; job fields are included when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for field in JOB_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", fmt: str = "simple") -> None:
    """
    Configure the root logger with a single stdout handler.

    Args:
        level: DEBUG, INFO, WARNING or ERROR (unknown names fall back to INFO)
        fmt: "simple" for human-readable lines, "json" for log aggregators
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)
