"""
Connector base class.

A connector turns one kind of source input (an uploaded document, a GitHub
account, a LinkedIn profile) into skill candidates plus the metadata the
profile service needs for bookkeeping.
"""

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, List

from src.common.skill_types import SkillCandidate


class SkillConnector(ABC):
    """
    Abstract connector.

    Subclasses set source_tag (used as the merge source) and implement
    extract(), returning a result object that exposes `candidates`.
    """

    source_tag: str = ""

    @abstractmethod
    async def extract(self, *args: Any, **kwargs: Any) -> Any:
        """Extract skill candidates from the connector's source input."""
        pass


def retag_candidates(
    candidates: List[SkillCandidate],
    source: str,
    evidence: List[str],
) -> List[SkillCandidate]:
    """Copy candidates with a channel tag and replacement evidence."""
    return [replace(c, source=source, evidence=list(evidence)) for c in candidates]
