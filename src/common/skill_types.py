"""
Canonical skill types shared by the extractor, connectors, and merge engine.

SkillCandidate is the unmerged output of one extraction call.
ProfileSkill is the merged record persisted on a profile.

All untyped input (model JSON, stored profile documents, legacy bare-string
skills) is normalized here by coerce_candidate() / coerce_profile_skill()
so nothing downstream branches on the raw shape.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set


class SkillCategory(str, Enum):
    """Categories the extraction prompt allows."""

    PROGRAMMING_LANGUAGE = "programming_language"
    FRAMEWORK = "framework"
    TOOL = "tool"
    SOFT_SKILL = "soft_skill"
    DOMAIN_KNOWLEDGE = "domain_knowledge"
    CERTIFICATION = "certification"
    METHODOLOGY = "methodology"
    OTHER = "other"


class Proficiency(str, Enum):
    """Estimated proficiency levels."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


CATEGORY_VALUES = frozenset(c.value for c in SkillCategory)
PROFICIENCY_VALUES = frozenset(p.value for p in Proficiency)

DEFAULT_CATEGORY = SkillCategory.OTHER.value
DEFAULT_PROFICIENCY = Proficiency.INTERMEDIATE.value
DEFAULT_CONFIDENCE = 0.5


@dataclass(frozen=True)
class SkillCandidate:
    """
    One skill attributed by a single extraction call.

    category is a plain string: model output is normalized into
    SkillCategory values, but connectors may emit their own labels
    (LinkedIn listed skills use "technical").
    """

    name: str
    category: str = DEFAULT_CATEGORY
    proficiency: str = DEFAULT_PROFICIENCY
    evidence: List[str] = field(default_factory=list)
    confidence: float = DEFAULT_CONFIDENCE
    source: Optional[str] = None  # channel within a connector, e.g. "listed_skills"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            "name": self.name,
            "category": self.category,
            "proficiency": self.proficiency,
            "evidence": list(self.evidence),
            "confidence": self.confidence,
        }
        if self.source:
            data["source"] = self.source
        return data


@dataclass
class ExtractionMetadata:
    model: str
    timestamp: str
    text_length: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "timestamp": self.timestamp,
            "text_length": self.text_length,
        }


@dataclass
class ExtractionResult:
    """Candidates from one extraction call plus model metadata."""

    skills: List[SkillCandidate]
    metadata: ExtractionMetadata

    @classmethod
    def create(cls, skills: List[SkillCandidate], model: str, text_length: int) -> "ExtractionResult":
        return cls(
            skills=skills,
            metadata=ExtractionMetadata(
                model=model,
                timestamp=datetime.utcnow().isoformat(),
                text_length=text_length,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skills": [s.to_dict() for s in self.skills],
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class ProfileSkill:
    """
    Merged skill record owned by a profile.

    Mutated only by the merge engine. sources is a set; it is stored as a
    sorted list in profile documents.
    """

    name: str
    category: str
    confidence: float
    proficiency: Optional[str] = None
    verified: bool = False
    occurrences: int = 1
    evidence: List[str] = field(default_factory=list)
    sources: Set[str] = field(default_factory=set)
    created_at: str = field(default_factory=lambda: datetime.utcnow().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the profile document shape."""
        return {
            "name": self.name,
            "category": self.category,
            "proficiency": self.proficiency,
            "confidence": self.confidence,
            "verified": self.verified,
            "occurrences": self.occurrences,
            "evidence": list(self.evidence),
            "evidence_count": len(self.evidence),
            "sources": sorted(self.sources),
            "created_at": self.created_at,
        }


def coerce_evidence(value: Any) -> List[str]:
    """
    Coerce an evidence value into a list of strings.

    A bare string becomes a one-element list; None/empty becomes [].
    """
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and item != ""]
    return [str(value)]


def _coerce_confidence(value: Any, default: float) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return default
    return min(max(confidence, 0.0), 1.0)


def _coerce_occurrences(value: Any) -> int:
    try:
        occurrences = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(occurrences, 1)


def coerce_candidate(raw: Any, source: Optional[str] = None) -> Optional[SkillCandidate]:
    """
    Normalize one parsed model object into a SkillCandidate.

    Missing category -> "other", missing proficiency -> "intermediate",
    missing confidence -> 0.5. Unknown category/proficiency values fall back
    to the same defaults. Returns None when no usable name is present or
    raw is not an object (bare strings are stored-profile data only).
    """
    if isinstance(raw, SkillCandidate):
        return raw
    if not isinstance(raw, dict):
        return None

    name = str(raw.get("name") or "").strip()
    if not name:
        return None

    category = str(raw.get("category") or DEFAULT_CATEGORY).strip().lower()
    if category not in CATEGORY_VALUES:
        category = DEFAULT_CATEGORY

    proficiency = str(raw.get("proficiency") or DEFAULT_PROFICIENCY).strip().lower()
    if proficiency not in PROFICIENCY_VALUES:
        proficiency = DEFAULT_PROFICIENCY

    return SkillCandidate(
        name=name,
        category=category,
        proficiency=proficiency,
        evidence=coerce_evidence(raw.get("evidence")),
        confidence=_coerce_confidence(raw.get("confidence"), DEFAULT_CONFIDENCE),
        source=source or raw.get("source"),
    )


def coerce_candidates(items: Iterable[Any], source: Optional[str] = None) -> List[SkillCandidate]:
    """Normalize a list of raw skill objects, dropping unusable entries."""
    candidates = []
    for item in items or []:
        candidate = coerce_candidate(item, source=source)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def coerce_profile_skill(raw: Any) -> Optional[ProfileSkill]:
    """
    Normalize a stored profile skill (document dict or legacy bare string).

    Returns None for entries without a name.
    """
    if isinstance(raw, ProfileSkill):
        return raw
    if isinstance(raw, str):
        raw = {"name": raw}
    if not isinstance(raw, dict):
        return None

    name = str(raw.get("name") or "").strip()
    if not name:
        return None

    sources = raw.get("sources") or []
    if isinstance(sources, str):
        sources = [sources]

    return ProfileSkill(
        name=str(raw.get("name")),
        category=raw.get("category") or "Uncategorized",
        proficiency=raw.get("proficiency"),
        confidence=_coerce_confidence(raw.get("confidence"), 0.8),
        verified=bool(raw.get("verified", False)),
        occurrences=_coerce_occurrences(raw.get("occurrences")),
        evidence=coerce_evidence(raw.get("evidence")),
        sources=set(sources),
        created_at=raw.get("created_at") or raw.get("createdAt") or datetime.utcnow().isoformat(),
    )
