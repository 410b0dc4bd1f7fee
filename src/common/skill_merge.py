"""
Skill Merge Engine

Folds one connector's candidates into a profile's existing skill list.

The merge key is the trimmed, lowercased skill name, so "Docker", " docker "
and "DOCKER" collapse into one ProfileSkill. On a key match:
- confidence becomes the max of the stored and incoming value
- occurrences increments by one
- evidence is concatenated (never dropped)
- the source tag is added to the sources set

Usage:
    from src.common.skill_merge import merge_skills, count_sources

    merged = merge_skills(existing, candidates, "github")
    profile_update = {"skill_count": len(merged), "sources_connected": count_sources(merged)}
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from src.common.skill_types import ProfileSkill, SkillCandidate

logger = logging.getLogger(__name__)

# Used when a candidate carries no (or zero) confidence
DEFAULT_MERGE_CONFIDENCE = 0.8


def merge_key(name: Optional[str]) -> str:
    """
    Normalize a skill name into its merge key.

    Examples:
        >>> merge_key("  Docker ")
        'docker'
        >>> merge_key(None)
        ''
    """
    if not name:
        return ""
    return str(name).strip().lower()


def merge_skills(
    existing_skills: List[ProfileSkill],
    candidates: Iterable[SkillCandidate],
    source_tag: str,
    now: Optional[str] = None,
) -> List[ProfileSkill]:
    """
    Merge candidates into existing profile skills.

    Existing ProfileSkill objects are updated in place; unmatched entries are
    returned untouched. New skills are appended in candidate order.

    Args:
        existing_skills: Current profile skills (already coerced)
        candidates: Skill candidates from one extraction
        source_tag: Connector tag ("cv", "github", "linkedin")
        now: Optional ISO timestamp for created_at (defaults to utcnow)

    Returns:
        The full updated skill list
    """
    created_at = now or datetime.utcnow().isoformat()

    merged: List[ProfileSkill] = list(existing_skills)
    lookup: Dict[str, ProfileSkill] = {}
    for skill in merged:
        key = merge_key(skill.name)
        if key and key not in lookup:
            lookup[key] = skill

    new_count = 0
    updated_count = 0

    for candidate in candidates:
        key = merge_key(candidate.name)
        if not key:
            logger.warning(f"Skipping candidate without a name: {candidate!r}")
            continue

        incoming_confidence = candidate.confidence or DEFAULT_MERGE_CONFIDENCE
        existing = lookup.get(key)

        if existing is None:
            skill = ProfileSkill(
                name=candidate.name,
                category=candidate.category or "Uncategorized",
                proficiency=candidate.proficiency,
                confidence=incoming_confidence,
                verified=False,
                occurrences=1,
                evidence=list(candidate.evidence),
                sources={source_tag},
                created_at=created_at,
            )
            lookup[key] = skill
            merged.append(skill)
            new_count += 1
        else:
            existing.confidence = max(existing.confidence, incoming_confidence)
            existing.occurrences += 1
            existing.evidence = existing.evidence + list(candidate.evidence)
            existing.sources.add(source_tag)
            updated_count += 1

    logger.info(
        f"Skill merge from {source_tag} - New: {new_count}, "
        f"Updated: {updated_count}, Total: {len(merged)}"
    )
    return merged


def count_sources(skills: Iterable[ProfileSkill]) -> int:
    """Number of distinct source tags across all skills."""
    sources = set()
    for skill in skills:
        sources.update(skill.sources)
    return len(sources)
