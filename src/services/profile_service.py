"""
Profile Service

Folds connector output into a user's stored skill profile.

Each merge is a read-merge-write against the profile store. Merges for the
same user are serialized with a per-user asyncio.Lock so two concurrent
extractions cannot overwrite each other's skills. The lock is per process:
several processes writing the same profile are still last-writer-wins.
"""

import asyncio
import logging
import weakref
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from src.common.error_handling import ProfileNotFoundError
from src.common.repositories.base import ProfileRepositoryInterface
from src.common.skill_merge import count_sources, merge_skills
from src.common.skill_types import ProfileSkill, SkillCandidate, coerce_profile_skill

logger = logging.getLogger(__name__)


class ProfileService:
    """Skill profile bookkeeping on top of a ProfileRepositoryInterface."""

    def __init__(self, repository: ProfileRepositoryInterface):
        self.repository = repository
        # Entries vanish once no merge for that user holds or awaits the lock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await asyncio.to_thread(self.repository.get, user_id)

    @staticmethod
    def load_skills(profile: Dict[str, Any]) -> List[ProfileSkill]:
        """Stored skills (documents or legacy bare strings) as ProfileSkill records."""
        skills = []
        for raw in profile.get("skills") or []:
            skill = coerce_profile_skill(raw)
            if skill is None:
                logger.warning(f"Ignoring stored skill without a name: {raw!r}")
                continue
            skills.append(skill)
        return skills

    async def merge_extraction(
        self,
        user_id: str,
        candidates: Iterable[SkillCandidate],
        source: str,
        cv_record: Optional[Dict[str, Any]] = None,
    ) -> List[ProfileSkill]:
        """
        Merge candidates into a profile and write it back.

        Updates skills, skill_count, sources_connected, integrations[source]
        and updated_at; appends cv_record to cvs when given.

        Args:
            user_id: Profile owner
            candidates: Skill candidates from one connector run
            source: Source tag ("cv", "github", "linkedin")
            cv_record: Optional uploaded-CV entry for the cvs list

        Returns:
            The merged skill list as persisted

        Raises:
            ProfileNotFoundError: If the user has no profile
        """
        candidates = list(candidates)

        async with self._lock_for(user_id):
            profile = await self.get_profile(user_id)
            if not profile:
                logger.error(f"Profile not found for user {user_id}")
                raise ProfileNotFoundError(user_id)

            existing = self.load_skills(profile)
            logger.debug(
                f"Merging {len(candidates)} {source} candidates into "
                f"{len(existing)} existing skills for user {user_id}"
            )

            now = datetime.utcnow().isoformat()
            merged = merge_skills(existing, candidates, source, now=now)

            integrations = dict(profile.get("integrations") or {})
            integrations[source] = {
                "last_sync": now,
                "skills_extracted": len(candidates),
                "status": "connected",
            }

            update: Dict[str, Any] = {
                "skills": [skill.to_dict() for skill in merged],
                "skill_count": len(merged),
                "sources_connected": count_sources(merged),
                "integrations": integrations,
                "updated_at": now,
            }
            if cv_record is not None:
                update["cvs"] = list(profile.get("cvs") or []) + [cv_record]

            await asyncio.to_thread(self.repository.update, user_id, update)

        logger.info(f"Profile updated for user {user_id} - Total skills: {len(merged)}")
        return merged
