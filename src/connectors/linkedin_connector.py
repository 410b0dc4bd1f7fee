"""
LinkedIn Connector

Derives skills from a LinkedIn profile through three channels:
1. Listed skills (fixed confidence 0.9, category "technical")
2. Experience descriptions (AI text extraction per entry)
3. Headline + summary (one AI text extraction)

Profile fetching is a placeholder: LinkedIn's official API needs an OAuth
app, which is not implemented. LinkedInProfileFetcher returns fixed sample
data and warns on every call.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.common.error_handling import ValidationError
from src.common.skill_types import SkillCandidate
from src.connectors.base import SkillConnector, retag_candidates
from src.extraction.skill_extractor import SkillExtractor

logger = logging.getLogger(__name__)

LINKEDIN_URL_PATTERN = re.compile(r"^https?://(www\.)?linkedin\.com/(in|pub)/[\w-]+/?$")
_USERNAME_PATTERN = re.compile(r"linkedin\.com/(in|pub)/([\w-]+)")

LISTED_SKILL_CONFIDENCE = 0.9
LISTED_SKILL_CATEGORY = "technical"


def validate_linkedin_url(url: str) -> bool:
    """
    Check a LinkedIn profile URL.

    Examples:
        >>> validate_linkedin_url("https://www.linkedin.com/in/john-doe")
        True
        >>> validate_linkedin_url("https://linkedin.com/company/acme")
        False
    """
    return bool(url) and LINKEDIN_URL_PATTERN.match(url) is not None


def extract_username_from_url(url: str) -> Optional[str]:
    """Profile slug from a LinkedIn URL, or None."""
    match = _USERNAME_PATTERN.search(url or "")
    return match.group(2) if match else None


@dataclass
class LinkedInExperience:
    title: str
    company: str
    description: Optional[str] = None
    duration: Optional[str] = None


@dataclass
class LinkedInEducation:
    school: str
    degree: Optional[str] = None
    field_of_study: Optional[str] = None


@dataclass
class LinkedInProfile:
    name: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = None
    experience: List[LinkedInExperience] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    education: List[LinkedInEducation] = field(default_factory=list)


class LinkedInProfileFetcher:
    """
    Placeholder profile fetcher.

    Replace fetch() with calls to the LinkedIn profile API once an OAuth app
    is registered.
    """

    def fetch(self, profile_url: str) -> LinkedInProfile:
        logger.warning("LinkedIn connector requires proper OAuth setup, returning sample profile data")
        return LinkedInProfile(
            name="Sample User",
            headline="Software Engineer at Tech Company",
            summary=(
                "Experienced developer with expertise in cloud technologies, AI/ML, "
                "and full-stack development."
            ),
            experience=[
                LinkedInExperience(
                    title="Senior Software Engineer",
                    company="Tech Company",
                    description=(
                        "Led development of cloud-native applications using GCP, "
                        "Kubernetes, and microservices."
                    ),
                    duration="2 years",
                ),
            ],
            skills=["JavaScript", "Python", "TypeScript", "React", "Node.js", "GCP", "Docker", "Kubernetes"],
            education=[
                LinkedInEducation(
                    school="University Name",
                    degree="Bachelor of Science",
                    field_of_study="Computer Science",
                ),
            ],
        )


@dataclass
class LinkedInExtraction:
    """Skills from one LinkedIn profile plus display metadata."""

    profile_url: str
    skills: List[SkillCandidate]
    metadata: Dict[str, Any]
    source: str = "linkedin"

    @property
    def candidates(self) -> List[SkillCandidate]:
        return self.skills

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "profile_url": self.profile_url,
            "skills": [s.to_dict() for s in self.skills],
            "metadata": dict(self.metadata),
        }


class LinkedInConnector(SkillConnector):
    """Three-channel skill extraction from a LinkedIn profile."""

    source_tag = "linkedin"

    def __init__(self, extractor: SkillExtractor, fetcher: Optional[LinkedInProfileFetcher] = None):
        self.extractor = extractor
        self.fetcher = fetcher or LinkedInProfileFetcher()

    validate_url = staticmethod(validate_linkedin_url)

    async def extract(self, profile_url: str) -> LinkedInExtraction:
        """
        Extract skills from a LinkedIn profile.

        Raises:
            ValidationError: If the URL is not a LinkedIn profile URL
        """
        if not validate_linkedin_url(profile_url):
            raise ValidationError(f"Invalid LinkedIn profile URL: {profile_url}")

        logger.info(f"Extracting skills from LinkedIn profile: {profile_url}")

        profile = await asyncio.to_thread(self.fetcher.fetch, profile_url)
        skills = await self.extract_skills_from_profile(profile)

        return LinkedInExtraction(
            profile_url=profile_url,
            skills=skills,
            metadata={
                "name": profile.name,
                "headline": profile.headline,
                "extracted_at": datetime.utcnow().isoformat(),
            },
        )

    async def extract_skills_from_profile(self, profile: LinkedInProfile) -> List[SkillCandidate]:
        skills: List[SkillCandidate] = []

        for skill_name in profile.skills:
            skills.append(
                SkillCandidate(
                    name=skill_name,
                    category=LISTED_SKILL_CATEGORY,
                    proficiency="intermediate",
                    evidence=[f"Listed in LinkedIn skills: {skill_name}"],
                    confidence=LISTED_SKILL_CONFIDENCE,
                    source="listed_skills",
                )
            )

        for exp in profile.experience:
            if not exp.description:
                continue
            extracted = await self.extractor.extract_from_text(
                f"{exp.title} at {exp.company}: {exp.description}"
            )
            evidence = f"{exp.title} at {exp.company}: {exp.description[:100]}..."
            skills.extend(retag_candidates(extracted.skills, "experience", [evidence]))

        if profile.headline or profile.summary:
            text = f"{profile.headline or ''} {profile.summary or ''}"
            extracted = await self.extractor.extract_from_text(text)
            skills.extend(retag_candidates(extracted.skills, "profile_summary", [text[:100] + "..."]))

        logger.info(f"LinkedIn profile yielded {len(skills)} skill candidates")
        return skills
