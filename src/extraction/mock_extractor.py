"""
Deterministic offline skill extractor.

Used when no Vertex AI project is configured and as the fallback when a
model call fails. Matches a fixed table of canonical skills as
case-insensitive substrings of the input text.
"""

from typing import Dict

from src.common.skill_types import ExtractionResult, SkillCandidate, SkillCategory

MOCK_MODEL_NAME = "mock"
MOCK_CONFIDENCE = 0.7
MOCK_PROFICIENCY = "intermediate"

# Canonical skill name -> category
SKILL_PATTERNS: Dict[str, str] = {
    "Python": SkillCategory.PROGRAMMING_LANGUAGE.value,
    "JavaScript": SkillCategory.PROGRAMMING_LANGUAGE.value,
    "TypeScript": SkillCategory.PROGRAMMING_LANGUAGE.value,
    "Java": SkillCategory.PROGRAMMING_LANGUAGE.value,
    "React": SkillCategory.FRAMEWORK.value,
    "Angular": SkillCategory.FRAMEWORK.value,
    "Node.js": SkillCategory.FRAMEWORK.value,
    "Docker": SkillCategory.TOOL.value,
    "Kubernetes": SkillCategory.TOOL.value,
    "AWS": SkillCategory.TOOL.value,
    "GCP": SkillCategory.TOOL.value,
    "Azure": SkillCategory.TOOL.value,
    "Leadership": SkillCategory.SOFT_SKILL.value,
    "Communication": SkillCategory.SOFT_SKILL.value,
    "Project Management": SkillCategory.SOFT_SKILL.value,
}


def extract_mock_skills(text: str) -> ExtractionResult:
    """
    Extract skills by substring match against SKILL_PATTERNS.

    Substring matching is intentionally naive ("JavaScript" also matches
    "Java").

    Args:
        text: Input text (for document mode, a short placeholder label)

    Returns:
        ExtractionResult with model "mock"
    """
    lowered = text.lower()
    evidence = f'Mentioned in text: "{text[:100]}..."'

    skills = [
        SkillCandidate(
            name=name,
            category=category,
            proficiency=MOCK_PROFICIENCY,
            evidence=[evidence],
            confidence=MOCK_CONFIDENCE,
        )
        for name, category in SKILL_PATTERNS.items()
        if name.lower() in lowered
    ]

    return ExtractionResult.create(skills, model=MOCK_MODEL_NAME, text_length=len(text))
