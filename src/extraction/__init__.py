"""
Extraction Package

AI skill extraction (Gemini via Vertex AI) with a deterministic mock fallback.
"""

from .skill_extractor import SkillExtractor, SkillGapAnalysis, SkillRecommendations
from .mock_extractor import extract_mock_skills

__all__ = [
    "SkillExtractor",
    "SkillGapAnalysis",
    "SkillRecommendations",
    "extract_mock_skills",
]
