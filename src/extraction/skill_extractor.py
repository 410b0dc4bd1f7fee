"""
AI Skill Extraction Client

Turns free text or a stored document into SkillCandidates using Gemini.

Extraction never hard-fails the caller:
- No GCP project configured -> deterministic mock extractor (first-class mode)
- Transport/model error -> same mock extractor
- Unparseable model output -> empty skill list

Usage:
    from src.extraction.skill_extractor import SkillExtractor

    extractor = SkillExtractor()
    result = await extractor.extract_from_text("5 years of Python and Docker")
    for skill in result.skills:
        print(skill.name, skill.category, skill.confidence)
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.common.config import Config
from src.common.error_handling import ServiceNotProvisionedError, is_not_provisioned_error
from src.common.json_utils import parse_llm_json, parse_llm_json_array
from src.common.skill_types import ExtractionResult, SkillCandidate, coerce_candidates
from src.extraction.gemini_client import GeminiStreamClient
from src.extraction.mock_extractor import extract_mock_skills
from src.extraction.prompts import (
    DOCUMENT_EXTRACTION_PROMPT,
    build_recommendation_prompt,
    build_skill_gap_prompt,
    build_text_extraction_prompt,
)

logger = logging.getLogger(__name__)


# ===== RESPONSE SCHEMAS (gap analysis / recommendations) =====

class SkillGap(BaseModel):
    """One missing or under-developed skill for a target role."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    skill: str
    category: Optional[str] = None
    current_level: Optional[str] = Field(default=None, alias="currentLevel")
    required_level: Optional[str] = Field(default=None, alias="requiredLevel")
    priority: Optional[str] = None
    time_to_acquire: Optional[str] = Field(default=None, alias="timeToAcquire")
    resources: List[str] = Field(default_factory=list)

    @field_validator("resources", mode="before")
    @classmethod
    def coerce_resources(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class SkillGapAnalysis(BaseModel):
    model_config = ConfigDict(extra="ignore")

    gaps: List[SkillGap] = Field(default_factory=list)
    summary: str = ""


class SkillRecommendation(BaseModel):
    """One complementary skill to learn next."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    skill: str
    reason: Optional[str] = None
    relevance: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    demand_score: Optional[float] = Field(default=None, alias="demandScore", ge=0.0, le=1.0)
    difficulty: Optional[str] = None
    estimated_learning_time: Optional[str] = Field(default=None, alias="estimatedLearningTime")


class SkillRecommendations(BaseModel):
    model_config = ConfigDict(extra="ignore")

    recommendations: List[SkillRecommendation] = Field(default_factory=list)
    summary: str = ""


class SkillExtractor:
    """
    Gemini-backed skill extractor with a deterministic offline fallback.

    Attributes:
        project: Vertex AI project id; empty string means mock mode
        model: Gemini model id reported in result metadata
    """

    def __init__(
        self,
        project: Optional[str] = None,
        model: Optional[str] = None,
        stream_client: Optional[Any] = None,
    ):
        """
        Initialize the extractor.

        Args:
            project: Vertex AI project (defaults to Config.GCP_PROJECT_ID)
            model: Model id (defaults to Config.GEMINI_MODEL)
            stream_client: Object exposing stream_generate(prompt, file_uri, mime_type);
                           defaults to a lazily created GeminiStreamClient
        """
        self.project = project if project is not None else Config.GCP_PROJECT_ID
        self.model = model or Config.GEMINI_MODEL
        self._stream_client = stream_client

        if self.is_mock_mode:
            logger.warning("GCP_PROJECT_ID not set, skill extraction will use mock data")
        else:
            logger.info(f"Skill extractor using {self.model} in project {self.project}")

    @property
    def is_mock_mode(self) -> bool:
        return not self.project

    def _get_stream_client(self) -> Any:
        if self._stream_client is None:
            self._stream_client = GeminiStreamClient(project=self.project, model=self.model)
        return self._stream_client

    async def _generate(
        self,
        prompt: str,
        file_uri: Optional[str] = None,
        mime_type: str = "application/pdf",
    ) -> str:
        """Concatenate streamed fragments into one response string."""
        fragments: List[str] = []
        async for fragment in self._get_stream_client().stream_generate(
            prompt, file_uri=file_uri, mime_type=mime_type
        ):
            fragments.append(fragment)
        return "".join(fragments)

    # ===== EXTRACTION =====

    async def extract_from_text(self, text: str) -> ExtractionResult:
        """
        Extract skills from free text.

        Args:
            text: Professional text (CV text, README, profile summary)

        Returns:
            ExtractionResult (mock result when unconfigured or on model failure)
        """
        logger.debug(f"Extracting skills from text ({len(text)} chars)")

        if self.is_mock_mode:
            return extract_mock_skills(text)

        try:
            response = await self._generate(build_text_extraction_prompt(text))
        except Exception as e:
            self._log_model_failure("Text extraction", e)
            return extract_mock_skills(text)

        return ExtractionResult.create(
            self.parse_skills_response(response),
            model=self.model,
            text_length=len(text),
        )

    async def extract_from_document(
        self,
        storage_uri: str,
        mime_type: str = "application/pdf",
    ) -> ExtractionResult:
        """
        Extract skills from a stored document the model reads natively.

        Args:
            storage_uri: gs:// URI (or GCS https URL) of the uploaded file
            mime_type: MIME type passed with the file reference

        Returns:
            ExtractionResult with text_length 0 (the model reads the file)
        """
        logger.debug(f"Extracting skills from document: {storage_uri}")

        if self.is_mock_mode:
            return extract_mock_skills("Document upload (mock mode)")

        try:
            response = await self._generate(
                DOCUMENT_EXTRACTION_PROMPT, file_uri=storage_uri, mime_type=mime_type
            )
        except Exception as e:
            self._log_model_failure("Document extraction", e)
            return extract_mock_skills("Document upload (error fallback)")

        logger.debug(f"Raw Gemini response length: {len(response)} chars")
        return ExtractionResult.create(
            self.parse_skills_response(response),
            model=self.model,
            text_length=0,
        )

    def parse_skills_response(self, response: str) -> List[SkillCandidate]:
        """
        Parse a model response into SkillCandidates.

        Never raises: a non-array root or unparseable text yields [].
        """
        try:
            parsed = parse_llm_json_array(response)
        except ValueError as e:
            logger.error(f"Failed to parse skills response: {e}")
            logger.debug(f"Raw response (first 500 chars): {response[:500]}")
            return []

        skills = coerce_candidates(parsed)
        dropped = len(parsed) - len(skills)
        if dropped:
            logger.warning(f"Dropped {dropped} skill entries without a usable name")

        logger.info(f"Successfully parsed {len(skills)} skills from response")
        return skills

    def _log_model_failure(self, operation: str, error: Exception) -> None:
        if is_not_provisioned_error(error):
            logger.warning(
                "Vertex AI service agents are being provisioned. This is a one-time setup. "
                "Using fallback for now."
            )
            logger.warning(
                f"Please wait a few minutes and try again, or check: "
                f"{ServiceNotProvisionedError.GUIDANCE_URL}"
            )
        logger.error(f"{operation} failed, using mock extraction: {error}")

    # ===== CAREER ANALYSIS =====

    async def analyze_skill_gaps(self, current_skills: List[str], target_role: str) -> Dict[str, Any]:
        """
        Analyze skill gaps for a target role.

        Returns:
            {"gaps": [...], "summary": str}; on failure gaps is empty and
            summary explains why (plus an "error" field)
        """
        logger.debug(f"Analyzing skill gaps for {target_role}")

        if self.is_mock_mode:
            return {
                "gaps": [],
                "summary": "Skill gap analysis is unavailable: no AI model is configured.",
            }

        try:
            response = await self._generate(build_skill_gap_prompt(current_skills, target_role))
            analysis = SkillGapAnalysis.model_validate(parse_llm_json(response))
        except Exception as e:
            logger.error(f"Skill gap analysis failed: {e}")
            return {
                "gaps": [],
                "summary": f"Analysis failed: {e}. Please try again or check your configuration.",
                "error": str(e),
            }

        logger.info(f"Skill gap analysis complete: {len(analysis.gaps)} gaps found")
        return analysis.model_dump()

    async def recommend_skills(
        self,
        current_skills: List[str],
        target_role: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Recommend complementary skills to learn next.

        Returns:
            {"recommendations": [...], "summary": str}; empty on failure
        """
        logger.debug(f"Recommending skills based on: {', '.join(current_skills)}")

        if self.is_mock_mode:
            return {
                "recommendations": [],
                "summary": "Skill recommendations are unavailable: no AI model is configured.",
            }

        try:
            response = await self._generate(build_recommendation_prompt(current_skills, target_role))
            recommendations = SkillRecommendations.model_validate(parse_llm_json(response))
        except Exception as e:
            logger.error(f"Skill recommendations failed: {e}")
            return {
                "recommendations": [],
                "summary": "Recommendations failed. Please try again.",
            }

        return recommendations.model_dump()
