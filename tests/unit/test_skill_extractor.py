"""
Unit tests for src/extraction/skill_extractor.py

Tests the AI extraction client:
- Mock mode when no project is configured
- Streamed response concatenation and lenient parsing
- Fallback to the mock extractor on transport errors
- Skill gap analysis / recommendations (success and failure)
- Prompt construction and generation config
"""

import logging

import pytest
from google.genai import types

from src.common.error_handling import ServiceNotProvisionedError, is_not_provisioned_error
from src.extraction.gemini_client import build_generation_config, to_gcs_uri
from src.extraction.mock_extractor import MOCK_CONFIDENCE, MOCK_MODEL_NAME, extract_mock_skills
from src.extraction.prompts import DOCUMENT_EXTRACTION_PROMPT, PROMPT_CATEGORIES, build_text_extraction_prompt
from src.extraction.skill_extractor import SkillExtractor


SKILLS_JSON = (
    '[{"name": "Python", "category": "programming_language", "proficiency": "advanced", '
    '"evidence": "Built APIs in Python", "confidence": 0.95}, '
    '{"name": "Docker"}]'
)


# ===== TESTS: Mock Extractor =====

class TestMockExtractor:
    """Tests for the deterministic offline extractor."""

    def test_finds_python_and_docker(self):
        result = extract_mock_skills("5 years of Python and Docker")
        by_name = {s.name: s for s in result.skills}

        assert by_name["Python"].category == "programming_language"
        assert by_name["Python"].confidence == MOCK_CONFIDENCE
        assert by_name["Docker"].category == "tool"
        assert result.metadata.model == MOCK_MODEL_NAME

    def test_evidence_quotes_first_100_chars(self):
        text = "Leadership " + "x" * 200
        result = extract_mock_skills(text)
        assert result.skills[0].evidence == [f'Mentioned in text: "{text[:100]}..."']

    def test_substring_match_is_case_insensitive(self):
        names = [s.name for s in extract_mock_skills("KUBERNETES and aws").skills]
        assert names == ["Kubernetes", "AWS"]

    def test_deterministic(self):
        text = "React, Angular and Node.js on Azure"
        first = [s.to_dict() for s in extract_mock_skills(text).skills]
        second = [s.to_dict() for s in extract_mock_skills(text).skills]
        assert first == second

    def test_no_matches(self):
        assert extract_mock_skills("gardening and cooking").skills == []


# ===== TESTS: Mock Mode =====

class TestSkillExtractorMockMode:
    """Tests for extraction with no model configured."""

    def test_empty_project_is_mock_mode(self, mock_extractor):
        assert mock_extractor.is_mock_mode is True

    @pytest.mark.asyncio
    async def test_extract_from_text_falls_back_to_mock(self, mock_extractor):
        """Should return Python (0.7) and Docker (tool) without a model."""
        result = await mock_extractor.extract_from_text("5 years of Python and Docker")
        by_name = {s.name: s for s in result.skills}

        assert by_name["Python"].category == "programming_language"
        assert by_name["Python"].confidence == 0.7
        assert by_name["Docker"].category == "tool"

    @pytest.mark.asyncio
    async def test_extract_from_document_uses_placeholder_label(self, mock_extractor):
        result = await mock_extractor.extract_from_document("gs://bucket/cvs/u1/cv.pdf")
        assert result.metadata.model == "mock"
        assert result.metadata.text_length == len("Document upload (mock mode)")

    @pytest.mark.asyncio
    async def test_gap_analysis_unavailable(self, mock_extractor):
        result = await mock_extractor.analyze_skill_gaps(["Python"], "ML Engineer")
        assert result["gaps"] == []
        assert "no AI model is configured" in result["summary"]

    @pytest.mark.asyncio
    async def test_recommendations_unavailable(self, mock_extractor):
        result = await mock_extractor.recommend_skills(["Python"])
        assert result["recommendations"] == []
        assert result["summary"]


# ===== TESTS: Model Mode =====

class TestSkillExtractorModelMode:
    """Tests for extraction against a (fake) streaming model."""

    @pytest.mark.asyncio
    async def test_concatenates_streamed_fragments(self, make_stream_extractor):
        """Fragments split mid-token should be joined before parsing."""
        extractor, _ = make_stream_extractor(chunks=[SKILLS_JSON[:17], SKILLS_JSON[17:60], SKILLS_JSON[60:]])

        result = await extractor.extract_from_text("Built APIs in Python, shipped with Docker")

        assert [s.name for s in result.skills] == ["Python", "Docker"]
        assert result.metadata.model == "gemini-test"
        assert result.metadata.text_length == len("Built APIs in Python, shipped with Docker")

    @pytest.mark.asyncio
    async def test_normalizes_parsed_objects(self, make_stream_extractor):
        extractor, _ = make_stream_extractor(chunks=SKILLS_JSON)

        result = await extractor.extract_from_text("text")
        python, docker = result.skills

        assert python.evidence == ["Built APIs in Python"]
        assert python.proficiency == "advanced"
        assert docker.category == "other"
        assert docker.proficiency == "intermediate"
        assert docker.confidence == 0.5
        assert docker.evidence == []

    @pytest.mark.asyncio
    async def test_fenced_response_parses_like_bare(self, make_stream_extractor):
        bare_extractor, _ = make_stream_extractor(chunks=SKILLS_JSON)
        fenced_extractor, _ = make_stream_extractor(chunks=["```json\n", SKILLS_JSON, "\n```"])

        bare = await bare_extractor.extract_from_text("t")
        fenced = await fenced_extractor.extract_from_text("t")

        assert [s.to_dict() for s in fenced.skills] == [s.to_dict() for s in bare.skills]

    @pytest.mark.asyncio
    async def test_invalid_json_yields_empty_list(self, make_stream_extractor):
        extractor, _ = make_stream_extractor(chunks="Sorry, I can't help with that.")
        result = await extractor.extract_from_text("Python")
        assert result.skills == []

    @pytest.mark.asyncio
    async def test_bracketed_prose_yields_empty_list(self, make_stream_extractor):
        """Prose with a bracketed word list is not JSON and yields no skills."""
        extractor, _ = make_stream_extractor(chunks="I found these skills: [Python, Docker, leadership]")

        result = await extractor.extract_from_text("Python and Docker")

        assert result.skills == []
        assert result.metadata.model == "gemini-test"

    @pytest.mark.asyncio
    async def test_object_root_yields_empty_list(self, make_stream_extractor):
        extractor, _ = make_stream_extractor(chunks='{"name": "Python"}')
        result = await extractor.extract_from_text("Python")
        assert result.skills == []

    @pytest.mark.asyncio
    async def test_transport_error_falls_back_to_mock(self, make_stream_extractor):
        extractor, _ = make_stream_extractor(error=RuntimeError("503 Service Unavailable"))

        result = await extractor.extract_from_text("Python and Docker")

        assert result.metadata.model == "mock"
        assert {s.name for s in result.skills} == {"Python", "Docker"}

    @pytest.mark.asyncio
    async def test_not_provisioned_error_logs_guidance(self, make_stream_extractor, caplog):
        extractor, _ = make_stream_extractor(
            error=ServiceNotProvisionedError("FAILED_PRECONDITION: Service agents are being provisioned")
        )

        with caplog.at_level(logging.WARNING):
            result = await extractor.extract_from_document("gs://bucket/cv.pdf")

        assert result.metadata.model == "mock"
        assert result.metadata.text_length == len("Document upload (error fallback)")
        assert ServiceNotProvisionedError.GUIDANCE_URL in caplog.text

    @pytest.mark.asyncio
    async def test_document_mode_passes_uri_and_mime_type(self, make_stream_extractor):
        extractor, client = make_stream_extractor(chunks=SKILLS_JSON)

        result = await extractor.extract_from_document("gs://bucket/cv.docx", mime_type="application/msword")

        assert client.calls[0]["file_uri"] == "gs://bucket/cv.docx"
        assert client.calls[0]["mime_type"] == "application/msword"
        assert client.calls[0]["prompt"] == DOCUMENT_EXTRACTION_PROMPT
        assert result.metadata.text_length == 0
        assert len(result.skills) == 2

    @pytest.mark.asyncio
    async def test_analyze_skill_gaps(self, make_stream_extractor):
        response = (
            '```json\n{"gaps": [{"skill": "PyTorch", "category": "framework", '
            '"currentLevel": "none", "requiredLevel": "advanced", "priority": "critical", '
            '"timeToAcquire": "3 months", "resources": "fast.ai"}], '
            '"summary": "Focus on deep learning."}\n```'
        )
        extractor, client = make_stream_extractor(chunks=response)

        result = await extractor.analyze_skill_gaps(["Python", "SQL"], "ML Engineer")

        assert result["summary"] == "Focus on deep learning."
        gap = result["gaps"][0]
        assert gap["skill"] == "PyTorch"
        assert gap["required_level"] == "advanced"
        assert gap["resources"] == ["fast.ai"]
        assert "Target Role: ML Engineer" in client.calls[0]["prompt"]
        assert "Python, SQL" in client.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_analyze_skill_gaps_failure_returns_summary(self, make_stream_extractor):
        extractor, _ = make_stream_extractor(chunks="not json")

        result = await extractor.analyze_skill_gaps(["Python"], "ML Engineer")

        assert result["gaps"] == []
        assert result["summary"].startswith("Analysis failed:")
        assert "error" in result

    @pytest.mark.asyncio
    async def test_recommend_skills(self, make_stream_extractor):
        response = (
            '{"recommendations": [{"skill": "Kubernetes", "reason": "Pairs with Docker", '
            '"relevance": 0.9, "demandScore": 0.85, "difficulty": "intermediate", '
            '"estimatedLearningTime": "2 months"}], "summary": "Go cloud-native."}'
        )
        extractor, client = make_stream_extractor(chunks=response)

        result = await extractor.recommend_skills(["Docker"], target_role="DevOps Engineer")

        assert result["recommendations"][0]["skill"] == "Kubernetes"
        assert result["recommendations"][0]["demand_score"] == 0.85
        assert "Target Role: DevOps Engineer" in client.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_recommend_skills_transport_failure(self, make_stream_extractor):
        extractor, _ = make_stream_extractor(error=RuntimeError("boom"))

        result = await extractor.recommend_skills(["Docker"])

        assert result == {"recommendations": [], "summary": "Recommendations failed. Please try again."}


# ===== TESTS: Prompts and Transport Helpers =====

class TestPromptsAndConfig:
    """Tests for prompt construction and generation settings."""

    def test_text_prompt_lists_categories_and_text(self):
        prompt = build_text_extraction_prompt("I write Go")
        assert "Return ONLY a JSON array" in prompt
        assert PROMPT_CATEGORIES in prompt
        assert '"other"' not in PROMPT_CATEGORIES
        assert prompt.rstrip().endswith("Return the JSON array now:")
        assert "I write Go" in prompt

    def test_generation_config_relaxes_all_safety_filters(self):
        config = build_generation_config()
        assert config.temperature == 0.2
        assert config.top_p == 0.8
        assert config.max_output_tokens == 8192
        assert len(config.safety_settings) == 4
        assert all(s.threshold == types.HarmBlockThreshold.BLOCK_NONE for s in config.safety_settings)

    def test_to_gcs_uri_rewrites_https_url(self):
        assert to_gcs_uri("https://storage.googleapis.com/b/cvs/a.pdf") == "gs://b/cvs/a.pdf"
        assert to_gcs_uri("gs://b/cvs/a.pdf") == "gs://b/cvs/a.pdf"

    def test_is_not_provisioned_error(self):
        assert is_not_provisioned_error(RuntimeError("400 FAILED_PRECONDITION"))
        assert not is_not_provisioned_error(RuntimeError("timeout"))
