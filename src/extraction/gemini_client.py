"""
Gemini streaming client (Vertex AI via google-genai).

Thin transport wrapper: builds the generation/safety configuration, sends a
prompt (optionally with a stored document attached by URI), and yields the
streamed text fragments. Parsing and fallback live in SkillExtractor.
"""

import logging
import re
from typing import AsyncIterator, Optional

from google import genai
from google.genai import types

from src.common.config import Config
from src.common.error_handling import ServiceNotProvisionedError, is_not_provisioned_error

logger = logging.getLogger(__name__)

_GCS_HTTP_PREFIX = re.compile(r"^https?://storage\.googleapis\.com/")

# Skill text should never be blocked
SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
)


def to_gcs_uri(uri: str) -> str:
    """
    Normalize a storage reference to gs:// form.

    Examples:
        >>> to_gcs_uri("https://storage.googleapis.com/bucket/cvs/a.pdf")
        'gs://bucket/cvs/a.pdf'
        >>> to_gcs_uri("gs://bucket/cvs/a.pdf")
        'gs://bucket/cvs/a.pdf'
    """
    if uri.startswith("gs://"):
        return uri
    return f"gs://{_GCS_HTTP_PREFIX.sub('', uri)}"


def build_generation_config(
    max_output_tokens: int = Config.MAX_OUTPUT_TOKENS,
    temperature: float = Config.EXTRACTION_TEMPERATURE,
    top_p: float = Config.EXTRACTION_TOP_P,
) -> types.GenerateContentConfig:
    """Low-temperature decoding with all safety filters set to BLOCK_NONE."""
    return types.GenerateContentConfig(
        max_output_tokens=max_output_tokens,
        temperature=temperature,
        top_p=top_p,
        safety_settings=[
            types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
            for category in SAFETY_CATEGORIES
        ],
    )


class GeminiStreamClient:
    """
    Streaming text generation against a Vertex AI Gemini model.

    The genai client is created lazily on first call so constructing the
    extractor never touches credentials.
    """

    def __init__(
        self,
        project: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
    ):
        self.project = project or Config.GCP_PROJECT_ID
        self.location = location or Config.GCP_LOCATION
        self.model = model or Config.GEMINI_MODEL
        self._client: Optional[genai.Client] = None
        self._generation_config = build_generation_config()

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                vertexai=True,
                project=self.project,
                location=self.location,
            )
            logger.info(f"Vertex AI client initialized for project: {self.project}")
        return self._client

    async def stream_generate(
        self,
        prompt: str,
        file_uri: Optional[str] = None,
        mime_type: str = "application/pdf",
    ) -> AsyncIterator[str]:
        """
        Stream generated text for a prompt.

        Args:
            prompt: Instruction text
            file_uri: Optional stored document to attach (gs:// or GCS https URL)
            mime_type: MIME type of the attached document

        Yields:
            Text fragments in arrival order

        Raises:
            ServiceNotProvisionedError: Vertex AI service agents not ready
            Exception: Any other transport/model error from google-genai
        """
        parts = [types.Part.from_text(text=prompt)]
        if file_uri:
            formatted_uri = to_gcs_uri(file_uri)
            logger.debug(f"Using GCS URI: {formatted_uri}")
            parts.append(types.Part.from_uri(file_uri=formatted_uri, mime_type=mime_type))

        try:
            stream = await self._get_client().aio.models.generate_content_stream(
                model=self.model,
                contents=[types.Content(role="user", parts=parts)],
                config=self._generation_config,
            )
            async for chunk in stream:
                text = _chunk_text(chunk)
                if text:
                    yield text
        except Exception as e:
            if is_not_provisioned_error(e):
                raise ServiceNotProvisionedError(str(e)) from e
            logger.error(f"Gemini content generation failed: {e}")
            raise


def _chunk_text(chunk: types.GenerateContentResponse) -> str:
    """Text of the first part of the first candidate, or empty string."""
    candidates = chunk.candidates or []
    if not candidates or not candidates[0].content or not candidates[0].content.parts:
        return ""
    return candidates[0].content.parts[0].text or ""
