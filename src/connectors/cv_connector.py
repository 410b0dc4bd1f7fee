"""
CV Connector

Uploads a CV to blob storage under a per-user, timestamped key and extracts
skills from it.

Two extraction modes:
- text/* files: bytes decoded as UTF-8 and sent through text extraction
- everything else (PDF, DOCX, ...): the model reads the stored file by URI
"""

import asyncio
import logging
import mimetypes
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from src.common.blob_store import BlobStore
from src.common.skill_types import ExtractionResult, SkillCandidate
from src.connectors.base import SkillConnector
from src.extraction.skill_extractor import SkillExtractor

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_MIME_TYPE = "application/pdf"


@dataclass
class CVExtraction:
    """Skills extracted from one CV plus its storage metadata."""

    gcs_uri: str
    file_name: Optional[str]
    file_type: Optional[str]
    skills: ExtractionResult
    source: str = "cv"

    @property
    def candidates(self) -> List[SkillCandidate]:
        return self.skills.skills

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "gcs_uri": self.gcs_uri,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "skills": self.skills.to_dict(),
        }


def build_storage_key(user_id: str, filename: str, now_ms: Optional[int] = None) -> str:
    """
    Blob key for an uploaded CV.

    Examples:
        >>> build_storage_key("u1", "cv.pdf", now_ms=1700000000000)
        'cvs/u1/1700000000000-cv.pdf'
    """
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"cvs/{user_id}/{timestamp}-{filename}"


def is_plain_text(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.lower().startswith("text/")


class CVConnector(SkillConnector):
    """CV upload + extraction."""

    source_tag = "cv"

    def __init__(self, extractor: SkillExtractor, blob_store: BlobStore):
        self.extractor = extractor
        self.blob_store = blob_store

    async def extract(
        self,
        user_id: str,
        data: bytes,
        filename: str,
        mime_type: str,
    ) -> CVExtraction:
        """
        Upload a CV and extract skills from it.

        Args:
            user_id: Owner of the CV
            data: Raw file bytes
            filename: Original file name
            mime_type: MIME type reported by the uploader

        Returns:
            CVExtraction

        Raises:
            ExternalServiceError: If the blob upload fails
        """
        logger.info(f"Parsing CV file: {filename} for user: {user_id}")

        key = build_storage_key(user_id, filename)
        gcs_uri = await asyncio.to_thread(self.blob_store.upload, data, key, mime_type)
        logger.info(f"Uploaded CV to storage: {gcs_uri}")

        if is_plain_text(mime_type):
            text = data.decode("utf-8", errors="replace")
            logger.debug(f"Plain-text CV ({len(text)} chars), using text extraction")
            skills = await self.extractor.extract_from_text(text)
        else:
            skills = await self.extractor.extract_from_document(gcs_uri, mime_type=mime_type)

        return CVExtraction(
            gcs_uri=gcs_uri,
            file_name=filename,
            file_type=mime_type,
            skills=skills,
        )

    async def extract_from_url(self, file_url: str, mime_type: Optional[str] = None) -> CVExtraction:
        """
        Extract skills from a CV that is already in storage.

        Args:
            file_url: gs:// URI or GCS https URL
            mime_type: Optional MIME type (guessed from the URL, defaults to PDF)
        """
        logger.info(f"Parsing CV from URL: {file_url}")

        mime_type = mime_type or mimetypes.guess_type(file_url)[0] or DEFAULT_DOCUMENT_MIME_TYPE
        skills = await self.extractor.extract_from_document(file_url, mime_type=mime_type)

        return CVExtraction(
            gcs_uri=file_url,
            file_name=file_url.rstrip("/").rsplit("/", 1)[-1] or None,
            file_type=mime_type,
            skills=skills,
        )
