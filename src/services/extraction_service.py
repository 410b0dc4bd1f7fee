"""
Extraction Service

Orchestrates skill extraction across sources.

Operation families (the asymmetry is part of the contract):
- extract_from_cv_by_url / extract_from_github / extract_from_linkedin:
  enqueue a job and return {"job_id", "status": "queued"}; callers poll
  get_job_status()
- extract_from_cv_file: upload, extract and merge in the same call;
  errors propagate to the caller

The service registers process_job() as the job queue's default processor.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Type

from src.common.blob_store import GCSBlobStore
from src.common.config import Config
from src.common.error_handling import SkillSenseError, ValidationError
from src.common.logger import job_logger
from src.common.repositories import RepositoryConfig, create_profile_repository
from src.connectors.cv_connector import CVConnector, CVExtraction
from src.connectors.github_connector import GitHubClient, GitHubConnector
from src.connectors.linkedin_connector import LinkedInConnector
from src.extraction.skill_extractor import SkillExtractor
from src.jobs.manager import JobQueue
from src.jobs.models import Job, JobType
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


def _require(value: Any, name: str) -> None:
    if not value:
        raise ValidationError(f"{name} is required")


def build_cv_record(extraction: CVExtraction) -> Dict[str, Any]:
    """Entry appended to a profile's cvs list."""
    return {
        "file_name": extraction.file_name,
        "file_type": extraction.file_type,
        "gcs_uri": extraction.gcs_uri,
        "uploaded_at": datetime.utcnow().isoformat(),
        "skills_extracted": len(extraction.candidates),
    }


class ExtractionService:
    """Entry point for CV, GitHub and LinkedIn skill extraction."""

    def __init__(
        self,
        job_queue: JobQueue,
        cv_connector: CVConnector,
        github_connector: GitHubConnector,
        linkedin_connector: LinkedInConnector,
        profile_service: ProfileService,
    ):
        self.job_queue = job_queue
        self.cv_connector = cv_connector
        self.github_connector = github_connector
        self.linkedin_connector = linkedin_connector
        self.profile_service = profile_service

        self.job_queue.set_processor(self.process_job)
        logger.info("ExtractionService registered as job processor")

    # ===== QUEUED OPERATIONS =====

    async def extract_from_cv_by_url(self, user_id: str, file_url: str) -> Dict[str, Any]:
        """Queue extraction of a CV already in storage."""
        _require(user_id, "user_id")
        _require(file_url, "file_url")

        logger.info(f"Starting CV extraction for user: {user_id}")
        job_id = await self.job_queue.create_job(
            JobType.CV_EXTRACTION.value, {"user_id": user_id, "file_url": file_url}
        )
        return {"job_id": job_id, "status": "queued"}

    async def extract_from_github(self, user_id: str, username: str) -> Dict[str, Any]:
        """Queue extraction from a GitHub account."""
        _require(user_id, "user_id")
        _require(username, "username")

        logger.info(f"Starting GitHub extraction for user: {user_id}")
        job_id = await self.job_queue.create_job(
            JobType.GITHUB_EXTRACTION.value, {"user_id": user_id, "username": username}
        )
        return {"job_id": job_id, "status": "queued"}

    async def extract_from_linkedin(self, user_id: str, profile_url: str) -> Dict[str, Any]:
        """
        Queue extraction from a LinkedIn profile.

        Raises:
            ValidationError: If the profile URL is invalid (nothing is queued)
        """
        _require(user_id, "user_id")
        if not self.linkedin_connector.validate_url(profile_url):
            raise ValidationError("Invalid LinkedIn profile URL")

        logger.info(f"Starting LinkedIn extraction for user: {user_id}")
        job_id = await self.job_queue.create_job(
            JobType.LINKEDIN_EXTRACTION.value, {"user_id": user_id, "profile_url": profile_url}
        )
        return {"job_id": job_id, "status": "queued"}

    def get_job_status(self, job_id: str) -> Dict[str, Any]:
        """Job record as a dict, or {"error": "Job not found"}."""
        job = self.job_queue.get_job(job_id)
        if job is None:
            return {"error": "Job not found"}
        return job.to_dict()

    # ===== SYNCHRONOUS CV FILE =====

    async def extract_from_cv_file(
        self,
        user_id: str,
        data: bytes,
        filename: str,
        mime_type: str,
    ) -> Dict[str, Any]:
        """
        Upload a CV, extract skills and merge them into the profile.

        Returns:
            {"status": "completed", "skills_found": int, "result": {...}}

        Raises:
            ValidationError: Missing user id, file name or content
            ExternalServiceError: Blob upload failed or profile not found
        """
        _require(user_id, "user_id")
        _require(filename, "filename")
        _require(data, "file content")

        logger.info(f"Starting CV file extraction for user: {user_id}, file: {filename}")
        logger.debug(f"File details - Size: {len(data)} bytes, Type: {mime_type}")

        extraction = await self.cv_connector.extract(user_id, data, filename, mime_type)
        await self.profile_service.merge_extraction(
            user_id,
            extraction.candidates,
            self.cv_connector.source_tag,
            cv_record=build_cv_record(extraction),
        )

        skills_found = len(extraction.candidates)
        logger.info(f"CV extraction completed for user {user_id} - {skills_found} skills found")

        return {
            "status": "completed",
            "skills_found": skills_found,
            "result": extraction.to_dict(),
        }

    # ===== JOB PROCESSING =====

    async def process_job(self, job: Job) -> Dict[str, Any]:
        """Run a queued job. Exceptions are recorded on the job by the queue."""
        log = job_logger(__name__, job)
        log.info("Processing job")

        if job.type == JobType.CV_EXTRACTION.value:
            return await self._process_cv_job(job)
        if job.type == JobType.GITHUB_EXTRACTION.value:
            return await self._process_github_job(job)
        if job.type == JobType.LINKEDIN_EXTRACTION.value:
            return await self._process_linkedin_job(job)

        log.warning(f"Unknown job type: {job.type}")
        return {"processed": False, "message": f"Unknown job type: {job.type}"}

    async def _process_cv_job(self, job: Job) -> Dict[str, Any]:
        user_id = job.payload["user_id"]
        try:
            extraction = await self.cv_connector.extract_from_url(job.payload["file_url"])
            await self.profile_service.merge_extraction(
                user_id,
                extraction.candidates,
                self.cv_connector.source_tag,
                cv_record=build_cv_record(extraction),
            )
        except Exception as e:
            raise SkillSenseError(f"CV extraction failed: {e}") from e

        count = len(extraction.candidates)
        return {
            "success": True,
            "skills_extracted": count,
            "message": f"Successfully extracted {count} skills from CV",
        }

    async def _process_github_job(self, job: Job) -> Dict[str, Any]:
        user_id = job.payload["user_id"]
        try:
            extraction = await self.github_connector.extract(job.payload["username"])
            await self.profile_service.merge_extraction(
                user_id, extraction.candidates, self.github_connector.source_tag
            )
        except Exception as e:
            raise SkillSenseError(f"GitHub extraction failed: {e}") from e

        count = len(extraction.candidates)
        return {
            "success": True,
            "skills_extracted": count,
            "languages": extraction.languages,
            "repo_count": extraction.repo_count,
            "message": f"Successfully extracted {count} skills from {extraction.repo_count} repositories",
        }

    async def _process_linkedin_job(self, job: Job) -> Dict[str, Any]:
        user_id = job.payload["user_id"]
        try:
            extraction = await self.linkedin_connector.extract(job.payload["profile_url"])
            await self.profile_service.merge_extraction(
                user_id, extraction.candidates, self.linkedin_connector.source_tag
            )
        except Exception as e:
            raise SkillSenseError(f"LinkedIn extraction failed: {e}") from e

        count = len(extraction.candidates)
        return {
            "success": True,
            "skills_extracted": count,
            "message": f"Successfully extracted {count} skills from LinkedIn",
            "metadata": extraction.metadata,
        }


def create_extraction_service(config: Type[Config] = Config) -> ExtractionService:
    """
    Wire an ExtractionService against the real adapters.

    MongoDB backs the profile store and GCS the blob store; the extractor
    runs in mock mode when no GCP project is configured.

    Raises:
        ValueError: If MongoDB or the blob bucket is not configured
    """
    config.validate()

    extractor = SkillExtractor(project=config.GCP_PROJECT_ID, model=config.GEMINI_MODEL)
    blob_store = GCSBlobStore(bucket_name=config.GCS_BUCKET_NAME, project=config.GCP_PROJECT_ID or None)
    github_client = GitHubClient(token=config.GITHUB_TOKEN, api_url=config.GITHUB_API_URL)
    repository = create_profile_repository(
        RepositoryConfig(
            mongodb_uri=config.MONGODB_URI,
            database=config.MONGODB_DATABASE,
            collection=config.PROFILES_COLLECTION,
        )
    )

    return ExtractionService(
        job_queue=JobQueue(
            worker_count=config.JOB_WORKER_COUNT,
            fallback_delay=config.JOB_FALLBACK_DELAY_SECONDS,
        ),
        cv_connector=CVConnector(extractor, blob_store),
        github_connector=GitHubConnector(extractor, github_client),
        linkedin_connector=LinkedInConnector(extractor),
        profile_service=ProfileService(repository),
    )
