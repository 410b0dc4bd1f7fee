"""
GitHub Connector

Extracts skills from a user's public GitHub repositories:
1. List up to 10 most-recently-updated repos
2. Union the language breakdown across repos
3. Run each README through text extraction (missing READMEs are skipped)

GitHubClient is a thin REST wrapper (requests + tenacity retries on
connection errors/timeouts). All calls are blocking and run in a thread
from the async connector.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.common.config import Config
from src.common.error_handling import ErrorCollector, ExternalServiceError
from src.common.skill_types import SkillCandidate
from src.connectors.base import SkillConnector
from src.extraction.skill_extractor import SkillExtractor

logger = logging.getLogger(__name__)

# Request timeout in seconds
REQUEST_TIMEOUT = 15

MAX_REPOS = 10


class GitHubClient:
    """
    Minimal GitHub REST v3 client.

    Only 404 on README is treated as "not found"; other HTTP failures raise
    ExternalServiceError.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
    ):
        self.api_url = (api_url or Config.GITHUB_API_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "User-Agent": "skill-sense",
        })
        token = token if token is not None else Config.GITHUB_TOKEN
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_exception_type((requests.exceptions.ConnectionError, requests.exceptions.Timeout)),
        reraise=True,
    )
    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.session.get(f"{self.api_url}{path}", params=params, timeout=self.timeout)

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self._get(path, params=params)
        except requests.exceptions.RequestException as e:
            raise ExternalServiceError(f"GitHub request failed for {path}: {e}", service="github") from e

        if response.status_code != 200:
            raise ExternalServiceError(
                f"GitHub returned status {response.status_code} for {path}: {response.text[:200]}",
                service="github",
            )
        return response.json()

    def list_repos(self, username: str, per_page: int = MAX_REPOS, sort: str = "updated") -> List[Dict[str, Any]]:
        """Public repositories for a user, most recently updated first."""
        return self._get_json(f"/users/{username}/repos", params={"per_page": per_page, "sort": sort})

    def list_languages(self, owner: str, repo: str) -> Dict[str, int]:
        """Language -> bytes of code for one repository."""
        return self._get_json(f"/repos/{owner}/{repo}/languages")

    def get_readme(self, owner: str, repo: str) -> Optional[str]:
        """
        Base64-encoded README content, or None if the repo has no README.

        Raises:
            ExternalServiceError: For failures other than 404
        """
        path = f"/repos/{owner}/{repo}/readme"
        try:
            response = self._get(path)
        except requests.exceptions.RequestException as e:
            raise ExternalServiceError(f"GitHub request failed for {path}: {e}", service="github") from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise ExternalServiceError(
                f"GitHub returned status {response.status_code} for {path}",
                service="github",
            )
        return response.json().get("content")


def decode_readme(content: str) -> str:
    """Decode GitHub's base64 README payload (newline-wrapped) to text."""
    return base64.b64decode(content).decode("utf-8", errors="replace")


@dataclass
class GitHubExtraction:
    """Skills and language stats for one GitHub account."""

    username: str
    languages: List[str]
    skills: List[SkillCandidate]
    repo_count: int
    skipped: List[Dict[str, Any]] = field(default_factory=list)
    source: str = "github"

    @property
    def candidates(self) -> List[SkillCandidate]:
        return self.skills

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "username": self.username,
            "languages": list(self.languages),
            "skills": [s.to_dict() for s in self.skills],
            "repo_count": self.repo_count,
            "skipped": list(self.skipped),
        }


class GitHubConnector(SkillConnector):
    """README-driven skill extraction for a GitHub user."""

    source_tag = "github"

    def __init__(self, extractor: SkillExtractor, client: Optional[GitHubClient] = None):
        self.extractor = extractor
        self.client = client or GitHubClient()

    async def extract(self, username: str) -> GitHubExtraction:
        """
        Extract skills from a user's repositories.

        Raises:
            ExternalServiceError: If listing repos or languages fails
        """
        logger.info(f"Extracting skills from GitHub user: {username}")

        repos = await asyncio.to_thread(self.client.list_repos, username, MAX_REPOS, "updated")
        repos = repos[:MAX_REPOS]

        languages: Dict[str, None] = {}
        skills: List[SkillCandidate] = []
        errors = ErrorCollector()

        for repo in repos:
            repo_name = repo["name"]

            repo_languages = await asyncio.to_thread(self.client.list_languages, username, repo_name)
            for language in repo_languages:
                languages.setdefault(language, None)

            try:
                content = await asyncio.to_thread(self.client.get_readme, username, repo_name)
                if content is None:
                    logger.debug(f"No README in {username}/{repo_name}, skipping")
                    continue
                readme = decode_readme(content)
            except (ExternalServiceError, ValueError) as e:
                logger.warning(f"README fetch failed for {username}/{repo_name}, skipping: {e}")
                errors.add_error("github", repo_name, "readme_fetch", str(e), exception=e)
                continue

            extracted = await self.extractor.extract_from_text(readme)
            skills.extend(extracted.skills)

        logger.info(
            f"GitHub extraction for {username}: {len(skills)} skills, "
            f"{len(languages)} languages, {len(repos)} repos, {len(errors)} skipped"
        )

        return GitHubExtraction(
            username=username,
            languages=list(languages),
            skills=skills,
            repo_count=len(repos),
            skipped=errors.to_list(),
        )
