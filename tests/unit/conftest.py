"""
Global fixtures for all unit tests.

This conftest provides autouse fixtures that prevent real external service calls:
- MongoDB connection attempts (would cause 5-30s timeout per test)
- Environment variable isolation (prevents credential leakage)

It also provides in-memory fakes for the profile store, blob store,
Gemini stream client and GitHub client.
"""

import base64
import copy
import os
from typing import Any, Dict, List, Optional, Union

import pytest
from unittest.mock import patch, MagicMock

# Set test environment BEFORE any imports to prevent Config from loading real values
os.environ["GCP_PROJECT_ID"] = ""
os.environ["GITHUB_TOKEN"] = ""
os.environ["JOB_FALLBACK_DELAY_SECONDS"] = "0.01"

from src.common.blob_store import BlobStore
from src.common.error_handling import ExternalServiceError, ProfileNotFoundError
from src.common.repositories.base import ProfileRepositoryInterface
from src.extraction.skill_extractor import SkillExtractor


@pytest.fixture(autouse=True)
def mock_mongodb():
    """
    Prevent MongoDB connection attempts in all unit tests.

    MongoClient("") defaults to localhost:27017, causing 5-30s timeout per test.
    """
    with patch("src.common.repositories.mongo_profile_repository.MongoClient") as mock_client:
        mock_instance = MagicMock()
        mock_db = MagicMock()
        mock_collection = MagicMock()

        # Setup chain: client["db"]["collection"]
        mock_instance.__getitem__ = MagicMock(return_value=mock_db)
        mock_db.__getitem__ = MagicMock(return_value=mock_collection)
        mock_collection.find_one = MagicMock(return_value=None)

        mock_client.return_value = mock_instance
        yield mock_client


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Isolate test environment from real credentials and configurations.

    This prevents:
    - Real Vertex AI calls (empty project = mock extraction)
    - Authenticated GitHub calls
    """
    monkeypatch.setenv("GCP_PROJECT_ID", "")
    monkeypatch.setenv("GITHUB_TOKEN", "")
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)
    yield


# ===== FAKES =====

class FakeProfileRepository(ProfileRepositoryInterface):
    """In-memory profile store with $set update semantics."""

    def __init__(self, profiles: Optional[Dict[str, Dict[str, Any]]] = None):
        self.profiles: Dict[str, Dict[str, Any]] = copy.deepcopy(profiles or {})
        self.updates: List[tuple] = []

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        profile = self.profiles.get(user_id)
        return copy.deepcopy(profile) if profile is not None else None

    def update(self, user_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        if user_id not in self.profiles:
            raise ProfileNotFoundError(user_id)
        self.updates.append((user_id, copy.deepcopy(partial)))
        self.profiles[user_id].update(copy.deepcopy(partial))
        return copy.deepcopy(self.profiles[user_id])


class FakeBlobStore(BlobStore):
    """In-memory blob store returning gs:// URIs."""

    def __init__(self, bucket: str = "test-bucket", fail: bool = False):
        self.bucket = bucket
        self.fail = fail
        self.objects: Dict[str, tuple] = {}

    def upload(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        if self.fail:
            raise ExternalServiceError(f"Blob upload failed for {key}", service="gcs")
        self.objects[key] = (data, content_type)
        return f"gs://{self.bucket}/{key}"

    def download(self, key: str) -> bytes:
        if key not in self.objects:
            raise ExternalServiceError(f"Blob download failed for {key}", service="gcs")
        return self.objects[key][0]

    def signed_url(self, key: str, ttl_seconds: int = 3600) -> str:
        return f"https://storage.googleapis.com/{self.bucket}/{key}?expires={ttl_seconds}"

    def delete(self, key: str) -> None:
        self.objects.pop(key, None)


class FakeStreamClient:
    """
    Stand-in for GeminiStreamClient.

    Yields the configured chunks, or raises the configured error on first
    iteration (like a failing streaming call).
    """

    def __init__(self, chunks: Union[List[str], str, None] = None, error: Optional[Exception] = None):
        if isinstance(chunks, str):
            chunks = [chunks]
        self.chunks = chunks or []
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def stream_generate(self, prompt: str, file_uri: Optional[str] = None, mime_type: str = "application/pdf"):
        self.calls.append({"prompt": prompt, "file_uri": file_uri, "mime_type": mime_type})
        if self.error is not None:
            raise self.error
        for chunk in self.chunks:
            yield chunk


class FakeGitHubClient:
    """
    Stand-in for GitHubClient.

    repos maps repo name -> {"languages": {...}, "readme": text | None | Exception}
    """

    def __init__(self, repos: Optional[Dict[str, Dict[str, Any]]] = None):
        self.repos = repos or {}
        self.readme_requests: List[str] = []

    def list_repos(self, username: str, per_page: int = 10, sort: str = "updated") -> List[Dict[str, Any]]:
        return [{"name": name} for name in list(self.repos)[:per_page]]

    def list_languages(self, owner: str, repo: str) -> Dict[str, int]:
        return dict(self.repos[repo].get("languages", {}))

    def get_readme(self, owner: str, repo: str) -> Optional[str]:
        self.readme_requests.append(repo)
        readme = self.repos[repo].get("readme")
        if isinstance(readme, Exception):
            raise readme
        if readme is None:
            return None
        return base64.b64encode(readme.encode("utf-8")).decode("ascii")


@pytest.fixture
def profile_repository():
    """Repository holding one empty profile for user "u1"."""
    return FakeProfileRepository({"u1": {"_id": "u1", "skills": []}})


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def mock_extractor():
    """Extractor with no project configured (deterministic mock mode)."""
    return SkillExtractor(project="")


@pytest.fixture
def make_stream_extractor():
    """Factory for a model-backed extractor using FakeStreamClient."""
    def _make(chunks=None, error=None):
        client = FakeStreamClient(chunks=chunks, error=error)
        extractor = SkillExtractor(project="test-project", model="gemini-test", stream_client=client)
        return extractor, client
    return _make


@pytest.fixture
def make_github_client():
    def _make(repos=None):
        return FakeGitHubClient(repos)
    return _make


@pytest.fixture
def failing_blob_store():
    return FakeBlobStore(fail=True)


@pytest.fixture
def make_profile_repository():
    def _make(profiles=None):
        return FakeProfileRepository(profiles)
    return _make
