"""
GitHub Contents Storage Implementation

DESIGN DECISION: The payments document lives in a GitHub repository because:
1. Every save is a commit, so history and rollback come for free
2. No database or server to run - the dashboard only needs a token
3. The blob `sha` doubles as an optimistic-concurrency version token

TRADEOFFS:
- Whole-document writes only (fine for a few hundred payments)
- The contents API rate-limits aggressively; we never poll
- A stale sha is rejected by GitHub; we surface that, we don't merge

The implementation follows the abstract interface, so the store can be
swapped without touching the record store.
"""

import asyncio
import base64
import json
from typing import Any, Optional

import requests
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from payment_tracker.config import GitHubSettings, get_settings
from payment_tracker.models.payment import utc_now
from payment_tracker.services.storage.interface import (
    AuthError,
    ConflictError,
    PathNotFoundError,
    RemoteJSONStore,
    StorageError,
    StoredDocument,
)


logger = structlog.get_logger(__name__)


def encode_content(content: dict[str, Any]) -> str:
    """Serialize a document the way the contents API expects it (base64 UTF-8)."""
    raw = json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_content(encoded: str) -> dict[str, Any]:
    """Decode a base64 contents payload (GitHub wraps it at 60 columns)."""
    raw = base64.b64decode(encoded)
    return json.loads(raw.decode("utf-8"))


class GitHubContentsClient:
    """
    Low-level GitHub contents API wrapper.

    Handles authentication headers and retries transient network failures.
    """

    def __init__(
        self,
        settings: Optional[GitHubSettings] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self._settings = settings or get_settings().github
        self._session = session or requests.Session()
        self._timeout = timeout or get_settings().app.request_timeout_seconds

    @property
    def settings(self) -> GitHubSettings:
        return self._settings

    def _url(self, path: str) -> str:
        return (
            f"{self._settings.api_url.rstrip('/')}/repos/"
            f"{self._settings.owner}/{self._settings.repo}/contents/{path.lstrip('/')}"
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.token}",
            "Accept": "application/vnd.github.v3+json",
        }

    @retry(
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def get_contents(self, path: str) -> requests.Response:
        return self._session.get(
            self._url(path),
            headers=self._headers(),
            params={"ref": self._settings.branch},
            timeout=self._timeout,
        )

    @retry(
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def put_contents(self, path: str, body: dict[str, Any]) -> requests.Response:
        return self._session.put(
            self._url(path),
            headers=self._headers(),
            json=body,
            timeout=self._timeout,
        )


class GitHubContentsStore(RemoteJSONStore):
    """
    GitHub implementation of the remote JSON store.

    The version token is the blob sha returned by the contents API.
    """

    def __init__(self, client: Optional[GitHubContentsClient] = None):
        self._client = client or GitHubContentsClient()

    def _check_configured(self) -> None:
        settings = self._client.settings
        if not settings.token:
            raise AuthError("GitHub token missing")
        if not settings.owner or not settings.repo:
            raise StorageError("GitHub repository not configured")

    def _raise_for_status(self, response: requests.Response, path: str) -> None:
        status = response.status_code
        if status < 400:
            return
        if status in (401, 403):
            raise AuthError(f"GitHub rejected the token ({status})")
        if status == 404:
            raise PathNotFoundError(f"Document not found: {path}")
        if status in (409, 422):
            raise ConflictError(
                f"Version token rejected for {path} ({status}); reload and retry"
            )
        raise StorageError(f"GitHub API error {status}: {response.text[:200]}")

    async def fetch(self, path: str) -> StoredDocument:
        """Fetch the document and its blob sha."""
        self._check_configured()
        try:
            response = await asyncio.to_thread(self._client.get_contents, path)
        except requests.RequestException as e:
            raise StorageError(f"Failed to reach GitHub: {e}") from e

        self._raise_for_status(response, path)

        try:
            payload = response.json()
            content = decode_content(payload["content"])
            sha = payload["sha"]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Unexpected GitHub contents payload: {e}") from e

        logger.debug("github_document_fetched", path=path, sha=sha)
        return StoredDocument(content=content, version_token=sha)

    async def write(
        self,
        path: str,
        content: dict[str, Any],
        expected_version_token: str,
    ) -> str:
        """Commit the document, guarded by the expected blob sha."""
        self._check_configured()
        body = {
            "message": f"Update payments data - {utc_now().isoformat()}",
            "content": encode_content(content),
            "sha": expected_version_token,
            "branch": self._client.settings.branch,
        }
        try:
            response = await asyncio.to_thread(self._client.put_contents, path, body)
        except requests.RequestException as e:
            raise StorageError(f"Failed to reach GitHub: {e}") from e

        self._raise_for_status(response, path)

        try:
            new_sha = response.json()["content"]["sha"]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Unexpected GitHub update payload: {e}") from e

        logger.info("github_document_written", path=path, sha=new_sha)
        return new_sha
