"""
In-Memory Storage Implementation

A dict-backed RemoteJSONStore with a real check-and-set on the version token.
Used by the tests and for running the dashboard without a GitHub repository.
"""

import copy
import hashlib
import json
from typing import Any, Optional

from payment_tracker.services.storage.interface import (
    AuthError,
    ConflictError,
    PathNotFoundError,
    RemoteJSONStore,
    StoredDocument,
)


def content_token(content: dict[str, Any]) -> str:
    """Deterministic version token for a document (sha1 of its canonical JSON)."""
    raw = json.dumps(content, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return hashlib.sha1(raw).hexdigest()


class InMemoryJSONStore(RemoteJSONStore):
    """Remote store held in process memory."""

    def __init__(
        self,
        documents: Optional[dict[str, dict[str, Any]]] = None,
        credential: Optional[str] = "in-memory",
    ):
        self._credential = credential
        self._documents: dict[str, tuple[dict[str, Any], str]] = {}
        self.write_count = 0
        for path, content in (documents or {}).items():
            self.put(path, content)

    def put(self, path: str, content: dict[str, Any]) -> str:
        """
        Store a document directly, bypassing the token check.

        Simulates a change made by someone else; returns the new token.
        """
        stored = copy.deepcopy(content)
        token = content_token(stored)
        self._documents[path] = (stored, token)
        return token

    def current_token(self, path: str) -> Optional[str]:
        entry = self._documents.get(path)
        return entry[1] if entry else None

    def content(self, path: str) -> dict[str, Any]:
        """A copy of the stored document."""
        if path not in self._documents:
            raise PathNotFoundError(f"Document not found: {path}")
        return copy.deepcopy(self._documents[path][0])

    def _check_credential(self) -> None:
        if not self._credential:
            raise AuthError("Credential missing")

    async def fetch(self, path: str) -> StoredDocument:
        self._check_credential()
        if path not in self._documents:
            raise PathNotFoundError(f"Document not found: {path}")
        content, token = self._documents[path]
        return StoredDocument(content=copy.deepcopy(content), version_token=token)

    async def write(
        self,
        path: str,
        content: dict[str, Any],
        expected_version_token: str,
    ) -> str:
        self._check_credential()
        current = self.current_token(path)
        if current is not None and current != expected_version_token:
            raise ConflictError(
                f"Version token {expected_version_token!r} is stale for {path}"
            )
        self.write_count += 1
        return self.put(path, content)
