"""
Abstract Storage Interfaces

DESIGN DECISION: The payments document is stored as ONE JSON blob addressed by
a path, with an opaque version token for optimistic concurrency.
Defining that contract as an interface allows us to:
1. Use GitHub's contents API in production
2. Use in-memory storage for testing
3. Fall back to a read-only local copy when the remote is unreachable

The interface is intentionally tiny: whole-document fetch and conditional write.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class StoredDocument(BaseModel):
    """A fetched document and the token required to overwrite it."""

    content: dict[str, Any]
    version_token: str


class RemoteJSONStore(ABC):
    """
    Remote store for JSON documents with check-and-set writes.

    Any remote backend (GitHub, S3 with ETags, etc.) must implement these methods.
    """

    @abstractmethod
    async def fetch(self, path: str) -> StoredDocument:
        """
        Fetch a whole document and its current version token.

        Args:
            path: Location of the document in the store

        Returns:
            The parsed document and its version token

        Raises:
            AuthError: If the credential is missing or rejected
            PathNotFoundError: If nothing exists at path
            StorageError: For any other transport or decoding failure
        """
        pass

    @abstractmethod
    async def write(
        self,
        path: str,
        content: dict[str, Any],
        expected_version_token: str,
    ) -> str:
        """
        Overwrite a document, but only if its token still matches.

        Args:
            path: Location of the document in the store
            content: The complete new document
            expected_version_token: Token from the last fetch or write

        Returns:
            The new version token

        Raises:
            ConflictError: If expected_version_token is stale
            AuthError: If the credential is missing or rejected
            StorageError: For any other transport failure
        """
        pass


class LocalFallbackSource(ABC):
    """
    Read-only source used when the remote store cannot be reached.
    """

    @abstractmethod
    async def read_local(self, path: str) -> dict[str, Any]:
        """
        Read a document from the local copy.

        Raises:
            StorageError: If the copy is missing or unreadable
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class AuthError(StorageError):
    """Credential for the remote store is missing or invalid."""
    pass


class ConflictError(StorageError):
    """Conditional write rejected because the version token is stale."""
    pass


class PathNotFoundError(StorageError):
    """No document exists at the requested path."""
    pass
