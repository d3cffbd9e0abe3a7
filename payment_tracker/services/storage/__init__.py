"""
Storage Services Package

Provides the remote JSON store interface, the GitHub contents implementation,
an in-memory implementation and the read-only local fallback.
"""

from payment_tracker.services.storage.interface import (
    AuthError,
    ConflictError,
    LocalFallbackSource,
    PathNotFoundError,
    RemoteJSONStore,
    StorageError,
    StoredDocument,
)
from payment_tracker.services.storage.github_contents import (
    GitHubContentsClient,
    GitHubContentsStore,
)
from payment_tracker.services.storage.local_file import LocalFileSource
from payment_tracker.services.storage.memory import InMemoryJSONStore

__all__ = [
    # Interfaces
    "LocalFallbackSource",
    "RemoteJSONStore",
    "StoredDocument",
    # Exceptions
    "AuthError",
    "ConflictError",
    "PathNotFoundError",
    "StorageError",
    # Implementations
    "GitHubContentsClient",
    "GitHubContentsStore",
    "InMemoryJSONStore",
    "LocalFileSource",
]
