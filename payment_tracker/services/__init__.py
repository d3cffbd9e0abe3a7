"""Services package."""

from payment_tracker.services.storage import (
    AuthError,
    ConflictError,
    GitHubContentsClient,
    GitHubContentsStore,
    InMemoryJSONStore,
    LocalFallbackSource,
    LocalFileSource,
    PathNotFoundError,
    RemoteJSONStore,
    StorageError,
    StoredDocument,
)

__all__ = [
    # Storage services
    "AuthError",
    "ConflictError",
    "GitHubContentsClient",
    "GitHubContentsStore",
    "InMemoryJSONStore",
    "LocalFallbackSource",
    "LocalFileSource",
    "PathNotFoundError",
    "RemoteJSONStore",
    "StorageError",
    "StoredDocument",
]
