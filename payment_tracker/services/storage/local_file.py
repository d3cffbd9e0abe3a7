"""
Local File Fallback

Read-only copy of the payments document shipped with the app (data/payments.json).
Used only when the remote store cannot be reached. There is no write path:
anything loaded from here carries a placeholder version token, so saves are
rejected by the remote store.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Union

from payment_tracker.services.storage.interface import LocalFallbackSource, StorageError


class LocalFileSource(LocalFallbackSource):
    """Reads JSON documents from a directory on disk."""

    def __init__(self, base_dir: Union[str, Path]):
        self._base_dir = Path(base_dir)

    async def read_local(self, path: str) -> dict[str, Any]:
        file_path = self._base_dir / path
        try:
            text = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Local copy unavailable at {file_path}: {e}") from e

        try:
            content = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"Local copy at {file_path} is not valid JSON: {e}") from e

        if not isinstance(content, dict):
            raise StorageError(f"Local copy at {file_path} is not a JSON object")
        return content
