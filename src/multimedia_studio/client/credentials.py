"""Local persistence for a user-supplied Gemini API key (client mode)."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

STORAGE_KEY = "gemini-api-key"


class CredentialStore:
    """JSON file holding one credential under a fixed key."""

    def __init__(self, path: Path | str):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            logger.warning("[CREDENTIALS] Ignoring unreadable credential file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> str | None:
        value = self._read_all().get(STORAGE_KEY)
        return value if isinstance(value, str) and value else None

    def save(self, api_key: str) -> None:
        data = self._read_all()
        data[STORAGE_KEY] = api_key
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._write(data)

    def clear(self) -> None:
        data = self._read_all()
        if STORAGE_KEY not in data:
            return
        data.pop(STORAGE_KEY)
        self._write(data)

    def _write(self, data: dict) -> None:
        # Owner-only permissions before any content is written.
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(data))
