"""File-backed store for the user's display name."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_KEY = "roombook_username"


class ProfileRepository:
    """Keeps a single display-name string in a small JSON file.

    Setting an empty name removes the stored value.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8") or "{}")

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def get(self) -> str | None:
        return self._read().get(_KEY) or None

    def set(self, display_name: str) -> str | None:
        if not display_name:
            self.clear()
            return None
        data = self._read()
        data[_KEY] = display_name
        self._write(data)
        logger.info("Saved display name")
        return display_name

    def clear(self) -> None:
        data = self._read()
        if data.pop(_KEY, None) is not None:
            self._write(data)
