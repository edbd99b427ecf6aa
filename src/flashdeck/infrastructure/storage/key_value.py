"""
Key-value storage backends.

Mirrors the browser's localStorage: keys and values are plain strings.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from flashdeck.domain.errors import StorageError
from flashdeck.domain.ports import KeyValueStorage

logger = logging.getLogger(__name__)


class MemoryStorage(KeyValueStorage):
    """Dict-backed storage. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """
    Stores every key in a single JSON object on disk.

    The whole file is rewritten on each write via a temp file + rename, so a
    crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Storage file {self.path} is unreadable: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Storage file {self.path} does not contain an object")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
