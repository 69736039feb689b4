from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class KeyValueBackend(ABC):
    """Durable text storage addressed by a namespace key."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def write(self, key: str, text: str) -> None:
        raise NotImplementedError


class MemoryBackend(KeyValueBackend):
    def __init__(self, initial: dict[str, str] | None = None):
        self._store: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._store.get(key)

    def write(self, key: str, text: str) -> None:
        self._store[key] = text


class FileBackend(KeyValueBackend):
    """One JSON file per key under a data directory, replaced atomically on write."""

    def __init__(self, directory: str | Path | None = None) -> None:
        raw = directory or os.getenv("SPENDWISE_DATA_DIR") or "~/.spendwise"
        self.directory = Path(raw).expanduser()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("FileBackend wrote key=%s bytes=%d path=%s", key, len(text), path)
