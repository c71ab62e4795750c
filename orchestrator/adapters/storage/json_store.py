"""JSON file-based storage adapter: implements StoragePort."""

import json
import os
import re
import sys
import tempfile
from pathlib import Path
from typing import Dict, List

_KEY_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


def _log(msg: str):
    print(msg, file=sys.stderr)


class JsonStorage:
    """One JSON list per key under ``storage_dir`` (``<key>.json``)."""

    def __init__(self, storage_dir: str = "memory"):
        self._storage_dir = Path(storage_dir)
        self._storage_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._storage_dir / f"{key}.json"

    def load(self, key: str) -> list:
        path = self._path(key)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            _log(f"[JsonStorage] load {key} failed: {e}")
            return []
        return raw if isinstance(raw, list) else []

    def save(self, key: str, data: list) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        # default=str keeps arbitrary agent payloads serializable
        content = json.dumps(data, ensure_ascii=False, indent=2, default=str)
        # Atomic write: temp file in the same directory, then replace
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, str(path))
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise


class MemoryStorage:
    """In-process StoragePort used when nothing should touch disk."""

    def __init__(self):
        self._data: Dict[str, List] = {}

    def load(self, key: str) -> list:
        return list(self._data.get(key, []))

    def save(self, key: str, data: list) -> None:
        self._data[key] = list(data)
