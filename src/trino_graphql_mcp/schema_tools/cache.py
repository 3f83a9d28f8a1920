"""Metadata cache backends.

Discovery results are cached under a path made of sanitized catalog, schema
and table names followed by a leaf key (``catalogs``, ``schemas``, ``tables``,
``columns`` or ``joins``). Values are JSON-shaped data.

Classes:
- MetadataCache: Protocol implemented by every backend
- FileMetadataCache: One JSON file per path below a root folder
- MemoryMetadataCache: Dictionary-backed cache, mainly for tests
"""

from __future__ import annotations

from collections.abc import Sequence
import json
import os
from pathlib import Path
import tempfile
import threading
from typing import Any, Protocol

from fastmcp.utilities.logging import get_logger

_logger = get_logger(__name__)


class MetadataCache(Protocol):
    """Key/value store keyed by a sequence of sanitized path segments."""

    def get(self, path: Sequence[str]) -> Any | None: ...

    def put(self, path: Sequence[str], value: Any) -> None: ...


class FileMetadataCache:
    """File-backed cache laid out as ``<root>/<catalog>/<schema>/<table>/<leaf>.json``.

    Writes go to a temporary file in the target folder and are moved into
    place only after the complete value has been serialized, so an aborted
    write never leaves a partial cache entry behind.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _file_for(self, path: Sequence[str]) -> Path:
        if not path:
            msg = "Cache path must not be empty"
            raise ValueError(msg)
        *folders, leaf = path
        return self.root.joinpath(*folders, f"{leaf}.json")

    def get(self, path: Sequence[str]) -> Any | None:
        file = self._file_for(path)
        if not file.is_file():
            return None
        try:
            with file.open(encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            _logger.warning("Ignoring unreadable cache entry %s: %s", file, e)
            return None

    def put(self, path: Sequence[str], value: Any) -> None:
        file = self._file_for(path)
        file.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(value, indent=2, ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{file.stem}.", suffix=".tmp", dir=file.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class MemoryMetadataCache:
    """In-process cache; values are copied through JSON to mimic persistence."""

    def __init__(self) -> None:
        self._data: dict[tuple[str, ...], str] = {}
        self._lock = threading.Lock()

    def get(self, path: Sequence[str]) -> Any | None:
        with self._lock:
            raw = self._data.get(tuple(path))
        return None if raw is None else json.loads(raw)

    def put(self, path: Sequence[str], value: Any) -> None:
        raw = json.dumps(value)
        with self._lock:
            self._data[tuple(path)] = raw

    def keys(self) -> list[tuple[str, ...]]:
        with self._lock:
            return sorted(self._data)

