# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Simple file-based caching for per-file check results."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from threading import Lock

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import CACHE_ROOT
from .models import FindingInput


def make_cache_key(payload: object) -> str:
    """Return a stable SHA-256 key for ``payload``.

    Mapping keys are sorted before hashing so that logically identical
    configurations produce the same key regardless of declaration order.
    """

    canonical = json.dumps(payload, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def cache_dir_for(root: Path, check_type: str) -> Path:
    """Return the cache directory used by runners of ``check_type``."""

    return root / CACHE_ROOT / check_type


def file_digest(path: Path) -> str | None:
    """Return the SHA-256 digest of ``path`` contents, or ``None`` when unreadable."""

    hasher = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(65536), b""):
                hasher.update(chunk)
    except OSError:
        return None
    return hasher.hexdigest()


class CachedFileEntry(BaseModel):
    """Findings recorded for one file at a given content digest."""

    model_config = ConfigDict(frozen=True)

    hash: str
    items: list[FindingInput] = Field(default_factory=list)


class FileHashCache:
    """Content-addressed cache of findings keyed by relative file path.

    Entries from the previous run are reused when a file's digest is
    unchanged; only entries touched during the current run are written back,
    so deleted files drop out automatically.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._previous: dict[str, CachedFileEntry] = {}
        self._current: dict[str, CachedFileEntry] = {}
        self._lock = Lock()

    @property
    def path(self) -> Path:
        """Return the location of the cache document."""
        return self._path

    def load(self) -> None:
        """Read the previous cache document, treating any failure as an empty cache."""

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            self._previous = {}
            return
        if not isinstance(raw, dict):
            self._previous = {}
            return
        entries: dict[str, CachedFileEntry] = {}
        for key, value in raw.items():
            try:
                entries[str(key)] = CachedFileEntry.model_validate(value)
            except ValidationError:
                continue
        self._previous = entries

    def lookup(self, file: str, digest: str) -> list[FindingInput] | None:
        """Return cached findings for ``file`` when its digest still matches."""

        entry = self._previous.get(file)
        if entry is None or entry.hash != digest:
            return None
        self.record(file, digest, entry.items)
        return list(entry.items)

    def record(self, file: str, digest: str, items: list[FindingInput]) -> None:
        """Remember ``items`` for ``file`` at ``digest`` for the next run."""

        with self._lock:
            self._current[file] = CachedFileEntry(hash=digest, items=items)

    def save(self) -> None:
        """Persist the entries recorded during the current run, ignoring disk errors."""

        payload = {key: entry.model_dump(mode="json") for key, entry in sorted(self._current.items())}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError:
            # Cache writes are best-effort; ignore disk errors.
            return


__all__ = ["CachedFileEntry", "FileHashCache", "cache_dir_for", "file_digest", "make_cache_key"]
