# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for cache keys and the per-file result cache."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

from mejora.cache import FileHashCache, cache_dir_for, file_digest, make_cache_key
from mejora.models import FindingInput


def test_cache_key_ignores_mapping_order() -> None:
    assert make_cache_key({"a": 1, "b": [1, 2]}) == make_cache_key({"b": [1, 2], "a": 1})
    assert make_cache_key({"a": 1}) != make_cache_key({"a": 2})


def test_cache_dir_layout(tmp_path: Path) -> None:
    assert cache_dir_for(tmp_path, "regex") == tmp_path / "node_modules" / ".cache" / "mejora" / "regex"


def test_file_digest(tmp_path: Path) -> None:
    path = tmp_path / "a.txt"
    path.write_bytes(b"hello")
    assert file_digest(path) == hashlib.sha256(b"hello").hexdigest()
    assert file_digest(tmp_path / "missing.txt") is None


def test_cache_roundtrip(tmp_path: Path) -> None:
    item = FindingInput(file="a.py", line=1, rule="r", message="m")
    cache = FileHashCache(tmp_path / "cache" / "key.json")
    cache.load()
    assert cache.lookup("a.py", "h1") is None
    cache.record("a.py", "h1", [item])
    cache.save()

    reloaded = FileHashCache(cache.path)
    reloaded.load()
    assert reloaded.lookup("a.py", "h1") == [item]
    assert reloaded.lookup("a.py", "other") is None
    assert json.loads(cache.path.read_text(encoding="utf-8")).keys() == {"a.py"}


def test_corrupt_cache_is_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "key.json"
    path.write_text("{broken", encoding="utf-8")
    cache = FileHashCache(path)
    cache.load()
    assert cache.lookup("a.py", "h") is None

    path.write_text('{"a.py": {"hash": "h", "items": "nope"}, "b.py": {"hash": "h"}}', encoding="utf-8")
    cache.load()
    assert cache.lookup("a.py", "h") is None
    assert cache.lookup("b.py", "h") == []
