# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for baseline persistence and update semantics."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mejora.baseline import BaselineStore, EntryUpdate, serialize_baseline
from mejora.errors import BaselineError
from mejora.models import Baseline, BaselineEntry
from mejora.snapshot import normalize_snapshot


def _entry(make_input, *rules: str) -> BaselineEntry:
    snapshot = normalize_snapshot([make_input(rule=rule, line=index + 1) for index, rule in enumerate(rules)])
    return BaselineEntry(items=snapshot.items)


def _store(tmp_path: Path, *, in_ci: bool = False) -> BaselineStore:
    return BaselineStore(Path(".mejora") / "baseline.json", in_ci=in_ci, root=tmp_path)


def test_load_missing_file_returns_none(tmp_path: Path) -> None:
    assert _store(tmp_path).load() is None


def test_save_and_load_roundtrip(tmp_path: Path, make_input) -> None:
    store = _store(tmp_path)
    baseline = BaselineStore.create({"eslint": _entry(make_input, "a", "b")})
    store.save(baseline)

    text = store.path.read_text(encoding="utf-8")
    assert text == serialize_baseline(baseline)
    assert text.endswith("}\n")
    assert json.loads(text)["version"] == 2
    assert '\n  "checks"' in text
    assert store.markdown_path.read_text(encoding="utf-8").startswith("# Mejora Baseline")
    assert store.load() == baseline


def test_save_is_skipped_in_ci_unless_forced(tmp_path: Path, make_input) -> None:
    store = _store(tmp_path, in_ci=True)
    baseline = BaselineStore.create({"eslint": _entry(make_input, "a")})
    store.save(baseline)
    assert not store.path.exists()
    store.save(baseline, force=True)
    assert store.path.exists()
    assert store.markdown_path.exists()


def test_update_returns_same_object_when_ids_match(make_input) -> None:
    entry = _entry(make_input, "a", "b")
    baseline = BaselineStore.create({"eslint": entry})
    moved = BaselineEntry(items=[item.model_copy(update={"line": item.line + 10}) for item in entry.items])
    assert BaselineStore.update(baseline, "eslint", moved) is baseline


def test_update_copies_instead_of_mutating(make_input) -> None:
    baseline = BaselineStore.create({"eslint": _entry(make_input, "a")})
    replacement = _entry(make_input, "a", "b")
    updated = BaselineStore.update(baseline, "eslint", replacement)
    assert updated is not baseline
    assert updated.checks["eslint"] == replacement
    assert len(baseline.checks["eslint"].items) == 1


def test_update_from_nothing_creates_baseline(make_input) -> None:
    updated = BaselineStore.update(None, "eslint", BaselineEntry())
    assert updated.version == 2
    assert updated.checks == {"eslint": BaselineEntry()}


def test_batch_update(make_input) -> None:
    current = _entry(make_input, "a")
    baseline = BaselineStore.create({"eslint": current})
    assert BaselineStore.batch_update(baseline, [EntryUpdate("eslint", current)]) is baseline
    updated = BaselineStore.batch_update(
        baseline,
        [EntryUpdate("eslint", current), EntryUpdate("regex", _entry(make_input, "todo"))],
    )
    assert set(updated.checks) == {"eslint", "regex"}
    assert set(baseline.checks) == {"eslint"}


def test_get_entry() -> None:
    entry = BaselineEntry()
    assert BaselineStore.get_entry(None, "x") is None
    assert BaselineStore.get_entry(Baseline(checks={"x": entry}), "x") is entry
    assert BaselineStore.get_entry(Baseline(), "x") is None


def test_load_resolves_conflicts_and_rewrites_file(tmp_path: Path, make_input) -> None:
    store = _store(tmp_path, in_ci=True)
    ours = serialize_baseline(BaselineStore.create({"eslint": _entry(make_input, "a")}))
    theirs = serialize_baseline(BaselineStore.create({"eslint": _entry(make_input, "b")}))
    store.path.parent.mkdir(parents=True)
    conflicted = f"<<<<<<< HEAD\n{ours.rstrip()}\n=======\n{theirs.rstrip()}\n>>>>>>> main\n"
    store.path.write_text(conflicted, encoding="utf-8")

    resolved = store.load()

    assert resolved is not None
    assert len(resolved.checks["eslint"].items) == 2
    on_disk = store.path.read_text(encoding="utf-8")
    assert "<<<<<<<" not in on_disk
    assert on_disk == serialize_baseline(resolved)


def test_load_regenerates_conflicted_markdown(tmp_path: Path, make_input) -> None:
    store = _store(tmp_path)
    baseline = BaselineStore.create({"eslint": _entry(make_input, "a")})
    store.save(baseline)
    store.markdown_path.write_text("<<<<<<< HEAD\nold\n=======\nnew\n>>>>>>> main\n", encoding="utf-8")

    assert store.load() == baseline
    markdown = store.markdown_path.read_text(encoding="utf-8")
    assert "<<<<<<<" not in markdown
    assert markdown.startswith("# Mejora Baseline")


def test_load_invalid_json_raises(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{not json", encoding="utf-8")
    with pytest.raises(BaselineError, match="not valid JSON"):
        store.load()


def test_load_invalid_structure_raises(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.path.parent.mkdir(parents=True)
    store.path.write_text('{"version": 2, "checks": {"x": {"items": [{"id": 1}]}}}', encoding="utf-8")
    with pytest.raises(BaselineError, match="invalid structure"):
        store.load()


def test_load_invalid_utf8_raises(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.path.parent.mkdir(parents=True)
    store.path.write_bytes(b'{"version": 2, "checks": {}}\xff')
    with pytest.raises(BaselineError, match="not valid UTF-8"):
        store.load()


def test_paths_resolve_against_root(tmp_path: Path) -> None:
    store = _store(tmp_path)
    assert store.path == tmp_path / ".mejora" / "baseline.json"
    assert store.markdown_path == tmp_path / ".mejora" / "baseline.md"
