# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Persistence and update semantics for the accepted baseline."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from . import logging as log
from .comparison import entries_equivalent
from .conflicts import has_conflict_markers, resolve_baseline_conflict
from .constants import BASELINE_VERSION, DEFAULT_BASELINE_PATH
from .errors import BaselineError
from .models import Baseline, BaselineEntry
from .reporting.markdown import generate_markdown_report


@dataclass(frozen=True, slots=True)
class EntryUpdate:
    """Replacement entry for a single check."""

    check_id: str
    entry: BaselineEntry


def serialize_baseline(baseline: Baseline) -> str:
    """Return the canonical JSON text for ``baseline`` (2-space indent, trailing newline)."""

    return json.dumps(baseline.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"


class BaselineStore:
    """Load, update and persist the baseline file and its markdown report.

    Args:
        path: Location of the JSON baseline, relative to ``root`` unless absolute.
        in_ci: Whether the process runs under continuous integration. Saves are
            skipped in CI unless forced.
        root: Project root that finding paths are relative to. Defaults to the
            current working directory.
    """

    def __init__(
        self,
        path: Path = DEFAULT_BASELINE_PATH,
        *,
        in_ci: bool = False,
        root: Path | None = None,
    ) -> None:
        self._root = Path.cwd() if root is None else root
        self._path = path if path.is_absolute() else self._root / path
        self._markdown_path = self._path.with_suffix(".md")
        self._in_ci = in_ci

    @property
    def path(self) -> Path:
        """Return the absolute location of the JSON baseline."""
        return self._path

    @property
    def markdown_path(self) -> Path:
        """Return the absolute location of the derived markdown report."""
        return self._markdown_path

    @staticmethod
    def create(checks: Mapping[str, BaselineEntry] | None = None) -> Baseline:
        """Return a baseline at the current schema version wrapping ``checks``."""

        return Baseline(version=BASELINE_VERSION, checks=dict(checks or {}))

    @staticmethod
    def get_entry(baseline: Baseline | None, check_id: str) -> BaselineEntry | None:
        """Return the entry stored for ``check_id``, tolerating a missing baseline."""

        if baseline is None:
            return None
        return baseline.checks.get(check_id)

    @staticmethod
    def update(baseline: Baseline | None, check_id: str, entry: BaselineEntry) -> Baseline:
        """Return ``baseline`` with ``entry`` stored under ``check_id``.

        Args:
            baseline: Current baseline, ``None`` before the first run.
            check_id: Identifier of the check being updated.
            entry: Replacement entry.

        Returns:
            Baseline: The very same object when the stored entry already holds
            the same identifiers; otherwise a new baseline with a copied
            ``checks`` mapping. The input is never mutated.
        """

        current = baseline if baseline is not None else BaselineStore.create()
        if entries_equivalent(entry, current.checks.get(check_id)):
            return current
        return current.model_copy(update={"checks": {**current.checks, check_id: entry}})

    @staticmethod
    def batch_update(baseline: Baseline | None, updates: Iterable[EntryUpdate]) -> Baseline:
        """Apply several updates while copying the ``checks`` mapping at most once.

        Args:
            baseline: Current baseline, ``None`` before the first run.
            updates: Replacement entries keyed by check identifier.

        Returns:
            Baseline: The same object when no entry changed, otherwise a new baseline.
        """

        current = baseline if baseline is not None else BaselineStore.create()
        checks = dict(current.checks)
        changed = False
        for update in updates:
            if not entries_equivalent(update.entry, current.checks.get(update.check_id)):
                checks[update.check_id] = update.entry
                changed = True
        return current.model_copy(update={"checks": checks}) if changed else current

    def load(self) -> Baseline | None:
        """Read the baseline from disk, repairing merge conflicts when present.

        Returns:
            Baseline | None: The stored baseline, or ``None`` when no baseline
            file exists yet.

        Raises:
            ConflictResolutionError: If conflict markers cannot be resolved.
            BaselineError: If the file is not a valid baseline document.
            OSError: For read failures other than a missing file.
        """

        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise BaselineError(f"Baseline at {self._path} is not valid UTF-8: {exc}") from exc

        if has_conflict_markers(content):
            log.start("Merge conflict detected in baseline, auto-resolving...")
            resolved = resolve_baseline_conflict(content)
            self.save(resolved, force=True)
            log.success("Baseline conflict resolved")
            return resolved

        baseline = self._parse(content)
        self._resolve_markdown_conflict(baseline)
        return baseline

    def save(self, baseline: Baseline, *, force: bool = False) -> None:
        """Persist ``baseline`` and its markdown report.

        Writing is skipped entirely in CI unless ``force`` is set. Both files
        are written concurrently; the first failure propagates.

        Args:
            baseline: Baseline to persist.
            force: Write even when running under continuous integration.
        """

        if self._in_ci and not force:
            return

        json_content = serialize_baseline(baseline)
        markdown_content = self._render_markdown(baseline)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [
                executor.submit(self._path.write_text, json_content, encoding="utf-8"),
                executor.submit(self._markdown_path.write_text, markdown_content, encoding="utf-8"),
            ]
            for future in futures:
                future.result()

    def _parse(self, content: str) -> Baseline:
        try:
            return Baseline.model_validate(json.loads(content))
        except json.JSONDecodeError as exc:
            raise BaselineError(f"Baseline at {self._path} is not valid JSON: {exc}") from exc
        except ValidationError as exc:
            raise BaselineError(f"Baseline at {self._path} has an invalid structure: {exc}") from exc

    def _render_markdown(self, baseline: Baseline) -> str:
        return generate_markdown_report(baseline, self._path.parent, self._root)

    def _resolve_markdown_conflict(self, baseline: Baseline) -> None:
        """Regenerate the markdown report when it carries conflict markers."""

        try:
            markdown = self._markdown_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            # The report is derived data; a missing or unreadable file is not an error.
            return
        if not has_conflict_markers(markdown):
            return
        log.start("Merge conflict detected in markdown report, regenerating...")
        self._markdown_path.write_text(self._render_markdown(baseline), encoding="utf-8")
        log.success("Markdown report regenerated")


__all__ = ["BaselineStore", "EntryUpdate", "serialize_baseline"]
