# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Set-based comparison between a snapshot and the accepted baseline entry."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .identity import location_key, sort_by_id
from .models import BaselineEntry, ComparisonResult, Finding, Snapshot


def _index_by_id(items: Iterable[Finding]) -> dict[str, Finding]:
    return {item.id: item for item in items}


def _missing_from(source: Mapping[str, Finding], other: Mapping[str, Finding]) -> list[Finding]:
    """Return findings in ``source`` whose identifier is absent from ``other``."""

    return sort_by_id(item for item_id, item in source.items() if item_id not in other)


def _has_relocation(current: Mapping[str, Finding], baseline: Mapping[str, Finding]) -> bool:
    """Return ``True`` when a shared identifier changed its location."""

    for item_id, item in current.items():
        previous = baseline.get(item_id)
        if previous is not None and location_key(previous) != location_key(item):
            return True
    return False


def compare_snapshots(snapshot: Snapshot, baseline: BaselineEntry | None = None) -> ComparisonResult:
    """Compare ``snapshot`` with the previously accepted ``baseline`` entry.

    Args:
        snapshot: Normalised snapshot produced by the current run.
        baseline: Accepted entry for the same check, ``None`` on the first run.

    Returns:
        ComparisonResult: Regressions, improvements and relocation flag. An
        absent baseline yields an initial result with every flag cleared.
    """

    if baseline is None:
        return ComparisonResult(is_initial=True)

    current = _index_by_id(snapshot.items)
    accepted = _index_by_id(baseline.items)
    new_issues = _missing_from(current, accepted)
    removed_issues = _missing_from(accepted, current)
    return ComparisonResult(
        is_initial=False,
        has_regression=bool(new_issues),
        has_improvement=bool(removed_issues),
        has_relocation=_has_relocation(current, accepted),
        new_issues=new_issues,
        removed_issues=removed_issues,
    )


def entries_equivalent(entry: BaselineEntry, existing: BaselineEntry | None) -> bool:
    """Return ``True`` when ``existing`` holds exactly the identifiers of ``entry``.

    Args:
        entry: Candidate replacement entry.
        existing: Entry currently stored in the baseline, if any.

    Returns:
        bool: ``False`` when ``existing`` is absent, otherwise whether both
        entries contain the same set of identifiers regardless of order.
    """

    if existing is None:
        return False
    return entry.ids == existing.ids


__all__ = ["compare_snapshots", "entries_equivalent"]
