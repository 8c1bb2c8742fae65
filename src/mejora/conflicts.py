# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Repair baselines that contain version-control merge conflict markers.

Each conflict block contributes two partial baselines ("ours" and "theirs").
A side may be a complete document or a fragment cut from the middle of the
``checks`` object; fragments are recovered by trimming a trailing comma,
balancing braces and wrapping them in a synthetic envelope. All partial
baselines are then union-merged per check, keyed by finding identifier, which
makes the result independent of which side introduced a finding.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from pydantic import ValidationError

from .brace_balancer import balance_braces
from .constants import BASELINE_VERSION, CONFLICT_MARKER
from .errors import ConflictResolutionError
from .identity import sort_by_id
from .models import Baseline, BaselineEntry, Finding

_CONFLICT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^<<<<<<<[^\n]*\n(.*?)\n=======\n(.*?)\n>>>>>>>[^\n]*$",
    re.MULTILINE | re.DOTALL,
)
_NO_MARKERS_MESSAGE: Final[str] = "Could not parse conflict markers in baseline"
_PARSE_FAILURE_PREFIX: Final[str] = "Failed to parse baseline during conflict resolution"
_UNPARSED: Final[object] = object()


@dataclass(frozen=True, slots=True)
class ConflictSection:
    """Both sides of one conflict block."""

    ours: str
    theirs: str


def extract_conflict_sections(content: str) -> list[ConflictSection]:
    """Return every conflict block found in ``content`` in document order.

    Args:
        content: Baseline file text containing conflict markers.

    Returns:
        list[ConflictSection]: One entry per ``<<<<<<<``/``=======``/``>>>>>>>`` block.

    Raises:
        ConflictResolutionError: If no complete conflict block is present.
    """

    normalised = content.replace("\r\n", "\n")
    sections = [
        ConflictSection(ours=match.group(1), theirs=match.group(2))
        for match in _CONFLICT_PATTERN.finditer(normalised)
    ]
    if not sections:
        raise ConflictResolutionError(_NO_MARKERS_MESSAGE)
    return sections


def _try_parse_json(text: str) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return _UNPARSED


def _is_truthy(value: object) -> bool:
    """Return JSON truthiness where objects and arrays are always truthy."""

    if isinstance(value, (dict, list)):
        return True
    return bool(value)


def _remove_trailing_comma(text: str) -> str:
    trimmed = text.strip()
    return trimmed[:-1] if trimmed.endswith(",") else trimmed


def _wrap_in_baseline_structure(fragment: str) -> str:
    body = _remove_trailing_comma(fragment)
    return f'{{\n  "version": {BASELINE_VERSION},\n  {body}\n}}'


def _normalize_structure(parsed: object) -> Baseline:
    """Coerce a parsed side into a :class:`Baseline`.

    Args:
        parsed: Decoded JSON value of one conflict side.

    Returns:
        Baseline: Partial baseline carrying the current schema version.

    Raises:
        TypeError: If ``parsed`` is not a JSON object, or is a fragment cut
            from inside a single check entry.
        ValidationError: If a check entry does not match the baseline schema.
    """

    if not isinstance(parsed, dict):
        raise TypeError("Baseline must be an object")
    checks = parsed.get("checks")
    if not isinstance(checks, dict):
        checks = {key: value for key, value in parsed.items() if key != "version"}
        misplaced = sorted(key for key, value in checks.items() if not isinstance(value, dict))
        if misplaced:
            raise TypeError(
                f"Conflict is inside a single check entry (found {', '.join(misplaced)} instead of check ids); "
                "resolve it manually",
            )
    return Baseline(
        version=BASELINE_VERSION,
        checks={str(check_id): BaselineEntry.model_validate(entry) for check_id, entry in checks.items()},
    )


def parse_conflict_side(side: str) -> Baseline:
    """Parse one side of a conflict block into a partial baseline.

    Args:
        side: Raw text found between two conflict markers.

    Returns:
        Baseline: Partial baseline recovered from ``side``.

    Raises:
        ConflictResolutionError: If the side cannot be recovered; the message
            embeds the underlying parser error.
    """

    try:
        direct = _try_parse_json(side.strip())
        if direct is not _UNPARSED and _is_truthy(direct):
            return _normalize_structure(direct)
        cleaned = balance_braces(_remove_trailing_comma(side))
        return _normalize_structure(json.loads(_wrap_in_baseline_structure(cleaned)))
    except (json.JSONDecodeError, TypeError, ValidationError) as exc:
        raise ConflictResolutionError(f"{_PARSE_FAILURE_PREFIX}: {exc}") from exc


def merge_baselines(baselines: Iterable[Baseline]) -> Baseline:
    """Union-merge ``baselines`` per check, keyed by finding identifier.

    Args:
        baselines: Partial baselines recovered from conflict sides.

    Returns:
        Baseline: Merged baseline at the current schema version. Checks without
        findings are omitted; findings are sorted by identifier.
    """

    items_by_check: dict[str, dict[str, Finding]] = {}
    for baseline in baselines:
        for check_id, entry in baseline.checks.items():
            if not entry.items:
                continue
            merged = items_by_check.setdefault(check_id, {})
            for item in entry.items:
                merged[item.id] = item

    checks = {
        check_id: BaselineEntry(type="items", items=sort_by_id(items.values()))
        for check_id, items in items_by_check.items()
    }
    return Baseline(version=BASELINE_VERSION, checks=checks)


def resolve_baseline_conflict(content: str) -> Baseline:
    """Resolve every conflict block in ``content`` into one coherent baseline.

    Args:
        content: Baseline file text containing conflict markers.

    Returns:
        Baseline: Union of all findings from both sides of every block.

    Raises:
        ConflictResolutionError: If the markers are missing or malformed, or
            any side fails to parse. No partial result is returned.
    """

    partials: list[Baseline] = []
    for section in extract_conflict_sections(content):
        partials.append(parse_conflict_side(section.ours))
        partials.append(parse_conflict_side(section.theirs))
    return merge_baselines(partials)


def has_conflict_markers(content: str) -> bool:
    """Return ``True`` when ``content`` contains a conflict start marker."""

    return CONFLICT_MARKER in content


__all__ = [
    "ConflictSection",
    "extract_conflict_sections",
    "has_conflict_markers",
    "merge_baselines",
    "parse_conflict_side",
    "resolve_baseline_conflict",
]
