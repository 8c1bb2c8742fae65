# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers turning ESLint and TypeScript compiler output into finding inputs."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final

from ..constants import GLOBAL_FILE
from ..models import FindingInput
from ..serialization import JsonValue, coerce_optional_str, safe_int

_TSC_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<file>[^:(\n]+)\((?P<line>\d+),(?P<col>\d+)\):\s*"
    r"(?P<severity>error|warning)\s*(?P<code>TS\d+)\s*:\s*(?P<message>.*)$",
)
_TSC_GLOBAL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<severity>error|warning)\s*(?P<code>TS\d+)\s*:\s*(?P<message>.*)$",
)
_IMPORT_PATTERN: Final[re.Pattern[str]] = re.compile(r'import\("([^"]+)"\)')


def relative_to_root(path: str, root: Path) -> str:
    """Return ``path`` relative to ``root`` using POSIX separators."""

    candidate = Path(path)
    absolute = candidate if candidate.is_absolute() else root / candidate
    return Path(os.path.relpath(absolute, root)).as_posix()


def is_within_root(path: str, root: Path) -> bool:
    """Return ``True`` when ``path`` resolves inside ``root``."""

    relative = relative_to_root(path, root)
    return relative != ".." and not relative.startswith("../")


def normalize_diagnostic_message(message: str, root: Path) -> str:
    """Rewrite absolute ``import("…")`` paths inside ``message`` relative to ``root``.

    Paths outside the project are left untouched so that baselines stay
    portable across machines without hiding third-party locations.
    """

    def _rewrite(match: re.Match[str]) -> str:
        import_path = match.group(1)
        if not os.path.isabs(import_path):
            return match.group(0)
        relative = relative_to_root(import_path, root)
        if relative.startswith(".."):
            return match.group(0)
        return f'import("{relative or "."}")'

    return _IMPORT_PATTERN.sub(_rewrite, message)


def parse_eslint(payload: JsonValue, root: Path, *, rules: Iterable[str] = ()) -> list[FindingInput]:
    """Parse ESLint ``--format json`` output into finding inputs.

    Args:
        payload: Decoded JSON document produced by ESLint.
        root: Project root used to relativise file paths.
        rules: When non-empty, only these rule identifiers are tracked.

    Returns:
        list[FindingInput]: Findings for messages that carry a rule identifier.
    """

    tracked = set(rules)
    entries = payload if isinstance(payload, list) else []
    results: list[FindingInput] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        path = coerce_optional_str(entry.get("filePath"))
        messages = entry.get("messages")
        if path is None or not isinstance(messages, list):
            continue
        file = relative_to_root(path, root)
        for message in messages:
            if not isinstance(message, dict):
                continue
            rule = coerce_optional_str(message.get("ruleId"))
            if not rule or (tracked and rule not in tracked):
                continue
            results.append(
                FindingInput(
                    file=file,
                    line=safe_int(message.get("line")),
                    column=safe_int(message.get("column")),
                    rule=rule,
                    message=(coerce_optional_str(message.get("message")) or "").strip(),
                ),
            )
    return results


def parse_tsc(stdout: Sequence[str], root: Path) -> list[FindingInput]:
    """Parse ``tsc --pretty false`` output into finding inputs.

    Indented continuation lines are folded into the preceding message.
    Diagnostics without a file are reported against ``(global)``; diagnostics
    for files outside ``root`` are dropped.

    Args:
        stdout: Output lines emitted by the TypeScript compiler.
        root: Project root the compiler ran in.

    Returns:
        list[FindingInput]: Findings with ``TS<code>`` rules.
    """

    pending: list[tuple[str, int, int, str, list[str]]] = []
    for raw_line in stdout:
        if not raw_line.strip():
            continue
        if raw_line[:1].isspace():
            if pending:
                pending[-1][4].append(raw_line.strip())
            continue
        line = raw_line.strip()
        match = _TSC_PATTERN.match(line)
        if match:
            pending.append(
                (
                    match.group("file"),
                    int(match.group("line")),
                    int(match.group("col")),
                    match.group("code"),
                    [match.group("message").strip()],
                ),
            )
            continue
        match = _TSC_GLOBAL_PATTERN.match(line)
        if match:
            pending.append((GLOBAL_FILE, 0, 0, match.group("code"), [match.group("message").strip()]))

    results: list[FindingInput] = []
    for file, line_no, column, code, parts in pending:
        if file != GLOBAL_FILE:
            if not is_within_root(file, root):
                continue
            file = relative_to_root(file, root)
        results.append(
            FindingInput(
                file=file,
                line=line_no,
                column=column,
                rule=code,
                message=normalize_diagnostic_message("\n".join(parts), root),
            ),
        )
    return results


__all__ = [
    "is_within_root",
    "normalize_diagnostic_message",
    "parse_eslint",
    "parse_tsc",
    "relative_to_root",
]
