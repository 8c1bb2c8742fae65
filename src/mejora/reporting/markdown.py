# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render a baseline as a human-readable markdown report.

The report is regenerated wholesale on every save and is never edited by
hand, so merge conflicts inside it are repaired by regeneration alone.
"""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from itertools import groupby
from pathlib import Path
from typing import Final

from ..constants import GLOBAL_FILE
from ..models import Baseline, Finding
from ..text import plural

REPORT_TITLE: Final[str] = "# Mejora Baseline"
REPORT_INTRO: Final[str] = "This file represents the current accepted state of the codebase."
_BLANK_RUNS: Final[re.Pattern[str]] = re.compile(r"\n{3,}")
_ESCAPES: Final[dict[str, str]] = {"<": "&lt;", ">": "&gt;", "[": "&#91;", "]": "&#93;"}


def _escape(text: str) -> str:
    return "".join(_ESCAPES.get(char, char) for char in text)


def _is_unlocated(file: str) -> bool:
    return not file or file == GLOBAL_FILE


def _href(file: str, root: Path, baseline_dir: Path, line: int = 0) -> str:
    """Return a link to ``file`` relative to the directory holding the report."""

    target = os.path.relpath(root / file, root / baseline_dir)
    href = Path(target).as_posix()
    return f"{href}#L{line}" if line else href


def _format_item(item: Finding, root: Path, baseline_dir: Path) -> str:
    link_text = f"Line {item.line}" if item.line else item.file
    link = f"[{link_text}]({_href(item.file, root, baseline_dir, item.line)})"
    return f"- {link} - {item.rule}: {_escape(item.message)}\n"


def _format_file_section(file: str, items: Sequence[Finding], root: Path, baseline_dir: Path) -> str:
    link = f"[{file}]({_href(file, root, baseline_dir)})"
    lines = [f"\n### {link} ({len(items)})\n\n"]
    lines.extend(_format_item(item, root, baseline_dir) for item in items)
    return "".join(lines) + "\n"


def _format_unlocated_section(items: Sequence[Finding]) -> str:
    lines = [f"\n### Other Issues ({len(items)})\n\n"]
    lines.extend(f"- {item.rule}: {_escape(item.message)}\n" for item in items)
    return "".join(lines) + "\n"


def _format_check_section(check_id: str, items: Sequence[Finding], root: Path, baseline_dir: Path) -> str:
    count = len(items)
    section = f"\n## {check_id} ({count} {plural(count, 'issue')})\n\n"
    if not items:
        return f"{section}No issues\n"

    located = sorted((item for item in items if not _is_unlocated(item.file)), key=lambda item: item.file)
    unlocated = [item for item in items if _is_unlocated(item.file)]
    parts = [section]
    for file, group in groupby(located, key=lambda item: item.file):
        parts.append(_format_file_section(file, list(group), root, baseline_dir))
    if unlocated:
        parts.append(_format_unlocated_section(unlocated))
    return "".join(parts)


def generate_markdown_report(baseline: Baseline, baseline_dir: Path, root: Path | None = None) -> str:
    """Return the markdown report for ``baseline``.

    Args:
        baseline: Baseline whose checks should be rendered.
        baseline_dir: Directory holding the report, relative to ``root``; links
            are made relative to it.
        root: Project root the finding paths are relative to. Defaults to the
            current working directory.

    Returns:
        str: Markdown text ending in a single newline.
    """

    project_root = Path.cwd() if root is None else root
    parts = [f"{REPORT_TITLE}\n\n{REPORT_INTRO}\n"]
    for check_id, entry in baseline.checks.items():
        parts.append(_format_check_section(check_id, entry.items, project_root, baseline_dir))
    markdown = _BLANK_RUNS.sub("\n\n", "".join(parts))
    return markdown.rstrip() + "\n"


__all__ = ["generate_markdown_report"]
