# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the markdown baseline report."""

from __future__ import annotations

from pathlib import Path

from mejora.models import Baseline, BaselineEntry, Finding
from mejora.reporting.markdown import generate_markdown_report


def _finding(file: str, line: int = 0, rule: str = "r", message: str = "m", item_id: str = "x") -> Finding:
    return Finding(id=item_id, file=file, line=line, column=1, rule=rule, message=message)


def test_single_finding_report(tmp_path: Path) -> None:
    baseline = Baseline(
        checks={"eslint": BaselineEntry(items=[_finding("src/a.ts", 3, "no-console", "Use <b> [x]")])},
    )
    report = generate_markdown_report(baseline, Path(".mejora"), tmp_path)
    assert report == (
        "# Mejora Baseline\n"
        "\n"
        "This file represents the current accepted state of the codebase.\n"
        "\n"
        "## eslint (1 issue)\n"
        "\n"
        "### [src/a.ts](../src/a.ts) (1)\n"
        "\n"
        "- [Line 3](../src/a.ts#L3) - no-console: Use &lt;b&gt; &#91;x&#93;\n"
    )


def test_empty_check_reports_no_issues(tmp_path: Path) -> None:
    report = generate_markdown_report(Baseline(checks={"tsc": BaselineEntry()}), Path(".mejora"), tmp_path)
    assert "## tsc (0 issues)\n\nNo issues\n" in report
    assert report.endswith("No issues\n")


def test_files_sorted_and_unlocated_issues_last(tmp_path: Path) -> None:
    items = [
        _finding("(global)", rule="TS6053", message="File not found.", item_id="1"),
        _finding("src/z.ts", 1, item_id="2"),
        _finding("src/b.ts", 2, item_id="3"),
        _finding("src/b.ts", 7, item_id="4"),
    ]
    report = generate_markdown_report(Baseline(checks={"tsc": BaselineEntry(items=items)}), Path(".mejora"), tmp_path)
    assert "## tsc (4 issues)" in report
    assert report.index("### [src/b.ts]") < report.index("### [src/z.ts]") < report.index("### Other Issues (1)")
    assert "### [src/b.ts](../src/b.ts) (2)" in report
    assert "- TS6053: File not found.\n" in report


def test_links_are_relative_to_report_directory(tmp_path: Path) -> None:
    baseline = Baseline(checks={"c": BaselineEntry(items=[_finding("lib/x.py", 12)])})
    report = generate_markdown_report(baseline, Path("tools") / "quality", tmp_path)
    assert "[Line 12](../../lib/x.py#L12)" in report


def test_report_has_no_blank_line_runs(tmp_path: Path) -> None:
    checks = {
        "a": BaselineEntry(items=[_finding("a.ts", 1, message="first\n\n\n\nsecond")]),
        "b": BaselineEntry(),
    }
    report = generate_markdown_report(Baseline(checks=checks), Path(".mejora"), tmp_path)
    assert "\n\n\n" not in report
    assert report.endswith("\n") and not report.endswith("\n\n")
