# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console renderings of a run result."""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from typing import Any, Final

from ..logging import colorize
from ..models import CheckResult, Finding, RunResult
from ..text import plural

MAX_ITEMS_TO_DISPLAY: Final[int] = 10


def _format_ms(ms: int) -> str:
    if ms < 1000:
        return f"{ms}ms"
    for divisor, unit in ((1000, "s"), (60_000, "m")):
        value = ms / divisor
        if value < 60:
            return _format_unit(value, unit)
    return _format_unit(ms / 3_600_000, "h")


def _format_unit(value: float, unit: str) -> str:
    return f"{int(value)}{unit}" if value.is_integer() else f"{value:.1f}{unit}"


def format_duration(duration: float, *, use_color: bool = True) -> str:
    """Return a compact human-readable rendering of ``duration`` milliseconds.

    Sub-millisecond durations render as ``<1ms``. Colour reflects magnitude:
    green below 100ms, yellow below one second, red otherwise.

    >>> format_duration(1500, use_color=False)
    '1.5s'
    """

    rounded = math.floor(duration + 0.5)
    if rounded < 1:
        return colorize("<1ms", "dim", use_color)
    formatted = _format_ms(rounded)
    if rounded < 100:
        return colorize(formatted, "green", use_color)
    if rounded < 1000:
        return colorize(formatted, "yellow", use_color)
    return colorize(formatted, "red", use_color)


def average_duration(total: float | None, count: int) -> float | None:
    """Return the mean duration per check, or ``None`` when undefined."""

    if total is None or count == 0:
        return None
    return total / count


def _format_item(item: Finding) -> str:
    location = item.file
    if item.line > 0:
        location = f"{location}:{item.line}"
        if item.column > 0:
            location = f"{location}:{item.column}"
    return f"{location} - {item.rule}: {item.message}"


def _format_item_list(items: Sequence[Finding], use_color: bool) -> list[str]:
    lines = [f"     {colorize(_format_item(item), 'dim', use_color)}" for item in items[:MAX_ITEMS_TO_DISPLAY]]
    remaining = len(items) - MAX_ITEMS_TO_DISPLAY
    if remaining > 0:
        lines.append(f"     {colorize(f'... and {remaining} more', 'dim', use_color)}")
    return lines


def _format_metadata(check: CheckResult, use_color: bool) -> list[str]:
    lines: list[str] = []
    if check.duration is not None:
        elapsed = format_duration(check.duration, use_color=use_color)
        lines.append(f"  {colorize('Duration', 'dim', use_color)}  {elapsed}")
    issues = colorize(str(len(check.snapshot.items)), "bold", use_color)
    lines.append(f"    {colorize('Issues', 'dim', use_color)}  {issues}")
    return lines


def _format_check(check: CheckResult, is_first: bool, use_color: bool) -> list[str]:
    prefix = "" if is_first else "\n"
    count = len(check.snapshot.items)

    if check.is_initial:
        lines = [
            f"{prefix}{check.check_id}:",
            f"  Initial baseline created with {colorize(str(count), 'blue', use_color)} {plural(count, 'issue')}",
        ]
        lines.extend(_format_item_list(check.snapshot.items, use_color))
        return [*lines, "", *_format_metadata(check, use_color)]

    if check.has_regression or check.has_improvement:
        lines = [f"{prefix}{check.check_id}:"]
        if check.has_regression:
            new = len(check.new_issues)
            lines.append(
                f"  {colorize(str(new), 'red', use_color)} new {plural(new, 'issue')} ({plural(new, 'regression')}):",
            )
            lines.extend(_format_item_list(check.new_issues, use_color))
        if check.has_improvement:
            fixed = len(check.removed_issues)
            lines.append(
                f"  {colorize(str(fixed), 'green', use_color)} {plural(fixed, 'issue')} fixed "
                f"({plural(fixed, 'improvement')}):",
            )
            lines.extend(_format_item_list(check.removed_issues, use_color))
        return [*lines, "", *_format_metadata(check, use_color)]

    summary = f"{prefix}{check.check_id} ({colorize(str(count), 'bold', use_color)})"
    if check.duration is not None:
        summary = f"{summary} {format_duration(check.duration, use_color=use_color)}"
    return [summary]


def _status_message(result: RunResult, use_color: bool) -> str:
    if any(check.is_initial for check in result.results):
        return colorize("✔ Initial baseline created successfully", "blue", use_color)
    if result.has_regression:
        return f"{colorize('✗ Regressions detected', 'red', use_color)} - Run failed"
    if result.has_improvement:
        return f"{colorize('✔ Improvements detected', 'green', use_color)} - Baseline updated"
    return colorize("✔ All checks passed", "green", use_color)


def _totals(results: Sequence[CheckResult]) -> dict[str, int]:
    totals = {"improvements": 0, "regressions": 0, "initial": 0, "unchanged": 0, "issues": 0}
    for check in results:
        issues = len(check.snapshot.items)
        totals["issues"] += issues
        if check.is_initial:
            totals["initial"] += issues
            continue
        if check.has_improvement:
            totals["improvements"] += len(check.removed_issues)
        if check.has_regression:
            totals["regressions"] += len(check.new_issues)
        if not check.has_improvement and not check.has_regression:
            totals["unchanged"] += issues
    return totals


def _format_summary(result: RunResult, use_color: bool) -> str:
    totals = _totals(result.results)
    def dim(label: str) -> str:
        return colorize(label, "dim", use_color)

    lines = [
        f"  {dim('Improvements')}  {colorize(str(totals['improvements']), 'green', use_color)}",
        f"   {dim('Regressions')}  {colorize(str(totals['regressions']), 'red', use_color)}",
        f"       {dim('Initial')}  {colorize(str(totals['initial']), 'blue', use_color)}",
        f"        {dim('Checks')}  {len(result.results)}",
        f"        {dim('Issues')}  {colorize(str(totals['issues']), 'bold', use_color)}",
    ]
    mean = average_duration(result.total_duration, len(result.results))
    if result.total_duration is not None and mean is not None:
        total_text = format_duration(result.total_duration, use_color=use_color)
        mean_text = colorize(f"(avg {format_duration(mean, use_color=False)})", "dim", use_color)
        lines.append(f"      {dim('Duration')}  {total_text} {mean_text}")
    lines.extend(["", _status_message(result, use_color)])
    return "\n".join(lines)


def format_text_output(result: RunResult, *, use_color: bool = True) -> str:
    """Return the human-readable report for ``result``.

    Initial checks list their findings, checks with regressions or
    improvements list the delta, unchanged checks get a single line. At most
    ten findings are listed per section.
    """

    lines: list[str] = []
    for index, check in enumerate(result.results):
        lines.extend(_format_check(check, index == 0, use_color))
    if lines:
        lines.append("")
    lines.append(_format_summary(result, use_color))
    return "\n".join(lines)


def _finding_payload(items: Sequence[Finding]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json") for item in items]


def format_json_output(result: RunResult) -> str:
    """Return a machine-readable JSON document describing ``result``."""

    checks: list[dict[str, Any]] = []
    groups: dict[str, list[str]] = {"improvement": [], "regression": [], "initial": [], "unchanged": []}
    for check in result.results:
        if check.is_initial:
            groups["initial"].append(check.check_id)
        else:
            if check.has_improvement:
                groups["improvement"].append(check.check_id)
            if check.has_regression:
                groups["regression"].append(check.check_id)
            if not check.has_improvement and not check.has_regression:
                groups["unchanged"].append(check.check_id)
        checks.append(
            {
                "check_id": check.check_id,
                "duration": check.duration,
                "has_improvement": check.has_improvement,
                "has_regression": check.has_regression,
                "is_initial": check.is_initial,
                "new_issues": _finding_payload(check.new_issues),
                "removed_issues": _finding_payload(check.removed_issues),
                "total_issues": len(check.snapshot.items),
            },
        )

    totals = _totals(result.results)
    payload = {
        "checks": checks,
        "exit_code": result.exit_code,
        "has_improvement": result.has_improvement,
        "has_regression": result.has_regression,
        "summary": {
            "avg_duration": average_duration(result.total_duration, len(result.results)),
            "checks_run": len(result.results),
            "improvement_checks": groups["improvement"],
            "improvements": totals["improvements"],
            "initial": totals["initial"],
            "initial_checks": groups["initial"],
            "regression_checks": groups["regression"],
            "regressions": totals["regressions"],
            "total_issues": totals["issues"],
            "unchanged": totals["unchanged"],
            "unchanged_checks": groups["unchanged"],
        },
        "total_duration": result.total_duration,
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


__all__ = ["MAX_ITEMS_TO_DISPLAY", "average_duration", "format_duration", "format_json_output", "format_text_output"]
