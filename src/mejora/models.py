# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the mejora package."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .constants import BASELINE_VERSION

SnapshotType = Literal["items"]


class FindingInput(BaseModel):
    """Diagnostic occurrence reported by a check runner before identity assignment."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int = 0
    column: int = 0
    rule: str
    message: str


class Finding(BaseModel):
    """Diagnostic occurrence carrying its stable identifier."""

    model_config = ConfigDict(frozen=True)

    id: str
    file: str
    line: int = 0
    column: int = 0
    rule: str
    message: str


class Snapshot(BaseModel):
    """Normalised output of one check run."""

    model_config = ConfigDict(frozen=True)

    type: SnapshotType = "items"
    items: list[Finding] = Field(default_factory=list)


class RawSnapshot(BaseModel):
    """Unordered runner output whose findings may still lack identifiers."""

    model_config = ConfigDict(frozen=True)

    type: SnapshotType = "items"
    items: list[FindingInput] = Field(default_factory=list)


class BaselineEntry(BaseModel):
    """Accepted state for a single named check."""

    model_config = ConfigDict(frozen=True)

    type: SnapshotType = "items"
    items: list[Finding] = Field(default_factory=list)

    @property
    def ids(self) -> frozenset[str]:
        """Return the identifiers of all accepted findings."""
        return frozenset(item.id for item in self.items)


class Baseline(BaseModel):
    """Full persisted baseline keyed by check identifier."""

    model_config = ConfigDict(frozen=True)

    version: int = BASELINE_VERSION
    checks: dict[str, BaselineEntry] = Field(default_factory=dict)


class ComparisonResult(BaseModel):
    """Delta between a fresh snapshot and the previously accepted entry."""

    model_config = ConfigDict(frozen=True)

    is_initial: bool
    has_regression: bool = False
    has_improvement: bool = False
    has_relocation: bool = False
    new_issues: list[Finding] = Field(default_factory=list)
    removed_issues: list[Finding] = Field(default_factory=list)


class CheckResult(BaseModel):
    """Outcome of running and comparing a single check."""

    model_config = ConfigDict(frozen=True)

    check_id: str
    snapshot: Snapshot
    baseline: BaselineEntry | None = None
    is_initial: bool
    has_regression: bool
    has_improvement: bool
    has_relocation: bool
    new_issues: list[Finding] = Field(default_factory=list)
    removed_issues: list[Finding] = Field(default_factory=list)
    duration: float | None = None

    @classmethod
    def from_comparison(
        cls,
        check_id: str,
        snapshot: Snapshot,
        baseline: BaselineEntry | None,
        comparison: ComparisonResult,
        *,
        duration: float | None = None,
    ) -> CheckResult:
        """Combine a snapshot and its comparison into a check result."""
        return cls(
            check_id=check_id,
            snapshot=snapshot,
            baseline=baseline,
            is_initial=comparison.is_initial,
            has_regression=comparison.has_regression,
            has_improvement=comparison.has_improvement,
            has_relocation=comparison.has_relocation,
            new_issues=comparison.new_issues,
            removed_issues=comparison.removed_issues,
            duration=duration,
        )


class RunResult(BaseModel):
    """Aggregate result for a full mejora run."""

    model_config = ConfigDict(frozen=True)

    exit_code: int
    has_regression: bool
    has_improvement: bool
    results: list[CheckResult] = Field(default_factory=list)
    total_duration: float | None = None


__all__ = [
    "Baseline",
    "BaselineEntry",
    "CheckResult",
    "ComparisonResult",
    "Finding",
    "FindingInput",
    "RawSnapshot",
    "RunResult",
    "Snapshot",
    "SnapshotType",
]
