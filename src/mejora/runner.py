# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Orchestration of configured checks against the accepted baseline."""

from __future__ import annotations

import re
import time
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from . import logging as log
from .baseline import BaselineStore, EntryUpdate
from .checks.base import CheckContext
from .checks.registry import CheckRegistry
from .comparison import compare_snapshots
from .config import CheckConfig, MejoraConfig
from .errors import CheckExecutionError, ConfigError, MejoraError
from .models import BaselineEntry, CheckResult, RunResult, Snapshot
from .snapshot import normalize_snapshot
from .text import plural

EXIT_OK = 0
EXIT_REGRESSION = 1
EXIT_ERROR = 2


@dataclass(frozen=True, slots=True)
class RunOptions:
    """Per-invocation switches.

    Attributes:
        force: Accept the current state even when regressions are present,
            including while running under CI.
        only: Regular expression selecting the check identifiers to run.
        skip: Regular expression excluding check identifiers.
    """

    force: bool = False
    only: str | None = None
    skip: str | None = None


def _compile_filter(pattern: str | None, option: str) -> re.Pattern[str] | None:
    if pattern is None or pattern == "":
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigError(f'Invalid regex pattern for {option}: "{pattern}"') from exc


def filter_checks(checks: Mapping[str, CheckConfig], options: RunOptions) -> dict[str, CheckConfig]:
    """Return the checks selected by ``options.only`` and ``options.skip``.

    Patterns are searched anywhere within the check identifier.

    Raises:
        ConfigError: If either pattern is not a valid regular expression.
    """

    only = _compile_filter(options.only, "--only")
    skip = _compile_filter(options.skip, "--skip")
    return {
        check_id: config
        for check_id, config in checks.items()
        if (only is None or only.search(check_id)) and (skip is None or not skip.search(check_id))
    }


class Runner:
    """Run checks, compare them with the baseline and persist accepted state.

    Args:
        registry: Runners available for this run.
        store: Baseline persistence for the project.
        root: Project root handed to check runners. Defaults to the current
            working directory.
        jobs: Maximum number of checks executed concurrently.
    """

    def __init__(
        self,
        registry: CheckRegistry,
        store: BaselineStore,
        *,
        root: Path | None = None,
        jobs: int = 1,
    ) -> None:
        self._registry = registry
        self._store = store
        self._context = CheckContext(root=Path.cwd() if root is None else root)
        self._jobs = max(1, jobs)

    def run(self, config: MejoraConfig, options: RunOptions | None = None) -> RunResult:
        """Execute the selected checks and apply the baseline update policy.

        Returns:
            RunResult: Per-check results and the process exit code.

        Raises:
            ConfigError: If a filter pattern is invalid.
            CheckError: If a runner is missing, fails validation, or fails to run.
            BaselineError: If the stored baseline cannot be read.
        """

        opts = options or RunOptions()
        started = time.perf_counter()
        baseline = self._store.load()
        checks = filter_checks(config.checks, opts)
        if not checks and config.checks:
            log.warn("No checks matched the --only/--skip filters")
        log.start(f"Running {len(checks)} {plural(len(checks), 'check')}...")

        required = CheckRegistry.required_types(checks)
        self._registry.setup(required, self._context)
        self._registry.validate(checks, self._context)

        snapshots = self._execute(checks)

        results: list[CheckResult] = []
        updates: list[EntryUpdate] = []
        for check_id, (snapshot, duration) in snapshots.items():
            entry = BaselineStore.get_entry(baseline, check_id)
            comparison = compare_snapshots(snapshot, entry)
            result = CheckResult.from_comparison(check_id, snapshot, entry, comparison, duration=duration)
            results.append(result)
            if result.is_initial or result.has_improvement or result.has_relocation or opts.force:
                updates.append(EntryUpdate(check_id, BaselineEntry(type=snapshot.type, items=snapshot.items)))

        has_regression = any(result.has_regression for result in results)
        has_improvement = any(result.has_improvement for result in results)
        has_initial = any(result.is_initial for result in results)

        updated = BaselineStore.batch_update(baseline, updates) if updates else baseline
        if updated is not None and updated is not baseline and (not has_regression or opts.force or has_initial):
            self._store.save(updated, force=opts.force)

        return RunResult(
            exit_code=EXIT_REGRESSION if has_regression and not opts.force else EXIT_OK,
            has_regression=has_regression,
            has_improvement=has_improvement,
            results=results,
            total_duration=_elapsed_ms(started),
        )

    def _execute(self, checks: Mapping[str, CheckConfig]) -> dict[str, tuple[Snapshot, float]]:
        if len(checks) <= 1:
            return {check_id: self._run_check(check_id, config) for check_id, config in checks.items()}
        with ThreadPoolExecutor(max_workers=min(self._jobs, len(checks))) as executor:
            futures = {
                check_id: executor.submit(self._run_check, check_id, config) for check_id, config in checks.items()
            }
            return {check_id: future.result() for check_id, future in futures.items()}

    def _run_check(self, check_id: str, config: CheckConfig) -> tuple[Snapshot, float]:
        runner = self._registry.get_runner(config.type)
        started = time.perf_counter()
        try:
            raw = runner.run(config, self._context)
        except MejoraError as exc:
            raise CheckExecutionError(f'Error running check "{check_id}": {exc}') from exc
        except Exception as exc:
            raise CheckExecutionError(f'Error running check "{check_id}": {type(exc).__name__}: {exc}') from exc
        return normalize_snapshot(raw), _elapsed_ms(started)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


__all__ = ["EXIT_ERROR", "EXIT_OK", "EXIT_REGRESSION", "RunOptions", "Runner", "filter_checks"]
