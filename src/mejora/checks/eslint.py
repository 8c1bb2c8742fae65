# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Check runner invoking the ESLint command line."""

from __future__ import annotations

import json
from typing import ClassVar, Final

from ..cache import make_cache_key
from ..config import CheckConfig, ESLintCheckConfig
from ..errors import CheckExecutionError
from ..models import RawSnapshot
from ..process import CommandOptions, run_command
from .base import CheckContext, CheckRunner, require_executable
from .parsers import parse_eslint

# 0: no problems, 1: lint problems reported; anything else is a crash or misconfiguration.
_ESLINT_OK_CODES: Final[frozenset[int]] = frozenset({0, 1})


class ESLintCheckRunner(CheckRunner):
    """Run ESLint with JSON output and report rule violations."""

    type: ClassVar[str] = "eslint"

    def __init__(self, executable: str = "eslint") -> None:
        self.executable = executable

    def build_command(self, config: ESLintCheckConfig, context: CheckContext) -> list[str]:
        """Return the ESLint argument list for ``config``."""

        cache_location = context.cache_dir(self.type) / f"{make_cache_key(config.model_dump(mode='json'))}.eslintcache"
        command = [
            config.executable or self.executable,
            "--format",
            "json",
            "--cache",
            "--cache-location",
            str(cache_location),
        ]
        if config.eslint_config is not None:
            command.extend(["--config", str(config.eslint_config)])
        for rule, setting in config.rules.items():
            command.extend(["--rule", json.dumps({rule: setting})])
        command.extend(config.files)
        return command

    def run(self, config: CheckConfig, context: CheckContext) -> RawSnapshot:
        if not isinstance(config, ESLintCheckConfig):
            raise CheckExecutionError(f"eslint runner cannot execute a {config.type!r} check")
        completed = run_command(
            self.build_command(config, context),
            options=CommandOptions(cwd=context.root, capture_output=True, discard_stdin=True),
        )
        if completed.returncode not in _ESLINT_OK_CODES:
            detail = (completed.stderr or "").strip() or "<no output>"
            raise CheckExecutionError(f"eslint exited with status {completed.returncode}: {detail}")
        try:
            payload = json.loads(completed.stdout or "[]")
        except json.JSONDecodeError as exc:
            raise CheckExecutionError(f"eslint produced invalid JSON output: {exc}") from exc
        return RawSnapshot(items=parse_eslint(payload, context.root, rules=config.rules))

    def setup(self, context: CheckContext) -> None:
        context.cache_dir(self.type).mkdir(parents=True, exist_ok=True)

    def validate_config(self, config: CheckConfig, context: CheckContext) -> None:
        if isinstance(config, ESLintCheckConfig):
            executable = config.executable or self.executable
            require_executable(
                self.type,
                executable,
                context,
                configured=config.executable is not None,
                package="eslint",
            )


__all__ = ["ESLintCheckRunner"]
