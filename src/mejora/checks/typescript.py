# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Check runner invoking the TypeScript compiler."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar, Final

from ..cache import make_cache_key
from ..config import CheckConfig, TypeScriptCheckConfig
from ..errors import CheckExecutionError
from ..models import RawSnapshot
from ..process import CommandOptions, run_command
from .base import CheckContext, CheckRunner, require_executable
from .parsers import parse_tsc

TSCONFIG_FILENAME: Final[str] = "tsconfig.json"
# 0: clean, 1: diagnostics reported, 2: diagnostics reported and emit skipped.
_TSC_OK_CODES: Final[frozenset[int]] = frozenset({0, 1, 2})


def find_tsconfig(start: Path) -> Path | None:
    """Return the nearest ``tsconfig.json`` at or above ``start``."""

    for directory in (start, *start.parents):
        candidate = directory / TSCONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def compiler_option_flags(options: Mapping[str, Any]) -> list[str]:
    """Render ``compilerOptions`` overrides as ``tsc`` command-line flags."""

    flags: list[str] = []
    for name, value in options.items():
        flag = f"--{name}"
        if value is True:
            flags.append(flag)
        elif value is False:
            flags.extend([flag, "false"])
        elif isinstance(value, (list, tuple)):
            flags.extend([flag, ",".join(str(item) for item in value)])
        elif value is not None:
            flags.extend([flag, str(value)])
    return flags


class TypeScriptCheckRunner(CheckRunner):
    """Run ``tsc --noEmit`` incrementally and report compiler diagnostics."""

    type: ClassVar[str] = "typescript"

    def __init__(self, executable: str = "tsc") -> None:
        self.executable = executable

    def resolve_tsconfig(self, config: TypeScriptCheckConfig, context: CheckContext) -> Path:
        """Return the tsconfig used for ``config``.

        Raises:
            CheckExecutionError: If no tsconfig can be located.
        """

        if config.tsconfig is not None:
            path = config.tsconfig if config.tsconfig.is_absolute() else context.root / config.tsconfig
            if path.is_file():
                return path
        else:
            found = find_tsconfig(context.root)
            if found is not None:
                return found
        raise CheckExecutionError("TypeScript config file not found")

    def build_command(self, config: TypeScriptCheckConfig, context: CheckContext) -> list[str]:
        """Return the ``tsc`` argument list for ``config``."""

        tsconfig = self.resolve_tsconfig(config, context)
        cache_key = make_cache_key({"tsconfig": str(tsconfig), "config": config.model_dump(mode="json")})
        build_info = context.cache_dir(self.type) / f"{cache_key}.tsbuildinfo"
        return [
            config.executable or self.executable,
            "--noEmit",
            "--pretty",
            "false",
            "--incremental",
            "--tsBuildInfoFile",
            str(build_info),
            "--project",
            str(tsconfig),
            *compiler_option_flags(config.compiler_options),
        ]

    def run(self, config: CheckConfig, context: CheckContext) -> RawSnapshot:
        if not isinstance(config, TypeScriptCheckConfig):
            raise CheckExecutionError(f"typescript runner cannot execute a {config.type!r} check")
        completed = run_command(
            self.build_command(config, context),
            options=CommandOptions(cwd=context.root, capture_output=True, discard_stdin=True),
        )
        if completed.returncode not in _TSC_OK_CODES:
            detail = (completed.stderr or "").strip() or "<no output>"
            raise CheckExecutionError(f"tsc exited with status {completed.returncode}: {detail}")
        return RawSnapshot(items=parse_tsc((completed.stdout or "").splitlines(), context.root))

    def setup(self, context: CheckContext) -> None:
        context.cache_dir(self.type).mkdir(parents=True, exist_ok=True)

    def validate_config(self, config: CheckConfig, context: CheckContext) -> None:
        if isinstance(config, TypeScriptCheckConfig):
            executable = config.executable or self.executable
            require_executable(
                self.type,
                executable,
                context,
                configured=config.executable is not None,
                package="typescript",
            )


__all__ = ["TypeScriptCheckRunner", "compiler_option_flags", "find_tsconfig"]
