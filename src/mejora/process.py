# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; commands are argument lists and
# never go through a shell.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

TIMEOUT_RETURNCODE: Final[int] = 124


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Immutable command execution options.

    The exit status is never checked here; callers decide which return codes
    are acceptable for the tool they run.
    """

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    capture_output: bool = False
    text: bool = True
    timeout: float | None = None
    discard_stdin: bool = False

    def with_overrides(self, **overrides: object) -> CommandOptions:
        """Return a new options instance with ``overrides`` applied.

        Raises:
            TypeError: If ``overrides`` names an unknown option.
            ValueError: When a timeout override is negative.
        """

        unknown = sorted(key for key in overrides if key not in self.__dataclass_fields__)
        if unknown:
            raise TypeError(f"Unknown command option(s): {', '.join(unknown)}")
        timeout = overrides.get("timeout", self.timeout)
        if isinstance(timeout, (int, float)) and timeout < 0:
            raise ValueError("timeout override must be non-negative")
        return replace(self, **overrides)  # type: ignore[arg-type]


def _ensure_text(value: str | bytes | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.decode(errors="ignore")


def resolve_executable(name: str, base: Path | None = None) -> str | None:
    """Return the absolute path of ``name`` when it can be located.

    Bare names are searched on ``PATH``. Names containing a directory part,
    such as ``node_modules/.bin/eslint``, are taken relative to ``base`` when
    given, otherwise relative to the current working directory.
    """

    path = Path(name)
    if not path.is_absolute() and len(path.parts) > 1:
        path = (base if base is not None else Path.cwd()) / path
    if path.is_absolute():
        return str(path) if path.is_file() else None
    return shutil.which(name)


def _normalize_args(args: Sequence[str], base: Path | None) -> list[str]:
    """Return ``args`` with the executable resolved to an absolute path.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If the executable cannot be located.
    """

    if not args:
        raise ValueError("subprocess command requires at least one argument")
    head, *rest = args
    resolved = resolve_executable(head, base)
    if resolved is None:
        raise FileNotFoundError(f"Executable '{head}' was not found")
    return [resolved, *rest]


def run_command(
    args: Sequence[str],
    *,
    options: CommandOptions | None = None,
    **overrides: object,
) -> CompletedProcess[str]:
    """Execute ``args`` after normalising the executable path.

    Relative executables are resolved against ``options.cwd``.

    Args:
        args: Command and argument sequence to execute.
        options: Base options configuring execution semantics.
        **overrides: Field overrides applied to a copy of ``options``.

    Returns:
        CompletedProcess: Subprocess execution metadata. A timeout is reported
        with return code 124.

    Raises:
        FileNotFoundError: If the executable cannot be located.
    """

    resolved = (options or CommandOptions()).with_overrides(**overrides)
    normalized = _normalize_args(args, resolved.cwd)

    try:
        return subprocess.run(  # nosec B603 - argument list, no shell
            normalized,
            cwd=str(resolved.cwd) if resolved.cwd is not None else None,
            env=dict(resolved.env) if resolved.env is not None else None,
            check=False,
            capture_output=resolved.capture_output,
            text=resolved.text,
            timeout=resolved.timeout,
            stdin=subprocess.DEVNULL if resolved.discard_stdin else None,
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _ensure_text(exc.stderr)
        timeout_msg = f"Command timed out after {resolved.timeout:.1f}s" if resolved.timeout else "Command timed out"
        return subprocess.CompletedProcess(
            args=normalized,
            returncode=TIMEOUT_RETURNCODE,
            stdout=_ensure_text(exc.stdout) or "",
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
        )


__all__ = [
    "CommandOptions",
    "TIMEOUT_RETURNCODE",
    "resolve_executable",
    "run_command",
]
