# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Check runner interface shared by built-in and plugin checks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from ..cache import cache_dir_for
from ..config import CheckConfig
from ..errors import CheckExecutionError
from ..models import RawSnapshot
from ..process import resolve_executable


@dataclass(frozen=True, slots=True)
class CheckContext:
    """Execution context handed to check runners.

    Attributes:
        root: Project root; reported file paths are relative to it.
    """

    root: Path

    def cache_dir(self, check_type: str) -> Path:
        """Return the cache directory reserved for ``check_type`` runners."""
        return cache_dir_for(self.root, check_type)


class CheckRunner(ABC):
    """Produce raw findings for one kind of check.

    Subclasses set :attr:`type` to the tag used in configuration and implement
    :meth:`run`. :meth:`setup` and :meth:`validate` are optional hooks invoked
    once per run for every required check type, and :meth:`validate_config`
    once per configured check, all before any check executes.
    """

    type: ClassVar[str] = ""

    @property
    def check_type(self) -> str:
        """Return the configuration tag handled by this runner."""
        return self.type

    @abstractmethod
    def run(self, config: CheckConfig, context: CheckContext) -> RawSnapshot:
        """Execute the check described by ``config`` and return unordered findings."""

    def setup(self, context: CheckContext) -> None:
        """Prepare shared resources such as cache directories."""
        return None

    def validate(self) -> None:
        """Raise :class:`mejora.errors.CheckError` when prerequisites are missing."""
        return None

    def validate_config(self, config: CheckConfig, context: CheckContext) -> None:
        """Raise :class:`mejora.errors.CheckError` when ``config`` cannot run."""
        return None


def require_executable(
    check_type: str,
    executable: str,
    context: CheckContext,
    *,
    configured: bool,
    package: str,
) -> str:
    """Return the resolved path of ``executable`` for a command-line check.

    Paths with a directory part are resolved against the project root, bare
    names against ``PATH``.

    Raises:
        CheckExecutionError: If the executable cannot be located.
    """

    resolved = resolve_executable(executable, context.root)
    if resolved is not None:
        return resolved
    if configured:
        raise CheckExecutionError(
            f'{check_type} executable "{executable}" not found (relative paths resolve against {context.root})',
        )
    raise CheckExecutionError(
        f'{check_type} check requires "{executable}" on PATH. Run: npm install {package}, '
        f'or set "executable" to node_modules/.bin/{executable}',
    )


__all__ = ["CheckContext", "CheckRunner", "require_executable"]
