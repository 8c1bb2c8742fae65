# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Check runner registry keyed by configuration ``type``."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from ..config import CheckConfig
from ..errors import UnknownCheckTypeError
from .base import CheckContext, CheckRunner


class CheckRegistry(Mapping[str, CheckRunner]):
    """Registry mapping check types to their runners.

    ``CheckRegistry`` behaves like a read-only mapping whose keys are check
    types. A registry is owned by the caller and lives for one run; the first
    runner registered for a type wins.
    """

    def __init__(self) -> None:
        self._runners: dict[str, CheckRunner] = {}

    @classmethod
    def with_builtins(cls, plugins: Iterable[CheckRunner] = ()) -> CheckRegistry:
        """Return a registry holding the ESLint, TypeScript and regex runners plus ``plugins``."""

        from .eslint import ESLintCheckRunner
        from .regex import RegexCheckRunner
        from .typescript import TypeScriptCheckRunner

        registry = cls()
        for runner in (ESLintCheckRunner(), TypeScriptCheckRunner(), RegexCheckRunner(), *plugins):
            registry.register(runner)
        return registry

    @staticmethod
    def required_types(checks: Mapping[str, CheckConfig]) -> set[str]:
        """Return the distinct check types used by ``checks``."""

        return {config.type for config in checks.values()}

    def register(self, runner: CheckRunner) -> None:
        """Register ``runner`` unless its type is already taken."""

        self._runners.setdefault(runner.check_type, runner)

    def get_runner(self, check_type: str) -> CheckRunner:
        """Return the runner for ``check_type``.

        Raises:
            UnknownCheckTypeError: If no runner handles ``check_type``.
        """

        runner = self._runners.get(check_type)
        if runner is None:
            raise UnknownCheckTypeError(check_type)
        return runner

    def has(self, check_type: str) -> bool:
        """Return ``True`` when a runner handles ``check_type``."""
        return check_type in self._runners

    def types(self) -> set[str]:
        """Return every registered check type."""
        return set(self._runners)

    def setup(self, types: Iterable[str], context: CheckContext) -> None:
        """Invoke :meth:`CheckRunner.setup` for each of ``types``."""

        for check_type in sorted(set(types)):
            self.get_runner(check_type).setup(context)

    def validate(self, checks: Mapping[str, CheckConfig], context: CheckContext) -> None:
        """Validate the runners and configurations of ``checks``.

        :meth:`CheckRunner.validate` runs once per distinct check type, then
        :meth:`CheckRunner.validate_config` once per check in identifier order.
        """

        for check_type in sorted(self.required_types(checks)):
            self.get_runner(check_type).validate()
        for check_id in sorted(checks):
            config = checks[check_id]
            self.get_runner(config.type).validate_config(config, context)

    def __getitem__(self, check_type: str) -> CheckRunner:
        return self._runners[check_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._runners)

    def __len__(self) -> int:
        return len(self._runners)


__all__ = ["CheckRegistry"]
