# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build check runners from plain callables and load them from plugins."""

from __future__ import annotations

import importlib
from collections.abc import Callable, Iterable, Mapping
from typing import Any, ClassVar

from pydantic import ValidationError

from ..config import CheckConfig, CustomCheckConfig
from ..errors import CheckExecutionError, ConfigError
from ..models import FindingInput, RawSnapshot
from .base import CheckContext, CheckRunner

RunCallable = Callable[[dict[str, Any], CheckContext], Iterable[FindingInput | Mapping[str, Any]]]
SetupCallable = Callable[[CheckContext], None]
ValidateCallable = Callable[[], None]


class FunctionCheckRunner(CheckRunner):
    """Check runner delegating to user-supplied callables.

    The ``run`` callable receives the check's options (every configured key
    except ``type``) together with the execution context and returns finding
    inputs, either as :class:`FindingInput` models or as plain mappings.
    """

    type: ClassVar[str] = ""

    def __init__(
        self,
        check_type: str,
        run: RunCallable,
        *,
        setup: SetupCallable | None = None,
        validate: ValidateCallable | None = None,
    ) -> None:
        if not check_type:
            raise ValueError("custom checks require a non-empty type")
        self._check_type = check_type
        self._run = run
        self._setup = setup
        self._validate = validate

    @property
    def check_type(self) -> str:
        return self._check_type

    def run(self, config: CheckConfig, context: CheckContext) -> RawSnapshot:
        options = config.options if isinstance(config, CustomCheckConfig) else config.model_dump(exclude={"type"})
        produced = self._run(options, context)
        try:
            items = [item if isinstance(item, FindingInput) else FindingInput.model_validate(item) for item in produced]
        except ValidationError as exc:
            raise CheckExecutionError(f"{self._check_type} check returned an invalid finding: {exc}") from exc
        return RawSnapshot(items=items)

    def setup(self, context: CheckContext) -> None:
        if self._setup is not None:
            self._setup(context)

    def validate(self) -> None:
        if self._validate is not None:
            self._validate()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self._check_type!r})"


def define_check(
    check_type: str,
    run: RunCallable,
    *,
    setup: SetupCallable | None = None,
    validate: ValidateCallable | None = None,
) -> FunctionCheckRunner:
    """Return a runner for ``check_type`` backed by plain callables.

    Example:
        >>> def no_urls(options, context):
        ...     return [{"file": "a.py", "line": 1, "rule": "no-url", "message": "http://"}]
        >>> runner = define_check("no-urls", no_urls)
        >>> runner.check_type
        'no-urls'
    """

    return FunctionCheckRunner(check_type, run, setup=setup, validate=validate)


def load_plugin_runner(reference: str) -> CheckRunner:
    """Import a runner from a ``"package.module:attribute"`` reference.

    The attribute may be a :class:`CheckRunner` instance or a zero-argument
    factory returning one.

    Raises:
        ConfigError: If the reference is malformed, cannot be imported, or
            does not yield a check runner.
    """

    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigError(f'Invalid runner reference "{reference}" (expected "module:attribute")')
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f'Unable to import runner module "{module_name}": {exc}') from exc

    target: object = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ConfigError(f'Runner "{reference}" not found') from exc

    runner = target if isinstance(target, CheckRunner) else target() if callable(target) else target
    if not isinstance(runner, CheckRunner):
        raise ConfigError(f'Runner "{reference}" did not produce a CheckRunner')
    return runner


__all__ = ["FunctionCheckRunner", "define_check", "load_plugin_runner"]
