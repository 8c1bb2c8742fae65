# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared across mejora."""

from __future__ import annotations


class MejoraError(RuntimeError):
    """Base class for failures reported to the command line."""


class ConfigError(MejoraError):
    """Raised when configuration input is missing or invalid."""


class BaselineError(MejoraError):
    """Raised when a persisted baseline cannot be interpreted."""


class ConflictResolutionError(BaselineError):
    """Raised when merge-conflict markers in a baseline cannot be resolved."""


class CheckError(MejoraError):
    """Base class for check runner failures."""


class UnknownCheckTypeError(CheckError):
    """Raised when no runner is registered for a check type."""

    def __init__(self, check_type: str) -> None:
        super().__init__(f"Unknown check type: {check_type}")
        self.check_type = check_type


class CheckExecutionError(CheckError):
    """Raised when a check runner fails to produce findings."""


__all__ = [
    "BaselineError",
    "CheckError",
    "CheckExecutionError",
    "ConfigError",
    "ConflictResolutionError",
    "MejoraError",
    "UnknownCheckTypeError",
]
