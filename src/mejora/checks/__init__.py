# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Check runners and the registry that dispatches configured checks to them."""

from __future__ import annotations

from .base import CheckContext, CheckRunner
from .custom import FunctionCheckRunner, define_check, load_plugin_runner
from .eslint import ESLintCheckRunner
from .regex import RegexCheckRunner
from .registry import CheckRegistry
from .typescript import TypeScriptCheckRunner

__all__ = [
    "CheckContext",
    "CheckRegistry",
    "CheckRunner",
    "ESLintCheckRunner",
    "FunctionCheckRunner",
    "RegexCheckRunner",
    "TypeScriptCheckRunner",
    "define_check",
    "load_plugin_runner",
]
