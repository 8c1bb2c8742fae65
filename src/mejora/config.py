# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loading helpers for mejora.

Configuration lives in ``mejora.toml`` at the project root or in the
``[tool.mejora]`` table of ``pyproject.toml``. Each entry under ``checks`` is
a tagged union keyed by its ``type``: built-in tags are validated by
dedicated models, any other tag is treated as a custom check whose extra keys
are handed to the matching runner unchanged.
"""

from __future__ import annotations

import math
import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import DEFAULT_BASELINE_PATH
from .errors import ConfigError

CONFIG_FILENAME: Final[str] = "mejora.toml"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "mejora"

_REGEX_FLAGS: Final[dict[str, re.RegexFlag]] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def default_parallel_jobs() -> int:
    """Return 75% of available CPU cores (minimum of 1)."""
    cores = os.cpu_count() or 1
    return max(1, math.floor(cores * 0.75))


class ESLintCheckConfig(BaseModel):
    """Run ESLint over ``files`` and track the reported rule violations."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["eslint"] = "eslint"
    files: list[str] = Field(min_length=1)
    rules: dict[str, Any] = Field(default_factory=dict)
    eslint_config: Path | None = None
    executable: str | None = None


class TypeScriptCheckConfig(BaseModel):
    """Run the TypeScript compiler in ``--noEmit`` mode and track its diagnostics."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["typescript"] = "typescript"
    tsconfig: Path | None = None
    compiler_options: dict[str, Any] = Field(default_factory=dict)
    executable: str | None = None


class RegexPattern(BaseModel):
    """A single pattern searched for line by line."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    pattern: str
    flags: str = ""
    message: str | None = None
    rule: str | None = None

    @field_validator("flags")
    @classmethod
    def _validate_flags(cls, value: str) -> str:
        unknown = sorted(set(value) - set(_REGEX_FLAGS) - {"g"})
        if unknown:
            raise ValueError(f"unsupported regex flag(s): {''.join(unknown)}")
        return value

    @field_validator("pattern")
    @classmethod
    def _validate_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"invalid regular expression {value!r}: {exc}") from exc
        return value

    def compile(self) -> re.Pattern[str]:
        """Return the compiled expression honouring the configured flags."""

        flags = 0
        for letter in self.flags:
            flags |= _REGEX_FLAGS.get(letter, 0)
        return re.compile(self.pattern, flags)

    @property
    def rule_text(self) -> str:
        """Return the rule name reported for matches of this pattern."""
        return self.rule or self.pattern


class RegexCheckConfig(BaseModel):
    """Search files for regular expression matches."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["regex"] = "regex"
    files: list[str] = Field(min_length=1)
    ignore: list[str] | None = None
    patterns: list[RegexPattern] = Field(min_length=1)
    concurrency: int = Field(default=10, ge=1)


class CustomCheckConfig(BaseModel):
    """Configuration for a check provided by a plugin runner."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str

    @property
    def options(self) -> dict[str, Any]:
        """Return the plugin-specific settings declared alongside ``type``."""
        return dict(self.model_extra or {})


CheckConfig: TypeAlias = ESLintCheckConfig | TypeScriptCheckConfig | RegexCheckConfig | CustomCheckConfig

BUILTIN_CHECK_MODELS: Final[dict[str, type[BaseModel]]] = {
    "eslint": ESLintCheckConfig,
    "typescript": TypeScriptCheckConfig,
    "regex": RegexCheckConfig,
}


def parse_check_config(check_id: str, payload: Mapping[str, Any] | BaseModel) -> CheckConfig:
    """Validate ``payload`` into the configuration model selected by its ``type``.

    Args:
        check_id: Identifier of the check, used in error messages.
        payload: Raw mapping from the configuration file, or an existing model.

    Returns:
        CheckConfig: Validated configuration.

    Raises:
        ConfigError: If ``type`` is missing or the payload fails validation.
    """

    if isinstance(payload, (ESLintCheckConfig, TypeScriptCheckConfig, RegexCheckConfig, CustomCheckConfig)):
        return payload
    if not isinstance(payload, Mapping):
        raise ConfigError(f'Check "{check_id}" must be a table')
    check_type = payload.get("type")
    if not isinstance(check_type, str) or not check_type:
        raise ConfigError(f'Check "{check_id}" is missing a "type"')
    model = BUILTIN_CHECK_MODELS.get(check_type, CustomCheckConfig)
    try:
        return model.model_validate(dict(payload))  # type: ignore[return-value]
    except ValidationError as exc:
        raise ConfigError(f'Invalid configuration for check "{check_id}": {exc}') from exc


class MejoraConfig(BaseModel):
    """Top-level mejora configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    checks: dict[str, CheckConfig] = Field(default_factory=dict)
    baseline: Path = DEFAULT_BASELINE_PATH
    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    runners: list[str] = Field(default_factory=list)

    @field_validator("checks", mode="before")
    @classmethod
    def _dispatch_checks(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        return {str(check_id): parse_check_config(str(check_id), payload) for check_id, payload in value.items()}


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc


def _pyproject_section(path: Path) -> dict[str, Any] | None:
    tool_section = _read_toml(path).get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return None
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    return dict(section) if isinstance(section, Mapping) else None


def find_config_data(root: Path, config_path: Path | None = None) -> tuple[Path, dict[str, Any]]:
    """Locate and read the raw configuration mapping.

    Args:
        root: Project root searched for configuration files.
        config_path: Explicit configuration file; ``pyproject.toml`` files are
            read from their ``[tool.mejora]`` table.

    Returns:
        tuple[Path, dict[str, Any]]: Source path and raw configuration data.

    Raises:
        ConfigError: If no configuration can be found.
    """

    if config_path is not None:
        path = config_path if config_path.is_absolute() else root / config_path
        if not path.is_file():
            raise ConfigError(f"Configuration file not found: {path}")
        if path.name == PYPROJECT_FILENAME:
            section = _pyproject_section(path)
            if section is None:
                raise ConfigError(f"No [tool.mejora] table in {path}")
            return path, section
        return path, _read_toml(path)

    candidate = root / CONFIG_FILENAME
    if candidate.is_file():
        return candidate, _read_toml(candidate)
    pyproject = root / PYPROJECT_FILENAME
    if pyproject.is_file():
        section = _pyproject_section(pyproject)
        if section is not None:
            return pyproject, section
    raise ConfigError("No configuration file found.")


def load_config(root: Path, config_path: Path | None = None) -> MejoraConfig:
    """Load and validate the mejora configuration for ``root``.

    Raises:
        ConfigError: If the configuration is missing or invalid.
    """

    source, data = find_config_data(root, config_path)
    try:
        return MejoraConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {source}: {exc}") from exc


__all__ = [
    "BUILTIN_CHECK_MODELS",
    "CheckConfig",
    "CustomCheckConfig",
    "ESLintCheckConfig",
    "MejoraConfig",
    "RegexCheckConfig",
    "RegexPattern",
    "TypeScriptCheckConfig",
    "default_parallel_jobs",
    "find_config_data",
    "load_config",
    "parse_check_config",
]
