# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the ESLint and TypeScript check runners."""

from __future__ import annotations

import json
import os
import stat
import subprocess
from collections.abc import Sequence
from pathlib import Path

import pytest

from mejora.checks import eslint as eslint_module
from mejora.checks import typescript as typescript_module
from mejora.checks.base import CheckContext
from mejora.checks.eslint import ESLintCheckRunner
from mejora.checks.registry import CheckRegistry
from mejora.checks.typescript import TypeScriptCheckRunner, compiler_option_flags, find_tsconfig
from mejora.config import ESLintCheckConfig, TypeScriptCheckConfig
from mejora.errors import CheckExecutionError


class FakeRunCommand:
    """Record invocations and return a canned process result."""

    def __init__(self, returncode: int, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[list[str]] = []

    def __call__(self, args: Sequence[str], **_: object) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(args))
        return subprocess.CompletedProcess(list(args), self.returncode, self.stdout, self.stderr)


def test_eslint_command_line(tmp_path: Path) -> None:
    config = ESLintCheckConfig(files=["src/**/*.ts"], rules={"no-console": "error"})
    command = ESLintCheckRunner().build_command(config, CheckContext(root=tmp_path))
    assert command[:4] == ["eslint", "--format", "json", "--cache"]
    cache_location = Path(command[command.index("--cache-location") + 1])
    assert cache_location.parent == tmp_path / "node_modules" / ".cache" / "mejora" / "eslint"
    assert cache_location.suffix == ".eslintcache"
    assert command[command.index("--rule") + 1] == json.dumps({"no-console": "error"})
    assert command[-1] == "src/**/*.ts"


def test_eslint_run_parses_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    payload = [
        {
            "filePath": str(tmp_path / "src" / "a.ts"),
            "messages": [{"ruleId": "no-console", "line": 4, "column": 2, "message": "Unexpected console statement."}],
        },
    ]
    fake = FakeRunCommand(1, stdout=json.dumps(payload))
    monkeypatch.setattr(eslint_module, "run_command", fake)

    snapshot = ESLintCheckRunner().run(ESLintCheckConfig(files=["src"]), CheckContext(root=tmp_path))

    assert len(fake.calls) == 1
    assert [(item.file, item.line, item.rule) for item in snapshot.items] == [("src/a.ts", 4, "no-console")]


def test_eslint_crash_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(eslint_module, "run_command", FakeRunCommand(2, stderr="Oops! Something went wrong!"))
    with pytest.raises(CheckExecutionError, match="Something went wrong"):
        ESLintCheckRunner().run(ESLintCheckConfig(files=["src"]), CheckContext(root=tmp_path))


def test_eslint_invalid_json_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(eslint_module, "run_command", FakeRunCommand(0, stdout="not json"))
    with pytest.raises(CheckExecutionError, match="invalid JSON"):
        ESLintCheckRunner().run(ESLintCheckConfig(files=["src"]), CheckContext(root=tmp_path))


def _write_tool(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\necho '[]'\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def test_validate_requires_default_executable_on_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))
    context = CheckContext(root=tmp_path)
    with pytest.raises(CheckExecutionError, match='requires "eslint" on PATH'):
        ESLintCheckRunner().validate_config(ESLintCheckConfig(files=["src"]), context)
    with pytest.raises(CheckExecutionError, match='requires "tsc" on PATH'):
        TypeScriptCheckRunner().validate_config(TypeScriptCheckConfig(), context)


@pytest.mark.skipif(os.name == "nt", reason="shell scripts are not executable on Windows")
def test_configured_executable_validates_without_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_tool(tmp_path / "node_modules" / ".bin" / "eslint")
    _write_tool(tmp_path / "node_modules" / ".bin" / "tsc")
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))
    monkeypatch.chdir(tmp_path.parent)
    checks = {
        "lint": ESLintCheckConfig(files=["src"], executable="node_modules/.bin/eslint"),
        "types": TypeScriptCheckConfig(executable=str(tmp_path / "node_modules" / ".bin" / "tsc")),
    }

    CheckRegistry.with_builtins().validate(checks, CheckContext(root=tmp_path))


def test_missing_configured_executable_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))
    checks = {"lint": ESLintCheckConfig(files=["src"], executable="node_modules/.bin/eslint")}
    with pytest.raises(CheckExecutionError, match='eslint executable "node_modules/.bin/eslint" not found'):
        CheckRegistry.with_builtins().validate(checks, CheckContext(root=tmp_path))


def test_setup_creates_cache_directories(tmp_path: Path) -> None:
    context = CheckContext(root=tmp_path)
    ESLintCheckRunner().setup(context)
    TypeScriptCheckRunner().setup(context)
    assert context.cache_dir("eslint").is_dir()
    assert context.cache_dir("typescript").is_dir()


def test_compiler_option_flags() -> None:
    options = {"strict": True, "noEmitOnError": False, "lib": ["dom", "es2022"], "target": "es2022"}
    flags = compiler_option_flags(options)
    assert flags == ["--strict", "--noEmitOnError", "false", "--lib", "dom,es2022", "--target", "es2022"]


def test_find_tsconfig_searches_upwards(tmp_path: Path) -> None:
    (tmp_path / "tsconfig.json").write_text("{}", encoding="utf-8")
    nested = tmp_path / "packages" / "app"
    nested.mkdir(parents=True)
    assert find_tsconfig(nested) == tmp_path / "tsconfig.json"


def test_typescript_run(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "tsconfig.json").write_text("{}", encoding="utf-8")
    fake = FakeRunCommand(2, stdout="src/a.ts(1,7): error TS2322: Type 'string' is not assignable to type 'number'.\n")
    monkeypatch.setattr(typescript_module, "run_command", fake)

    snapshot = TypeScriptCheckRunner().run(TypeScriptCheckConfig(), CheckContext(root=tmp_path))

    command = fake.calls[0]
    assert command[:4] == ["tsc", "--noEmit", "--pretty", "false"]
    assert "--incremental" in command
    assert command[command.index("--project") + 1] == str(tmp_path / "tsconfig.json")
    assert command[command.index("--tsBuildInfoFile") + 1].endswith(".tsbuildinfo")
    assert [(item.file, item.rule) for item in snapshot.items] == [("src/a.ts", "TS2322")]


def test_typescript_configured_tsconfig(tmp_path: Path) -> None:
    (tmp_path / "tsconfig.app.json").write_text("{}", encoding="utf-8")
    runner = TypeScriptCheckRunner()
    config = TypeScriptCheckConfig(tsconfig=Path("tsconfig.app.json"))
    assert runner.resolve_tsconfig(config, CheckContext(root=tmp_path)) == tmp_path / "tsconfig.app.json"


def test_typescript_missing_tsconfig_raises(tmp_path: Path) -> None:
    runner = TypeScriptCheckRunner()
    with pytest.raises(CheckExecutionError, match="TypeScript config file not found"):
        runner.resolve_tsconfig(TypeScriptCheckConfig(tsconfig=Path("nope.json")), CheckContext(root=tmp_path))


def test_typescript_crash_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "tsconfig.json").write_text("{}", encoding="utf-8")
    monkeypatch.setattr(typescript_module, "run_command", FakeRunCommand(134, stderr="out of memory"))
    with pytest.raises(CheckExecutionError, match="out of memory"):
        TypeScriptCheckRunner().run(TypeScriptCheckConfig(), CheckContext(root=tmp_path))
