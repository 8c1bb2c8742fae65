# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for subprocess helpers."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from mejora.process import TIMEOUT_RETURNCODE, CommandOptions, resolve_executable, run_command


def _write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n{body}\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def test_run_command_captures_output(tmp_path: Path) -> None:
    completed = run_command(
        [sys.executable, "-c", "import os; print(os.getcwd())"],
        options=CommandOptions(cwd=tmp_path, capture_output=True),
    )
    assert completed.returncode == 0
    assert Path(completed.stdout.strip()).resolve() == tmp_path.resolve()


def test_run_command_returns_failing_status() -> None:
    completed = run_command([sys.executable, "-c", "import sys; sys.exit(3)"], capture_output=True)
    assert completed.returncode == 3


def test_timeout_maps_to_124() -> None:
    completed = run_command(
        [sys.executable, "-c", "import time; time.sleep(5)"],
        capture_output=True,
        timeout=0.2,
    )
    assert completed.returncode == TIMEOUT_RETURNCODE
    assert "timed out" in completed.stderr


def test_missing_executable() -> None:
    assert resolve_executable("definitely-not-a-real-binary-xyz") is None
    with pytest.raises(FileNotFoundError):
        run_command(["definitely-not-a-real-binary-xyz"])


@pytest.mark.skipif(os.name == "nt", reason="shebang scripts require a POSIX shell")
def test_relative_executable_resolves_against_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    script = _write_script(tmp_path / "node_modules" / ".bin" / "tool", "print('local tool')")
    monkeypatch.setenv("PATH", str(tmp_path / "nonexistent"))
    monkeypatch.chdir(tmp_path.parent)

    assert resolve_executable("node_modules/.bin/tool", tmp_path) == str(script)
    assert resolve_executable("node_modules/.bin/tool") is None

    completed = run_command(
        ["node_modules/.bin/tool"],
        options=CommandOptions(cwd=tmp_path, capture_output=True),
    )
    assert completed.stdout.strip() == "local tool"


def test_with_overrides_rejects_unknown_options() -> None:
    options = CommandOptions()
    assert options.with_overrides(capture_output=True).capture_output is True
    with pytest.raises(TypeError, match="Unknown command option"):
        options.with_overrides(shell=True)
    with pytest.raises(ValueError):
        options.with_overrides(timeout=-1)
