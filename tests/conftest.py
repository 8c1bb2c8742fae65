# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from mejora.models import FindingInput


@pytest.fixture
def make_input() -> Callable[..., FindingInput]:
    """Return a factory for finding inputs with sensible defaults."""

    def factory(
        file: str = "src/app.ts",
        line: int = 1,
        column: int = 1,
        rule: str = "no-console",
        message: str = "Unexpected console statement.",
    ) -> FindingInput:
        return FindingInput(file=file, line=line, column=column, rule=rule, message=message)

    return factory


@pytest.fixture(autouse=True)
def _no_ci(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CI detection deterministic regardless of the host environment."""

    monkeypatch.delenv("CI", raising=False)
    monkeypatch.delenv("CONTINUOUS_INTEGRATION", raising=False)
