# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Constants shared by the baseline subsystem and its collaborators."""

from __future__ import annotations

from pathlib import Path
from typing import Final

BASELINE_VERSION: Final[int] = 2
DEFAULT_BASELINE_PATH: Final[Path] = Path(".mejora") / "baseline.json"
CONFLICT_MARKER: Final[str] = "<<<<<<<"
GLOBAL_FILE: Final[str] = "(global)"
CACHE_ROOT: Final[Path] = Path("node_modules") / ".cache" / "mejora"
CI_ENV_VARS: Final[tuple[str, ...]] = ("CI", "CONTINUOUS_INTEGRATION")

__all__ = [
    "BASELINE_VERSION",
    "CACHE_ROOT",
    "CI_ENV_VARS",
    "CONFLICT_MARKER",
    "DEFAULT_BASELINE_PATH",
    "GLOBAL_FILE",
]
