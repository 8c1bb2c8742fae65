# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Process environment inspection resolved once at start-up."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from .constants import CI_ENV_VARS

_FALSY_VALUES: Final[frozenset[str]] = frozenset({"", "0", "false"})


def detect_ci(env: Mapping[str, str] | None = None) -> bool:
    """Return ``True`` when ``env`` describes a continuous integration run.

    Args:
        env: Environment mapping to inspect. Defaults to :data:`os.environ`.

    Returns:
        bool: ``True`` when ``CI`` or ``CONTINUOUS_INTEGRATION`` holds a value
        other than an empty string, ``"0"`` or ``"false"``.
    """

    source = os.environ if env is None else env
    return any(source.get(key, "") not in _FALSY_VALUES for key in CI_ENV_VARS)


__all__ = ["detect_ci"]
