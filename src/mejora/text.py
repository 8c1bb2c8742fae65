# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Small text helpers shared by the renderers."""

from __future__ import annotations


def plural(count: int, singular: str) -> str:
    """Return ``singular`` or its ``s``-suffixed plural for ``count``."""

    return singular if count == 1 else f"{singular}s"


__all__ = ["plural"]
