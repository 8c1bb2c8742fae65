# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Recovery helper that balances curly braces in truncated JSON fragments."""

from __future__ import annotations


def _remove_close_braces(text: str, count: int) -> str:
    result = text
    for _ in range(count):
        trimmed = result.rstrip()
        if not trimmed.endswith("}"):
            # Leave the excess in place so the JSON parser reports it.
            break
        result = trimmed[:-1]
    return result


def _add_close_braces(text: str, count: int) -> str:
    return text + "\n}" * count


def balance_braces(text: str) -> str:
    """Return ``text`` with its ``{``/``}`` counts reconciled where safe.

    Missing closing braces are appended. Surplus closing braces are removed
    from the end only while the fragment still ends with ``}``; any remaining
    surplus is left untouched.

    Args:
        text: JSON fragment, possibly cut in the middle of an object.

    Returns:
        str: The repaired fragment, or ``text`` unchanged when already balanced.
    """

    delta = text.count("{") - text.count("}")
    if delta == 0:
        return text
    if delta < 0:
        return _remove_close_braces(text, -delta)
    return _add_close_braces(text, delta)


__all__ = ["balance_braces"]
