# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Stable identifier assignment for diagnostic findings.

Identifiers are derived from the ``(file, rule, message)`` signature of a
finding together with its position among findings sharing that signature.
Absolute line and column numbers never contribute to the hash, so a finding
keeps its identifier when unrelated code above it is added or removed.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Sequence
from typing import Protocol

from .models import Finding


class Locatable(Protocol):
    """Structural view of anything that carries a diagnostic location."""

    @property
    def file(self) -> str: ...

    @property
    def line(self) -> int: ...

    @property
    def column(self) -> int: ...


class FindingLike(Locatable, Protocol):
    """Structural view of a finding with or without an identifier."""

    @property
    def rule(self) -> str: ...

    @property
    def message(self) -> str: ...


def location_key(item: Locatable) -> tuple[str, int, int]:
    """Return the ``(file, line, column)`` sort key for ``item``.

    Args:
        item: Finding-like object exposing location attributes.

    Returns:
        tuple[str, int, int]: Key ordering files by code point, then numeric
        line and column.
    """

    return (item.file, item.line, item.column)


def signature_for(item: FindingLike) -> str:
    """Return the grouping signature ``"<file> - <rule>: <message>"``."""

    return f"{item.file} - {item.rule}: {item.message}"


def stable_hash(text: str) -> str:
    """Return the hexadecimal SHA-256 digest of ``text``."""

    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def assign_ids(items: Iterable[FindingLike]) -> list[Finding]:
    """Assign stable identifiers to ``items``.

    Findings are grouped by signature; within each group members are ordered
    by location (stable for equal locations) and numbered from zero. The
    identifier is the SHA-256 of ``"<signature>:<index>"``.

    Args:
        items: Findings without identifiers. Identifiers already present are
            ignored and recomputed.

    Returns:
        list[Finding]: Findings with identifiers, emitted group by group in
        order of first appearance.
    """

    groups: dict[str, list[FindingLike]] = {}
    for item in items:
        groups.setdefault(signature_for(item), []).append(item)

    result: list[Finding] = []
    for signature, group in groups.items():
        for index, member in enumerate(sorted(group, key=location_key)):
            result.append(
                Finding(
                    id=stable_hash(f"{signature}:{index}"),
                    file=member.file,
                    line=member.line,
                    column=member.column,
                    rule=member.rule,
                    message=member.message,
                ),
            )
    return result


def sort_by_location(items: Sequence[Finding]) -> list[Finding]:
    """Return ``items`` stably sorted by ``(file, line, column)``."""

    return sorted(items, key=location_key)


def sort_by_id(items: Iterable[Finding]) -> list[Finding]:
    """Return ``items`` sorted by identifier."""

    return sorted(items, key=lambda item: item.id)


__all__ = [
    "FindingLike",
    "Locatable",
    "assign_ids",
    "location_key",
    "signature_for",
    "sort_by_id",
    "sort_by_location",
    "stable_hash",
]
