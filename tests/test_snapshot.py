# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for snapshot normalisation."""

from __future__ import annotations

from mejora.identity import location_key
from mejora.models import RawSnapshot
from mejora.snapshot import normalize_snapshot


def test_items_are_sorted_by_location(make_input) -> None:
    raw = RawSnapshot(
        items=[
            make_input(file="b.ts", line=1),
            make_input(file="a.ts", line=12, column=3),
            make_input(file="a.ts", line=2),
            make_input(file="a.ts", line=12, column=1),
        ],
    )
    snapshot = normalize_snapshot(raw)
    assert snapshot.type == "items"
    assert [location_key(item) for item in snapshot.items] == [
        ("a.ts", 2, 1),
        ("a.ts", 12, 1),
        ("a.ts", 12, 3),
        ("b.ts", 1, 1),
    ]


def test_normalisation_is_idempotent(make_input) -> None:
    raw = RawSnapshot(items=[make_input(line=line, rule=f"r{line % 2}") for line in (9, 3, 5, 1)])
    once = normalize_snapshot(raw)
    twice = normalize_snapshot(once)
    assert twice == once


def test_plain_iterables_are_accepted(make_input) -> None:
    snapshot = normalize_snapshot([make_input(line=2), make_input(line=1)])
    assert [item.line for item in snapshot.items] == [1, 2]
    assert len({item.id for item in snapshot.items}) == 2


def test_empty_snapshot() -> None:
    assert normalize_snapshot(RawSnapshot()).items == []
