# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Snapshot normalisation for raw check output."""

from __future__ import annotations

from collections.abc import Iterable

from .identity import FindingLike, assign_ids, sort_by_location
from .models import RawSnapshot, Snapshot


def normalize_snapshot(raw: RawSnapshot | Snapshot | Iterable[FindingLike]) -> Snapshot:
    """Return a canonical snapshot for ``raw`` runner output.

    Identifiers are assigned with :func:`mejora.identity.assign_ids` and the
    findings are stably sorted by location. Normalising an already normalised
    snapshot yields the same identifiers in the same order.

    Args:
        raw: Runner output, either wrapped in a snapshot model or as a plain
            iterable of finding-like objects.

    Returns:
        Snapshot: Immutable, location-ordered snapshot.
    """

    items: Iterable[FindingLike] = raw.items if isinstance(raw, (RawSnapshot, Snapshot)) else raw
    return Snapshot(type="items", items=sort_by_location(assign_ids(items)))


__all__ = ["normalize_snapshot"]
