# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Descriptive statistics over grade values.

All helpers take any iterable of numbers, work in Decimal, and return None
for an empty input instead of a zero placeholder.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from decimal import Decimal

Number = Decimal | int | float


def _sorted_decimals(values: Iterable[Number]) -> list[Decimal]:
    return sorted(Decimal(str(value)) for value in values)


def mean(values: Iterable[Number]) -> Decimal | None:
    """Arithmetic mean, or None for no values."""
    numbers = [Decimal(str(value)) for value in values]
    if not numbers:
        return None
    return sum(numbers, Decimal("0")) / len(numbers)


def median(values: Iterable[Number]) -> Decimal | None:
    """Median of the values.

    For an even count this is the average of the two central values; for
    an odd count it is the central value.

    Example:
        >>> median([4, 1, 3, 2])
        Decimal('2.5')
    """
    ordered = _sorted_decimals(values)
    count = len(ordered)
    if count == 0:
        return None
    middle = count // 2
    if count % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return ordered[middle]


def percentile(values: Iterable[Number], p: float) -> Decimal | None:
    """Nearest-rank percentile.

    The rank is ceil(p / 100 * n), clamped to the value range, so p=0 gives
    the minimum and p=100 the maximum.

    Raises:
        ValueError: If p is outside 0-100.
    """
    if not 0 <= p <= 100:
        raise ValueError(f"Percentile must be between 0 and 100, got {p}")
    ordered = _sorted_decimals(values)
    if not ordered:
        return None
    index = math.ceil(p / 100 * len(ordered)) - 1
    return ordered[max(0, min(index, len(ordered) - 1))]
