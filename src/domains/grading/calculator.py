# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade calculation: percentage and letter grade derivation.

The calculator is pure. It is invoked on every grade write so that the
stored percentage and letter always agree with value/max_value.

Letter thresholds (inclusive lower bounds, checked highest first):

    93 A   90 A-   87 B+   83 B   80 B-   77 C+
    73 C   70 C-   67 D+   63 D   60 D-   below 60 F

Percentages are quantized to two decimals (half-even) before the letter is
chosen, so the letter always matches the percentage that gets stored.

Example:
    >>> calculate_grade(Decimal("45"), Decimal("50"))
    GradeCalculation(percentage=Decimal('90.00'), letter_grade='A-')
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

from src.core.exceptions import ValidationError

HUNDRED = Decimal("100")
CENT = Decimal("0.01")

LETTER_GRADE_THRESHOLDS: tuple[tuple[Decimal, str], ...] = (
    (Decimal("93"), "A"),
    (Decimal("90"), "A-"),
    (Decimal("87"), "B+"),
    (Decimal("83"), "B"),
    (Decimal("80"), "B-"),
    (Decimal("77"), "C+"),
    (Decimal("73"), "C"),
    (Decimal("70"), "C-"),
    (Decimal("67"), "D+"),
    (Decimal("63"), "D"),
    (Decimal("60"), "D-"),
)
FAILING_LETTER = "F"

LETTER_GRADES: tuple[str, ...] = tuple(letter for _, letter in LETTER_GRADE_THRESHOLDS) + (
    FAILING_LETTER,
)


class GradeValidationError(ValidationError):
    """Raised when a grade value pair cannot be evaluated."""

    pass


@dataclass(frozen=True)
class GradeCalculation:
    """Derived fields of a grade."""

    percentage: Decimal
    letter_grade: str


def to_decimal(value: Decimal | int | float | str, field_name: str = "value") -> Decimal:
    """Coerce a numeric input to Decimal.

    Floats go through str() so 0.1 stays 0.1.

    Raises:
        GradeValidationError: If the input is not a finite number.
    """
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise GradeValidationError(f"{field_name} must be a number") from None
    if not result.is_finite():
        raise GradeValidationError(f"{field_name} must be a finite number")
    return result


def calculate_percentage(value: Decimal, max_value: Decimal) -> Decimal:
    """Return value / max_value * 100, quantized to 0.01.

    Raises:
        GradeValidationError: If max_value is not positive.
    """
    value = to_decimal(value, "value")
    max_value = to_decimal(max_value, "max_value")
    if max_value <= 0:
        raise GradeValidationError("max_value must be greater than zero")
    return (value / max_value * HUNDRED).quantize(CENT, rounding=ROUND_HALF_EVEN)


def letter_grade_for(percentage: Decimal) -> str:
    """Map a percentage to its letter grade."""
    percentage = to_decimal(percentage, "percentage")
    for threshold, letter in LETTER_GRADE_THRESHOLDS:
        if percentage >= threshold:
            return letter
    return FAILING_LETTER


def calculate_grade(value: Decimal | int | float | str, max_value: Decimal | int | float | str) -> GradeCalculation:
    """Derive percentage and letter grade from a raw value pair.

    Args:
        value: Points earned. Values above max_value (extra credit) and
            negative penalties are accepted as-is.
        max_value: Points possible, must be > 0.

    Returns:
        The derived percentage and letter.

    Raises:
        GradeValidationError: If max_value <= 0 or either input is not numeric.
    """
    percentage = calculate_percentage(to_decimal(value, "value"), to_decimal(max_value, "max_value"))
    return GradeCalculation(percentage=percentage, letter_grade=letter_grade_for(percentage))


def letter_bucket(letter_grade: str) -> str:
    """Collapse a letter with +/- into its A/B/C/D/F bucket."""
    return letter_grade[:1].upper() if letter_grade else FAILING_LETTER
