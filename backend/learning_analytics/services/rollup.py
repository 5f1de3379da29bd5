"""Zero-safe averaging and percentage primitives.

All rounding in the analytics engine goes through this module: half-up to
the nearest integer, with empty input or a zero denominator yielding ``0``.
Rounding is done in integer arithmetic so that ``x.5`` is never pulled down
by float error.
"""

from typing import Iterable


def _round_half_up(numerator: int, denominator: int) -> int:
    # floor(numerator / denominator + 1/2), denominator > 0
    return int((2 * numerator + denominator) // (2 * denominator))


def average(values: Iterable[int]) -> int:
    """Arithmetic mean rounded half-up; ``0`` for an empty sequence."""
    total = 0
    count = 0
    for value in values:
        total += value
        count += 1
    if count == 0:
        return 0
    return _round_half_up(total, count)


def ratio_percent(numerator: int, denominator: int) -> int:
    """``round(numerator / denominator * 100)`` half-up; ``0`` when the denominator is zero."""
    if denominator == 0:
        return 0
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    return _round_half_up(numerator * 100, denominator)
