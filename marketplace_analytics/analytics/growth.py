"""
Growth Calculator

Period-over-period change and simple ratios, zero-guarded.
"""

from typing import Union

Number = Union[int, float]


def growth_rate(current: Number, previous: Number) -> float:
    """
    Percentage change from ``previous`` to ``current``.

    Returns 0.0 whenever ``previous`` is 0, whatever ``current`` is: with no
    baseline there is no meaningful growth figure. The result is not rounded.

    Raises:
        ValueError: If either value is negative
    """
    if current < 0 or previous < 0:
        raise ValueError(f"Growth inputs must be non-negative, got current={current}, previous={previous}")
    if previous == 0:
        return 0.0
    return ((current - previous) / previous) * 100


def ratio_percent(part: Number, whole: Number) -> float:
    """``part`` as a percentage of ``whole``; 0.0 when ``whole`` is 0."""
    if whole == 0:
        return 0.0
    return (part / whole) * 100
