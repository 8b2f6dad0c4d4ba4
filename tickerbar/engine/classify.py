"""Percent change math and threshold classification."""

from __future__ import annotations

from tickerbar.engine.primitives import Classification


def percentage_change(current: float, base: float) -> float | None:
    """Percent change from ``base`` to ``current``; None when base is zero."""
    if base == 0:
        return None

    return ((current - base) / base) * 100


def classify(pct: float | None, thresholds) -> Classification:
    """Bucket a percent change using ``thresholds.critdown/down/wayup``.

    Below ``down`` is DOWN (or CRITDOWN below ``critdown``), above ``wayup``
    is WAYUP, everything else (including an unknown change) is UP.
    """
    if pct is None or pct != pct:
        return Classification.UP

    if pct < thresholds.down:
        if pct < thresholds.critdown:
            return Classification.CRITDOWN

        return Classification.DOWN

    if pct > thresholds.wayup:
        return Classification.WAYUP

    return Classification.UP
