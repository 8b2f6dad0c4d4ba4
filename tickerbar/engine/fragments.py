"""Composite ticker string construction.

Each instrument becomes ``<span color='C'><b>TEXT</b></span>`` and the
fragments are joined by the configured separator. The separator is trusted
config, so it is neither escaped nor colored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from tickerbar.engine.markup import escape_markup
from tickerbar.engine.primitives import (
    BOLD_CLOSE,
    BOLD_OPEN,
    DEFAULT_COLORS,
    SPAN_CLOSE,
    SPAN_OPEN,
    Classification,
    EmptyInput,
    InstrumentResult,
)


@dataclass(slots=True, frozen=True)
class ColorTable:
    """Classification → color token, with per-class overrides."""

    overrides: Mapping[Classification, str] = field(default_factory=dict)

    def color(self, cls: Classification | str) -> str:
        cls = Classification.parse(cls)
        return self.overrides.get(cls) or DEFAULT_COLORS[cls]

    @classmethod
    def from_thresholds(cls, thresholds) -> ColorTable:
        """Build from a config Thresholds (its *_color fields may be None)."""
        found = {
            Classification.CRITDOWN: thresholds.waydown_color,
            Classification.DOWN: thresholds.down_color,
            Classification.UP: thresholds.up_color,
            Classification.WAYUP: thresholds.wayup_color,
        }

        return cls({k: v for k, v in found.items() if v})


def open_span(color: str) -> str:
    return SPAN_OPEN.format(color) + BOLD_OPEN


def close_span() -> str:
    return BOLD_CLOSE + SPAN_CLOSE


def fragment(result: InstrumentResult, colors: ColorTable) -> str:
    return open_span(colors.color(result.cls)) + escape_markup(result.text) + close_span()


def build_ticker_string(
    results: Iterable[InstrumentResult], separator: str, colors: ColorTable | None = None
) -> str:
    """Join every instrument fragment into one composite markup string.

    Raises EmptyInput if there is nothing to render.
    """
    colors = colors or ColorTable()
    items = [fragment(r, colors) for r in results]

    if not items:
        raise EmptyInput("No data available for ticker")

    return separator.join(items)
