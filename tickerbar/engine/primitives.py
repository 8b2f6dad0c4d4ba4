"""Pure types, constants, and exceptions with no external dependencies beyond stdlib."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Final


class Classification(enum.StrEnum):
    """Percent-change bucket for an instrument.

    Values are the literal class names emitted in single-instrument JSON
    output (status bars style on them), so don't rename them.
    """

    CRITDOWN = "critdown"
    DOWN = "down"
    UP = "up"
    WAYUP = "wayup"

    @classmethod
    def parse(cls, value: str | Classification | None) -> Classification:
        """Convert an external class string, falling back to UP when unknown."""
        if isinstance(value, cls):
            return value

        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UP


# fallback colors when the config doesn't override a class
DEFAULT_COLORS: Final = {
    Classification.CRITDOWN: "#800000",
    Classification.DOWN: "#FF0000",
    Classification.WAYUP: "#008000",
    Classification.UP: "#00FF00",
}

# 'color' is the attribute name the markup indexer looks for inside <span ...>
SPAN_OPEN: Final = "<span color='{}'>"
SPAN_CLOSE: Final = "</span>"
BOLD_OPEN: Final = "<b>"
BOLD_CLOSE: Final = "</b>"


@dataclass(slots=True, frozen=True)
class InstrumentResult:
    """One fetched + classified instrument readout."""

    text: str
    cls: Classification = Classification.UP
    tooltip: str = ""

    def asdict(self) -> dict[str, str]:
        # key order matches what waybar-style consumers expect
        return {"text": self.text, "tooltip": self.tooltip, "class": str(self.cls)}


@dataclass(slots=True, frozen=True)
class CharFormat:
    """A single visible character and the color active where it appeared."""

    character: str
    color: str | None = None


# ── Exceptions ───────────────────────────────────────────────────────────────


class TickerError(Exception):
    """Base for every failure raised by tickerbar."""


class EmptyInput(TickerError):
    """No instruments were available to render."""


class EmptyContent(TickerError):
    """The rendered markup contains no visible characters."""


class ConfigError(TickerError):
    """Config file is missing, unparseable, or has bad values."""


class FeedError(TickerError):
    """A market data source returned an unusable response."""
