"""Ticker-mode renderer.

Pure pipeline from instrument results + previous scroll state to one window
of markup and the state to persist for the next invocation:

    results -> composite string -> markup index -> window
                                 \\-> fingerprint -> resume / reset

Loading and saving the state is the host's job (see ``tickerbar.cli``).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from tickerbar.engine.fragments import ColorTable, build_ticker_string
from tickerbar.engine.markup import MarkupWarning, index_markup
from tickerbar.engine.primitives import EmptyContent, InstrumentResult
from tickerbar.engine.scrollstate import ScrollState, content_fingerprint
from tickerbar.engine.window import window_from_index


@dataclass(slots=True, frozen=True)
class TickerFrame:
    """One rendered tick."""

    output: str
    state: ScrollState
    plainLength: int
    warnings: list[MarkupWarning] = field(default_factory=list)


def render_ticker(
    results: Sequence[InstrumentResult],
    separator: str,
    width: int,
    colors: ColorTable | None = None,
    state: ScrollState | None = None,
) -> TickerFrame:
    """Render the window for this tick and compute the next scroll state.

    The window starts at the saved position when the content fingerprint is
    unchanged, else at 0. The returned state is already advanced by one
    character. Raises EmptyInput / EmptyContent when there is nothing to show.
    """
    full = build_ticker_string(results, separator, colors)
    index = index_markup(full)
    plainLen = index.length

    if plainLen == 0:
        raise EmptyContent("Ticker string is empty")

    fingerprint = content_fingerprint(full)
    position = (state or ScrollState()).resume(fingerprint, plainLen)

    output = window_from_index(index, position, width)
    nextState = ScrollState(position, fingerprint).advance(plainLen)

    return TickerFrame(output, nextState, plainLen, index.warnings)


class TickerRenderer:
    """Binds ticker settings + colors so hosts only pass results and state.

    Markup warnings are logged here (not in the pure render) so embedding
    hosts can call ``render_ticker`` directly to handle them differently.
    """

    def __init__(self, separator: str, width: int, colors: ColorTable | None = None) -> None:
        self.separator = separator
        self.width = width
        self.colors = colors or ColorTable()

    def render(self, results: Sequence[InstrumentResult], state: ScrollState | None = None) -> TickerFrame:
        frame = render_ticker(results, self.separator, self.width, self.colors, state)

        for w in frame.warnings:
            logger.warning("[MalformedMarkup] {}", w)

        logger.debug(
            "Ticker window @ {} / {} (next {})",
            (frame.state.position - 1) % frame.plainLength,
            frame.plainLength,
            frame.state.position,
        )

        return frame
