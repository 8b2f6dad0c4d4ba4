"""Fixed-width scrolling window over a marked-up ticker string."""

from __future__ import annotations

from tickerbar.engine.fragments import close_span, open_span
from tickerbar.engine.markup import MarkupIndex, index_markup
from tickerbar.engine.primitives import EmptyContent


def window_from_index(index: MarkupIndex, position: int, width: int) -> str:
    """Render ``width`` plain characters starting at ``position``, wrapping.

    Spans are only opened where the color changes and every opened span is
    closed, so the result is balanced no matter where the cut lands.
    """
    plainLen = index.length
    if plainLen == 0:
        raise EmptyContent("Ticker string is empty")

    formats = index.formats
    result: list[str] = []
    lastColor: str | None = None

    for i in range(width):
        fmt = formats[(position + i) % plainLen]

        if fmt.color != lastColor:
            if lastColor is not None:
                result.append(close_span())

            if fmt.color is not None:
                result.append(open_span(fmt.color))

            lastColor = fmt.color

        result.append(fmt.character)

    if lastColor is not None:
        result.append(close_span())

    return "".join(result)


def ticker_window(text: str, position: int, width: int) -> str:
    """Index ``text`` and extract one window from it."""
    return window_from_index(index_markup(text), position, width)
