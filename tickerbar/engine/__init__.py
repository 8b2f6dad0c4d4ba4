"""tickerbar engine layer: ticker rendering with no network or CLI dependency.

Modules
-------
primitives
    Types, default colors, markup tag constants, and the exception tree.
    - ``Classification``: critdown / down / up / wayup (unknown strings parse as up)
    - ``InstrumentResult``: (text, classification, tooltip) for one instrument
    - ``CharFormat``: one visible character plus its active color
    - Exceptions: ``TickerError`` > ``EmptyInput``, ``EmptyContent``, ``ConfigError``, ``FeedError``

classify
    - ``percentage_change``: percent move, None for a zero base
    - ``classify``: bucket a percent move with config thresholds

markup
    - ``escape_markup``, ``strip_markup``, ``plain_length``
    - ``MarkupIndexer``: explicit TEXT / IN_TAG state machine with a color stack
    - ``index_markup``: one scan → ``MarkupIndex`` (position map + ``MarkupWarning`` list)

fragments
    - ``ColorTable``: classification → color with per-class overrides
    - ``build_ticker_string``: color-wrapped, escaped fragments joined by a separator

window
    - ``ticker_window`` / ``window_from_index``: balanced, wrapping fixed-width window

scrollstate
    - ``content_fingerprint``: SHA-256 of the composite string
    - ``ScrollState``: (position, fingerprint) with ``resume`` and ``advance``
    - ``ScrollStateStore``: two small files, best-effort writes

toolbar
    - ``render_ticker``: pure ``(results, state_in) -> TickerFrame(output, state_out, warnings)``
    - ``TickerRenderer``: binds settings and logs markup warnings
"""

from tickerbar.engine.fragments import ColorTable, build_ticker_string
from tickerbar.engine.markup import MarkupWarning, escape_markup, index_markup, strip_markup
from tickerbar.engine.primitives import (
    Classification,
    EmptyContent,
    EmptyInput,
    InstrumentResult,
    TickerError,
)
from tickerbar.engine.scrollstate import ScrollState, ScrollStateStore, content_fingerprint
from tickerbar.engine.toolbar import TickerFrame, TickerRenderer, render_ticker
from tickerbar.engine.window import ticker_window

__all__ = [
    "Classification",
    "ColorTable",
    "EmptyContent",
    "EmptyInput",
    "InstrumentResult",
    "MarkupWarning",
    "ScrollState",
    "ScrollStateStore",
    "TickerError",
    "TickerFrame",
    "TickerRenderer",
    "build_ticker_string",
    "content_fingerprint",
    "escape_markup",
    "index_markup",
    "render_ticker",
    "strip_markup",
    "ticker_window",
]
