"""Markup scanning for ticker strings.

The ticker string is a tiny subset of Pango-style markup: only
``<span color='...'>`` changes state, ``<b>`` is a rendering hint, and
everything outside a tag is visible text. All positions here count Python
code points of the *plain* text (markup removed).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Final

from tickerbar.engine.primitives import CharFormat

# str.translate table; a single pass over the text, non-ASCII untouched
_ESCAPES: Final = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        "'": "&apos;",
        '"': "&quot;",
    }
)

COLOR_ATTR: Final = "color="

type CharFormatMap = dict[int, CharFormat]


def escape_markup(text: str) -> str:
    """Escape markup-sensitive characters so instrument text can't inject tags."""
    return text.translate(_ESCAPES)


def strip_markup(text: str) -> str:
    """Remove every ``<...>`` tag, returning only the visible text.

    A ``>`` outside a tag is visible text, as it is for the indexer.
    """
    result = []
    inTag = False

    for ch in text:
        if inTag:
            inTag = ch != ">"
        elif ch == "<":
            inTag = True
        else:
            result.append(ch)

    return "".join(result)


def plain_length(text: str) -> int:
    return len(strip_markup(text))


class MarkupWarningKind(enum.StrEnum):
    MALFORMED_SPAN = "malformed-span"
    UNMATCHED_CLOSE = "unmatched-close"


@dataclass(slots=True, frozen=True)
class MarkupWarning:
    """A recoverable markup problem found while indexing.

    The offending tag is treated as inert; rendering continues.
    """

    kind: MarkupWarningKind
    tag: str
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.tag}"


def extract_color_value(tag: str) -> tuple[str | None, str | None]:
    """Pull the quoted ``color=`` value out of an opening span tag.

    Returns ``(color, None)`` on success or ``(None, reason)`` when the
    attribute is missing or its quoting is broken.
    """
    attrPos = tag.lower().find(COLOR_ATTR)
    if attrPos < 0:
        return None, "Span tag has no color attribute"

    rest = tag[attrPos + len(COLOR_ATTR) :].lstrip()
    if not rest or rest[0] not in ("'", '"'):
        return None, "Color attribute missing quotes in tag"

    quote = rest[0]
    end = rest.find(quote, 1)
    if end < 0:
        return None, "Color attribute missing closing quote in tag"

    return rest[1:end], None


class ScanState(enum.Enum):
    TEXT = enum.auto()
    IN_TAG = enum.auto()


@dataclass(slots=True)
class MarkupIndex:
    """Result of scanning a marked-up string exactly once."""

    formats: CharFormatMap = field(default_factory=dict)
    warnings: list[MarkupWarning] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.formats)

    @property
    def plain(self) -> str:
        return "".join(self.formats[i].character for i in range(self.length))


class MarkupIndexer:
    """State machine mapping plain-text positions to (character, color).

    States are TEXT and IN_TAG. A color stack is pushed by opening span tags
    and popped by ``</span>``; bold and unknown tags never touch it.
    """

    def __init__(self) -> None:
        self.state = ScanState.TEXT
        self.colors: list[str] = []
        self.tag: list[str] = []
        self.index = MarkupIndex()

    @property
    def color(self) -> str | None:
        return self.colors[-1] if self.colors else None

    def feed(self, text: str) -> MarkupIndex:
        for ch in text:
            match self.state:
                case ScanState.TEXT if ch == "<":
                    self.state = ScanState.IN_TAG
                    self.tag = [ch]
                case ScanState.TEXT:
                    self.emit(ch)
                case ScanState.IN_TAG if ch == ">":
                    self.tag.append(ch)
                    self.state = ScanState.TEXT
                    self.closeTag("".join(self.tag))
                case ScanState.IN_TAG:
                    self.tag.append(ch)

        return self.index

    def emit(self, ch: str) -> None:
        formats = self.index.formats
        formats[len(formats)] = CharFormat(ch, self.color)

    def closeTag(self, tag: str) -> None:
        lowered = tag.lower()

        if lowered.startswith("<span"):
            color, problem = extract_color_value(tag)
            if color is None:
                self.warn(MarkupWarningKind.MALFORMED_SPAN, tag, problem or "")
                return

            self.colors.append(color)
        elif lowered == "</span>":
            if not self.colors:
                self.warn(
                    MarkupWarningKind.UNMATCHED_CLOSE,
                    tag,
                    "Unmatched </span> tag encountered in ticker text",
                )
                return

            self.colors.pop()

    def warn(self, kind: MarkupWarningKind, tag: str, message: str) -> None:
        self.index.warnings.append(MarkupWarning(kind, tag, message))


def index_markup(text: str) -> MarkupIndex:
    """Scan ``text`` once into a contiguous position → CharFormat map."""
    return MarkupIndexer().feed(text)
