"""Shared test fixtures for the tickerbar test suite.

FakeFeeds stands in for tickerbar.feeds.Feeds so renderer and CLI tests run
without network access or an API key.
"""

from io import StringIO
import re

import pytest
from loguru import logger

from tickerbar.config import Config, CryptoConfig, StockConfig, Thresholds, TickerSettings
from tickerbar.engine.fragments import ColorTable
from tickerbar.engine.primitives import Classification, FeedError, InstrumentResult

UP = "#00FF00"
DOWN = "#FF0000"

_TAG = re.compile(r"<(/?)(\w+)[^>]*>")


def assert_balanced(markup: str) -> None:
    """Every opened span/b is closed in LIFO order."""
    stack = []
    for closing, name in _TAG.findall(markup):
        if closing:
            assert stack, f"close </{name}> with nothing open in {markup!r}"
            assert stack.pop() == name, f"mismatched </{name}> in {markup!r}"
        else:
            stack.append(name)

    assert not stack, f"unclosed {stack} in {markup!r}"


@pytest.fixture
def balanced():
    return assert_balanced


# ── Scenario data ──


@pytest.fixture
def scenario_results() -> list[InstrumentResult]:
    return [
        InstrumentResult("AAPL $150.00 (+1.2%)", Classification.UP),
        InstrumentResult("BTC €50000.00 (-3.5%)", Classification.DOWN),
    ]


@pytest.fixture
def scenario_colors() -> ColorTable:
    return ColorTable({Classification.UP: UP, Classification.DOWN: DOWN})


@pytest.fixture
def thresholds() -> Thresholds:
    return Thresholds(critdown=-5.0, down=0.0, wayup=5.0)


@pytest.fixture
def config(thresholds) -> Config:
    return Config(
        rotation_seconds=10,
        thresholds=thresholds,
        stock=StockConfig(tickers=["AAPL"], cache_max_age=300, weekend_cache_max_age=3600),
        crypto=CryptoConfig(
            trade_pairs=["XXBTZEUR"], trade_signs=["BTC"], chart_interval=60, cache_max_age=120
        ),
        ticker=TickerSettings(window_size=10, separator=" | "),
    )


# ── Fake feeds ──


class FakeFeeds:
    """Test double for tickerbar.feeds.Feeds returning canned results.

    ``canned`` maps symbol -> InstrumentResult; a missing symbol raises
    FeedError just like a failed fetch.
    """

    canned: dict[str, InstrumentResult] = {}

    def __init__(self, config, client=None, cache=None, env=None):
        self.config = config

    def result(self, inst) -> InstrumentResult:
        try:
            return self.canned[inst.symbol]
        except KeyError:
            raise FeedError(f"no canned data for {inst.symbol}")

    def results(self, filterMode=None) -> list[InstrumentResult]:
        from tickerbar.feeds import instruments_for

        return [
            self.canned[inst.symbol]
            for inst in instruments_for(self.config, filterMode)
            if inst.symbol in self.canned
        ]


@pytest.fixture
def fake_feeds(scenario_results):
    FakeFeeds.canned = {"AAPL": scenario_results[0], "XXBTZEUR": scenario_results[1]}
    yield FakeFeeds
    FakeFeeds.canned = {}


# ── Logging ──


@pytest.fixture
def log_capture():
    """Capture loguru output for assertion. Yields a StringIO buffer."""
    buf = StringIO()
    handler_id = logger.add(buf, format="{level} {message}", level="DEBUG")
    yield buf
    logger.remove(handler_id)
