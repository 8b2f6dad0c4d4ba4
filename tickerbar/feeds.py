"""Market data feeds: Tiingo (stocks) and Kraken (crypto).

Raw response bodies are cached on disk with diskcache; entry expiry is the
configured max age, so an expired entry simply reads back as a miss.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, Literal

import diskcache  # type: ignore
import httpx
import orjson
import whenever
from loguru import logger

from tickerbar.config import Config, CryptoConfig, StockConfig
from tickerbar.engine.classify import classify, percentage_change
from tickerbar.engine.primitives import FeedError, InstrumentResult

TIINGO_URL: Final = "https://api.tiingo.com/iex/{}"
KRAKEN_API: Final = "https://api.kraken.com/0/public"
SECONDS_PER_DAY: Final = 86_400

type FilterMode = Literal["stock", "crypto"] | None


@dataclass(slots=True, frozen=True)
class Instrument:
    kind: Literal["stock", "crypto"]
    symbol: str
    sign: str = ""


def instruments_for(config: Config, filterMode: FilterMode = None) -> list[Instrument]:
    """Configured instruments in display order: stocks first, then crypto pairs."""
    found: list[Instrument] = []

    if filterMode in (None, "stock") and config.stock:
        found += [Instrument("stock", t) for t in config.stock.tickers]

    if filterMode in (None, "crypto") and config.crypto:
        found += [
            Instrument("crypto", pair, config.crypto.sign(idx))
            for idx, pair in enumerate(config.crypto.trade_pairs)
        ]

    return found


def is_weekend(tz: str) -> bool:
    dow = whenever.ZonedDateTime.now(tz).date().day_of_week()
    return dow in {whenever.Weekday.SATURDAY, whenever.Weekday.SUNDAY}


def _json(text: str, what: str):
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError as e:
        raise FeedError(f"Invalid JSON response for {what}: {e}") from e


def _number(val) -> float | None:
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return float(val)

    return None


def _float(val) -> float | None:
    """Kraken sends prices as numeric strings."""
    if not isinstance(val, str):
        return None

    try:
        return float(val)
    except ValueError:
        return None


class Feeds:
    """Fetches and classifies instruments using one shared HTTP client.

    Parameters
    ----------
    config:
        Loaded tickerbar Config (thresholds + stock/crypto sections).
    client:
        httpx.Client reused for every request of this invocation.
    cache:
        diskcache.Cache for raw response bodies, or None to always fetch.
    env:
        Environment mapping used for TIINGO_API_KEY lookup.
    """

    def __init__(
        self,
        config: Config,
        client: httpx.Client,
        cache: diskcache.Cache | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.cache = cache
        self.env = env or {}

    # ------------------------------------------------------------------
    # HTTP + cache
    # ------------------------------------------------------------------

    def fetch(self, key: str, url: str, maxAge: int, what: str, headers=None) -> tuple[str, int]:
        """Return (body, age in seconds), from cache when still fresh."""
        now = time.time()

        if self.cache is not None:
            match self.cache.get(key):
                case (float() | int() as fetchedAt, str() as body):
                    return body, int(max(0, now - fetchedAt))

        response = self.client.get(url, headers=headers)
        if not response.is_success:
            raise FeedError(f"Failed to fetch {what}: HTTP status {response.status_code}")

        body = response.text
        if self.cache is not None:
            self.cache.set(key, (now, body), expire=maxAge)

        return body, 0

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def stock(self, ticker: str) -> InstrumentResult:
        stock: StockConfig | None = self.config.stock
        if stock is None:
            raise FeedError("Stock configuration missing")

        apiKey = self.env.get("TIINGO_API_KEY")
        if apiKey is None:
            raise FeedError(
                "TIINGO_API_KEY environment variable not set. Please set it with your Tiingo API key."
            )

        if not apiKey.strip():
            raise FeedError("TIINGO_API_KEY environment variable is empty")

        maxAge = stock.weekend_cache_max_age if is_weekend(self.config.timezone) else stock.cache_max_age

        body, age = self.fetch(
            f"tiingo:{ticker}",
            TIINGO_URL.format(ticker),
            maxAge,
            f"Tiingo ticker {ticker}",
            headers={"Content-Type": "application/json", "Authorization": f"Token {apiKey}"},
        )

        found = _json(body, f"ticker {ticker}")
        if not isinstance(found, list) or not found or not isinstance(found[0], dict):
            raise FeedError(f"Invalid API response for ticker {ticker}: missing array element")

        entry = found[0]
        if (last := _number(entry.get("tngoLast"))) is None:
            raise FeedError(f"Invalid tngoLast field for ticker {ticker}: {entry}")

        if (prevClose := _number(entry.get("prevClose"))) is None:
            raise FeedError(f"Invalid prevClose field for ticker {ticker}: {entry}")

        pct = percentage_change(last, prevClose)
        if pct is None:
            raise FeedError(
                f"Previous close is zero for ticker {ticker}, cannot calculate percentage change"
            )

        return InstrumentResult(
            text=f"{ticker} ${last:.2f} ({pct:.2f}%)",
            cls=classify(pct, self.config.thresholds),
            tooltip=f"Cache Age: {age} seconds (Max allowed: {maxAge} seconds)",
        )

    def crypto(self, pair: str, sign: str = "") -> InstrumentResult:
        crypto: CryptoConfig | None = self.config.crypto
        if crypto is None:
            raise FeedError("Crypto configuration missing")

        if not crypto.trade_pairs:
            raise FeedError("No crypto trade pairs configured")

        ohlcBody, _ = self.fetch(
            f"kraken:{pair}:ohlc",
            f"{KRAKEN_API}/OHLC?pair={pair}&interval={crypto.chart_interval}",
            crypto.cache_max_age,
            f"Kraken OHLC data for pair {pair}",
            headers={"Accept": "application/json"},
        )
        tickerBody, _ = self.fetch(
            f"kraken:{pair}:ticker",
            f"{KRAKEN_API}/Ticker?pair={pair}",
            crypto.cache_max_age,
            f"Kraken Ticker data for pair {pair}",
            headers={"Accept": "application/json"},
        )

        try:
            current = _float(_json(tickerBody, pair)["result"][pair]["p"][0])
        except (KeyError, IndexError, TypeError):
            current = None

        if current is None:
            raise FeedError(f"Could not retrieve current price for crypto pair {pair}")

        try:
            candles = _json(ohlcBody, pair)["result"][pair]
        except (KeyError, TypeError):
            candles = None

        if not isinstance(candles, list):
            raise FeedError(f"Could not retrieve OHLC candles array for pair {pair}")

        # close of the newest candle at least one day old is our "yesterday" price
        yesterday = int(time.time()) - SECONDS_PER_DAY
        base = None
        for candle in candles:
            match candle:
                case [int() as ts, _, _, _, close, *_] if not isinstance(ts, bool) and ts <= yesterday:
                    if (val := _float(close)) is not None:
                        base = val

        pct = percentage_change(current, current if base is None else base)
        pctStr = "NA" if pct is None else f"{pct:.2f}"
        valueStr = f"{current:.2f}"

        return InstrumentResult(
            text=f"{sign or pair} €{valueStr} ({pctStr}%)",
            cls=classify(pct, self.config.thresholds),
            tooltip=f"€{valueStr} ({pctStr}%)",
        )

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def result(self, inst: Instrument) -> InstrumentResult:
        if inst.kind == "stock":
            return self.stock(inst.symbol)

        return self.crypto(inst.symbol, inst.sign)

    def results(self, filterMode: FilterMode = None) -> list[InstrumentResult]:
        """Every instrument that could be fetched; failures are logged and skipped."""
        found = []
        for inst in instruments_for(self.config, filterMode):
            try:
                found.append(self.result(inst))
            except (FeedError, httpx.HTTPError) as e:
                logger.error("Error fetching {}: {}", inst.symbol, e)

        return found
