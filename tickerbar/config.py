"""TOML config loading into frozen dataclasses.

Layout (every section but ``thresholds`` is optional):

    rotation_seconds = 10
    [thresholds]  critdown / down / wayup (+ optional *_color overrides)
    [stock]       tickers, cache_max_age, weekend_cache_max_age
    [crypto]      trade_pairs, trade_signs, chart_interval, cache_max_age
    [ticker]      window_size, separator, refresh_seconds
"""

from __future__ import annotations

import os
import pathlib
import tomllib
from dataclasses import dataclass, field
from typing import Any, Final

from dotenv import dotenv_values

from tickerbar.engine.primitives import ConfigError

DEFAULT_CONFIG: Final = "config.toml"
DEFAULT_DOTENV: Final = ".env.local"
DEFAULT_TIMEZONE: Final = "US/Eastern"


@dataclass(slots=True, frozen=True)
class Thresholds:
    critdown: float
    down: float
    wayup: float
    up_color: str | None = None
    wayup_color: str | None = None
    down_color: str | None = None
    waydown_color: str | None = None


@dataclass(slots=True, frozen=True)
class StockConfig:
    tickers: list[str]
    cache_max_age: int
    weekend_cache_max_age: int


@dataclass(slots=True, frozen=True)
class CryptoConfig:
    trade_pairs: list[str]
    chart_interval: int
    cache_max_age: int
    trade_signs: list[str] = field(default_factory=list)

    def sign(self, idx: int) -> str:
        """Display sign for the idx-th pair, or "" if none configured."""
        return self.trade_signs[idx] if idx < len(self.trade_signs) else ""


@dataclass(slots=True, frozen=True)
class TickerSettings:
    window_size: int
    separator: str
    refresh_seconds: int = 1


@dataclass(slots=True, frozen=True)
class Config:
    rotation_seconds: int
    thresholds: Thresholds
    stock: StockConfig | None = None
    crypto: CryptoConfig | None = None
    ticker: TickerSettings | None = None
    timezone: str = DEFAULT_TIMEZONE


# ── Parsing ──────────────────────────────────────────────────────────────────

# (type accepted, type produced) for each scalar kind we read
_NUMBER = ((int, float), float)
_INTEGER = ((int,), int)
_STRING = ((str,), str)


def _get(section: dict[str, Any], name: str, key: str, kind, required: bool = True):
    where = f"{name}.{key}" if name else key

    if key not in section:
        if required:
            raise ConfigError(f"Missing required config key: {where}")

        return None

    val = section[key]
    accepted, produce = kind

    # bool is an int subclass, but `window_size = true` is always a mistake
    if isinstance(val, bool) or not isinstance(val, accepted):
        raise ConfigError(f"Config key {where} must be {produce.__name__}, got {val!r}")

    return produce(val)


def _get_list(section: dict[str, Any], name: str, key: str, required: bool = True) -> list[str]:
    val = section.get(key, None if required else [])
    if val is None:
        raise ConfigError(f"Missing required config key: {name}.{key}")

    if not isinstance(val, list) or not all(isinstance(v, str) for v in val):
        raise ConfigError(f"Config key {name}.{key} must be a list of strings, got {val!r}")

    return list(val)


def _table(raw: dict[str, Any], name: str) -> dict[str, Any] | None:
    val = raw.get(name)
    if val is None:
        return None

    if not isinstance(val, dict):
        raise ConfigError(f"Config section [{name}] must be a table")

    return val


def parse_config(raw: dict[str, Any]) -> Config:
    """Validate an already-decoded TOML document."""
    thr = _table(raw, "thresholds")
    if thr is None:
        raise ConfigError("Missing required config section: [thresholds]")

    thresholds = Thresholds(
        critdown=_get(thr, "thresholds", "critdown", _NUMBER),
        down=_get(thr, "thresholds", "down", _NUMBER),
        wayup=_get(thr, "thresholds", "wayup", _NUMBER),
        **{
            k: _get(thr, "thresholds", k, _STRING, required=False)
            for k in ("up_color", "wayup_color", "down_color", "waydown_color")
        },
    )

    stock = None
    if (s := _table(raw, "stock")) is not None:
        stock = StockConfig(
            tickers=_get_list(s, "stock", "tickers"),
            cache_max_age=_get(s, "stock", "cache_max_age", _INTEGER),
            weekend_cache_max_age=_get(s, "stock", "weekend_cache_max_age", _INTEGER),
        )

    crypto = None
    if (c := _table(raw, "crypto")) is not None:
        crypto = CryptoConfig(
            trade_pairs=_get_list(c, "crypto", "trade_pairs"),
            trade_signs=_get_list(c, "crypto", "trade_signs", required=False),
            chart_interval=_get(c, "crypto", "chart_interval", _INTEGER),
            cache_max_age=_get(c, "crypto", "cache_max_age", _INTEGER),
        )

    ticker = None
    if (t := _table(raw, "ticker")) is not None:
        ticker = TickerSettings(
            window_size=_get(t, "ticker", "window_size", _INTEGER),
            separator=_get(t, "ticker", "separator", _STRING),
            refresh_seconds=_get(t, "ticker", "refresh_seconds", _INTEGER, required=False) or 1,
        )

        if ticker.window_size < 0:
            raise ConfigError(f"Config key ticker.window_size must be >= 0, got {ticker.window_size}")

    rotation = _get(raw, "", "rotation_seconds", _INTEGER)
    if rotation <= 0:
        raise ConfigError(f"Config key rotation_seconds must be > 0, got {rotation}")

    return Config(
        rotation_seconds=rotation,
        thresholds=thresholds,
        stock=stock,
        crypto=crypto,
        ticker=ticker,
        timezone=_get(raw, "", "timezone", _STRING, required=False) or DEFAULT_TIMEZONE,
    )


def load_config(path: pathlib.Path | str = DEFAULT_CONFIG) -> Config:
    path = pathlib.Path(path)

    try:
        raw = tomllib.loads(path.read_text())
    except OSError as e:
        raise ConfigError(f"Could not read config file '{path}': {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Could not parse config file '{path}': {e}") from e

    try:
        return parse_config(raw)
    except ConfigError as e:
        raise ConfigError(f"Invalid config file '{path}': {e}") from e


def load_env(path: pathlib.Path | str = DEFAULT_DOTENV) -> dict[str, str]:
    """Process environment layered over an optional dotenv file.

    Real environment variables win so a shell export can override the file.
    """
    found = {k: v for k, v in dotenv_values(path).items() if v is not None}
    return {**found, **os.environ}
