"""Command line entrypoint.

Modes:
  tickerbar [config.toml]                one JSON object for the current instrument
  tickerbar [config.toml] --continuous   the same, forever, every rotation_seconds
  tickerbar [config.toml] --ticker       one scrolled window of all instruments

Add --stock or --crypto to restrict the instrument list.
"""

from __future__ import annotations

import argparse
import os
import pathlib
import sys
import time
from collections.abc import Mapping, Sequence
from typing import Final
from xml.parsers.expat import ExpatError

import diskcache  # type: ignore
import httpx
import orjson
import whenever
from loguru import logger
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import HTML

from tickerbar.config import DEFAULT_CONFIG, DEFAULT_DOTENV, Config, load_config, load_env
from tickerbar.engine.fragments import ColorTable
from tickerbar.engine.primitives import ConfigError, EmptyInput, TickerError
from tickerbar.engine.scrollstate import ScrollStateStore
from tickerbar.engine.toolbar import TickerRenderer
from tickerbar.feeds import Feeds, FilterMode, instruments_for

DEFAULT_CACHE_DIR: Final = ".tickerbar-cache"
HTTP_TIMEOUT: Final = 10.0


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tickerbar", description="Stock and crypto readouts for status bars"
    )
    parser.add_argument("config", nargs="?", default=DEFAULT_CONFIG, help="Path to TOML config")
    parser.add_argument(
        "--continuous", action="store_true", help="Keep printing the rotating instrument"
    )
    parser.add_argument("--ticker", action="store_true", help="Print one scrolling ticker window")

    which = parser.add_mutually_exclusive_group()
    which.add_argument(
        "--crypto", dest="filter", action="store_const", const="crypto", help="Only crypto pairs"
    )
    which.add_argument(
        "--stock", dest="filter", action="store_const", const="stock", help="Only stock tickers"
    )

    parser.add_argument(
        "--preview", action="store_true", help="Render the ticker window in color on this terminal"
    )
    parser.add_argument("--state-dir", help="Where scroll position files live (default: .)")
    parser.add_argument("--cache-dir", help=f"Response cache directory (default: {DEFAULT_CACHE_DIR})")
    parser.add_argument("--env-file", default=DEFAULT_DOTENV, help="dotenv file with API keys")

    return parser.parse_args(argv)


def setup_logging(env: Mapping[str, str], timezone: str | None = None) -> None:
    """Console logging to stderr only, since stdout belongs to the status bar.

    TICKERBAR_LOGLEVEL sets the console level (default WARNING).
    TICKERBAR_LOGDIR additionally enables a TRACE file log under LOGDIR/YYYY/MM/,
    dated in ``timezone``. The file sink is only added once the config (and so
    its timezone) is known.
    """
    logger.remove()
    logger.add(sys.stderr, colorize=False, level=env.get("TICKERBAR_LOGLEVEL", "WARNING").upper())

    if timezone and (logdir := env.get("TICKERBAR_LOGDIR")):
        now = whenever.ZonedDateTime.now(timezone)
        LOGDIR = pathlib.Path(logdir) / f"{now.year}" / f"{now.month:02}"
        LOGDIR.mkdir(exist_ok=True, parents=True)
        logger.add(sink=LOGDIR / "tickerbar.log", level="TRACE", colorize=False, rotation="10 MB")


def output_current_instrument(config: Config, feeds: Feeds, filterMode: FilterMode = None) -> None:
    """Print the JSON readout for whichever instrument is due this rotation slot."""
    found = instruments_for(config, filterMode)
    if not found:
        raise EmptyInput("No instruments defined in the configuration")

    idx = (int(time.time()) // config.rotation_seconds) % len(found)
    result = feeds.result(found[idx])

    print(orjson.dumps(result.asdict()).decode(), flush=True)


def preview_line(markup: str) -> None:
    """Render one window in color, or print it raw if it is not valid XML.

    Windows count entities as plain characters, so a cut can leave a
    partial entity like ``&am`` that the HTML parser rejects.
    """
    try:
        formatted = HTML(markup)
    except ExpatError as e:
        logger.warning("Cannot preview window, printing raw markup: {}", e)
        print(markup, flush=True)
        return

    print_formatted_text(formatted)


def run_ticker_mode(
    config: Config,
    feeds: Feeds,
    store: ScrollStateStore,
    filterMode: FilterMode = None,
    preview: bool = False,
) -> None:
    settings = config.ticker
    if settings is None:
        raise ConfigError("Ticker configuration missing. Add [ticker] section to config.toml")

    renderer = TickerRenderer(
        settings.separator, settings.window_size, ColorTable.from_thresholds(config.thresholds)
    )

    # nothing reaches stdout unless rendering fully succeeded
    frame = renderer.render(feeds.results(filterMode), store.read())

    if preview:
        preview_line(frame.output)
    else:
        print(frame.output, flush=True)

    store.save(frame.state)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    env = load_env(args.env_file)
    setup_logging(env)
    logger.debug("Environment file: {}", args.env_file)

    stateDir = pathlib.Path(args.state_dir or env.get("TICKERBAR_STATE_DIR", "."))
    cacheDir = pathlib.Path(args.cache_dir or env.get("TICKERBAR_CACHE_DIR", DEFAULT_CACHE_DIR))

    try:
        config = load_config(args.config)
        setup_logging(env, config.timezone)

        with (
            httpx.Client(timeout=HTTP_TIMEOUT) as client,
            diskcache.Cache(os.fspath(cacheDir)) as cache,
        ):
            feeds = Feeds(config, client, cache, env)

            if args.ticker:
                run_ticker_mode(config, feeds, ScrollStateStore(stateDir), args.filter, args.preview)
            elif args.continuous:
                while True:
                    output_current_instrument(config, feeds, args.filter)
                    time.sleep(config.rotation_seconds)
            else:
                output_current_instrument(config, feeds, args.filter)
    except (TickerError, httpx.HTTPError, OSError) as e:
        logger.error("{}", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Exiting...")

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
