"""Module entrypoint.

Run:
  python -m tickerbar [config.toml] [--ticker] [--continuous] [--stock | --crypto]
"""

from __future__ import annotations

from .cli import run


if __name__ == "__main__":
    run()
