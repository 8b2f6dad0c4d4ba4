"""Scroll position persistence between ticker invocations.

The status bar re-runs us once per tick, so the only memory we have is two
small files: the last window offset and a digest of the content it applies
to. When the digest changes the offset is meaningless and we restart at 0.
"""

from __future__ import annotations

import dataclasses
import hashlib
import pathlib
from typing import Final

from loguru import logger

POSITION_FILE: Final = ".ticker_position"
CONTENT_HASH_FILE: Final = ".ticker_content_hash"


def content_fingerprint(text: str) -> str:
    """Hex SHA-256 of the full composite markup string."""
    return hashlib.sha256(text.encode()).hexdigest()


@dataclasses.dataclass(slots=True, frozen=True)
class ScrollState:
    position: int = 0
    fingerprint: str = ""

    def resume(self, fingerprint: str, plainLength: int) -> int:
        """Saved position if still valid for this content, else 0."""
        if self.fingerprint.strip() != fingerprint.strip():
            return 0

        if not 0 <= self.position < plainLength:
            return 0

        return self.position

    def advance(self, plainLength: int) -> ScrollState:
        return dataclasses.replace(self, position=(self.position + 1) % plainLength)


class ScrollStateStore:
    """File-backed ScrollState; a single writer is assumed.

    Read failures degrade to position 0 and write failures are logged, since
    by the time we save the window has already been printed.
    """

    def __init__(self, directory: pathlib.Path | str = ".") -> None:
        self.directory = pathlib.Path(directory)
        self.positionPath = self.directory / POSITION_FILE
        self.hashPath = self.directory / CONTENT_HASH_FILE

    def _read(self, path: pathlib.Path) -> str | None:
        try:
            return path.read_text().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("[PersistFailure] Failed to read {}: {}", path, e)
            return None

    def read(self) -> ScrollState:
        fingerprint = self._read(self.hashPath) or ""
        raw = self._read(self.positionPath)

        position = 0
        if raw:
            try:
                position = max(0, int(raw))
            except ValueError:
                logger.warning("[PersistFailure] Ignoring bad position in {}: {!r}", self.positionPath, raw)

        return ScrollState(position, fingerprint)

    def load(self, fingerprint: str, plainLength: int) -> int:
        return self.read().resume(fingerprint, plainLength)

    def _write(self, path: pathlib.Path, content: str) -> bool:
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(content)
            tmp.replace(path)
        except OSError as e:
            logger.warning("[PersistFailure] Failed to write {}: {}", path, e)
            return False

        return True

    def save(self, state: ScrollState) -> bool:
        """Write both records; each succeeds or fails on its own."""
        wrotePosition = self._write(self.positionPath, str(state.position))
        wroteHash = self._write(self.hashPath, state.fingerprint)
        return wrotePosition and wroteHash
