"""Artifact sinks.

Any `(filename, payload) -> None` callable is a sink; a plain dict's
`__setitem__` keeps artifacts in memory.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class DirectorySink:
    """Write each artifact to `directory / filename`."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory
        self.written: list[Path] = []
        self._seen: set[Path] = set()

    @property
    def directory(self) -> Path:
        return self._directory

    def __call__(self, filename: str, payload: bytes) -> None:
        dest = self._directory / filename
        if Path(filename).name != filename or filename in {"", ".", ".."}:
            raise ValueError(f"Artifact filename must not contain path components: {filename!r}")
        if dest in self._seen:
            raise FileExistsError(f"Artifact already written in this run: {dest}")

        self._directory.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(payload)
        self.written.append(dest)
        self._seen.add(dest)
        logger.debug("Artifact written", extra={"path": str(dest), "bytes": len(payload)})
