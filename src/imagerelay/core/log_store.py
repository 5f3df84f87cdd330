"""File-backed audit log for generation requests.

This module isolates the audit log persistence from ``imagerelay.api.main`` so
route handlers can focus on HTTP concerns while the file-backed store remains
testable as a small unit.

The log is intentionally simple:

- every entry lives in a single JSON array file
- order is chronological (oldest first, append order)
- entries are never edited or removed

Appends are best-effort.  The log is auxiliary telemetry, so a corrupt file is
treated as empty and a failed write is logged and dropped rather than failing
the generation request that triggered it.  Reads for the admin endpoint, on
the other hand, report failures to the caller.

Each append rewrites the whole file.  The read-modify-write cycle runs under a
lock and the new document is written to a temporary sibling that is renamed
over the log, so concurrent appends cannot drop each other's entries and a
reader never sees a half-written array.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from imagerelay.core.errors import LogStoreError

logger = logging.getLogger(__name__)

# Owner read/write only.  Ignored on platforms without POSIX permissions.
LOG_FILE_MODE = 0o600


class LogStore:
    """Append-only JSON array of generation log entries.

    Attributes:
        path: Location of the JSON array file.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    # -- Public interface ---------------------------------------------------

    def append(self, entry: dict[str, Any]) -> bool:
        """Append one entry to the log.

        A missing, empty, or unreadable file is treated as an empty log, so a
        corrupt file is replaced by a log holding only the new entry.  Write
        failures are logged and swallowed.

        Args:
            entry: JSON-serialisable log entry.

        Returns:
            ``True`` if the entry was persisted, ``False`` if the write failed.
        """
        with self._lock:
            try:
                entries = self._read()
            except LogStoreError as exc:
                logger.warning(f"Discarding unreadable audit log {self.path}: {exc}")
                entries = []

            entries.append(entry)

            try:
                self._write(entries)
            except (OSError, TypeError, ValueError) as exc:
                logger.error(f"Failed to write audit log {self.path}: {exc}")
                return False

        logger.debug(f"Appended audit entry #{len(entries)} to {self.path}")
        return True

    def read_all(self) -> list[dict[str, Any]]:
        """Return every stored entry in append order.

        Returns:
            The stored entries, or an empty list if the file is absent or
            empty.

        Raises:
            LogStoreError: If the file cannot be read or decoded, or does not
                hold a JSON array of objects.
        """
        with self._lock:
            return self._read()

    # -- Internal helpers ---------------------------------------------------

    def _read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise LogStoreError(f"Could not read audit log: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise LogStoreError(f"Audit log is not valid UTF-8: {exc}") from exc

        if not raw.strip():
            return []

        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise LogStoreError(f"Audit log is not valid JSON: {exc}") from exc

        if not isinstance(entries, list):
            raise LogStoreError("Audit log does not contain a JSON array")

        if not all(isinstance(entry, dict) for entry in entries):
            raise LogStoreError("Audit log contains entries that are not JSON objects")

        return entries

    def _write(self, entries: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # mkstemp creates the file with mode 0o600 already.
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(entries, handle, indent=2)
            try:
                os.chmod(tmp_name, LOG_FILE_MODE)
            except OSError:
                logger.debug(f"Could not restrict permissions on {tmp_name}")
            os.replace(tmp_name, self.path)
        except BaseException:
            # Leave the previous log intact and drop the partial temp file.
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
