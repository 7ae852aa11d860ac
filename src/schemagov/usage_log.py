"""Append-only usage log, one JSON object per line.

Each operation invocation appends a :class:`UsageLogEntry`.  Storage is an
injected :class:`LogSink` so the log can live in a file
(:class:`FileLogSink`) or in memory (:class:`MemoryLogSink`).

Writing never interferes with the caller: a failed append is reported through
:mod:`logging` and dropped.  Reading is tolerant: blank lines and lines that
are not JSON objects are skipped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE = "usage_log.jsonl"


class LogWriteError(Exception):
    """An entry could not be appended to the log."""


class LogParseError(ValueError):
    """A log line is not a JSON object."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class UsageLogEntry:
    """Record of one operation invocation."""

    tool: str | None
    args: Mapping[str, Any] = field(default_factory=dict)
    summary: str | None = None
    timestamp: str | None = field(default_factory=_now)

    @property
    def is_error(self) -> bool:
        return bool(self.summary) and self.summary.startswith("Error")

    def to_json(self) -> str:
        data = {
            "timestamp": self.timestamp,
            "tool": self.tool,
            "args": dict(self.args),
            "summary": self.summary,
        }
        return json.dumps(data, ensure_ascii=False)

    @classmethod
    def from_line(cls, line: str) -> UsageLogEntry:
        """Parse one log line.

        Raises
        ------
        LogParseError
            If the line is not a JSON object, or ``tool``, ``summary`` or
            ``timestamp`` is present but not a string.
        """
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise LogParseError(f"Invalid log line: {e}") from e
        if not isinstance(data, dict):
            raise LogParseError("Log line is not a JSON object")
        for key in ("tool", "summary", "timestamp"):
            if not isinstance(data.get(key), (str, type(None))):
                raise LogParseError(f"Log field {key!r} is not a string")
        args = data.get("args")
        return cls(
            tool=data.get("tool"),
            args=args if isinstance(args, dict) else {},
            summary=data.get("summary"),
            timestamp=data.get("timestamp"),
        )


class LogSink(Protocol):
    """Append/read capability backing a :class:`UsageLog`."""

    def exists(self) -> bool: ...

    def append(self, line: str) -> None: ...

    def read_lines(self) -> list[str]: ...


class FileLogSink:
    """Line-delimited JSON file, opened in append mode for every write."""

    def __init__(self, path: str | Path = DEFAULT_LOG_FILE) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def append(self, line: str) -> None:
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except OSError as e:
            raise LogWriteError(f"Cannot write {self.path}: {e}") from e

    def read_lines(self) -> list[str]:
        if not self.path.exists():
            return []
        # undecodable bytes only spoil their own line, which then fails to parse
        with self.path.open("r", encoding="utf-8", errors="replace") as fh:
            return fh.read().splitlines()

    def __repr__(self) -> str:
        return f"FileLogSink({str(self.path)!r})"


class MemoryLogSink:
    """In-memory stand-in for :class:`FileLogSink`."""

    def __init__(self, lines: list[str] | None = None) -> None:
        self.lines: list[str] = list(lines) if lines is not None else []
        self._created = lines is not None

    def exists(self) -> bool:
        return self._created or bool(self.lines)

    def append(self, line: str) -> None:
        self._created = True
        self.lines.append(line)

    def read_lines(self) -> list[str]:
        return list(self.lines)


class UsageLog:
    """Records invocations and reads them back."""

    def __init__(self, sink: LogSink | None = None) -> None:
        self.sink: LogSink = sink if sink is not None else FileLogSink()

    def record(self, tool: str, args: Mapping[str, Any], summary: str) -> UsageLogEntry:
        """Append an entry; failures are reported and swallowed."""
        entry = UsageLogEntry(tool=tool, args=dict(args), summary=summary)
        try:
            self.sink.append(entry.to_json())
        except (LogWriteError, TypeError, ValueError) as e:
            # never affects the result already produced for the caller
            logger.warning(f"Failed to log usage: {e}")
        return entry

    def exists(self) -> bool:
        return self.sink.exists()

    def entries(self) -> Iterator[UsageLogEntry]:
        """Yield every readable entry in file order."""
        for line in self.sink.read_lines():
            if not line.strip():
                continue
            try:
                yield UsageLogEntry.from_line(line)
            except LogParseError as e:
                logger.debug(f"Skipping log line: {e}")
