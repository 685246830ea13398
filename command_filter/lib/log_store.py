"""
Persistent log records for intercepted commands.

Layout under the root directory (default ~/.command-filter):

    output_20261019_141503.log     one file per intercepted command
    output_20261019_141503_1.log   second command within the same second
    latest.log                     symlink to the newest record

Record format:

    ━━━━━━━━ (separator)
    Command Filter Log - <time>
    Directory: <cwd>
    Command: <command>
    ━━━━━━━━
    <blank line>
    <captured output, verbatim>
    <blank line>
    ━━━━━━━━
    Exit code: <n>
    ━━━━━━━━

The header is written and latest.log repointed before the command starts;
the output is appended as it is produced and the footer once the command
exits, after which a record is never modified. A record without a footer
belongs to a command that was interrupted. Files are created exclusively,
so concurrent invocations never share a file; only latest.log is contended
and the last writer wins.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from command_filter.lib.executor import CommandRequest, ExecutionResult
from command_filter.lib.paths import get_latest_path, get_root_dir

logger = logging.getLogger(__name__)

SEPARATOR = "━" * 60
RECORD_PREFIX = "output_"
RECORD_SUFFIX = ".log"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
HEADER_TIME_FORMAT = "%a %b %d %H:%M:%S %Z %Y"
MAX_SAME_SECOND_RECORDS = 1000

_SEP = SEPARATOR.encode()
_HEADER_END = b"\n" + _SEP + b"\n\n"
_FOOTER_START = b"\n" + _SEP + b"\nExit code: "
_EXIT_CODE_RE = re.compile(r"Exit code: (-?\d+)")


class LogStoreError(Exception):
    """The log directory or a record could not be written or read."""


@dataclass(frozen=True)
class LogRecord:
    """One persisted command capture."""

    path: Path
    timestamp: str
    command: str
    cwd: str
    header: str
    body: bytes
    footer: str
    exit_code: int

    @property
    def text(self) -> str:
        """Captured output decoded as UTF-8 (undecodable bytes replaced)."""
        return self.body.decode("utf-8", errors="replace")


@dataclass
class PendingRecord:
    """A record whose header is on disk and whose output is still arriving."""

    path: Path
    file: BinaryIO
    latest_updated: bool


def render_header(request: CommandRequest, started_at: datetime) -> str:
    return (
        f"{SEPARATOR}\n"
        f"Command Filter Log - {started_at.strftime(HEADER_TIME_FORMAT)}\n"
        f"Directory: {request.cwd or ''}\n"
        f"Command: {request.command}\n"
        f"{SEPARATOR}\n"
        "\n"
    )


def render_footer(exit_code: int) -> str:
    return f"\n{SEPARATOR}\nExit code: {exit_code}\n{SEPARATOR}\n"


def encode_text(text: str) -> bytes:
    """Encode header text, restoring bytes a shell would see for surrogate escapes."""
    try:
        return text.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError:
        return text.encode("utf-8", errors="replace")


def _timestamp_from_name(path: Path) -> str:
    stem = path.stem.removeprefix(RECORD_PREFIX)
    # Strip the collision counter, if any: 20261019_141503_1 -> 20261019_141503
    parts = stem.split("_")
    return "_".join(parts[:2]) if len(parts) > 2 else stem


class LogStore:
    """Creates, reads and indexes log records under a root directory."""

    def __init__(self, root: Path | None = None):
        self.root = root or get_root_dir()

    @property
    def latest_path(self) -> Path:
        return get_latest_path(self.root)

    def ensure_writable(self) -> None:
        """
        Create the root directory if needed and check that files can be written.

        Called before a command runs, so a broken log directory can still
        fall back to letting the host run the command itself.

        Raises:
            LogStoreError: If the directory can't be created or written to
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryFile(dir=self.root, prefix=".probe-"):
                pass
        except OSError as e:
            raise LogStoreError(f"Log directory {self.root} is not writable: {e}") from e

    def _open_new_record(self, started_at: datetime) -> tuple[Path, int]:
        """Exclusively create the next free output_<timestamp>[_n].log file."""
        timestamp = started_at.strftime(TIMESTAMP_FORMAT)
        for n in range(MAX_SAME_SECOND_RECORDS):
            name = f"{RECORD_PREFIX}{timestamp}{'' if n == 0 else f'_{n}'}{RECORD_SUFFIX}"
            path = self.root / name
            try:
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | os.O_APPEND, 0o644)
            except FileExistsError:
                continue
            return path, fd
        raise LogStoreError(
            f"More than {MAX_SAME_SECOND_RECORDS} records for {timestamp} in {self.root}"
        )

    def open_record(self, request: CommandRequest, started_at: datetime) -> PendingRecord:
        """
        Create a new record, write its header and point latest.log at it.

        The returned file is opened for appending, so a child process can
        write the command output straight into it. Finish the record with
        finish_record() once the command has exited; a record that is never
        finished (the hook was killed) keeps its header and partial output.

        Args:
            request: The intercepted command and its working directory
            started_at: Time used for the file name and the header

        Returns:
            PendingRecord holding the open file

        Raises:
            LogStoreError: If the record can't be created
        """
        header = encode_text(render_header(request, started_at))

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path, fd = self._open_new_record(started_at)
        except OSError as e:
            raise LogStoreError(f"Failed to create log record in {self.root}: {e}") from e

        f = os.fdopen(fd, "wb")
        try:
            f.write(header)
            f.flush()
        except OSError as e:
            f.close()
            path.unlink(missing_ok=True)
            raise LogStoreError(f"Failed to write log record {path}: {e}") from e

        try:
            self.point_to_latest(path)
            latest_updated = True
        except LogStoreError as e:
            logger.warning(f"{e}; record is still available at {path}")
            latest_updated = False

        return PendingRecord(path=path, file=f, latest_updated=latest_updated)

    def finish_record(self, pending: PendingRecord, exit_code: int) -> Path:
        """
        Append the footer to a pending record and close it.

        Raises:
            LogStoreError: If the footer can't be written
        """
        try:
            with pending.file as f:
                f.write(render_footer(exit_code).encode())
        except OSError as e:
            raise LogStoreError(f"Failed to finish log record {pending.path}: {e}") from e

        logger.info(f"Finished log record {pending.path} (exit code {exit_code})")
        return pending.path

    def create_record(self, request: CommandRequest, result: ExecutionResult) -> LogRecord:
        """
        Write a complete record for output that was captured in memory.

        Args:
            request: The intercepted command and its working directory
            result: Captured output and exit code

        Returns:
            The written LogRecord

        Raises:
            LogStoreError: If the record can't be written
        """
        pending = self.open_record(request, result.started_at)
        try:
            pending.file.write(result.output)
        except OSError as e:
            pending.file.close()
            pending.path.unlink(missing_ok=True)
            raise LogStoreError(f"Failed to write log record {pending.path}: {e}") from e
        path = self.finish_record(pending, result.exit_code)

        return LogRecord(
            path=path,
            timestamp=_timestamp_from_name(path),
            command=request.command,
            cwd=request.cwd or "",
            header=render_header(request, result.started_at),
            body=result.output,
            footer=render_footer(result.exit_code),
            exit_code=result.exit_code,
        )

    def point_to_latest(self, path: Path) -> None:
        """
        Atomically replace latest.log with a pointer to path.

        A symlink is created under a temporary name and renamed over
        latest.log, so readers never see a missing pointer. A stale or
        dangling pointer is simply replaced. Where symlinks aren't supported
        a copy of the record is used instead.

        Raises:
            LogStoreError: If the pointer can't be replaced
        """
        target = path.absolute()
        tmp = self.root / f".latest-{os.getpid()}.tmp"
        try:
            tmp.unlink(missing_ok=True)
            try:
                os.symlink(target, tmp)
            except (OSError, NotImplementedError):
                shutil.copyfile(target, tmp)
            os.replace(tmp, self.latest_path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise LogStoreError(f"Failed to update {self.latest_path}: {e}") from e

    def latest(self) -> Path | None:
        """Resolve latest.log to the newest record, or None if there isn't one."""
        pointer = self.latest_path
        if pointer.is_symlink():
            target = pointer.resolve()
            return target if target.is_file() else None
        if pointer.is_file():
            return pointer
        return None

    def records(self) -> list[Path]:
        """All record files, oldest first."""
        if not self.root.is_dir():
            return []
        return sorted(self.root.glob(f"{RECORD_PREFIX}*{RECORD_SUFFIX}"))

    def load(self, path: Path) -> LogRecord:
        """
        Parse a record file back into its parts.

        Args:
            path: Record file (or latest.log)

        Returns:
            LogRecord with the verbatim body and the footer exit code

        Raises:
            LogStoreError: If the file can't be read or isn't a record
        """
        try:
            data = path.read_bytes()
        except OSError as e:
            raise LogStoreError(f"Failed to read log record {path}: {e}") from e

        if not data.startswith(_SEP + b"\n"):
            raise LogStoreError(f"Not a command-filter log: {path}")

        header_end = data.find(_HEADER_END, len(_SEP))
        footer_start = data.rfind(_FOOTER_START)
        if header_end < 0 or footer_start < header_end:
            raise LogStoreError(f"Truncated log record: {path}")
        header_end += len(_HEADER_END)

        header = data[:header_end].decode("utf-8", errors="replace")
        footer = data[footer_start:].decode("utf-8", errors="replace")
        match = _EXIT_CODE_RE.search(footer)
        if match is None:
            raise LogStoreError(f"Missing exit code in log record: {path}")

        directory = re.search(r"^Directory: (.*)$", header, re.MULTILINE)
        command_start = header.find("\nCommand: ")
        command = header[command_start + len("\nCommand: ") : -len(_HEADER_END.decode())]

        resolved = path.resolve()
        return LogRecord(
            path=resolved,
            timestamp=_timestamp_from_name(resolved),
            command=command,
            cwd=directory.group(1) if directory else "",
            header=header,
            body=data[header_end:footer_start],
            footer=footer,
            exit_code=int(match.group(1)),
        )
