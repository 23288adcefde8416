"""Destinations a dispatch tree can write to.

Every sink implements ``log_with_payload(payload, record)``: it receives the
message as already formatted by the dispatch nodes above it, together with
the original record. The record is there for metadata only; a sink should
write ``payload`` rather than ``record.getMessage()``.

Each sink is responsible for its own thread-safety. The dispatch tree adds
no locking of its own.
"""

import logging
import os
import threading
from pathlib import Path
from typing import IO, Protocol, TextIO, runtime_checkable

from .errors import ConfigurationIoError

DEFAULT_LINE_SEP = "\n"
DEFAULT_ENCODING = "utf-8"


@runtime_checkable
class SinkLog(Protocol):
    """Anything that accepts a formatted message plus its original record."""

    def log_with_payload(self, payload: str, record: logging.LogRecord) -> None: ...


def log_file(path: str | os.PathLike[str], encoding: str = DEFAULT_ENCODING) -> TextIO:
    """Open a log file for writing, creating it if needed and appending to it.

    Args:
        path:       Path of the log file
        encoding:   Character encoding for the file

    Returns:
        Open text file object positioned at the end of the file

    Raises:
        OSError: If the file cannot be opened
    """
    return open(path, "a", encoding=encoding)  # noqa: SIM115


def record_with_payload(record: logging.LogRecord, payload: str) -> logging.LogRecord:
    """Copy a record, replacing its message with an already formatted payload.

    The copy has no ``args``, so ``getMessage()`` returns the payload as is.
    """
    copy = logging.makeLogRecord(record.__dict__)
    copy.msg = payload
    copy.args = None
    copy.message = payload
    return copy


class StreamSink:
    """Writes each payload as one line to a text stream.

    The stream is flushed after every line. Writes through the same sink
    are serialized, so lines from different threads never interleave.

    Attributes:
        stream:     Text stream written to (``sys.stdout``, ``sys.stderr``, ...)
        line_sep:   Separator written after each payload
    """

    def __init__(self, stream: IO[str], line_sep: str = DEFAULT_LINE_SEP) -> None:
        self.stream = stream
        self.line_sep = line_sep
        self._lock = threading.Lock()

    def log_with_payload(self, payload: str, record: logging.LogRecord) -> None:
        with self._lock:
            self.stream.write(payload + self.line_sep)
            self.stream.flush()

    def __repr__(self) -> str:
        name = getattr(self.stream, "name", None) or type(self.stream).__name__
        return f"<{type(self).__name__} {name}>"


class FileSink(StreamSink):
    """Append-mode file destination.

    The file is opened when the sink is created, so a bad path fails while
    the tree is being configured and not at the first log call.

    Attributes:
        path: Path of the log file
    """

    def __init__(
            self,
            path: str | os.PathLike[str],
            line_sep: str = DEFAULT_LINE_SEP,
            encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self.path = Path(path)
        try:
            stream = log_file(self.path, encoding=encoding)
        except OSError as e:
            raise ConfigurationIoError(self.path, e) from e
        super().__init__(stream, line_sep)

    def close(self) -> None:
        with self._lock:
            self.stream.close()

    def __repr__(self) -> str:
        return f"<FileSink {self.path}>"


class HandlerSink:
    """Forwards payloads to a standard library ``logging.Handler``.

    The handler gets a copy of the record whose message is the formatted
    payload, so handlers and formatters written for stdlib logging can sit
    at the leaves of a dispatch tree. The handler's own level still applies.
    """

    def __init__(self, handler: logging.Handler) -> None:
        self.handler = handler

    def log_with_payload(self, payload: str, record: logging.LogRecord) -> None:
        # Loggers check handler levels before calling handle(); do the same
        if record.levelno >= self.handler.level:
            self.handler.handle(record_with_payload(record, payload))

    def __repr__(self) -> str:
        return f"<HandlerSink {self.handler!r}>"


class LoggerSink:
    """Forwards payloads to another stdlib ``logging.Logger``.

    The logger gets a copy of the record whose message is the formatted
    payload and passes it to its own handlers. Records below the logger's
    effective level are dropped, as stdlib would drop them at the call site.

    The logger must not propagate into the root logger the tree is
    installed on, or records would loop back into the tree.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def log_with_payload(self, payload: str, record: logging.LogRecord) -> None:
        if self.logger.isEnabledFor(record.levelno):
            self.logger.handle(record_with_payload(record, payload))

    def __repr__(self) -> str:
        return f"<LoggerSink {self.logger.name}>"


def as_sink(output: object) -> SinkLog:
    """Coerce a leaf output accepted by ``Dispatch.chain`` into a sink.

    Dispatch builders and nodes are handled by the builder itself; this
    function covers the leaf kinds.

    Args:
        output: Path, stdlib handler or logger, sink, or writable text stream

    Returns:
        Sink wrapping the output

    Raises:
        ConfigurationIoError:   If a path cannot be opened
        TypeError:              If the output is not a supported kind
    """
    if isinstance(output, (str, os.PathLike)):
        return FileSink(output)

    if isinstance(output, logging.Handler):
        return HandlerSink(output)

    if isinstance(output, logging.Logger):
        return LoggerSink(output)

    if isinstance(output, SinkLog):
        return output

    if callable(getattr(output, "write", None)):
        return StreamSink(output)

    msg = (
        f"Cannot chain {type(output).__name__!r}: expected a Dispatch, a path, "
        "a text stream, a logging.Handler, a logging.Logger or an object with log_with_payload()"
    )
    raise TypeError(msg)
