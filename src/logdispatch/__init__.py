"""Configurable log routing built on standard library logging.

This package lets a program assemble, at startup, a tree of log destinations,
each with its own minimum level, per-logger overrides, filters and formatter,
and install that tree as the process logger. Every record logged afterwards
is filtered, reformatted and fanned out along the tree.

Key Features:
    - Fluent builder that freezes into an immutable, thread-shared tree
    - Default minimum level plus exact-match per-logger overrides
    - Predicate filters evaluated in order with short-circuiting
    - Cumulative formatting: each nested node wraps its parent's output
    - Stdout, stderr, append-mode files, stdlib handlers and custom sinks
    - One-time global installation with a distinct AlreadyInstalled error
    - Write failures reported through ``Handler.handleError``, never raised
      into the code that logged
    - structlog renderers for console and JSON output
    - TOML-based configuration with sensible defaults

Basic Usage:
    ```python
    import logging
    import sys

    from logdispatch import Dispatch, stdlib_formatter

    (
        Dispatch()
        .with_formatter(stdlib_formatter("[%(asctime)s][%(name)s][%(levelname)s] %(message)s"))
        .with_level("DEBUG")
        .with_level_for("urllib3.connectionpool", "WARNING")
        .chain(sys.stdout)
        .chain("output.log")
        .set_as_global()
    )

    logging.getLogger(__name__).info("Something happened")
    ```

Nested Dispatch:
    ```python
    (
        Dispatch()
        .with_formatter(lambda message, record: f"[{record.levelname}] {message}")
        .chain(Dispatch().with_level("DEBUG").chain(sys.stdout))
        .chain(Dispatch().with_level("WARNING").chain("warnings.log"))
        .set_as_global()
    )
    ```

    A child only sees records its parent accepted, and receives the message
    already formatted by the parent.

Custom Sinks:
    Any object with ``log_with_payload(message, record)`` can be chained.
    ``message`` is the formatted text; ``record`` is the original
    ``logging.LogRecord`` for metadata.

Configuration:
    ```python
    from logdispatch import configure_logging

    configure_logging("config/logging.toml").set_as_global()
    ```

    See ``logdispatch.config`` for the file layout.

Implementation Notes:
    - Overrides match logger names exactly; "app" does not cover "app.db"
    - Log files are opened when chained, so bad paths fail at configuration
    - The installed tree replaces the root logger's handlers and sets its
      level to the most verbose level the tree can accept
    - There is no buffering, rotation or asynchronous delivery
"""

from .config import DispatchConfig, OutputConfig, configure_logging
from .dispatch import Dispatch
from .errors import AlreadyInstalled, ConfigurationIoError, DestinationWriteError, InitError
from .formatters import (
    Filter,
    Formatter,
    console_formatter,
    json_formatter,
    stdlib_formatter,
    structlog_formatter,
)
from .handler import DispatchHandler
from .install import get_logger, installed_handler, is_installed
from .log_levels import OFF, LogLevel
from .node import DispatchNode
from .sinks import FileSink, HandlerSink, LoggerSink, SinkLog, StreamSink, log_file

__all__ = [
    "OFF",
    "AlreadyInstalled",
    "ConfigurationIoError",
    "DestinationWriteError",
    "Dispatch",
    "DispatchConfig",
    "DispatchHandler",
    "DispatchNode",
    "FileSink",
    "Filter",
    "Formatter",
    "HandlerSink",
    "InitError",
    "LoggerSink",
    "LogLevel",
    "OutputConfig",
    "SinkLog",
    "StreamSink",
    "configure_logging",
    "console_formatter",
    "get_logger",
    "installed_handler",
    "is_installed",
    "json_formatter",
    "log_file",
    "stdlib_formatter",
    "structlog_formatter",
]
