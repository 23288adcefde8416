"""Ready-made formatters for dispatch nodes.

A formatter is any callable ``(payload, record) -> str``. It receives the
message as produced by the nodes above it and returns the message handed to
the node's children. The helpers here build formatters on top of structlog
processor chains and stdlib ``logging.Formatter`` format strings.
"""

import json
import logging
from collections.abc import Callable
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from .sinks import record_with_payload

Formatter = Callable[[str, logging.LogRecord], str]
Filter = Callable[[logging.LogRecord], bool]

# Default processor configurations
DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_TIMESTAMP_UTC = False


def create_shared_processors() -> list[Processor]:
    """Create the list of shared structlog processors.

    These processors enrich the event dict built for each record with the
    logger name, level, ``extra`` fields and a timestamp before rendering.

    Returns:
        List of structlog processors for both console and JSON output
    """
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(
            fmt=DEFAULT_TIMESTAMP_FORMAT,
            utc=DEFAULT_TIMESTAMP_UTC
        ),
    ]


def structlog_formatter(
        renderer: Processor,
        processors: list[Processor] | None = None
) -> Formatter:
    """Create a formatter that renders records through a structlog chain.

    The payload becomes the ``event`` key. The original record is available to
    the processors as ``_record`` (as with ``ProcessorFormatter``) and is
    removed before the renderer runs.

    Args:
        renderer:   Final processor, must return a string
        processors: Processors run before the renderer
                    (default: ``create_shared_processors()``)

    Returns:
        Formatter usable with ``Dispatch.with_formatter``
    """
    chain = [
        *(create_shared_processors() if processors is None else processors),
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        renderer,
    ]

    def format_payload(payload: str, record: logging.LogRecord) -> str:
        event_dict: EventDict = {
            "event": payload,
            "_record": record,
            "_from_structlog": False,
        }
        if record.exc_info:
            event_dict["exc_info"] = record.exc_info

        method_name = record.levelname.lower()
        result: Any = event_dict
        for processor in chain:
            result = processor(None, method_name, result)
        return result

    return format_payload


def console_formatter(colors: bool = False, rich_tracebacks: bool = False) -> Formatter:
    """Create a formatter for human-readable console output.

    Args:
        colors:             Enable colored output (requires 'colorama' on Windows)
        rich_tracebacks:    Render exceptions with rich (requires 'rich' library)

    Returns:
        Formatter rendering with structlog's ConsoleRenderer
    """
    exception_formatter = (
        structlog.dev.rich_traceback if rich_tracebacks else structlog.dev.plain_traceback
    )

    return structlog_formatter(
        structlog.dev.ConsoleRenderer(
            colors=colors,
            exception_formatter=exception_formatter
        )
    )


def json_formatter() -> Formatter:
    """Create a formatter producing one JSON object per record.

    Returns:
        Formatter rendering with structlog's JSONRenderer
    """

    def ordered_json_dumps(data: dict, **kwargs: Any) -> str:
        """Create an ordered JSON dump with event first and timestamp last.

        Args:
            data:       Dictionary to serialize
            **kwargs:   Additional arguments passed to json.dumps

        Returns:
            JSON string with enforced field ordering
        """
        ordered = {"event": data["event"]} if "event" in data else {}

        ordered.update({
            key: value for key, value in data.items()
            if key not in {"event", "timestamp"}
        })

        if "timestamp" in data:
            ordered["timestamp"] = data["timestamp"]

        return json.dumps(ordered, **kwargs)

    return structlog_formatter(
        structlog.processors.JSONRenderer(serializer=ordered_json_dumps),
        processors=[
            *create_shared_processors(),
            structlog.processors.dict_tracebacks,
        ],
    )


def stdlib_formatter(fmt: str, datefmt: str | None = None, style: str = "%") -> Formatter:
    """Create a formatter from a stdlib ``logging.Formatter`` format string.

    ``%(message)s`` (or ``{message}``) is the payload handed down by the
    parent nodes, not the record's original message.

    Args:
        fmt:        Format string, e.g. ``"[%(name)s][%(levelname)s] %(message)s"``
        datefmt:    Optional ``strftime`` format for ``asctime``
        style:      One of ``%``, ``{`` or ``$``

    Returns:
        Formatter applying the format string
    """
    formatter = logging.Formatter(fmt, datefmt=datefmt, style=style)

    def format_payload(payload: str, record: logging.LogRecord) -> str:
        return formatter.format(record_with_payload(record, payload))

    return format_payload
