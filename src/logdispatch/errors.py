"""Errors raised while building, installing and running a dispatch tree."""

from typing import Any


class InitError(Exception):
    """Base class for failures while setting up logging.

    Code that builds a tree and installs it usually has to handle both a
    log file that could not be opened and a logger that was already
    installed; catching this class covers both.
    """


class ConfigurationIoError(InitError, OSError):
    """A file sink could not be opened while the tree was being built."""

    def __init__(self, path: Any, cause: OSError) -> None:
        super().__init__(f"IO error initializing logger: cannot open {path!s}: {cause}")
        self.path = path
        self.cause = cause


class AlreadyInstalled(InitError, RuntimeError):
    """The process-wide logger slot was already occupied."""


class DestinationWriteError(Exception):
    """A single sink failed while a record was being dispatched.

    These are collected during dispatch instead of being raised, so one
    broken destination never keeps the record from its siblings.

    Attributes:
        sink:   The sink whose write failed
        cause:  The exception raised by the sink
    """

    def __init__(self, sink: Any, cause: BaseException) -> None:
        super().__init__(f"failed writing log record to {sink!r}: {cause}")
        self.sink = sink
        self.cause = cause
        self.__cause__ = cause
