"""Bridge between stdlib logging and a dispatch tree."""

import logging

from .node import DispatchNode


class DispatchHandler(logging.Handler):
    """A ``logging.Handler`` that routes every record through a dispatch tree.

    Unlike stdlib handlers, ``handle`` does not take the handler lock around
    ``emit``: the tree is immutable and each sink serializes its own writes,
    so records from different threads only wait on destinations they share.

    Write failures never reach the code that logged. They are collected
    while the record walks the tree and reported once through
    ``handleError``, which prints them to stderr while
    ``logging.raiseExceptions`` is set. Override ``handleError`` to report
    them elsewhere.

    Attributes:
        node: Root of the dispatch tree
    """

    def __init__(self, node: DispatchNode) -> None:
        super().__init__(logging.NOTSET)
        self.node = node

    def handle(self, record: logging.LogRecord) -> logging.LogRecord | bool:
        rv = self.filter(record)
        if isinstance(rv, logging.LogRecord):
            record = rv
        if rv:
            self.emit(record)
        return rv

    def emit(self, record: logging.LogRecord) -> None:
        try:
            failures = self.node.log(record)
            if failures:
                msg = f"{len(failures)} log destination(s) failed"
                raise ExceptionGroup(msg, failures)
        except RecursionError:
            raise
        except Exception:  # noqa: BLE001
            self.handleError(record)
