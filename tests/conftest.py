"""Shared fixtures for the dispatch tree tests."""

import logging

import pytest

import logdispatch.install as install_module
from logdispatch import DispatchHandler, DispatchNode, FileSink


class CollectingSink:
    """Custom sink remembering every payload and record it receives.

    When given a shared ``journal`` list, it also appends ``(tag, payload)``
    so the order of delivery across sinks can be checked.
    """

    def __init__(self, tag: str | None = None, journal: list | None = None) -> None:
        self.tag = tag
        self.journal = journal
        self.messages: list[str] = []
        self.records: list[logging.LogRecord] = []

    def log_with_payload(self, payload: str, record: logging.LogRecord) -> None:
        self.messages.append(payload)
        self.records.append(record)
        if self.journal is not None:
            self.journal.append((self.tag, payload))


class BrokenSink:
    """Custom sink failing on every write."""

    def log_with_payload(self, payload: str, record: logging.LogRecord) -> None:
        msg = "disk full"
        raise OSError(msg)


@pytest.fixture
def collecting_sink() -> type[CollectingSink]:
    return CollectingSink


@pytest.fixture
def broken_sink() -> BrokenSink:
    return BrokenSink()


@pytest.fixture
def make_record():
    """Build stdlib log records; extra keyword arguments become record attributes."""

    def factory(
            msg: str = "hello",
            level: int = logging.INFO,
            name: str = "app",
            args: tuple | None = None,
            exc_info=None,
            **extra,
    ) -> logging.LogRecord:
        record = logging.LogRecord(name, level, __file__, 1, msg, args, exc_info)
        record.__dict__.update(extra)
        return record

    return factory


def _file_sinks(node: DispatchNode):
    for child in node.children:
        if isinstance(child, DispatchNode):
            yield from _file_sinks(child)
        elif isinstance(child, FileSink):
            yield child


@pytest.fixture
def fresh_installation(monkeypatch):
    """Give the test an empty installation slot and undo the installation afterwards.

    Yields the cleanup function, so a test can uninstall early. Files opened
    by the installed tree are closed.
    """
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(install_module, "_installation", install_module.InstallationSlot())

    def uninstall() -> None:
        for handler in root.handlers[:]:
            if isinstance(handler, DispatchHandler):
                root.removeHandler(handler)
                for sink in _file_sinks(handler.node):
                    sink.close()
        root.setLevel(level)

    yield uninstall

    uninstall()
