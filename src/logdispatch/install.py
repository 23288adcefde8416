"""Process-wide installation of a dispatch tree.

A process has one installation slot. It starts empty and is filled exactly
once, when a frozen tree is attached to the root logger. Any later attempt
fails with ``AlreadyInstalled`` and leaves the first tree in place.

structlog is bridged onto stdlib logging, so loggers obtained through
``get_logger`` end up in the installed tree as well.
"""

import logging
import threading
from typing import Final

import structlog
from structlog.stdlib import BoundLogger

from .errors import AlreadyInstalled
from .handler import DispatchHandler


class InstallationSlot:
    """Holds the single installed dispatch handler.

    Transitions from uninstalled to installed once; there is no way back.

    Attributes:
        _handler:   Installed handler, None until installation
        _lock:      Threading lock guarding the transition
    """

    def __init__(self) -> None:
        """Initialize an empty slot."""
        self._handler: DispatchHandler | None = None
        self._lock: Final = threading.Lock()

    def is_installed(self) -> bool:
        """Check if a dispatch tree has been installed.

        Returns:
            True if the slot is occupied, False otherwise
        """
        return self._handler is not None

    def get_handler(self) -> DispatchHandler:
        """Get the installed handler.

        Raises:
            RuntimeError: If nothing has been installed yet
        """
        if self._handler is None:
            msg = "No dispatch tree has been installed. Call Dispatch.set_as_global() first."
            raise RuntimeError(msg)
        return self._handler

    def install(self, handler: DispatchHandler, level: int) -> None:
        """Attach a handler to the root logger and occupy the slot.

        Args:
            handler:    Handler wrapping the frozen root node
            level:      Most verbose level the tree accepts, used as the
                        root logger level so rejected records are dropped early

        Raises:
            AlreadyInstalled: If a tree has already been installed
        """
        with self._lock:
            if self.is_installed():
                msg = (
                    "A logger has already been installed. "
                    "set_as_global() should only be called once."
                )
                raise AlreadyInstalled(msg)

            configure_structlog()
            _configure_root_logger(handler, level)
            _configure_existing_loggers()
            self._handler = handler


# Global installation slot
_installation: Final = InstallationSlot()

_structlog_lock: Final = threading.Lock()
_structlog_configured = False


def is_installed() -> bool:
    return _installation.is_installed()


def installed_handler() -> DispatchHandler:
    return _installation.get_handler()


def install(handler: DispatchHandler, level: int) -> None:
    _installation.install(handler, level)


def configure_structlog() -> None:
    """Route structlog loggers into stdlib logging.

    Keyword arguments given to a structlog logger become attributes of the
    stdlib record (``extra``), where filters and formatters can read them.
    Safe to call more than once.
    """
    global _structlog_configured

    with _structlog_lock:
        if _structlog_configured:
            return

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.dev.set_exc_info,
                structlog.stdlib.render_to_log_kwargs,
            ],
            wrapper_class=BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _structlog_configured = True


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a structlog logger that logs through the installed tree.

    Before installation, records reach stdlib's last-resort handler
    (WARNING and above to stderr).

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        BoundLogger instance
    """
    configure_structlog()
    return structlog.get_logger(name)


def _configure_root_logger(handler: DispatchHandler, level: int) -> None:
    """Make the dispatch handler the root logger's only handler.

    Args:
        handler:    Handler to attach
        level:      Level to set on the root logger
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()  # The tree is the only destination
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def _configure_existing_loggers() -> None:
    """Send records from all existing loggers to the root logger.

    Handlers attached to already created loggers are removed and their
    levels reset, so the tree's levels and overrides are the only ones
    that apply.
    """
    for logger_name, logger in logging.Logger.manager.loggerDict.items():
        if not isinstance(logger, logging.Logger) or logger_name == "root":
            continue

        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
