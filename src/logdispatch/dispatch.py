"""Builder for dispatch trees.

``Dispatch`` accumulates a level floor, per-target overrides, filters, a
formatter and children, then freezes into an immutable ``DispatchNode``.
The only side effect before freezing is opening log files, which happens
as soon as a path is chained so that a bad path fails during configuration.
"""

from dataclasses import dataclass, field

from .formatters import Filter, Formatter
from .handler import DispatchHandler
from .install import install
from .log_levels import LogLevel, to_level_number
from .node import DispatchNode
from .overrides import LevelOverrides
from .sinks import SinkLog, as_sink


@dataclass
class Dispatch:
    """Fluent builder for a dispatch tree.

    Every ``with_*`` method and ``chain`` return the builder itself, so a
    whole tree can be written as one expression::

        (
            Dispatch()
            .with_formatter(stdlib_formatter("[%(name)s][%(levelname)s] %(message)s"))
            .with_level("DEBUG")
            .with_level_for("urllib3.connectionpool", "WARNING")
            .chain(sys.stdout)
            .chain("output.log")
            .set_as_global()
        )

    The builder is meant to be used by one thread; it is only shared once
    frozen by ``into_node``, ``into_handler`` or ``set_as_global``.

    Attributes:
        _children:      Sinks and nested nodes in chain order
        _level:         Default minimum level, None means no floor
        _overrides:     Exact-match per-target levels
        _filters:       Predicates a record must satisfy
        _formatter:     Optional message rewrite
    """

    _children: list[SinkLog | DispatchNode] = field(default_factory=list)
    _level: int | None = None
    _overrides: LevelOverrides = field(default_factory=LevelOverrides)
    _filters: list[Filter] = field(default_factory=list)
    _formatter: Formatter | None = None

    def with_formatter(self, formatter: Formatter) -> "Dispatch":
        """Set the formatter applied to every record this node accepts.

        The formatter receives the message as formatted by the parent nodes
        and the original record. Setting it again replaces the previous one.

        Args:
            formatter: Callable ``(message, record) -> str``

        Returns:
            Self for method chaining
        """
        self._formatter = formatter
        return self

    def with_level(self, level: LogLevel | int) -> "Dispatch":
        """Set the default minimum level.

        Records less severe than this level are rejected unless an override
        for their logger says otherwise. Setting it again replaces the
        previous level.

        Args:
            level: Level name or number; "OFF" rejects everything

        Returns:
            Self for method chaining
        """
        self._level = to_level_number(level)
        return self

    def with_level_for(self, target: str, level: LogLevel | int) -> "Dispatch":
        """Set the minimum level for one logger.

        The override only applies to records whose logger name equals
        ``target`` exactly; child loggers are not included. It takes
        precedence over ``with_level`` in both directions.

        Args:
            target: Logger name, e.g. "sqlalchemy.engine"
            level:  Level name or number

        Returns:
            Self for method chaining
        """
        self._overrides = self._overrides.with_override(target, level)
        return self

    def with_filter(self, predicate: Filter) -> "Dispatch":
        """Add a filter.

        Filters run in the order they were added, after the level check,
        and stop at the first one returning False.

        Args:
            predicate: Callable ``(record) -> bool``; True lets the record through

        Returns:
            Self for method chaining
        """
        self._filters.append(predicate)
        return self

    def chain(self, output: object) -> "Dispatch":
        """Add a child that receives every record this node accepts.

        Accepted outputs:
            - another ``Dispatch`` (frozen now) or a ``DispatchNode``
            - a path (``str`` or ``os.PathLike``), opened for appending now
            - a text stream such as ``sys.stdout`` or an open file
            - a stdlib ``logging.Handler`` or ``logging.Logger``
            - any object with ``log_with_payload(message, record)``

        Args:
            output: Destination or nested dispatch

        Returns:
            Self for method chaining

        Raises:
            ConfigurationIoError:   If a path cannot be opened
            TypeError:              If the output is not supported
        """
        if isinstance(output, Dispatch):
            self._children.append(output.into_node())
        elif isinstance(output, DispatchNode):
            self._children.append(output)
        else:
            self._children.append(as_sink(output))
        return self

    def into_node(self) -> DispatchNode:
        """Freeze the configuration into an immutable node.

        Returns:
            DispatchNode ready to route records
        """
        return DispatchNode(
            children=tuple(self._children),
            level=self._level,
            level_overrides=self._overrides,
            filters=tuple(self._filters),
            formatter=self._formatter,
        )

    def into_handler(self) -> tuple[int, DispatchHandler]:
        """Freeze the configuration into a stdlib handler.

        Use this to attach the tree to a logger of your choice instead of
        installing it globally.

        Returns:
            The most verbose level the tree accepts and the handler
        """
        node = self.into_node()
        return node.max_level(), DispatchHandler(node)

    def set_as_global(self) -> DispatchHandler:
        """Freeze the configuration and install it as the process logger.

        This can only succeed once per process. Every record logged through
        stdlib logging (or structlog's ``get_logger``) is routed through the
        installed tree afterwards.

        Returns:
            The installed handler

        Raises:
            AlreadyInstalled: If a tree has already been installed
        """
        level, handler = self.into_handler()
        install(handler, level)
        return handler
