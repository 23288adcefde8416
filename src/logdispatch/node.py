"""Runtime routing engine.

A ``DispatchNode`` is one frozen level of routing policy: a level floor,
exact-match per-target overrides, predicate filters, an optional formatter,
and an ordered list of children. Every record logged through the installed
tree walks it top-down:

1. The node picks the effective floor for the record's target and rejects
   the record if it is less severe.
2. Filters run in order; the first one returning False rejects the record.
3. The formatter, if any, rewrites the message once for this node.
4. The (possibly rewritten) message goes to each child in chain order.
   Nested nodes repeat the walk with the rewritten message, so formatting
   is cumulative: a child's formatter wraps its parent's output.

Nodes are immutable and shared by every logging thread.
"""

import logging
from dataclasses import dataclass, field

from .errors import DestinationWriteError
from .formatters import Filter, Formatter
from .log_levels import OFF
from .overrides import LevelOverrides
from .sinks import SinkLog


@dataclass(frozen=True, slots=True)
class DispatchNode:
    """Frozen routing policy and its children.

    Attributes:
        children:           Sinks and nested nodes, in chain order
        level:              Default minimum level, None accepts every level
        level_overrides:    Exact-match minimum levels keyed by logger name
        filters:            Predicates that must all accept a record
        formatter:          Optional message rewrite applied before fan-out
    """

    children: tuple["SinkLog | DispatchNode", ...] = ()
    level: int | None = None
    level_overrides: LevelOverrides = field(default_factory=LevelOverrides)
    filters: tuple[Filter, ...] = ()
    formatter: Formatter | None = None

    def effective_level(self, target: str) -> int | None:
        """Get the minimum level that applies to records from a target.

        Args:
            target: Logger name of the record

        Returns:
            Override for the target if any, else the default level,
            else None (no floor)
        """
        override = self.level_overrides.level_for(target)
        if override is not None:
            return override
        return self.level

    def enabled(self, record: logging.LogRecord) -> bool:
        """Check whether this node accepts a record.

        Filters are only consulted once the level check passed, and stop
        at the first one that rejects the record.
        """
        floor = self.effective_level(record.name)
        if floor is not None and record.levelno < floor:
            return False
        return all(accept(record) for accept in self.filters)

    def log(self, record: logging.LogRecord) -> list[DestinationWriteError]:
        """Dispatch a record coming straight from the logging facade.

        The record's message is only rendered once the record passed this
        node's level and filters.

        Args:
            record: Record to dispatch

        Returns:
            Write failures collected across the whole tree
        """
        if not self.enabled(record):
            return []
        return self._deliver(record.getMessage(), record)

    def log_with_payload(self, payload: str, record: logging.LogRecord) -> list[DestinationWriteError]:
        """Dispatch a record whose message was already produced by a parent.

        Args:
            payload:    Message as formatted by the parent nodes
            record:     Original record, used for levels, filters and metadata

        Returns:
            Write failures collected in this subtree
        """
        if not self.enabled(record):
            return []
        return self._deliver(payload, record)

    def _deliver(self, payload: str, record: logging.LogRecord) -> list[DestinationWriteError]:
        if self.formatter is not None:
            payload = self.formatter(payload, record)

        failures: list[DestinationWriteError] = []
        for child in self.children:
            try:
                if isinstance(child, DispatchNode):
                    failures.extend(child.log_with_payload(payload, record))
                else:
                    child.log_with_payload(payload, record)
            except Exception as e:  # noqa: BLE001
                # Filter and formatter errors in nested nodes are collected as well
                failures.append(DestinationWriteError(child, e))

        return failures

    def max_level(self) -> int:
        """Get the most verbose level any record could be accepted at.

        A node without children delivers nothing and reports ``OFF``.
        Leaf sinks accept every level, so they never tighten the bound.

        Returns:
            Numeric level; records below it are rejected everywhere in the tree
        """
        if not self.children:
            return OFF

        own = 0
        if self.level is not None:
            own = min((self.level, *self.level_overrides.levels()))

        below = min(
            child.max_level() if isinstance(child, DispatchNode) else 0
            for child in self.children
        )
        return max(own, below)
