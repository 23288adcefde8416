"""Per-target level overrides.

Overrides are keyed by the record's target (the stdlib logger name) and
matched by exact string equality. A logger named ``"app.db"`` is not
covered by an override for ``"app"``.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from .log_levels import LogLevel, to_level_number


@dataclass(frozen=True, slots=True)
class LevelOverride:
    """A single target-level pair.

    Attributes:
        target: Logger name the override applies to
        level:  Numeric minimum level for records from that logger
    """

    target: str
    level: int

    def __post_init__(self) -> None:
        """Validate configuration values after initialization.

        Raises:
            ValueError: If the target is empty
        """
        if not self.target:
            msg = "Override target cannot be empty"
            raise ValueError(msg)

    def matches(self, target: str) -> bool:
        return target == self.target


@dataclass(frozen=True, slots=True)
class LevelOverrides:
    """Immutable collection of exact-match level overrides.

    Attributes:
        overrides: Target-level pairs, at most one per target
    """

    overrides: tuple[LevelOverride, ...] = ()

    def with_override(self, target: str, level: LogLevel | int) -> "LevelOverrides":
        """Create a new instance with an override added or replaced.

        Setting a target that already has an override replaces its level.

        Args:
            target: Logger name to override
            level:  Minimum level for that logger

        Returns:
            New LevelOverrides instance
        """
        new_override = LevelOverride(target, to_level_number(level))
        kept = tuple(o for o in self.overrides if not o.matches(target))
        return LevelOverrides(overrides=(*kept, new_override))

    def level_for(self, target: str) -> int | None:
        """Get the override level for a target.

        Args:
            target: Logger name of the record being dispatched

        Returns:
            The overriding level, or None if the target has no override
        """
        for override in self.overrides:
            if override.matches(target):
                return override.level
        return None

    def levels(self) -> Iterator[int]:
        return (o.level for o in self.overrides)

    def __len__(self) -> int:
        return len(self.overrides)
