"""Log level definitions and validation constants."""

import logging
from typing import Literal, get_args

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "OFF"]
VALID_LOG_LEVELS = frozenset(get_args(LogLevel))

# Above every stdlib level, so nothing passes a floor set to it.
OFF: int = logging.CRITICAL + 10


def to_level_number(level: LogLevel | str | int) -> int:
    """Convert a level name or number into a stdlib level number.

    Args:
        level: Level name (case-insensitive) or numeric level

    Returns:
        Numeric level comparable with ``LogRecord.levelno``

    Raises:
        ValueError: If the level name is not one of ``VALID_LOG_LEVELS``
    """
    if isinstance(level, bool):
        msg = f"Invalid logging level: {level!r}"
        raise ValueError(msg)

    if isinstance(level, int):
        return level

    name = str(level).upper()
    if name not in VALID_LOG_LEVELS:
        msg = (
            f"Invalid logging level: {level!r}. "
            f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )
        raise ValueError(msg)

    if name == "OFF":
        return OFF
    return logging.getLevelNamesMapping()[name]
