"""TOML configuration for dispatch trees.

This module describes a dispatch tree declaratively and turns it into a
``Dispatch`` builder. The root node carries the default level and the
per-logger overrides; each configured output becomes a nested dispatch
with its own optional level and formatter.

    ```toml
    [logging]
    level = "INFO"

    [logging.levels]
    "urllib3.connectionpool" = "WARNING"

    [[logging.outputs]]
    kind = "stdout"        # stdout, stderr or file
    format = "console"     # console, json or plain
    colors = true

    [[logging.outputs]]
    kind = "file"
    path = "logs/app.log"
    format = "json"
    level = "DEBUG"
    ```
"""

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, get_args

import tomllib

from .dispatch import Dispatch
from .errors import ConfigurationIoError
from .formatters import Formatter, console_formatter, json_formatter, stdlib_formatter
from .log_levels import VALID_LOG_LEVELS, LogLevel
from .sinks import FileSink

OutputKind = Literal["stdout", "stderr", "file"]
OutputFormat = Literal["console", "json", "plain"]

VALID_OUTPUT_KINDS = frozenset(get_args(OutputKind))
VALID_OUTPUT_FORMATS = frozenset(get_args(OutputFormat))

DEFAULT_PLAIN_FORMAT = "%(asctime)s [%(name)s][%(levelname)s] %(message)s"


def _validate_level(level: str | None) -> None:
    if level is None or level in VALID_LOG_LEVELS:
        return
    msg = (
        f"Invalid logging level: {level!r}. "
        f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
    )
    raise ValueError(msg)


def _parse_level(level: object) -> str:
    """Normalize a level name read from TOML.

    Raises:
        ValueError: If the level is not given as a string
    """
    if not isinstance(level, str):
        msg = f"Invalid logging level: {level!r}. Levels must be given by name"
        raise ValueError(msg)
    return level.upper()


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """Configuration for one destination.

    Attributes:
        kind:       Destination kind (stdout, stderr or file)
        format:     Formatter used for this destination
        level:      Optional minimum level for this destination only
        path:       Log file path, required for file outputs
        encoding:   Character encoding for file outputs (default: utf-8)
        colors:     Enable colored console output
    """

    kind: OutputKind
    format: OutputFormat = "plain"
    level: LogLevel | None = None
    path: Path | None = None
    encoding: str = "utf-8"
    colors: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values after initialization.

        Raises:
            ValueError: If the kind, format or level is invalid, or a file
                        output has no path
        """
        if self.kind not in VALID_OUTPUT_KINDS:
            msg = (
                f"Invalid output kind: {self.kind!r}. "
                f"Must be one of: {', '.join(sorted(VALID_OUTPUT_KINDS))}"
            )
            raise ValueError(msg)

        if self.format not in VALID_OUTPUT_FORMATS:
            msg = (
                f"Invalid output format: {self.format!r}. "
                f"Must be one of: {', '.join(sorted(VALID_OUTPUT_FORMATS))}"
            )
            raise ValueError(msg)

        _validate_level(self.level)

        if self.kind == "file" and self.path is None:
            msg = "File outputs require a path"
            raise ValueError(msg)

    def create_formatter(self) -> Formatter:
        """Create the formatter for this output."""
        if self.format == "console":
            return console_formatter(colors=self.colors)
        if self.format == "json":
            return json_formatter()
        return stdlib_formatter(DEFAULT_PLAIN_FORMAT)

    def into_dispatch(self) -> Dispatch:
        """Create a nested dispatch writing to this output.

        File outputs create missing parent directories and open the file
        immediately.

        Returns:
            Dispatch builder with this output chained

        Raises:
            ConfigurationIoError: If the log file cannot be opened
        """
        dispatch = Dispatch().with_formatter(self.create_formatter())
        if self.level is not None:
            dispatch.with_level(self.level)

        if self.kind == "stdout":
            return dispatch.chain(sys.stdout)
        if self.kind == "stderr":
            return dispatch.chain(sys.stderr)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationIoError(self.path, e) from e
        return dispatch.chain(FileSink(self.path, encoding=self.encoding))


@dataclass(frozen=True, slots=True)
class DispatchConfig:
    """Complete dispatch tree configuration.

    Attributes:
        level:              Default minimum level for the root node
        level_overrides:    Exact-match logger name to level mapping
        outputs:            Destinations, in the order they receive records
    """

    level: LogLevel
    level_overrides: Mapping[str, LogLevel] = field(default_factory=dict)
    outputs: tuple[OutputConfig, ...] = ()

    def __post_init__(self) -> None:
        """Validate configuration values after initialization.

        Raises:
            ValueError: If a logging level is invalid
        """
        _validate_level(self.level)
        for level in self.level_overrides.values():
            _validate_level(level)

    @classmethod
    def from_toml(cls, config_path: Path) -> "DispatchConfig":
        """Create a DispatchConfig instance from a TOML configuration file.

        Args:
            config_path: Path to the TOML configuration file

        Returns:
            Configured DispatchConfig instance

        Raises:
            ValueError: If required configuration keys are missing or if values are invalid
        """
        try:
            config_data = cls._load_toml(config_path)
            return cls._parse_config(config_data)

        except KeyError as e:
            msg = f"Missing required configuration key: {e.args[0]}"
            raise ValueError(msg) from e

        except (TypeError, ValueError) as e:
            msg = f"Invalid value in configuration file: {e!s}"
            raise ValueError(msg) from e

    @classmethod
    def _load_toml(cls, config_path: Path) -> dict:
        """Load and parse the TOML configuration file.

        Args:
            config_path: Path to the TOML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError:  If the configuration file doesn't exist
            ValueError:         If the TOML file is malformed
        """
        try:
            with config_path.open("rb") as f:
                return tomllib.load(f)

        except FileNotFoundError as e:
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg) from e

        except tomllib.TOMLDecodeError as e:
            msg = f"Failed to parse TOML file {config_path}"
            raise ValueError(msg) from e

    @classmethod
    def _parse_config(cls, config_data: dict) -> "DispatchConfig":
        """Parse the configuration dictionary into a DispatchConfig instance.

        Args:
            config_data: Dictionary containing the configuration data

        Returns:
            Configured DispatchConfig instance
        """
        logging_config = config_data["logging"]

        return cls(
            level=_parse_level(logging_config["level"]),
            level_overrides={
                target: _parse_level(level)
                for target, level in logging_config.get("levels", {}).items()
            },
            outputs=tuple(
                cls._create_output_config(output)
                for output in logging_config.get("outputs", [])
            ),
        )

    @staticmethod
    def _create_output_config(output_config: dict) -> OutputConfig:
        """Create an OutputConfig from the configuration dictionary.

        Args:
            output_config: Dictionary containing one output's configuration

        Returns:
            Configured OutputConfig instance
        """
        level = output_config.get("level")
        path = output_config.get("path")

        return OutputConfig(
            kind=output_config["kind"],
            format=output_config.get("format", "plain"),
            level=_parse_level(level) if level is not None else None,
            path=Path(path) if path is not None else None,
            encoding=output_config.get("encoding", "utf-8"),
            colors=bool(output_config.get("colors", False)),
        )

    @classmethod
    def create_default(cls) -> "DispatchConfig":
        """Create a default DispatchConfig instance.

        Creates a configuration with sensible defaults:
        - INFO level logging
        - Console output to stdout without colors
        - No file output

        Returns:
            DispatchConfig instance with default settings
        """
        return cls(
            level="INFO",
            outputs=(OutputConfig(kind="stdout", format="console"),),
        )

    def into_dispatch(self) -> Dispatch:
        """Create a dispatch builder from this configuration.

        Returns:
            Root Dispatch builder with one nested dispatch per output

        Raises:
            ConfigurationIoError: If a log file cannot be opened
        """
        dispatch = Dispatch().with_level(self.level)
        for target, level in self.level_overrides.items():
            dispatch.with_level_for(target, level)

        for output in self.outputs:
            dispatch.chain(output.into_dispatch())

        return dispatch


def configure_logging(config_path: str | Path | None = None) -> Dispatch:
    """Start configuring the process logger.

    Reads the configuration file if one is given, otherwise uses the
    defaults. The returned builder can be extended with more outputs,
    filters or overrides before calling ``set_as_global()``.

    Args:
        config_path: Optional path to a TOML config file

    Returns:
        Dispatch builder for method chaining
    """
    config = (
        DispatchConfig.from_toml(Path(config_path))
        if config_path is not None
        else DispatchConfig.create_default()
    )

    return config.into_dispatch()
