"""Tests for TOML configuration of dispatch trees."""

import logging
from pathlib import Path

import pytest

from logdispatch import (
    ConfigurationIoError,
    Dispatch,
    DispatchConfig,
    DispatchNode,
    OutputConfig,
    configure_logging,
)

FULL_CONFIG = """
[logging]
level = "info"

[logging.levels]
"app.db" = "debug"
"urllib3.connectionpool" = "WARNING"

[[logging.outputs]]
kind = "stdout"
format = "console"

[[logging.outputs]]
kind = "file"
path = "{path}"
format = "plain"
level = "warning"
"""


def write_config(tmp_path: Path, text: str) -> Path:
    config_path = tmp_path / "logging.toml"
    config_path.write_text(text, encoding="utf-8")
    return config_path


def test_from_toml_parses_all_sections(tmp_path):
    log_path = tmp_path / "logs" / "app.log"
    config_path = write_config(tmp_path, FULL_CONFIG.format(path=log_path.as_posix()))

    config = DispatchConfig.from_toml(config_path)

    assert config.level == "INFO"
    assert config.level_overrides == {"app.db": "DEBUG", "urllib3.connectionpool": "WARNING"}
    assert config.outputs == (
        OutputConfig(kind="stdout", format="console"),
        OutputConfig(kind="file", format="plain", level="WARNING", path=log_path),
    )


def test_into_dispatch_builds_nested_outputs(tmp_path, make_record, capsys):
    log_path = tmp_path / "logs" / "app.log"
    config_path = write_config(tmp_path, FULL_CONFIG.format(path=log_path.as_posix()))

    node = DispatchConfig.from_toml(config_path).into_dispatch().into_node()
    node.log(make_record("just info", level=logging.INFO, name="app"))
    node.log(make_record("watch out", level=logging.WARNING, name="app"))
    node.log(make_record("query", level=logging.DEBUG, name="app.db"))

    assert node.level == logging.INFO
    assert node.effective_level("app.db") == logging.DEBUG
    assert all(isinstance(child, DispatchNode) for child in node.children)

    out = capsys.readouterr().out
    assert "just info" in out
    assert "watch out" in out
    assert "query" in out

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("[app][WARNING] watch out")


def test_missing_required_key(tmp_path):
    config_path = write_config(tmp_path, "[logging]\n")

    with pytest.raises(ValueError, match="Missing required configuration key: level"):
        DispatchConfig.from_toml(config_path)


def test_invalid_level(tmp_path):
    config_path = write_config(tmp_path, '[logging]\nlevel = "LOUD"\n')

    with pytest.raises(ValueError, match="Invalid logging level"):
        DispatchConfig.from_toml(config_path)


def test_invalid_output_kind(tmp_path):
    config_path = write_config(
        tmp_path,
        '[logging]\nlevel = "INFO"\n\n[[logging.outputs]]\nkind = "syslog"\n',
    )

    with pytest.raises(ValueError, match="Invalid output kind"):
        DispatchConfig.from_toml(config_path)


def test_file_output_requires_path():
    with pytest.raises(ValueError, match="require a path"):
        OutputConfig(kind="file")


def test_invalid_output_format():
    with pytest.raises(ValueError, match="Invalid output format"):
        OutputConfig(kind="stderr", format="xml")


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Configuration file not found"):
        DispatchConfig.from_toml(tmp_path / "missing.toml")


def test_malformed_config_file(tmp_path):
    config_path = write_config(tmp_path, "[logging\nlevel = ")

    with pytest.raises(ValueError, match="Failed to parse TOML file"):
        DispatchConfig.from_toml(config_path)


def test_default_config():
    config = DispatchConfig.create_default()

    assert config.level == "INFO"
    assert config.level_overrides == {}
    assert config.outputs == (OutputConfig(kind="stdout", format="console"),)


def test_configure_logging_returns_extendable_builder(collecting_sink, make_record, capsys):
    sink = collecting_sink()

    dispatch = configure_logging()
    assert isinstance(dispatch, Dispatch)

    node = dispatch.chain(sink).into_node()
    node.log(make_record("hello", level=logging.INFO))
    node.log(make_record("hidden", level=logging.DEBUG))

    assert sink.messages == ["hello"]
    assert "hello" in capsys.readouterr().out


def test_configure_logging_from_file(tmp_path):
    config_path = write_config(tmp_path, '[logging]\nlevel = "ERROR"\n')

    node = configure_logging(str(config_path)).into_node()

    assert node.level == logging.ERROR
    assert node.children == ()


def test_file_output_under_regular_file_fails_with_io_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    output = OutputConfig(kind="file", path=blocker / "logs" / "app.log")

    with pytest.raises(ConfigurationIoError, match="cannot open"):
        output.into_dispatch()


@pytest.mark.parametrize(
    "text",
    [
        "[logging]\nlevel = 20\n",
        '[logging]\nlevel = "INFO"\n\n[logging.levels]\n"app.db" = 10\n',
        '[logging]\nlevel = "INFO"\n\n[[logging.outputs]]\nkind = "stdout"\nlevel = true\n',
    ],
)
def test_non_string_levels_are_invalid_values(tmp_path, text):
    config_path = write_config(tmp_path, text)

    with pytest.raises(ValueError, match="Invalid logging level"):
        DispatchConfig.from_toml(config_path)
