import logging

import pytest

from common.app_setup import print_and_log, print_error, set_print_logger, setup_logging
from common.config import Settings, load_settings
from common.errors import FormatError, ResolutionError, ToolValidationError, ValidationError


def test_defaults_without_config_file():
    settings = load_settings(environ={})
    assert settings == Settings()
    assert settings.discovery_timeout == 30.0
    assert settings.execute_timeout is None


def test_default_config_file_in_home(isolated_home):
    config_dir = isolated_home / ".nimsforestpm"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("log_level: DEBUG\ndiscovery_timeout: 5\n")
    settings = load_settings(environ={})
    assert settings.log_level == "DEBUG"
    assert settings.discovery_timeout == 5


def test_yaml_and_json_files(tmp_path):
    yaml_file = tmp_path / "config.yaml"
    yaml_file.write_text("execute_timeout: 12.5\n")
    assert load_settings(yaml_file, environ={}).execute_timeout == 12.5

    json_file = tmp_path / "config.json"
    json_file.write_text('{"log_file": "/tmp/x.log"}')
    assert load_settings(json_file, environ={}).log_file == "/tmp/x.log"


def test_environment_overrides_file(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("log_level: WARNING\n")
    settings = load_settings(config, environ={"NIMSFOREST_LOG_LEVEL": "ERROR", "NIMSFOREST_DISCOVERY_TIMEOUT": "2"})
    assert settings.log_level == "ERROR"
    assert settings.discovery_timeout == 2.0


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ValidationError, match="does not exist"):
        load_settings(tmp_path / "nope.yaml", environ={})


def test_invalid_values(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("discovery_timeout: -1\n")
    with pytest.raises(ValidationError) as exc_info:
        load_settings(config, environ={})
    assert exc_info.value.problems[0].startswith("discovery_timeout")

    config.write_text("- just\n- a list\n")
    with pytest.raises(ValidationError, match="mapping"):
        load_settings(config, environ={})


def test_error_hierarchy():
    err = FormatError("invalid tool line format", 7)
    assert err.line == 7
    assert err.reason == "invalid tool line format"
    assert str(err) == "line 7: invalid tool line format"

    tool_err = ToolValidationError("tool path does not exist: /x", "/x")
    assert isinstance(tool_err, ResolutionError)
    assert isinstance(tool_err, ValidationError)
    assert tool_err.problems == ["tool path does not exist: /x"]


def test_setup_logging_writes_file(tmp_path):
    logfile = tmp_path / "logs" / "app.log"
    logger = setup_logging(loglevel="DEBUG", logfile=str(logfile))
    try:
        print_and_log("hello [bold]world[/bold]")
        print_error("something [failed]")
        for handler in logger.handlers:
            handler.flush()
        text = logfile.read_text()
        assert "INFO" in text and "hello [bold]world[/bold]" in text
        assert "ERROR" in text and "something [failed]" in text
    finally:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.WARNING)
        set_print_logger(None)


def test_print_without_markup(capsys):
    print_and_log("[not markup]", markup=False)
    print_error("[also literal]")
    captured = capsys.readouterr()
    assert "[not markup]" in captured.out
    assert "[also literal]" in captured.err
