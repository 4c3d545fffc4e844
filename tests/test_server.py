import json
import logging
import socket

import pytest

from itemserver.server import init_tracing, main


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch):
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


def _record(message):
    return logging.LogRecord("itemserver.sample", logging.INFO, "sample.py", 7, message, None, None)


def test_json_format_emits_parseable_lines(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "JSON")
    handler = init_tracing()
    line = handler.formatter.format(_record("hello"))
    entry = json.loads(line)
    assert entry["message"] == "hello"
    assert entry["target"] == "itemserver.sample"
    assert entry["line_number"] == 7


def test_pretty_format_is_plain_text():
    handler = init_tracing()
    line = handler.formatter.format(_record("hello"))
    assert "hello" in line
    assert "itemserver.sample" in line
    with pytest.raises(ValueError):
        json.loads(line)


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    handler = init_tracing()
    root = logging.getLogger()
    assert handler in root.handlers
    assert root.level == logging.DEBUG


def test_unknown_log_level_defaults_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    handler = init_tracing()
    root = logging.getLogger()
    assert handler in root.handlers
    assert root.level == logging.INFO


def test_repeated_init_replaces_handler():
    first = init_tracing()
    second = init_tracing()
    root = logging.getLogger()
    assert second in root.handlers
    assert first not in root.handlers


@pytest.mark.parametrize("port", ["abc", "70000", "-1", ""])
def test_invalid_port_exits(monkeypatch, port):
    monkeypatch.setenv("PORT", port)
    with pytest.raises(SystemExit) as info:
        main([])
    assert "Invalid PORT" in str(info.value)


def test_busy_port_raises(monkeypatch):
    holder = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    holder.bind(("0.0.0.0", 0))
    holder.listen()
    monkeypatch.setenv("PORT", str(holder.getsockname()[1]))
    try:
        with pytest.raises(OSError):
            main([])
    finally:
        holder.close()