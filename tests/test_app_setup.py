import logging

import pytest
import structlog

from autodiag import main
from autodiag.log import configure_logging


@pytest.fixture()
def restore_logging():
    old_config = structlog.get_config()
    old_level = logging.getLogger().level
    yield
    structlog.configure(**old_config)
    logging.getLogger().setLevel(old_level)


def test_run_serves_app_with_env_settings(monkeypatch):
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "9001")
    monkeypatch.setenv("LOG_LEVEL", "warning")

    main.run()

    assert calls == [(main.app, {"host": "127.0.0.1", "port": 9001, "log_level": "warning"})]


def test_run_defaults(monkeypatch):
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    for name in ("HOST", "PORT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    main.run()

    assert calls == [{"host": "0.0.0.0", "port": 8000, "log_level": "info"}]


def test_json_logging(restore_logging):
    configure_logging("WARNING", "json")

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    assert structlog.contextvars.merge_contextvars not in processors
    assert logging.getLogger().level == logging.WARNING


def test_console_logging_with_unknown_level(restore_logging):
    configure_logging("chatty", "console")

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
    assert logging.getLogger().level == logging.INFO
