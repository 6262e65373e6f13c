import pytest

from autodiag.config import (
    DEFAULT_API_BASE,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    ConfigurationError,
    assistant_settings,
)

_TUNABLES = ("OPENAI_API_BASE", "ASSISTANT_POLL_INTERVAL", "ASSISTANT_MAX_ATTEMPTS", "ASSISTANT_HTTP_TIMEOUT")


@pytest.fixture()
def credentials(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_ASSISTANT_ID", "asst_test")
    for name in _TUNABLES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(credentials):
    s = assistant_settings()

    assert s.api_key == "sk-test"
    assert s.assistant_id == "asst_test"
    assert s.api_base == DEFAULT_API_BASE
    assert s.poll_interval == DEFAULT_POLL_INTERVAL
    assert s.max_attempts == DEFAULT_MAX_ATTEMPTS
    assert s.http_timeout is None


@pytest.mark.parametrize("missing", ["OPENAI_API_KEY", "OPENAI_ASSISTANT_ID"])
@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_credentials(credentials, missing, value):
    if value is None:
        credentials.delenv(missing)
    else:
        credentials.setenv(missing, value)

    with pytest.raises(ConfigurationError, match=f"{missing} is not configured"):
        assistant_settings()


def test_api_base_trailing_slash_is_dropped(credentials):
    credentials.setenv("OPENAI_API_BASE", "http://localhost:8080/v1/")
    assert assistant_settings().api_base == "http://localhost:8080/v1"


@pytest.mark.parametrize(
    "raw, expected",
    [("abc", DEFAULT_MAX_ATTEMPTS), ("1.5", DEFAULT_MAX_ATTEMPTS), ("-5", 0), ("0", 0), (" 12 ", 12)],
)
def test_max_attempts(credentials, raw, expected):
    credentials.setenv("ASSISTANT_MAX_ATTEMPTS", raw)
    assert assistant_settings().max_attempts == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("abc", DEFAULT_POLL_INTERVAL),
        ("nan", DEFAULT_POLL_INTERVAL),
        ("inf", DEFAULT_POLL_INTERVAL),
        ("-inf", DEFAULT_POLL_INTERVAL),
        ("-3", 0.0),
        ("0.25", 0.25),
    ],
)
def test_poll_interval(credentials, raw, expected):
    credentials.setenv("ASSISTANT_POLL_INTERVAL", raw)
    assert assistant_settings().poll_interval == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("0", None), ("-2", None), ("abc", None), ("nan", None), ("inf", None), ("5", 5.0), ("2.5", 2.5)],
)
def test_http_timeout(credentials, raw, expected):
    credentials.setenv("ASSISTANT_HTTP_TIMEOUT", raw)
    assert assistant_settings().http_timeout == expected
