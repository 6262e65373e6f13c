import math
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MAX_ATTEMPTS = 60


class ConfigurationError(RuntimeError):
    """A required setting is missing from the environment."""


def _get_env_str(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env_str(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) else default


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class AssistantSettings:
    api_key: str
    assistant_id: str
    api_base: str = DEFAULT_API_BASE
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    http_timeout: Optional[float] = None


def assistant_settings() -> AssistantSettings:
    """
    Read the Assistants API settings from the environment.
    Raises ConfigurationError when the credential or assistant id is absent.
    """
    api_key = _get_env_str("OPENAI_API_KEY")
    if not api_key:
        raise ConfigurationError("OPENAI_API_KEY is not configured")
    assistant_id = _get_env_str("OPENAI_ASSISTANT_ID")
    if not assistant_id:
        raise ConfigurationError("OPENAI_ASSISTANT_ID is not configured")

    timeout = _get_env_float("ASSISTANT_HTTP_TIMEOUT", 0.0)
    return AssistantSettings(
        api_key=api_key,
        assistant_id=assistant_id,
        api_base=(_get_env_str("OPENAI_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
        poll_interval=max(_get_env_float("ASSISTANT_POLL_INTERVAL", DEFAULT_POLL_INTERVAL), 0.0),
        max_attempts=max(_get_env_int("ASSISTANT_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS), 0),
        http_timeout=timeout if timeout > 0 else None,
    )


def log_level() -> str:
    return (_get_env_str("LOG_LEVEL") or "INFO").upper()


def log_format() -> str:
    return (_get_env_str("LOG_FORMAT") or "console").lower()


def server_host() -> str:
    return _get_env_str("HOST") or "0.0.0.0"


def server_port() -> int:
    return _get_env_int("PORT", 8000)
