import os
from typing import Any, Dict, Iterable, Optional

import httpx
import pytest
import respx

# Keep polling instant in tests
os.environ.setdefault("ASSISTANT_POLL_INTERVAL", "0")

from autodiag.main import app  # noqa: E402

API_BASE = "https://api.openai.com/v1"
THREAD_ID = "thread_abc123"
RUN_ID = "run_xyz789"


def _run(status: str) -> Dict[str, Any]:
    return {"id": RUN_ID, "object": "thread.run", "status": status}


def _assistant_message(*texts: str, message_id: str = "msg_assistant_1") -> Dict[str, Any]:
    return {
        "id": message_id,
        "role": "assistant",
        "content": [{"type": "text", "text": {"value": t, "annotations": []}} for t in texts],
    }


@pytest.fixture()
def api_base():
    return API_BASE


@pytest.fixture()
def thread_id():
    return THREAD_ID


@pytest.fixture()
def run_id():
    return RUN_ID


@pytest.fixture()
def assistant_message():
    """Build an assistant message with one text segment per argument."""
    return _assistant_message


@pytest.fixture()
def test_app(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_ASSISTANT_ID", "asst_test")
    monkeypatch.setenv("OPENAI_API_BASE", API_BASE)
    monkeypatch.setenv("ASSISTANT_POLL_INTERVAL", "0")
    monkeypatch.delenv("ASSISTANT_MAX_ATTEMPTS", raising=False)
    yield app


@pytest.fixture()
def assistant_api():
    with respx.mock(base_url=API_BASE, assert_all_called=False) as mock:
        yield mock


@pytest.fixture()
def stub_turn(assistant_api):
    """
    Register the five Assistants API routes used by one relay turn and return
    them keyed by name so tests can override or inspect individual calls.
    """

    def _stub(
        initial_status: str = "queued",
        statuses: Iterable[str] = ("in_progress", "completed"),
        messages: Optional[list] = None,
    ) -> Dict[str, respx.Route]:
        if messages is None:
            messages = [_assistant_message("Verifique as pastilhas de freio.")]
        routes = {
            "thread": assistant_api.post("/threads").mock(
                return_value=httpx.Response(200, json={"id": THREAD_ID, "object": "thread"})
            ),
            "message": assistant_api.post(f"/threads/{THREAD_ID}/messages").mock(
                return_value=httpx.Response(200, json={"id": "msg_user_1", "role": "user"})
            ),
            "run": assistant_api.post(f"/threads/{THREAD_ID}/runs").mock(
                return_value=httpx.Response(200, json=_run(initial_status))
            ),
            "status": assistant_api.get(f"/threads/{THREAD_ID}/runs/{RUN_ID}").mock(
                side_effect=[httpx.Response(200, json=_run(s)) for s in statuses]
            ),
            "reply": assistant_api.get(f"/threads/{THREAD_ID}/messages").mock(
                return_value=httpx.Response(200, json={"object": "list", "data": messages})
            ),
        }
        return routes

    return _stub
