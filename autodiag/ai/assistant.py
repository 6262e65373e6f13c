"""
Relay one conversation turn to the hosted Assistants API (v2).

A turn walks an explicit state machine:

    NO_THREAD -> THREAD_READY -> MESSAGE_APPENDED -> RUN_CREATED
      -> RUN_POLLING (repeats) -> RUN_COMPLETED | RUN_FAILED
      RUN_COMPLETED -> REPLIED

Each transition is one method returning a StepResult. A failed step carries a
RelayError tagged with the stage that failed and, when there is one, the
upstream HTTP status code. Nothing is retried.
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
import structlog

from autodiag.config import AssistantSettings

logger = structlog.get_logger(__name__)

TERMINAL_STATUSES = frozenset({"completed", "failed", "cancelled", "expired"})


class RelayState(str, Enum):
    NO_THREAD = "no_thread"
    THREAD_READY = "thread_ready"
    MESSAGE_APPENDED = "message_appended"
    RUN_CREATED = "run_created"
    RUN_POLLING = "run_polling"
    RUN_COMPLETED = "run_completed"
    RUN_FAILED = "run_failed"
    REPLIED = "replied"


class RelayStage(str, Enum):
    THREAD_CREATE = "thread-create"
    MESSAGE_APPEND = "message-append"
    RUN_CREATE = "run-create"
    STATUS_CHECK = "status-check"
    TIMEOUT = "timeout"
    NON_COMPLETE_STATUS = "non-complete-status"
    MESSAGE_FETCH = "message-fetch"
    NO_ASSISTANT_REPLY = "no-assistant-reply"


class RelayError(Exception):
    def __init__(self, stage: RelayStage, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.status_code = status_code


class RunTimeoutError(RelayError):
    def __init__(self, attempts: int):
        super().__init__(RelayStage.TIMEOUT, "Run timed out")
        self.attempts = attempts


class RunStatusError(RelayError):
    def __init__(self, status: str):
        super().__init__(RelayStage.NON_COMPLETE_STATUS, f"Run ended with status: {status}")
        self.status = status


@dataclass(frozen=True)
class RelayReply:
    thread_id: str
    response: str
    message_id: Optional[str]


@dataclass(frozen=True)
class StepResult:
    state: RelayState
    error: Optional[RelayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _failed(error: RelayError) -> StepResult:
    return StepResult(RelayState.RUN_FAILED, error)


def _json_object(r: httpx.Response) -> Optional[Dict[str, Any]]:
    """Decode a JSON object body; None for anything else."""
    try:
        data = r.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _unexpected(stage: RelayStage, r: httpx.Response) -> StepResult:
    logger.error("relay_unexpected_body", stage=stage.value, status_code=r.status_code, body=r.text)
    return _failed(RelayError(stage, f"Unexpected response from {stage.value}: {r.status_code}", r.status_code))


@dataclass
class _Turn:
    """Mutable per-call context threaded through the transitions."""

    client: httpx.AsyncClient
    message: str
    thread_id: Optional[str] = None
    run_id: Optional[str] = None
    run_status: Optional[str] = None
    attempts: int = 0
    reply: Optional[RelayReply] = None


def extract_reply_text(message: Dict[str, Any]) -> str:
    """Join the text segments of an assistant message, one per line."""
    parts = []
    for segment in message.get("content") or []:
        if not isinstance(segment, dict) or segment.get("type") != "text":
            continue
        text = segment.get("text")
        value = text.get("value") if isinstance(text, dict) else None
        parts.append(value if isinstance(value, str) else "")
    return "\n".join(parts)


class AssistantRelay:
    def __init__(
        self,
        settings: AssistantSettings,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.settings = settings
        self._sleep = sleep
        self._transitions = {
            RelayState.NO_THREAD: self._create_thread,
            RelayState.THREAD_READY: self._append_message,
            RelayState.MESSAGE_APPENDED: self._create_run,
            RelayState.RUN_CREATED: self._check_initial_status,
            RelayState.RUN_POLLING: self._poll_run,
            RelayState.RUN_COMPLETED: self._fetch_reply,
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
            "OpenAI-Beta": "assistants=v2",
        }

    async def send(self, message: str, thread_id: Optional[str] = None) -> RelayReply:
        """
        Append `message` to the conversation (creating one when `thread_id` is
        empty), run the assistant and return its latest reply.
        Raises RelayError on the first failing stage.
        """
        async with httpx.AsyncClient(
            base_url=self.settings.api_base,
            headers=self._headers(),
            timeout=self.settings.http_timeout,
        ) as client:
            turn = _Turn(client=client, message=message, thread_id=thread_id or None)
            state = RelayState.THREAD_READY if turn.thread_id else RelayState.NO_THREAD
            while state is not RelayState.REPLIED:
                step = await self._transitions[state](turn)
                if not step.ok:
                    err = step.error
                    logger.error(
                        "relay_failed",
                        stage=err.stage.value,
                        status_code=err.status_code,
                        thread_id=turn.thread_id,
                        run_id=turn.run_id,
                        error=err.message,
                    )
                    raise err
                state = step.state
        return turn.reply

    # -- transitions ------------------------------------------------------

    async def _create_thread(self, turn: _Turn) -> StepResult:
        r = await turn.client.post("/threads", json={})
        if not r.is_success:
            logger.error("relay_thread_create_failed", status_code=r.status_code, body=r.text)
            return _failed(RelayError(RelayStage.THREAD_CREATE, f"Failed to create thread: {r.status_code}", r.status_code))
        thread_id = (_json_object(r) or {}).get("id")
        if not isinstance(thread_id, str) or not thread_id:
            return _unexpected(RelayStage.THREAD_CREATE, r)
        turn.thread_id = thread_id
        logger.info("relay_thread_created", thread_id=turn.thread_id)
        return StepResult(RelayState.THREAD_READY)

    async def _append_message(self, turn: _Turn) -> StepResult:
        r = await turn.client.post(
            f"/threads/{turn.thread_id}/messages",
            json={"role": "user", "content": turn.message},
        )
        if not r.is_success:
            logger.error("relay_message_append_failed", status_code=r.status_code, body=r.text)
            return _failed(RelayError(RelayStage.MESSAGE_APPEND, f"Failed to add message: {r.status_code}", r.status_code))
        logger.info("relay_message_appended", thread_id=turn.thread_id, message_length=len(turn.message))
        return StepResult(RelayState.MESSAGE_APPENDED)

    async def _create_run(self, turn: _Turn) -> StepResult:
        r = await turn.client.post(
            f"/threads/{turn.thread_id}/runs",
            json={"assistant_id": self.settings.assistant_id},
        )
        if not r.is_success:
            logger.error("relay_run_create_failed", status_code=r.status_code, body=r.text)
            return _failed(RelayError(RelayStage.RUN_CREATE, f"Failed to create run: {r.status_code}", r.status_code))
        data = _json_object(r) or {}
        run_id = data.get("id")
        if not isinstance(run_id, str) or not run_id:
            return _unexpected(RelayStage.RUN_CREATE, r)
        turn.run_id = run_id
        status = data.get("status")
        turn.run_status = status if isinstance(status, str) else None
        logger.info("relay_run_created", run_id=turn.run_id, status=turn.run_status)
        return StepResult(RelayState.RUN_CREATED)

    def _classify(self, turn: _Turn) -> StepResult:
        status = turn.run_status
        if status not in TERMINAL_STATUSES:
            return StepResult(RelayState.RUN_POLLING)
        if status == "completed":
            return StepResult(RelayState.RUN_COMPLETED)
        return _failed(RunStatusError(status))

    async def _check_initial_status(self, turn: _Turn) -> StepResult:
        return self._classify(turn)

    async def _poll_run(self, turn: _Turn) -> StepResult:
        if turn.attempts >= self.settings.max_attempts:
            return _failed(RunTimeoutError(turn.attempts))

        await self._sleep(self.settings.poll_interval)
        turn.attempts += 1

        r = await turn.client.get(f"/threads/{turn.thread_id}/runs/{turn.run_id}")
        if not r.is_success:
            logger.error("relay_status_check_failed", status_code=r.status_code, body=r.text)
            return _failed(RelayError(RelayStage.STATUS_CHECK, f"Failed to check run status: {r.status_code}", r.status_code))
        status = (_json_object(r) or {}).get("status")
        if not isinstance(status, str):
            return _unexpected(RelayStage.STATUS_CHECK, r)
        turn.run_status = status
        logger.debug("relay_run_status", attempt=turn.attempts, status=turn.run_status)
        return self._classify(turn)

    async def _fetch_reply(self, turn: _Turn) -> StepResult:
        r = await turn.client.get(
            f"/threads/{turn.thread_id}/messages",
            params={"order": "desc", "limit": 1},
        )
        if not r.is_success:
            logger.error("relay_message_fetch_failed", status_code=r.status_code, body=r.text)
            return _failed(RelayError(RelayStage.MESSAGE_FETCH, f"Failed to retrieve messages: {r.status_code}", r.status_code))

        messages = (_json_object(r) or {}).get("data")
        if not isinstance(messages, list):
            return _unexpected(RelayStage.MESSAGE_FETCH, r)
        latest = next(
            (m for m in messages if isinstance(m, dict) and m.get("role") == "assistant"),
            None,
        )
        if latest is None:
            return _failed(RelayError(RelayStage.NO_ASSISTANT_REPLY, "No assistant response found"))

        turn.reply = RelayReply(
            thread_id=turn.thread_id,
            response=extract_reply_text(latest),
            message_id=latest.get("id"),
        )
        logger.info("relay_completed", thread_id=turn.thread_id, attempts=turn.attempts)
        return StepResult(RelayState.REPLIED)
