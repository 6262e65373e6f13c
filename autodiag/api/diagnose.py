import json
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from autodiag.ai.assistant import AssistantRelay, RelayError
from autodiag.config import ConfigurationError, assistant_settings

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["diagnose"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, x-supabase-client-platform, "
        "x-supabase-client-platform-version, x-supabase-client-runtime, "
        "x-supabase-client-runtime-version"
    ),
}


def _json(payload: Dict[str, Any], status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(payload, status_code=status_code, headers=CORS_HEADERS)


def _error(message: str, status_code: int) -> JSONResponse:
    return _json({"error": message}, status_code=status_code)


@router.options("/diagnose")
async def diagnose_preflight():
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)


@router.post("/diagnose")
async def diagnose(request: Request):
    try:
        settings = assistant_settings()
    except ConfigurationError as e:
        logger.error("diagnose_misconfigured", error=str(e))
        return _error(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error("Invalid JSON body", status.HTTP_400_BAD_REQUEST)
    if not isinstance(body, dict):
        return _error("Invalid JSON body", status.HTTP_400_BAD_REQUEST)

    message = body.get("message")
    thread_id = body.get("threadId")
    if not isinstance(message, str) or not message.strip():
        return _error("Message is required", status.HTTP_400_BAD_REQUEST)
    if not isinstance(thread_id, str):
        thread_id = None

    logger.info("diagnose_request", thread_id=thread_id, message_length=len(message))

    relay = AssistantRelay(settings)
    try:
        reply = await relay.send(message, thread_id=thread_id)
    except RelayError as e:
        return _error(e.message, status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception as e:
        logger.exception("diagnose_failed")
        return _error(str(e) or "An unknown error occurred", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return _json({
        "threadId": reply.thread_id,
        "response": reply.response,
        "messageId": reply.message_id,
    })
