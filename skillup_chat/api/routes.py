"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from skillup_chat.api.handlers import handle_chat
from skillup_chat.schemas.chat import ChatRequest, ChatResponse, ErrorResponse, UpstreamErrorResponse

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Chat ---

@router.post(
    "/api/chat",
    response_model=ChatResponse,
    tags=["chat"],
    summary="Ask the institute assistant",
    description="Send {message}; receive {reply}. 400 on invalid input, 500 on configuration or server failure, 502 when Gemini rejects every model/version tried.",
    openapi_extra={"requestBody": {"content": {"application/json": {"schema": ChatRequest.model_json_schema()}}, "required": True}},
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": UpstreamErrorResponse}},
)
async def post_chat(request: Request) -> JSONResponse:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None
    logger.info("[api:post_chat] IN  body_type=%s", type(payload).__name__)
    # Blocking HTTP calls to Gemini; keep them off the event loop.
    response = await asyncio.to_thread(handle_chat, payload)
    logger.info("[api:post_chat] OUT status=%d", response.status_code)
    return response
