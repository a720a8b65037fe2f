"""
Chat API — one POST per buyer message. Body carries the message plus the contact-store memory;
response carries ai_reply plus the updated fields for the caller to save back.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from bentacars.config import EngineConfig
from bentacars.live.engine import handle_turn
from bentacars.live.llm_chat import PhrasingGenerator
from bentacars.schemas.contract import MalformedTurnError, parse_turn
from bentacars.state.slot_registry import APOLOGY_REPLY

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

MALFORMED_REPLY = "Missing message or user."
METHOD_NOT_ALLOWED_REPLY = "Method not allowed."


def _engine_config(request: Request) -> EngineConfig:
    return getattr(request.app.state, "engine_config", None) or EngineConfig()


def _generator(request: Request) -> PhrasingGenerator | None:
    return getattr(request.app.state, "phrasing_generator", None)


@router.post("/chat")
async def chat(request: Request):
    """
    Body: { "message": "...", "user": "...", "name"?: "...", "ai_model"?: ..., "ai_budget"?: ..., ... }.
    400 when message or user is missing; the engine itself never fails on odd text or memory.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    try:
        turn_request = parse_turn(body)
    except MalformedTurnError as exc:
        logger.info("rejected turn: %s", exc)
        return JSONResponse(status_code=400, content={"ai_reply": MALFORMED_REPLY})

    try:
        response = await run_in_threadpool(
            handle_turn, turn_request, _engine_config(request), _generator(request)
        )
    except Exception:
        logger.exception("chat turn failed for user=%s", turn_request.user)
        return JSONResponse(status_code=500, content={"ai_reply": APOLOGY_REPLY})
    return response.model_dump(mode="json")


@router.api_route(
    "/chat",
    methods=["GET", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def chat_method_not_allowed():
    """Non-POST keeps the ai_reply shape so the contact-store mapping can still read it."""
    return JSONResponse(
        status_code=405,
        content={"ai_reply": METHOD_NOT_ALLOWED_REPLY},
        headers={"Allow": "POST"},
    )
