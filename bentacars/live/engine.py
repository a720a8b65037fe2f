"""
One qualification turn, stateless: message + caller memory -> reply + updated slot state.
Normalize -> extract -> merge -> next missing slot -> compose. Nothing is kept between calls;
the caller persists the returned state against its own conversation id.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from bentacars.config import EngineConfig
from bentacars.live.composer import OutgoingMessage, StyleContext, compose
from bentacars.live.llm_chat import PhrasingGenerator
from bentacars.nlp.mood import Mood
from bentacars.nlp.pipeline import run_nlp_pipeline
from bentacars.qualification.completeness import qualification_summary
from bentacars.schemas.contract import ChatTurnRequest, ChatTurnResponse
from bentacars.state.follow_up import Completion, next_missing
from bentacars.state.models import ConfidenceTier, Slot, SlotState
from bentacars.state.slot_filling import merge_state, slot_provenance

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    reply: OutgoingMessage
    state: SlotState
    next_step: Slot | Completion
    reset: bool = False
    mood: Mood = Mood.NEUTRAL
    provenance: dict[Slot, ConfidenceTier] = field(default_factory=dict)
    qualification: dict[str, Any] = field(default_factory=dict)


def run_turn(
    message: Any,
    memory: SlotState | dict[str, Any] | None,
    config: EngineConfig | None = None,
    *,
    name: str = "",
    generator: PhrasingGenerator | None = None,
) -> TurnResult:
    """
    Same (message, memory, config) -> same result, except the optional generated phrasing.
    Never raises for odd text or memory: unusable input just leaves slots empty.
    """
    config = config or EngineConfig()
    if not isinstance(memory, SlotState):
        memory = SlotState.from_memory(memory)

    nlp = run_nlp_pipeline(message, config)
    state = merge_state(memory, nlp.extracted, nlp.reset_intent)
    step = next_missing(state, config)

    style = StyleContext(name=name or "", mood=nlp.mood, payment_hint=nlp.payment_hint)
    reply = compose(step, state, style, config, generator)

    provenance = slot_provenance(memory, nlp.extracted, state)
    logger.info(
        "turn reset=%s filled=%s next=%s reply_source=%s",
        nlp.reset_intent,
        [s.value for s, tier in provenance.items() if tier != ConfidenceTier.EXPLICIT_MEMORY],
        step.value,
        reply.source,
    )
    return TurnResult(
        reply=reply,
        state=state,
        next_step=step,
        reset=nlp.reset_intent,
        mood=nlp.mood,
        provenance=provenance,
        qualification=qualification_summary(state, config),
    )


def handle_turn(
    request: ChatTurnRequest,
    config: EngineConfig | None = None,
    generator: PhrasingGenerator | None = None,
) -> ChatTurnResponse:
    """Validated inbound turn -> outbound record with ai_reply and the echoed slot fields."""
    result = run_turn(
        request.message,
        request.memory(),
        config,
        name=request.name or "",
        generator=generator,
    )
    return ChatTurnResponse.from_state(
        result.reply.text,
        result.state,
        next_slot=result.next_step.value,
        reset=result.reset,
        mood=result.mood.value,
        qualification=result.qualification,
    )
