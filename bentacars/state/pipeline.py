"""
State pipeline: build slot state from a whole conversation by replaying it turn by turn.
Each turn's returned state becomes the next turn's memory, exactly as a caller would persist it.
"""

from typing import Any

from bentacars.config import EngineConfig
from bentacars.live.engine import TurnResult, run_turn
from bentacars.state.models import SlotState


def initial_state(memory: dict[str, Any] | None = None) -> SlotState:
    """Fresh state for a conversation, seeded from whatever the contact store already holds."""
    return SlotState.from_memory(memory)


def replay_turns(
    messages: list[str],
    memory: dict[str, Any] | None = None,
    config: EngineConfig | None = None,
    *,
    name: str = "",
) -> list[TurnResult]:
    """
    Replay user messages in order. Returns one TurnResult per non-empty message.
    Only scripted replies: replays must be deterministic.
    """
    state = initial_state(memory)
    results: list[TurnResult] = []
    for text in messages:
        if not text or not text.strip():
            continue
        result = run_turn(text, state, config, name=name)
        results.append(result)
        state = result.state
    return results


def build_state_from_conversation(
    messages: list[str],
    memory: dict[str, Any] | None = None,
    config: EngineConfig | None = None,
) -> SlotState:
    """Final slot state after replaying every message."""
    results = replay_turns(messages, memory, config)
    return results[-1].state if results else initial_state(memory)
