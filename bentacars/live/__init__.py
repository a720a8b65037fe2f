from bentacars.live.composer import OutgoingMessage, StyleContext, compose
from bentacars.live.engine import TurnResult, handle_turn, run_turn
from bentacars.live.llm_chat import PhrasingGenerator, PhrasingRequest

__all__ = [
    "OutgoingMessage",
    "StyleContext",
    "compose",
    "TurnResult",
    "handle_turn",
    "run_turn",
    "PhrasingGenerator",
    "PhrasingRequest",
]
