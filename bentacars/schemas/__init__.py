from .contract import (
    MEMORY_FIELDS,
    ChatTurnRequest,
    ChatTurnResponse,
    MalformedTurnError,
    parse_turn,
)

__all__ = [
    "MEMORY_FIELDS",
    "ChatTurnRequest",
    "ChatTurnResponse",
    "MalformedTurnError",
    "parse_turn",
]
