"""
Turn contract at the boundary. One validation pass here; the engine never sees a malformed turn.
Slot fields use the contact-store custom field names (ai_model, ai_budget, ...).
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from bentacars.state.models import Slot, SlotState

# Contact-store field -> slot
MEMORY_FIELDS: dict[str, Slot] = {
    "ai_model": Slot.VEHICLE,
    "ai_payment_mode": Slot.PAYMENT_MODE,
    "ai_budget": Slot.BUDGET_OR_DOWNPAYMENT,
    "ai_location": Slot.LOCATION,
    "ai_timeline": Slot.TIMELINE,
    "ai_transmission": Slot.TRANSMISSION,
}


class MalformedTurnError(ValueError):
    """Turn is missing its message or user identity. A client error, not an engine failure."""


class ChatTurnRequest(BaseModel):
    message: str
    user: str
    name: str | None = None
    ai_model: Any = None
    ai_payment_mode: Any = None
    ai_budget: Any = None
    ai_location: Any = None
    ai_timeline: Any = None
    ai_transmission: Any = None

    model_config = {"extra": "ignore"}

    @field_validator("message", "user", mode="before")
    @classmethod
    def _required_text(cls, v: Any) -> str:
        if v is None or isinstance(v, bool):
            raise ValueError("required")
        text = str(v).strip()
        if not text:
            raise ValueError("required")
        return text

    @field_validator("name", mode="before")
    @classmethod
    def _optional_name(cls, v: Any) -> str | None:
        if v is None:
            return None
        return str(v).strip() or None

    def memory(self) -> dict[str, Any]:
        """Caller memory keyed by slot name, ready for SlotState.from_memory."""
        return {slot.value: getattr(self, field) for field, slot in MEMORY_FIELDS.items()}


class ChatTurnResponse(BaseModel):
    ai_reply: str
    ai_model: str | None = None
    ai_payment_mode: str | None = None
    ai_budget: int | None = None
    ai_location: str | None = None
    ai_timeline: str | None = None
    ai_transmission: str | None = None
    next_slot: str
    reset: bool = False
    mood: str = "neutral"
    qualification: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_state(cls, ai_reply: str, state: SlotState, **extra: Any) -> "ChatTurnResponse":
        fields = {field: state.get(slot) for field, slot in MEMORY_FIELDS.items()}
        return cls(ai_reply=ai_reply, **fields, **extra)


def parse_turn(payload: Any) -> ChatTurnRequest:
    """Raises MalformedTurnError for anything without a usable message and user."""
    if not isinstance(payload, dict):
        raise MalformedTurnError("turn payload must be an object")
    try:
        return ChatTurnRequest.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise MalformedTurnError(f"invalid turn fields: {', '.join(fields)}") from exc
