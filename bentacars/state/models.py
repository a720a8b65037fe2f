"""
Slot state models. Built fresh from caller memory every turn, merged once, handed back.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_validator

from bentacars.nlp.preprocessing import clean_value


class Slot(str, Enum):
    VEHICLE = "vehicle"
    PAYMENT_MODE = "payment_mode"
    BUDGET_OR_DOWNPAYMENT = "budget_or_downpayment"
    LOCATION = "location"
    TIMELINE = "timeline"
    TRANSMISSION = "transmission"  # warmth only, never gates completion


GATING_SLOTS = (
    Slot.VEHICLE,
    Slot.PAYMENT_MODE,
    Slot.BUDGET_OR_DOWNPAYMENT,
    Slot.LOCATION,
    Slot.TIMELINE,
)


class ConfidenceTier(str, Enum):
    EXPLICIT_MEMORY = "explicit-memory"
    EXPLICIT_THIS_TURN = "explicit-this-turn"
    INFERRED_THIS_TURN = "inferred-this-turn"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {
    ConfidenceTier.EXPLICIT_MEMORY: 3,
    ConfidenceTier.EXPLICIT_THIS_TURN: 2,
    ConfidenceTier.INFERRED_THIS_TURN: 1,
}


@dataclass
class ExtractionResult:
    """One candidate value for one slot, plus how sure we are and what matched."""

    slot: Slot
    value: Any
    tier: ConfidenceTier
    evidence: str | None = None  # the matched phrase, for logs


class SlotState(BaseModel):
    """
    Slot -> value. None means unknown. Values are sanitized on the way in, so a
    placeholder like "n/a" or "{{ai_model}}" never counts as known.
    """

    vehicle: str | None = None
    payment_mode: str | None = None
    budget_or_downpayment: int | None = None
    location: str | None = None
    timeline: str | None = None
    transmission: str | None = None

    @field_validator("vehicle", "location", "timeline", mode="before")
    @classmethod
    def _clean_text(cls, v: Any) -> str | None:
        return clean_value(v) or None

    @field_validator("payment_mode", mode="before")
    @classmethod
    def _clean_payment(cls, v: Any) -> str | None:
        from bentacars.nlp.entities import extract_payment_mode

        result = extract_payment_mode(clean_value(v).casefold())
        return result.value if result else None

    @field_validator("transmission", mode="before")
    @classmethod
    def _clean_transmission(cls, v: Any) -> str | None:
        from bentacars.nlp.entities import extract_transmission

        result = extract_transmission(clean_value(v).casefold())
        return result.value if result else None

    @field_validator("budget_or_downpayment", mode="before")
    @classmethod
    def _clean_budget(cls, v: Any) -> int | None:
        if isinstance(v, bool) or v is None:
            return None
        if isinstance(v, (int, float)):
            return int(v) if math.isfinite(v) and v > 0 else None
        from bentacars.nlp.entities import parse_amount

        return parse_amount(clean_value(v).casefold())

    def get(self, slot: Slot) -> Any:
        return getattr(self, slot.value)

    def is_known(self, slot: Slot) -> bool:
        v = self.get(slot)
        return v is not None and v != ""

    def known_slots(self) -> list[Slot]:
        return [s for s in Slot if self.is_known(s)]

    @classmethod
    def empty(cls) -> "SlotState":
        return cls()

    @classmethod
    def from_memory(cls, memory: dict[str, Any] | None) -> "SlotState":
        """Tolerates stale, partial or garbled memory: anything unusable becomes unknown."""
        memory = memory or {}
        return cls(**{s.value: memory.get(s.value) for s in Slot})
