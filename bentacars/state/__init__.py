from bentacars.state.models import (
    GATING_SLOTS,
    ConfidenceTier,
    ExtractionResult,
    Slot,
    SlotState,
)
from bentacars.state.slot_registry import get_question_template, get_slot_label

__all__ = [
    "GATING_SLOTS",
    "ConfidenceTier",
    "ExtractionResult",
    "Slot",
    "SlotState",
    "get_question_template",
    "get_slot_label",
]
