"""
State merge. Memory (already known) > explicit this turn > inferred this turn.
Nothing overwritten blindly; reset clears everything at once.
"""

import logging

from bentacars.config import EngineConfig
from bentacars.nlp.entities import extract_entities
from bentacars.state.models import ConfidenceTier, ExtractionResult, Slot, SlotState

logger = logging.getLogger(__name__)


def extract_slot_values_from_message(text: str, config: EngineConfig) -> dict[Slot, ExtractionResult]:
    """
    Run every extractor over one normalized message. Memory is not consulted: a known
    memory value always wins in merge_state, so only the message can fill a slot.
    """
    return extract_entities(text, infer_location=config.infer_location_from_text)


def merge_state(
    memory: SlotState,
    extracted: dict[Slot, ExtractionResult],
    reset_intent: bool,
) -> SlotState:
    """
    Pure and total. Per slot: known memory wins, else this turn's candidate, else empty.
    Reset ignores memory and extraction alike.
    """
    if reset_intent:
        return SlotState.empty()

    update = {}
    for slot in Slot:
        if memory.is_known(slot):
            continue
        candidate = extracted.get(slot)
        if candidate is None or candidate.tier.rank >= ConfidenceTier.EXPLICIT_MEMORY.rank:
            continue
        update[slot.value] = candidate.value
    if update:
        logger.debug("merge filled %s", sorted(update))
    # Re-validate so merged values go through the same sanitizers as memory
    return SlotState(**{**memory.model_dump(), **update})


def slot_provenance(
    memory: SlotState,
    extracted: dict[Slot, ExtractionResult],
    merged: SlotState,
) -> dict[Slot, ConfidenceTier]:
    """Which tier each known slot in the merged state came from."""
    out: dict[Slot, ConfidenceTier] = {}
    for slot in merged.known_slots():
        if memory.is_known(slot):
            out[slot] = ConfidenceTier.EXPLICIT_MEMORY
        elif slot in extracted:
            out[slot] = extracted[slot].tier
    return out
