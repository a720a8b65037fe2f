"""
Missing-slot policy: one slot at a time, fixed priority. Pure function of merged state.
"""

from enum import Enum

from bentacars.config import EngineConfig
from bentacars.state.models import Slot, SlotState


class Completion(str, Enum):
    COMPLETE = "complete"


COMPLETE = Completion.COMPLETE


def missing_required(state: SlotState, config: EngineConfig) -> list[Slot]:
    """Required slots not yet known, in priority order."""
    return [s for s in config.priority if s in config.required_slots and not state.is_known(s)]


def next_missing(state: SlotState, config: EngineConfig) -> Slot | Completion:
    """
    First required slot in priority order that is not known, or COMPLETE.
    With location_optional_when_ready, a lone missing location counts as COMPLETE.
    """
    missing = missing_required(state, config)
    if not missing:
        return COMPLETE
    if config.location_optional_when_ready and missing == [Slot.LOCATION]:
        return COMPLETE
    return missing[0]


def is_complete(state: SlotState, config: EngineConfig) -> bool:
    return next_missing(state, config) is COMPLETE
