"""
Completeness status — separate from the next-question decision. Helps sales see how far along a buyer is.
Complete | Actionable (minor missing) | Incomplete.
"""

from enum import Enum
from typing import Any

from bentacars.config import EngineConfig
from bentacars.state.follow_up import is_complete, missing_required
from bentacars.state.models import SlotState


class CompletenessStatus(str, Enum):
    COMPLETE = "complete"
    ACTIONABLE = "actionable"  # 1–2 missing
    INCOMPLETE = "incomplete"


def compute_completeness(state: SlotState, config: EngineConfig) -> tuple[int, list[str], CompletenessStatus]:
    """
    Returns (completeness_pct 0–100, required slots missing, status).
    Status follows the missing-slot policy, so an optional-when-ready location never blocks COMPLETE.
    """
    required = [s for s in config.priority if s in config.required_slots]
    if not required:
        return 100, [], CompletenessStatus.COMPLETE

    missing = missing_required(state, config)
    pct = round((len(required) - len(missing)) / len(required) * 100)

    if is_complete(state, config):
        status = CompletenessStatus.COMPLETE
    elif len(missing) <= 2:
        status = CompletenessStatus.ACTIONABLE
    else:
        status = CompletenessStatus.INCOMPLETE
    return pct, [s.value for s in missing], status


def qualification_summary(state: SlotState, config: EngineConfig) -> dict[str, Any]:
    """Full completeness summary for the outbound turn result."""
    pct, missing, status = compute_completeness(state, config)
    return {
        "completeness_pct": pct,
        "missing_slots": missing,
        "status": status.value,
    }
