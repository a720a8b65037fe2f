"""
Tests for the missing-slot policy and completeness summary
"""

import pytest

from bentacars.config import EngineConfig
from bentacars.qualification.completeness import CompletenessStatus, compute_completeness, qualification_summary
from bentacars.state.follow_up import COMPLETE, is_complete, missing_required, next_missing
from bentacars.state.models import GATING_SLOTS, Slot, SlotState


class TestNextMissing:
    def test_empty_state_asks_vehicle(self, config):
        assert next_missing(SlotState(), config) == Slot.VEHICLE

    def test_priority_order(self, config, full_memory):
        # Fill slots in priority order; the first unfilled one is asked
        for i, slot in enumerate(GATING_SLOTS):
            memory = {s.value: full_memory[s.value] for s in GATING_SLOTS[:i]}
            assert next_missing(SlotState.from_memory(memory), config) == slot

    def test_complete_when_all_known(self, config, full_memory):
        assert next_missing(SlotState.from_memory(full_memory), config) is COMPLETE

    def test_transmission_never_gates(self, config, full_memory):
        state = SlotState.from_memory(full_memory)
        assert state.transmission is None
        assert is_complete(state, config)

    def test_location_gates_by_default(self, config, full_memory):
        full_memory.pop("location")
        assert next_missing(SlotState.from_memory(full_memory), config) == Slot.LOCATION

    def test_location_optional_when_ready(self, full_memory):
        config = EngineConfig(location_optional_when_ready=True)
        full_memory.pop("location")
        assert next_missing(SlotState.from_memory(full_memory), config) is COMPLETE

    def test_location_optional_only_when_it_is_the_last_gap(self, full_memory):
        config = EngineConfig(location_optional_when_ready=True)
        full_memory.pop("location")
        full_memory.pop("timeline")
        assert next_missing(SlotState.from_memory(full_memory), config) == Slot.LOCATION

    def test_custom_required_set(self, full_memory):
        config = EngineConfig(required_slots=frozenset(GATING_SLOTS) - {Slot.TIMELINE})
        full_memory.pop("timeline")
        assert next_missing(SlotState.from_memory(full_memory), config) is COMPLETE

    def test_custom_priority(self, full_memory):
        config = EngineConfig(priority=(Slot.LOCATION, Slot.VEHICLE, Slot.PAYMENT_MODE,
                                        Slot.BUDGET_OR_DOWNPAYMENT, Slot.TIMELINE))
        assert next_missing(SlotState(), config) == Slot.LOCATION

    def test_idempotent(self, config, full_memory):
        state = SlotState.from_memory(full_memory)
        assert next_missing(state, config) == next_missing(state, config)

    def test_missing_required(self, config):
        assert missing_required(SlotState(vehicle="van", timeline="soon"), config) == [
            Slot.PAYMENT_MODE, Slot.BUDGET_OR_DOWNPAYMENT, Slot.LOCATION,
        ]


class TestCompleteness:
    @pytest.mark.parametrize(
        "known,pct,status",
        [(5, 100, CompletenessStatus.COMPLETE), (4, 80, CompletenessStatus.ACTIONABLE),
         (3, 60, CompletenessStatus.ACTIONABLE), (1, 20, CompletenessStatus.INCOMPLETE)],
    )
    def test_levels(self, config, full_memory, known, pct, status):
        memory = {s.value: full_memory[s.value] for s in GATING_SLOTS[:known]}
        got_pct, missing, got_status = compute_completeness(SlotState.from_memory(memory), config)
        assert got_pct == pct
        assert got_status == status
        assert missing == [s.value for s in GATING_SLOTS[known:]]

    def test_optional_location_counts_as_complete(self, full_memory):
        config = EngineConfig(location_optional_when_ready=True)
        full_memory.pop("location")
        summary = qualification_summary(SlotState.from_memory(full_memory), config)
        assert summary == {"completeness_pct": 80, "missing_slots": ["location"], "status": "complete"}
