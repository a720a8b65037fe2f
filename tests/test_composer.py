"""
Tests for the response composer and its phrasing fallback
"""

import re
import threading
import time
from unittest.mock import MagicMock

import pytest

from bentacars.config import EngineConfig
from bentacars.live.composer import StyleContext, compose, is_trustworthy, render_scripted, scrub_forbidden
from bentacars.live.llm_chat import PhrasingRequest
from bentacars.nlp.entities import MODEL_PATTERNS
from bentacars.nlp.mood import Mood
from bentacars.state.follow_up import COMPLETE
from bentacars.state.models import GATING_SLOTS, Slot, SlotState
from bentacars.state.slot_registry import DOWNPAYMENT_QUESTION, get_question_template


@pytest.fixture
def style():
    return StyleContext()


@pytest.fixture
def generator():
    gen = MagicMock()
    gen.generate.return_value = "Sige po! Cash ba or financing ang plano mo?"
    return gen


def _question_core(template: str) -> str:
    """Leading fixed wording of a template, placeholders dropped."""
    return re.sub(r"\{\w+\}", "", template).strip()[:25]


class TestScripted:
    def test_budget_question_for_cash(self, config, style):
        state = SlotState(vehicle="sedan", payment_mode="cash")
        text = compose(Slot.BUDGET_OR_DOWNPAYMENT, state, style, config).text
        assert "cash budget" in text
        assert "downpayment" not in text

    def test_budget_question_for_financing(self, config, style):
        state = SlotState(vehicle="sedan", payment_mode="financing")
        text = compose(Slot.BUDGET_OR_DOWNPAYMENT, state, style, config).text
        assert "downpayment" in text
        assert "cash budget" not in text

    @pytest.mark.parametrize("slot", GATING_SLOTS)
    def test_exactly_one_question(self, config, style, slot):
        message = compose(slot, SlotState(vehicle="sedan"), style, config)
        assert message.step == slot.value
        assert message.text.count("?") == 1
        for other in GATING_SLOTS:
            if other != slot:
                assert _question_core(get_question_template(other)) not in message.text
        assert _question_core(DOWNPAYMENT_QUESTION) not in message.text

    def test_payment_hint_biases_wording(self, config):
        state = SlotState(vehicle="mpv")
        plain = compose(Slot.PAYMENT_MODE, state, StyleContext(), config).text
        hinted = compose(Slot.PAYMENT_MODE, state, StyleContext(payment_hint="financing"), config).text
        assert "financing" in hinted.split("Cash or financing")[0].lower()
        assert plain != hinted

    def test_mood_opener(self, config):
        state = SlotState(vehicle="van")
        text = compose(Slot.PAYMENT_MODE, state, StyleContext(mood=Mood.FRUSTRATED), config).text
        assert text.startswith("Pasensya na po")

    def test_greets_by_first_name_on_a_fresh_conversation(self, config):
        text = compose(Slot.VEHICLE, SlotState(), StyleContext(name="Maria Santos"), config).text
        assert text.startswith("Hi Maria!")

    def test_complete_acknowledges_without_listing_units(self, config, style, full_memory):
        state = SlotState.from_memory(full_memory)
        message = compose(COMPLETE, state, style, config)
        assert message.step == "complete"
        assert "Kumpleto" in message.text
        assert "₱600,000" in message.text
        assert not any(pat.search(message.text.casefold()) for _m, _b, pat in MODEL_PATTERNS)
        assert "?" not in message.text

    def test_complete_is_idempotent(self, config, style, full_memory):
        state = SlotState.from_memory(full_memory)
        assert compose(COMPLETE, state, style, config) == compose(COMPLETE, state, style, config)

    def test_complete_with_soft_location(self, config, style, full_memory):
        full_memory.pop("location")
        text = render_scripted(COMPLETE, SlotState.from_memory(full_memory), style)
        assert text.count("?") == 1
        assert "located" in text

    def test_forbidden_terms_are_scrubbed_from_scripts(self, style):
        config = EngineConfig(forbidden_terms=("cash budget",))
        state = SlotState(vehicle="sedan", payment_mode="cash")
        text = compose(Slot.BUDGET_OR_DOWNPAYMENT, state, style, config).text
        assert "cash budget" not in text.lower()

    def test_scrub_forbidden(self):
        assert scrub_forbidden("Ano ang Segment mo?", ("segment",)) == "Ano ang mo?"


class TestPhrasingDelegation:
    def test_uses_generated_text_when_trustworthy(self, config, style, generator):
        state = SlotState(vehicle="sedan")
        message = compose(Slot.PAYMENT_MODE, state, style, config, generator)
        assert message.source == "generated"
        assert message.text == "Sige po! Cash ba or financing ang plano mo?"

        request = generator.generate.call_args.args[0]
        assert isinstance(request, PhrasingRequest)
        assert request.step == "payment_mode"
        assert request.known_context == {"vehicle": "sedan"}
        assert "Cash or financing" in request.scripted_text

    def test_falls_back_when_generator_raises(self, config, style, generator):
        generator.generate.side_effect = RuntimeError("boom")
        message = compose(Slot.PAYMENT_MODE, SlotState(vehicle="sedan"), style, config, generator)
        assert message.source == "scripted"
        assert "Cash or financing" in message.text

    def test_falls_back_on_timeout(self, style):
        config = EngineConfig(phrasing_timeout_seconds=0.05)
        release = threading.Event()

        class SlowGenerator:
            def generate(self, request):
                release.wait(2)
                return "Cash or financing po?"

        started = time.monotonic()
        try:
            message = compose(Slot.PAYMENT_MODE, SlotState(vehicle="sedan"), style, config, SlowGenerator())
        finally:
            release.set()
        assert time.monotonic() - started < 1.0
        assert message.source == "scripted"

    @pytest.mark.parametrize(
        "reply",
        [
            "",
            "Cash ba? O financing?",  # two questions
            "Cash or financing? Ano ang target monthly mo?",  # forbidden + two questions
            "Anong segment ng payment mo?",  # forbidden
            "Try mo yung Vios or Innova, cash or financing?",  # invents units
            "May 500k ka ba, cash or financing?",  # invents an amount
            "Options:\n- cash\n- financing?",  # list
            "x" * 400 + "?",  # too long
        ],
    )
    def test_rejects_untrusted_output(self, config, style, generator, reply):
        generator.generate.return_value = reply
        message = compose(Slot.PAYMENT_MODE, SlotState(vehicle="sedan"), style, config, generator)
        assert message.source == "scripted"

    def test_non_text_output_falls_back(self, config, style, generator):
        generator.generate.return_value = None
        message = compose(Slot.VEHICLE, SlotState(), style, config, generator)
        assert message.source == "scripted"

    def test_known_amount_and_model_are_allowed(self, config):
        state = SlotState(vehicle="Toyota Vios", payment_mode="financing", budget_or_downpayment=150000)
        assert is_trustworthy("Noted, 150k DP for the Vios. Saan ka located?", Slot.LOCATION, state, config)

    def test_complete_needs_no_question(self, config, full_memory):
        state = SlotState.from_memory(full_memory)
        assert is_trustworthy("Ayos, kumpleto na! Check ko na options mo.", COMPLETE, state, config)


class TestAcknowledgmentTrust:
    @pytest.mark.parametrize(
        "reply",
        [
            "Kumpleto na! Pero magkano ulit ang budget mo?",
            "Salamat! Kailan mo ulit balak kumuha?",
            "Kumpleto na. Pakisabi ulit kung cash or financing.",
            "Ayos! Saan ka located?",  # location already known
        ],
    )
    def test_rejects_reasks_when_everything_is_known(self, config, style, generator, full_memory, reply):
        generator.generate.return_value = reply
        message = compose(COMPLETE, SlotState.from_memory(full_memory), style, config, generator)
        assert message.source == "scripted"
        assert "Kumpleto" in message.text

    def test_soft_location_ask_is_allowed(self, config, full_memory):
        full_memory.pop("location")
        state = SlotState.from_memory(full_memory)
        reply = "Salamat, kumpleto na! Kung okay lang, saan ka located para sa pinakamalapit na branch?"
        assert is_trustworthy(reply, COMPLETE, state, config)

    @pytest.mark.parametrize(
        "reply",
        [
            "Kumpleto na! Magkano ulit ang budget mo?",
            "Kumpleto na! Saan ka located at kailan mo kukunin this week?",
            "Kumpleto na! Saan ka located? Cash or financing ulit?",
        ],
    )
    def test_soft_ask_must_be_about_location_only(self, config, full_memory, reply):
        full_memory.pop("location")
        assert not is_trustworthy(reply, COMPLETE, SlotState.from_memory(full_memory), config)


def test_every_scripted_question_has_one_question_mark():
    templates = [get_question_template(slot) for slot in Slot] + [DOWNPAYMENT_QUESTION]
    for template in templates:
        assert template.count("?") == 1, template
