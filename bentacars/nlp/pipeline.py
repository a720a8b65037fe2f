"""
Per-turn NLP pipeline: preprocess -> reset check -> slot extraction -> mood.
Re-runnable; same text and config always give the same result.
"""

from dataclasses import dataclass, field

from bentacars.config import EngineConfig
from bentacars.nlp.entities import detect_reset_intent, payment_hint
from bentacars.nlp.mood import Mood, classify_mood
from bentacars.nlp.preprocessing import preprocess
from bentacars.state.models import ExtractionResult, Slot
from bentacars.state.slot_filling import extract_slot_values_from_message


@dataclass
class NlpResult:
    text: str
    original: str
    reset_intent: bool
    mood: Mood
    extracted: dict[Slot, ExtractionResult] = field(default_factory=dict)
    payment_hint: str | None = None


def run_nlp_pipeline(raw_message: object, config: EngineConfig) -> NlpResult:
    """Reset intent short-circuits extraction: nothing from a reset turn is carried."""
    pre = preprocess(raw_message)
    mood = classify_mood(pre.text)
    if detect_reset_intent(pre.text):
        return NlpResult(text=pre.text, original=pre.original, reset_intent=True, mood=mood)
    return NlpResult(
        text=pre.text,
        original=pre.original,
        reset_intent=False,
        mood=mood,
        extracted=extract_slot_values_from_message(pre.text, config),
        payment_hint=payment_hint(pre.text),
    )
