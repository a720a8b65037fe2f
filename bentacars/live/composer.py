"""
Response composer. The content decision (which slot, which known facts) is fixed before
anything else happens; an optional phrasing generator may restyle it, bounded by a timeout.
Any failure, timeout or untrusted output falls back to the scripted template.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass

from bentacars.config import EngineConfig
from bentacars.live.llm_chat import PhrasingGenerator, PhrasingRequest
from bentacars.nlp.entities import MODEL_PATTERNS
from bentacars.nlp.mood import Mood
from bentacars.nlp.preprocessing import clean_value
from bentacars.state.follow_up import COMPLETE, Completion
from bentacars.state.models import Slot, SlotState
from bentacars.state.slot_registry import (
    COMPLETE_ACK,
    COMPLETE_SOFT_LOCATION,
    DOWNPAYMENT_QUESTION,
    MOOD_OPENERS,
    PAYMENT_HINTED_LEAD,
    get_question_template,
    get_slot_label,
)

logger = logging.getLogger(__name__)

LIST_MARKER_PATTERN = re.compile(r"(?:^|\n)\s*(?:[-*•]|\d+[.)])\s")
NUMBER_TOKEN_PATTERN = re.compile(r"\d+(?:[,.]\d+)*")

# A restyled question must still be about its own slot
STEP_KEYWORDS = {
    Slot.VEHICLE: ("sasakyan", "unit", "sedan", "suv", "mpv", "model", "car", "kotse", "body"),
    Slot.PAYMENT_MODE: ("cash", "financing", "finance", "hulugan", "loan", "installment"),
    Slot.BUDGET_OR_DOWNPAYMENT: ("budget", "magkano", "downpayment", "down payment", "dp", "how much"),
    Slot.LOCATION: ("located", "saan", "location", "area", "city", "lugar", "branch"),
    Slot.TIMELINE: ("kailan", "when", "timeline", "balak", "week", "month", "buwan", "linggo"),
}

# Asking words; an acknowledgment carries none outside its one allowed location ask
REASK_PATTERN = re.compile(
    r"\b(?:magkano|how much|kailan|when|anong?|alin|which|what|saan|where|pakisabi|paki-?share)\b"
)
SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


@dataclass
class StyleContext:
    name: str = ""
    mood: Mood = Mood.NEUTRAL
    payment_hint: str | None = None


@dataclass
class OutgoingMessage:
    text: str
    step: str  # slot name or "complete"
    source: str = "scripted"  # or "generated"


def _first_name(name: str) -> str:
    cleaned = clean_value(name)
    return cleaned.split(" ")[0] if cleaned else ""


def format_amount(amount: int) -> str:
    return f"₱{amount:,}"


def known_context(state: SlotState) -> dict[str, object]:
    return {s.value: state.get(s) for s in state.known_slots()}


def _summary(state: SlotState) -> str:
    parts: list[str] = []
    if state.vehicle:
        parts.append(state.vehicle)
    if state.transmission:
        parts.append(state.transmission)
    if state.payment_mode:
        parts.append(state.payment_mode)
    if state.budget_or_downpayment:
        label = "DP" if state.payment_mode == "financing" else "budget"
        parts.append(f"{label} {format_amount(state.budget_or_downpayment)}")
    if state.location:
        parts.append(state.location)
    if state.timeline:
        parts.append(state.timeline)
    return ", ".join(parts)


def render_scripted(step: Slot | Completion, state: SlotState, style: StyleContext) -> str:
    """The deterministic reply for this step. Exactly one question for a slot step."""
    first = _first_name(style.name)
    if step is COMPLETE:
        text = COMPLETE_ACK.format(name=f" {first}" if first else "", summary=_summary(state))
        if not state.is_known(Slot.LOCATION):
            text += COMPLETE_SOFT_LOCATION
        return text

    template = get_question_template(step)
    if step == Slot.BUDGET_OR_DOWNPAYMENT and state.payment_mode == "financing":
        template = DOWNPAYMENT_QUESTION
    lead = PAYMENT_HINTED_LEAD if style.payment_hint == "financing" else ""
    question = template.format(vehicle=state.vehicle or "unit", lead=lead)

    opener = MOOD_OPENERS.get(style.mood.value, MOOD_OPENERS["neutral"])
    if first and not state.known_slots():
        greeting = f"Hi {first}! "
        opener = greeting + opener if style.mood in (Mood.FRUSTRATED, Mood.CONFUSED) else greeting
    return opener + question


def contains_forbidden(text: str, terms: tuple[str, ...]) -> bool:
    low = text.casefold()
    return any(t.casefold() in low for t in terms if t)


def scrub_forbidden(text: str, terms: tuple[str, ...]) -> str:
    for term in terms:
        if term:
            text = re.sub(re.escape(term), "", text, flags=re.IGNORECASE)
    return re.sub(r"\s{2,}", " ", text).strip()


def _allowed_numbers(state: SlotState) -> set[str]:
    allowed: set[str] = set()
    for value in known_context(state).values():
        for token in NUMBER_TOKEN_PATTERN.findall(str(value)):
            allowed.add(re.sub(r"\D", "", token))
    budget = state.budget_or_downpayment
    if budget:
        allowed.add(str(budget))
        if budget % 1000 == 0:
            allowed.add(str(budget // 1000))
        allowed.add(re.sub(r"\D", "", f"{budget / 1_000_000:g}"))
    return allowed


def _acknowledgment_is_trustworthy(reply: str, state: SlotState) -> bool:
    """
    COMPLETE asks nothing, except the one soft location ask when location is still unknown.
    That ask must be about location only; the rest of the reply may not ask anything.
    """
    soft_ask = not state.is_known(Slot.LOCATION)
    if reply.count("?") > (1 if soft_ask else 0):
        return False
    other_keywords = [k for s, kws in STEP_KEYWORDS.items() if s != Slot.LOCATION for k in kws]
    for sentence in SENTENCE_SPLIT.split(reply.casefold()):
        if "?" in sentence:
            if not any(k in sentence for k in STEP_KEYWORDS[Slot.LOCATION]):
                return False
            if any(k in sentence for k in other_keywords):
                return False
        elif REASK_PATTERN.search(sentence):
            return False
    return True


def is_trustworthy(reply: str, step: Slot | Completion, state: SlotState, config: EngineConfig) -> bool:
    """Generated phrasing must say the same thing the script says, and nothing more."""
    if not reply or len(reply) > config.max_reply_chars:
        return False
    if contains_forbidden(reply, config.forbidden_terms):
        return False
    if step is COMPLETE:
        if not _acknowledgment_is_trustworthy(reply, state):
            return False
    elif reply.count("?") != 1:
        return False
    if LIST_MARKER_PATTERN.search(reply):
        return False
    low = reply.casefold()
    keywords = STEP_KEYWORDS.get(step, ())
    if keywords and not any(k in low for k in keywords):
        return False
    vehicle = (state.vehicle or "").casefold()
    for _model, _body, pat in MODEL_PATTERNS:
        if pat.search(low) and not pat.search(vehicle):
            return False
    allowed = _allowed_numbers(state)
    for token in NUMBER_TOKEN_PATTERN.findall(reply):
        if re.sub(r"\D", "", token) not in allowed:
            return False
    return True


def _generate_with_timeout(generator: PhrasingGenerator, request: PhrasingRequest, timeout: float) -> str | None:
    """Abandon-on-timeout: the worker thread is not awaited once the deadline passes."""
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(generator.generate, request)
    try:
        result = future.result(timeout=timeout)
    except FuturesTimeoutError:
        logger.warning("phrasing timed out after %.1fs for step=%s", timeout, request.step)
        return None
    except Exception:
        logger.warning("phrasing failed for step=%s", request.step, exc_info=True)
        return None
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return result.strip() if isinstance(result, str) else None


def compose(
    step: Slot | Completion,
    state: SlotState,
    style: StyleContext,
    config: EngineConfig,
    generator: PhrasingGenerator | None = None,
) -> OutgoingMessage:
    scripted = scrub_forbidden(render_scripted(step, state, style), config.forbidden_terms)
    step_name = step.value
    if generator is None:
        return OutgoingMessage(text=scripted, step=step_name)

    request = PhrasingRequest(
        step=step_name,
        topic="" if step is COMPLETE else get_slot_label(step),
        known_context=known_context(state),
        tone=style.mood.value,
        scripted_text=scripted,
        forbidden_terms=config.forbidden_terms,
    )
    generated = _generate_with_timeout(generator, request, config.phrasing_timeout_seconds)
    if generated is not None and is_trustworthy(generated, step, state, config):
        return OutgoingMessage(text=generated, step=step_name, source="generated")
    if generated is not None:
        logger.warning("phrasing output rejected for step=%s; using script", step_name)
    return OutgoingMessage(text=scripted, step=step_name)
