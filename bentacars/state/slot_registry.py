"""
Slot map — one scripted question per slot, plus the completion acknowledgment.
Business wording lives here, not in the composer. Taglish, short, one question each.
"""

from typing import TypedDict

from bentacars.state.models import Slot


class SlotConfig(TypedDict, total=False):
    question_template: str
    label: str


SLOT_REGISTRY: dict[Slot, SlotConfig] = {
    Slot.VEHICLE: {
        "label": "unit",
        "question_template": (
            "Anong klaseng sasakyan ang hanap mo: sedan, SUV, MPV, pickup, "
            "o may specific model ka na in mind?"
        ),
    },
    Slot.PAYMENT_MODE: {
        "label": "payment",
        "question_template": "{lead}Cash or financing ang plan natin for the {vehicle}?",
    },
    Slot.BUDGET_OR_DOWNPAYMENT: {
        "label": "budget",
        "question_template": "Magkano ang cash budget natin for the {vehicle}?",
    },
    Slot.LOCATION: {
        "label": "location",
        "question_template": "Saan ka located? Para ma-match kita sa pinakamalapit na branch.",
    },
    Slot.TIMELINE: {
        "label": "timeline",
        "question_template": "Kailan mo balak kumuha ng unit: this week, this month, o medyo later pa?",
    },
    Slot.TRANSMISSION: {
        "label": "transmission",
        "question_template": "Automatic or manual ang gusto mo?",
    },
}

# Budget wording branches on payment_mode
DOWNPAYMENT_QUESTION = "Magkano ang downpayment na ready mo on hand for the {vehicle}?"

# Payment wording when the message only hinted at financing (dp, cash out)
PAYMENT_HINTED_LEAD = "Mukhang financing ang tinitingnan natin. "

COMPLETE_ACK = (
    "Salamat{name}! Kumpleto na ang details ko: {summary}. "
    "I-check ko na ang best options para sa'yo, saglit lang."
)
COMPLETE_SOFT_LOCATION = " Kung okay lang, saan ka located para sa pinakamalapit na branch?"

# Mood-dependent opener, prepended to questions only
MOOD_OPENERS = {
    "frustrated": "Pasensya na po sa abala. ",
    "confused": "Sorry kung nakakalito. ",
    "positive": "Ayos! ",
    "neutral": "Sige! ",
}

GENERIC_FALLBACK = "Para mahanapan kita ng best na unit, ano pa ang dapat kong malaman?"

# Adapter-level apology for unexpected failures; never carries slot content
APOLOGY_REPLY = (
    "Pasensya na, nagka-issue saglit. Paki-type ulit po yung message, tutulungan kita agad."
)


def get_question_template(slot: Slot) -> str:
    return SLOT_REGISTRY.get(slot, {}).get("question_template", GENERIC_FALLBACK)


def get_slot_label(slot: Slot) -> str:
    return SLOT_REGISTRY.get(slot, {}).get("label", slot.value)
