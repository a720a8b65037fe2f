"""
Mood buckets: frustrated > confused > positive > neutral.
Advisory only: tunes the reply's opener and the phrasing tone, never slot decisions.
"""

import re
from enum import Enum


class Mood(str, Enum):
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    CONFUSED = "confused"
    FRUSTRATED = "frustrated"


FRUSTRATION_PATTERN = re.compile(
    r"\b(frustrated|angry|annoyed|galit|inis|badtrip|bwisit|nakakainis|ang\s+tagal|"
    r"ano\s+ba|paulit[\s-]?ulit|kanina\s+pa|terrible|worst|ridiculous)\b|[😡😤🤬]"
)
CONFUSION_PATTERN = re.compile(
    r"\b(confused|confusing|di\s+ko\s+gets|hindi\s+ko\s+gets|hindi\s+ko\s+maintindihan|"
    r"ano\s+yun|ano\s+po\s+yun|huh|what\s+do\s+you\s+mean|paano\s+po)\b|\?\?|[🤔😕]"
)
POSITIVE_PATTERN = re.compile(
    r"\b(thanks|thank\s+you|salamat|nice|great|ayos|astig|galing|excited|sige)\b|[😊🙂😁😍👍🥰]"
)

MOOD_BUCKETS = [
    (Mood.FRUSTRATED, FRUSTRATION_PATTERN),
    (Mood.CONFUSED, CONFUSION_PATTERN),
    (Mood.POSITIVE, POSITIVE_PATTERN),
]


def classify_mood(text: str) -> Mood:
    t = (text or "").casefold()
    for mood, pat in MOOD_BUCKETS:
        if pat.search(t):
            return mood
    return Mood.NEUTRAL
