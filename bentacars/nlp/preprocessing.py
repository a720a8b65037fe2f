"""
Normalizer. Re-runnable on any input: raw chat text or caller-supplied slot values.
Trim, NFC, collapse whitespace, scrub placeholders. Case-folded copy for matching,
original-case copy for echoing back.
"""

import re
from dataclasses import dataclass
from typing import Any
from unicodedata import normalize as unicode_normalize

# Tokens the contact store writes when a custom field was never filled
PLACEHOLDER_TOKENS = frozenset({"n/a", "none", "null", "undefined", "-"})

# Unresolved template markers, e.g. "{{ai_model}}" or "{{cuf_123}}"
TEMPLATE_MARKER_PATTERN = re.compile(r"\{\{.*?\}\}")

WHITESPACE_PATTERN = re.compile(r"\s+")


@dataclass
class PreprocessResult:
    text: str  # case-folded, for pattern matching
    original: str  # original case, for echoing


def _to_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float) and value != value:  # NaN
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value


def is_placeholder(value: str) -> bool:
    """True for values that look filled but carry nothing (n/a, null, {{...}})."""
    t = TEMPLATE_MARKER_PATTERN.sub("", value).strip().lower()
    return not t or t in PLACEHOLDER_TOKENS


def clean_value(value: Any) -> str:
    """Original-case sanitized string; '' for empty or placeholder input."""
    t = unicode_normalize("NFC", _to_text(value))
    t = TEMPLATE_MARKER_PATTERN.sub(" ", t)
    t = WHITESPACE_PATTERN.sub(" ", t).strip()
    if is_placeholder(t):
        return ""
    return t


def normalize(value: Any) -> str:
    """Case-folded sanitized string used by every extractor. Total: never raises."""
    return clean_value(value).casefold()


def preprocess(text: Any) -> PreprocessResult:
    """Full preprocessing of one message. Idempotent."""
    original = clean_value(text)
    return PreprocessResult(text=original.casefold(), original=original)
