"""
Slot extractors. Map normalized (case-folded) Taglish text -> one candidate per slot.
Every extractor is independent and pure; no match returns None, never raises.
"""

import re

from bentacars.state.models import ConfidenceTier, ExtractionResult, Slot

# --- vehicle ---

# PH-market model -> body class. Multi-word keys first so "mirage g4" beats "mirage".
# Bare words that collide with places ("city") or plain English ("rush") are brand-qualified.
MODEL_BODY_CLASS: dict[str, str] = {
    "mirage g4": "sedan",
    "honda city": "sedan",
    "toyota rush": "7-seater",
    "d-max": "pickup",
    "br-v": "crossover",
    "hr-v": "crossover",
    "cr-v": "suv",
    "vios": "sedan",
    "civic": "sedan",
    "almera": "sedan",
    "accent": "sedan",
    "altis": "sedan",
    "wigo": "hatchback",
    "brio": "hatchback",
    "mirage": "hatchback",
    "raize": "crossover",
    "coolray": "crossover",
    "creta": "crossover",
    "fortuner": "suv",
    "montero": "suv",
    "everest": "suv",
    "terra": "suv",
    "innova": "mpv",
    "avanza": "mpv",
    "xpander": "mpv",
    "ertiga": "mpv",
    "stargazer": "mpv",
    "veloz": "mpv",
    "hiace": "van",
    "urvan": "van",
    "l300": "van",
    "hilux": "pickup",
    "ranger": "pickup",
    "navara": "pickup",
    "strada": "pickup",
}

MODEL_PATTERNS = [
    (model, body, re.compile(r"(?<![\w-])" + re.escape(model) + r"(?![\w-])"))
    for model, body in MODEL_BODY_CLASS.items()
]

# Fixed preference: seat-count phrasing beats a bare body word
BODY_CLASS_PATTERNS = [
    ("7-seater", re.compile(r"\b(?:7|seven)[\s-]?seaters?\+?(?!\w)")),
    ("5-seater", re.compile(r"\b(?:5|five)[\s-]?seaters?\b")),
    ("pickup", re.compile(r"\bpick[\s-]?ups?\b")),
    ("van", re.compile(r"\bvans?\b")),
    ("mpv", re.compile(r"\bmpvs?\b")),
    ("suv", re.compile(r"\bsuvs?\b")),
    ("crossover", re.compile(r"\bcrossovers?\b")),
    ("hatchback", re.compile(r"\bhatch(?:back)?s?\b")),
    ("sedan", re.compile(r"\bsedans?\b")),
]


def resolve_body_class(text: str) -> tuple[str, str] | None:
    """Lexicon lookup: (model, body_class) for the first known model in text."""
    if not text:
        return None
    for model, body, pat in MODEL_PATTERNS:
        if pat.search(text):
            return model, body
    return None


def extract_vehicle(text: str) -> ExtractionResult | None:
    """Body-class keyword (explicit) wins over a lexicon model (inferred)."""
    for body, pat in BODY_CLASS_PATTERNS:
        m = pat.search(text or "")
        if m:
            return ExtractionResult(Slot.VEHICLE, body, ConfidenceTier.EXPLICIT_THIS_TURN, m.group(0))
    hit = resolve_body_class(text or "")
    if hit:
        model, body = hit
        return ExtractionResult(Slot.VEHICLE, body, ConfidenceTier.INFERRED_THIS_TURN, model)
    return None


# --- payment mode ---

# "cash out" is local usage for the downpayment, so it must never read as cash
CASH_OUT_PATTERN = re.compile(r"\bcash[\s-]?out\b")
CASH_PATTERN = re.compile(r"\b(spot\s+cash|full\s+payment|lump\s?sum|cash)\b")
FINANCING_PATTERN = re.compile(
    r"\b(financing|finance|financed|loan|installment|instalment|hulugan|hulog|monthly|terms|bank)\b"
)
# Weak hints only bias phrasing; they never fill the slot
FINANCING_HINT_PATTERN = re.compile(r"\b(dp|down\s?payment|cash[\s-]?out|amortization|amort)\b")


def extract_payment_mode(text: str) -> ExtractionResult | None:
    """cash | financing. Both synonym sets present -> None (ambiguous, ask instead)."""
    if not text:
        return None
    scrubbed = CASH_OUT_PATTERN.sub(" ", text)
    cash = CASH_PATTERN.search(scrubbed)
    financing = FINANCING_PATTERN.search(scrubbed)
    if cash and financing:
        return None
    if cash:
        return ExtractionResult(Slot.PAYMENT_MODE, "cash", ConfidenceTier.EXPLICIT_THIS_TURN, cash.group(0))
    if financing:
        return ExtractionResult(
            Slot.PAYMENT_MODE, "financing", ConfidenceTier.EXPLICIT_THIS_TURN, financing.group(0)
        )
    return None


def payment_hint(text: str) -> str | None:
    """'financing' when the message only hints at it (dp, cash out, amortization)."""
    if text and FINANCING_HINT_PATTERN.search(text):
        return "financing"
    return None


# --- budget / downpayment ---

AMOUNT_PATTERN = re.compile(
    r"(?<![\w.,])(?:₱|php|p(?=\d))?\s*"
    r"(?P<number>\d{1,3}(?:[,.]\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d+)?)"
    r"\s*(?P<suffix>k|thousand|thou|libo|m|mil|million|milyon)?(?!\w)"
)
THOUSAND_SUFFIXES = {"k", "thousand", "thou", "libo"}
MILLION_SUFFIXES = {"m", "mil", "million", "milyon"}


def _number_value(raw: str, suffixed: bool = False) -> tuple[float, int]:
    """
    (value, integer-part digit count). A separator before exactly 3 digits is a thousands mark,
    except a lone '.' before a k/m suffix, which is a decimal point ('1.250m').
    """
    parts = re.split(r"[,.]", raw)
    lone_decimal = suffixed and len(parts) == 2 and "." in raw
    if len(parts) > 1 and (lone_decimal or len(parts[-1]) != 3):
        whole, fraction = "".join(parts[:-1]), parts[-1]
    else:
        whole, fraction = "".join(parts), ""
    value = float(f"{whole}.{fraction}") if fraction else float(whole)
    return value, len(whole.lstrip("0") or "0")


def parse_amount(text: str) -> int | None:
    """
    First standalone PHP amount in text, as an integer.
    '₱600,000' -> 600000, '600k' -> 600000, '1.2m' -> 1200000, no number -> None.
    """
    if not text:
        return None
    for m in AMOUNT_PATTERN.finditer(text.casefold()):
        suffix = m.group("suffix")
        value, digits = _number_value(m.group("number"), suffixed=bool(suffix))
        if suffix in THOUSAND_SUFFIXES:
            value *= 1_000
        elif suffix in MILLION_SUFFIXES:
            value *= 1_000_000
        min_digits = 1 if suffix else 2
        if not (min_digits <= digits <= 9) or value <= 0:
            continue
        return int(round(value))
    return None


def extract_budget(text: str) -> ExtractionResult | None:
    amount = parse_amount(text)
    if amount is None:
        return None
    return ExtractionResult(Slot.BUDGET_OR_DOWNPAYMENT, amount, ConfidenceTier.EXPLICIT_THIS_TURN)


# --- location (opt-in only) ---

CITY_NAMES: dict[str, str] = {
    "quezon city": "Quezon City",
    "qc": "Quezon City",
    "manila": "Manila",
    "makati": "Makati",
    "pasig": "Pasig",
    "taguig": "Taguig",
    "bgc": "Taguig",
    "mandaluyong": "Mandaluyong",
    "marikina": "Marikina",
    "caloocan": "Caloocan",
    "paranaque": "Parañaque",
    "parañaque": "Parañaque",
    "las pinas": "Las Piñas",
    "las piñas": "Las Piñas",
    "muntinlupa": "Muntinlupa",
    "pasay": "Pasay",
    "valenzuela": "Valenzuela",
    "cavite": "Cavite",
    "laguna": "Laguna",
    "bulacan": "Bulacan",
    "rizal": "Rizal",
    "pampanga": "Pampanga",
    "batangas": "Batangas",
    "cebu": "Cebu",
    "davao": "Davao",
    "iloilo": "Iloilo",
    "bacolod": "Bacolod",
    "cagayan de oro": "Cagayan de Oro",
}

CITY_PATTERNS = [
    (name, re.compile(r"\b" + re.escape(key) + r"\b")) for key, name in CITY_NAMES.items()
]


def extract_location(text: str) -> ExtractionResult | None:
    """Fixed city/province list. Only called when location inference is switched on."""
    if not text:
        return None
    for name, pat in CITY_PATTERNS:
        m = pat.search(text)
        if m:
            return ExtractionResult(Slot.LOCATION, name, ConfidenceTier.INFERRED_THIS_TURN, m.group(0))
    return None


# --- timeline ---

TIMELINE_BUCKETS = [
    ("today", re.compile(r"\b(today|ngayon|ngayong\s+araw|tonight|mamaya)\b")),
    ("this week", re.compile(r"\b(this\s+week|this\s+wk|within\s+the\s+week|ngayong\s+linggo|this\s+weekend)\b")),
    ("next week", re.compile(r"\b(next\s+week|next\s+wk|sa\s+susunod\s+na\s+linggo|next\s+weekend)\b")),
    ("this month", re.compile(r"\b(this\s+month|within\s+the\s+month|ngayong\s+buwan|end\s+of\s+the\s+month)\b")),
    ("next month", re.compile(r"\b(next\s+month|sa\s+susunod\s+na\s+buwan)\b")),
    ("soon", re.compile(r"\b(soon|asap|agad|as\s+soon\s+as\s+possible|urgent)\b")),
]


def extract_timeline(text: str) -> ExtractionResult | None:
    """First bucket in list order wins."""
    if not text:
        return None
    for bucket, pat in TIMELINE_BUCKETS:
        m = pat.search(text)
        if m:
            return ExtractionResult(Slot.TIMELINE, bucket, ConfidenceTier.EXPLICIT_THIS_TURN, m.group(0))
    return None


# --- transmission (optional) ---

TRANSMISSION_PATTERNS = [
    ("automatic", re.compile(r"\b(automatic|a/t|matic|auto\s+trans(?:mission)?)\b")),
    ("manual", re.compile(r"\b(manual|m/t|stick\s+shift)\b")),
]


def extract_transmission(text: str) -> ExtractionResult | None:
    if not text:
        return None
    found = [(name, m) for name, pat in TRANSMISSION_PATTERNS if (m := pat.search(text))]
    if len(found) != 1:
        return None
    name, m = found[0]
    return ExtractionResult(Slot.TRANSMISSION, name, ConfidenceTier.EXPLICIT_THIS_TURN, m.group(0))


# --- reset intent ---

RESET_PATTERN = re.compile(
    r"\b(reset|restart|start\s+again|start\s+over|change\s+unit|palit\s+unit|bagong\s+simula)\b"
)


def detect_reset_intent(text: str) -> bool:
    return bool(text) and bool(RESET_PATTERN.search(text))


def extract_entities(
    text: str,
    *,
    infer_location: bool = False,
) -> dict[Slot, ExtractionResult]:
    """
    Run every extractor over the same normalized text.
    Returns slot -> ExtractionResult for slots that matched.
    """
    results = [
        extract_vehicle(text),
        extract_payment_mode(text),
        extract_budget(text),
        extract_location(text) if infer_location else None,
        extract_timeline(text),
        extract_transmission(text),
    ]
    return {r.slot: r for r in results if r is not None}
