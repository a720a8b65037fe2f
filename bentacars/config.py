import os
from dataclasses import dataclass

from pydantic import BaseModel, Field

from bentacars.state.models import GATING_SLOTS, Slot

DEFAULT_FORBIDDEN_TERMS = ("segment", "target monthly")


class EngineConfig(BaseModel):
    """
    Everything the engine is allowed to depend on, passed in explicitly.
    Deployments differ only here, never in code.
    """

    priority: tuple[Slot, ...] = GATING_SLOTS
    required_slots: frozenset[Slot] = Field(default_factory=lambda: frozenset(GATING_SLOTS))
    # Treat location as a soft ask: all other required slots known -> COMPLETE
    location_optional_when_ready: bool = False
    # Off by default: place names collide with model/brand words
    infer_location_from_text: bool = False
    forbidden_terms: tuple[str, ...] = DEFAULT_FORBIDDEN_TERMS
    phrasing_timeout_seconds: float = 4.0
    max_reply_chars: int = 320

    model_config = {"frozen": True}


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Environment-derived settings for the HTTP app and the optional phrasing model."""

    openai_api_key: str
    openai_chat_model: str
    use_phrasing: bool
    phrasing_timeout_seconds: float
    location_optional_when_ready: bool
    infer_location_from_text: bool
    forbidden_terms: tuple[str, ...]
    log_level: str

    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            location_optional_when_ready=self.location_optional_when_ready,
            infer_location_from_text=self.infer_location_from_text,
            forbidden_terms=self.forbidden_terms,
            phrasing_timeout_seconds=self.phrasing_timeout_seconds,
        )


def load_settings() -> Settings:
    """Read environment variables (after .env is loaded). Invalid numbers raise ValueError."""
    terms_raw = os.getenv("FORBIDDEN_TERMS")
    if terms_raw:
        forbidden = tuple(t.strip().lower() for t in terms_raw.split(",") if t.strip())
    else:
        forbidden = DEFAULT_FORBIDDEN_TERMS
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_chat_model=os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini"),
        use_phrasing=_env_flag("USE_PHRASING"),
        phrasing_timeout_seconds=float(os.getenv("PHRASING_TIMEOUT_SECONDS", "4.0")),
        location_optional_when_ready=_env_flag("LOCATION_OPTIONAL_WHEN_READY"),
        infer_location_from_text=_env_flag("INFER_LOCATION_FROM_TEXT"),
        forbidden_terms=forbidden,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
