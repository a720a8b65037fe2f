"""
Optional phrasing generator backed by LangChain. Restyles a reply whose content is already
decided (which slot, which known facts). Never consulted for slot values.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


@dataclass
class PhrasingRequest:
    step: str  # slot name or "complete"
    topic: str = ""  # what the question is about, in buyer words
    known_context: dict[str, Any] = field(default_factory=dict)
    tone: str = "neutral"
    scripted_text: str = ""  # the deterministic reply; the content to restyle
    forbidden_terms: tuple[str, ...] = ()


class PhrasingGenerator(Protocol):
    def generate(self, request: PhrasingRequest) -> str: ...


SYSTEM_PROMPT = """You are BentaCars' trusted car consultant. Speak like a real Filipino sales pro:
- Natural Taglish, casual and friendly, short sentences. Sound human, not robotic.
- Match the buyer's mood: upbeat if they're excited, calm and reassuring if frustrated or confused.
- You are given a draft reply. Rephrase it in your own words WITHOUT changing what it asks or says.
- Ask at most ONE question, and only about the same thing the draft asks about.
- Never suggest, list or name specific cars or units. Never invent prices, amounts or places.
- Return only the reply text: no quotes, no lists, no explanations."""


def _build_user_prompt(request: PhrasingRequest) -> str:
    forbidden = ", ".join(f'"{t}"' for t in request.forbidden_terms) or "none"
    return (
        f"Step: {request.step}\n"
        f"Asking about: {request.topic or 'nothing, just acknowledge'}\n"
        f"Known info: {json.dumps(request.known_context, ensure_ascii=False)}\n"
        f"Buyer mood: {request.tone}\n"
        f"Never use these words: {forbidden}\n"
        f'Draft reply: "{request.scripted_text}"'
    )


class LangChainPhrasingGenerator:
    """ChatOpenAI (gpt-4o-mini by default). Raises on any failure; the composer falls back."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 4.0):
        from langchain_openai import ChatOpenAI

        self._chat = ChatOpenAI(
            model=model,
            temperature=0.3,
            api_key=api_key,
            timeout=timeout,
            max_retries=0,
        )

    def generate(self, request: PhrasingRequest) -> str:
        from langchain_core.messages import HumanMessage, SystemMessage

        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=_build_user_prompt(request)),
        ]
        response = self._chat.invoke(messages)
        content = getattr(response, "content", None)
        if not isinstance(content, str):
            raise ValueError("phrasing model returned non-text content")
        return content.strip()


def build_phrasing_generator(
    api_key: str,
    model: str,
    timeout: float,
    enabled: bool = True,
) -> PhrasingGenerator | None:
    """None when disabled, keyless or LangChain is missing: the engine then stays fully scripted."""
    if not enabled or not api_key:
        return None
    try:
        return LangChainPhrasingGenerator(api_key=api_key, model=model, timeout=timeout)
    except ImportError:
        logger.warning("langchain-openai not installed; phrasing generator disabled")
        return None
