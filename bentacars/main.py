"""BentaCars buyer qualification — chat API entrypoint."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")

from fastapi import FastAPI

from bentacars.config import load_settings
from bentacars.live.llm_chat import build_phrasing_generator
from bentacars.live.router import router as chat_router

settings = load_settings()

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.engine_config = settings.engine_config()
    app.state.phrasing_generator = build_phrasing_generator(
        api_key=settings.openai_api_key,
        model=settings.openai_chat_model,
        timeout=settings.phrasing_timeout_seconds,
        enabled=settings.use_phrasing,
    )
    yield


app = FastAPI(
    title="BentaCars Qualification API",
    description="Buyer message + slot memory → next clarifying question + updated slots",
    lifespan=lifespan,
)
app.include_router(chat_router)


@app.get("/health")
def health():
    return {"status": "ok"}
