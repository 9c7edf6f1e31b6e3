"""
FastAPI application serving the translation endpoint.

The dashboard's HttpTranslationBackend talks to POST /translate/batch.
Behind it sits a server-side BatchTranslateClient, so the server caches
and coalesces too: a string is sent to the upstream service once no matter
how many browsers ask for it.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from phishaware.config import get_settings
from phishaware.i18n.backends import create_backend
from phishaware.i18n.client import BatchTranslateClient
from phishaware.i18n.languages import (
    SUPPORTED_LANGUAGES,
    get_language_by_code,
    get_language_name,
    get_native_name,
    is_rtl,
)
from phishaware.i18n.store import TranslationStore

logger = logging.getLogger(__name__)


# =============================================================================
# App State
# =============================================================================


class AppState:
    """Application state - initialized at startup."""

    store: TranslationStore
    client: BatchTranslateClient


state = AppState()


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings = get_settings()

    from phishaware.integrations.sentry import init_sentry, set_tag
    init_sentry()

    state.store = TranslationStore()
    if settings.translation_cache_file:
        state.store.load(
            settings.translation_cache_file,
            expiry_days=settings.translation_cache_expiry_days,
        )

    backend = create_backend(settings, kind=settings.api_translation_backend)
    set_tag("translation_backend", backend.name)
    state.client = BatchTranslateClient.from_settings(
        settings, store=state.store, backend=backend
    )

    logger.info(
        f"Translation API starting in {settings.environment} mode "
        f"(backend: {backend.name}, {len(state.store)} cached)"
    )

    yield

    if settings.translation_cache_file:
        state.store.save(settings.translation_cache_file)
    await state.client.aclose()
    logger.info("Translation API shutting down")


# =============================================================================
# App Setup
# =============================================================================


app = FastAPI(
    title="Phish-Aware Translation API",
    description="Cached, batched UI translation for the awareness training dashboard",
    version="0.1.0",
    lifespan=lifespan,
)


# CORS
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Dependencies
# =============================================================================


def get_translate_client() -> BatchTranslateClient:
    return state.client


def _require_language(code: str) -> str:
    lang = get_language_by_code(code)
    if lang is None:
        valid_codes = [supported.value for supported in SUPPORTED_LANGUAGES]
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported language: {code}. Supported: {valid_codes}",
        )
    return lang.value


# =============================================================================
# Request/Response Models
# =============================================================================


class BatchTranslateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    texts: list[str]
    target_language: str = Field(alias="targetLanguage")
    source_language: str = Field(default="en", alias="sourceLanguage")


class BatchTranslateResponse(BaseModel):
    translations: list[str]


class TranslateRequest(BaseModel):
    text: str
    target_language: str
    source_language: str = "en"


# =============================================================================
# Health
# =============================================================================


@app.get("/health")
async def health():
    return {"status": "ok"}


# =============================================================================
# Translation
# =============================================================================


@app.post("/translate/batch", response_model=BatchTranslateResponse)
async def translate_batch(
    request: BatchTranslateRequest,
    client: BatchTranslateClient = Depends(get_translate_client),
):
    """
    Translate a batch of UI strings.

    Translations come back in request order, one per input. Strings the
    upstream service could not translate are returned unchanged.
    """
    target = _require_language(request.target_language)
    source = _require_language(request.source_language)

    if source != client.source_language:
        raise HTTPException(
            status_code=400,
            detail=f"Source language must be {client.source_language}",
        )

    translations = await client.translate_batch(request.texts, target)
    return BatchTranslateResponse(translations=translations)


@app.post("/translate")
async def translate_text(
    request: TranslateRequest,
    client: BatchTranslateClient = Depends(get_translate_client),
):
    """Translate a single string."""
    target = _require_language(request.target_language)

    translated = await client.translate_one(request.text, target)

    return {
        "original": request.text,
        "translated": translated,
        "source_language": request.source_language,
        "target_language": target,
        "target_language_name": get_language_name(target),
    }


@app.get("/languages")
async def list_languages():
    """List all supported languages for translation."""
    return {
        "languages": [
            {
                "code": lang.value,
                "name": get_language_name(lang.value),
                "native_name": get_native_name(lang.value),
                "rtl": is_rtl(lang.value),
            }
            for lang in SUPPORTED_LANGUAGES
        ]
    }
