"""
Translation backends - the wire side of the batch client.

A backend turns one list of source strings into one list of translations
with a single remote call. Backends raise `TranslationServiceError` on any
failure; retry, caching and fail-open behavior live in the batch client.

Backends:
- HttpTranslationBackend: generic JSON endpoint (our own API, see phishaware.api)
- GoogleTranslateBackend: Google Cloud Translation v2
- LLMTranslationBackend: DSPy over Gemini / OpenAI / Anthropic
- StaticTranslationBackend: dictionary lookup for tests and offline use
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import dspy
import httpx

from phishaware.config import Settings, get_settings
from phishaware.i18n.errors import TranslationServiceError
from phishaware.i18n.languages import get_language_name

logger = logging.getLogger(__name__)


class TranslationBackend(ABC):
    """A remote (or fake) translation service."""

    name: str = "backend"

    @abstractmethod
    async def translate(self, texts: list[str], source: str, target: str) -> list[str]:
        """
        Translate texts in one call.

        The result is positional. It may be shorter than `texts`; the caller
        falls back to the source text for missing positions.
        """
        pass

    async def aclose(self) -> None:
        pass


# =============================================================================
# HTTP Backends
# =============================================================================


class _HttpBackend(TranslationBackend):
    """Shared httpx plumbing."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        # Injected clients are owned by the caller
        self._client = client

    async def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> Any:
        try:
            if self._client is not None:
                response = await self._client.post(url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(url, json=payload, headers=headers)
        except httpx.TransportError:
            # Retried by the batch client
            raise
        except httpx.HTTPError as e:
            raise TranslationServiceError(f"{self.name} request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"{self.name} returned {response.status_code}: {response.text[:200]}")
            raise TranslationServiceError(
                f"Translation API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TranslationServiceError(f"{self.name} returned invalid JSON") from e


class HttpTranslationBackend(_HttpBackend):
    """
    Generic JSON translation endpoint.

    Request:  {"texts": [...], "targetLanguage": "ur", "sourceLanguage": "en"}
    Response: {"translations": [...]}
    """

    name = "http"

    def __init__(
        self,
        url: str,
        token: str = "",
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(client)
        self.url = url
        self.token = token

    async def translate(self, texts: list[str], source: str, target: str) -> list[str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        data = await self._post(
            self.url,
            {"texts": texts, "targetLanguage": target, "sourceLanguage": source},
            headers,
        )

        translations = data.get("translations") if isinstance(data, dict) else None
        if not isinstance(translations, list):
            raise TranslationServiceError("Invalid translation response")
        return [t if isinstance(t, str) else "" for t in translations]


class GoogleTranslateBackend(_HttpBackend):
    """Google Cloud Translation API v2."""

    name = "google"
    BASE_URL = "https://translation.googleapis.com/language/translate/v2"

    def __init__(self, api_key: str, client: httpx.AsyncClient | None = None):
        super().__init__(client)
        self.api_key = api_key

    async def translate(self, texts: list[str], source: str, target: str) -> list[str]:
        if not self.api_key:
            raise TranslationServiceError("Google Translate API key not configured")

        data = await self._post(
            f"{self.BASE_URL}?key={self.api_key}",
            {"q": texts, "target": target, "source": source, "format": "text"},
            {"Content-Type": "application/json"},
        )

        try:
            translations = data["data"]["translations"]
        except (KeyError, TypeError) as e:
            raise TranslationServiceError("Invalid translation response") from e
        return [t.get("translatedText", "") if isinstance(t, dict) else "" for t in translations]


# =============================================================================
# LLM Backend
# =============================================================================


class TranslateBatch(dspy.Signature):
    """Translate user interface strings for a security awareness training dashboard."""

    texts: list[str] = dspy.InputField(desc="List of texts to translate")
    source_language: str = dspy.InputField(desc="Source language name")
    target_language: str = dspy.InputField(desc="Target language name")
    context: str = dspy.InputField(desc="Shared context for all texts", default="")

    translated_texts: list[str] = dspy.OutputField(desc="List of translated texts in same order")


def get_lm(settings: Settings) -> dspy.LM:
    """Build the DSPy language model for the configured provider."""
    provider = settings.llm_provider

    if provider == "gemini":
        api_key = settings.google_api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GOOGLE_API_KEY or GEMINI_API_KEY not set")
        # Use gemini/ prefix for litellm
        return dspy.LM(model=f"gemini/{settings.gemini_model}", api_key=api_key)

    elif provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY not set")
        return dspy.LM(model=f"openai/{settings.openai_model}", api_key=settings.openai_api_key)

    elif provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")
        return dspy.LM(
            model=f"anthropic/{settings.anthropic_model}",
            api_key=settings.anthropic_api_key,
        )

    else:
        raise ValueError(f"Unknown provider: {provider}")


class LLMTranslationBackend(TranslationBackend):
    """Translate with an LLM through DSPy."""

    name = "llm"

    def __init__(
        self,
        settings: Settings | None = None,
        context: str = "phishing awareness training dashboard",
    ):
        self.settings = settings or get_settings()
        self.context = context
        self._lm: dspy.LM | None = None
        self._module: dspy.Predict | None = None

    @property
    def module(self) -> dspy.Predict:
        if self._module is None:
            self._lm = get_lm(self.settings)
            self._module = dspy.Predict(TranslateBatch)
        return self._module

    async def translate(self, texts: list[str], source: str, target: str) -> list[str]:
        module = self.module

        def run():
            with dspy.context(lm=self._lm):
                return module(
                    texts=texts,
                    source_language=get_language_name(source),
                    target_language=get_language_name(target),
                    context=self.context,
                )

        try:
            result = await asyncio.get_running_loop().run_in_executor(None, run)
        except Exception as e:
            raise TranslationServiceError(f"LLM translation failed: {e}") from e

        return [str(t).strip() for t in (result.translated_texts or [])]


# =============================================================================
# Static Backend
# =============================================================================


class StaticTranslationBackend(TranslationBackend):
    """
    Dictionary-backed backend.

    `catalog` maps language -> {source_text: translation}. Unknown strings
    come back as empty strings, which the client treats as untranslated.
    """

    name = "static"

    def __init__(self, catalog: dict[str, dict[str, str]] | None = None):
        self.catalog = catalog or {}
        self.calls: list[tuple[list[str], str]] = []

    async def translate(self, texts: list[str], source: str, target: str) -> list[str]:
        self.calls.append((list(texts), target))
        table = self.catalog.get(target, {})
        return [table.get(text, "") for text in texts]


# =============================================================================
# Factory
# =============================================================================


def create_backend(
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    kind: str | None = None,
) -> TranslationBackend:
    """Create the backend selected by `kind` (default TRANSLATION_BACKEND)."""
    settings = settings or get_settings()
    kind = (kind or settings.translation_backend).lower()

    if kind == "http":
        return HttpTranslationBackend(
            settings.translation_api_url,
            token=settings.translation_api_token,
            client=client,
        )
    elif kind == "google":
        return GoogleTranslateBackend(settings.google_translate_api_key, client=client)
    elif kind == "llm":
        return LLMTranslationBackend(settings)
    elif kind == "static":
        return StaticTranslationBackend()
    else:
        raise ValueError(f"Unknown translation backend: {kind}")
