"""
Batch translate client.

Turns lists of source strings into cache entries with as few network calls
as possible:

1. The source language is identity - no call at all
2. Duplicates are collapsed, cached strings are skipped
3. Strings already in flight are awaited, not requested again
4. Everything left goes out in one backend call (chunked if very large)
5. Results come back in the caller's order, duplicates included

Any failure falls back to the source text. Nothing raised by a backend
ever reaches the caller.

Usage:
    client = BatchTranslateClient(backend, store)
    await client.translate_batch(["Email", "WhatsApp", "Email"], "ur")
    # -> ["ای میل", "واٹس ایپ", "ای میل"]
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from phishaware.config import Settings, get_settings
from phishaware.i18n.backends import TranslationBackend, create_backend
from phishaware.i18n.languages import normalize_language_code
from phishaware.i18n.store import TranslationStore
from phishaware.integrations.sentry import capture_exception

logger = logging.getLogger(__name__)

# Worth another attempt; anything else fails the batch immediately
RETRYABLE_ERRORS = (httpx.TransportError, asyncio.TimeoutError)


class BatchTranslateClient:
    """
    Deduplicating, coalescing batch translator.

    In-flight translations are tracked as one future per
    (source_text, language). A future resolves to the translation, or to
    None when the service had nothing usable for that string. Futures are
    removed from the pending map as soon as they settle, so a failed string
    is requested again by the next caller.
    """

    def __init__(
        self,
        backend: TranslationBackend,
        store: TranslationStore | None = None,
        source_language: str = "en",
        timeout: float = 10.0,
        max_attempts: int = 3,
        batch_size: int = 100,
        retry_wait_max: float = 4.0,
        snapshot_path: str = "",
    ):
        self.backend = backend
        self.store = store if store is not None else TranslationStore()
        self.source_language = normalize_language_code(source_language)
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.batch_size = max(1, batch_size)
        self.retry_wait_max = retry_wait_max
        # Saved after every chunk that adds translations; empty disables
        self.snapshot_path = snapshot_path

        self._pending: dict[tuple[str, str], asyncio.Future] = {}

        # Backend calls made; each retry attempt counts
        self.request_count = 0
        self.failure_count = 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        store: TranslationStore | None = None,
        backend: TranslationBackend | None = None,
    ) -> BatchTranslateClient:
        settings = settings or get_settings()
        return cls(
            backend or create_backend(settings),
            store=store,
            source_language=settings.source_language,
            timeout=settings.translation_timeout,
            max_attempts=settings.translation_max_attempts,
            batch_size=settings.translation_batch_size,
            snapshot_path=settings.translation_cache_file,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def is_source(self, language: str) -> bool:
        return normalize_language_code(language) == self.source_language

    def is_cached(self, text: str, language: str) -> bool:
        return self.store.has(text, normalize_language_code(language))

    def is_pending(self, text: str, language: str) -> bool:
        return (text, normalize_language_code(language)) in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # =========================================================================
    # Translation
    # =========================================================================

    async def translate_one(self, text: str, language: str) -> str:
        """Translate a single string."""
        return (await self.translate_batch([text], language))[0]

    async def translate_batch(self, texts: list[str], language: str) -> list[str]:
        """
        Translate texts into `language`.

        Always resolves to a list the same length and order as `texts`.
        Strings without a translation come back unchanged.
        """
        language = normalize_language_code(language)
        if language == self.source_language or not texts:
            return list(texts)

        waiting: dict[str, asyncio.Future] = {}
        to_fetch: list[str] = []

        for text in dict.fromkeys(texts):
            if not text or not text.strip():
                continue
            if self.store.has(text, language):
                continue
            in_flight = self._pending.get((text, language))
            if in_flight is not None:
                waiting[text] = in_flight
            else:
                to_fetch.append(text)

        resolved: dict[str, str | None] = {}

        if to_fetch:
            logger.debug(
                f"Translating {len(to_fetch)} texts to {language} "
                f"({len(waiting)} already in flight)"
            )
            resolved.update(await self._fetch(to_fetch, language))
        elif not waiting:
            logger.debug(f"Cache hit for all {len(texts)} texts ({language})")

        if waiting:
            # Shielded so one caller's cancellation can't cancel a shared future
            results = await asyncio.gather(
                *(asyncio.shield(fut) for fut in waiting.values())
            )
            resolved.update(zip(waiting.keys(), results))

        return [self._lookup(text, language, resolved) for text in texts]

    def _lookup(self, text: str, language: str, resolved: dict[str, str | None]) -> str:
        if not text or not text.strip():
            return text
        cached = self.store.get(text, language)
        if cached is not None:
            return cached
        return resolved.get(text) or text

    async def _fetch(self, texts: list[str], language: str) -> dict[str, str | None]:
        """Request texts we own, settling their futures whatever happens."""
        loop = asyncio.get_running_loop()
        owned: dict[str, asyncio.Future] = {}
        for text in texts:
            future = loop.create_future()
            self._pending[(text, language)] = future
            owned[text] = future

        results: dict[str, str | None] = {}
        try:
            for start in range(0, len(texts), self.batch_size):
                chunk = texts[start:start + self.batch_size]
                for text, translation in (await self._translate_chunk(chunk, language)).items():
                    results[text] = translation
                    owned[text].set_result(translation)
        finally:
            for text, future in owned.items():
                if not future.done():
                    future.set_result(None)
                if self._pending.get((text, language)) is future:
                    del self._pending[(text, language)]

        return results

    async def _translate_chunk(self, chunk: list[str], language: str) -> dict[str, str | None]:
        """One backend call. Fails open to None for every string."""
        try:
            translations = await self._call_backend(chunk, language)
        except Exception as e:
            self.failure_count += 1
            logger.warning(
                f"Batch translation failed ({len(chunk)} texts -> {language}): "
                f"{type(e).__name__}: {e}"
            )
            capture_exception(e, language=language, texts=len(chunk))
            return {text: None for text in chunk}

        if len(translations) < len(chunk):
            logger.warning(
                f"Translation service returned {len(translations)} results "
                f"for {len(chunk)} texts ({language})"
            )

        results: dict[str, str | None] = {}
        for i, text in enumerate(chunk):
            translation = translations[i] if i < len(translations) else None
            if translation and translation.strip():
                self.store.set(text, language, translation)
                results[text] = translation
            else:
                results[text] = None

        if self.snapshot_path and any(results.values()):
            self.store.save(self.snapshot_path)
        return results

    async def _call_backend(self, chunk: list[str], language: str) -> list[str]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.5, max=self.retry_wait_max),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        ):
            with attempt:
                self.request_count += 1
                return await asyncio.wait_for(
                    self.backend.translate(chunk, self.source_language, language),
                    timeout=self.timeout,
                )
        return []

    async def aclose(self) -> None:
        await self.backend.aclose()
