"""
Translation context - the page-facing API.

A TranslationContext holds the current language and exposes:

- t(text): synchronous, cache only, never raises, falls back to `text`
- t_async(text): awaits a translation (one shared round-trip on a miss)
- pre_translate(texts): warms the cache for a whole page in one batch

Pages gate their render on a TranslatedPage, which re-collects the page's
strings and re-warms the cache on every language change:

    context = get_context()
    page = context.page(lambda: ["Email", "WhatsApp", *course_titles])
    await page.prepare()
    if page.translation_ready:
        render(context.t("Email"))
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Iterable

from phishaware.config import Settings, get_settings
from phishaware.i18n.client import BatchTranslateClient
from phishaware.i18n.errors import UnsupportedLanguageError
from phishaware.i18n.languages import (
    get_language_by_code,
    is_rtl,
    normalize_language_code,
)
from phishaware.i18n.store import TranslationStore

logger = logging.getLogger(__name__)

LanguageListener = Callable[[str], None]
TextCollector = Callable[[], "Iterable[str] | Awaitable[Iterable[str]]"]


class TranslationContext:
    """Current language plus translation lookups against the shared store."""

    def __init__(
        self,
        client: BatchTranslateClient,
        language: str | None = None,
        background_fetch_on_miss: bool = False,
        preference_file: str = "",
    ):
        self.client = client
        self.background_fetch_on_miss = background_fetch_on_miss
        self.preference_file = preference_file
        self._language = self._validate(language or client.source_language)
        self._listeners: list[LanguageListener] = []
        self._background: set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        store: TranslationStore | None = None,
    ) -> TranslationContext:
        settings = settings or get_settings()
        language = settings.default_language
        if settings.language_preference_file:
            language = load_language_preference(settings.language_preference_file) or language
        return cls(
            BatchTranslateClient.from_settings(settings, store=store),
            language=language,
            background_fetch_on_miss=settings.background_fetch_on_miss,
            preference_file=settings.language_preference_file,
        )

    # =========================================================================
    # Language
    # =========================================================================

    @property
    def language(self) -> str:
        return self._language

    @property
    def store(self) -> TranslationStore:
        return self.client.store

    @property
    def is_source_language(self) -> bool:
        return self.client.is_source(self._language)

    @property
    def is_rtl(self) -> bool:
        return is_rtl(self._language)

    def set_language(self, code: str) -> None:
        """
        Switch language and notify subscribers.

        The cache is kept, so switching back is instant.
        """
        language = self._validate(code)
        if language == self._language:
            return

        self._language = language
        logger.debug(f"Language changed to {language}")
        if self.preference_file:
            save_language_preference(self.preference_file, language)
        for listener in list(self._listeners):
            listener(language)

    def subscribe(self, listener: LanguageListener) -> Callable[[], None]:
        """Call `listener(language)` on every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @staticmethod
    def _validate(code: str) -> str:
        lang = get_language_by_code(code)
        if lang is None:
            raise UnsupportedLanguageError(code)
        return lang.value

    # =========================================================================
    # Lookups
    # =========================================================================

    def t(self, text: str) -> str:
        """Translate from cache, or return `text` unchanged."""
        if not text or self.is_source_language:
            return text

        cached = self.store.get(text, self._language)
        if cached is not None:
            return cached

        if self.background_fetch_on_miss and not self.client.is_pending(text, self._language):
            self._fetch_in_background(text, self._language)
        return text

    async def t_async(self, text: str) -> str:
        """Translate, fetching on a cache miss."""
        if not text or self.is_source_language:
            return text

        cached = self.store.get(text, self._language)
        if cached is not None:
            return cached
        return await self.client.translate_one(text, self._language)

    async def pre_translate(self, texts: Iterable[str]) -> None:
        """Warm the cache for `texts` in the current language."""
        if self.is_source_language:
            return
        texts = list(texts)
        if texts:
            await self.client.translate_batch(texts, self._language)

    def _fetch_in_background(self, text: str, language: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller); the miss is answered by pre_translate later
            return
        task = loop.create_task(self.client.translate_batch([text], language))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def page(self, collect: TextCollector) -> TranslatedPage:
        """Create a readiness tracker for one page."""
        return TranslatedPage(self, collect)


# =============================================================================
# Language Preference
# =============================================================================


def load_language_preference(path: Path | str) -> str | None:
    """Read the saved language, or None if there is no usable one."""
    path = Path(path)
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read language preference from {path}: {e}")
        return None

    code = data.get("language") if isinstance(data, dict) else None
    lang = get_language_by_code(code) if isinstance(code, str) else None
    return lang.value if lang else None


def save_language_preference(path: Path | str, language: str) -> bool:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"language": language}), encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to save language preference to {path}: {e}")
        return False
    return True


# =============================================================================
# Page Readiness
# =============================================================================


class ReadinessState(str, Enum):
    NOT_READY = "not_ready"
    READY = "ready"


class TranslatedPage:
    """
    Translation readiness for one page.

    NOT_READY -> (pre-translate in flight) -> READY, re-entered on every
    language change. `collect` returns every string the page will render,
    including dynamically fetched content, so nothing is shown before it
    has been translated.

    Completions that belong to an older language, or arrive after close(),
    only populate the shared store; the page's own state is left alone.
    """

    def __init__(self, context: TranslationContext, collect: TextCollector):
        self.context = context
        self._collect = collect
        self._generation = 0
        self._closed = False
        self._task: asyncio.Task | None = None
        self.state = (
            ReadinessState.READY if context.is_source_language else ReadinessState.NOT_READY
        )
        self._unsubscribe = context.subscribe(self._on_language_change)

    @property
    def translation_ready(self) -> bool:
        return self.state == ReadinessState.READY

    @property
    def closed(self) -> bool:
        return self._closed

    def t(self, text: str) -> str:
        return self.context.t(text)

    async def prepare(self) -> bool:
        """
        Collect the page's strings and warm the cache.

        Returns True if this call left the page READY.
        """
        self._generation += 1
        generation = self._generation
        language = self.context.language

        if self.context.is_source_language:
            self.state = ReadinessState.READY
            return True

        self.state = ReadinessState.NOT_READY

        texts = self._collect()
        if inspect.isawaitable(texts):
            texts = await texts

        await self.context.client.translate_batch(list(texts), language)

        if self._closed or generation != self._generation:
            return False

        self.state = ReadinessState.READY
        return True

    def _on_language_change(self, language: str) -> None:
        if self._closed:
            return

        if self.context.is_source_language:
            self._generation += 1
            self.state = ReadinessState.READY
            return

        self.state = ReadinessState.NOT_READY
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Caller runs prepare() itself
            return
        self._task = loop.create_task(self._prepare_logged())

    async def _prepare_logged(self) -> None:
        try:
            await self.prepare()
        except Exception:
            logger.exception("Failed to collect page strings for translation")

    async def wait_ready(self) -> bool:
        """Wait for a prepare() started by a language change."""
        if self._task is not None and not self._task.done():
            await asyncio.shield(self._task)
        return self.translation_ready

    def close(self) -> None:
        """Detach from the context (page unmounted)."""
        self._closed = True
        self._unsubscribe()


# =============================================================================
# Module-level convenience functions
# =============================================================================


_context: TranslationContext | None = None


def get_context(settings: Settings | None = None) -> TranslationContext:
    """Get or create the process-wide translation context."""
    global _context
    if _context is None:
        settings = settings or get_settings()
        store = TranslationStore()
        if settings.translation_cache_file:
            store.load(
                settings.translation_cache_file,
                expiry_days=settings.translation_cache_expiry_days,
            )
        _context = TranslationContext.from_settings(settings, store=store)
    return _context


def reset_context() -> None:
    """Drop the process-wide context (tests, full reload)."""
    global _context
    _context = None


def t(text: str) -> str:
    """Translate from cache (convenience function)."""
    return get_context().t(text)


async def t_async(text: str) -> str:
    """Translate, fetching on a miss (convenience function)."""
    return await get_context().t_async(text)


async def pre_translate(texts: Iterable[str]) -> None:
    """Warm the cache (convenience function)."""
    await get_context().pre_translate(texts)
