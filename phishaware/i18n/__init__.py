"""
Internationalization - cached, batched UI translation.

Design:
1. One process-wide store keyed by (source text, language)
2. Pages warm the store in one batch before rendering (pre_translate)
3. t() renders from the store and never waits or fails
4. Concurrent requests for the same string share one network call
5. Any service failure falls back to the English source text

Usage:
    from phishaware.i18n import get_context

    context = get_context()
    context.set_language("ur")

    await context.pre_translate(["Email", "WhatsApp"])
    context.t("Email")                   # -> "ای میل"
    await context.t_async("Leaderboards")  # fetched on a miss
"""

from phishaware.i18n.store import TranslationStore, CacheEntry
from phishaware.i18n.client import BatchTranslateClient
from phishaware.i18n.backends import (
    TranslationBackend,
    HttpTranslationBackend,
    GoogleTranslateBackend,
    LLMTranslationBackend,
    StaticTranslationBackend,
    create_backend,
)
from phishaware.i18n.context import (
    TranslationContext,
    TranslatedPage,
    ReadinessState,
    get_context,
    reset_context,
    t,
    t_async,
    pre_translate,
)
from phishaware.i18n.document import (
    ENTITY_FIELDS,
    extract_translatable,
    rehydrate,
    translate_fields,
    translate_entities,
    collector,
)
from phishaware.i18n.errors import (
    TranslationError,
    TranslationServiceError,
    UnsupportedLanguageError,
)
from phishaware.i18n.languages import (
    Language,
    SUPPORTED_LANGUAGES,
    WARM_UP_LANGUAGES,
    RTL_LANGUAGES,
    get_language_name,
    normalize_language_code,
    is_rtl,
)
from phishaware.i18n.warmup import (
    warm_translation_cache,
    warm_single_language,
)

__all__ = [
    # Cache & client
    "TranslationStore",
    "CacheEntry",
    "BatchTranslateClient",
    # Backends
    "TranslationBackend",
    "HttpTranslationBackend",
    "GoogleTranslateBackend",
    "LLMTranslationBackend",
    "StaticTranslationBackend",
    "create_backend",
    # Page-facing API
    "TranslationContext",
    "TranslatedPage",
    "ReadinessState",
    "get_context",
    "reset_context",
    "t",
    "t_async",
    "pre_translate",
    # Document-level
    "ENTITY_FIELDS",
    "extract_translatable",
    "rehydrate",
    "translate_fields",
    "translate_entities",
    "collector",
    # Errors
    "TranslationError",
    "TranslationServiceError",
    "UnsupportedLanguageError",
    # Cache warming
    "warm_translation_cache",
    "warm_single_language",
    # Language utilities
    "Language",
    "SUPPORTED_LANGUAGES",
    "WARM_UP_LANGUAGES",
    "RTL_LANGUAGES",
    "get_language_name",
    "normalize_language_code",
    "is_rtl",
]
