"""
Tests for the page-facing translation API and page readiness.
"""

import asyncio
import json

import pytest
from phishaware.config import Settings
from phishaware.i18n.backends import StaticTranslationBackend, TranslationBackend
from phishaware.i18n.client import BatchTranslateClient
from phishaware.i18n.context import (
    ReadinessState,
    TranslationContext,
    get_context,
    load_language_preference,
    reset_context,
)
from phishaware.i18n.errors import TranslationServiceError, UnsupportedLanguageError
from phishaware.i18n.store import TranslationStore


URDU = {
    "Email": "ای میل",
    "WhatsApp": "واٹس ایپ",
    "Leaderboards": "لیڈر بورڈز",
    "Introduction to Phishing": "فشنگ کا تعارف",
}


class GatedBackend(TranslationBackend):
    """Blocks every call until `gate` is set."""

    def __init__(self):
        self.gate = asyncio.Event()
        self.calls = []

    async def translate(self, texts, source, target):
        self.calls.append((list(texts), target))
        await self.gate.wait()
        return [f"[{target}] {t}" for t in texts]


class FailingBackend(TranslationBackend):
    async def translate(self, texts, source, target):
        raise TranslationServiceError("service unavailable")


@pytest.fixture
def backend():
    return StaticTranslationBackend({"ur": URDU})


@pytest.fixture
def context(backend):
    """Context already switched to Urdu."""
    ctx = TranslationContext(BatchTranslateClient(backend, max_attempts=1))
    ctx.set_language("ur")
    return ctx


async def _settle(steps=20):
    for _ in range(steps):
        await asyncio.sleep(0)


# =============================================================================
# Lookups
# =============================================================================


class TestLookups:
    def test_miss_returns_source_text(self, context, backend):
        assert context.t("Email") == "Email"
        assert backend.calls == []

    def test_empty_text(self, context):
        assert context.t("") == ""

    @pytest.mark.asyncio
    async def test_source_language_identity(self, backend):
        ctx = TranslationContext(BatchTranslateClient(backend))

        assert ctx.language == "en"
        assert ctx.t("Email") == "Email"
        assert await ctx.t_async("Email") == "Email"
        await ctx.pre_translate(["Email"])
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_pre_translate_then_t(self, context, backend):
        await context.pre_translate(["Email", "WhatsApp"])

        assert context.t("Email") == "ای میل"
        assert context.t("WhatsApp") == "واٹس ایپ"
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_pre_translate_is_idempotent(self, context, backend):
        await context.pre_translate(["Email", "WhatsApp"])
        await context.pre_translate(["Email", "WhatsApp"])

        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_t_async_fetches_on_miss(self, context, backend):
        assert await context.t_async("Leaderboards") == "لیڈر بورڈز"
        assert await context.t_async("Leaderboards") == "لیڈر بورڈز"
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_concurrent_t_async_share_one_request(self):
        backend = GatedBackend()
        ctx = TranslationContext(BatchTranslateClient(backend), language="ur")

        first = asyncio.create_task(ctx.t_async("Certificates"))
        second = asyncio.create_task(ctx.t_async("Certificates"))
        await _settle()
        backend.gate.set()

        assert await first == await second == "[ur] Certificates"
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_failures_never_raise(self):
        ctx = TranslationContext(
            BatchTranslateClient(FailingBackend(), max_attempts=1), language="ur"
        )

        await ctx.pre_translate(["Email"])
        assert await ctx.t_async("Email") == "Email"
        assert ctx.t("Email") == "Email"

    @pytest.mark.asyncio
    async def test_background_fetch_on_miss(self, backend):
        ctx = TranslationContext(
            BatchTranslateClient(backend), language="ur", background_fetch_on_miss=True
        )

        assert ctx.t("Email") == "Email"
        await _settle()
        assert ctx.t("Email") == "ای میل"

    def test_background_fetch_without_loop(self, backend):
        ctx = TranslationContext(
            BatchTranslateClient(backend), language="ur", background_fetch_on_miss=True
        )

        assert ctx.t("Email") == "Email"
        assert backend.calls == []


# =============================================================================
# Language
# =============================================================================


class TestLanguage:
    @pytest.mark.asyncio
    async def test_switching_keeps_cache(self, context, backend):
        await context.pre_translate(["Email"])

        context.set_language("en")
        assert context.t("Email") == "Email"

        context.set_language("ur")
        assert context.t("Email") == "ای میل"
        assert len(backend.calls) == 1

    def test_unsupported_language(self, context):
        with pytest.raises(UnsupportedLanguageError):
            context.set_language("klingon")
        assert context.language == "ur"

    def test_language_names_are_normalized(self, context):
        context.set_language("English")
        assert context.language == "en"

    def test_listeners(self, context):
        seen = []
        unsubscribe = context.subscribe(seen.append)

        context.set_language("en")
        context.set_language("en")
        unsubscribe()
        context.set_language("ur")

        assert seen == ["en"]

    def test_rtl(self, context):
        assert context.is_rtl
        context.set_language("en")
        assert not context.is_rtl


class TestLanguagePreference:
    def test_choice_survives_restart(self, tmp_path):
        settings = Settings(
            translation_backend="static",
            language_preference_file=str(tmp_path / "language.json"),
        )

        first = TranslationContext.from_settings(settings)
        assert first.language == "en"
        first.set_language("Urdu")

        second = TranslationContext.from_settings(settings)
        assert second.language == "ur"
        assert load_language_preference(tmp_path / "language.json") == "ur"

    def test_unusable_preference_falls_back_to_default(self, tmp_path):
        preference = tmp_path / "language.json"
        settings = Settings(
            translation_backend="static",
            default_language="hi",
            language_preference_file=str(preference),
        )

        preference.write_text("{not json", encoding="utf-8")
        assert TranslationContext.from_settings(settings).language == "hi"

        preference.write_text(json.dumps({"language": "klingon"}), encoding="utf-8")
        assert TranslationContext.from_settings(settings).language == "hi"


# =============================================================================
# Page Readiness
# =============================================================================


class TestTranslatedPage:
    def test_ready_immediately_in_source_language(self, backend):
        ctx = TranslationContext(BatchTranslateClient(backend))
        page = ctx.page(lambda: ["Email"])

        assert page.translation_ready

    @pytest.mark.asyncio
    async def test_prepare_warms_cache(self, context, backend):
        page = context.page(lambda: ["Email", "WhatsApp"])
        assert page.state == ReadinessState.NOT_READY

        assert await page.prepare()
        assert page.translation_ready
        assert page.t("WhatsApp") == "واٹس ایپ"

    @pytest.mark.asyncio
    async def test_async_collector_with_dynamic_content(self, context, backend):
        async def collect():
            courses = [{"title": "Introduction to Phishing"}]
            return ["Email", *[c["title"] for c in courses]]

        page = context.page(collect)
        await page.prepare()

        assert page.t("Introduction to Phishing") == "فشنگ کا تعارف"
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_language_change_rewarms(self, backend):
        ctx = TranslationContext(BatchTranslateClient(backend))
        page = ctx.page(lambda: ["Email"])
        assert page.translation_ready

        ctx.set_language("ur")
        assert not page.translation_ready

        assert await page.wait_ready()
        assert page.t("Email") == "ای میل"

        ctx.set_language("en")
        assert page.translation_ready

    @pytest.mark.asyncio
    async def test_stale_completion_ignored(self):
        backend = GatedBackend()
        ctx = TranslationContext(BatchTranslateClient(backend), language="ur")
        page = ctx.page(lambda: ["Email"])

        stale = asyncio.create_task(page.prepare())
        await _settle()
        ctx.set_language("hi")
        await _settle()
        backend.gate.set()

        assert await stale is False
        assert await page.wait_ready()
        assert page.t("Email") == "[hi] Email"
        assert ctx.store.get("Email", "ur") == "[ur] Email"

    @pytest.mark.asyncio
    async def test_closed_page_left_alone(self):
        backend = GatedBackend()
        ctx = TranslationContext(BatchTranslateClient(backend), language="ur")
        page = ctx.page(lambda: ["Email"])

        pending = asyncio.create_task(page.prepare())
        await _settle()
        page.close()
        backend.gate.set()

        assert await pending is False
        assert page.state == ReadinessState.NOT_READY
        assert ctx.store.get("Email", "ur") == "[ur] Email"

        ctx.set_language("hi")
        assert page.state == ReadinessState.NOT_READY
        assert len(backend.calls) == 1


# =============================================================================
# Process-wide Context
# =============================================================================


class TestGetContext:
    def test_loads_snapshot_and_resets(self, tmp_path):
        snapshot = tmp_path / "translations.json"
        seeded = TranslationStore()
        seeded.set("Email", "ur", "ای میل")
        seeded.save(snapshot)

        settings = Settings(
            translation_backend="static",
            translation_cache_file=str(snapshot),
            default_language="ur",
        )

        reset_context()
        try:
            ctx = get_context(settings)
            assert get_context() is ctx
            assert ctx.language == "ur"
            assert ctx.t("Email") == "ای میل"
        finally:
            reset_context()
