"""
Tests for translation backends (wire formats) using httpx's mock transport.
"""

import json

import httpx
import pytest
from phishaware.config import Settings
from phishaware.i18n.backends import (
    GoogleTranslateBackend,
    HttpTranslationBackend,
    LLMTranslationBackend,
    StaticTranslationBackend,
    create_backend,
)
from phishaware.i18n.client import BatchTranslateClient
from phishaware.i18n.errors import TranslationServiceError
from phishaware.i18n.store import TranslationStore


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# =============================================================================
# Generic HTTP Endpoint
# =============================================================================


class TestHttpBackend:
    @pytest.mark.asyncio
    async def test_request_and_response_shape(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"translations": ["ای میل", "واٹس ایپ"]})

        async with mock_client(handler) as http:
            backend = HttpTranslationBackend("https://api.test/translate/batch", token="t0k", client=http)
            result = await backend.translate(["Email", "WhatsApp"], "en", "ur")

        assert result == ["ای میل", "واٹس ایپ"]
        assert seen["body"] == {
            "texts": ["Email", "WhatsApp"],
            "targetLanguage": "ur",
            "sourceLanguage": "en",
        }
        assert seen["auth"] == "Bearer t0k"

    @pytest.mark.asyncio
    async def test_error_status(self):
        async with mock_client(lambda r: httpx.Response(500, text="boom")) as http:
            backend = HttpTranslationBackend("https://api.test/t", client=http)
            with pytest.raises(TranslationServiceError) as exc:
                await backend.translate(["Email"], "en", "ur")

        assert exc.value.status_code == 500

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        async with mock_client(lambda r: httpx.Response(200, json={"result": []})) as http:
            backend = HttpTranslationBackend("https://api.test/t", client=http)
            with pytest.raises(TranslationServiceError):
                await backend.translate(["Email"], "en", "ur")

    @pytest.mark.asyncio
    async def test_client_fails_open_on_server_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, text="unavailable")

        async with mock_client(handler) as http:
            client = BatchTranslateClient(
                HttpTranslationBackend("https://api.test/t", client=http),
                max_attempts=3,
            )
            result = await client.translate_batch(["Email", "Email"], "ur")

        assert result == ["Email", "Email"]
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_client_end_to_end(self):
        def handler(request):
            texts = json.loads(request.content)["texts"]
            return httpx.Response(200, json={"translations": [t.upper() for t in texts]})

        async with mock_client(handler) as http:
            client = BatchTranslateClient(HttpTranslationBackend("https://api.test/t", client=http))
            result = await client.translate_batch(["start", "pause", "start"], "ur")

        assert result == ["START", "PAUSE", "START"]


# =============================================================================
# Google Translate v2
# =============================================================================


class TestGoogleBackend:
    @pytest.mark.asyncio
    async def test_wire_format(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "data": {"translations": [{"translatedText": "ای میل"}]}
            })

        async with mock_client(handler) as http:
            backend = GoogleTranslateBackend("secret", client=http)
            result = await backend.translate(["Email"], "en", "ur")

        assert result == ["ای میل"]
        assert "key=secret" in seen["url"]
        assert seen["body"] == {"q": ["Email"], "target": "ur", "source": "en", "format": "text"}

    @pytest.mark.asyncio
    async def test_missing_key_is_a_service_error(self):
        def handler(request):
            raise AssertionError("no request expected")

        async with mock_client(handler) as http:
            backend = GoogleTranslateBackend("", client=http)
            with pytest.raises(TranslationServiceError):
                await backend.translate(["Email"], "en", "ur")

    @pytest.mark.asyncio
    async def test_missing_key_falls_back_without_caching(self):
        store = TranslationStore()
        client = BatchTranslateClient(GoogleTranslateBackend(""), store, max_attempts=1)

        assert await client.translate_batch(["Email"], "ur") == ["Email"]
        assert not store.has("Email", "ur")
        assert client.failure_count == 1

    @pytest.mark.asyncio
    async def test_invalid_response(self):
        async with mock_client(lambda r: httpx.Response(200, json={"error": {}})) as http:
            backend = GoogleTranslateBackend("secret", client=http)
            with pytest.raises(TranslationServiceError):
                await backend.translate(["Email"], "en", "ur")


# =============================================================================
# Factory
# =============================================================================


class TestCreateBackend:
    def test_kinds(self):
        settings = Settings(translation_backend="http", translation_api_url="https://x/t")

        assert isinstance(create_backend(settings), HttpTranslationBackend)
        assert isinstance(create_backend(settings, kind="google"), GoogleTranslateBackend)
        assert isinstance(create_backend(settings, kind="llm"), LLMTranslationBackend)
        assert isinstance(create_backend(settings, kind="static"), StaticTranslationBackend)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            create_backend(Settings(translation_backend="carrier-pigeon"))

    @pytest.mark.asyncio
    async def test_llm_without_key_fails_open(self):
        settings = Settings(llm_provider="gemini", google_api_key="", gemini_api_key="")
        client = BatchTranslateClient(LLMTranslationBackend(settings), max_attempts=1)

        assert await client.translate_batch(["Email"], "ur") == ["Email"]
        assert client.failure_count == 1
