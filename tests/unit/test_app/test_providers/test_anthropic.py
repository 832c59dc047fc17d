"""
test_anthropic.py - Claude Provider 테스트

- complete(): 1회 호출, system + temperature 전달
- chat(): 일시적 오류만 재시도
- 모든 API 에러는 CompletionError로 변환

Mock 주의사항:
- MagicMock은 접근되지 않은 속성에 자동으로 새 MagicMock을 반환
- make_anthropic_response() factory로 content 블록을 명시적으로 설정
"""

from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from driveplacer.app.providers.anthropic import ClaudeProvider
from driveplacer.app.providers.base import ChatMessage, CompletionError
from driveplacer.utils.retry import Backoff

# =============================================================================
# Mock Factories
# =============================================================================


def make_anthropic_response(text: str | None, model: str = "claude-test") -> MagicMock:
    """Anthropic Message 응답 mock (text=None이면 content 없음)."""
    response = MagicMock()
    if text is None:
        response.content = []
    else:
        block = MagicMock()
        block.type = "text"
        block.text = text
        response.content = [block]
    response.model = model
    return response


def make_request() -> httpx.Request:
    return httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def rate_limit_error() -> anthropic.RateLimitError:
    response = httpx.Response(429, request=make_request())
    return anthropic.RateLimitError("rate limited", response=response, body=None)


def bad_request_error() -> anthropic.BadRequestError:
    response = httpx.Response(400, request=make_request())
    return anthropic.BadRequestError("bad request", response=response, body=None)


def attach_client(provider: ClaudeProvider, **create_kwargs) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.messages.create = AsyncMock(**create_kwargs)
    provider._client = mock_client
    return mock_client


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def provider():
    """재시도 대기 없는 provider."""
    return ClaudeProvider(
        model="claude-test",
        api_key="test-api-key",
        max_tokens=256,
        backoff=Backoff(max_retries=2, initial_delay=0.0),
    )


# =============================================================================
# 초기화 테스트
# =============================================================================


class TestClaudeProviderInit:
    """ClaudeProvider 초기화 테스트."""

    def test_init_with_api_key(self):
        provider = ClaudeProvider(model="claude-sonnet-4-20250514", api_key="my-api-key")

        assert provider.api_key == "my-api-key"
        assert provider.model == "claude-sonnet-4-20250514"

    def test_init_uses_env_api_key(self, monkeypatch):
        """MY_ANTHROPIC_KEY 우선."""
        monkeypatch.setenv("MY_ANTHROPIC_KEY", "env-api-key")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "fallback-key")

        provider = ClaudeProvider()

        assert provider.api_key == "env-api-key"

    def test_init_falls_back_to_standard_env(self, monkeypatch):
        monkeypatch.delenv("MY_ANTHROPIC_KEY", raising=False)
        monkeypatch.setenv("ANTHROPIC_API_KEY", "fallback-key")

        assert ClaudeProvider().api_key == "fallback-key"

    def test_missing_key_fails_fast(self, monkeypatch):
        monkeypatch.delenv("MY_ANTHROPIC_KEY", raising=False)
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        with pytest.raises(CompletionError) as exc_info:
            ClaudeProvider()

        assert exc_info.value.code == "ANTHROPIC_KEY_MISSING"

    def test_client_lazy_init(self, provider):
        """첫 호출 전에는 클라이언트 없음."""
        assert provider._client is None

        client = provider._get_client()

        assert isinstance(client, anthropic.AsyncAnthropic)
        assert provider._get_client() is client


# =============================================================================
# complete()
# =============================================================================


class TestComplete:
    """배치 추천용 단발 호출."""

    @pytest.mark.asyncio
    async def test_returns_first_text_block(self, provider):
        attach_client(provider, return_value=make_anthropic_response("Finance"))

        result = await provider.complete("system", "user", temperature=0.3)

        assert result == "Finance"

    @pytest.mark.asyncio
    async def test_passes_system_and_temperature(self, provider):
        client = attach_client(provider, return_value=make_anthropic_response("NONE"))

        await provider.complete("Match files to folders.", "Which folder?", temperature=0.3)

        call_kwargs = client.messages.create.call_args.kwargs
        assert call_kwargs["model"] == "claude-test"
        assert call_kwargs["system"] == "Match files to folders."
        assert call_kwargs["temperature"] == 0.3
        assert call_kwargs["messages"] == [{"role": "user", "content": "Which folder?"}]

    @pytest.mark.asyncio
    async def test_temperature_omitted_when_none(self, provider):
        client = attach_client(provider, return_value=make_anthropic_response("x"))

        await provider.complete("s", "u")

        assert "temperature" not in client.messages.create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, provider):
        """단발 호출은 재시도하지 않음."""
        client = attach_client(provider, side_effect=rate_limit_error())

        with pytest.raises(CompletionError) as exc_info:
            await provider.complete("s", "u")

        assert exc_info.value.code == "COMPLETION_FAILED"
        assert client.messages.create.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_response(self, provider):
        attach_client(provider, return_value=make_anthropic_response(None))

        with pytest.raises(CompletionError) as exc_info:
            await provider.complete("s", "u")

        assert exc_info.value.code == "EMPTY_RESPONSE"


# =============================================================================
# chat()
# =============================================================================


class TestChat:
    """대화 호출 + 재시도."""

    @pytest.mark.asyncio
    async def test_sends_history_and_system(self, provider):
        client = attach_client(provider, return_value=make_anthropic_response("Hi!"))
        messages = [ChatMessage("user", "hello")]

        result = await provider.chat(messages, "You are a Google Drive assistant.")

        assert result == "Hi!"
        call_kwargs = client.messages.create.call_args.kwargs
        assert call_kwargs["messages"] == [{"role": "user", "content": "hello"}]
        assert call_kwargs["system"] == "You are a Google Drive assistant."

    @pytest.mark.asyncio
    async def test_retries_transient_error(self, provider):
        client = attach_client(
            provider,
            side_effect=[rate_limit_error(), make_anthropic_response("recovered")],
        )

        result = await provider.chat([ChatMessage("user", "hello")])

        assert result == "recovered"
        assert client.messages.create.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, provider):
        client = attach_client(provider, side_effect=rate_limit_error())

        with pytest.raises(CompletionError) as exc_info:
            await provider.chat([ChatMessage("user", "hello")])

        assert exc_info.value.code == "CHAT_FAILED"
        assert "rate limit" in exc_info.value.message
        assert client.messages.create.await_count == 3

    @pytest.mark.asyncio
    async def test_bad_request_not_retried(self, provider):
        client = attach_client(provider, side_effect=bad_request_error())

        with pytest.raises(CompletionError):
            await provider.chat([ChatMessage("user", "hello")])

        assert client.messages.create.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_conversation(self, provider):
        with pytest.raises(CompletionError) as exc_info:
            await provider.chat([])

        assert exc_info.value.code == "EMPTY_CONVERSATION"


class TestUserFriendlyErrors:

    def test_connection_error(self, provider):
        error = anthropic.APIConnectionError(request=make_request())

        assert "Could not reach" in provider._get_user_friendly_error_message(error)

    def test_timeout_error(self, provider):
        error = anthropic.APITimeoutError(request=make_request())

        assert "timed out" in provider._get_user_friendly_error_message(error)
