"""
Anthropic (Claude) Completion Provider.

- complete(): 배치 추천용, 1회 호출 (재시도 없음, 실패는 resolver가 NoMatch로 흡수)
- chat(): 자유 대화용, 일시적 오류(레이트리밋/연결/타임아웃/5xx)만 지수 백오프 재시도
"""

import logging
import os
from typing import Any

import anthropic

from driveplacer.utils.retry import Backoff, retry_async

from .base import ChatMessage, CompletionError, CompletionProvider

logger = logging.getLogger(__name__)

# 재시도 가능한 예외
RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,
    anthropic.APITimeoutError,
    anthropic.InternalServerError,
)


class ClaudeProvider(CompletionProvider):
    """
    Claude API Provider.

    Usage:
        provider = ClaudeProvider(model="claude-sonnet-4-20250514", api_key=key)
        name = await provider.complete(system_prompt, user_prompt, temperature=0.3)
    """

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
        max_tokens: int = 1024,
        timeout: float | None = None,
        backoff: Backoff | None = None,
    ):
        """
        Args:
            model: 모델 ID (설정에서 주입)
            api_key: API 키 (없으면 MY_ANTHROPIC_KEY → ANTHROPIC_API_KEY)
            max_tokens: 최대 토큰 수
            timeout: 요청 타임아웃(초)
            backoff: chat() 재시도 정책

        Raises:
            CompletionError: API 키가 없을 때 (fail-fast)
        """
        self.model = model
        self.api_key = (
            api_key
            or os.environ.get("MY_ANTHROPIC_KEY")
            or os.environ.get("ANTHROPIC_API_KEY")
        )
        if not self.api_key:
            raise CompletionError(
                "ANTHROPIC_KEY_MISSING",
                "Anthropic API key missing. Set MY_ANTHROPIC_KEY or ANTHROPIC_API_KEY.",
            )

        self.max_tokens = max_tokens
        self.timeout = timeout
        self.backoff = backoff or Backoff()
        self._client: Any = None

    def _get_client(self) -> Any:
        """Anthropic 클라이언트 (lazy init)."""
        if self._client is None:
            kwargs: dict[str, Any] = {"api_key": self.api_key}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            self._client = anthropic.AsyncAnthropic(**kwargs)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
    ) -> str:
        """단발 completion (비스트리밍, 재시도 없음)."""
        api_kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if temperature is not None:
            api_kwargs["temperature"] = temperature

        try:
            response = await self._get_client().messages.create(**api_kwargs)
        except anthropic.APIError as e:
            raise CompletionError(
                "COMPLETION_FAILED",
                self._get_user_friendly_error_message(e),
                model=self.model,
            ) from e

        return self._first_text(response)

    async def chat(
        self,
        messages: list[ChatMessage],
        system_prompt: str | None = None,
    ) -> str:
        """대화 completion (일시적 오류 재시도)."""
        if not messages:
            raise CompletionError("EMPTY_CONVERSATION", "No messages to send")

        api_kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [m.to_dict() for m in messages],
        }
        if system_prompt:
            api_kwargs["system"] = system_prompt

        async def _api_call() -> Any:
            return await self._get_client().messages.create(**api_kwargs)

        try:
            response = await retry_async(
                _api_call,
                retry_on=RETRYABLE_ERRORS,
                backoff=self.backoff,
                label="anthropic.chat",
            )
        except anthropic.APIError as e:
            raise CompletionError(
                "CHAT_FAILED",
                self._get_user_friendly_error_message(e),
                model=self.model,
            ) from e

        return self._first_text(response)

    def _first_text(self, response: Any) -> str:
        """응답의 첫 텍스트 블록 추출."""
        for block in getattr(response, "content", None) or []:
            if getattr(block, "type", "text") == "text":
                text: str = block.text
                return text
        raise CompletionError(
            "EMPTY_RESPONSE",
            "Completion returned no text content",
            model=getattr(response, "model", self.model),
        )

    def _get_user_friendly_error_message(self, error: Exception) -> str:
        """사용자에게 보여줄 에러 메시지."""
        if isinstance(error, anthropic.APIConnectionError) and not isinstance(
            error, anthropic.APITimeoutError
        ):
            return "Could not reach the AI service. Check the network connection."
        if isinstance(error, anthropic.APITimeoutError):
            return "The AI service timed out. Please try again."
        if isinstance(error, anthropic.RateLimitError):
            return "AI rate limit exceeded. Please wait a moment and retry."
        if isinstance(error, anthropic.AuthenticationError):
            return "AI authentication failed. Check MY_ANTHROPIC_KEY."
        if isinstance(error, anthropic.PermissionDeniedError):
            return "The AI key is not allowed to perform this request."
        if isinstance(error, anthropic.BadRequestError):
            return "The AI service rejected the request."
        return f"AI request failed: {error}"
