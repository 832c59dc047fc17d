"""
Completion Provider 추상 인터페이스.

모델 교체 가능하게 설계: 모델명은 설정(default.yaml)만 SSOT.
- complete(): 배치 추천용 단발 호출 (비스트리밍, 재시도 없음)
- chat(): 대화형 호출 (일시적 오류 재시도)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

# =============================================================================
# Messages
# =============================================================================

CHAT_ROLES = frozenset({"user", "assistant"})


@dataclass(frozen=True)
class ChatMessage:
    """대화 메시지 1건."""
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


def normalize_messages(raw: list[dict[str, Any]]) -> list[ChatMessage]:
    """
    클라이언트 대화 이력 정리.

    - user/assistant 외 role 제거 (system은 provider가 별도로 넣음)
    - 빈 content 제거
    - 연속된 같은 role은 줄바꿈으로 병합 (Messages API 교대 규칙)
    - 첫 메시지가 assistant면 제거
    """
    messages: list[ChatMessage] = []
    for item in raw:
        role = str(item.get("role", "")).strip()
        content = str(item.get("content") or "").strip()
        if role not in CHAT_ROLES or not content:
            continue
        if messages and messages[-1].role == role:
            merged = f"{messages[-1].content}\n{content}"
            messages[-1] = ChatMessage(role=role, content=merged)
        else:
            messages.append(ChatMessage(role=role, content=content))

    while messages and messages[0].role != "user":
        messages.pop(0)
    return messages


# =============================================================================
# Provider Exceptions
# =============================================================================

class ProviderError(Exception):
    """Provider 관련 에러."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")


class CompletionError(ProviderError):
    """Completion 호출 실패."""
    pass


# =============================================================================
# Abstract Provider
# =============================================================================

class CompletionProvider(ABC):
    """
    텍스트 completion provider.

    역할: 폴더 이름 제안/대화 응답 (판정 권한 없음 - 이름 매칭은 resolver가 수행)
    """

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
    ) -> str:
        """
        단발 completion.

        Returns:
            첫 번째 텍스트 블록

        Raises:
            CompletionError
        """
        ...

    @abstractmethod
    async def chat(
        self,
        messages: list[ChatMessage],
        system_prompt: str | None = None,
    ) -> str:
        """
        대화 completion.

        Raises:
            CompletionError
        """
        ...
