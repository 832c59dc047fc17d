"""
Chat Routes.

- POST /api/chat → AI 대화 (로그인 불필요)
- POST /api/chat/command → 채팅 명령 (폴더 생성/검색/최신 파일/대화)
"""

from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from driveplacer.app.deps import get_completion_provider, get_drive_factory
from driveplacer.app.providers.base import CompletionProvider
from driveplacer.app.providers.google_drive import DriveClient
from driveplacer.app.services.commands import CommandContext, dispatch_command, run_chat

api_router = APIRouter()


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[dict[str, Any]] = Field(default_factory=list)
    drive_context: str | None = Field(default=None, alias="driveContext")


class CommandRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    history: list[dict[str, Any]] = Field(default_factory=list)
    drive_context: str | None = Field(default=None, alias="driveContext")


@api_router.post("")
async def chat(
    body: ChatRequest,
    provider: CompletionProvider | None = Depends(get_completion_provider),
) -> dict[str, Any]:
    """
    AI 대화.

    실패해도 200 + {success: false, message}로 응답.
    """
    reply = await run_chat(provider, body.messages, body.drive_context)
    return {"success": reply.success, "message": reply.message}


@api_router.post("/command")
async def chat_command(
    body: CommandRequest,
    provider: CompletionProvider | None = Depends(get_completion_provider),
    drive_factory: Callable[[], DriveClient] = Depends(get_drive_factory),
) -> dict[str, Any]:
    """
    채팅 명령 처리.

    Drive 의도(create/search/latest)는 로그인 필요 → 미로그인 시 401.
    """
    ctx = CommandContext(
        drive_factory=drive_factory,
        provider=provider,
        history=body.history,
        drive_context=body.drive_context,
    )
    reply = await dispatch_command(body.message, ctx)
    return reply.to_response()
