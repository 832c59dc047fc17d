"""
Chat Command Dispatcher.

채팅 입력의 의도를 (predicate, handler) 규칙 목록으로 판별한다.
규칙은 COMMAND_RULES 순서대로 평가하고 처음 일치한 규칙만 실행한다 (first-match-wins):

    1. create_folder  - "create" + "folder" 포함
    2. search         - "search" 또는 "find" 포함
    3. latest         - "latest" 또는 "recent" 포함
    4. chat           - 그 외 전부 (AI 대화)

예: "find the latest report"는 search가 latest보다 앞이므로 검색으로 처리된다.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from driveplacer.app.providers.base import (
    CompletionError,
    CompletionProvider,
    normalize_messages,
)
from driveplacer.app.providers.google_drive import DriveClient
from driveplacer.domain.constants import FOLDER_MIME_TYPE
from driveplacer.domain.errors import NotAuthenticatedError, UpstreamWriteError

from .files import latest_file_with_parent

logger = logging.getLogger(__name__)

SEARCH_PREVIEW_LIMIT = 10
AI_NOT_CONFIGURED = "AI not configured"
DRIVE_ASSISTANT_PROMPT = "You are a Google Drive assistant."

CREATE_FOLDER_PATTERN = re.compile(
    r"folder[\s:]+(?:(?:called|named)\s+)?['\"]?([^'\"]+?)['\"]?\s*$",
    re.IGNORECASE,
)
SEARCH_PATTERN = re.compile(
    r"(?:search|find)\s+(?:for\s+)?['\"]?([^'\"]+?)['\"]?\s*$",
    re.IGNORECASE,
)


# =============================================================================
# Context / Reply
# =============================================================================


@dataclass
class CommandContext:
    """
    핸들러 실행 컨텍스트.

    drive_factory는 Drive 의도일 때만 호출된다 (AI 대화는 로그인 불필요).
    """
    drive_factory: Callable[[], DriveClient]
    provider: CompletionProvider | None = None
    history: list[dict[str, Any]] = field(default_factory=list)
    drive_context: str | None = None


@dataclass
class CommandReply:
    """명령 처리 결과."""
    intent: str
    message: str
    success: bool = True
    data: dict[str, Any] | None = None

    def to_response(self) -> dict[str, Any]:
        response: dict[str, Any] = {
            "success": self.success,
            "intent": self.intent,
            "message": self.message,
        }
        if self.data is not None:
            response["data"] = self.data
        return response


Handler = Callable[[str, CommandContext], Awaitable[CommandReply]]


@dataclass(frozen=True)
class CommandRule:
    """(이름, 판별 함수, 처리 함수)."""
    name: str
    matches: Callable[[str], bool]
    handle: Handler


# =============================================================================
# Chat
# =============================================================================


def build_chat_system_prompt(drive_context: str | None) -> str:
    if drive_context and drive_context.strip():
        return f"{DRIVE_ASSISTANT_PROMPT} {drive_context.strip()}"
    return DRIVE_ASSISTANT_PROMPT


async def run_chat(
    provider: CompletionProvider | None,
    messages: list[dict[str, Any]],
    drive_context: str | None = None,
) -> CommandReply:
    """AI 대화 1턴. 실패는 success=False 응답으로 반환."""
    if provider is None:
        return CommandReply(intent="chat", message=AI_NOT_CONFIGURED, success=False)

    conversation = normalize_messages(messages)
    if not conversation:
        return CommandReply(intent="chat", message="No message provided", success=False)

    try:
        text = await provider.chat(conversation, build_chat_system_prompt(drive_context))
    except CompletionError as e:
        logger.warning(f"Chat completion failed: {e}")
        return CommandReply(intent="chat", message=e.message, success=False)

    return CommandReply(intent="chat", message=text)


# =============================================================================
# Handlers
# =============================================================================


async def _create_folder(message: str, ctx: CommandContext) -> CommandReply:
    match = CREATE_FOLDER_PATTERN.search(message)
    if not match:
        return CommandReply(
            intent="create_folder",
            message="Please specify a folder name, e.g., 'Create a folder called Documents'",
            success=False,
        )

    name = match.group(1).strip()
    drive = ctx.drive_factory()
    try:
        folder = await asyncio.to_thread(drive.create_folder, name)
    except NotAuthenticatedError:
        raise
    except UpstreamWriteError as e:
        return CommandReply(intent="create_folder", message=f"❌ {e.message}", success=False)

    return CommandReply(
        intent="create_folder",
        message=f'✅ Created folder "{name}"!',
        data={"folder": folder},
    )


async def _search(message: str, ctx: CommandContext) -> CommandReply:
    match = SEARCH_PATTERN.search(message)
    if not match:
        return CommandReply(
            intent="search", message="What would you like to search for?", success=False
        )

    query = match.group(1).strip()
    drive = ctx.drive_factory()
    try:
        items = await asyncio.to_thread(drive.search, query)
    except NotAuthenticatedError:
        raise
    except UpstreamWriteError as e:
        return CommandReply(intent="search", message=f"❌ {e.message}", success=False)

    if not items:
        return CommandReply(intent="search", message=f'No items found matching "{query}"')

    lines = [
        f"• {'📁' if item.get('mimeType') == FOLDER_MIME_TYPE else '📄'} {item.get('name', '')}"
        for item in items[:SEARCH_PREVIEW_LIMIT]
    ]
    return CommandReply(
        intent="search",
        message=f"Found {len(items)} item(s):\n" + "\n".join(lines),
        data={"items": items},
    )


async def _latest(message: str, ctx: CommandContext) -> CommandReply:
    drive = ctx.drive_factory()
    try:
        latest = await latest_file_with_parent(drive)
    except NotAuthenticatedError:
        raise
    except UpstreamWriteError as e:
        return CommandReply(intent="latest", message=f"❌ {e.message}", success=False)

    if latest is None:
        return CommandReply(intent="latest", message="No files found", success=False)

    return CommandReply(
        intent="latest",
        message=(
            f"📄 Latest file: {latest.get('name', '')}\n"
            f"Type: {latest.get('mimeType', '')}\n"
            f"Location: {latest['parentName']}\n"
            f"Modified: {latest.get('modifiedTime', '')}"
        ),
        data={"file": latest},
    )


async def _chat(message: str, ctx: CommandContext) -> CommandReply:
    history = [*ctx.history, {"role": "user", "content": message}]
    return await run_chat(ctx.provider, history, ctx.drive_context)


def _contains_all(*words: str) -> Callable[[str], bool]:
    return lambda text: all(w in text.lower() for w in words)


def _contains_any(*words: str) -> Callable[[str], bool]:
    return lambda text: any(w in text.lower() for w in words)


# 순서가 곧 우선순위
COMMAND_RULES: tuple[CommandRule, ...] = (
    CommandRule("create_folder", _contains_all("create", "folder"), _create_folder),
    CommandRule("search", _contains_any("search", "find"), _search),
    CommandRule("latest", _contains_any("latest", "recent"), _latest),
    CommandRule("chat", lambda text: True, _chat),
)


def select_rule(
    message: str, rules: tuple[CommandRule, ...] = COMMAND_RULES
) -> CommandRule | None:
    """처음 일치하는 규칙."""
    for rule in rules:
        if rule.matches(message):
            return rule
    return None


async def dispatch_command(
    message: str,
    ctx: CommandContext,
    rules: tuple[CommandRule, ...] = COMMAND_RULES,
) -> CommandReply:
    """
    채팅 입력 1건 처리.

    Raises:
        NotAuthenticatedError: Drive 의도인데 로그인 안 됨
    """
    text = message.strip()
    if not text:
        return CommandReply(intent="none", message="Empty message", success=False)

    rule = select_rule(text, rules)
    if rule is None:
        return CommandReply(intent="none", message="Unrecognized command", success=False)

    logger.debug(f"Chat command intent: {rule.name}")
    return await rule.handle(text, ctx)
