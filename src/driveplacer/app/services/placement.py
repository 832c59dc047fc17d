"""
Placement Resolver: 업로드 파일을 넣을 폴더를 AI에게 추천받는다.

계약:
- 절대 예외를 던지지 않음 → 모든 실패는 NoMatch(DEGRADED)
- 이름 매칭은 대소문자 무시 + 완전 일치만 (부분/유사 매칭 금지)
- 모델이 목록에 없는 이름을 지어내도 NoMatch
- 폴더 목록은 트리 조회와 별개로 매번 새로 가져온다
"""

import asyncio
import logging
from pathlib import Path

from driveplacer.app.providers.base import CompletionProvider
from driveplacer.domain.constants import (
    DEFAULT_PLACEMENT_TEMPERATURE,
    FILE_TYPE_LABELS,
    GENERIC_FILE_TYPE,
    MAX_LISTING_PAGES,
    NONE_ANSWER,
)
from driveplacer.domain.errors import ErrorCodes, ResolverDegradedError
from driveplacer.domain.schemas import (
    FileMeta,
    FolderRecord,
    PlacementDecision,
    PlacementReason,
    UploadItem,
)

from .tree import FolderLister, fetch_all_folders

logger = logging.getLogger(__name__)

QUOTE_CHARS = "\"'`“”‘’"


# =============================================================================
# File Type
# =============================================================================


def classify_file_type(file_name: str) -> str:
    """확장자 → 대분류 라벨 (Image, Document, ...). 모르면 'File'."""
    suffix = Path(file_name).suffix.lower()
    return FILE_TYPE_LABELS.get(suffix, GENERIC_FILE_TYPE)


def file_meta_for(item: UploadItem) -> FileMeta:
    return FileMeta(
        extension=item.extension,
        file_type=classify_file_type(item.name),
        size_bytes=item.size_bytes or 0,
    )


# =============================================================================
# Prompt
# =============================================================================


def build_system_prompt(folders: list[FolderRecord]) -> str:
    """폴더 이름을 그대로 나열한 시스템 지시문."""
    folder_list = ", ".join(f.name for f in folders)
    return (
        f"Match files to folders. Available folders: {folder_list}. "
        f'Return ONLY the exact folder name or "{NONE_ANSWER}".'
    )


def build_user_prompt(file_name: str | None, meta: FileMeta | None, hint: str | None) -> str:
    """있는 정보만 골라서 사용자 지시문 구성."""
    parts: list[str] = []
    if file_name:
        parts.append(f'File name: "{file_name}"')
    if meta is not None and meta.extension:
        parts.append(f"Extension: {meta.extension}")
    if meta is not None and meta.file_type:
        parts.append(f"Type: {meta.file_type}")

    text = ", ".join(parts)
    if hint:
        text = f'{text}. Hint: "{hint}"' if text else f'Hint: "{hint}"'
    return f"{text}. Which folder?"


def clean_answer(raw: str | None) -> str:
    """앞뒤 공백/따옴표 제거."""
    if not raw:
        return ""
    return raw.strip().strip(QUOTE_CHARS).strip()


def match_folder(answer: str, folders: list[FolderRecord]) -> FolderRecord | None:
    """대소문자 무시 완전 일치 (목록 순서상 첫 항목)."""
    wanted = answer.casefold()
    for folder in folders:
        if folder.name.casefold() == wanted:
            return folder
    return None


# =============================================================================
# Resolver
# =============================================================================


class PlacementResolver:
    """
    폴더 배치 추천.

    Usage:
        resolver = PlacementResolver(drive, provider)
        decision = await resolver.resolve(hint, "report.pdf", meta)
    """

    def __init__(
        self,
        lister: FolderLister,
        provider: CompletionProvider | None,
        temperature: float = DEFAULT_PLACEMENT_TEMPERATURE,
        timeout: float | None = 30.0,
        max_pages: int = MAX_LISTING_PAGES,
    ):
        """
        Args:
            lister: 폴더 목록 제공자
            provider: completion provider (None이면 기능 비활성)
            temperature: 샘플링 온도 (범주 선택이므로 낮게)
            timeout: completion 호출 타임아웃(초)
            max_pages: 목록 페이지 상한
        """
        self.lister = lister
        self.provider = provider
        self.temperature = temperature
        self.timeout = timeout
        self.max_pages = max_pages

    async def resolve(
        self,
        hint: str | None,
        file_name: str | None,
        meta: FileMeta | None = None,
    ) -> PlacementDecision:
        """추천 폴더 결정. 어떤 실패도 NoMatch로 접는다."""
        if self.provider is None:
            return PlacementDecision.no_match(PlacementReason.AI_DISABLED)

        try:
            decision = await self._resolve(self.provider, hint, file_name, meta)
        except ResolverDegradedError as e:
            logger.warning(f"Placement degraded: {e}")
            return PlacementDecision.no_match(PlacementReason.DEGRADED)
        except Exception as e:
            logger.warning(f"Placement failed unexpectedly: {e}", exc_info=True)
            return PlacementDecision.no_match(PlacementReason.DEGRADED)

        logger.info(
            f"Placement for '{file_name}': {decision.reason.value}"
            + (f" -> '{decision.folder.name}'" if decision.folder else "")
        )
        return decision

    async def _resolve(
        self,
        provider: CompletionProvider,
        hint: str | None,
        file_name: str | None,
        meta: FileMeta | None,
    ) -> PlacementDecision:
        try:
            folders = await asyncio.to_thread(
                fetch_all_folders,
                self.lister,
                include_parents=False,
                max_pages=self.max_pages,
            )
        except Exception as e:
            raise ResolverDegradedError(
                ErrorCodes.RESOLVER_LISTING_FAILED, str(e)
            ) from e

        if not folders:
            return PlacementDecision.no_match(PlacementReason.NO_FOLDERS)

        system_prompt = build_system_prompt(folders)
        user_prompt = build_user_prompt(file_name, meta, hint)

        try:
            raw = await asyncio.wait_for(
                provider.complete(
                    system_prompt, user_prompt, temperature=self.temperature
                ),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            raise ResolverDegradedError(
                ErrorCodes.RESOLVER_TIMEOUT,
                f"Completion timed out after {self.timeout}s",
            ) from e
        except Exception as e:
            raise ResolverDegradedError(
                ErrorCodes.RESOLVER_COMPLETION_FAILED, str(e)
            ) from e

        answer = clean_answer(raw)
        if not answer or answer.casefold() == NONE_ANSWER.casefold():
            return PlacementDecision.no_match(PlacementReason.DECLINED)

        folder = match_folder(answer, folders)
        if folder is None:
            logger.info(f"Model suggested unknown folder: {answer!r}")
            return PlacementDecision.no_match(PlacementReason.UNKNOWN_FOLDER)

        return PlacementDecision.matched(folder)
