"""
Upload Orchestration: 저장 → 배치 추천 → 이동.

- 저장 실패는 해당 파일에 치명적 (UpstreamWriteError 전파)
- 추천/이동 실패는 저장을 되돌리지 않음 (기본 위치에 남음, success 유지)
- 배치는 제출 순서대로 1건씩 처리 (병렬 없음)
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Any, Protocol

from driveplacer.domain.errors import DriveAppError, NotAuthenticatedError
from driveplacer.domain.schemas import (
    BatchEntry,
    FolderRecord,
    PlacementDecision,
    UploadItem,
    UploadOutcome,
)

from .placement import PlacementResolver, file_meta_for

logger = logging.getLogger(__name__)


class UploadTarget(Protocol):
    """업로드/이동을 수행하는 storage 협력자."""

    def create_file(self, item: UploadItem) -> dict[str, Any]: ...

    def move_file(
        self,
        file_id: str,
        new_parent_id: str,
        previous_parents: list[str] | None = None,
    ) -> dict[str, Any]: ...


class UploadService:
    """
    업로드 파이프라인.

    Usage:
        service = UploadService(drive, PlacementResolver(drive, provider))
        outcome = await service.upload(item)
    """

    def __init__(self, target: UploadTarget, resolver: PlacementResolver):
        self.target = target
        self.resolver = resolver

    async def upload(self, item: UploadItem) -> UploadOutcome:
        """
        파일 1건 업로드.

        Raises:
            UpstreamWriteError: 저장 단계 실패
        """
        created = await asyncio.to_thread(self.target.create_file, item)
        file_id = str(created["id"])
        parents = list(created.get("parents") or [])
        logger.info(f"Stored '{item.name}' at default location (id={file_id})")

        base_message = f'File "{item.name}" uploaded successfully'

        if not (item.hint or item.name):
            return UploadOutcome(file=created, moved=False, message=f"{base_message}!")

        decision = await self.resolver.resolve(item.hint, item.name, file_meta_for(item))

        if decision.folder is None:
            suffix = " (no matching folder found)" if item.hint else ""
            return UploadOutcome(
                file=created,
                moved=False,
                message=f"{base_message}{suffix}!",
                decision=decision,
            )

        return await self._move(item, created, file_id, parents, decision, base_message)

    async def _move(
        self,
        item: UploadItem,
        created: dict[str, Any],
        file_id: str,
        parents: list[str],
        decision: PlacementDecision,
        base_message: str,
    ) -> UploadOutcome:
        folder: FolderRecord = decision.folder  # type: ignore[assignment]
        try:
            moved = await asyncio.to_thread(
                self.target.move_file, file_id, folder.id, parents
            )
        except DriveAppError as e:
            logger.warning(f"Move of '{item.name}' to '{folder.name}' failed: {e}")
            return UploadOutcome(
                file=created,
                moved=False,
                message=f'{base_message} (could not move to "{folder.name}")!',
                decision=decision,
            )

        logger.info(f"Moved '{item.name}' to '{folder.name}' ({folder.id})")
        return UploadOutcome(
            file={**created, **moved},
            moved=True,
            message=f'{base_message} and moved to "{folder.name}"!',
            decision=decision,
            destination=folder,
        )

    async def upload_batch(self, items: Iterable[UploadItem]) -> list[BatchEntry]:
        """
        여러 파일을 제출 순서대로 1건씩 처리.

        한 건이 실패해도 나머지는 계속 처리하고, 실패는 해당 항목에만 기록.
        인증 실패는 전체 중단.
        """
        entries: list[BatchEntry] = []
        for item in items:
            try:
                outcome = await self.upload(item)
            except NotAuthenticatedError:
                raise
            except DriveAppError as e:
                logger.error(f"Batch upload of '{item.name}' failed: {e}")
                entries.append(BatchEntry(name=item.name, error=e.message))
                continue
            entries.append(BatchEntry(name=item.name, outcome=outcome))
        return entries
