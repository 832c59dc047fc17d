"""Drive 파일 조회 헬퍼 (최신 파일 + 부모 폴더 이름)."""

import asyncio
import logging
from typing import Any

from driveplacer.app.providers.google_drive import DriveClient
from driveplacer.domain.constants import ROOT_FOLDER_NAME
from driveplacer.domain.errors import NotAuthenticatedError, UpstreamWriteError

logger = logging.getLogger(__name__)


async def latest_file_with_parent(drive: DriveClient) -> dict[str, Any] | None:
    """
    가장 최근 수정 파일 + parentName.

    부모 이름 조회 실패는 무시하고 "My Drive"로 표시.
    """
    latest = await asyncio.to_thread(drive.latest_file)
    if latest is None:
        return None

    parent_name = ROOT_FOLDER_NAME
    parents = latest.get("parents") or []
    if parents:
        try:
            parent_name = await asyncio.to_thread(drive.get_name, parents[0]) or ROOT_FOLDER_NAME
        except NotAuthenticatedError:
            raise
        except UpstreamWriteError as e:
            logger.info(f"Parent lookup for latest file failed, using default: {e}")

    return {**latest, "parentName": parent_name}
