"""
File Routes.

- POST /api/upload → 업로드 + AI 폴더 배치
- POST /api/upload/batch → 여러 파일 순차 업로드
- POST /api/files/move → 파일 이동
- GET /api/files/search?q= → 이름 검색
- GET /api/files/latest → 최근 수정 파일
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from driveplacer.app.deps import get_drive_client, get_upload_service
from driveplacer.app.providers.google_drive import DriveClient
from driveplacer.app.services.files import latest_file_with_parent
from driveplacer.app.services.upload import UploadService
from driveplacer.domain.errors import ErrorCodes, ValidationError
from driveplacer.domain.schemas import UploadItem

upload_router = APIRouter()  # /api/upload
api_router = APIRouter()  # /api/files


class MoveFileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(default="", alias="fileId")
    new_parent_id: str = Field(default="", alias="newParentId")


async def to_upload_item(file: UploadFile, hint: str | None) -> UploadItem:
    """multipart 파일 → UploadItem (내용은 변경하지 않음)."""
    content = await file.read()
    return UploadItem(
        name=file.filename or "untitled",
        mime_type=file.content_type or "application/octet-stream",
        content=content,
        size_bytes=file.size if file.size is not None else len(content),
        hint=hint,
    )


# =============================================================================
# Upload
# =============================================================================


@upload_router.post("")
async def upload_file(
    file: UploadFile | None = File(None),
    hint: str | None = Form(None),
    service: UploadService = Depends(get_upload_service),
) -> dict[str, Any]:
    """
    파일 업로드.

    1. 기본 위치(내 드라이브)에 저장
    2. AI 배치 추천 → 일치하는 폴더가 있으면 이동

    Returns:
        {success, file, moved, message}
    """
    if file is None:
        raise ValidationError(ErrorCodes.MISSING_FILE, "No file provided")

    item = await to_upload_item(file, hint)
    outcome = await service.upload(item)
    return outcome.to_response()


@upload_router.post("/batch")
async def upload_files(
    files: list[UploadFile] | None = File(None),
    hint: str | None = Form(None),
    service: UploadService = Depends(get_upload_service),
) -> dict[str, Any]:
    """
    여러 파일을 제출 순서대로 1건씩 업로드.

    Returns:
        {success, results: [{name, success, ...}]}
    """
    if not files:
        raise ValidationError(ErrorCodes.MISSING_FILE, "No file provided")

    items = [await to_upload_item(f, hint) for f in files]
    entries = await service.upload_batch(items)
    return {
        "success": all(entry.success for entry in entries),
        "results": [entry.to_dict() for entry in entries],
    }


# =============================================================================
# Files
# =============================================================================


@api_router.post("/move")
async def move_file(
    body: MoveFileRequest,
    drive: DriveClient = Depends(get_drive_client),
) -> dict[str, Any]:
    """기존 부모를 모두 제거하고 새 부모로 이동."""
    if not body.file_id or not body.new_parent_id:
        raise ValidationError(
            ErrorCodes.MISSING_FIELD, "fileId and newParentId are required"
        )

    moved = await asyncio.to_thread(drive.move_file, body.file_id, body.new_parent_id)
    return {"success": True, "file": moved, "message": "File moved!"}


@api_router.get("/search")
async def search_files(
    q: str = "",
    drive: DriveClient = Depends(get_drive_client),
) -> dict[str, Any]:
    query = q.strip()
    if not query:
        raise ValidationError(ErrorCodes.MISSING_FIELD, "Search query is required")

    items = await asyncio.to_thread(drive.search, query)
    return {"success": True, "items": items}


@api_router.get("/latest")
async def latest_file(
    drive: DriveClient = Depends(get_drive_client),
) -> dict[str, Any]:
    latest = await latest_file_with_parent(drive)
    if latest is None:
        return {"success": False, "message": "No files found"}
    return {"success": True, "file": latest}
