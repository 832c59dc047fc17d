"""
Folder Routes.

- GET /api/folders → 전체 폴더 트리
- POST /api/folders → 폴더 생성
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from driveplacer.app.deps import get_drive_client, get_settings
from driveplacer.app.providers.google_drive import DriveClient
from driveplacer.app.services.tree import build_folder_tree
from driveplacer.app.settings import Settings
from driveplacer.domain.constants import ROOT_FOLDER_ID
from driveplacer.domain.errors import ErrorCodes, ValidationError

api_router = APIRouter()


class CreateFolderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    parent_id: str = Field(default=ROOT_FOLDER_ID, alias="parentId")


@api_router.get("")
async def get_folder_tree(
    drive: DriveClient = Depends(get_drive_client),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """폴더 트리 (요청마다 새로 조회)."""
    tree = await asyncio.to_thread(
        build_folder_tree, drive, max_pages=settings.max_listing_pages
    )
    return {"success": True, "structure": tree.to_dict()}


@api_router.post("")
async def create_folder(
    body: CreateFolderRequest,
    drive: DriveClient = Depends(get_drive_client),
) -> dict[str, Any]:
    name = body.name.strip()
    if not name:
        raise ValidationError(ErrorCodes.MISSING_FIELD, "Folder name is required")

    folder = await asyncio.to_thread(drive.create_folder, name, body.parent_id)
    return {"success": True, "folder": folder, "message": f'Folder "{name}" created!'}
