"""
Pytest fixtures.

- FakeDrive: 메모리 기반 Drive 대역 (DriveClient와 같은 메서드)
- make_provider: completion provider mock factory
- make_client: Drive 의존성을 대역으로 바꾼 TestClient factory
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from driveplacer.app.deps import get_drive_client, get_drive_factory
from driveplacer.app.main import create_app
from driveplacer.app.settings import Settings
from driveplacer.domain.errors import (
    ErrorCodes,
    NotAuthenticatedError,
    UpstreamListingError,
    UpstreamWriteError,
)
from driveplacer.domain.schemas import FolderPage, FolderRecord, UploadItem

DRIVE_ROOT_ID = "0AROOT"

# =============================================================================
# Fake Drive
# =============================================================================


class FakeDrive:
    """
    DriveClient 대역.

    folders: Drive `files` 형식 dict 목록 ({"id", "name", "parents"})
    fail_on: 실패시킬 연산 이름 집합 (list_folders, create_file, move_file, ...)
    """

    def __init__(
        self,
        folders: list[dict[str, Any]] | None = None,
        page_size: int = 1000,
        fail_on: set[str] | None = None,
        unauthenticated: bool = False,
    ):
        self.folders = list(folders or [])
        self.page_size = page_size
        self.fail_on = set(fail_on or set())
        self.unauthenticated = unauthenticated
        self.files: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, Any]] = []
        self._next_id = 1

    def _check(self, op: str) -> None:
        if self.unauthenticated:
            raise NotAuthenticatedError()
        if op in self.fail_on:
            if op == "list_folders":
                raise UpstreamListingError(ErrorCodes.LISTING_FAILED, f"{op} failed")
            raise UpstreamWriteError(ErrorCodes.CREATE_FAILED, f"{op} failed")

    def list_folders(
        self, page_token: str | None = None, include_parents: bool = True
    ) -> FolderPage:
        self.calls.append(("list_folders", page_token))
        self._check("list_folders")
        start = int(page_token or 0)
        chunk = self.folders[start:start + self.page_size]
        end = start + self.page_size
        records = []
        for f in chunk:
            data = dict(f) if include_parents else {"id": f["id"], "name": f["name"]}
            records.append(FolderRecord.from_api(data))
        return FolderPage(
            records=records,
            next_page_token=str(end) if end < len(self.folders) else None,
        )

    def create_file(self, item: UploadItem) -> dict[str, Any]:
        self.calls.append(("create_file", item.name))
        self._check("create_file")
        file_id = f"file-{self._next_id}"
        self._next_id += 1
        record = {
            "id": file_id,
            "name": item.name,
            "webViewLink": f"https://drive.example/{file_id}",
            "parents": [DRIVE_ROOT_ID],
        }
        self.files[file_id] = {**record, "mimeType": item.mime_type}
        return dict(record)

    def create_folder(self, name: str, parent_id: str | None = None) -> dict[str, Any]:
        self.calls.append(("create_folder", (name, parent_id)))
        self._check("create_folder")
        folder_id = f"folder-{self._next_id}"
        self._next_id += 1
        parents = [parent_id] if parent_id and parent_id != "root" else [DRIVE_ROOT_ID]
        self.folders.append({"id": folder_id, "name": name, "parents": parents})
        return {"id": folder_id, "name": name, "webViewLink": f"https://drive.example/{folder_id}"}

    def get_parents(self, file_id: str) -> list[str]:
        self.calls.append(("get_parents", file_id))
        self._check("get_parents")
        return list(self.files[file_id]["parents"])

    def get_name(self, file_id: str) -> str:
        self.calls.append(("get_name", file_id))
        self._check("get_name")
        for f in self.folders:
            if f["id"] == file_id:
                return str(f["name"])
        return "My Drive"

    def move_file(
        self,
        file_id: str,
        new_parent_id: str,
        previous_parents: list[str] | None = None,
    ) -> dict[str, Any]:
        self.calls.append(("move_file", (file_id, new_parent_id, previous_parents)))
        self._check("move_file")
        if previous_parents is None:
            previous_parents = self.get_parents(file_id)
        record = self.files[file_id]
        record["parents"] = [
            p for p in record["parents"] if p not in previous_parents
        ] + [new_parent_id]
        return {"id": file_id, "name": record["name"], "parents": list(record["parents"])}

    def search(self, query: str, page_size: int = 50) -> list[dict[str, Any]]:
        self.calls.append(("search", query))
        self._check("search")
        items = [
            {"id": f["id"], "name": f["name"], "mimeType": "application/vnd.google-apps.folder"}
            for f in self.folders
            if query.lower() in f["name"].lower()
        ]
        items += [
            {"id": f["id"], "name": f["name"], "mimeType": f["mimeType"]}
            for f in self.files.values()
            if query.lower() in f["name"].lower()
        ]
        return sorted(items, key=lambda i: i["name"])[:page_size]

    def latest_file(self) -> dict[str, Any] | None:
        self.calls.append(("latest_file", None))
        self._check("latest_file")
        if not self.files:
            return None
        latest = list(self.files.values())[-1]
        return {**latest, "modifiedTime": "2026-01-05T10:00:00.000Z"}

    def ops(self) -> list[str]:
        """호출된 연산 이름 순서."""
        return [name for name, _ in self.calls]


def folder(folder_id: str, name: str, parent: str | None = None) -> dict[str, Any]:
    """Drive `files` 항목 형식 폴더."""
    data: dict[str, Any] = {"id": folder_id, "name": name}
    if parent is not None:
        data["parents"] = [parent]
    return data


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_drive() -> FakeDrive:
    """Finance/Marketing 폴더가 있는 드라이브."""
    return FakeDrive(
        folders=[
            folder("f-fin", "Finance", DRIVE_ROOT_ID),
            folder("f-mkt", "Marketing", DRIVE_ROOT_ID),
        ]
    )


@pytest.fixture
def make_provider() -> Callable[..., MagicMock]:
    """
    CompletionProvider mock factory.

    Usage:
        provider = make_provider("Finance")
        provider = make_provider(error=CompletionError("X", "boom"))
    """

    def _make(
        answer: str | None = None,
        error: Exception | None = None,
        chat_answer: str = "Hello!",
    ) -> MagicMock:
        provider = MagicMock()
        if error is not None:
            provider.complete = AsyncMock(side_effect=error)
            provider.chat = AsyncMock(side_effect=error)
        else:
            provider.complete = AsyncMock(return_value=answer)
            provider.chat = AsyncMock(return_value=chat_answer)
        return provider

    return _make


@pytest.fixture
def test_settings() -> Settings:
    """테스트용 설정 (AI 키/CORS 없음)."""
    return Settings(
        environment="test",
        backend_url="http://testserver",
        frontend_url="",
        session_secret="test-secret",
        google_client_id="client-id",
        google_client_secret="client-secret",
        anthropic_api_key=None,
        placement_timeout=5.0,
    )


@pytest.fixture
def upload_item() -> Callable[..., UploadItem]:
    """UploadItem factory."""

    def _make(
        name: str = "report.pdf",
        hint: str | None = None,
        content: bytes = b"%PDF-1.4 fake",
        mime_type: str = "application/pdf",
    ) -> UploadItem:
        return UploadItem(name=name, mime_type=mime_type, content=content, hint=hint)

    return _make


# =============================================================================
# App Client
# =============================================================================


@pytest.fixture
def make_client(test_settings) -> Callable[..., TestClient]:
    """
    TestClient factory.

    drive를 주면 세션 대신 해당 대역으로 Drive 의존성을 교체한다.
    drive=None이면 실제 세션 검사 (미로그인 → 401).
    """

    def _make(drive: FakeDrive | None = None, provider: Any = None) -> TestClient:
        app = create_app(test_settings, completion_provider=provider)
        if drive is not None:
            app.dependency_overrides[get_drive_client] = lambda: drive
            app.dependency_overrides[get_drive_factory] = lambda: (lambda: drive)
        return TestClient(app)

    return _make
