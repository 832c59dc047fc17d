"""
Data schemas for the service.

규칙:
- FolderRecord/FolderNode는 요청 1회 동안만 유효 (캐시 없음)
- PlacementDecision은 최대 1개 폴더만 선택
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .constants import ROOT_FOLDER_ID, ROOT_FOLDER_NAME

# =============================================================================
# Folder Listing
# =============================================================================

@dataclass(frozen=True)
class FolderRecord:
    """Drive 목록 API가 돌려준 폴더 1건."""
    id: str
    name: str
    parent_id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "FolderRecord":
        """
        Drive `files` 항목 → FolderRecord.

        parents가 여러 개여도 첫 번째만 사용.
        """
        parents = data.get("parents") or []
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            parent_id=parents[0] if parents else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "parentId": self.parent_id}


@dataclass
class FolderPage:
    """목록 API 한 페이지."""
    records: list[FolderRecord] = field(default_factory=list)
    next_page_token: str | None = None


@dataclass
class FolderNode:
    """트리 노드. children은 빌드 마지막에 이름순 정렬됨."""
    id: str
    name: str
    children: list["FolderNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용 (UI는 `folders` 키를 사용)."""
        return {
            "id": self.id,
            "name": self.name,
            "folders": [child.to_dict() for child in self.children],
        }

    def iter_nodes(self):
        """자기 자신 포함 전체 노드 순회 (DFS, 명시적 스택)."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass
class FolderTree(FolderNode):
    """합성 루트 노드 (id="root")."""
    id: str = ROOT_FOLDER_ID
    name: str = ROOT_FOLDER_NAME
    path: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["path"] = self.path
        return data


# =============================================================================
# Upload
# =============================================================================

@dataclass
class FileMeta:
    """프롬프트 보강용 파일 메타데이터."""
    extension: str | None
    file_type: str
    size_bytes: int


@dataclass
class UploadItem:
    """업로드 파일 1건 + 선택적 힌트."""
    name: str
    mime_type: str
    content: bytes
    size_bytes: int | None = None
    hint: str | None = None

    def __post_init__(self) -> None:
        if self.size_bytes is None:
            self.size_bytes = len(self.content)
        if self.hint is not None:
            self.hint = self.hint.strip() or None

    @property
    def extension(self) -> str | None:
        """소문자 확장자 (점 제외). 없으면 None."""
        suffix = Path(self.name).suffix
        return suffix[1:].lower() if suffix else None


# =============================================================================
# Placement
# =============================================================================

class PlacementReason(str, Enum):
    """배치 결정 사유."""
    MATCHED = "matched"
    AI_DISABLED = "ai_disabled"       # API 키 없음
    NO_FOLDERS = "no_folders"         # 폴더 0개
    DECLINED = "declined"             # 모델이 NONE 응답
    UNKNOWN_FOLDER = "unknown_folder"  # 목록에 없는 이름 (환각)
    DEGRADED = "degraded"             # 네트워크/파싱/타임아웃


@dataclass(frozen=True)
class PlacementDecision:
    """Matched(folder) 또는 NoMatch."""
    folder: FolderRecord | None = None
    reason: PlacementReason = PlacementReason.DEGRADED

    @classmethod
    def matched(cls, folder: FolderRecord) -> "PlacementDecision":
        return cls(folder=folder, reason=PlacementReason.MATCHED)

    @classmethod
    def no_match(cls, reason: PlacementReason) -> "PlacementDecision":
        return cls(folder=None, reason=reason)

    @property
    def is_match(self) -> bool:
        return self.folder is not None


@dataclass
class UploadOutcome:
    """업로드 1건 처리 결과."""
    file: dict[str, Any]
    moved: bool
    message: str
    decision: PlacementDecision | None = None
    destination: FolderRecord | None = None

    def to_response(self) -> dict[str, Any]:
        """API 응답 형식."""
        return {
            "success": True,
            "file": self.file,
            "moved": self.moved,
            "message": self.message,
        }


@dataclass
class BatchEntry:
    """배치 업로드 항목별 결과 (실패해도 순서 유지)."""
    name: str
    outcome: UploadOutcome | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is not None

    def to_dict(self) -> dict[str, Any]:
        if self.outcome is not None:
            return {"name": self.name, **self.outcome.to_response()}
        return {"name": self.name, "success": False, "message": self.error}
