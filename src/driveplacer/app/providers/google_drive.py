"""
Google Drive v3 Provider.

Drive API 호출을 감싸고 예외를 도메인 에러로 변환한다.
- 401 / 토큰 갱신 실패 → NotAuthenticatedError
- 목록 조회 실패 → UpstreamListingError
- 그 외 쓰기/조회 실패 → UpstreamWriteError
- 전송 계층 실패 (TransportError, httplib2, OSError) → 위와 같은 Upstream*Error

googleapiclient는 동기(blocking) 클라이언트이므로 async 라우트에서는
asyncio.to_thread로 호출한다.
"""

import io
import logging
from typing import Any

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from driveplacer.domain.constants import (
    CREATED_FILE_FIELDS,
    CREATED_FOLDER_FIELDS,
    DEFAULT_PAGE_SIZE,
    DRIVE_SCOPES,
    FOLDER_FIELDS_NAME_ONLY,
    FOLDER_FIELDS_WITH_PARENTS,
    FOLDER_LISTING_QUERY,
    FOLDER_MIME_TYPE,
    GOOGLE_TOKEN_URI,
    LATEST_FIELDS,
    LATEST_FILE_QUERY,
    MOVED_FILE_FIELDS,
    ROOT_FOLDER_ID,
    SEARCH_FIELDS,
    SEARCH_PAGE_SIZE,
)
from driveplacer.domain.errors import (
    DriveAppError,
    ErrorCodes,
    NotAuthenticatedError,
    UpstreamListingError,
    UpstreamWriteError,
)
from driveplacer.domain.schemas import FolderPage, FolderRecord, UploadItem

logger = logging.getLogger(__name__)


# =============================================================================
# Credentials
# =============================================================================


def credentials_from_session(
    tokens: dict[str, Any] | None,
    client_id: str | None,
    client_secret: str | None,
) -> Credentials:
    """
    세션에 저장된 토큰 dict → google Credentials.

    Raises:
        NotAuthenticatedError: 토큰이 없을 때
    """
    if not tokens or not tokens.get("token"):
        raise NotAuthenticatedError()

    return Credentials(
        token=tokens["token"],
        refresh_token=tokens.get("refresh_token"),
        token_uri=tokens.get("token_uri") or GOOGLE_TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
        scopes=tokens.get("scopes") or DRIVE_SCOPES,
    )


def credentials_to_session(credentials: Credentials) -> dict[str, Any]:
    """Credentials → 세션 저장용 dict (client secret 제외)."""
    return {
        "token": credentials.token,
        "refresh_token": credentials.refresh_token,
        "token_uri": credentials.token_uri,
        "scopes": list(credentials.scopes or DRIVE_SCOPES),
    }


def escape_query_value(value: str) -> str:
    """Drive 검색 쿼리 문자열 리터럴 이스케이프."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


# =============================================================================
# Client
# =============================================================================


class DriveClient:
    """
    Drive v3 `files` 리소스 래퍼.

    Usage:
        drive = DriveClient.from_credentials(creds)
        page = drive.list_folders()
    """

    def __init__(self, service: Any, page_size: int = DEFAULT_PAGE_SIZE):
        self.service = service
        self.page_size = page_size

    @classmethod
    def from_credentials(
        cls, credentials: Credentials, page_size: int = DEFAULT_PAGE_SIZE
    ) -> "DriveClient":
        service = build("drive", "v3", credentials=credentials, cache_discovery=False)
        return cls(service, page_size=page_size)

    def _execute(
        self,
        request: Any,
        error_cls: type[DriveAppError],
        code: str,
        **context: Any,
    ) -> dict[str, Any]:
        """요청 실행 + 예외 변환."""
        try:
            result: dict[str, Any] = request.execute()
            return result
        except RefreshError as e:
            logger.warning(f"Drive token refresh failed: {e}")
            raise NotAuthenticatedError(ErrorCodes.TOKEN_REFRESH_FAILED) from e
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            if status == 401:
                raise NotAuthenticatedError(**context) from e
            reason = e.reason if hasattr(e, "reason") else str(e)
            logger.error(f"Drive API error ({code}, status={status}): {reason}")
            raise error_cls(code, str(reason), status=status, **context) from e
        except (TransportError, httplib2.HttpLib2Error, OSError) as e:
            logger.error(f"Drive transport error ({code}): {e}")
            raise error_cls(code, str(e), **context) from e

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def list_folders(
        self,
        page_token: str | None = None,
        include_parents: bool = True,
    ) -> FolderPage:
        """폴더 목록 1페이지 (휴지통 제외, 내 소유)."""
        fields = FOLDER_FIELDS_WITH_PARENTS if include_parents else FOLDER_FIELDS_NAME_ONLY
        request = self.service.files().list(
            q=FOLDER_LISTING_QUERY,
            fields=fields,
            pageSize=self.page_size,
            pageToken=page_token,
        )
        data = self._execute(
            request,
            UpstreamListingError,
            ErrorCodes.LISTING_FAILED,
            page_token=page_token,
        )
        return FolderPage(
            records=[FolderRecord.from_api(f) for f in data.get("files", []) or []],
            next_page_token=data.get("nextPageToken") or None,
        )

    def search(self, query: str, page_size: int = SEARCH_PAGE_SIZE) -> list[dict[str, Any]]:
        """이름 부분 일치 검색 (이름순)."""
        request = self.service.files().list(
            q=f"name contains '{escape_query_value(query)}' and trashed=false",
            fields=SEARCH_FIELDS,
            orderBy="name",
            pageSize=page_size,
        )
        data = self._execute(request, UpstreamWriteError, ErrorCodes.SEARCH_FAILED, query=query)
        return list(data.get("files", []) or [])

    def latest_file(self) -> dict[str, Any] | None:
        """가장 최근 수정된 파일 (폴더 제외)."""
        request = self.service.files().list(
            q=LATEST_FILE_QUERY,
            fields=LATEST_FIELDS,
            orderBy="modifiedTime desc",
            pageSize=1,
        )
        data = self._execute(request, UpstreamWriteError, ErrorCodes.SEARCH_FAILED)
        files = data.get("files", []) or []
        return files[0] if files else None

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def get_parents(self, file_id: str) -> list[str]:
        """현재 부모 폴더 ID 목록."""
        request = self.service.files().get(fileId=file_id, fields="parents")
        data = self._execute(
            request, UpstreamWriteError, ErrorCodes.METADATA_FAILED, file_id=file_id
        )
        return list(data.get("parents", []) or [])

    def get_name(self, file_id: str) -> str:
        request = self.service.files().get(fileId=file_id, fields="name")
        data = self._execute(
            request, UpstreamWriteError, ErrorCodes.METADATA_FAILED, file_id=file_id
        )
        return str(data.get("name", ""))

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_file(self, item: UploadItem) -> dict[str, Any]:
        """파일을 기본 위치(내 드라이브 루트)에 그대로 업로드."""
        media = MediaIoBaseUpload(
            io.BytesIO(item.content),
            mimetype=item.mime_type or "application/octet-stream",
            resumable=False,
        )
        request = self.service.files().create(
            body={"name": item.name},
            media_body=media,
            fields=CREATED_FILE_FIELDS,
        )
        return self._execute(
            request, UpstreamWriteError, ErrorCodes.CREATE_FAILED, file=item.name
        )

    def create_folder(self, name: str, parent_id: str | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {"name": name, "mimeType": FOLDER_MIME_TYPE}
        if parent_id and parent_id != ROOT_FOLDER_ID:
            body["parents"] = [parent_id]
        request = self.service.files().create(body=body, fields=CREATED_FOLDER_FIELDS)
        return self._execute(
            request, UpstreamWriteError, ErrorCodes.CREATE_FAILED, folder=name
        )

    def move_file(
        self,
        file_id: str,
        new_parent_id: str,
        previous_parents: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        파일 이동: 새 부모 추가 + 기존 부모 전부 제거.

        Args:
            previous_parents: 이미 알고 있는 부모 목록 (None이면 조회)
        """
        if previous_parents is None:
            previous_parents = self.get_parents(file_id)

        request = self.service.files().update(
            fileId=file_id,
            addParents=new_parent_id,
            removeParents=",".join(previous_parents),
            fields=MOVED_FILE_FIELDS,
        )
        return self._execute(
            request,
            UpstreamWriteError,
            ErrorCodes.MOVE_FAILED,
            file_id=file_id,
            new_parent_id=new_parent_id,
        )
