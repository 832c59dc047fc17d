"""
Domain Constants: 서비스 전역 상수.

Drive 쿼리, 트리 루트, 파일 유형 분류표 등.
"""

# =============================================================================
# Drive Query (Drive v3 검색 문법)
# =============================================================================

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

# 휴지통 제외 + 내 소유 + 폴더만
FOLDER_LISTING_QUERY = (
    f"mimeType='{FOLDER_MIME_TYPE}' and trashed=false and 'me' in owners"
)

# 최신 파일 조회: 폴더 제외
LATEST_FILE_QUERY = (
    f"trashed=false and 'me' in owners and mimeType != '{FOLDER_MIME_TYPE}'"
)

FOLDER_FIELDS_WITH_PARENTS = "nextPageToken, files(id, name, parents)"
FOLDER_FIELDS_NAME_ONLY = "nextPageToken, files(id, name)"
CREATED_FILE_FIELDS = "id,name,webViewLink,parents"
CREATED_FOLDER_FIELDS = "id,name,webViewLink"
MOVED_FILE_FIELDS = "id,name,parents"
SEARCH_FIELDS = "files(id, name, mimeType, parents, size, modifiedTime)"
LATEST_FIELDS = "files(id, name, mimeType, size, modifiedTime, webViewLink, parents)"

DRIVE_SCOPES = [
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/drive.readonly",
    "https://www.googleapis.com/auth/drive",
]
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

# =============================================================================
# Listing Limits
# =============================================================================

DEFAULT_PAGE_SIZE = 1000
# nextPageToken을 끝없이 돌려주는 provider 방어용 상한
MAX_LISTING_PAGES = 5000
SEARCH_PAGE_SIZE = 50

# =============================================================================
# Folder Tree
# =============================================================================

ROOT_FOLDER_ID = "root"
ROOT_FOLDER_NAME = "My Drive"

# =============================================================================
# Placement
# =============================================================================

NONE_ANSWER = "NONE"
DEFAULT_PLACEMENT_TEMPERATURE = 0.3

# =============================================================================
# File Type Classification (확장자 → 분류 라벨)
# =============================================================================

GENERIC_FILE_TYPE = "File"

FILE_TYPE_LABELS: dict[str, str] = {
    ".jpg": "Image", ".jpeg": "Image", ".png": "Image", ".gif": "Image", ".webp": "Image",
    ".mp4": "Video", ".avi": "Video", ".mov": "Video", ".mkv": "Video",
    ".mp3": "Audio", ".wav": "Audio", ".flac": "Audio",
    ".pdf": "Document", ".doc": "Document", ".docx": "Document",
    ".xls": "Spreadsheet", ".xlsx": "Spreadsheet",
    ".ppt": "Presentation", ".pptx": "Presentation",
    ".txt": "Text",
    ".zip": "Archive", ".rar": "Archive",
    ".js": "Code", ".ts": "Code", ".py": "Code", ".html": "Code", ".css": "Code",
}
