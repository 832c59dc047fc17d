"""DrivePlacer: Google Drive 업로드 + AI 폴더 자동 배치 웹 서비스."""

__version__ = "0.1.0"
