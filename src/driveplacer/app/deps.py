"""
FastAPI dependencies.

설정/provider는 create_app()에서 app.state에 1회 주입된 것만 읽는다.
Drive 클라이언트는 요청마다 세션 토큰으로 새로 만든다.
"""

from collections.abc import Callable

from fastapi import Depends, Request

from driveplacer.app.providers.base import CompletionProvider
from driveplacer.app.providers.google_drive import DriveClient, credentials_from_session
from driveplacer.app.services.placement import PlacementResolver
from driveplacer.app.services.upload import UploadService
from driveplacer.app.settings import Settings

SESSION_TOKENS_KEY = "tokens"


def get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_completion_provider(request: Request) -> CompletionProvider | None:
    """AI 키가 없으면 None (배치 추천/대화 비활성)."""
    provider: CompletionProvider | None = request.app.state.completion_provider
    return provider


def build_drive_client(request: Request, settings: Settings) -> DriveClient:
    """
    세션 토큰 → DriveClient.

    Raises:
        NotAuthenticatedError: 세션에 토큰 없음
    """
    credentials = credentials_from_session(
        request.session.get(SESSION_TOKENS_KEY),
        settings.google_client_id,
        settings.google_client_secret,
    )
    return DriveClient.from_credentials(credentials, page_size=settings.page_size)


def get_drive_client(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> DriveClient:
    return build_drive_client(request, settings)


def get_drive_factory(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Callable[[], DriveClient]:
    """Drive 의도일 때만 클라이언트를 만드는 factory (채팅 명령용)."""
    return lambda: build_drive_client(request, settings)


def get_placement_resolver(
    drive: DriveClient = Depends(get_drive_client),
    provider: CompletionProvider | None = Depends(get_completion_provider),
    settings: Settings = Depends(get_settings),
) -> PlacementResolver:
    return PlacementResolver(
        drive,
        provider,
        temperature=settings.placement_temperature,
        timeout=settings.placement_timeout,
        max_pages=settings.max_listing_pages,
    )


def get_upload_service(
    drive: DriveClient = Depends(get_drive_client),
    resolver: PlacementResolver = Depends(get_placement_resolver),
) -> UploadService:
    return UploadService(drive, resolver)
