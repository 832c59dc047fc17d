"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uvicorn driveplacer.app.main:app --reload --port 3000
- 프로덕션: python -m driveplacer.app.main
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from driveplacer.app.providers.anthropic import ClaudeProvider
from driveplacer.app.providers.base import CompletionProvider
from driveplacer.app.routes import auth, chat, files, folders
from driveplacer.app.settings import Settings, load_settings
from driveplacer.core.logging import configure_logging
from driveplacer.domain.errors import DriveAppError, NotAuthenticatedError

logger = logging.getLogger(__name__)


# =============================================================================
# Providers
# =============================================================================


def create_completion_provider(settings: Settings) -> CompletionProvider | None:
    """AI 키가 있으면 Claude provider, 없으면 None (기능 비활성)."""
    if not settings.ai_enabled:
        return None
    return ClaudeProvider(
        model=settings.ai_model,
        api_key=settings.anthropic_api_key,
        max_tokens=settings.ai_max_tokens,
        timeout=settings.chat_timeout,
    )


# =============================================================================
# Error Handling
# =============================================================================


async def handle_app_error(request: Request, exc: DriveAppError) -> JSONResponse:
    """DriveAppError → {success: false, message} (401 / 400 / 500)."""
    if isinstance(exc, NotAuthenticatedError):
        logger.info(f"Unauthenticated request: {request.method} {request.url.path}")
    else:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} crashed: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"success": False, "message": str(exc)})


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    settings: Settings | None = None,
    completion_provider: CompletionProvider | None = None,
) -> FastAPI:
    """
    앱 생성 (설정 주입 지점은 여기 하나).

    Args:
        settings: None이면 load_settings()
        completion_provider: 테스트용 주입 (None이면 설정으로 생성)
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="DrivePlacer",
        description="Google Drive 업로드 + AI 폴더 자동 배치",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.completion_provider = (
        completion_provider
        if completion_provider is not None
        else create_completion_provider(settings)
    )

    # Middleware
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site="none" if settings.is_production else "lax",
        https_only=settings.is_production,
    )
    if settings.frontend_url:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[settings.frontend_url],
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )
        logger.info(f"[CORS] Enabled for: {settings.frontend_url}")
    else:
        logger.info("[CORS] Same origin mode")

    app.add_exception_handler(DriveAppError, handle_app_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    # Routes
    app.include_router(auth.router, tags=["Auth"])
    app.include_router(auth.api_router, prefix="/api/auth", tags=["Auth API"])
    app.include_router(folders.api_router, prefix="/api/folders", tags=["Folders API"])
    app.include_router(files.upload_router, prefix="/api/upload", tags=["Upload API"])
    app.include_router(files.api_router, prefix="/api/files", tags=["Files API"])
    app.include_router(chat.api_router, prefix="/api/chat", tags=["Chat API"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    # 빌드된 프론트엔드 (API 라우트 뒤에 마운트)
    if settings.static_dir is not None and settings.static_dir.exists():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="frontend")
        logger.info(f"Serving frontend from {settings.static_dir}")
    else:

        @app.get("/")
        async def root() -> dict[str, Any]:
            return {
                "message": "DrivePlacer",
                "endpoints": {
                    "login": "/auth/google",
                    "folders": "/api/folders",
                    "upload": "/api/upload",
                },
            }

    return app


app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "driveplacer.app.main:app",
        host="0.0.0.0",
        port=app.state.settings.port,
        reload=not app.state.settings.is_production,
    )
