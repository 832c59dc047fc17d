"""
설정 로드.

우선순위: 환경변수(.env 포함) > default.yaml > 코드 기본값.
앱 생성 시 1회 로드해서 create_app(settings)에 주입하고, 이후 변경하지 않는다.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from driveplacer.domain.constants import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_PLACEMENT_TEMPERATURE,
    MAX_LISTING_PAGES,
)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "default.yaml"
DEFAULT_SESSION_SECRET = "change-me"
DEV_FRONTEND_URL = "http://localhost:5173"


@dataclass(frozen=True)
class Settings:
    """애플리케이션 설정 (불변)."""

    # === Server ===
    environment: str = "development"
    port: int = 3000
    backend_url: str = ""
    frontend_url: str = ""
    static_dir: Path | None = None
    log_level: str = "INFO"

    # === Session ===
    session_secret: str = DEFAULT_SESSION_SECRET
    session_max_age: int = 24 * 60 * 60
    session_cookie: str = "sessionId"

    # === Google OAuth ===
    google_client_id: str | None = None
    google_client_secret: str | None = None

    # === Drive ===
    page_size: int = DEFAULT_PAGE_SIZE
    max_listing_pages: int = MAX_LISTING_PAGES

    # === AI ===
    anthropic_api_key: str | None = None
    ai_model: str = "claude-sonnet-4-20250514"
    ai_max_tokens: int = 1024
    placement_temperature: float = DEFAULT_PLACEMENT_TEMPERATURE
    placement_timeout: float = 30.0
    chat_timeout: float = 60.0

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def ai_enabled(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def oauth_redirect_base(self) -> str:
        """설정된 백엔드 URL (없으면 빈 문자열 → 요청 헤더에서 유도)."""
        return self.backend_url.rstrip("/")


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """YAML 설정 파일 로드 (없으면 빈 dict)."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}
        return data


def load_settings(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """
    Settings 생성.

    Args:
        config_path: YAML 경로 (None이면 DRIVEPLACER_CONFIG 또는 default.yaml)
        env: 환경변수 매핑 (테스트용, None이면 os.environ + .env)
    """
    if env is None:
        load_dotenv()
        env = os.environ

    if config_path is None and env.get("DRIVEPLACER_CONFIG"):
        config_path = Path(env["DRIVEPLACER_CONFIG"])

    config = load_config(config_path)
    server = config.get("server", {}) or {}
    session = config.get("session", {}) or {}
    drive = config.get("drive", {}) or {}
    ai = config.get("ai", {}) or {}

    environment = env.get("APP_ENV") or env.get("NODE_ENV") or server.get(
        "environment", "development"
    )
    port = int(env.get("PORT") or server.get("port", 3000))

    # Railway 공개 도메인 > BACKEND_URL > (개발 환경) localhost
    if env.get("RAILWAY_PUBLIC_DOMAIN"):
        backend_url = f"https://{env['RAILWAY_PUBLIC_DOMAIN']}"
    else:
        backend_url = env.get("BACKEND_URL") or server.get("backend_url") or (
            "" if environment == "production" else f"http://localhost:{port}"
        )

    frontend_url = env.get("FRONTEND_URL")
    if frontend_url is None:
        frontend_url = server.get("frontend_url") or (
            "" if environment == "production" else DEV_FRONTEND_URL
        )

    static_dir_value = env.get("STATIC_DIR") or server.get("static_dir")
    static_dir = Path(static_dir_value) if static_dir_value else None
    if static_dir is not None and not static_dir.is_absolute():
        static_dir = PROJECT_ROOT / static_dir

    settings = Settings(
        environment=environment,
        port=port,
        backend_url=backend_url,
        frontend_url=frontend_url,
        static_dir=static_dir,
        log_level=env.get("LOG_LEVEL") or server.get("log_level", "INFO"),
        session_secret=env.get("SESSION_SECRET")
        or session.get("secret", DEFAULT_SESSION_SECRET),
        session_max_age=int(session.get("max_age", 24 * 60 * 60)),
        session_cookie=session.get("cookie_name", "sessionId"),
        google_client_id=env.get("GOOGLE_CLIENT_ID"),
        google_client_secret=env.get("GOOGLE_CLIENT_SECRET"),
        page_size=int(drive.get("page_size", DEFAULT_PAGE_SIZE)),
        max_listing_pages=int(drive.get("max_listing_pages", MAX_LISTING_PAGES)),
        anthropic_api_key=env.get("MY_ANTHROPIC_KEY") or env.get("ANTHROPIC_API_KEY"),
        ai_model=ai.get("model", "claude-sonnet-4-20250514"),
        ai_max_tokens=int(ai.get("max_tokens", 1024)),
        placement_temperature=float(
            ai.get("placement_temperature", DEFAULT_PLACEMENT_TEMPERATURE)
        ),
        placement_timeout=float(ai.get("placement_timeout", 30.0)),
        chat_timeout=float(ai.get("chat_timeout", 60.0)),
    )

    if settings.session_secret == DEFAULT_SESSION_SECRET:
        logger.warning("SESSION_SECRET not set; using insecure default secret")
    if not settings.ai_enabled:
        logger.info("Anthropic API key not set; AI placement and chat disabled")

    return settings
