"""
Auth Routes: Google OAuth 로그인.

- GET /auth/google → Google 동의 화면으로 리다이렉트
- GET /oauth/callback → 토큰 교환 후 세션 저장, 프론트엔드로 리다이렉트
- GET /api/auth/status → {authenticated}
- POST /api/auth/logout → 세션 삭제
"""

import logging
from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from google_auth_oauthlib.flow import Flow

from driveplacer.app.deps import SESSION_TOKENS_KEY, get_settings
from driveplacer.app.providers.google_drive import credentials_to_session
from driveplacer.app.settings import Settings
from driveplacer.core.logging import mask_secret
from driveplacer.domain.constants import DRIVE_SCOPES, GOOGLE_TOKEN_URI

logger = logging.getLogger(__name__)

router = APIRouter()  # /auth, /oauth
api_router = APIRouter()  # /api/auth

OAUTH_STATE_KEY = "oauth_state"
OAUTH_VERIFIER_KEY = "oauth_code_verifier"
CALLBACK_PATH = "/oauth/callback"


def get_redirect_uri(request: Request, settings: Settings) -> str:
    """
    OAuth redirect URI.

    설정된 backend_url 우선, 없으면 프록시 헤더(x-forwarded-*)로 유도.
    """
    if settings.oauth_redirect_base:
        return f"{settings.oauth_redirect_base}{CALLBACK_PATH}"

    proto = request.headers.get("x-forwarded-proto") or request.url.scheme
    host = request.headers.get("x-forwarded-host") or request.headers.get("host") or request.url.netloc
    return f"{proto}://{host}{CALLBACK_PATH}"


def create_flow(settings: Settings, redirect_uri: str, state: str | None = None) -> Flow:
    client_config = {
        "web": {
            "client_id": settings.google_client_id,
            "client_secret": settings.google_client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": GOOGLE_TOKEN_URI,
        }
    }
    return Flow.from_client_config(
        client_config,
        scopes=DRIVE_SCOPES,
        redirect_uri=redirect_uri,
        state=state,
    )


def _frontend_redirect(settings: Settings, query: str) -> RedirectResponse:
    base = settings.frontend_url or "/"
    return RedirectResponse(f"{base}?{query}", status_code=302)


# =============================================================================
# Page Routes
# =============================================================================


@router.get("/auth/google")
async def start_oauth(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """OAuth 시작."""
    redirect_uri = get_redirect_uri(request, settings)
    flow = create_flow(settings, redirect_uri)
    auth_url, state = flow.authorization_url(access_type="offline", prompt="consent")

    request.session[OAUTH_STATE_KEY] = state
    request.session[OAUTH_VERIFIER_KEY] = getattr(flow, "code_verifier", None)
    logger.info(f"[Auth] Starting OAuth flow: redirect_uri={redirect_uri}")
    return RedirectResponse(auth_url, status_code=302)


@router.get(CALLBACK_PATH)
async def oauth_callback(
    request: Request,
    code: str | None = None,
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """OAuth 콜백: code → 토큰 → 세션."""
    if not code:
        logger.error("[OAuth Callback] No code provided")
        return _frontend_redirect(settings, "error=no_code")

    redirect_uri = get_redirect_uri(request, settings)
    flow = create_flow(settings, redirect_uri, state=request.session.get(OAUTH_STATE_KEY))
    verifier = request.session.pop(OAUTH_VERIFIER_KEY, None)
    if verifier:
        flow.code_verifier = verifier

    try:
        flow.fetch_token(code=code)
    except Exception as e:
        logger.error(f"[OAuth Callback] Token exchange failed: {e}", exc_info=True)
        return _frontend_redirect(settings, f"error={quote(str(e) or 'auth_failed')}")

    tokens = credentials_to_session(flow.credentials)
    request.session[SESSION_TOKENS_KEY] = tokens
    request.session.pop(OAUTH_STATE_KEY, None)
    logger.info(
        f"[OAuth Callback] Tokens stored: access={mask_secret(tokens.get('token'))}, "
        f"refresh={'yes' if tokens.get('refresh_token') else 'no'}"
    )
    return _frontend_redirect(settings, "auth=success")


# =============================================================================
# API Routes
# =============================================================================


@api_router.get("/status")
async def auth_status(request: Request) -> dict[str, Any]:
    """로그인 여부."""
    authenticated = bool(request.session.get(SESSION_TOKENS_KEY))
    return {"authenticated": authenticated}


@api_router.post("/logout")
async def logout(request: Request) -> dict[str, Any]:
    request.session.clear()
    return {"success": True}
