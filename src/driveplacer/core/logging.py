"""
Logging setup.

규칙:
- 모듈마다 logger = logging.getLogger(__name__)
- 토큰/키 원문은 로그에 남기지 않음 (mask_secret 사용)
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """
    루트 로거 설정 (앱 시작 시 1회).

    Args:
        level: 로그 레벨 이름 (DEBUG, INFO, ...)
    """
    global _configured

    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    if not _configured:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
        _configured = True
    logging.getLogger("driveplacer").setLevel(resolved)

    # googleapiclient discovery cache 경고 억제
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


def mask_secret(value: str | None, visible: int = 4) -> str:
    """
    민감 값 마스킹.

    Examples:
        >>> mask_secret("ya29.abcdefgh")
        'ya29…(13)'
    """
    if not value:
        return "<none>"
    if len(value) <= visible:
        return "*" * len(value)
    return f"{value[:visible]}…({len(value)})"
