"""
설정 로드: default.yaml + 환경 변수.

우선순위 (높은 순):
1. 환경 변수 (PORT, LOG_LEVEL)
2. YAML 파일 (DOCFILL_CONFIG 또는 프로젝트 루트 default.yaml)
3. domain.constants 기본값

Settings는 create_app()에 명시적으로 전달된다 (모듈 전역 상태 없음).
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from docfill.domain.constants import (
    DEFAULT_TEMPLATE_FILENAME,
    MAX_JSON_BYTES,
    MAX_UPLOAD_BYTES,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "default.yaml"
DEFAULT_TEMPLATE_PATH = PROJECT_ROOT / "templates" / DEFAULT_TEMPLATE_FILENAME
STATIC_DIR = Path(__file__).parent.parent / "app" / "static"


@dataclass
class Settings:
    """서비스 설정."""

    host: str = "0.0.0.0"
    port: int = 3000
    default_template_path: Path = DEFAULT_TEMPLATE_PATH
    static_dir: Path | None = STATIC_DIR
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    max_json_bytes: int = MAX_JSON_BYTES
    rate_limit_max_requests: int = RATE_LIMIT_MAX_REQUESTS
    rate_limit_window_seconds: float = RATE_LIMIT_WINDOW_SECONDS
    cors_allow_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """설정 파일 로드. 파일이 없으면 빈 dict."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.debug(f"Config file not found, using defaults: {config_path}")
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}
        return data


def _resolve_path(value: str | None, fallback: Path | None) -> Path | None:
    if not value:
        return fallback
    path = Path(value)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def settings_from_config(
    config: Mapping[str, Any],
    env: Mapping[str, str] | None = None,
) -> Settings:
    """
    YAML dict + 환경 변수 → Settings.

    Args:
        config: load_config() 결과
        env: 환경 변수 매핑 (기본: os.environ)

    Returns:
        Settings

    Raises:
        ValueError: PORT 등 숫자 값이 잘못된 경우
    """
    if env is None:
        env = os.environ

    defaults = Settings()
    server = config.get("server") or {}
    templates = config.get("templates") or {}
    uploads = config.get("uploads") or {}
    limits = config.get("limits") or {}
    rate_limit = config.get("rate_limit") or {}
    cors = config.get("cors") or {}
    logging_cfg = config.get("logging") or {}

    port = env.get("PORT") or server.get("port", defaults.port)
    log_level = env.get("LOG_LEVEL") or logging_cfg.get("level", defaults.log_level)

    return Settings(
        host=server.get("host", defaults.host),
        port=int(port),
        default_template_path=_resolve_path(
            templates.get("default_path"), defaults.default_template_path
        ),
        static_dir=_resolve_path(server.get("static_dir"), defaults.static_dir),
        max_upload_bytes=int(uploads.get("max_bytes", defaults.max_upload_bytes)),
        max_json_bytes=int(limits.get("max_json_bytes", defaults.max_json_bytes)),
        rate_limit_max_requests=int(
            rate_limit.get("max_requests", defaults.rate_limit_max_requests)
        ),
        rate_limit_window_seconds=float(
            rate_limit.get("window_seconds", defaults.rate_limit_window_seconds)
        ),
        cors_allow_origins=list(
            cors.get("allow_origins", defaults.cors_allow_origins)
        ),
        log_level=str(log_level).upper(),
    )


def load_settings(config_path: Path | None = None) -> Settings:
    """
    .env → YAML → Settings.

    config_path가 없으면 DOCFILL_CONFIG 환경 변수, 그다음 default.yaml.
    """
    load_dotenv()

    if config_path is None and os.environ.get("DOCFILL_CONFIG"):
        config_path = Path(os.environ["DOCFILL_CONFIG"])

    return settings_from_config(load_config(config_path))
