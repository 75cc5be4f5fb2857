"""
Core layer: 설정 및 로깅.

역할:
- default.yaml + 환경 변수 → Settings
- 로깅 초기화
"""

from .config import Settings, load_config, load_settings, settings_from_config
from .logging import configure_logging

__all__ = [
    # config
    "Settings",
    "load_config",
    "load_settings",
    "settings_from_config",
    # logging
    "configure_logging",
]
