"""
Logging setup.

모듈마다 logging.getLogger(__name__)을 쓰고,
프로세스 시작 시 configure_logging()을 한 번 호출한다.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    루트 로거 설정.

    Args:
        level: 로그 레벨 이름 (DEBUG, INFO, WARNING, ...)
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger("docfill").setLevel(numeric_level)
