"""Logging configuration for gvg-watch."""

import logging
import sys
from datetime import datetime
from pathlib import Path

_configured = False

NOISY_LOGGERS = ("httpx", "httpcore")

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure logging for the gvgwatch package.

    - Output to stderr (stdout carries only progress lines)
    - httpx/httpcore request logs are silenced to WARNING
    - Idempotent: safe to call multiple times
    """
    global _configured
    if _configured:
        return
    _configured = True

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger("gvgwatch")
    root.setLevel(level)
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_file_name(modes: tuple[str, ...] = (), now: datetime | None = None) -> str:
    """수집 1회당 로그 파일 이름. 예: 20261018_063000_local-global.log"""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{stamp}_{'-'.join(modes)}.log" if modes else f"{stamp}.log"


def setup_file_logging(log_dir: Path, modes: tuple[str, ...] = ()) -> logging.FileHandler:
    """<log_dir>/<log_file_name> 에 DEBUG 레벨 로그를 남긴다.

    보통 log_dir은 AppConfig.log_dir (<data_dir>/logs). 반환된 handler는
    teardown_file_logging으로 정리한다.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / log_file_name(modes), encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger("gvgwatch")
    # stderr가 INFO여도 파일에는 DEBUG까지 기록
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)
    return handler


def teardown_file_logging(handler: logging.Handler) -> None:
    root = logging.getLogger("gvgwatch")
    root.removeHandler(handler)
    handler.close()


def reset_logging() -> None:
    """Reset logging state. For testing only."""
    global _configured
    _configured = False
    root = logging.getLogger("gvgwatch")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.WARNING)
