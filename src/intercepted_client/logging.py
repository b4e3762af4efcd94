"""
journey 로깅
- 클라이언트와 interceptor 체인은 `intercepted_client.*` 로거에 기록한다
- 각 레코드는 extra로 journey 필드(interceptor, phase, method, url, status_code, elapsed_ms)를 싣는다
- text 포맷은 메시지 뒤에 `key=value`로, json 포맷은 최상위 키로 journey 필드를 붙인다
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Literal

LOGGER_NAME = "intercepted_client"

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# logger.xxx(..., extra={...})로 넘기는 journey 필드
JOURNEY_FIELDS = ("interceptor", "phase", "method", "url", "status_code", "elapsed_ms")


def journey_fields(record: logging.LogRecord) -> dict[str, Any]:
    """레코드에 실린 journey 필드 중 값이 있는 것만 JOURNEY_FIELDS 순서로"""
    fields = {}
    for name in JOURNEY_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            fields[name] = value
    return fields


class JourneyTextFormatter(logging.Formatter):
    """한 줄 텍스트 포매터. journey 필드가 있으면 `| method=GET status_code=200` 형태로 덧붙인다."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = journey_fields(record)
        if not fields:
            return line
        suffix = " ".join(f"{name}={value}" for name, value in fields.items())
        head, sep, tail = line.partition("\n")
        return f"{head} | {suffix}{sep}{tail}"


class JSONFormatter(logging.Formatter):
    """journey 필드를 최상위 키로 펼친 JSON 한 줄"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, DEFAULT_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **journey_fields(record),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(
    level: int | str = logging.INFO,
    format: Literal["text", "json"] = "text",
    stream: object = None,
) -> logging.Logger:
    """
    journey 로그를 받을 `intercepted_client` 로거에 핸들러를 하나 붙인다.

    DEBUG에서는 journey 시작/transport 응답/종료가, INFO에서는 LoggingInterceptor의
    요청/응답 로그가 남는다. stall 경고는 WARNING, handler 완료 후 실패한
    async hook은 ERROR로 남는다.
    다시 호출하면 이전 핸들러를 교체한다.

    Args:
        level: 로그 레벨 (예: logging.DEBUG, "DEBUG")
        format: "text"는 JourneyTextFormatter, "json"은 JSONFormatter
        stream: 출력 스트림 (기본: sys.stderr)

    Returns:
        설정된 intercepted_client 로거
    """
    logger = logging.getLogger(LOGGER_NAME)

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            JourneyTextFormatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
        )

    logger.addHandler(handler)
    return logger
