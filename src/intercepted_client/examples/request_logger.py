"""
내장 Interceptor: 요청/응답 로깅
- 요청 단계에서 method/url, 응답 단계에서 status/elapsed 기록
- 시작 시각은 request.extensions에 보관한다
"""

from __future__ import annotations

import logging
import time

import httpx

from ..handler import RequestHandler, ResponseHandler
from ..interceptor import HttpInterceptor

logger = logging.getLogger(__name__)

STARTED_AT_KEY = "intercepted_client.started_at"


class LoggingInterceptor(HttpInterceptor):
    """요청과 응답을 로그로 남긴다. 값은 변경하지 않는다."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def intercept_request(self, request: httpx.Request, handler: RequestHandler) -> None:
        request.extensions[STARTED_AT_KEY] = time.perf_counter()
        logger.log(
            self.level,
            f"--> {request.method} {request.url}",
            extra={"method": request.method, "url": str(request.url)},
        )
        handler.resolve(request)

    def intercept_response(
        self, response: httpx.Response, handler: ResponseHandler
    ) -> None:
        request = response.request
        started = request.extensions.get(STARTED_AT_KEY)
        elapsed_ms = (
            round((time.perf_counter() - started) * 1000, 2) if started is not None else None
        )
        logger.log(
            self.level,
            f"<-- {response.status_code} {request.method} {request.url}"
            + (f" ({elapsed_ms}ms)" if elapsed_ms is not None else ""),
            extra={
                "method": request.method,
                "url": str(request.url),
                "status_code": response.status_code,
                "elapsed_ms": elapsed_ms,
            },
        )
        handler.resolve(response)
