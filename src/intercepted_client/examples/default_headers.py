"""
내장 Interceptor: 기본 헤더
- 요청에 없는 헤더만 채운다 (이미 있는 값은 덮어쓰지 않음)
"""

from __future__ import annotations

from typing import Mapping

import httpx

from ..handler import RequestHandler
from ..interceptor import HttpInterceptor


class DefaultHeadersInterceptor(HttpInterceptor):
    """모든 요청에 기본 헤더를 채워 넣는다."""

    def __init__(self, headers: Mapping[str, str]):
        self.headers = dict(headers)

    def intercept_request(self, request: httpx.Request, handler: RequestHandler) -> None:
        for key, value in self.headers.items():
            request.headers.setdefault(key, value)
        handler.resolve(request)
