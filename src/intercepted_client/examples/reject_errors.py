"""
내장 Interceptor: 에러 상태 코드 거절
- 4xx/5xx 응답을 RejectedError로 reject해서 journey를 실패시킨다
- 뒤에 있는 응답 interceptor는 실행되지 않는다
"""

from __future__ import annotations

from typing import Container

import httpx

from ..errors import RejectedError
from ..handler import ResponseHandler
from ..interceptor import HttpInterceptor


class RejectErrorStatusInterceptor(HttpInterceptor):
    """
    에러 응답을 reject하는 interceptor

    Args:
        allow: reject하지 않을 상태 코드 (예: {404})
    """

    def __init__(self, allow: Container[int] = ()):
        self.allow = allow

    def intercept_response(
        self, response: httpx.Response, handler: ResponseHandler
    ) -> None:
        if response.is_error and response.status_code not in self.allow:
            handler.reject(
                RejectedError(
                    f"HTTP {response.status_code} for {response.request.method} "
                    f"{response.request.url}",
                    request=response.request,
                    response=response,
                )
            )
            return
        handler.resolve(response)
