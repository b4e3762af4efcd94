"""
intercepted_client 에러 정의
- 코어가 직접 발생시키는 에러만 정의한다
- interceptor의 reject 에러와 transport 에러는 감싸지 않고 그대로 전파된다
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class InterceptedClientError(Exception):
    """intercepted_client 에러 베이스"""


class HandlerAlreadyCompletedError(InterceptedClientError, RuntimeError):
    """
    이미 완료된 Handler를 다시 resolve/reject 했을 때 발생하는 예외

    hook이 handler를 두 번 완료하는 것은 프로그래밍 오류이므로 즉시 실패시킨다.

    Attributes:
        handler_name: 중복 완료된 Handler 클래스 이름
    """

    def __init__(self, handler_name: str):
        self.handler_name = handler_name
        super().__init__(f"[{handler_name}] already resolved or rejected")


class RejectedError(InterceptedClientError):
    """
    interceptor가 handler.reject()에 넘길 수 있는 편의용 예외

    코어는 이 예외를 특별 취급하지 않는다. 어떤 예외든 reject에 넘기면
    호출자에게 그대로 전달된다.

    Args:
        message: 거절 사유
        request: 거절 대상 요청 (선택)
        response: 거절 대상 응답 (선택)
    """

    def __init__(
        self,
        message: str,
        *,
        request: httpx.Request | None = None,
        response: httpx.Response | None = None,
    ):
        self.message = message
        self.request = request
        self.response = response
        super().__init__(message)
