"""
Basic Interceptor
- intercept_request / intercept_response 두 hook을 가진 정책 객체
- 오버라이드하지 않은 hook은 값을 그대로 통과시킨다
- from_handlers()로 함수만 넘겨서 만들 수도 있다
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from typing import Any, Callable

import httpx

from ._types import Phase, RequestHook, ResponseHook
from .handler import Handler, RequestHandler, ResponseHandler

logger = logging.getLogger(__name__)

# 실행 중인 async hook task 강한 참조 (GC 방지)
_running_hooks: set[asyncio.Task] = set()


def invoke_hook(
    hook: Callable[[Any, Handler], Any],
    value: Any,
    handler: Handler,
    *,
    interceptor: str,
    phase: Phase,
) -> None:
    """
    hook 하나를 실행한다.

    - 코루틴 hook은 task로 스케줄링한다
    - handler 완료 전에 hook이 예외를 던지면 그 예외로 handler를 reject한다
    - handler 완료 후의 예외는 sync hook이면 다시 던지고, async hook이면 로그만 남긴다
    """
    try:
        result = hook(value, handler)
    except Exception as e:
        if handler.is_completed:
            raise
        logger.debug(
            f"[{interceptor}] {phase} hook raised {type(e).__name__}, rejecting",
            extra={"interceptor": interceptor, "phase": phase},
        )
        handler.reject(e)
        return

    if inspect.isawaitable(result):
        task = asyncio.ensure_future(result)
        _running_hooks.add(task)
        task.add_done_callback(
            functools.partial(
                _on_hook_done, handler=handler, interceptor=interceptor, phase=phase
            )
        )


def _on_hook_done(
    task: asyncio.Task, *, handler: Handler, interceptor: str, phase: Phase
) -> None:
    _running_hooks.discard(task)

    if task.cancelled():
        if not handler.is_completed:
            handler.reject(asyncio.CancelledError(f"{interceptor} {phase} hook cancelled"))
        return

    error = task.exception()
    if error is None:
        return
    if handler.is_completed:
        logger.error(
            f"[{interceptor}] {phase} hook raised after completing its handler: "
            f"{type(error).__name__}: {error}",
            exc_info=error,
            extra={"interceptor": interceptor, "phase": phase},
        )
        return
    logger.debug(
        f"[{interceptor}] {phase} hook raised {type(error).__name__}, rejecting",
        extra={"interceptor": interceptor, "phase": phase},
    )
    handler.reject(error)


class HttpInterceptor:
    """
    요청/응답 interceptor 베이스

    사용법:
        class AuthInterceptor(HttpInterceptor):
            def intercept_request(self, request, handler):
                request.headers["Authorization"] = "Bearer ..."
                handler.resolve(request)

    hook은 async def여도 된다:
        class AuditInterceptor(HttpInterceptor):
            async def intercept_response(self, response, handler):
                await save(response)
                handler.resolve(response)

    hook은 반드시 resolve/reject 중 하나를 정확히 한 번 호출해야 한다.
    둘 다 호출하지 않으면 해당 journey는 영원히 멈춘다.
    """

    @classmethod
    def from_handlers(
        cls,
        intercept_request: RequestHook | None = None,
        intercept_response: ResponseHook | None = None,
    ) -> HttpInterceptor:
        """함수로부터 interceptor 생성. 생략한 hook은 통과시킨다."""
        return _HttpInterceptorWrapper(
            intercept_request=intercept_request,
            intercept_response=intercept_response,
        )

    @property
    def name(self) -> str:
        """로그에 쓰는 이름"""
        return type(self).__name__

    def intercept_request(self, request: httpx.Request, handler: RequestHandler) -> Any:
        """요청을 가로챈다. 기본: 그대로 통과"""
        handler.resolve(request)

    def intercept_response(
        self, response: httpx.Response, handler: ResponseHandler
    ) -> Any:
        """응답을 가로챈다. 기본: 그대로 통과"""
        handler.resolve(response)

    # --- client가 체인에 연결하는 실제 hook ---

    def _effective_request_hook(self) -> RequestHook:
        return self.intercept_request

    def _effective_response_hook(self) -> ResponseHook:
        return self.intercept_response

    def __repr__(self) -> str:
        return f"{self.name}()"


class _HttpInterceptorWrapper(HttpInterceptor):
    def __init__(
        self,
        intercept_request: RequestHook | None = None,
        intercept_response: ResponseHook | None = None,
    ):
        self._request_fn = intercept_request
        self._response_fn = intercept_response

    @property
    def name(self) -> str:
        return "HttpInterceptor.from_handlers"

    def intercept_request(self, request: httpx.Request, handler: RequestHandler) -> Any:
        if self._request_fn is None:
            return super().intercept_request(request, handler)
        return self._request_fn(request, handler)

    def intercept_response(
        self, response: httpx.Response, handler: ResponseHandler
    ) -> Any:
        if self._response_fn is None:
            return super().intercept_response(response, handler)
        return self._response_fn(response, handler)
