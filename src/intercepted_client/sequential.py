"""
Sequential Interceptor
- 인스턴스별 요청 큐 / 응답 큐를 두고 겹치는 hook 호출을 직렬화한다
- 큐마다 동시에 실행 중인 hook은 최대 하나
- 앞선 호출의 handler가 완료되어야 다음 호출이 시작된다 (도착 순서 FIFO)
"""

from __future__ import annotations

from collections import deque
from functools import cached_property
from typing import Any, Callable

import httpx

from ._types import Phase, RequestHook, ResponseHook
from .handler import Handler, RequestHandler, ResponseHandler
from .interceptor import HttpInterceptor, invoke_hook


class _TaskQueue(deque):
    """(value, handler) 대기열 + 실행 중 플래그 + drain 상태"""

    def __init__(self) -> None:
        super().__init__()
        self.is_running = False
        # drain 루프가 돌고 있는 동안 완료 신호는 플래그로만 남긴다
        self.is_draining = False
        self.drain_requested = False


class SequentialHttpInterceptor(HttpInterceptor):
    """
    hook 호출을 도착 순서대로 하나씩 처리하는 interceptor

    여러 journey가 같은 인스턴스를 동시에 지나가도
    intercept_request(또는 intercept_response) 로직은 겹치지 않는다.
    토큰 갱신처럼 공유 상태를 다루는 interceptor에 쓴다.

    사용법:
        class RefreshTokenInterceptor(SequentialHttpInterceptor):
            async def intercept_request(self, request, handler):
                token = await self.ensure_token()  # 동시에 한 journey만 들어온다
                request.headers["Authorization"] = f"Bearer {token}"
                handler.resolve(request)
    """

    @classmethod
    def from_handlers(
        cls,
        intercept_request: RequestHook | None = None,
        intercept_response: ResponseHook | None = None,
    ) -> SequentialHttpInterceptor:
        """함수로부터 sequential interceptor 생성. 생략한 hook은 통과시킨다."""
        return _SequentialHttpInterceptorWrapper(
            intercept_request=intercept_request,
            intercept_response=intercept_response,
        )

    @cached_property
    def _request_queue(self) -> _TaskQueue:
        return _TaskQueue()

    @cached_property
    def _response_queue(self) -> _TaskQueue:
        return _TaskQueue()

    @property
    def pending_requests(self) -> int:
        """요청 큐에서 대기 중인 호출 수 (실행 중인 것 제외)"""
        return len(self._request_queue)

    @property
    def pending_responses(self) -> int:
        """응답 큐에서 대기 중인 호출 수 (실행 중인 것 제외)"""
        return len(self._response_queue)

    def _effective_request_hook(self) -> RequestHook:
        return self._enqueue_request

    def _effective_response_hook(self) -> ResponseHook:
        return self._enqueue_response

    def _enqueue_request(self, request: httpx.Request, handler: RequestHandler) -> None:
        self._enqueue(
            self._request_queue, request, handler, self.intercept_request, "request"
        )

    def _enqueue_response(
        self, response: httpx.Response, handler: ResponseHandler
    ) -> None:
        self._enqueue(
            self._response_queue, response, handler, self.intercept_response, "response"
        )

    def _enqueue(
        self,
        queue: _TaskQueue,
        value: Any,
        handler: Handler,
        intercept: Callable[[Any, Handler], Any],
        phase: Phase,
    ) -> None:
        def process_next() -> None:
            # hook이 handler를 동기적으로 완료하면 이 listener가 재진입한다.
            # 바깥 루프가 이어서 처리하도록 신호만 남기고 돌아간다 (스택 깊이 고정).
            if queue.is_draining:
                queue.drain_requested = True
                return

            queue.is_draining = True
            try:
                while True:
                    if not queue:
                        queue.is_running = False
                        return
                    next_value, next_handler = queue.popleft()
                    queue.drain_requested = False
                    invoke_hook(
                        intercept, next_value, next_handler, interceptor=self.name, phase=phase
                    )
                    if not queue.drain_requested:
                        # 방금 시작한 hook이 아직 진행 중: 그 handler의 완료가 다음 drain을 연다
                        return
            finally:
                queue.is_draining = False

        handler.add_done_listener(process_next)
        queue.append((value, handler))

        if not queue.is_running:
            queue.is_running = True
            value, handler = queue.popleft()
            invoke_hook(intercept, value, handler, interceptor=self.name, phase=phase)


class _SequentialHttpInterceptorWrapper(SequentialHttpInterceptor):
    def __init__(
        self,
        intercept_request: RequestHook | None = None,
        intercept_response: ResponseHook | None = None,
    ):
        self._request_fn = intercept_request
        self._response_fn = intercept_response

    @property
    def name(self) -> str:
        return "SequentialHttpInterceptor.from_handlers"

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
