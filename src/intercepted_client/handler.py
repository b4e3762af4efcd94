"""
Handler — hook에 넘겨지는 1회성 완료 슬롯
- resolve(value)로 체인을 이어가거나 reject(error)로 journey를 중단한다
- 두 번 완료하면 HandlerAlreadyCompletedError (fail fast)
- 완료 직후 등록된 listener를 동기적으로 호출한다 (Sequential 큐 drain 용도)
"""

from __future__ import annotations

import asyncio
from types import TracebackType
from typing import Callable, Generic, TypeVar

import httpx

from .errors import HandlerAlreadyCompletedError

T = TypeVar("T")


def _retrieve_exception(future: asyncio.Future) -> None:
    # wait()하는 쪽이 없어도 reject된 에러는 조회된 것으로 표시한다
    if not future.cancelled():
        future.exception()


class Handler(Generic[T]):
    """
    asyncio.Future 기반 단일 완료 슬롯

    실행 중인 이벤트 루프 안에서 생성해야 한다.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._future.add_done_callback(_retrieve_exception)
        self._listeners: list[Callable[[], None]] = []

    @property
    def is_completed(self) -> bool:
        return self._future.done()

    def resolve(self, value: T) -> None:
        """값으로 완료한다. 체인은 이 값으로 다음 단계를 진행한다."""
        self._ensure_pending()
        self._future.set_result(value)
        self._notify()

    def next(self, value: T) -> None:
        """resolve() 별칭"""
        self.resolve(value)

    def reject(
        self,
        error: BaseException,
        trace: TracebackType | None = None,
    ) -> None:
        """
        에러로 완료한다. 남은 체인은 건너뛰고 error가 호출자에게 그대로 전달된다.

        Args:
            error: 예외 인스턴스
            trace: 진단용 traceback (선택). 주어지면 error에 붙인다.
        """
        if not isinstance(error, BaseException):
            raise TypeError(
                f"reject() expects an exception instance, got {type(error).__name__}"
            )
        self._ensure_pending()
        if trace is not None:
            error = error.with_traceback(trace)
        self._future.set_exception(error)
        self._notify()

    def add_done_listener(self, listener: Callable[[], None]) -> None:
        """
        완료 listener 등록

        resolve/reject 직후 등록 순서대로 동기 호출된다.
        이미 완료된 상태라면 즉시 호출한다.
        """
        if self.is_completed:
            listener()
            return
        self._listeners.append(listener)

    async def wait(self) -> T:
        """
        완료를 기다려 값을 반환하거나 reject된 에러를 발생시킨다.

        대기 중인 task가 취소되어도 슬롯 자체는 취소되지 않는다.
        hook이 나중에 완료해도 큐 drain이 정상 동작하도록 shield로 감싼다.
        """
        return await asyncio.shield(self._future)

    def _ensure_pending(self) -> None:
        if self._future.done():
            raise HandlerAlreadyCompletedError(type(self).__name__)

    def _notify(self) -> None:
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener()

    def __repr__(self) -> str:
        state = "completed" if self.is_completed else "pending"
        return f"{type(self).__name__}({state})"


class RequestHandler(Handler[httpx.Request]):
    """요청 단계 hook에 넘겨지는 Handler"""


class ResponseHandler(Handler[httpx.Response]):
    """응답 단계 hook에 넘겨지는 Handler"""
