"""
Handler 단일 완료 슬롯 테스트
python -m pytest tests/test_handler.py -v
"""

import asyncio
import gc

import httpx
import pytest

from intercepted_client import HandlerAlreadyCompletedError, RequestHandler, ResponseHandler


def _raise_value_error():
    raise ValueError("original")


class TestHandler:
    @pytest.mark.asyncio
    async def test_resolve(self):
        handler = RequestHandler()
        request = httpx.Request("GET", "http://localhost")

        handler.resolve(request)

        assert handler.is_completed
        assert await handler.wait() is request

    @pytest.mark.asyncio
    async def test_next_is_alias(self):
        handler = ResponseHandler()
        response = httpx.Response(204)

        handler.next(response)

        assert await handler.wait() is response

    @pytest.mark.asyncio
    async def test_reject(self):
        handler = RequestHandler()
        error = RuntimeError("nope")

        handler.reject(error)

        with pytest.raises(RuntimeError) as exc_info:
            await handler.wait()
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_reject_with_trace(self):
        try:
            _raise_value_error()
        except ValueError as e:
            trace = e.__traceback__

        handler = RequestHandler()
        handler.reject(KeyError("wrapped"), trace)

        with pytest.raises(KeyError) as exc_info:
            await handler.wait()

        tb = exc_info.value.__traceback__
        names = []
        while tb is not None:
            names.append(tb.tb_frame.f_code.co_name)
            tb = tb.tb_next
        assert "_raise_value_error" in names

    @pytest.mark.asyncio
    async def test_resolve_twice_fails_fast(self):
        handler = RequestHandler()
        request = httpx.Request("GET", "http://localhost")
        handler.resolve(request)

        with pytest.raises(HandlerAlreadyCompletedError) as exc_info:
            handler.resolve(request)
        assert exc_info.value.handler_name == "RequestHandler"

    @pytest.mark.asyncio
    async def test_reject_after_resolve_fails_fast(self):
        handler = ResponseHandler()
        handler.resolve(httpx.Response(200))

        with pytest.raises(HandlerAlreadyCompletedError):
            handler.reject(RuntimeError("late"))

    @pytest.mark.asyncio
    async def test_reject_requires_exception(self):
        handler = RequestHandler()

        with pytest.raises(TypeError):
            handler.reject("rejected")
        assert not handler.is_completed

    @pytest.mark.asyncio
    async def test_listener_runs_synchronously(self):
        handler = RequestHandler()
        calls: list[str] = []
        handler.add_done_listener(lambda: calls.append("first"))
        handler.add_done_listener(lambda: calls.append("second"))

        handler.resolve(httpx.Request("GET", "http://localhost"))

        # await 없이도 이미 호출되어 있어야 한다
        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_listener_runs_after_reject(self):
        handler = RequestHandler()
        calls: list[str] = []
        handler.add_done_listener(lambda: calls.append("done"))

        handler.reject(RuntimeError("x"))

        assert calls == ["done"]
        with pytest.raises(RuntimeError):
            await handler.wait()

    @pytest.mark.asyncio
    async def test_listener_added_after_completion_runs_immediately(self):
        handler = ResponseHandler()
        handler.resolve(httpx.Response(200))
        calls: list[str] = []

        handler.add_done_listener(lambda: calls.append("late"))

        assert calls == ["late"]

    @pytest.mark.asyncio
    async def test_rejection_after_cancelled_wait_is_not_reported_unretrieved(self):
        loop = asyncio.get_running_loop()
        reported: list[dict] = []
        previous = loop.get_exception_handler()
        loop.set_exception_handler(lambda _loop, context: reported.append(context))
        try:
            handler = RequestHandler()
            waiter = asyncio.create_task(handler.wait())
            await asyncio.sleep(0)
            waiter.cancel()
            await asyncio.gather(waiter, return_exceptions=True)

            handler.reject(RuntimeError("late"))
            # wait()를 부르지 않은 handler도 마찬가지
            orphan = ResponseHandler()
            orphan.reject(RuntimeError("nobody waits"))
            for _ in range(3):
                await asyncio.sleep(0)

            del handler, waiter, orphan
            gc.collect()
        finally:
            loop.set_exception_handler(previous)

        assert not any("never retrieved" in c.get("message", "") for c in reported)

    def test_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            RequestHandler()
