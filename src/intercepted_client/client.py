"""
InterceptedClient — interceptor 체인으로 감싼 httpx 클라이언트
- 요청 interceptor 체인 → inner.send → 응답 버퍼링 → 응답 interceptor 체인
- 요청/응답 단계 모두 리스트 순서대로 실행한다 (응답 단계도 역순이 아니다)
- 어느 단계든 reject되면 남은 체인을 건너뛰고 그 에러를 그대로 호출자에게 전달한다
- async context manager 지원
"""

from __future__ import annotations

import asyncio
import datetime
import logging
import time
from typing import Any, Sequence, TypeVar

import httpx

from ._types import Phase
from .config import ClientConfig
from .handler import Handler, RequestHandler, ResponseHandler
from .interceptor import HttpInterceptor, invoke_hook

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _elapsed_of(response: httpx.Response) -> datetime.timedelta | None:
    """elapsed가 아직 설정되지 않은 응답이면 None"""
    try:
        return response.elapsed
    except RuntimeError:
        return None


class InterceptedClient:
    """
    interceptor 체인을 적용하는 비동기 HTTP 클라이언트

    사용법:
        async with InterceptedClient(
            httpx.AsyncClient(base_url="https://api.example.com"),
            interceptors=[
                HttpInterceptor.from_handlers(intercept_request=add_auth),
                SequentialHttpInterceptor.from_handlers(intercept_response=audit),
            ],
        ) as client:
            response = await client.get("/users")

    interceptor 리스트는 생성 시점에 고정된다.
    """

    def __init__(
        self,
        inner: httpx.AsyncClient,
        interceptors: Sequence[HttpInterceptor] | None = None,
        *,
        config: ClientConfig | None = None,
    ):
        self._inner = inner
        self._interceptors: tuple[HttpInterceptor, ...] = tuple(interceptors or ())
        self._config = config or ClientConfig()

    @property
    def interceptors(self) -> tuple[HttpInterceptor, ...]:
        return self._interceptors

    @property
    def config(self) -> ClientConfig:
        return self._config

    # --- journey ---

    async def send(self, request: httpx.Request) -> httpx.Response:
        """
        요청 하나를 전체 체인에 통과시킨다.

        Returns:
            아직 읽지 않은 스트리밍 httpx.Response (버퍼링된 body 기반)

        Raises:
            interceptor가 reject한 에러, 또는 transport가 던진 에러 그대로
        """
        method, url = request.method, str(request.url)
        extra = {"method": method, "url": url}
        started = time.perf_counter()
        logger.debug(f"Journey started: {method} {url}", extra=extra)

        for interceptor in self._interceptors:
            request = await self._run_hook(
                interceptor,
                interceptor._effective_request_hook(),
                request,
                RequestHandler,
                "request",
            )

        transport_started = time.perf_counter()
        response = transport_response = await self._inner.send(request, stream=True)
        try:
            await response.aread()
        finally:
            await response.aclose()
        if _elapsed_of(transport_response) is None:
            # 이미 닫힌 채로 온 응답은 httpx가 elapsed를 채우지 않는다
            transport_response.elapsed = datetime.timedelta(
                seconds=time.perf_counter() - transport_started
            )
        logger.debug(
            f"Transport responded {response.status_code}: {method} {url}",
            extra={**extra, "status_code": response.status_code},
        )

        for interceptor in self._interceptors:
            response = await self._run_hook(
                interceptor,
                interceptor._effective_response_hook(),
                response,
                ResponseHandler,
                "response",
            )

        result = await self._rewrap(response, request, transport_response)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.debug(
            f"Journey finished {result.status_code} in {elapsed_ms}ms: {method} {url}",
            extra={**extra, "status_code": result.status_code, "elapsed_ms": elapsed_ms},
        )
        return result

    async def _run_hook(
        self,
        interceptor: HttpInterceptor,
        hook: Any,
        value: T,
        handler_cls: type[Handler],
        phase: Phase,
    ) -> T:
        """hook 하나를 실행하고 handler 완료를 기다린다."""
        handler = handler_cls()
        invoke_hook(hook, value, handler, interceptor=interceptor.name, phase=phase)

        if self._config.stall_warning_after is None or handler.is_completed:
            return await handler.wait()
        return await self._wait_with_stall_warning(handler, interceptor.name, phase)

    async def _wait_with_stall_warning(
        self, handler: Handler, interceptor: str, phase: Phase
    ) -> Any:
        """
        stall_warning_after가 지나도 완료되지 않으면 WARNING을 한 번 남기고 계속 기다린다.
        """
        waiter = asyncio.ensure_future(handler.wait())
        try:
            done, _ = await asyncio.wait({waiter}, timeout=self._config.stall_warning_after)
            if not done:
                logger.warning(
                    f"[{interceptor}] {phase} hook has not resolved or rejected its "
                    f"handler after {self._config.stall_warning_after}s",
                    extra={"interceptor": interceptor, "phase": phase},
                )
            return await waiter
        finally:
            if not waiter.done():
                waiter.cancel()

    async def _rewrap(
        self,
        response: httpx.Response,
        request: httpx.Request,
        transport_response: httpx.Response,
    ) -> httpx.Response:
        """
        체인을 통과한 응답을 버퍼링된 body 기반의 새 스트리밍 응답으로 만든다.

        aread()는 content-encoding을 디코딩하므로 인코딩 헤더는 제거하고
        content-length를 디코딩된 길이로 맞춘다.
        elapsed는 최종 응답 것을 쓰고, interceptor가 새로 만든 응답이라
        없으면 transport 응답의 값을 쓴다.
        """
        body = await response.aread()
        headers = httpx.Headers(response.headers)
        if "content-encoding" in headers:
            del headers["content-encoding"]
            headers["content-length"] = str(len(body))

        try:
            origin = response.request
        except RuntimeError:
            # interceptor가 request 없이 새로 만든 응답
            origin = request

        result = httpx.Response(
            status_code=response.status_code,
            headers=headers,
            stream=httpx.ByteStream(body),
            request=origin,
            extensions=response.extensions,
            history=response.history,
        )

        elapsed = _elapsed_of(response)
        if elapsed is None:
            elapsed = _elapsed_of(transport_response)
        if elapsed is not None:
            result.elapsed = elapsed
        return result

    # --- HTTP 메서드 편의 함수 ---

    async def request(
        self,
        method: str,
        url: httpx.URL | str,
        *,
        params: Any = None,
        headers: Any = None,
        cookies: Any = None,
        content: Any = None,
        data: Any = None,
        files: Any = None,
        json: Any = None,
    ) -> httpx.Response:
        """요청을 만들어 send()에 위임하고, 읽기 완료된 응답을 반환한다."""
        request = self._inner.build_request(
            method,
            url,
            params=params,
            headers=headers,
            cookies=cookies,
            content=content,
            data=data,
            files=files,
            json=json,
        )
        response = await self.send(request)
        await response.aread()
        return response

    async def get(
        self, url: httpx.URL | str, *, params: Any = None, headers: Any = None
    ) -> httpx.Response:
        return await self.request("GET", url, params=params, headers=headers)

    async def head(
        self, url: httpx.URL | str, *, params: Any = None, headers: Any = None
    ) -> httpx.Response:
        return await self.request("HEAD", url, params=params, headers=headers)

    async def delete(
        self, url: httpx.URL | str, *, params: Any = None, headers: Any = None
    ) -> httpx.Response:
        return await self.request("DELETE", url, params=params, headers=headers)

    async def post(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def read(
        self, url: httpx.URL | str, *, params: Any = None, headers: Any = None
    ) -> str:
        """GET 후 body를 문자열로 반환. 2xx가 아니면 httpx.HTTPStatusError"""
        response = await self.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.text

    async def read_bytes(
        self, url: httpx.URL | str, *, params: Any = None, headers: Any = None
    ) -> bytes:
        """GET 후 body를 bytes로 반환. 2xx가 아니면 httpx.HTTPStatusError"""
        response = await self.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.content

    # --- lifecycle ---

    async def close(self) -> None:
        """close_inner 설정이면 내부 httpx 클라이언트를 닫는다."""
        if self._config.close_inner and not self._inner.is_closed:
            await self._inner.aclose()

    async def __aenter__(self) -> InterceptedClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"InterceptedClient(interceptors={[i.name for i in self._interceptors]})"
