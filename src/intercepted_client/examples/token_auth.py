"""
내장 Interceptor: Bearer 토큰
- 토큰을 처음 필요할 때 token_provider에서 받아온다
- SequentialHttpInterceptor라서 동시에 들어온 요청들도 provider를 한 번만 호출한다
- invalidate_on 상태 코드 응답을 받으면 캐시된 토큰을 버린다 (재시도는 하지 않음)
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Container

import httpx

from ..handler import RequestHandler, ResponseHandler
from ..sequential import SequentialHttpInterceptor

logger = logging.getLogger(__name__)


class TokenInterceptor(SequentialHttpInterceptor):
    """
    Authorization 헤더를 채우는 interceptor

    사용법:
        async def fetch_token() -> str:
            ...

        client = InterceptedClient(inner, interceptors=[TokenInterceptor(fetch_token)])
    """

    def __init__(
        self,
        token_provider: Callable[[], Awaitable[str]],
        *,
        header: str = "Authorization",
        scheme: str = "Bearer",
        invalidate_on: Container[int] = (401,),
    ):
        self._token_provider = token_provider
        self._token: str | None = None
        self.header = header
        self.scheme = scheme
        self.invalidate_on = invalidate_on

    @property
    def token(self) -> str | None:
        """현재 캐시된 토큰"""
        return self._token

    async def intercept_request(
        self, request: httpx.Request, handler: RequestHandler
    ) -> None:
        if self._token is None:
            logger.debug("Fetching token from provider")
            self._token = await self._token_provider()
        request.headers[self.header] = (
            f"{self.scheme} {self._token}" if self.scheme else self._token
        )
        handler.resolve(request)

    def intercept_response(
        self, response: httpx.Response, handler: ResponseHandler
    ) -> None:
        if response.status_code in self.invalidate_on and self._token is not None:
            logger.info(f"Received {response.status_code}, dropping cached token")
            self._token = None
        handler.resolve(response)
