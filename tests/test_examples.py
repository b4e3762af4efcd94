"""
내장 Interceptor 테스트
python -m pytest tests/test_examples.py -v
"""

import asyncio
import logging

import httpx
import pytest

from intercepted_client import InterceptedClient, RejectedError
from intercepted_client.examples import (
    DefaultHeadersInterceptor,
    LoggingInterceptor,
    RejectErrorStatusInterceptor,
    TokenInterceptor,
)


def _make_inner(status_codes: list[int] | None = None, sent: list | None = None):
    """status_codes를 순서대로 돌려주는 MockTransport 클라이언트 (소진되면 200)"""
    codes = list(status_codes or [])

    def handler(request: httpx.Request) -> httpx.Response:
        if sent is not None:
            sent.append(request)
        return httpx.Response(codes.pop(0) if codes else 200)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestDefaultHeadersInterceptor:
    @pytest.mark.asyncio
    async def test_fills_missing_headers_only(self):
        sent: list[httpx.Request] = []
        client = InterceptedClient(
            _make_inner(sent=sent),
            interceptors=[
                DefaultHeadersInterceptor({"x-trace": "abc", "x-app": "demo"})
            ],
        )

        await client.get("http://localhost", headers={"x-app": "custom"})

        assert sent[0].headers["x-trace"] == "abc"
        assert sent[0].headers["x-app"] == "custom"


class TestLoggingInterceptor:
    @pytest.mark.asyncio
    async def test_logs_request_and_response(self, caplog):
        client = InterceptedClient(_make_inner(), interceptors=[LoggingInterceptor()])

        with caplog.at_level(logging.INFO, logger="intercepted_client"):
            await client.get("http://localhost/items")

        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("--> GET http://localhost/items") for m in messages)
        assert any(m.startswith("<-- 200 GET http://localhost/items") for m in messages)
        response_record = next(r for r in caplog.records if r.getMessage().startswith("<--"))
        assert response_record.status_code == 200
        assert response_record.elapsed_ms is not None


class TestRejectErrorStatusInterceptor:
    @pytest.mark.asyncio
    async def test_rejects_error_status(self):
        client = InterceptedClient(
            _make_inner([500]), interceptors=[RejectErrorStatusInterceptor()]
        )

        with pytest.raises(RejectedError) as exc_info:
            await client.get("http://localhost/boom")

        assert exc_info.value.response.status_code == 500
        assert exc_info.value.request.url.path == "/boom"

    @pytest.mark.asyncio
    async def test_allowed_status_passes(self):
        client = InterceptedClient(
            _make_inner([404]), interceptors=[RejectErrorStatusInterceptor(allow={404})]
        )

        response = await client.get("http://localhost")

        assert response.status_code == 404


class TestTokenInterceptor:
    @pytest.mark.asyncio
    async def test_concurrent_requests_fetch_token_once(self):
        calls = 0

        async def provider() -> str:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.001)
            return f"token-{calls}"

        sent: list[httpx.Request] = []
        client = InterceptedClient(
            _make_inner(sent=sent), interceptors=[TokenInterceptor(provider)]
        )

        await asyncio.gather(*(client.get("http://localhost") for _ in range(3)))

        assert calls == 1
        assert [r.headers["authorization"] for r in sent] == ["Bearer token-1"] * 3

    @pytest.mark.asyncio
    async def test_invalidates_token_on_401(self):
        calls = 0

        async def provider() -> str:
            nonlocal calls
            calls += 1
            return f"token-{calls}"

        interceptor = TokenInterceptor(provider)
        sent: list[httpx.Request] = []
        client = InterceptedClient(_make_inner([401], sent=sent), interceptors=[interceptor])

        first = await client.get("http://localhost")
        assert first.status_code == 401
        assert interceptor.token is None

        await client.get("http://localhost")

        assert calls == 2
        assert sent[1].headers["authorization"] == "Bearer token-2"

    @pytest.mark.asyncio
    async def test_provider_failure_rejects_journey(self):
        async def provider() -> str:
            raise ConnectionError("auth server down")

        client = InterceptedClient(_make_inner(), interceptors=[TokenInterceptor(provider)])

        with pytest.raises(ConnectionError, match="auth server down"):
            await client.get("http://localhost")

    @pytest.mark.asyncio
    async def test_custom_header_without_scheme(self):
        async def provider() -> str:
            return "secret"

        sent: list[httpx.Request] = []
        client = InterceptedClient(
            _make_inner(sent=sent),
            interceptors=[TokenInterceptor(provider, header="x-api-key", scheme="")],
        )

        await client.get("http://localhost")

        assert sent[0].headers["x-api-key"] == "secret"
