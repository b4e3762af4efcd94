"""Hook 타입 정의."""

from __future__ import annotations

from typing import Awaitable, Callable, Literal, Optional

import httpx

from .handler import RequestHandler, ResponseHandler

# hook은 일반 함수 또는 코루틴 함수 둘 다 허용한다
RequestHook = Callable[[httpx.Request, RequestHandler], Optional[Awaitable[None]]]
ResponseHook = Callable[[httpx.Response, ResponseHandler], Optional[Awaitable[None]]]

Phase = Literal["request", "response"]
