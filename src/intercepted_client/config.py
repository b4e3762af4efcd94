"""InterceptedClient 공통 설정."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

ENV_STALL_WARNING_AFTER = "INTERCEPTED_CLIENT_STALL_WARNING_AFTER"
ENV_CLOSE_INNER = "INTERCEPTED_CLIENT_CLOSE_INNER"

_FALSE_VALUES = {"0", "false", "no", "off"}


class ClientConfig(BaseModel):
    """
    InterceptedClient 설정

    stall_warning_after: hook이 이 시간(초) 안에 handler를 완료하지 않으면
        WARNING 로그를 한 번 남긴다. 진단용이며 journey는 계속 기다린다.
        None이면 진단하지 않는다 (기본).
    close_inner: close() 시 내부 httpx.AsyncClient도 닫을지 여부
    """
    model_config = ConfigDict(frozen=True)

    stall_warning_after: float | None = Field(default=None, gt=0)
    close_inner: bool = True

    @classmethod
    def from_env(cls) -> ClientConfig:
        """환경변수에서 설정을 읽는다. 없는 값은 기본값을 쓴다."""
        values: dict = {}
        stall = os.environ.get(ENV_STALL_WARNING_AFTER)
        if stall:
            values["stall_warning_after"] = stall
        close_inner = os.environ.get(ENV_CLOSE_INNER)
        if close_inner:
            values["close_inner"] = close_inner.strip().lower() not in _FALSE_VALUES
        return cls.model_validate(values)
