"""
intercepted_client: httpx 요청/응답 interceptor 체인
"""

from .client import InterceptedClient
from .config import ClientConfig
from .errors import HandlerAlreadyCompletedError, InterceptedClientError, RejectedError
from .handler import Handler, RequestHandler, ResponseHandler
from .interceptor import HttpInterceptor
from .logging import setup_logging
from .sequential import SequentialHttpInterceptor

__version__ = "0.0.1"

__all__ = [
    "InterceptedClient",
    "ClientConfig",
    "Handler",
    "RequestHandler",
    "ResponseHandler",
    "HttpInterceptor",
    "SequentialHttpInterceptor",
    "InterceptedClientError",
    "HandlerAlreadyCompletedError",
    "RejectedError",
    "setup_logging",
    "__version__",
]
