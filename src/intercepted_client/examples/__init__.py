from .default_headers import DefaultHeadersInterceptor
from .request_logger import LoggingInterceptor
from .reject_errors import RejectErrorStatusInterceptor
from .token_auth import TokenInterceptor

__all__ = [
    "DefaultHeadersInterceptor",
    "LoggingInterceptor",
    "RejectErrorStatusInterceptor",
    "TokenInterceptor",
]
