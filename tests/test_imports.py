"""공개 API import 테스트."""


def test_import_core():
    from intercepted_client import (
        HttpInterceptor,
        InterceptedClient,
        RequestHandler,
        ResponseHandler,
        SequentialHttpInterceptor,
    )

    assert InterceptedClient is not None
    assert HttpInterceptor is not None
    assert SequentialHttpInterceptor is not None
    assert RequestHandler is not None
    assert ResponseHandler is not None


def test_import_errors():
    from intercepted_client import (
        HandlerAlreadyCompletedError,
        InterceptedClientError,
        RejectedError,
    )

    assert issubclass(HandlerAlreadyCompletedError, InterceptedClientError)
    assert issubclass(HandlerAlreadyCompletedError, RuntimeError)
    assert issubclass(RejectedError, InterceptedClientError)


def test_import_examples():
    from intercepted_client.examples import (
        DefaultHeadersInterceptor,
        LoggingInterceptor,
        RejectErrorStatusInterceptor,
        TokenInterceptor,
    )
    from intercepted_client import SequentialHttpInterceptor

    assert issubclass(TokenInterceptor, SequentialHttpInterceptor)
    assert DefaultHeadersInterceptor is not None
    assert LoggingInterceptor is not None
    assert RejectErrorStatusInterceptor is not None


def test_version():
    from intercepted_client import __version__

    assert __version__ == "0.0.1"
