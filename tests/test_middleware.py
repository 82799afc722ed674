import logging

from fetch_client.ext_logging import bind_trace_id
from fetch_client.middleware import chain, headers_middleware, logging_middleware, timeout_middleware
from fetch_client.models import Request, Response
from fetch_client.types import Method


def _request() -> Request:
    return Request(method=Method.GET, url="https://example.com", timeout=30.0)


class TestTimeoutMiddleware:
    def test_timeout_override(self):
        received = []

        def next_fn(r: Request) -> Response:
            received.append(r)
            return Response(status_code=200, headers={}, body=b"", request=r)

        timeout_middleware(60.0)(_request(), next_fn)

        assert received[0].timeout == 60.0


class TestHeadersMiddleware:
    def test_adds_headers(self):
        received = []

        def next_fn(r: Request) -> Response:
            received.append(r)
            return Response(status_code=200, headers={}, body=b"")

        headers_middleware(Authorization="Bearer token")(_request(), next_fn)

        assert received[0].headers["authorization"] == "Bearer token"


class TestLoggingMiddleware:
    def test_logs_request_and_response(self, caplog):
        logger = logging.getLogger("test.fetch")

        def next_fn(r: Request) -> Response:
            return Response(status_code=200, headers={}, body=b"hello", latency_ms=7)

        with caplog.at_level(logging.INFO, logger="test.fetch"), bind_trace_id("t-1"):
            logging_middleware(logger)(_request(), next_fn)

        assert "[t-1] -> GET https://example.com (0 bytes)" in caplog.text
        assert "[t-1] <- 200 https://example.com (7ms, 5 bytes)" in caplog.text

    def test_without_trace_id(self, caplog):
        logger = logging.getLogger("test.fetch")

        def next_fn(r: Request) -> Response:
            return Response(status_code=204, headers={}, body=b"", latency_ms=0)

        with caplog.at_level(logging.INFO, logger="test.fetch"):
            logging_middleware(logger)(_request(), next_fn)

        assert "[-] <- 204" in caplog.text


class TestChain:
    def test_order(self):
        order = []

        def make(name):
            def middleware(request, next):
                order.append(f"{name}:in")
                response = next(request)
                order.append(f"{name}:out")
                return response

            return middleware

        def handler(request):
            order.append("handler")
            return Response(status_code=200, headers={}, body=b"")

        chain([make("a"), make("b")], handler)(_request())

        assert order == ["a:in", "b:in", "handler", "b:out", "a:out"]

    def test_empty_chain(self):
        handler = lambda request: Response(status_code=201, headers={}, body=b"")
        assert chain([], handler)(_request()).status_code == 201
