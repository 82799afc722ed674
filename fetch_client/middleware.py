import logging

from .ext_logging import trace_id_var
from .models import Request, Response
from .types import Middleware, NextFn


def timeout_middleware(timeout: float) -> Middleware:
    def middleware(request: Request, next: NextFn) -> Response:
        return next(request.with_timeout(timeout))

    return middleware


def logging_middleware(logger: logging.Logger | None = None) -> Middleware:
    log = logger or logging.getLogger(__name__)

    def middleware(request: Request, next: NextFn) -> Response:
        trace_id = trace_id_var.get() or "-"
        log.info(f"[{trace_id}] -> {request.method} {request.url} ({len(request.body)} bytes)")
        response = next(request)
        log.info(
            f"[{trace_id}] <- {response.status_code} {request.url} "
            f"({response.latency_ms}ms, {len(response.body)} bytes)"
        )
        return response

    return middleware


def headers_middleware(**headers: str) -> Middleware:
    def middleware(request: Request, next: NextFn) -> Response:
        return next(request.with_headers(**headers))

    return middleware


def chain(middlewares: list[Middleware], handler: NextFn) -> NextFn:
    """Compose middlewares around ``handler``; the first one runs outermost."""

    def call(index: int, request: Request) -> Response:
        if index >= len(middlewares):
            return handler(request)
        return middlewares[index](request, lambda req: call(index + 1, req))

    return lambda request: call(0, request)
