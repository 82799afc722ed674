import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

from .builder import build_request
from .config import ClientConfig
from .ext_logging import bind_trace_id
from .middleware import chain
from .models import Request, Response
from .retry import RetryPolicy
from .sink import ChunkSink, HeaderParser
from .transport import HttpxTransport
from .types import ChunkCallback, Method, Middleware, Transport

logger = logging.getLogger(__name__)


class Client:
    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
        middlewares: list[Middleware] | None = None,
    ):
        self._config = config or ClientConfig()
        self._transport = transport or HttpxTransport()
        self._middlewares = middlewares or []

    @property
    def config(self) -> ClientConfig:
        return self._config

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *_args: Any) -> None:
        self.close()

    # Setters swap in a new immutable config; a fetch already running keeps its own.

    def add_header(self, key: str, value: str) -> "Client":
        self._config = self._config.with_header(key, value)
        return self

    def set_timeout(self, timeout: float) -> "Client":
        self._config = self._config.with_options(timeout=timeout)
        return self

    def set_connect_timeout(self, timeout: float) -> "Client":
        self._config = self._config.with_options(connect_timeout=timeout)
        return self

    def set_max_redirects(self, max_redirects: int) -> "Client":
        self._config = self._config.with_options(max_redirects=max_redirects)
        return self

    def set_allow_redirects(self, allow: bool) -> "Client":
        self._config = self._config.with_options(allow_redirects=allow)
        return self

    def set_user_agent(self, user_agent: str) -> "Client":
        self._config = self._config.with_options(user_agent=user_agent)
        return self

    def set_max_retries(self, max_retries: int) -> "Client":
        self._config = self._config.with_options(max_retries=max_retries)
        return self

    def set_retry_delay(self, delay_ms: int) -> "Client":
        self._config = self._config.with_options(retry_delay=delay_ms)
        return self

    def set_retry_status_codes(self, codes: Iterable[int]) -> "Client":
        self._config = self._config.with_options(retry_status_codes=codes)
        return self

    def fetch(
        self,
        url: str,
        method: Method | str = Method.GET,
        body: Any = None,
        query: Mapping[str, Any] | None = None,
        chunks: ChunkCallback | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        config = self._config
        with bind_trace_id():
            request = build_request(config, url, method, body, query, headers)
            send = chain(self._middlewares, lambda req: self._send(req, chunks))

            if config.max_retries > 0:
                response = RetryPolicy.from_config(config).execute(lambda: send(request))
            else:
                response = send(request)

            logger.debug(
                f"{request.method} {request.url} -> {response.status_code} "
                f"after {response.attempts} attempt(s)"
            )
            return response

    def _send(self, request: Request, chunks: ChunkCallback | None) -> Response:
        sink = ChunkSink(chunks)
        header_parser = HeaderParser()
        start_time = time.time()

        status_code = self._transport.send(request, sink, header_parser)

        latency_ms = int((time.time() - start_time) * 1000)

        return Response(
            status_code=status_code,
            headers=header_parser.finish(),
            body=sink.body,
            latency_ms=latency_ms,
            request=request,
        )

    def get(self, url: str, **kwargs: Any) -> Response:
        return self.fetch(url, Method.GET, **kwargs)

    def post(self, url: str, **kwargs: Any) -> Response:
        return self.fetch(url, Method.POST, **kwargs)

    def put(self, url: str, **kwargs: Any) -> Response:
        return self.fetch(url, Method.PUT, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> Response:
        return self.fetch(url, Method.PATCH, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Response:
        return self.fetch(url, Method.DELETE, **kwargs)

    def head(self, url: str, **kwargs: Any) -> Response:
        return self.fetch(url, Method.HEAD, **kwargs)

    def options(self, url: str, **kwargs: Any) -> Response:
        return self.fetch(url, Method.OPTIONS, **kwargs)
