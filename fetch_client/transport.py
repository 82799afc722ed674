import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from .exceptions import TransportError
from .models import Request
from .sink import ChunkSink, HeaderParser

logger = logging.getLogger(__name__)


class HttpxTransport:
    """Default transport backed by ``httpx.Client``.

    The response is always streamed so that every fragment httpx yields
    reaches the sink as soon as it is read. `Request.timeout` bounds the
    whole exchange, body included, not only each socket read.
    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        proxy: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._transport = transport
        self._clock = clock
        self._proxy = proxy
        self._client: httpx.Client | None = None

    def _ensure_client(self, max_redirects: int) -> httpx.Client:
        if self._client is not None and self._client.max_redirects != max_redirects:
            self.close()
        if self._client is None:
            self._client = httpx.Client(
                transport=self._transport,
                proxy=self._proxy,
                max_redirects=max_redirects,
            )
        return self._client

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *_args: Any) -> None:
        self.close()

    @staticmethod
    def _absolute_url(url: str) -> str:
        if "://" in url:
            return url
        return f"http://{url}"

    def send(self, request: Request, sink: ChunkSink, header_parser: HeaderParser) -> int:
        client = self._ensure_client(request.max_redirects)
        deadline = self._clock() + request.timeout if request.timeout > 0 else None
        try:
            http_request = client.build_request(
                method=request.method.value,
                url=self._absolute_url(request.url),
                headers=list(request.headers.items()),
                content=request.body or None,
                timeout=httpx.Timeout(request.timeout or None, connect=request.connect_timeout or None),
            )
            http_response = client.send(
                http_request,
                stream=True,
                follow_redirects=request.allow_redirects,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Request to {request.url} failed: {e}")
            raise TransportError(str(e) or e.__class__.__name__) from e

        try:
            for name, value in http_response.headers.multi_items():
                header_parser.on_header_line(f"{name}: {value}")
            for fragment in http_response.iter_bytes():
                if deadline is not None and self._clock() > deadline:
                    logger.error(f"Request to {request.url} exceeded {request.timeout}s")
                    raise TransportError(f"Operation timed out after {request.timeout}s")
                sink.write(fragment)
        except httpx.HTTPError as e:
            logger.error(f"Reading response from {request.url} failed: {e}")
            raise TransportError(str(e) or e.__class__.__name__) from e
        finally:
            http_response.close()

        return http_response.status_code
