from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from .exceptions import UnsupportedMethodError

if TYPE_CHECKING:
    from .models import Chunk, Request, Response
    from .sink import ChunkSink, HeaderParser


class Method(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    TRACE = "TRACE"

    @classmethod
    def parse(cls, value: "Method | str | None") -> "Method":
        if isinstance(value, Method):
            return value
        if not value:
            return cls.GET
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedMethodError(f"Unsupported HTTP method: {value}") from None


class ContentType(StrEnum):
    JSON = "application/json"
    FORM_URLENCODED = "application/x-www-form-urlencoded"
    MULTIPART = "multipart/form-data"
    GRAPHQL = "application/graphql"
    RAW = ""

    @classmethod
    def from_header(cls, value: str | None) -> "ContentType":
        if not value:
            return cls.RAW
        media_type = value.split(";", 1)[0].strip().lower()
        try:
            return cls(media_type)
        except ValueError:
            return cls.RAW


ChunkCallback = Callable[["Chunk"], None]
BoundaryGenerator = Callable[[], str]

NextFn = Callable[["Request"], "Response"]
Middleware = Callable[["Request", NextFn], "Response"]
AttemptFn = Callable[[], "Response"]


class Transport(Protocol):
    def send(self, request: "Request", sink: "ChunkSink", header_parser: "HeaderParser") -> int:
        """Perform one request, feeding body fragments to ``sink`` and header
        lines to ``header_parser``. Returns the final status code."""
        ...

    def close(self) -> None: ...
