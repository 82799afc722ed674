"""HTTP fetch client."""

from .builder import build_request, format_headers, merge_query, validate_method
from .client import Client
from .codec import EncodedBody, encode_body, flatten
from .config import ClientConfig, ClientConfigBuilder, FetchSettings
from .exceptions import (
    DecodingError,
    EncodingError,
    FetchError,
    FileAccessError,
    TransportError,
    UnsupportedMethodError,
)
from .ext_logging import init_logging
from .form_data import FileEntry, FormData, FormField
from .middleware import headers_middleware, logging_middleware, timeout_middleware
from .models import Chunk, Headers, Request, Response
from .retry import RetryPolicy
from .sink import ChunkSink, HeaderParser
from .transport import HttpxTransport
from .types import ChunkCallback, ContentType, Method, Middleware, NextFn, Transport

__all__ = [
    "Client",
    "ClientConfig",
    "ClientConfigBuilder",
    "FetchSettings",
    "Request",
    "Response",
    "Chunk",
    "Headers",
    "FormData",
    "FormField",
    "FileEntry",
    "EncodedBody",
    "encode_body",
    "flatten",
    "build_request",
    "format_headers",
    "merge_query",
    "validate_method",
    "ChunkSink",
    "HeaderParser",
    "RetryPolicy",
    "HttpxTransport",
    "Transport",
    "Method",
    "ContentType",
    "ChunkCallback",
    "Middleware",
    "NextFn",
    "headers_middleware",
    "logging_middleware",
    "timeout_middleware",
    "init_logging",
    "FetchError",
    "UnsupportedMethodError",
    "EncodingError",
    "DecodingError",
    "FileAccessError",
    "TransportError",
]
