from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from .codec import encode_body, flatten
from .models import Headers, Request
from .types import BoundaryGenerator, Method

if TYPE_CHECKING:
    from .config import ClientConfig


def validate_method(method: Method | str | None) -> Method:
    return Method.parse(method)


def merge_query(url: str, query: Mapping[str, Any] | None) -> str:
    if not query:
        return url
    if url.endswith("?"):
        url = url[:-1]
    separator = "&" if "?" in url else "?"
    return url + separator + urlencode(list(flatten(query).items()))


def format_headers(headers: Mapping[str, str]) -> list[str]:
    return [f"{name}: {value}" for name, value in headers.items()]


def build_request(
    config: "ClientConfig",
    url: str,
    method: Method | str | None = Method.GET,
    body: Any = None,
    query: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    boundary_generator: BoundaryGenerator | None = None,
) -> Request:
    request_method = validate_method(method)

    merged = Headers(config.headers)
    if headers:
        merged.update(headers)

    encoded = encode_body(merged.get("content-type"), body, boundary_generator)
    if encoded.content_type:
        merged["Content-Type"] = encoded.content_type
    if config.user_agent and "user-agent" not in merged:
        merged["User-Agent"] = config.user_agent

    return Request(
        method=request_method,
        url=merge_query(url, query),
        headers=merged,
        body=encoded.content,
        timeout=config.timeout,
        connect_timeout=config.connect_timeout,
        allow_redirects=config.allow_redirects,
        max_redirects=config.max_redirects,
    )
