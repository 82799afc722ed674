import json
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import urlencode

from .exceptions import EncodingError
from .form_data import FileEntry, FormData
from .types import BoundaryGenerator, ContentType


@dataclass(frozen=True)
class EncodedBody:
    content: bytes
    # Set when the encoder decided the content type itself
    content_type: str | None = None


def flatten(data: Mapping | list | tuple, prefix: str = "") -> dict[str, Any]:
    """Flatten a nested structure into ``parent[child]`` keys.

    List indexes become numeric keys. The first value wins on a key collision,
    ``None`` leaves are dropped and booleans become ``"1"``/``"0"``.
    """
    items = data.items() if isinstance(data, Mapping) else enumerate(data)
    output: dict[str, Any] = {}
    for key, value in items:
        final_key = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, (Mapping, list, tuple)):
            for sub_key, sub_value in flatten(value, final_key).items():
                output.setdefault(sub_key, sub_value)
        elif value is None:
            continue
        elif isinstance(value, bool):
            output.setdefault(final_key, "1" if value else "0")
        else:
            output.setdefault(final_key, value)
    return output


def _as_bytes(body: str | bytes) -> bytes:
    return body.encode("utf-8") if isinstance(body, str) else body


def _encode_json(body: Any, boundary_generator: BoundaryGenerator | None = None) -> EncodedBody:
    if isinstance(body, bytes):
        return EncodedBody(body)
    try:
        return EncodedBody(json.dumps(body, allow_nan=False).encode("utf-8"))
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Body is not JSON serializable: {e}") from e


def _encode_form(body: Any, boundary_generator: BoundaryGenerator | None = None) -> EncodedBody:
    if isinstance(body, (str, bytes)):
        return EncodedBody(_as_bytes(body))
    if not isinstance(body, (Mapping, list, tuple)):
        raise EncodingError(f"Cannot form-encode a body of type {type(body).__name__}")

    flat = flatten(body)
    if any(isinstance(value, FileEntry) for value in flat.values()):
        form = FormData(boundary_generator)
        for key, value in flat.items():
            if isinstance(value, FileEntry):
                form.add_entry(value if value.name == key else replace(value, name=key))
            else:
                form.add_field(key, str(value))
        content, content_type = form.encode()
        return EncodedBody(content, content_type)

    content = urlencode(list(flat.items())).encode("ascii")
    return EncodedBody(content, ContentType.FORM_URLENCODED.value)


def _encode_graphql(body: Any, boundary_generator: BoundaryGenerator | None = None) -> EncodedBody:
    if not isinstance(body, (str, bytes)):
        raise EncodingError("GraphQL body must be a single query string")
    return EncodedBody(_as_bytes(body))


def _encode_raw(body: Any, boundary_generator: BoundaryGenerator | None = None) -> EncodedBody:
    if isinstance(body, (str, bytes)):
        return EncodedBody(_as_bytes(body))
    if isinstance(body, Mapping):
        return _encode_form(body, boundary_generator)
    raise EncodingError(f"Cannot send a body of type {type(body).__name__} without a content type")


_ENCODERS = {
    ContentType.JSON: _encode_json,
    ContentType.FORM_URLENCODED: _encode_form,
    ContentType.MULTIPART: _encode_form,
    ContentType.GRAPHQL: _encode_graphql,
    ContentType.RAW: _encode_raw,
}


def encode_body(
    content_type: str | None,
    body: Any,
    boundary_generator: BoundaryGenerator | None = None,
) -> EncodedBody:
    if body is None:
        return EncodedBody(b"")
    if isinstance(body, FormData):
        content, form_content_type = body.encode()
        return EncodedBody(content, form_content_type)
    return _ENCODERS[ContentType.from_header(content_type)](body, boundary_generator)
