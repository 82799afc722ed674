import json
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field, replace
from typing import Any

from .exceptions import DecodingError
from .types import Method


class Headers(MutableMapping[str, str]):
    """Case-insensitive header map that keeps the first-seen spelling and order."""

    def __init__(self, headers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None):
        self._store: dict[str, tuple[str, str]] = {}
        if headers:
            self.update(headers)

    def __getitem__(self, key: str) -> str:
        return self._store[key.lower()][1]

    def __setitem__(self, key: str, value: str) -> None:
        lower = key.lower()
        name = self._store[lower][0] if lower in self._store else key
        self._store[lower] = (name, str(value))

    def __delitem__(self, key: str) -> None:
        del self._store[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            other = Headers(other)
        else:
            return NotImplemented
        return {k: v for k, (_, v) in self._store.items()} == {
            k: v for k, (_, v) in other._store.items()
        }

    def __repr__(self) -> str:
        return f"Headers({list(self.items())!r})"

    def copy(self) -> "Headers":
        return Headers(self.items())


@dataclass(frozen=True)
class Request:
    method: Method
    url: str
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    timeout: float = 15.0
    connect_timeout: float = 60.0
    allow_redirects: bool = True
    max_redirects: int = 5

    def with_headers(self, **headers: str) -> "Request":
        merged = self.headers.copy()
        merged.update(headers)
        return replace(self, headers=merged)

    def with_timeout(self, timeout: float) -> "Request":
        return replace(self, timeout=timeout)

    def with_body(self, body: bytes) -> "Request":
        return replace(self, body=body)


@dataclass(frozen=True)
class Response:
    status_code: int
    headers: dict[str, str]
    body: bytes
    latency_ms: int = 0
    request: Request | None = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        try:
            return json.loads(self.body)
        except ValueError as e:
            raise DecodingError(f"Error decoding JSON: {e}") from e

    def text(self) -> str:
        return self.body.decode("utf-8")


@dataclass(frozen=True)
class Chunk:
    """One fragment of a streamed response body."""

    data: bytes
    size: int
    timestamp: float
    index: int

    def __post_init__(self) -> None:
        if self.size != len(self.data):
            raise ValueError(f"chunk size {self.size} does not match data length {len(self.data)}")
