"""Pytest configuration."""

from dataclasses import dataclass, field

import pytest

from fetch_client.models import Request
from fetch_client.sink import ChunkSink, HeaderParser


@dataclass
class Scripted:
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    fragments: list[bytes] = field(default_factory=list)


class FakeTransport:
    """Transport that replays scripted responses and records every request."""

    def __init__(self, *responses: Scripted | Exception):
        self._responses = list(responses) or [Scripted()]
        self.requests: list[Request] = []
        self.closed = False

    def send(self, request: Request, sink: ChunkSink, header_parser: HeaderParser) -> int:
        self.requests.append(request)
        scripted = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(scripted, Exception):
            raise scripted
        for name, value in scripted.headers.items():
            header_parser.on_header_line(f"{name}: {value}")
        for fragment in scripted.fragments:
            sink.write(fragment)
        return scripted.status_code

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def scripted():
    return Scripted


@pytest.fixture
def fixed_boundary():
    return lambda: "X"


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "test.txt"
    path.write_text("Lorem ipsum dolor sit amet")
    return path
