import time
from collections.abc import Callable

from .models import Chunk
from .types import ChunkCallback


class ChunkSink:
    """Receives body fragments from the transport, one call per delivery.

    Without a callback fragments are buffered into ``body``. With a callback
    each fragment is wrapped in a ``Chunk`` and handed over immediately, and
    ``body`` stays empty.
    """

    def __init__(self, callback: ChunkCallback | None = None, clock: Callable[[], float] = time.monotonic):
        self._callback = callback
        self._clock = clock
        self._buffer = bytearray()
        self._count = 0

    @property
    def streaming(self) -> bool:
        return self._callback is not None

    @property
    def count(self) -> int:
        return self._count

    @property
    def body(self) -> bytes:
        return bytes(self._buffer)

    def write(self, fragment: bytes) -> None:
        index = self._count
        self._count += 1
        if self._callback is None:
            self._buffer += fragment
            return
        self._callback(
            Chunk(data=bytes(fragment), size=len(fragment), timestamp=self._clock(), index=index)
        )


class HeaderParser:
    def __init__(self):
        self._headers: dict[str, str] = {}

    def on_header_line(self, line: str) -> None:
        name, sep, value = line.partition(":")
        if not sep:
            return
        self._headers[name.strip().lower()] = value.strip()

    def finish(self) -> dict[str, str]:
        return dict(self._headers)
