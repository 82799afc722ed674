import logging
import mimetypes
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlencode

from .exceptions import FileAccessError
from .types import BoundaryGenerator, ContentType

logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"
CRLF = b"\r\n"


def random_boundary() -> str:
    return "----WebKitFormBoundary" + secrets.token_hex(16)


def detect_mime_type(filename: str, content: bytes | None = None) -> str:
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type:
        return mime_type

    # Content sniffing needs python-magic
    if content:
        try:
            import magic

            return magic.Magic(mime=True).from_buffer(content)
        except ImportError:
            pass

    return OCTET_STREAM


def _readable_file(path: str | os.PathLike) -> Path:
    file_path = Path(path)
    if not file_path.is_file() or not os.access(file_path, os.R_OK):
        raise FileAccessError(f"File doesn't exist or isn't readable: {file_path}")
    return file_path


@dataclass(frozen=True)
class FormField:
    name: str
    value: str
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FileEntry:
    """A file part, backed either by a path on disk or by inline content."""

    name: str
    filename: str
    mime_type: str = OCTET_STREAM
    headers: dict[str, str] = field(default_factory=dict)
    path: Path | None = None
    content: bytes | None = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.content is None):
            raise FileAccessError(f"File part {self.name!r} needs exactly one of a path or inline content")

    @classmethod
    def from_path(
        cls,
        name: str,
        path: str | os.PathLike,
        filename: str | None = None,
        mime_type: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> "FileEntry":
        file_path = _readable_file(path)
        if mime_type is None:
            with file_path.open("rb") as f:
                head = f.read(2048)
            mime_type = detect_mime_type(file_path.name, head)
        return cls(
            name=name,
            filename=filename or file_path.name,
            mime_type=mime_type,
            headers=dict(headers or {}),
            path=file_path,
        )

    @classmethod
    def from_content(
        cls,
        name: str,
        content: bytes | str,
        filename: str,
        mime_type: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> "FileEntry":
        if isinstance(content, str):
            content = content.encode("utf-8")
        return cls(
            name=name,
            filename=filename,
            mime_type=mime_type or OCTET_STREAM,
            headers=dict(headers or {}),
            content=content,
        )

    def read(self) -> bytes:
        if self.content is not None:
            return self.content
        try:
            return _readable_file(self.path).read_bytes()
        except OSError as e:
            raise FileAccessError(f"File doesn't exist or isn't readable: {self.path}") from e


class FormData:
    """Multipart form body built up field by field.

    The content type is derived on access: url-encoded while no file has been
    added, multipart with this instance's boundary afterwards.
    """

    def __init__(self, boundary_generator: BoundaryGenerator | None = None):
        self._boundary = (boundary_generator or random_boundary)()
        self._fields: list[FormField] = []
        self._files: list[FileEntry] = []

    @property
    def boundary(self) -> str:
        return self._boundary

    def set_boundary(self, boundary: str) -> None:
        self._boundary = boundary

    @property
    def fields(self) -> tuple[FormField, ...]:
        return tuple(self._fields)

    @property
    def files(self) -> tuple[FileEntry, ...]:
        return tuple(self._files)

    def add_field(self, name: str, value: str, headers: dict[str, str] | None = None) -> "FormData":
        self._fields.append(FormField(name=name, value=str(value), headers=dict(headers or {})))
        return self

    def add_file(
        self,
        name: str,
        path: str | os.PathLike,
        filename: str | None = None,
        mime_type: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> "FormData":
        self._files.append(FileEntry.from_path(name, path, filename, mime_type, headers))
        return self

    def add_content(
        self,
        name: str,
        content: bytes | str,
        filename: str,
        mime_type: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> "FormData":
        self._files.append(FileEntry.from_content(name, content, filename, mime_type, headers))
        return self

    def add_entry(self, entry: FileEntry) -> "FormData":
        self._files.append(entry)
        return self

    @property
    def content_type(self) -> str:
        if not self._files:
            return ContentType.FORM_URLENCODED.value
        return f"{ContentType.MULTIPART.value}; boundary={self._boundary}"

    def build(self) -> bytes:
        delimiter = f"--{self._boundary}".encode()
        parts: list[bytes] = []

        for form_field in self._fields:
            parts.append(delimiter + CRLF)
            parts.append(f'Content-Disposition: form-data; name="{form_field.name}"'.encode() + CRLF)
            parts.extend(_header_lines(form_field.headers))
            parts.append(CRLF)
            parts.append(form_field.value.encode("utf-8") + CRLF)

        for entry in self._files:
            parts.append(delimiter + CRLF)
            parts.append(
                f'Content-Disposition: form-data; name="{entry.name}"; filename="{entry.filename}"'.encode()
                + CRLF
            )
            parts.append(f"Content-Type: {entry.mime_type}".encode() + CRLF)
            parts.extend(_header_lines(entry.headers))
            parts.append(CRLF)
            parts.append(entry.read() + CRLF)

        parts.append(delimiter + b"--" + CRLF)
        return b"".join(parts)

    def encode(self) -> tuple[bytes, str]:
        """Return the wire body together with the content type that matches it."""
        if not self._files:
            body = urlencode([(f.name, f.value) for f in self._fields]).encode("ascii")
            return body, self.content_type
        logger.debug(
            "Encoding multipart body: %d field(s), %d file(s)", len(self._fields), len(self._files)
        )
        return self.build(), self.content_type


def _header_lines(headers: dict[str, str]) -> list[bytes]:
    return [f"{key}: {value}".encode() + CRLF for key, value in headers.items()]
