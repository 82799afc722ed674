import pytest

from fetch_client.exceptions import FileAccessError
from fetch_client.form_data import FileEntry, FormData, detect_mime_type


class TestFormDataFields:
    def test_add_field(self, fixed_boundary):
        form = FormData(fixed_boundary)
        form.add_field("name", "John Doe").add_field("email", "john@example.com")

        body = form.build()

        assert body == (
            b"--X\r\n"
            b'Content-Disposition: form-data; name="name"\r\n'
            b"\r\n"
            b"John Doe\r\n"
            b"--X\r\n"
            b'Content-Disposition: form-data; name="email"\r\n'
            b"\r\n"
            b"john@example.com\r\n"
            b"--X--\r\n"
        )

    def test_field_custom_headers(self, fixed_boundary):
        form = FormData(fixed_boundary)
        form.add_field("name", "John Doe", {"X-Custom-Header": "Custom Value"})

        body = form.build()

        assert b'name="name"\r\nX-Custom-Header: Custom Value\r\n\r\nJohn Doe\r\n' in body

    def test_content_type_without_files(self):
        form = FormData().add_field("a", "1").add_field("b", "2")
        assert form.content_type == "application/x-www-form-urlencoded"

    def test_encode_without_files_is_urlencoded(self):
        form = FormData().add_field("name", "John Doe").add_field("age", "30")
        body, content_type = form.encode()
        assert body == b"name=John+Doe&age=30"
        assert content_type == "application/x-www-form-urlencoded"


class TestFormDataFiles:
    def test_add_file(self, fixed_boundary, text_file):
        form = FormData(fixed_boundary)
        form.add_file("file", text_file)

        body = form.build()

        assert b'Content-Disposition: form-data; name="file"; filename="test.txt"\r\n' in body
        assert b"Content-Type: text/plain\r\n" in body
        assert b"Lorem ipsum dolor sit amet\r\n--X--\r\n" in body

    def test_add_file_custom_name_and_type(self, text_file):
        form = FormData().add_file("doc", text_file, filename="notes.md", mime_type="text/markdown")
        entry = form.files[0]
        assert entry.filename == "notes.md"
        assert entry.mime_type == "text/markdown"

    def test_add_missing_file(self, tmp_path):
        with pytest.raises(FileAccessError):
            FormData().add_file("file", tmp_path / "missing.txt")

    def test_add_directory(self, tmp_path):
        with pytest.raises(FileAccessError):
            FormData().add_file("file", tmp_path)

    def test_file_removed_before_build(self, text_file):
        form = FormData().add_file("file", text_file)
        text_file.unlink()
        with pytest.raises(FileAccessError):
            form.build()

    def test_file_entry_needs_a_source(self):
        with pytest.raises(FileAccessError):
            FileEntry("file", "file.txt")

    def test_file_entry_rejects_two_sources(self, text_file):
        with pytest.raises(FileAccessError):
            FileEntry("file", "file.txt", path=text_file, content=b"x")

    def test_add_content(self, fixed_boundary):
        form = FormData(fixed_boundary)
        form.add_content("file", "Custom file content", "custom.txt", "text/plain")

        body = form.build()

        assert body == (
            b"--X\r\n"
            b'Content-Disposition: form-data; name="file"; filename="custom.txt"\r\n'
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"Custom file content\r\n"
            b"--X--\r\n"
        )

    def test_add_content_default_mime_type(self):
        form = FormData().add_content("blob", b"\x00\x01", "data.bin")
        assert form.files[0].mime_type == "application/octet-stream"

    def test_content_type_switches_when_file_added(self, fixed_boundary):
        form = FormData(fixed_boundary).add_field("a", "1")
        assert form.content_type == "application/x-www-form-urlencoded"

        form.add_content("file", "x", "x.txt")

        assert form.content_type == "multipart/form-data; boundary=X"

    def test_fields_before_files_in_declaration_order(self, fixed_boundary):
        form = FormData(fixed_boundary)
        form.add_content("first", "1", "1.txt")
        form.add_field("a", "A")
        form.add_content("second", "2", "2.txt")
        form.add_field("b", "B")

        body = form.build()

        positions = [body.index(marker) for marker in (b'name="a"', b'name="b"', b'name="first"', b'name="second"')]
        assert positions == sorted(positions)
        assert body.count(b"--X\r\n") == 4
        assert body.endswith(b"--X--\r\n")

    def test_build_is_repeatable(self, fixed_boundary):
        form = FormData(fixed_boundary).add_field("a", "1").add_content("f", "x", "x.txt")
        assert form.build() == form.build()
        assert len(form.fields) == 1
        assert len(form.files) == 1


class TestBoundary:
    def test_random_boundaries_are_unique(self):
        assert FormData().boundary != FormData().boundary
        assert FormData().boundary.startswith("----WebKitFormBoundary")

    def test_set_boundary(self):
        form = FormData()
        form.set_boundary("custom")
        form.add_content("f", "x", "x.txt")
        assert form.content_type == "multipart/form-data; boundary=custom"
        assert form.build().endswith(b"--custom--\r\n")


class TestMimeDetection:
    def test_from_extension(self):
        assert detect_mime_type("image.png") == "image/png"

    def test_unknown_without_content(self):
        assert detect_mime_type("file.unknownext") == "application/octet-stream"

    def test_file_entry_from_path(self, text_file):
        entry = FileEntry.from_path("file", text_file)
        assert entry.mime_type == "text/plain"
        assert entry.read() == b"Lorem ipsum dolor sit amet"
