"""
Unit tests for the DuckDB-backed media store.
"""

import pytest

from photomap.host.media_store import MediaStore
from photomap.models.image_reference import ImageReference
from tests.conftest import make_png


class TestMediaStore:
    """Test cases for MediaStore."""

    def test_content_uri(self):
        assert MediaStore.content_uri("images", 42) == "content://media/external/images/media/42"

    def test_insert_image_writes_file_and_row(self, media_store):
        data = make_png()

        handle = media_store.insert_image(data, "photo.png", "Photo location viewer", "image/png")

        assert handle.startswith("content://media/external/images/media/")
        entries = media_store.list_images()
        assert len(entries) == 1
        assert entries[0]["uri"] == handle
        assert entries[0]["display_name"] == "photo.png"
        assert entries[0]["description"] == "Photo location viewer"
        with open(entries[0]["data"], "rb") as f:
            assert f.read() == data

    def test_insert_visible_through_content_reference(self, media_store):
        handle = media_store.insert_image(make_png(), "photo.png", "d", "image/png")

        path = media_store.query_data_path(ImageReference.parse(handle))

        assert path is not None
        assert path.endswith("photo.png")

    def test_same_name_does_not_overwrite(self, media_store):
        first = media_store.insert_image(b"one", "photo.png", "d", "image/png")
        second = media_store.insert_image(b"two", "photo.png", "d", "image/png")

        first_path = media_store.query_data_path(ImageReference.parse(first))
        second_path = media_store.query_data_path(ImageReference.parse(second))

        assert first_path != second_path
        with open(first_path, "rb") as f:
            assert f.read() == b"one"

    def test_unsafe_names_are_sanitized(self, media_store, tmp_path):
        handle = media_store.insert_image(b"x", "../../etc/pass:wd.png", "d", "image/png")

        path = media_store.query_data_path(ImageReference.parse(handle))

        assert path.startswith(str(tmp_path / "gallery"))

    def test_extension_follows_mime_type(self, media_store):
        handle = media_store.insert_image(b"x", "photo", "d", "image/jpeg")

        assert media_store.query_data_path(ImageReference.parse(handle)).endswith("photo.jpg")

    def test_query_unknown_row(self, media_store):
        assert media_store.query_data_path(ImageReference.parse("content://media/external/images/media/999")) is None

    @pytest.mark.parametrize(
        "uri",
        [
            "content://other/external/images/media/1",
            "content://media/external/images/1",
            "content://media/external/images/media/abc",
            "file:///tmp/a.jpg",
        ],
    )
    def test_query_unrecognized_reference(self, media_store, uri):
        assert media_store.query_data_path(ImageReference.parse(uri)) is None

    def test_query_by_id_rejects_non_numeric(self, media_store):
        assert media_store.query_by_id("images", "abc") is None

    def test_open_stream_for_document_reference(self, media_store):
        handle = media_store.insert_image(b"payload", "photo.png", "d", "image/png")
        row_id = handle.rsplit("/", 1)[1]
        ref = ImageReference.parse(f"content://com.android.providers.media.documents/document/image%3A{row_id}")

        with media_store.open_stream(ref) as stream:
            assert stream.read() == b"payload"

    def test_open_stream_for_file_reference(self, media_store, tmp_path):
        path = tmp_path / "a.bin"
        path.write_bytes(b"abc")

        with media_store.open_stream(ImageReference.parse(str(path))) as stream:
            assert stream.read() == b"abc"

    def test_open_stream_unknown_reference(self, media_store):
        with pytest.raises(FileNotFoundError):
            media_store.open_stream(ImageReference.parse("content://media/external/images/media/999"))

    def test_failed_index_insert_removes_file(self, media_store, tmp_path):
        media_store.db_manager.execute_query("DROP TABLE media")

        with pytest.raises(Exception):
            media_store.insert_image(b"x", "photo.png", "d", "image/png")

        assert list((tmp_path / "gallery").iterdir()) == []
