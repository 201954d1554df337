"""
Unit tests for the gallery exporter.
"""

import base64
from unittest.mock import MagicMock

import pytest

from photomap.config import READ_EXTERNAL_STORAGE, READ_MEDIA_IMAGES, WRITE_EXTERNAL_STORAGE
from photomap.errors import DecodeFailedError, ExportError, PermissionDeniedError
from photomap.host.permissions import (
    PERMISSION_REQUEST_CODE,
    PermissionRequester,
    PermissionState,
    select_permission_strategy,
)
from photomap.services.gallery_exporter import (
    GALLERY_DESCRIPTION,
    GalleryExporter,
    decode_payload,
    detect_mime_type,
)
from tests.conftest import make_jpeg, make_png


def make_exporter(granted=(READ_MEDIA_IMAGES,), api_level=34):
    gallery = MagicMock()
    gallery.insert_image.return_value = "content://media/external/images/media/1"
    requester = PermissionRequester()
    exporter = GalleryExporter(
        gallery=gallery,
        permission_strategy=select_permission_strategy(api_level),
        permission_state=PermissionState(granted),
        requester=requester,
    )
    return exporter, gallery, requester


class TestDecodePayload:
    def test_data_url(self):
        data = make_png()
        payload = "data:image/png;base64," + base64.b64encode(data).decode()

        request = decode_payload(payload, "photo.png")

        assert request.image_data == data
        assert request.suggested_name == "photo.png"

    def test_bare_base64_with_line_breaks(self):
        data = make_png()
        encoded = base64.encodebytes(data).decode()

        assert decode_payload(encoded, "photo.png").image_data == data

    @pytest.mark.parametrize(
        "payload",
        [
            "data:image/png;base64,%%%not-base64%%%",
            "data:image/png;base64",
            "data:image/png,plain",
            "",
            "abc",
        ],
    )
    def test_invalid_payloads(self, payload):
        with pytest.raises(DecodeFailedError):
            decode_payload(payload, "photo.png")


class TestDetectMimeType:
    def test_png(self):
        assert detect_mime_type(make_png()) == "image/png"

    def test_jpeg(self):
        assert detect_mime_type(make_jpeg()) == "image/jpeg"

    def test_not_an_image(self):
        with pytest.raises(DecodeFailedError, match="Not a recognized image"):
            detect_mime_type(b"hello world")


class TestGalleryExporter:
    def test_export_success(self, png_data_url):
        exporter, gallery, _ = make_exporter()

        result = exporter.export(png_data_url, "photo.png")

        assert result.handle == "content://media/external/images/media/1"
        assert result.mime_type == "image/png"
        assert result.display_name == "photo.png"
        args = gallery.insert_image.call_args.args
        assert args[1:] == ("photo.png", GALLERY_DESCRIPTION, "image/png")

    def test_permission_denied_no_gallery_mutation(self):
        exporter, gallery, requester = make_exporter(granted=())

        with pytest.raises(PermissionDeniedError) as exc_info:
            exporter.export("data:image/png;base64,XXXX", "photo.png")

        assert isinstance(exc_info.value, ExportError)
        assert exc_info.value.code == "permission_denied"
        gallery.insert_image.assert_not_called()
        assert requester.requests == [((READ_MEDIA_IMAGES,), PERMISSION_REQUEST_CODE)]

    def test_permission_checked_before_decoding(self):
        exporter, gallery, _ = make_exporter(granted=())

        with pytest.raises(PermissionDeniedError):
            exporter.export("not base64 at all", "photo.png")

    @pytest.mark.parametrize(
        "api_level,permission",
        [(34, READ_MEDIA_IMAGES), (30, READ_EXTERNAL_STORAGE), (28, WRITE_EXTERNAL_STORAGE)],
    )
    def test_only_active_model_applies(self, api_level, permission, png_data_url):
        exporter, gallery, requester = make_exporter(granted=(permission,), api_level=api_level)

        exporter.export(png_data_url, "photo.png")

        gallery.insert_image.assert_called_once()
        assert requester.requests == []

    def test_other_model_grant_is_not_enough(self, png_data_url):
        exporter, gallery, requester = make_exporter(granted=(WRITE_EXTERNAL_STORAGE,), api_level=34)

        with pytest.raises(PermissionDeniedError):
            exporter.export(png_data_url, "photo.png")

        assert len(requester.requests) == 1

    def test_decode_failure(self):
        exporter, gallery, _ = make_exporter()
        payload = "data:image/png;base64," + base64.b64encode(b"not really an image").decode()

        with pytest.raises(DecodeFailedError) as exc_info:
            exporter.export(payload, "photo.png")

        assert exc_info.value.code == "decode_failed"
        gallery.insert_image.assert_not_called()
