"""
End-to-end tests: share events through resolution to the presentation
layer, gallery export and map launching, on a real media store.
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from photomap.app import NO_LOCATION_MESSAGE, SAVED_MESSAGE, WEB_FALLBACK_MESSAGE, PhotoLocationApp
from photomap.config import READ_MEDIA_IMAGES
from photomap.host.intents import LocalIntentDispatcher
from photomap.host.permissions import (
    PERMISSION_REQUEST_CODE,
    MediaImagesPermission,
    PermissionRequester,
    PermissionState,
)
from photomap.models.share import ShareEvent
from photomap.services.gallery_exporter import GalleryExporter
from photomap.services.map_launcher import LaunchOutcome, MapLauncher
from photomap.services.metadata_resolver import MetadataResolver
from tests.conftest import TOKYO_LATITUDE, TOKYO_LONGITUDE


@pytest.fixture
def dispatcher():
    return LocalIntentDispatcher({"https": MagicMock()})


@pytest.fixture
def app(media_store, tmp_path, dispatcher):
    presentation = MagicMock()
    exporter = GalleryExporter(
        gallery=media_store,
        permission_strategy=MediaImagesPermission(),
        permission_state=PermissionState([READ_MEDIA_IMAGES]),
        requester=PermissionRequester(),
    )
    application = PhotoLocationApp(
        resolver=MetadataResolver.create(media_store, tmp_path / "cache"),
        exporter=exporter,
        launcher=MapLauncher(dispatcher),
        presentation=presentation,
        executor=ThreadPoolExecutor(max_workers=1),
    )
    yield application
    application.shutdown()


class TestShareToPresentation:
    def test_share_before_page_ready_resolves_once(self, app, media_store, gps_jpeg):
        handle = media_store.insert_image(gps_jpeg, "tokyo.jpg", "d", "image/jpeg")

        app.on_new_share(ShareEvent.create([handle]))
        assert app.wait_for_idle(timeout=1.0)
        app.presentation.show_location.assert_not_called()

        app.on_page_finished()
        assert app.wait_for_idle(timeout=10.0)

        app.presentation.show_location.assert_called_once()
        payload = app.presentation.show_location.call_args.args[0]
        assert payload["latitude"] == pytest.approx(TOKYO_LATITUDE, abs=1e-6)
        assert payload["longitude"] == pytest.approx(TOKYO_LONGITUDE, abs=1e-6)
        assert payload["datetime"] == "2023:12:25 14:30:45"
        assert payload["device"] == "Canon EOS 5D"

    def test_duplicate_share_resolves_once(self, app, media_store, gps_jpeg):
        handle = media_store.insert_image(gps_jpeg, "tokyo.jpg", "d", "image/jpeg")
        app.on_page_finished()

        app.on_new_share(ShareEvent.create([handle]))
        app.on_new_share(ShareEvent.create([handle]))
        assert app.wait_for_idle(timeout=10.0)
        app.on_new_share(ShareEvent.create([handle]))
        assert app.wait_for_idle(timeout=10.0)

        assert app.presentation.show_location.call_count == 1

    def test_file_reference(self, app, tmp_path, gps_jpeg):
        path = tmp_path / "photo.jpg"
        path.write_bytes(gps_jpeg)
        app.on_page_finished()

        app.on_new_share(ShareEvent.create([str(path)]))
        assert app.wait_for_idle(timeout=10.0)

        app.presentation.show_location.assert_called_once()

    def test_photo_without_location(self, app, media_store, plain_jpeg):
        handle = media_store.insert_image(plain_jpeg, "plain.jpg", "d", "image/jpeg")
        app.on_page_finished()

        app.on_new_share(ShareEvent.create([handle]))
        assert app.wait_for_idle(timeout=10.0)

        app.presentation.show_location.assert_not_called()
        app.presentation.show_message.assert_called_once_with(NO_LOCATION_MESSAGE)

    def test_unreadable_reference(self, app, tmp_path):
        app.on_page_finished()

        app.on_new_share(ShareEvent.create(["content://media/external/images/media/999"]))
        assert app.wait_for_idle(timeout=10.0)

        app.presentation.show_location.assert_not_called()
        message = app.presentation.show_message.call_args.args[0]
        assert message.startswith("Unable to read photo information.")
        assert list((tmp_path / "cache").glob("temp_image_*")) == []


class TestSaveImage:
    def test_saved_image_is_readable(self, app, media_store, png_data_url):
        result = app.save_image(png_data_url, "shot.png")

        assert result is not None
        app.presentation.show_message.assert_called_once_with(SAVED_MESSAGE)
        assert [entry["uri"] for entry in media_store.list_images()] == [result.handle]

    def test_permission_denied_leaves_gallery_untouched(self, app, media_store, png_data_url):
        app.exporter.permission_state.revoke(READ_MEDIA_IMAGES)

        assert app.save_image(png_data_url, "shot.png") is None

        assert media_store.list_images() == []
        assert app.exporter.requester.requests == [((READ_MEDIA_IMAGES,), PERMISSION_REQUEST_CODE)]
        assert "permission" in app.presentation.show_message.call_args.args[0].lower()

    def test_decode_failure_message(self, app, media_store):
        assert app.save_image("data:image/png;base64,!!!", "shot.png") is None

        assert media_store.list_images() == []
        assert app.presentation.show_message.call_args.args[0].startswith("Save failed:")

    def test_permission_result(self, app):
        app.on_permission_result(PERMISSION_REQUEST_CODE, [True])
        app.on_permission_result(PERMISSION_REQUEST_CODE, [False])
        app.on_permission_result(1, [True])

        messages = [call.args[0] for call in app.presentation.show_message.call_args_list]
        assert messages == ["Permission granted", "Storage permission is required to read photos"]


class TestOpenInMap:
    def test_web_fallback(self, app):
        outcome = app.open_in_map("39.9042", "116.4074", "Tiananmen")

        assert outcome is LaunchOutcome.OPENED_FALLBACK_WEB
        messages = [call.args[0] for call in app.presentation.show_message.call_args_list]
        assert "39.9042, 116.4074" in messages[0]
        assert messages[1] == WEB_FALLBACK_MESSAGE

    def test_deep_link_opens_silently(self, app, dispatcher):
        dispatcher.register("androidamap", MagicMock())

        assert app.open_in_map(39.9042, 116.4074, "Tiananmen") is LaunchOutcome.OPENED
        app.presentation.show_message.assert_not_called()

    def test_page_coordinates_keep_decimal_form(self, app, dispatcher):
        handler = MagicMock()
        dispatcher.register("androidamap", handler)

        assert app.open_in_map("0.00001", "116.40740", "Tiananmen") is LaunchOutcome.OPENED

        uri = handler.call_args.args[0]
        assert "&lat=0.00001&lon=116.4074&" in uri

    def test_no_handler(self, app, dispatcher):
        dispatcher.unregister("https")

        assert app.open_in_map("1", "2", "x") is LaunchOutcome.NO_HANDLER_AVAILABLE
        app.presentation.show_message.assert_called_once()

    def test_invalid_coordinates(self, app):
        assert app.open_in_map("north", "2", "x") is LaunchOutcome.NO_HANDLER_AVAILABLE
        assert "Invalid coordinates" in app.presentation.show_message.call_args.args[0]
