"""
Application shell for photomap.

PhotoLocationApp plays the part of the host activity: it owns the share
router, runs metadata resolution on a background worker, marshals results
back through the UI thread queue and turns every outcome into either a
location payload or a short message for the presentation layer.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from .config import (
    get_cache_dir,
    get_database_path,
    get_gallery_dir,
    get_granted_permissions,
    get_map_provider_scheme,
    get_map_source_application,
    get_map_store_package,
    get_map_web_url,
    get_platform_api_level,
)
from .errors import ExportError, ResolutionError, handle_error
from .host.intents import IntentDispatcher, default_intent_dispatcher
from .host.media_store import MediaStore
from .host.permissions import (
    PermissionRequester,
    PermissionState,
    permission_result_message,
    select_permission_strategy,
)
from .host.presentation import PresentationBridge
from .host.ui_thread import UiThread
from .logging_config import get_logger
from .models.database import DatabaseManager, get_database_manager
from .models.image_reference import ImageReference
from .models.metadata import MapTarget
from .models.share import ShareEvent
from .services.gallery_exporter import ExportResult, GalleryExporter
from .services.map_launcher import LaunchOutcome, MapLauncher, MapProvider, fallback_message
from .services.metadata_resolver import MetadataResolver
from .services.share_router import ShareIntentRouter, ShareRouterState

logger = get_logger(__name__)

NO_LOCATION_MESSAGE = "This photo has no location data\nUse a photo taken with GPS turned on"
SAVED_MESSAGE = "Image saved to gallery"
STORE_FALLBACK_MESSAGE = "Opened the app store listing for the map app"
WEB_FALLBACK_MESSAGE = "Opened the map web site"


class PhotoLocationApp:
    """Wires share routing, resolution, export and map launching together."""

    def __init__(
        self,
        resolver: MetadataResolver,
        exporter: GalleryExporter,
        launcher: MapLauncher,
        presentation: PresentationBridge,
        ui_thread: UiThread | None = None,
        executor: ThreadPoolExecutor | None = None,
        router_state: ShareRouterState | None = None,
    ):
        self.resolver = resolver
        self.exporter = exporter
        self.launcher = launcher
        self.presentation = presentation
        self.ui_thread = ui_thread or UiThread()
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="metadata-resolver")
        self._db_manager: DatabaseManager | None = None
        self.router = ShareIntentRouter(self._start_resolution, router_state)

    @classmethod
    def from_config(
        cls,
        presentation: PresentationBridge,
        dispatcher: IntentDispatcher | None = None,
        requester: PermissionRequester | None = None,
    ) -> "PhotoLocationApp":
        """Build an app backed by the local media store and configured host."""
        db_manager = get_database_manager(str(get_database_path()))
        media_store = MediaStore(db_manager, get_gallery_dir())

        exporter = GalleryExporter(
            gallery=media_store,
            permission_strategy=select_permission_strategy(get_platform_api_level()),
            permission_state=PermissionState(get_granted_permissions()),
            requester=requester,
        )
        launcher = MapLauncher(
            dispatcher or default_intent_dispatcher(),
            MapProvider(
                scheme=get_map_provider_scheme(),
                source_application=get_map_source_application(),
                store_package=get_map_store_package(),
                web_url=get_map_web_url(),
            ),
        )

        app = cls(
            resolver=MetadataResolver.create(media_store, get_cache_dir()),
            exporter=exporter,
            launcher=launcher,
            presentation=presentation,
        )
        app._db_manager = db_manager
        return app

    # Share handling

    def on_page_finished(self) -> None:
        """The presentation layer has loaded."""
        self.router.mark_ready()

    def on_new_share(self, event: ShareEvent) -> bool:
        """A share event arrived from the host."""
        logger.info("share_received", action=event.action.value, mime_type=event.mime_type, count=len(event.refs))
        return self.router.on_share_received(event)

    def _start_resolution(self, ref: ImageReference) -> None:
        future = self._executor.submit(self.resolver.resolve, ref)
        future.add_done_callback(lambda done: self.ui_thread.post(self._on_resolved, ref, done))

    def _on_resolved(self, ref: ImageReference, future: Future) -> None:
        try:
            metadata = future.result()
        except ResolutionError as e:
            self.presentation.show_message(e.user_message)
        except Exception as e:
            info = handle_error(e, {"operation": "resolve", "uri": ref.uri})
            self.presentation.show_message(f"Failed to read photo information: {info.message}")
        else:
            if metadata.has_location:
                self.presentation.show_location(metadata.to_location_payload())
            else:
                logger.warning(
                    "photo_without_location",
                    uri=ref.uri,
                    has_datetime=metadata.datetime is not None,
                    has_make=metadata.make is not None,
                )
                self.presentation.show_message(NO_LOCATION_MESSAGE)
        finally:
            self.router.resolution_finished()

    def is_idle(self) -> bool:
        state = self.router.state
        return not state.in_flight and (state.pending is None or not state.ready)

    def wait_for_idle(self, timeout: float = 30.0) -> bool:
        """Drive the UI thread queue until no resolution is running."""
        return self.ui_thread.run_until(self.is_idle, timeout=timeout)

    # Page bridge calls

    def save_image(self, payload: str, name: str) -> ExportResult | None:
        try:
            result = self.exporter.export(payload, name)
        except ExportError as e:
            self.presentation.show_message(e.user_message)
            return None
        except Exception as e:
            info = handle_error(e, {"operation": "save_image", "name": name})
            self.presentation.show_message(f"Save failed: {info.message}")
            return None

        self.presentation.show_message(SAVED_MESSAGE)
        return result

    def open_in_map(self, latitude: Any, longitude: Any, name: str) -> LaunchOutcome:
        try:
            target = MapTarget.from_strings(str(latitude), str(longitude), name)
        except ValueError as e:
            handle_error(e, {"operation": "open_in_map"})
            self.presentation.show_message(f"Invalid coordinates: {latitude}, {longitude}")
            return LaunchOutcome.NO_HANDLER_AVAILABLE

        outcome = self.launcher.launch(target)

        if outcome is not LaunchOutcome.OPENED:
            self.presentation.show_message(fallback_message(target))
        if outcome is LaunchOutcome.OPENED_FALLBACK_STORE:
            self.presentation.show_message(STORE_FALLBACK_MESSAGE)
        elif outcome is LaunchOutcome.OPENED_FALLBACK_WEB:
            self.presentation.show_message(WEB_FALLBACK_MESSAGE)

        return outcome

    def on_permission_result(self, request_code: int, grant_results: list[bool]) -> None:
        message = permission_result_message(request_code, grant_results)
        if message is not None:
            self.presentation.show_message(message)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
        self.ui_thread.run_pending()
        if self._db_manager is not None:
            self._db_manager.close()
            self._db_manager = None
