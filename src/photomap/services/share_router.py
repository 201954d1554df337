"""
Routing of inbound "share image(s)" events.

The router forwards the first shared image to the resolver, holding the
event back until the presentation layer is ready and while another
resolution is still running. Only one event is ever held; a newer event
replaces it. Hosts may deliver the same event twice, so an event equal to
the last dispatched one is dropped.

Only the first image of a multi-image share is processed.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..logging_config import get_logger, log_error
from ..models.image_reference import ImageReference
from ..models.share import ShareEvent

logger = get_logger(__name__)


@dataclass
class ShareRouterState:
    """Readiness and processing state owned by one router."""

    ready: bool = False
    last_dispatched: ShareEvent | None = None
    pending: ShareEvent | None = None
    in_flight: bool = False


class ShareIntentRouter:
    """Selects the shared image and dispatches it at most once."""

    def __init__(
        self,
        dispatch: Callable[[ImageReference], None],
        state: ShareRouterState | None = None,
    ):
        self._dispatch_ref = dispatch
        self.state = state if state is not None else ShareRouterState()

    def on_share_received(
        self,
        event: ShareEvent | Sequence[str | ImageReference],
        ready: bool | None = None,
    ) -> bool:
        """
        Handle a share event from the host.

        Args:
            event: The event, or just its ordered image references
            ready: Current presentation readiness, if the host reports it

        Returns:
            True if a reference was dispatched now
        """
        if not isinstance(event, ShareEvent):
            event = ShareEvent.create(list(event))

        if ready is not None:
            self.state.ready = ready

        if not event.is_image_share:
            logger.info("share_ignored_not_image", action=event.action.value, mime_type=event.mime_type)
            return False

        if event.first_ref is None:
            logger.error("share_without_reference", action=event.action.value)
            return False

        if event == self.state.last_dispatched:
            logger.info("share_duplicate_suppressed", uri=event.first_ref.uri)
            return False

        if not self.state.ready or self.state.in_flight:
            if self.state.pending is not None and self.state.pending != event:
                logger.info("share_buffer_replaced", dropped_uri=self.state.pending.first_ref.uri)
            self.state.pending = event
            logger.info(
                "share_buffered",
                uri=event.first_ref.uri,
                ready=self.state.ready,
                in_flight=self.state.in_flight,
            )
            return False

        # A newer event supersedes anything still held
        self.state.pending = None
        return self._dispatch(event)

    def mark_ready(self) -> bool:
        """Presentation layer finished loading; replay a held event."""
        self.state.ready = True
        logger.debug("presentation_ready")
        return self._replay()

    def mark_not_ready(self) -> None:
        """Presentation layer is reloading; hold new events."""
        self.state.ready = False

    def resolution_finished(self) -> bool:
        """The dispatched resolution completed; replay a held event."""
        self.state.in_flight = False
        return self._replay()

    def _replay(self) -> bool:
        if not self.state.ready or self.state.in_flight or self.state.pending is None:
            return False

        event = self.state.pending
        self.state.pending = None

        if event == self.state.last_dispatched:
            logger.info("share_duplicate_suppressed", uri=event.first_ref.uri)
            return False

        logger.info("share_replayed", uri=event.first_ref.uri)
        return self._dispatch(event)

    def _dispatch(self, event: ShareEvent) -> bool:
        ref = event.first_ref
        if len(event.refs) > 1:
            logger.info("share_extra_images_dropped", uri=ref.uri, dropped=len(event.refs) - 1)

        previous = self.state.last_dispatched
        self.state.last_dispatched = event
        self.state.in_flight = True
        logger.info("share_dispatched", uri=ref.uri, action=event.action.value)

        try:
            self._dispatch_ref(ref)
        except Exception as e:
            log_error(e, {"operation": "share_dispatch", "uri": ref.uri})
            # Nothing was dispatched; a redelivery is not a duplicate
            self.state.last_dispatched = previous
            self.state.in_flight = False
            return False

        return True
