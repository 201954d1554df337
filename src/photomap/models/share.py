"""Inbound share event model."""

from dataclasses import dataclass
from enum import Enum

from .image_reference import ImageReference


class ShareAction(Enum):
    """Share actions a host can deliver."""

    SEND = "send"
    SEND_MULTIPLE = "send_multiple"


@dataclass(frozen=True)
class ShareEvent:
    """
    A "share image(s)" event delivered by the host.

    Two events with the same action, MIME type and references are the same
    event; hosts may redeliver one after a configuration change.
    """

    action: ShareAction
    mime_type: str
    refs: tuple[ImageReference, ...]

    @classmethod
    def create(cls, refs: list[str | ImageReference], mime_type: str = "image/*", action: ShareAction | None = None):
        """
        Create an event from raw locators.

        The action defaults to SEND for a single reference and SEND_MULTIPLE
        otherwise.
        """
        parsed = tuple(ref if isinstance(ref, ImageReference) else ImageReference.parse(ref) for ref in refs)
        if action is None:
            action = ShareAction.SEND if len(parsed) <= 1 else ShareAction.SEND_MULTIPLE
        return cls(action=action, mime_type=mime_type, refs=parsed)

    @property
    def is_image_share(self) -> bool:
        return self.mime_type.lower().startswith("image/")

    @property
    def first_ref(self) -> ImageReference | None:
        return self.refs[0] if self.refs else None
