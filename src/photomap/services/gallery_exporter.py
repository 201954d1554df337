"""Saving base64 images from the page into the gallery."""

import base64
import binascii
import io
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from PIL import Image

from ..errors import DecodeFailedError, PermissionDeniedError
from ..host.permissions import (
    PERMISSION_REQUEST_CODE,
    PermissionRequester,
    PermissionState,
    PermissionStrategy,
)
from ..logging_config import get_logger, log_performance
from ..models.metadata import ExportRequest

logger = get_logger(__name__)

GALLERY_DESCRIPTION = "Photo location viewer"


class Gallery(Protocol):
    def insert_image(self, image_data: bytes, display_name: str, description: str, mime_type: str) -> str: ...


@dataclass(frozen=True)
class ExportResult:
    """Outcome of a successful export."""

    handle: str
    display_name: str
    mime_type: str
    file_size: int


def decode_payload(payload: str, name: str) -> ExportRequest:
    """
    Decode a ``data:<mime>;base64,<data>`` URL or bare base64 string.

    Raises:
        DecodeFailedError: If the payload is not valid base64
    """
    if payload is None:
        raise DecodeFailedError("Image payload is empty", details={"name": name})

    data = payload.strip()
    if data.startswith("data:"):
        header, separator, data = data.partition(",")
        if not separator:
            raise DecodeFailedError("Data URL has no payload", details={"name": name})
        if ";base64" not in header:
            raise DecodeFailedError("Data URL is not base64 encoded", details={"name": name, "header": header})

    data = "".join(data.split())
    try:
        image_data = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailedError(
            f"Invalid base64 payload: {e}", details={"name": name}, original_exception=e
        ) from e

    if not image_data:
        raise DecodeFailedError("Image payload is empty", details={"name": name})

    return ExportRequest(image_data=image_data, suggested_name=name)


def detect_mime_type(image_data: bytes) -> str:
    """
    Identify the raster format of encoded image bytes.

    Raises:
        DecodeFailedError: If Pillow does not recognize the bytes as an image
    """
    try:
        with Image.open(io.BytesIO(image_data)) as image:
            image.verify()
            image_format = image.format
    except Exception as e:
        raise DecodeFailedError(
            f"Not a recognized image: {e}",
            details={"file_size": len(image_data)},
            original_exception=e,
        ) from e

    return Image.MIME.get(image_format or "", "application/octet-stream")


class GalleryExporter:
    """Checks storage permission, decodes the payload and stores it."""

    def __init__(
        self,
        gallery: Gallery,
        permission_strategy: PermissionStrategy,
        permission_state: PermissionState,
        requester: PermissionRequester | None = None,
    ):
        self.gallery = gallery
        self.permission_strategy = permission_strategy
        self.permission_state = permission_state
        self.requester = requester or PermissionRequester()

    def check_permission(self) -> bool:
        """
        Check the active permission model, requesting it once when missing.

        Returns:
            True if the permission is granted
        """
        if self.permission_strategy.is_granted(self.permission_state):
            return True

        self.requester.request([self.permission_strategy.permission], PERMISSION_REQUEST_CODE)
        return False

    def export(self, payload: str, name: str) -> ExportResult:
        """
        Save a base64 image into the gallery.

        Args:
            payload: Data URL or bare base64 image
            name: Title for the new gallery entry

        Returns:
            ExportResult with the handle of the new entry

        Raises:
            PermissionDeniedError: If storage permission is missing
            DecodeFailedError: If the payload is not a base64 raster image
        """
        start_time = datetime.now()

        if not self.check_permission():
            raise PermissionDeniedError(
                f"Missing {self.permission_strategy.permission}",
                details={"permission": self.permission_strategy.permission, "name": name},
            )

        request = decode_payload(payload, name)
        mime_type = detect_mime_type(request.image_data)

        handle = self.gallery.insert_image(
            request.image_data,
            request.suggested_name,
            GALLERY_DESCRIPTION,
            mime_type,
        )

        duration = (datetime.now() - start_time).total_seconds()
        log_performance("gallery_export", duration, name=name, mime_type=mime_type, file_size=len(request.image_data))

        return ExportResult(
            handle=handle,
            display_name=request.suggested_name,
            mime_type=mime_type,
            file_size=len(request.image_data),
        )
