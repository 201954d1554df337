"""EXIF parsing for photomap: GPS position, capture time and camera."""

import math
from pathlib import Path
from typing import IO, Any

from PIL import ExifTags, Image

from ..logging_config import get_logger
from ..models.metadata import ExifMetadata

try:
    from pillow_heif import register_heif_opener  # type: ignore[import-untyped]

    register_heif_opener()
    HEIF_AVAILABLE = True
except ImportError:
    HEIF_AVAILABLE = False

logger = get_logger(__name__)

# Base IFD tags
TAG_DATETIME = 306
TAG_MAKE = 271
TAG_MODEL = 272

# Pointer to the GPS IFD
GPS_IFD_TAG = 0x8825


def convert_to_degrees(value: Any) -> float:
    """Convert an EXIF (degrees, minutes, seconds) triple to decimal degrees."""
    degrees, minutes, seconds = (float(part) for part in value)
    return degrees + (minutes / 60.0) + (seconds / 3600.0)


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    text = str(value).replace("\x00", "").strip()
    return text or None


def get_gps_info(exif: Image.Exif) -> dict[str, Any]:
    """Return the GPS IFD keyed by tag name; empty when the photo has none."""
    try:
        gps_ifd = exif.get_ifd(GPS_IFD_TAG)
    except (KeyError, ValueError, TypeError):
        return {}

    return {ExifTags.GPSTAGS.get(key, key): value for key, value in gps_ifd.items()}


def get_coordinates(gps_info: dict[str, Any]) -> tuple[float, float] | None:
    """
    Read latitude and longitude as a pair.

    Returns:
        (latitude, longitude), or None unless both can be read
    """
    if "GPSLatitude" not in gps_info or "GPSLongitude" not in gps_info:
        return None

    try:
        lat = convert_to_degrees(gps_info["GPSLatitude"])
        lon = convert_to_degrees(gps_info["GPSLongitude"])
    except (TypeError, ValueError, ZeroDivisionError) as e:
        logger.debug("gps_coordinates_unreadable", error=str(e))
        return None

    if _clean_text(gps_info.get("GPSLatitudeRef")) == "S":
        lat = -lat
    if _clean_text(gps_info.get("GPSLongitudeRef")) == "W":
        lon = -lon

    # Zero denominators read as NaN
    if not (math.isfinite(lat) and math.isfinite(lon)) or abs(lat) > 90 or abs(lon) > 180:
        logger.debug("gps_coordinates_out_of_range", latitude=lat, longitude=lon)
        return None

    return lat, lon


def read_exif(source: str | Path | IO[bytes]) -> ExifMetadata:
    """
    Parse EXIF metadata from a file path or binary stream.

    A photo without EXIF or without GPS still parses; the missing fields are
    None.

    Raises:
        OSError: If the source cannot be opened or is not an image
    """
    with Image.open(source) as image:
        exif = image.getexif()

        coordinates = get_coordinates(get_gps_info(exif)) if exif else None
        latitude, longitude = coordinates if coordinates else (None, None)

        metadata = ExifMetadata(
            latitude=latitude,
            longitude=longitude,
            datetime=_clean_text(exif.get(TAG_DATETIME)),
            make=_clean_text(exif.get(TAG_MAKE)),
            model=_clean_text(exif.get(TAG_MODEL)),
        )

    logger.debug(
        "exif_parsed",
        has_location=metadata.has_location,
        datetime=metadata.datetime,
        make=metadata.make,
        model=metadata.model,
    )
    return metadata
