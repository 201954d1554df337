"""
Value objects exchanged between the photomap services.

This module contains the ExifMetadata read from a photo, the MapTarget
handed to the map launcher and the ExportRequest consumed by the gallery
exporter.
"""

import math
from dataclasses import dataclass
from typing import Any

UNKNOWN_TIME = "Unknown time"
UNKNOWN_DEVICE = "Unknown device"


@dataclass(frozen=True)
class ExifMetadata:
    """
    EXIF fields read from a photo.

    GPS is read as a pair: latitude and longitude are either both set or
    both None.
    """

    latitude: float | None = None
    longitude: float | None = None
    datetime: str | None = None
    make: str | None = None
    model: str | None = None

    def __post_init__(self) -> None:
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be both present or both absent")

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def device(self) -> str | None:
        """Camera description, only when both make and model are known."""
        if self.make and self.model:
            return f"{self.make} {self.model}"
        return None

    def to_location_payload(self) -> dict[str, Any]:
        """
        Build the JSON object handed to the presentation layer.

        Returns:
            Dictionary with latitude, longitude, datetime and device keys

        Raises:
            ValueError: If the metadata carries no location
        """
        if not self.has_location:
            raise ValueError("Metadata has no location")

        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "datetime": self.datetime or UNKNOWN_TIME,
            "device": self.device or UNKNOWN_DEVICE,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "datetime": self.datetime,
            "make": self.make,
            "model": self.model,
        }


@dataclass(frozen=True)
class MapTarget:
    """A location to show in an external map application."""

    latitude: float
    longitude: float
    label: str

    @classmethod
    def from_strings(cls, latitude: str, longitude: str, label: str) -> "MapTarget":
        """Build a target from the string arguments a page bridge passes."""
        lat, lon = float(latitude), float(longitude)
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise ValueError(f"Coordinates must be finite: {latitude}, {longitude}")
        return cls(latitude=lat, longitude=lon, label=label)


@dataclass(frozen=True)
class ExportRequest:
    """Decoded image bytes to store in the gallery, consumed once."""

    image_data: bytes
    suggested_name: str
