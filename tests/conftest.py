"""
Pytest configuration and fixtures for photomap tests.
"""

import base64
import io
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from photomap.host.media_store import MediaStore
from photomap.models.database import DatabaseManager, create_database

GPS_IFD = 0x8825

# 35°40'30" N, 139°45'36" E
TOKYO_GPS = {
    1: "N",
    2: (35.0, 40.0, 30.0),
    3: "E",
    4: (139.0, 45.0, 36.0),
}
TOKYO_LATITUDE = 35.0 + 40.0 / 60 + 30.0 / 3600
TOKYO_LONGITUDE = 139.0 + 45.0 / 60 + 36.0 / 3600


def make_jpeg(
    gps: dict[int, Any] | None = None,
    make: str | None = None,
    model: str | None = None,
    datetime: str | None = None,
    size: tuple[int, int] = (64, 48),
) -> bytes:
    """Create a JPEG in memory with the requested EXIF fields."""
    image = Image.new("RGB", size, color="blue")
    exif = image.getexif()
    if make:
        exif[271] = make
    if model:
        exif[272] = model
    if datetime:
        exif[306] = datetime
    if gps:
        exif[GPS_IFD] = gps

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", exif=exif)
    return buffer.getvalue()


def make_png() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color="red").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Working directory for a test."""
    return tmp_path


@pytest.fixture
def gps_jpeg() -> bytes:
    """JPEG with GPS, capture time and camera."""
    return make_jpeg(gps=TOKYO_GPS, make="Canon", model="EOS 5D", datetime="2023:12:25 14:30:45")


@pytest.fixture
def plain_jpeg() -> bytes:
    """JPEG with a capture time and camera but no GPS."""
    return make_jpeg(make="Canon", datetime="2023:12:25 14:30:45")


@pytest.fixture
def png_data_url() -> str:
    return "data:image/png;base64," + base64.b64encode(make_png()).decode("ascii")


@pytest.fixture
def db_manager(tmp_path: Path) -> Generator[DatabaseManager, None, None]:
    manager = create_database(str(tmp_path / "media.duckdb"))
    yield manager
    manager.close()


@pytest.fixture
def media_store(db_manager: DatabaseManager, tmp_path: Path) -> MediaStore:
    return MediaStore(db_manager, tmp_path / "gallery")
