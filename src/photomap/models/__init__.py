"""
Models module for photomap.

This module contains value objects and the media index:
- ImageReference: Opaque photo locator
- ExifMetadata, MapTarget, ExportRequest: Values exchanged between services
- ShareEvent: Inbound "share image(s)" event
- DatabaseManager: DuckDB connection and schema management
"""

from .database import DatabaseManager, create_database, get_database_manager
from .image_reference import ImageReference
from .metadata import ExifMetadata, ExportRequest, MapTarget
from .share import ShareAction, ShareEvent

__all__ = [
    "ImageReference",
    "ExifMetadata",
    "ExportRequest",
    "MapTarget",
    "ShareAction",
    "ShareEvent",
    "DatabaseManager",
    "create_database",
    "get_database_manager",
]
