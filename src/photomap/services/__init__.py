"""
Services module for photomap.

This module contains the classes that carry the application logic:
- MetadataResolver: Reads EXIF metadata through ordered read strategies
- ShareIntentRouter: Routes inbound share events to the resolver
- GalleryExporter: Saves base64 images into the gallery
- MapLauncher: Opens a location in an external map application
"""

from .gallery_exporter import ExportResult, GalleryExporter
from .map_launcher import LaunchOutcome, MapLauncher, MapProvider
from .metadata_resolver import MetadataResolver, ResolutionStrategy
from .share_router import ShareIntentRouter, ShareRouterState

__all__ = [
    "ExportResult",
    "GalleryExporter",
    "LaunchOutcome",
    "MapLauncher",
    "MapProvider",
    "MetadataResolver",
    "ResolutionStrategy",
    "ShareIntentRouter",
    "ShareRouterState",
]
