"""
photomap - Photo location viewer core

Reads the GPS position, capture time and camera of a shared photo and hands
it to a presentation layer, with helpers for:
- Resolving opaque image references through several read strategies
- Routing inbound "share image" events with readiness buffering
- Saving base64 images into a local gallery
- Opening a location in an external map application
"""

__version__ = "0.1.0"
__description__ = "Photo location viewer core"
