"""
Host platform abstractions for photomap.

The host operating system is reached only through these interfaces:
- ContentProvider / MediaStore: content references and the local gallery
- IntentDispatcher: capability queries and URI dispatch
- PermissionStrategy: storage permission model for the platform version
- UiThread: marshalling results back to the presentation thread
"""

from .content import ContentProvider
from .intents import IntentDispatcher, LocalIntentDispatcher, default_intent_dispatcher
from .media_store import MediaStore
from .permissions import (
    PERMISSION_REQUEST_CODE,
    PermissionRequester,
    PermissionState,
    PermissionStrategy,
    permission_result_message,
    select_permission_strategy,
)
from .presentation import ConsolePresentation, PresentationBridge
from .ui_thread import UiThread

__all__ = [
    "ContentProvider",
    "IntentDispatcher",
    "LocalIntentDispatcher",
    "default_intent_dispatcher",
    "MediaStore",
    "PERMISSION_REQUEST_CODE",
    "PermissionRequester",
    "PermissionState",
    "PermissionStrategy",
    "permission_result_message",
    "select_permission_strategy",
    "ConsolePresentation",
    "PresentationBridge",
    "UiThread",
]
