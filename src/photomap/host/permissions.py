"""
Storage permission models.

Hosts have used three mutually exclusive storage permission models over
their versions. The model is picked once at startup from the platform API
level and then asked on every export.
"""

from collections.abc import Callable, Iterable

from ..config import READ_EXTERNAL_STORAGE, READ_MEDIA_IMAGES, WRITE_EXTERNAL_STORAGE
from ..logging_config import get_logger

logger = get_logger(__name__)

PERMISSION_REQUEST_CODE = 100

PERMISSION_GRANTED_MESSAGE = "Permission granted"
PERMISSION_DENIED_MESSAGE = "Storage permission is required to read photos"


class PermissionState:
    """Permissions the host has granted to the application."""

    def __init__(self, granted: Iterable[str] = ()):
        self._granted = set(granted)

    def is_granted(self, permission: str) -> bool:
        return permission in self._granted

    def grant(self, permission: str) -> None:
        self._granted.add(permission)

    def revoke(self, permission: str) -> None:
        self._granted.discard(permission)

    @property
    def granted(self) -> frozenset[str]:
        return frozenset(self._granted)


class PermissionRequester:
    """Forwards runtime permission requests to the host and records them."""

    def __init__(self, on_request: Callable[[list[str], int], None] | None = None):
        self._on_request = on_request
        self.requests: list[tuple[tuple[str, ...], int]] = []

    def request(self, permissions: list[str], request_code: int) -> None:
        self.requests.append((tuple(permissions), request_code))
        logger.info("permission_requested", permissions=permissions, request_code=request_code)
        if self._on_request is not None:
            self._on_request(permissions, request_code)


class PermissionStrategy:
    """One storage permission model."""

    permission: str = ""
    min_api_level: int = 0

    def is_granted(self, state: PermissionState) -> bool:
        return state.is_granted(self.permission)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(permission={self.permission!r})"


class MediaImagesPermission(PermissionStrategy):
    """Granular media permission (API 33 and later)."""

    permission = READ_MEDIA_IMAGES
    min_api_level = 33


class ExternalStorageReadPermission(PermissionStrategy):
    """Scoped storage (API 29 to 32)."""

    permission = READ_EXTERNAL_STORAGE
    min_api_level = 29


class ExternalStorageWritePermission(PermissionStrategy):
    """Legacy shared storage (before API 29)."""

    permission = WRITE_EXTERNAL_STORAGE
    min_api_level = 0


# Newest model first
PERMISSION_STRATEGIES: tuple[type[PermissionStrategy], ...] = (
    MediaImagesPermission,
    ExternalStorageReadPermission,
    ExternalStorageWritePermission,
)


def select_permission_strategy(api_level: int) -> PermissionStrategy:
    """Pick the permission model that applies to a platform API level."""
    for strategy_class in PERMISSION_STRATEGIES:
        if api_level >= strategy_class.min_api_level:
            strategy = strategy_class()
            logger.debug("permission_strategy_selected", api_level=api_level, strategy=repr(strategy))
            return strategy
    return ExternalStorageWritePermission()


def permission_result_message(request_code: int, grant_results: list[bool]) -> str | None:
    """
    Message to show when the host reports a permission request result.

    Returns:
        Message for our request code, None for requests we did not make
    """
    if request_code != PERMISSION_REQUEST_CODE:
        return None

    if grant_results and grant_results[0]:
        return PERMISSION_GRANTED_MESSAGE
    return PERMISSION_DENIED_MESSAGE
