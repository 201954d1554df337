"""
Intent dispatch for photomap.

Outbound URIs (map deep links, store listings, web pages) are handed to
whatever handler the host registered for their scheme. Callers always ask
``can_handle`` first; dispatching an unhandled URI is an error.
"""

import webbrowser
from collections.abc import Callable
from typing import Any, Protocol
from urllib.parse import urlsplit

from ..config import get_installed_packages
from ..logging_config import get_logger

logger = get_logger(__name__)

UriHandler = Callable[[str], Any]


class IntentDispatcher(Protocol):
    """Capability queries and dispatch of outbound URIs."""

    def can_handle(self, uri: str) -> bool: ...

    def dispatch(self, uri: str) -> None: ...

    def installed_packages(self) -> list[str]: ...


class LocalIntentDispatcher:
    """Dispatches URIs to callables registered per scheme."""

    def __init__(
        self,
        handlers: dict[str, UriHandler] | None = None,
        installed_packages: list[str] | None = None,
    ):
        self._handlers: dict[str, UriHandler] = {}
        for scheme, handler in (handlers or {}).items():
            self.register(scheme, handler)
        self._installed_packages = list(installed_packages or [])

    def register(self, scheme: str, handler: UriHandler) -> None:
        self._handlers[scheme.lower()] = handler

    def unregister(self, scheme: str) -> None:
        self._handlers.pop(scheme.lower(), None)

    def can_handle(self, uri: str) -> bool:
        scheme = urlsplit(uri).scheme.lower()
        return bool(scheme) and scheme in self._handlers

    def dispatch(self, uri: str) -> None:
        """
        Hand a URI to its registered handler.

        Raises:
            LookupError: If no handler is registered for the URI's scheme
        """
        scheme = urlsplit(uri).scheme.lower()
        handler = self._handlers.get(scheme)
        if handler is None:
            raise LookupError(f"No handler registered for scheme '{scheme}'")

        logger.info("intent_dispatched", scheme=scheme, uri=uri)
        handler(uri)

    def installed_packages(self) -> list[str]:
        return list(self._installed_packages)


def _open_in_browser(uri: str) -> None:
    if not webbrowser.open(uri):
        logger.warning("browser_open_failed", uri=uri)


def default_intent_dispatcher() -> LocalIntentDispatcher:
    """Dispatcher for a desktop host: web URLs go to the system browser."""
    return LocalIntentDispatcher(
        handlers={"http": _open_in_browser, "https": _open_in_browser},
        installed_packages=get_installed_packages(),
    )
