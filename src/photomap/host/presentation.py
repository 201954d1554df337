"""Presentation bridge: where location payloads and user messages go."""

import json
import sys
from typing import Any, Protocol, TextIO


class PresentationBridge(Protocol):
    def show_location(self, payload: dict[str, Any]) -> None:
        """Render a ``{latitude, longitude, datetime, device}`` object."""
        ...

    def show_message(self, message: str) -> None:
        """Show a short user-visible message."""
        ...


class ConsolePresentation:
    """Writes payloads as JSON lines and messages as plain text."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stdout

    def show_location(self, payload: dict[str, Any]) -> None:
        print(json.dumps(payload, ensure_ascii=False), file=self.stream)

    def show_message(self, message: str) -> None:
        print(message, file=self.stream)
