"""
Opening a location in an external map application.

The launcher tries the map provider's deep link first, then its store
listing, then its mobile web site. Each step asks the dispatcher whether a
handler exists before dispatching. Coordinates are passed through in the
provider's own coordinate system; no reprojection is done.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from urllib.parse import quote

from ..host.intents import IntentDispatcher
from ..logging_config import get_logger, log_error
from ..models.metadata import MapTarget

logger = get_logger(__name__)

# Known map application packages, preferred first
KNOWN_MAP_PACKAGES: list[tuple[str, str]] = [
    ("com.autonavi.minimap", "Amap (China)"),
    ("com.amap.android.ams", "Amap (international)"),
    ("com.autonavi.amapauto", "Amap (car)"),
]

MAP_PACKAGE_KEYWORDS = ("amap", "autonavi")
DIAGNOSE_KEYWORDS = ("amap", "autonavi", "gaode")


def format_coordinate(value: float) -> str:
    """Plain decimal notation, never exponent form (1e-05 becomes 0.00001)."""
    return format(Decimal(repr(float(value))), "f")


class LaunchOutcome(Enum):
    OPENED = "opened"
    OPENED_FALLBACK_STORE = "opened_fallback_store"
    OPENED_FALLBACK_WEB = "opened_fallback_web"
    NO_HANDLER_AVAILABLE = "no_handler_available"


@dataclass(frozen=True)
class MapProvider:
    """Where and how to reach the map application."""

    scheme: str = "androidamap"
    source_application: str = "Photo location viewer"
    store_package: str = "com.autonavi.minimap"
    web_url: str = "https://mobile.amap.com/"

    def deep_link(self, target: MapTarget) -> str:
        # Percent-encode like the host's URI encoder: unreserved marks stay
        label = quote(target.label, safe="-_.!~*'()")
        lat = format_coordinate(target.latitude)
        lon = format_coordinate(target.longitude)
        source = quote(self.source_application, safe="-_.!~*'()")
        return (
            f"{self.scheme}://viewMap?sourceApplication={source}"
            f"&poiname={label}&lat={lat}&lon={lon}&dev=0"
        )

    def store_link(self) -> str:
        return f"market://details?id={self.store_package}"


class MapLauncher:
    """Deep link, then store listing, then web site."""

    def __init__(self, dispatcher: IntentDispatcher, provider: MapProvider | None = None):
        self.dispatcher = dispatcher
        self.provider = provider or MapProvider()

    def _try(self, uri: str, step: str) -> bool:
        if not self.dispatcher.can_handle(uri):
            logger.info("map_launch_no_handler", step=step, uri=uri)
            return False

        try:
            self.dispatcher.dispatch(uri)
        except Exception as e:
            log_error(e, {"operation": "map_launch", "step": step, "uri": uri})
            return False

        logger.info("map_launch_dispatched", step=step, uri=uri)
        return True

    def launch(self, target: MapTarget) -> LaunchOutcome:
        """
        Open the target in the map application or one of its fallbacks.

        Never raises for missing handlers; NO_HANDLER_AVAILABLE is returned
        when nothing could be opened.
        """
        if self._try(self.provider.deep_link(target), "deep_link"):
            return LaunchOutcome.OPENED

        if self._try(self.provider.store_link(), "store"):
            return LaunchOutcome.OPENED_FALLBACK_STORE

        if self._try(self.provider.web_url, "web"):
            return LaunchOutcome.OPENED_FALLBACK_WEB

        logger.warning("map_launch_failed", latitude=target.latitude, longitude=target.longitude)
        return LaunchOutcome.NO_HANDLER_AVAILABLE


def fallback_message(target: MapTarget) -> str:
    """Message shown when the map application itself could not be opened."""
    return (
        "Map app is not installed\n\n"
        "You can:\n"
        "• Search for the map app in your app store and install it\n"
        "• Or view the coordinates in another map app:\n"
        f"  {format_coordinate(target.latitude)}, {format_coordinate(target.longitude)}"
    )


def find_installed_map_package(installed_packages: list[str]) -> str | None:
    """
    Find the installed map application package.

    Known packages are checked in priority order first, then any package
    whose name mentions the provider.
    """
    installed = set(installed_packages)
    for package, _description in KNOWN_MAP_PACKAGES:
        if package in installed:
            return package

    for package in installed_packages:
        if any(keyword in package.lower() for keyword in MAP_PACKAGE_KEYWORDS):
            return package

    return None


def diagnose(installed_packages: list[str]) -> str:
    """Plain-text report of which map application packages are installed."""
    lines = ["=== Map app detection ===", "", "Related packages:"]

    related = [
        package for package in installed_packages if any(keyword in package.lower() for keyword in DIAGNOSE_KEYWORDS)
    ]
    if related:
        lines.extend(f"  - {package}" for package in related)
    else:
        lines.append("  (none found)")

    lines.extend(["", "Supported packages:"])
    installed = set(installed_packages)
    for package, description in KNOWN_MAP_PACKAGES:
        mark = "✓" if package in installed else "✗"
        lines.append(f"  {mark} {description} ({package})")

    found = find_installed_map_package(installed_packages)
    lines.append("")
    lines.append(f"Result: installed ({found})" if found else "Result: not installed")

    report = "\n".join(lines)
    logger.debug("map_app_diagnosis", report=report)
    return report
