"""
Command line tasks for photomap.

Run as ``photomap <task>``:
    photomap locate content://media/external/images/media/42
    photomap save photo.b64 photo.png
    photomap open-map 39.9042 116.4074 "Tiananmen"
    photomap diagnose
"""

import os
import sys

import structlog
from dotenv import load_dotenv
from invoke import Collection, Context, Program, task

from .. import __version__
from ..app import PhotoLocationApp
from ..config import get_config, get_installed_packages
from ..host.presentation import ConsolePresentation
from ..logging_config import configure_structured_logging
from ..models.share import ShareEvent
from ..services.map_launcher import diagnose as diagnose_map_apps

logger = structlog.get_logger()


def _load_environment(env_file: str) -> None:
    if os.path.exists(env_file):
        load_dotenv(dotenv_path=env_file)
        get_config().clear_cache()
    configure_structured_logging()
    if os.path.exists(env_file):
        logger.info("env_file_loaded", env_file=env_file)


@task(help={"ref": "Image reference: a path, file:// or content:// URI", "env_file": "Environment file"})
def locate(c: Context, ref: str, env_file: str = ".env", timeout: float = 30.0):
    """
    Print the location of a photo as JSON.

    The reference goes through the same share routing as an image shared
    from another app.
    """
    _load_environment(env_file)

    app = PhotoLocationApp.from_config(ConsolePresentation())
    try:
        app.on_page_finished()
        app.on_new_share(ShareEvent.create([ref]))
        if not app.wait_for_idle(timeout=timeout):
            logger.error("locate_timed_out", ref=ref, timeout=timeout)
            sys.exit(1)
    finally:
        app.shutdown()


@task(help={"source": "File holding a base64 image or data URL", "name": "Gallery title for the image"})
def save(c: Context, source: str, name: str, env_file: str = ".env"):
    """Save a base64 encoded image into the gallery."""
    _load_environment(env_file)

    if not os.path.isfile(source):
        logger.error("source_not_found", source=source)
        sys.exit(1)

    with open(source, encoding="utf-8") as f:
        payload = f.read()

    app = PhotoLocationApp.from_config(ConsolePresentation())
    try:
        result = app.save_image(payload, name)
    finally:
        app.shutdown()

    if result is None:
        sys.exit(1)
    print(result.handle)


@task(help={"latitude": "Latitude", "longitude": "Longitude", "name": "Label shown on the map"})
def open_map(c: Context, latitude: str, longitude: str, name: str, env_file: str = ".env"):
    """Open a location in the map application or its fallbacks."""
    _load_environment(env_file)

    app = PhotoLocationApp.from_config(ConsolePresentation())
    try:
        outcome = app.open_in_map(latitude, longitude, name)
    finally:
        app.shutdown()

    print(outcome.value)


@task
def diagnose(c: Context, env_file: str = ".env"):
    """Report which map application packages are installed."""
    _load_environment(env_file)
    print(diagnose_map_apps(get_installed_packages()))


namespace = Collection(locate, save, open_map, diagnose)

program = Program(namespace=namespace, version=__version__, name="photomap", binary="photomap")
