"""
Metadata resolution for shared photos.

Hosts hand over photos as opaque references that are not always readable
the same way: some are plain files, some are brokered by a content
provider, some can only be streamed. The resolver tries an ordered list of
strategies and returns the metadata from the first one that can read the
photo. A strategy failing is never fatal; only when every strategy has
failed does resolution raise ResolutionError.

Strategies, in order:
1. FilePathStrategy: ``file`` references, parsed straight from the path
2. ContentPathStrategy: ``content`` references whose provider knows the
   backing file, including document references (``type:id``)
3. TempFileStrategy: bytes copied into a temporary file that is always
   deleted afterwards
4. StreamStrategy: parsed directly from a stream on the reference
"""

import os
import shutil
import tempfile
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from ..errors import ResolutionError
from ..host.content import DOCUMENT_TABLES, ContentProvider
from ..logging_config import get_logger, log_performance
from ..models.image_reference import ImageReference
from ..models.metadata import ExifMetadata
from .exif_reader import read_exif

logger = get_logger(__name__)

ExifReader = Callable[[Any], ExifMetadata]

TEMP_FILE_PREFIX = "temp_image_"
TEMP_FILE_SUFFIX = ".jpg"


class StrategyNotApplicable(Exception):
    """The strategy does not handle this kind of reference."""


class ResolutionStrategy:
    """One way of reading metadata for a reference."""

    name = "strategy"

    def extract(self, ref: ImageReference) -> ExifMetadata:
        """
        Read metadata for a reference.

        Raises:
            StrategyNotApplicable: If the reference is not one this strategy reads
            Exception: Any failure while reading; the resolver moves on
        """
        raise NotImplementedError


class FilePathStrategy(ResolutionStrategy):
    name = "file_path"

    def __init__(self, reader: ExifReader = read_exif):
        self.reader = reader

    def extract(self, ref: ImageReference) -> ExifMetadata:
        path = ref.file_path
        if path is None:
            raise StrategyNotApplicable(f"not a file reference: {ref.scheme}")
        return self.reader(path)


class ContentPathStrategy(ResolutionStrategy):
    name = "content_path"

    def __init__(self, provider: ContentProvider, reader: ExifReader = read_exif):
        self.provider = provider
        self.reader = reader

    def find_path(self, ref: ImageReference) -> str | None:
        """Ask the provider for the file backing a content reference."""
        path = self.provider.query_data_path(ref)
        if path:
            logger.debug("content_path_from_data_column", uri=ref.uri, path=path)
            return path

        if not ref.is_document:
            return None

        document = ref.document_id()
        if document is None:
            return None

        doc_type, doc_id = document
        table = DOCUMENT_TABLES.get(doc_type)
        logger.debug("document_reference_decoded", uri=ref.uri, doc_type=doc_type, doc_id=doc_id, table=table)
        if table is None:
            return None

        path = self.provider.query_by_id(table, doc_id)
        if path:
            logger.debug("content_path_from_document", uri=ref.uri, path=path)
        return path or None

    def extract(self, ref: ImageReference) -> ExifMetadata:
        if not ref.is_content:
            raise StrategyNotApplicable(f"not a content reference: {ref.scheme}")

        path = self.find_path(ref)
        if path is None:
            raise FileNotFoundError(f"provider has no file path for {ref.uri}")
        return self.reader(path)


class TempFileStrategy(ResolutionStrategy):
    name = "temp_file"

    def __init__(self, provider: ContentProvider, cache_dir: str | Path, reader: ExifReader = read_exif):
        self.provider = provider
        self.cache_dir = Path(cache_dir)
        self.reader = reader

    def extract(self, ref: ImageReference) -> ExifMetadata:
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        with self.provider.open_stream(ref) as stream:
            fd, temp_path = tempfile.mkstemp(prefix=TEMP_FILE_PREFIX, suffix=TEMP_FILE_SUFFIX, dir=self.cache_dir)
            try:
                with os.fdopen(fd, "wb") as output:
                    shutil.copyfileobj(stream, output)
                return self.reader(temp_path)
            finally:
                Path(temp_path).unlink(missing_ok=True)
                logger.debug("temp_file_removed", path=temp_path)


class StreamStrategy(ResolutionStrategy):
    """Parses straight from a stream; some formats lose fields this way."""

    name = "stream"

    def __init__(self, provider: ContentProvider, reader: ExifReader = read_exif):
        self.provider = provider
        self.reader = reader

    def extract(self, ref: ImageReference) -> ExifMetadata:
        with self.provider.open_stream(ref) as stream:
            return self.reader(stream)


def default_strategies(
    provider: ContentProvider, cache_dir: str | Path, reader: ExifReader = read_exif
) -> list[ResolutionStrategy]:
    return [
        FilePathStrategy(reader),
        ContentPathStrategy(provider, reader),
        TempFileStrategy(provider, cache_dir, reader),
        StreamStrategy(provider, reader),
    ]


class MetadataResolver:
    """Tries resolution strategies in order until one reads the photo."""

    def __init__(self, strategies: Sequence[ResolutionStrategy]):
        if not strategies:
            raise ValueError("At least one resolution strategy is required")
        self.strategies = list(strategies)

    @classmethod
    def create(cls, provider: ContentProvider, cache_dir: str | Path) -> "MetadataResolver":
        return cls(default_strategies(provider, cache_dir))

    def resolve(self, ref: ImageReference) -> ExifMetadata:
        """
        Read EXIF metadata for a reference.

        Args:
            ref: Reference to the photo

        Returns:
            ExifMetadata; coordinates are None when the photo has no GPS

        Raises:
            ResolutionError: If every strategy failed
        """
        start_time = datetime.now()
        attempts: list[dict[str, str]] = []

        logger.info("resolution_started", uri=ref.uri, scheme=ref.scheme, authority=ref.authority, path=ref.path)

        for strategy in self.strategies:
            try:
                metadata = strategy.extract(ref)
            except StrategyNotApplicable as e:
                logger.debug("resolution_strategy_skipped", strategy=strategy.name, reason=str(e))
                attempts.append({"strategy": strategy.name, "result": "skipped"})
                continue
            except Exception as e:
                logger.warning(
                    "resolution_strategy_failed",
                    strategy=strategy.name,
                    uri=ref.uri,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                attempts.append({"strategy": strategy.name, "result": f"{type(e).__name__}: {e}"})
                continue

            duration = (datetime.now() - start_time).total_seconds()
            log_performance("resolve_metadata", duration, uri=ref.uri, strategy=strategy.name)
            logger.info(
                "resolution_succeeded",
                uri=ref.uri,
                strategy=strategy.name,
                has_location=metadata.has_location,
            )
            return metadata

        raise ResolutionError(
            f"No strategy could read {ref.uri}",
            details={"uri": ref.uri, "attempts": attempts},
        )
