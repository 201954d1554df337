"""Content provider interface used by the metadata resolver."""

from typing import BinaryIO, Protocol

from ..models.image_reference import ImageReference

# Document types and the provider table each one is stored in
DOCUMENT_TABLES = {
    "image": "images",
    "video": "video",
    "audio": "audio",
}


class ContentProvider(Protocol):
    """Brokers access to content references on behalf of the host."""

    def query_data_path(self, ref: ImageReference) -> str | None:
        """Return the filesystem path backing a content reference, if any."""
        ...

    def query_by_id(self, table: str, row_id: str) -> str | None:
        """Return the filesystem path of a row in a provider table, if any."""
        ...

    def open_stream(self, ref: ImageReference) -> BinaryIO:
        """Open the referenced bytes for reading. Raises OSError when unavailable."""
        ...
