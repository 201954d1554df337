"""
Local media store for photomap.

A directory of image files indexed by DuckDB. It plays both host roles the
application needs: the content provider that content references resolve
against, and the gallery exported images are inserted into.

References look like ``content://media/external/images/media/42``; document
references look like
``content://com.android.providers.media.documents/document/image:42``.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO

from ..logging_config import get_logger
from ..models.database import DatabaseManager
from ..models.image_reference import ImageReference
from .content import DOCUMENT_TABLES

logger = get_logger(__name__)

MEDIA_AUTHORITY = "media"
EXTERNAL_VOLUME = "external"

MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/heic": ".heic",
    "image/heif": ".heif",
}

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.\- ]+")


class MediaStore:
    """DuckDB-indexed gallery that also answers content reference queries."""

    def __init__(self, db_manager: DatabaseManager, gallery_dir: str | Path):
        self.db_manager = db_manager
        self.gallery_dir = Path(gallery_dir)

    @staticmethod
    def content_uri(kind: str, row_id: int | str) -> str:
        """Build the content reference for a media row."""
        return f"content://{MEDIA_AUTHORITY}/{EXTERNAL_VOLUME}/{kind}/media/{row_id}"

    def _parse_media_ref(self, ref: ImageReference) -> tuple[str, str] | None:
        """Return (kind, row_id) for ``content://media/<volume>/<kind>/media/<id>``."""
        if not ref.is_content or ref.authority != MEDIA_AUTHORITY:
            return None

        segments = ref.path_segments
        if len(segments) != 4 or segments[2] != "media" or not segments[3].isdigit():
            return None

        return segments[1], segments[3]

    def query_data_path(self, ref: ImageReference) -> str | None:
        """Look up the data column for a media reference."""
        parsed = self._parse_media_ref(ref)
        if parsed is None:
            logger.debug("media_ref_not_recognized", uri=ref.uri)
            return None

        kind, row_id = parsed
        return self.query_by_id(kind, row_id)

    def query_by_id(self, table: str, row_id: str) -> str | None:
        """Look up the data column for a row of the given media kind."""
        if not str(row_id).isdigit():
            return None

        rows = self.db_manager.execute_query(
            "SELECT data FROM media WHERE kind = ? AND id = ?",
            (table, int(row_id)),
        )
        if not rows or not rows[0][0]:
            return None

        logger.debug("media_row_resolved", table=table, row_id=row_id, path=rows[0][0])
        return str(rows[0][0])

    def _resolve_path(self, ref: ImageReference) -> str | None:
        if ref.is_file:
            return ref.file_path

        path = self.query_data_path(ref)
        if path is None and ref.is_document:
            document = ref.document_id()
            if document is not None:
                doc_type, doc_id = document
                table = DOCUMENT_TABLES.get(doc_type)
                if table is not None:
                    path = self.query_by_id(table, doc_id)
        return path

    def open_stream(self, ref: ImageReference) -> BinaryIO:
        """
        Open the bytes behind a reference.

        Raises:
            FileNotFoundError: If the reference does not resolve to a stored file
        """
        path = self._resolve_path(ref)
        if path is None:
            raise FileNotFoundError(f"No content found for {ref.uri}")
        return open(path, "rb")

    def _unique_target(self, display_name: str, mime_type: str) -> Path:
        stem = _UNSAFE_NAME_CHARS.sub("_", Path(display_name).stem).strip() or "image"
        extension = MIME_EXTENSIONS.get(mime_type, Path(display_name).suffix.lower() or ".jpg")

        target = self.gallery_dir / f"{stem}{extension}"
        counter = 1
        while target.exists():
            target = self.gallery_dir / f"{stem}_{counter}{extension}"
            counter += 1
        return target

    def insert_image(self, image_data: bytes, display_name: str, description: str, mime_type: str) -> str:
        """
        Store an image and index it.

        Args:
            image_data: Encoded image bytes
            display_name: Title shown by gallery readers
            description: Free text stored with the entry
            mime_type: MIME type of the encoded bytes

        Returns:
            Content reference of the new entry
        """
        self.gallery_dir.mkdir(parents=True, exist_ok=True)
        target = self._unique_target(display_name, mime_type)
        target.write_bytes(image_data)

        try:
            rows = self.db_manager.execute_query(
                "INSERT INTO media (kind, data, display_name, description, mime_type, date_added) "
                "VALUES (?, ?, ?, ?, ?, ?) RETURNING id",
                ("images", str(target), display_name, description, mime_type, datetime.now()),
            )
        except Exception:
            target.unlink(missing_ok=True)
            raise

        row_id = rows[0][0]
        handle = self.content_uri("images", row_id)
        logger.info("media_inserted", handle=handle, path=str(target), mime_type=mime_type, size=len(image_data))
        return handle

    def list_images(self) -> list[dict[str, Any]]:
        """List image entries, newest first."""
        rows = self.db_manager.execute_query(
            "SELECT id, data, display_name, description, mime_type, date_added "
            "FROM media WHERE kind = 'images' ORDER BY date_added DESC, id DESC"
        )
        return [
            {
                "uri": self.content_uri("images", row[0]),
                "data": row[1],
                "display_name": row[2],
                "description": row[3],
                "mime_type": row[4],
                "date_added": row[5],
            }
            for row in rows
        ]
