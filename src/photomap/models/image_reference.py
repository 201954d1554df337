"""
Image reference model for photomap.

An ImageReference is the opaque locator a host hands over when a photo is
shared or picked: a scheme, an authority and path-like segments.
"""

from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

FILE_SCHEME = "file"
CONTENT_SCHEME = "content"


@dataclass(frozen=True)
class ImageReference:
    """
    Immutable locator identifying a photo.

    References are created when a share event arrives or a photo is picked
    and are never mutated afterwards.
    """

    uri: str
    scheme: str
    authority: str
    path: str

    @classmethod
    def parse(cls, uri: str) -> "ImageReference":
        """
        Parse a URI string (or a bare filesystem path) into a reference.

        Args:
            uri: Locator such as ``content://media/external/images/media/42``,
                ``file:///sdcard/DCIM/a.jpg`` or ``/home/me/a.jpg``

        Returns:
            ImageReference instance

        Raises:
            ValueError: If the locator is empty
        """
        if not uri or not uri.strip():
            raise ValueError("Image reference must not be empty")

        uri = uri.strip()
        parts = urlsplit(uri)

        # No scheme, or a Windows drive letter, means a plain path
        if not parts.scheme or len(parts.scheme) == 1:
            return cls(uri=uri, scheme=FILE_SCHEME, authority="", path=uri)

        return cls(
            uri=uri,
            scheme=parts.scheme.lower(),
            authority=parts.netloc,
            path=unquote(parts.path),
        )

    @property
    def path_segments(self) -> list[str]:
        return [segment for segment in self.path.split("/") if segment]

    @property
    def last_path_segment(self) -> str | None:
        segments = self.path_segments
        return segments[-1] if segments else None

    @property
    def is_file(self) -> bool:
        return self.scheme == FILE_SCHEME

    @property
    def is_content(self) -> bool:
        return self.scheme == CONTENT_SCHEME

    @property
    def is_document(self) -> bool:
        """Document-provider references carry a composite ``type:id`` id."""
        return self.is_content and "documents" in self.authority

    @property
    def file_path(self) -> str | None:
        """Filesystem path for ``file`` references, otherwise None."""
        if not self.is_file or not self.path:
            return None
        return self.path

    def document_id(self) -> tuple[str, str] | None:
        """
        Decode the composite document identifier.

        Returns:
            (type, id) tuple such as ("image", "42"), or None when the last
            path segment is not of the form ``type:id``
        """
        segment = self.last_path_segment
        if not segment:
            return None

        parts = segment.split(":")
        if len(parts) < 2 or not parts[0] or not parts[1]:
            return None

        return parts[0], parts[1]

    def __str__(self) -> str:
        return self.uri
