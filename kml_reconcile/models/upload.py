"""Data model for an uploaded annotation file.

An ``UploadedAnnotation`` exists only for the duration of one request:
it is built from the multipart form at the ingress boundary and handed
to the archive normaliser. It is never persisted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class FileKind(enum.StrEnum):
    """Container format of an uploaded annotation file."""

    KML = "KML"
    KMZ = "KMZ"


@dataclass(frozen=True, slots=True)
class UploadedAnnotation:
    """Raw uploaded file.

    Attributes:
        filename: Filename declared by the client (e.g. ``"wards.kmz"``).
        content: Raw file bytes.
    """

    filename: str
    content: bytes

    @property
    def size_bytes(self) -> int:
        """Size of the uploaded payload in bytes."""
        return len(self.content)
