"""Archive normaliser — turn a KML or KMZ upload into one markup string.

A KML upload is decoded and returned verbatim. A KMZ upload is a ZIP
archive; the first entry whose name ends in ``.kml`` (archive order,
case-insensitive) is decoded and returned. Auxiliary assets inside the
archive (icons, overlays) are ignored.

Decoding is lenient: a leading UTF-8 byte-order mark is dropped and
undecodable bytes are replaced, because the extractor downstream scans
text and does not need well-formed input.
"""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from typing import TYPE_CHECKING

from kml_reconcile.core.constants import (
    KML_EXTENSION,
    KMZ_EXTENSION,
    MSG_MALFORMED_KMZ,
    MSG_NO_KML_IN_KMZ,
    MSG_UNSUPPORTED_FORMAT,
    MSG_UPLOAD_TOO_LARGE,
)
from kml_reconcile.core.exceptions import (
    MalformedArchiveError,
    NoMarkupEntryFoundError,
    UnsupportedFormatError,
    UploadTooLargeError,
)
from kml_reconcile.models.upload import FileKind

if TYPE_CHECKING:
    from kml_reconcile.models.upload import UploadedAnnotation

logger = logging.getLogger("kml_reconcile.activities.normalize_upload")


def detect_file_kind(filename: str) -> FileKind:
    """Classify *filename* by its final extension (case-insensitive).

    Raises:
        UnsupportedFormatError: If the name ends in neither ``.kml`` nor ``.kmz``.
    """
    lowered = filename.strip().lower()
    if lowered.endswith(KML_EXTENSION):
        return FileKind.KML
    if lowered.endswith(KMZ_EXTENSION):
        return FileKind.KMZ
    raise UnsupportedFormatError(MSG_UNSUPPORTED_FORMAT)


def decode_markup(content: bytes) -> str:
    """Decode markup bytes as UTF-8, dropping a BOM and replacing bad bytes."""
    return content.decode("utf-8-sig", errors="replace")


def extract_kml_from_kmz(content: bytes, *, max_entry_bytes: int | None = None) -> tuple[str, str]:
    """Return ``(entry_name, markup)`` for the first ``.kml`` entry of a KMZ.

    Args:
        content: Raw KMZ bytes.
        max_entry_bytes: Largest accepted uncompressed size of the KML
            entry. ``None`` disables the check.

    Raises:
        MalformedArchiveError: If *content* is not a readable ZIP archive
            or the entry data is corrupt.
        NoMarkupEntryFoundError: If no entry name ends in ``.kml``.
        UploadTooLargeError: If the KML entry expands beyond *max_entry_bytes*.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            for info in archive.infolist():
                if info.is_dir() or not info.filename.lower().endswith(KML_EXTENSION):
                    continue
                if max_entry_bytes is not None and info.file_size > max_entry_bytes:
                    msg = f"{MSG_UPLOAD_TOO_LARGE} ({max_entry_bytes} bytes uncompressed)"
                    raise UploadTooLargeError(msg, stage="normalize_upload")
                return info.filename, decode_markup(archive.read(info))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as exc:
        raise MalformedArchiveError(MSG_MALFORMED_KMZ) from exc
    except (zlib.error, RuntimeError, NotImplementedError) as exc:
        # Corrupt deflate streams, encrypted entries, unsupported compression.
        raise MalformedArchiveError(f"{MSG_MALFORMED_KMZ}: {exc}") from exc

    raise NoMarkupEntryFoundError(MSG_NO_KML_IN_KMZ)


def normalize_upload(upload: UploadedAnnotation, *, max_entry_bytes: int | None = None) -> str:
    """Normalise an uploaded KML/KMZ file into a single markup payload.

    Args:
        upload: The uploaded file (declared filename plus raw bytes).
        max_entry_bytes: Uncompressed size ceiling for the KML entry of a
            KMZ upload. ``None`` disables the check.

    Returns:
        The annotation markup as text.

    Raises:
        UnsupportedFormatError: Filename is neither ``.kml`` nor ``.kmz``.
        MalformedArchiveError: A ``.kmz`` upload is not a valid ZIP archive.
        NoMarkupEntryFoundError: A ``.kmz`` archive contains no ``.kml`` entry.
        UploadTooLargeError: The KML entry of a ``.kmz`` expands beyond
            *max_entry_bytes*.
    """
    kind = detect_file_kind(upload.filename)

    if kind is FileKind.KML:
        logger.info(
            "Normalised KML upload | file=%s | bytes=%d",
            upload.filename,
            upload.size_bytes,
        )
        return decode_markup(upload.content)

    entry_name, markup = extract_kml_from_kmz(upload.content, max_entry_bytes=max_entry_bytes)
    logger.info(
        "Normalised KMZ upload | file=%s | entry=%s | bytes=%d",
        upload.filename,
        entry_name,
        upload.size_bytes,
    )
    return markup
