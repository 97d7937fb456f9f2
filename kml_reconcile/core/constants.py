"""Shared reconciliation constants — single source of truth.

Centralises file extensions, the upload form field, table names, and the
human-readable response messages returned to callers.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Upload handling
# ---------------------------------------------------------------------------

KML_EXTENSION: str = ".kml"
"""Extension of a plain annotation (markup) file."""

KMZ_EXTENSION: str = ".kmz"
"""Extension of a compressed annotation container (ZIP)."""

UPLOAD_FIELD_NAME: str = "kmlFile"
"""Multipart form field that carries the uploaded file."""

USER_ID_HEADER: str = "x-user-id"
"""Request header identifying the calling user for the access check."""

DEFAULT_MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

# ---------------------------------------------------------------------------
# Area-name extraction
# ---------------------------------------------------------------------------

DESCRIPTION_MAX_LENGTH: int = 100
"""Descriptions shorter than this (and free of markup) count as area names."""

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

DEFAULT_DATABASE_URL: str = "sqlite:///gis_catalog.db"
DEFAULT_GIS_MAPS_TABLE: str = "TABLE_GIS_MAPS"
DEFAULT_USER_ACCESS_TABLE: str = "tbl_user_access"

DEFAULT_MAX_BIND_PARAMETERS: int = 2000
"""Per-statement bind-parameter ceiling (SQL Server allows 2100)."""

DELETE_ACCESS_LEVEL: str = "Admin"
"""``access_level`` value that grants delete permission (case-sensitive)."""

# ---------------------------------------------------------------------------
# Response messages
# ---------------------------------------------------------------------------

MSG_ACCESS_DENIED = "Access denied. Delete permission required."
MSG_FILE_REQUIRED = "KML file is required"
MSG_UNSUPPORTED_FORMAT = "File must be a KML or KMZ file (.kml or .kmz extension)"
MSG_NO_KML_IN_KMZ = "No KML file found inside the KMZ archive"
MSG_MALFORMED_KMZ = "KMZ file is not a valid ZIP archive"
MSG_UPLOAD_TOO_LARGE = "File exceeds maximum upload size"
MSG_NO_MATCHES = "No matching GIS maps found to delete"
MSG_DELETE_FAILED = "Failed to delete GIS maps"


def no_area_names_message(file_type: str) -> str:
    """Return the validation message for an upload with no area names."""
    return (
        f"No area names found in {file_type} file. "
        f"Please ensure the {file_type} file contains placemarks with names."
    )


def deleted_message(deleted_count: int) -> str:
    """Return the success message for a completed deletion."""
    return f"Successfully deleted {deleted_count} GIS map(s)"
