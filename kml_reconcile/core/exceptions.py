"""Unified reconciliation exception taxonomy.

Provides a shared base exception hierarchy for every stage of the
delete-by-annotation-file pipeline. Every domain exception inherits from
``ReconcileError`` and carries structured context fields that map
consistently onto HTTP status codes, log records, and the JSON failure
payload returned to the caller.

Taxonomy categories
-------------------
- ``ValidationError``   — bad upload or unusable content, 400, never retryable.
- ``UnauthorizedError`` — the caller lacks delete permission, 403.
- ``PermanentError``    — unrecoverable failures (catalog errors), 500.
- ``ContractError``     — malformed request shape at the ingress boundary.

No stage retries internally, so there is no transient category class;
an error built with ``retryable=True`` is still reported as ``transient``.
Every exception exposes ``to_error_dict()`` for a stable structured
payload suitable for logging.
"""

from __future__ import annotations


class ReconcileError(Exception):
    """Base exception for all reconciliation-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"normalize_upload"``, ``"match_catalog"``).
        code: Machine-readable error code (e.g. ``"KMZ_NO_KML_ENTRY"``).
        retryable: Whether the operator may re-submit unchanged.
        correlation_id: Request correlation identifier.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""
    #: HTTP status surfaced at the function boundary.
    status_code: int = 500

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, UnauthorizedError):
            return "unauthorized"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(ReconcileError):
    """Upload or content validation failure. Never retryable."""

    status_code = 400

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class UnauthorizedError(ReconcileError):
    """The permission check denied the caller."""

    default_stage = "access"
    default_code = "DELETE_ACCESS_DENIED"
    status_code = 403

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(ReconcileError):
    """Unrecoverable failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(ReconcileError):
    """Request shape does not match the endpoint contract. Never retryable."""

    status_code = 400

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------


class MissingUploadError(ValidationError):
    """No file was supplied under the expected form field."""

    default_stage = "ingress"
    default_code = "UPLOAD_MISSING"


class UploadTooLargeError(ValidationError):
    """The uploaded file exceeds the configured size ceiling."""

    default_stage = "ingress"
    default_code = "UPLOAD_TOO_LARGE"


class UnsupportedFormatError(ValidationError):
    """The filename does not end in ``.kml`` or ``.kmz``."""

    default_stage = "normalize_upload"
    default_code = "UNSUPPORTED_FORMAT"


class MalformedArchiveError(ValidationError):
    """A ``.kmz`` upload could not be opened as a ZIP archive."""

    default_stage = "normalize_upload"
    default_code = "KMZ_MALFORMED"


class NoMarkupEntryFoundError(ValidationError):
    """A ``.kmz`` archive holds no ``.kml`` entry."""

    default_stage = "normalize_upload"
    default_code = "KMZ_NO_KML_ENTRY"


class NoAreaNamesError(ValidationError):
    """Extraction produced an empty candidate set."""

    default_stage = "extract_area_names"
    default_code = "NO_AREA_NAMES"


class StoreFailureError(PermanentError):
    """A query or delete against the map catalog failed."""

    default_stage = "catalog"
    default_code = "CATALOG_STORE_FAILED"
