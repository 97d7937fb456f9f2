"""Delete-by-annotation-file pipeline.

Coordinates the stages in a fixed, linear order:

    normalize_upload → extract_area_names → find_matching_maps
        → delete_maps → ReconciliationReport

The select and the delete share one transaction (``engine.begin()``).
That narrows, but does not close, the window in which a concurrent
request can remove or insert matching rows; in that case the deleted
count may differ from the number of matched records and a warning is
logged. Every failure is terminal for the request; nothing is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from sqlalchemy import MetaData

from kml_reconcile.activities.delete_maps import delete_maps
from kml_reconcile.activities.extract_area_names import extract_area_names
from kml_reconcile.activities.match_catalog import find_matching_maps
from kml_reconcile.activities.normalize_upload import detect_file_kind, normalize_upload
from kml_reconcile.core.access import require_delete_access
from kml_reconcile.core.constants import (
    MSG_DELETE_FAILED,
    MSG_NO_MATCHES,
    deleted_message,
    no_area_names_message,
)
from kml_reconcile.core.exceptions import NoAreaNamesError, ReconcileError
from kml_reconcile.models.catalog import gis_maps_table
from kml_reconcile.models.report import MatchedMap, ReconciliationReport

if TYPE_CHECKING:
    from sqlalchemy import Engine, Table

    from kml_reconcile.core.access import AccessChecker
    from kml_reconcile.core.config import ReconcileConfig
    from kml_reconcile.models.upload import UploadedAnnotation

logger = logging.getLogger("kml_reconcile.orchestrators.reconcile")


def catalog_table(config: ReconcileConfig) -> Table:
    """Build the GIS map table object described by *config*."""
    return gis_maps_table(MetaData(), config.gis_maps_table, config.gis_maps_schema or None)


def reconcile_upload(
    upload: UploadedAnnotation,
    engine: Engine,
    *,
    config: ReconcileConfig,
    table: Table | None = None,
) -> ReconciliationReport:
    """Delete the catalog records named by an uploaded KML/KMZ file.

    Args:
        upload: The uploaded annotation file.
        engine: Engine bound to the map catalog.
        config: Service configuration (table names, parameter ceiling).
        table: Catalog table override; built from *config* when omitted.

    Returns:
        A ``ReconciliationReport`` with the candidate set, the matched
        records (pre-deletion snapshot) and the deleted count.

    Raises:
        UnsupportedFormatError, MalformedArchiveError,
        NoMarkupEntryFoundError: The upload cannot be normalised.
        NoAreaNamesError: No area names could be extracted. No query
            is issued in this case.
        StoreFailureError: The catalog select or delete failed; the
            transaction is rolled back.
    """
    file_kind = detect_file_kind(upload.filename)
    markup = normalize_upload(upload, max_entry_bytes=config.max_upload_bytes)

    candidates = extract_area_names(markup)
    if not candidates:
        raise NoAreaNamesError(no_area_names_message(file_kind.value))

    catalog = table if table is not None else catalog_table(config)

    with engine.begin() as conn:
        matches = find_matching_maps(
            conn,
            candidates,
            table=catalog,
            max_params=config.max_bind_parameters,
        )
        deleted_count = delete_maps(
            conn,
            [record.map_id for record in matches],
            table=catalog,
            max_params=config.max_bind_parameters,
        )

    if deleted_count != len(matches):
        logger.warning(
            "Deleted count differs from matched records | file=%s | matched=%d | deleted=%d",
            upload.filename,
            len(matches),
            deleted_count,
        )

    report = ReconciliationReport(
        message=deleted_message(deleted_count) if matches else MSG_NO_MATCHES,
        deleted_count=deleted_count,
        file_type=file_kind,
        area_names=sorted(candidates),
        matching_maps=[MatchedMap.from_record(record) for record in matches],
    )

    logger.info(
        "reconcile completed | file=%s | type=%s | candidates=%d | matched=%d | deleted=%d",
        upload.filename,
        file_kind.value,
        len(candidates),
        len(matches),
        deleted_count,
    )
    return report


def handle_delete_request(
    read_upload: Callable[[], UploadedAnnotation],
    user_id: str,
    *,
    engine: Engine,
    config: ReconcileConfig,
    checker: AccessChecker,
    table: Table | None = None,
) -> tuple[int, dict[str, object]]:
    """Run the full request flow and map the outcome to ``(status, body)``.

    The access check runs before the upload is read. Domain failures
    become ``{"success": false, "message": ...}`` with the error's HTTP
    status; anything unexpected becomes a 500 carrying an opaque
    diagnostic string.
    """
    try:
        require_delete_access(checker, user_id)
        upload = read_upload()
        report = reconcile_upload(upload, engine, config=config, table=table)
    except ReconcileError as exc:
        if exc.status_code >= 500:
            logger.error("Delete-by-KML failed | %s", exc.to_error_dict())
            return exc.status_code, {
                "success": False,
                "message": MSG_DELETE_FAILED,
                "error": exc.message,
            }
        logger.info("Delete-by-KML rejected | %s", exc.to_error_dict())
        return exc.status_code, {"success": False, "message": exc.message}
    except Exception as exc:
        logger.exception("Unexpected error deleting GIS maps by KML")
        return 500, {"success": False, "message": MSG_DELETE_FAILED, "error": str(exc)}

    return 200, report.to_response()
