"""Azure Functions entry point — KML/KMZ Map Catalog Reconciliation.

This module registers the HTTP functions using the Python v2 programming
model.

All business logic lives in the kml_reconcile package. This file is purely
the wiring layer between Azure Functions bindings and application code.
"""

from __future__ import annotations

import logging

import azure.functions as func
from sqlalchemy import MetaData, text
from sqlalchemy.exc import SQLAlchemyError

from kml_reconcile.core.access import UserAccessTableChecker
from kml_reconcile.core.config import ReconcileConfig
from kml_reconcile.core.constants import MSG_DELETE_FAILED
from kml_reconcile.core.exceptions import ReconcileError
from kml_reconcile.core.ingress import (
    get_catalog_engine,
    get_user_id,
    json_response,
    read_upload,
)
from kml_reconcile.models.catalog import user_access_table
from kml_reconcile.orchestrators.reconcile import handle_delete_request

app = func.FunctionApp()

logger = logging.getLogger("kml_reconcile.function_app")


# ---------------------------------------------------------------------------
# HTTP: Delete GIS maps named in an uploaded KML/KMZ file
# ---------------------------------------------------------------------------


@app.function_name("delete_maps_by_kml")
@app.route(route="gis-maps/delete-by-kml", methods=["POST"])
def delete_maps_by_kml(req: func.HttpRequest) -> func.HttpResponse:
    """Delete every GIS map whose area name appears in the uploaded file.

    Expects a multipart form with the file under ``kmlFile`` and the
    calling user in the ``x-user-id`` header. Responds with the
    reconciliation report on success, or ``{success: false, message}``
    with status 400 (bad upload), 403 (no delete permission) or 500.
    """
    try:
        config = ReconcileConfig.from_env()
        engine = get_catalog_engine(config.database_url)
        checker = UserAccessTableChecker(
            engine,
            user_access_table(MetaData(), config.user_access_table, config.gis_maps_schema or None),
        )
    except Exception as exc:
        logger.exception("delete_maps_by_kml setup failed")
        return json_response(
            {"success": False, "message": MSG_DELETE_FAILED, "error": str(exc)},
            status_code=500,
        )

    user_id = get_user_id(req)

    logger.info("delete_maps_by_kml started | user=%s", user_id)

    status_code, body = handle_delete_request(
        lambda: read_upload(req, max_bytes=config.max_upload_bytes),
        user_id,
        engine=engine,
        config=config,
        checker=checker,
    )

    logger.info(
        "delete_maps_by_kml completed | user=%s | status=%d | deleted=%s",
        user_id,
        status_code,
        body.get("deletedCount", 0),
    )
    return json_response(body, status_code=status_code)


# ---------------------------------------------------------------------------
# HTTP: Catalog health check
# ---------------------------------------------------------------------------


@app.function_name("gis_maps_health")
@app.route(route="gis-maps/health", methods=["GET"])
def gis_maps_health(req: func.HttpRequest) -> func.HttpResponse:  # noqa: ARG001
    """Report whether the map catalog database is reachable."""
    try:
        config = ReconcileConfig.from_env()
        with get_catalog_engine(config.database_url).connect() as conn:
            conn.execute(text("SELECT 1"))
    except (ReconcileError, SQLAlchemyError, ValueError, ImportError):
        logger.exception("Catalog health check failed")
        return json_response({"status": "unavailable"}, status_code=503)
    return json_response({"status": "ok"})
