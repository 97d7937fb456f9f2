"""Thin ingress boundary helpers for the Azure Functions entrypoint.

Centralises the transport concerns so that ``function_app.py`` contains
only trigger bindings and handoff:

- **get_user_id** — reads the calling user's identifier from the request.
- **read_upload** — pulls the uploaded annotation file out of the
  multipart form and enforces the size ceiling.
- **get_catalog_engine** — builds (once per process) the SQLAlchemy
  engine for the map catalog.
- **json_response** — serialises a payload into an ``HttpResponse``.
"""

from __future__ import annotations

import functools
import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine

from kml_reconcile.core.constants import (
    MSG_FILE_REQUIRED,
    MSG_UPLOAD_TOO_LARGE,
    UPLOAD_FIELD_NAME,
    USER_ID_HEADER,
)
from kml_reconcile.core.exceptions import (
    ContractError,
    MissingUploadError,
    UploadTooLargeError,
)
from kml_reconcile.models.upload import UploadedAnnotation

if TYPE_CHECKING:
    import azure.functions as func
    from sqlalchemy import Engine

logger = logging.getLogger("kml_reconcile.core.ingress")


def get_user_id(req: func.HttpRequest) -> str:
    """Return the calling user's identifier, or ``""`` when absent."""
    return (req.headers.get(USER_ID_HEADER) or "").strip()


def read_upload(
    req: func.HttpRequest,
    *,
    max_bytes: int,
    field_name: str = UPLOAD_FIELD_NAME,
) -> UploadedAnnotation:
    """Extract the uploaded annotation file from a multipart request.

    Raises:
        MissingUploadError: If no file was sent under *field_name*.
        UploadTooLargeError: If the file exceeds *max_bytes*.
        ContractError: If the request body is not a readable form.
    """
    try:
        files = req.files
    except ValueError as exc:
        msg = f"Request body is not a multipart form: {exc}"
        raise ContractError(msg, stage="ingress", code="INVALID_FORM") from exc

    upload = files.get(field_name) if files else None
    if upload is None or not upload.filename:
        raise MissingUploadError(MSG_FILE_REQUIRED)

    content = upload.read()
    if len(content) > max_bytes:
        raise UploadTooLargeError(f"{MSG_UPLOAD_TOO_LARGE} ({max_bytes} bytes)")

    logger.debug(
        "Read upload | field=%s | file=%s | bytes=%d",
        field_name,
        upload.filename,
        len(content),
    )
    return UploadedAnnotation(filename=upload.filename, content=content)


@functools.cache
def get_catalog_engine(database_url: str) -> Engine:
    """Create the catalog engine for *database_url* (cached per process)."""
    return create_engine(database_url, pool_pre_ping=True)


def json_response(payload: dict[str, Any], *, status_code: int = 200) -> func.HttpResponse:
    """Serialise *payload* into a JSON ``HttpResponse``."""
    import azure.functions as func

    return func.HttpResponse(
        json.dumps(payload),
        status_code=status_code,
        mimetype="application/json",
    )
