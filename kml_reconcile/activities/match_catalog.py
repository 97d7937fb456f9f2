"""Catalog matcher — find map records whose area name is a candidate.

Equality is exact (case- and whitespace-sensitive) and delegated to the
database through ``AreaName IN (...)``. Candidate sets of any size are
supported: values are split into bounded batches so no statement exceeds
the store's bind-parameter ceiling, and every batch runs on the caller's
connection (and therefore the caller's transaction).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from kml_reconcile.core.constants import DEFAULT_MAX_BIND_PARAMETERS
from kml_reconcile.core.exceptions import StoreFailureError
from kml_reconcile.models.catalog import MapRecord
from kml_reconcile.utils.batching import bounded_batches

if TYPE_CHECKING:
    from sqlalchemy import Connection, Table

logger = logging.getLogger("kml_reconcile.activities.match_catalog")


def find_matching_maps(
    connection: Connection,
    candidates: Iterable[str],
    *,
    table: Table,
    max_params: int = DEFAULT_MAX_BIND_PARAMETERS,
) -> list[MapRecord]:
    """Select every catalog record whose ``AreaName`` equals a candidate.

    Args:
        connection: Open connection (inside the request's transaction).
        candidates: Non-empty candidate set of area names.
        table: The GIS map catalog table.
        max_params: Bind-parameter ceiling per statement.

    Returns:
        Matched records ordered by ``MapID``. Records sharing an area
        name are all included; ``MapID`` is unique across the list.

    Raises:
        ValueError: If *candidates* is empty.
        StoreFailureError: If the catalog query fails.
    """
    names = sorted(set(candidates))
    if not names:
        msg = "find_matching_maps requires at least one candidate area name"
        raise ValueError(msg)

    matched: dict[int, MapRecord] = {}
    try:
        for batch in bounded_batches(names, max_params):
            stmt = select(
                table.c.MapID,
                table.c.AreaName,
                table.c.MapType,
                table.c.FileName,
            ).where(table.c.AreaName.in_(batch))
            for row in connection.execute(stmt):
                record = MapRecord.from_row(row)
                matched[record.map_id] = record
    except SQLAlchemyError as exc:
        msg = f"Catalog query failed: {exc}"
        raise StoreFailureError(msg, stage="match_catalog") from exc

    logger.info(
        "Catalog match completed | candidates=%d | matched=%d",
        len(names),
        len(matched),
    )
    return [matched[map_id] for map_id in sorted(matched)]
