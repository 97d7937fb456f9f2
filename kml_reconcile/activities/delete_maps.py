"""Deletion executor — remove matched catalog records by ``MapID``.

Deletes target the identifiers captured by the matcher, never a fresh
``AreaName`` lookup, so a row that gains a matching area name between
select and delete is left alone. Batches run on the caller's connection,
so the caller's transaction makes the whole deletion all-or-nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from kml_reconcile.core.constants import DEFAULT_MAX_BIND_PARAMETERS
from kml_reconcile.core.exceptions import StoreFailureError
from kml_reconcile.utils.batching import bounded_batches

if TYPE_CHECKING:
    from sqlalchemy import Connection, Table

logger = logging.getLogger("kml_reconcile.activities.delete_maps")


def delete_maps(
    connection: Connection,
    map_ids: Sequence[int],
    *,
    table: Table,
    max_params: int = DEFAULT_MAX_BIND_PARAMETERS,
) -> int:
    """Delete every catalog record whose ``MapID`` is in *map_ids*.

    An empty *map_ids* is a no-op and issues no statement.

    Returns:
        Number of rows actually removed.

    Raises:
        StoreFailureError: If a delete statement fails.
    """
    unique_ids = sorted(set(map_ids))
    if not unique_ids:
        return 0

    deleted = 0
    try:
        for batch in bounded_batches(unique_ids, max_params):
            result = connection.execute(delete(table).where(table.c.MapID.in_(batch)))
            deleted += max(result.rowcount, 0)
    except SQLAlchemyError as exc:
        msg = f"Catalog delete failed: {exc}"
        raise StoreFailureError(msg, stage="delete_maps") from exc

    logger.info(
        "Catalog delete completed | requested=%d | deleted=%d",
        len(unique_ids),
        deleted,
    )
    return deleted
