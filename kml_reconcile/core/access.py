"""Delete-permission check.

The records-management application decides who may delete catalog
records. This module models that collaborator as an ``AccessChecker``
returning an ``AccessDecision`` (allowed flag plus a human-readable
reason) and ships the default implementation backed by the shared
``tbl_user_access`` table, where only the exact ``access_level`` value
``"Admin"`` grants delete.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from kml_reconcile.core.constants import DELETE_ACCESS_LEVEL, MSG_ACCESS_DENIED
from kml_reconcile.core.exceptions import StoreFailureError, UnauthorizedError

if TYPE_CHECKING:
    from sqlalchemy import Engine, Table

logger = logging.getLogger("kml_reconcile.core.access")


@dataclass(frozen=True, slots=True)
class AccessDecision:
    """Outcome of a permission check."""

    has_access: bool
    message: str = ""


class AccessChecker(Protocol):
    """Anything that can decide whether a user may delete catalog records."""

    def check_delete_access(self, user_id: str) -> AccessDecision: ...


class UserAccessTableChecker:
    """Grant delete to users whose ``access_level`` is exactly ``"Admin"``.

    The user identifier is matched against both ``username`` and
    ``email``.
    """

    def __init__(self, engine: Engine, table: Table) -> None:
        self._engine = engine
        self._table = table

    def check_delete_access(self, user_id: str) -> AccessDecision:
        if not user_id:
            return AccessDecision(False, "User ID is required")

        stmt = select(self._table.c.access_level).where(
            or_(self._table.c.username == user_id, self._table.c.email == user_id)
        )
        try:
            with self._engine.connect() as conn:
                access_level = conn.execute(stmt).scalar()
        except SQLAlchemyError as exc:
            msg = f"Access check failed: {exc}"
            raise StoreFailureError(msg, stage="access") from exc

        if access_level is None:
            return AccessDecision(False, "User not found")
        if access_level != DELETE_ACCESS_LEVEL:
            return AccessDecision(False, MSG_ACCESS_DENIED)
        return AccessDecision(True)


def require_delete_access(checker: AccessChecker, user_id: str) -> None:
    """Raise ``UnauthorizedError`` unless *user_id* may delete.

    Raises:
        UnauthorizedError: Carrying the checker's denial reason.
    """
    decision = checker.check_delete_access(user_id)
    if not decision.has_access:
        logger.warning("Delete access denied | user=%s | reason=%s", user_id, decision.message)
        raise UnauthorizedError(decision.message or MSG_ACCESS_DENIED)
