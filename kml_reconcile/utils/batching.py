"""Bounded batch helper for variable-arity ``IN (...)`` statements.

Catalog stores cap the number of bind parameters a single statement may
carry (SQL Server: 2100, older SQLite builds: 999). Callers split their
values with ``bounded_batches`` and issue one statement per batch on the
same connection, so the surrounding transaction keeps the whole
operation all-or-nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TypeVar

T = TypeVar("T")


def bounded_batches(values: Iterable[T], max_size: int) -> Iterator[list[T]]:
    """Yield consecutive chunks of *values* holding at most *max_size* items.

    An empty input yields nothing.

    Raises:
        ValueError: If *max_size* is less than 1.
    """
    if max_size < 1:
        msg = f"max_size must be >= 1, got {max_size}"
        raise ValueError(msg)

    batch: list[T] = []
    for value in values:
        batch.append(value)
        if len(batch) == max_size:
            yield batch
            batch = []
    if batch:
        yield batch
