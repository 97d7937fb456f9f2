"""Map catalog schema and record model.

The catalog tables are owned by the wider records-management
application; this service only reads and deletes rows. Table objects
are built per configuration so the table name and schema can follow the
deployment (``[dbo].[TABLE_GIS_MAPS]`` in production, an unqualified
SQLite table in tests).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Column, Integer, MetaData, String, Table


@dataclass(frozen=True, slots=True)
class MapRecord:
    """A GIS map catalog row.

    Attributes:
        map_id: Unique, stable identifier (``MapID``).
        area_name: Area name the map covers (``AreaName``).
        map_type: Map category (``MapType``), ``None`` when NULL.
        file_name: Stored map file name (``FileName``), ``None`` when NULL.
    """

    map_id: int
    area_name: str
    map_type: str | None = None
    file_name: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> MapRecord:
        """Build a record from a SQLAlchemy result row."""
        mapping = row._mapping
        return cls(
            map_id=int(mapping["MapID"]),
            area_name=str(mapping["AreaName"]),
            map_type=mapping["MapType"],
            file_name=mapping["FileName"],
        )

    def to_dict(self) -> dict[str, object]:
        """Serialise using the catalog's column names."""
        return {
            "MapID": self.map_id,
            "AreaName": self.area_name,
            "MapType": self.map_type,
            "FileName": self.file_name,
        }


def gis_maps_table(
    metadata: MetaData, name: str = "TABLE_GIS_MAPS", schema: str | None = None
) -> Table:
    """Declare the GIS map catalog table on *metadata*."""
    return Table(
        name,
        metadata,
        Column("MapID", Integer, primary_key=True),
        Column("AreaName", String(255), nullable=False),
        Column("MapType", String(100)),
        Column("FileName", String(500)),
        schema=schema or None,
    )


def user_access_table(
    metadata: MetaData, name: str = "tbl_user_access", schema: str | None = None
) -> Table:
    """Declare the user access-level table on *metadata*."""
    return Table(
        name,
        metadata,
        Column("username", String(255), primary_key=True),
        Column("email", String(255)),
        Column("access_level", String(50)),
        schema=schema or None,
    )
