"""Shared pytest fixtures for the KML reconciliation test suite."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Iterator

import pytest
from sqlalchemy import Engine, MetaData, Table, create_engine, insert, select
from sqlalchemy.pool import StaticPool

from kml_reconcile.core.config import ReconcileConfig
from kml_reconcile.models.catalog import gis_maps_table, user_access_table

# ---------------------------------------------------------------------------
# Markup builders
# ---------------------------------------------------------------------------

KML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'


def build_kml(*placemarks: str, namespaced: bool = False) -> str:
    """Wrap placemark fragments in a KML document."""
    if namespaced:
        body = "".join(placemarks)
        return (
            f"{KML_HEADER}"
            '<kml:kml xmlns:kml="http://www.opengis.net/kml/2.2">'
            f"<kml:Document>{body}</kml:Document></kml:kml>"
        )
    return (
        f"{KML_HEADER}"
        '<kml xmlns="http://www.opengis.net/kml/2.2">'
        f"<Document>{''.join(placemarks)}</Document></kml>"
    )


def placemark(name: str) -> str:
    """Return a minimal Placemark fragment carrying *name*."""
    return f"<Placemark><name>{name}</name></Placemark>"


def build_kmz(entries: dict[str, bytes]) -> bytes:
    """Build a KMZ (ZIP) archive from ``{entry_name: content}``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for entry_name, content in entries.items():
            archive.writestr(entry_name, content)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> ReconcileConfig:
    """Default configuration pointed at an in-memory database."""
    return ReconcileConfig(database_url="sqlite://")


@pytest.fixture()
def metadata() -> MetaData:
    return MetaData()


@pytest.fixture()
def maps_table(metadata: MetaData) -> Table:
    return gis_maps_table(metadata)


@pytest.fixture()
def access_table(metadata: MetaData) -> Table:
    return user_access_table(metadata)


@pytest.fixture()
def engine(metadata: MetaData, maps_table: Table, access_table: Table) -> Iterator[Engine]:
    """In-memory SQLite engine with the catalog tables created."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(eng)
    yield eng
    eng.dispose()


def seed_maps(engine: Engine, table: Table, rows: list[tuple[int, str]]) -> None:
    """Insert ``(MapID, AreaName)`` rows into the catalog."""
    with engine.begin() as conn:
        conn.execute(
            insert(table),
            [
                {
                    "MapID": map_id,
                    "AreaName": area_name,
                    "MapType": "Ward",
                    "FileName": f"map_{map_id}.pdf",
                }
                for map_id, area_name in rows
            ],
        )


def remaining_map_ids(engine: Engine, table: Table) -> set[int]:
    """Return the ``MapID`` values still present in the catalog."""
    with engine.connect() as conn:
        return set(conn.execute(select(table.c.MapID)).scalars())
