"""Tests for the delete-by-annotation-file pipeline.

Covers the end-to-end scenarios:
- A: duplicate names collapse to one candidate
- B: KMZ without a KML entry
- C: only a long description → no area names, no query
- D: partial match deletes exactly the matched record
- E: no matches is a successful zero-deletion
plus the HTTP outcome mapping in ``handle_delete_request``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from kml_reconcile.core.access import AccessDecision
from kml_reconcile.core.exceptions import (
    MissingUploadError,
    NoAreaNamesError,
    NoMarkupEntryFoundError,
)
from kml_reconcile.models.upload import FileKind, UploadedAnnotation
from kml_reconcile.orchestrators.reconcile import handle_delete_request, reconcile_upload
from tests.conftest import build_kml, build_kmz, placemark, remaining_map_ids, seed_maps

if TYPE_CHECKING:
    from sqlalchemy import Engine, Table

    from kml_reconcile.core.config import ReconcileConfig


def _kml(*names: str) -> UploadedAnnotation:
    return UploadedAnnotation("wards.kml", build_kml(*[placemark(n) for n in names]).encode())


class _Checker:
    def __init__(self, decision: AccessDecision) -> None:
        self.decision = decision
        self.calls: list[str] = []

    def check_delete_access(self, user_id: str) -> AccessDecision:
        self.calls.append(user_id)
        return self.decision


ALLOW = AccessDecision(True)


# ---------------------------------------------------------------------------
# reconcile_upload
# ---------------------------------------------------------------------------


class TestReconcileUpload:
    def test_scenario_a_duplicate_names(
        self, engine: Engine, maps_table: Table, config: ReconcileConfig
    ) -> None:
        report = reconcile_upload(_kml("Ward 7", "Ward 7"), engine, config=config, table=maps_table)
        assert report.area_names == ["Ward 7"]

    def test_scenario_b_kmz_without_kml(
        self, engine: Engine, maps_table: Table, config: ReconcileConfig
    ) -> None:
        upload = UploadedAnnotation("wards.kmz", build_kmz({"icon.png": b"png"}))
        with pytest.raises(NoMarkupEntryFoundError, match="No KML file found inside the KMZ"):
            reconcile_upload(upload, engine, config=config, table=maps_table)

    def test_scenario_c_long_description_only(self, maps_table: Table, config: ReconcileConfig) -> None:
        markup = build_kml(f"<Placemark><description>{'z' * 150}</description></Placemark>")
        engine = MagicMock()
        with pytest.raises(NoAreaNamesError, match="No area names found in KML file"):
            reconcile_upload(
                UploadedAnnotation("long.kml", markup.encode()),
                engine,
                config=config,
                table=maps_table,
            )
        engine.begin.assert_not_called()

    def test_scenario_d_partial_match(
        self, engine: Engine, maps_table: Table, config: ReconcileConfig
    ) -> None:
        seed_maps(engine, maps_table, [(1, "Ward 7"), (2, "Ward 8")])
        report = reconcile_upload(_kml("Ward 7", "Ward 9"), engine, config=config, table=maps_table)

        assert report.success is True
        assert report.deleted_count == 1
        assert [m.map_id for m in report.matching_maps] == [1]
        assert report.area_names == ["Ward 7", "Ward 9"]
        assert report.message == "Successfully deleted 1 GIS map(s)"
        assert remaining_map_ids(engine, maps_table) == {2}

    def test_scenario_e_no_matches(
        self, engine: Engine, maps_table: Table, config: ReconcileConfig
    ) -> None:
        seed_maps(engine, maps_table, [(1, "Ward 1")])
        report = reconcile_upload(_kml("Ward 7"), engine, config=config, table=maps_table)

        assert report.success is True
        assert report.deleted_count == 0
        assert report.matching_maps == []
        assert report.message == "No matching GIS maps found to delete"
        assert remaining_map_ids(engine, maps_table) == {1}

    def test_shared_area_name_both_deleted(
        self, engine: Engine, maps_table: Table, config: ReconcileConfig
    ) -> None:
        seed_maps(engine, maps_table, [(1, "Ward 7"), (2, "Ward 7"), (3, "ward 7")])
        report = reconcile_upload(_kml("Ward 7"), engine, config=config, table=maps_table)

        assert report.deleted_count == 2
        assert report.is_consistent
        assert remaining_map_ids(engine, maps_table) == {3}

    def test_entity_text_matched_literally(
        self, engine: Engine, maps_table: Table, config: ReconcileConfig
    ) -> None:
        seed_maps(engine, maps_table, [(1, "Hill &amp; Vale"), (2, "Hill & Vale")])
        report = reconcile_upload(_kml("Hill &amp; Vale"), engine, config=config, table=maps_table)

        assert report.area_names == ["Hill &amp; Vale"]
        assert report.deleted_count == 1
        assert remaining_map_ids(engine, maps_table) == {2}

    def test_kmz_upload_reports_kmz(
        self, engine: Engine, maps_table: Table, config: ReconcileConfig
    ) -> None:
        seed_maps(engine, maps_table, [(4, "Sector B")])
        markup = build_kml(placemark("Sector B"), namespaced=True).encode()
        upload = UploadedAnnotation("sectors.KMZ", build_kmz({"doc.kml": markup}))

        report = reconcile_upload(upload, engine, config=config, table=maps_table)

        assert report.file_type is FileKind.KMZ
        assert report.deleted_count == 1

    def test_kmz_no_area_names_message(self, maps_table: Table, config: ReconcileConfig) -> None:
        upload = UploadedAnnotation("empty.kmz", build_kmz({"doc.kml": b"<kml></kml>"}))
        with pytest.raises(NoAreaNamesError, match="No area names found in KMZ file"):
            reconcile_upload(upload, MagicMock(), config=config, table=maps_table)

    def test_small_parameter_ceiling(self, engine: Engine, maps_table: Table) -> None:
        from kml_reconcile.core.config import ReconcileConfig

        seed_maps(engine, maps_table, [(i, f"Ward {i}") for i in range(1, 41)])
        names = [f"Ward {i}" for i in range(1, 41)] + [f"Ghost {i}" for i in range(20)]
        report = reconcile_upload(
            _kml(*names),
            engine,
            config=ReconcileConfig(database_url="sqlite://", max_bind_parameters=3),
            table=maps_table,
        )
        assert report.deleted_count == 40
        assert len(report.matching_maps) == 40
        assert remaining_map_ids(engine, maps_table) == set()

    def test_response_shape(
        self, engine: Engine, maps_table: Table, config: ReconcileConfig
    ) -> None:
        seed_maps(engine, maps_table, [(1, "Ward 7")])
        body = reconcile_upload(_kml("Ward 7"), engine, config=config, table=maps_table).to_response()

        assert body == {
            "success": True,
            "message": "Successfully deleted 1 GIS map(s)",
            "deletedCount": 1,
            "fileType": "KML",
            "areaNamesFromKML": ["Ward 7"],
            "matchingMaps": [
                {"MapID": 1, "AreaName": "Ward 7", "MapType": "Ward", "FileName": "map_1.pdf"}
            ],
        }


# ---------------------------------------------------------------------------
# handle_delete_request
# ---------------------------------------------------------------------------


class TestHandleDeleteRequest:
    def test_success_200(self, engine: Engine, maps_table: Table, config: ReconcileConfig) -> None:
        seed_maps(engine, maps_table, [(1, "Ward 7")])
        status, body = handle_delete_request(
            lambda: _kml("Ward 7"),
            "admin",
            engine=engine,
            config=config,
            checker=_Checker(ALLOW),
            table=maps_table,
        )
        assert status == 200
        assert body["deletedCount"] == 1

    def test_denied_403_before_upload_read(self, engine: Engine, config: ReconcileConfig) -> None:
        read_upload = MagicMock()
        status, body = handle_delete_request(
            read_upload,
            "viewer",
            engine=engine,
            config=config,
            checker=_Checker(AccessDecision(False, "Access denied. Delete permission required.")),
        )
        assert status == 403
        assert body == {"success": False, "message": "Access denied. Delete permission required."}
        read_upload.assert_not_called()

    def test_denied_without_reason_uses_default(self, engine: Engine, config: ReconcileConfig) -> None:
        status, body = handle_delete_request(
            MagicMock(),
            "",
            engine=engine,
            config=config,
            checker=_Checker(AccessDecision(False)),
        )
        assert status == 403
        assert body["message"] == "Access denied. Delete permission required."

    def test_missing_file_400(self, engine: Engine, config: ReconcileConfig) -> None:
        def read_upload() -> UploadedAnnotation:
            raise MissingUploadError("KML file is required")

        status, body = handle_delete_request(
            read_upload, "admin", engine=engine, config=config, checker=_Checker(ALLOW)
        )
        assert status == 400
        assert body == {"success": False, "message": "KML file is required"}

    def test_unsupported_extension_400(self, engine: Engine, config: ReconcileConfig) -> None:
        status, body = handle_delete_request(
            lambda: UploadedAnnotation("wards.shp", b""),
            "admin",
            engine=engine,
            config=config,
            checker=_Checker(ALLOW),
        )
        assert status == 400
        assert body["message"] == "File must be a KML or KMZ file (.kml or .kmz extension)"

    def test_no_area_names_400(self, engine: Engine, config: ReconcileConfig) -> None:
        status, body = handle_delete_request(
            lambda: UploadedAnnotation("empty.kml", b"<kml/>"),
            "admin",
            engine=engine,
            config=config,
            checker=_Checker(ALLOW),
        )
        assert status == 400
        assert body["success"] is False
        assert str(body["message"]).startswith("No area names found")

    def test_store_failure_500(self, maps_table: Table, config: ReconcileConfig) -> None:
        engine = MagicMock()
        conn = engine.begin.return_value.__enter__.return_value
        conn.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        status, body = handle_delete_request(
            lambda: _kml("Ward 7"),
            "admin",
            engine=engine,
            config=config,
            checker=_Checker(ALLOW),
            table=maps_table,
        )
        assert status == 500
        assert body["success"] is False
        assert body["message"] == "Failed to delete GIS maps"
        assert "db down" in str(body["error"])

    def test_unexpected_error_500(self, engine: Engine, config: ReconcileConfig) -> None:
        def read_upload() -> UploadedAnnotation:
            raise RuntimeError("boom")

        status, body = handle_delete_request(
            read_upload, "admin", engine=engine, config=config, checker=_Checker(ALLOW)
        )
        assert status == 500
        assert body == {"success": False, "message": "Failed to delete GIS maps", "error": "boom"}
