"""Pydantic model for the reconciliation report.

The report is the JSON body returned by delete-by-annotation-file. It
summarises what was found in the upload, what matched in the catalog
(snapshot taken before deletion), and how many rows were removed.

Field aliases match the wire names clients already consume
(``deletedCount``, ``areaNamesFromKML``, ``matchingMaps`` ...).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from kml_reconcile.models.upload import FileKind

if TYPE_CHECKING:
    from kml_reconcile.models.catalog import MapRecord


class MatchedMap(BaseModel):
    """One catalog record matched by area name."""

    model_config = ConfigDict(populate_by_name=True)

    map_id: int = Field(alias="MapID")
    area_name: str = Field(alias="AreaName")
    map_type: str | None = Field(default=None, alias="MapType")
    file_name: str | None = Field(default=None, alias="FileName")

    @classmethod
    def from_record(cls, record: MapRecord) -> MatchedMap:
        return cls(
            map_id=record.map_id,
            area_name=record.area_name,
            map_type=record.map_type,
            file_name=record.file_name,
        )


class ReconciliationReport(BaseModel):
    """Successful delete-by-annotation-file response.

    Attributes:
        success: Always ``True`` for a completed pipeline.
        message: Human-readable outcome.
        deleted_count: Rows actually removed from the catalog.
        file_type: ``"KML"`` or ``"KMZ"``.
        area_names: Full candidate set, sorted for stable output.
        matching_maps: Matched records captured before deletion.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = ""
    deleted_count: int = Field(default=0, alias="deletedCount")
    file_type: FileKind = Field(alias="fileType")
    area_names: list[str] = Field(default_factory=list, alias="areaNamesFromKML")
    matching_maps: list[MatchedMap] = Field(default_factory=list, alias="matchingMaps")

    @property
    def is_consistent(self) -> bool:
        """Whether every matched record was reported as deleted."""
        return self.deleted_count == len(self.matching_maps)

    def to_response(self) -> dict[str, object]:
        """Serialise to the JSON wire shape (aliased keys)."""
        return self.model_dump(mode="json", by_alias=True)
